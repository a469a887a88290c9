"""Exceptions raised by diskcleaner.

Per-path problems (out of scope, deny-listed, vanished, unreadable) are never
raised; they are reported per item. Exceptions are reserved for conditions
that make a whole call meaningless.
"""


class DiskCleanerError(Exception):
    """Base class for all diskcleaner errors."""


class ConfigurationError(DiskCleanerError):
    """Invalid configuration, category selection, or report input."""


class PlanError(ConfigurationError):
    """A cleanup plan could not be parsed. No item was processed."""


class ScanCancelled(DiskCleanerError):
    """A scan was cancelled by its caller before completion."""
