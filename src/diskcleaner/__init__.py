"""diskcleaner - safe macOS home directory cleanup."""

__version__ = "0.1.0"
