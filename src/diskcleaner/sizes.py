"""Size parsing and formatting helpers."""

import re

from diskcleaner.exceptions import ConfigurationError

_UNITS = ["B", "KB", "MB", "GB", "TB", "PB"]

_SUFFIXES = {
    "": 1,
    "b": 1,
    "k": 1024,
    "m": 1024**2,
    "g": 1024**3,
    "t": 1024**4,
}

_SIZE_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([bkmgt]?)(?:i?b)?\s*$", re.IGNORECASE)


def parse_size(value: str | int) -> int:
    """
    Parse a size such as ``50M``, ``1.5G`` or ``4096`` into bytes.

    Suffixes are 1024-based (``k``, ``M``, ``G``, ``T``; ``KB``/``MiB`` forms
    are accepted too). A bare number is a byte count.

    Raises:
        ConfigurationError: If the value cannot be parsed.
    """
    if isinstance(value, int):
        if value < 0:
            raise ConfigurationError(f"Size must not be negative: {value}")
        return value

    match = _SIZE_RE.match(value)
    if not match:
        raise ConfigurationError(f"Invalid size: {value!r} (expected e.g. 50M, 1G, 4096)")

    number, suffix = match.groups()
    return int(float(number) * _SUFFIXES[suffix.lower()])


def humanize(size_bytes: int) -> str:
    """Format bytes as a human-readable string using 1024-based units."""
    value = float(size_bytes or 0)
    index = 0
    while value >= 1024 and index < len(_UNITS) - 1:
        value /= 1024
        index += 1

    if value >= 100:
        return f"{value:.0f} {_UNITS[index]}"
    elif value >= 10:
        return f"{value:.1f} {_UNITS[index]}"
    else:
        return f"{value:.2f} {_UNITS[index]}"
