"""
Color conversion utilities

Pure functions for the colour values the APA102 strip understands.
"""

from typing import Tuple


def hex_to_rgb(value: str) -> Tuple[int, int, int]:
    """
    Convert "#rrggbb" (or "rrggbb") to an (r, g, b) tuple

    Args:
        value: Hex colour string

    Returns:
        (r, g, b) tuple with values 0-255

    Raises:
        ValueError: If value is not a 6-digit hex colour

    Example:
        hex_to_rgb("#ee4035")  # (238, 64, 53)
    """
    digits = value.lstrip("#")
    if len(digits) != 6:
        raise ValueError(f"Invalid hex colour: {value!r}")
    try:
        raw = int(digits, 16)
    except ValueError:
        raise ValueError(f"Invalid hex colour: {value!r}")
    return (raw >> 16) & 0xFF, (raw >> 8) & 0xFF, raw & 0xFF


def clamp_channel(value: int) -> int:
    """Clamp a colour channel into 0-255."""
    return max(0, min(255, int(value)))
