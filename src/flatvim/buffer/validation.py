"""Offset clamping helpers shared across buffer services.

Out-of-range offsets are never an error in the engine; they are pulled back
into the valid window instead.
"""

from __future__ import annotations


def max_offset(length: int, *, normal: bool) -> int:
    """Largest valid cursor offset for a buffer of ``length`` characters.

    Normal and Visual modes address an existing character; Insert mode may
    sit one past the end.
    """

    if normal:
        return max(0, length - 1)
    return max(0, length)


def clamp_offset(offset: int, length: int, *, normal: bool = False) -> int:
    return max(0, min(int(offset), max_offset(length, normal=normal)))


__all__ = ["clamp_offset", "max_offset"]
