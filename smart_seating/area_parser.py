"""
Preferred area parsing.

Students may name a rectangular region of the grid they would like to sit in,
written with 1-indexed coordinates:

    "r,c"           a single seat
    "r1,c1-r2,c2"   a rectangle spanned by two corners (in any order)

Anything that does not match these forms means "no constraint". Malformed
preference data must never abort a search, so the parser never raises.
"""

import logging
import re
from typing import NamedTuple, Optional, Tuple

from .data_models import SeatPosition

logger = logging.getLogger(__name__)

INT32_MIN = -2 ** 31
INT32_MAX = 2 ** 31 - 1

_INTEGER = re.compile(r"\s*[+-]?[0-9]+\s*")


class AreaBounds(NamedTuple):
    """Zero-indexed inclusive rectangle"""
    min_row: int
    min_col: int
    max_row: int
    max_col: int

    def contains(self, position: SeatPosition) -> bool:
        return (self.min_row <= position.row <= self.max_row
                and self.min_col <= position.col <= self.max_col)


def _split(text: str, separator: str) -> list:
    """Split dropping empty pieces"""
    return [part for part in text.split(separator) if part]


def _parse_int(text: str) -> Optional[int]:
    """Plain decimal integer within the 32-bit signed range, else None"""
    if not _INTEGER.fullmatch(text):
        return None
    value = int(text)
    if not INT32_MIN <= value <= INT32_MAX:
        return None
    return value


def _parse_corner(text: str) -> Optional[Tuple[int, int]]:
    coords = _split(text, ",")
    if len(coords) != 2:
        return None
    row, col = _parse_int(coords[0]), _parse_int(coords[1])
    if row is None or col is None:
        return None
    return row, col


def parse_preferred_area(area: Optional[str]) -> Optional[AreaBounds]:
    """
    Parse a preferred area string.

    Args:
        area: Area text, e.g. "2,3" or "1,1-3,3"

    Returns:
        AreaBounds in zero-indexed coordinates, or None when the text is
        empty or not understood
    """
    if area is None or not area.strip():
        return None

    parts = _split(area, "-")
    if len(parts) == 1:
        corner = _parse_corner(parts[0])
        if corner is not None:
            r, c = corner
            return AreaBounds(r - 1, c - 1, r - 1, c - 1)
    elif len(parts) == 2:
        start = _parse_corner(parts[0])
        end = _parse_corner(parts[1])
        if start is not None and end is not None:
            (r1, c1), (r2, c2) = start, end
            return AreaBounds(
                min(r1, r2) - 1,
                min(c1, c2) - 1,
                max(r1, r2) - 1,
                max(c1, c2) - 1,
            )

    logger.debug("Ignoring unrecognized preferred area %r", area)
    return None
