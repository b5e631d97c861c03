"""Coordinate helpers shared by the store and the area policy."""

from __future__ import annotations

from typing import List

from ..schemas import Coord

ORIGIN: Coord = (0, 0)

# N, W, E, S. Diagonals never count as adjacent.
_ORTHOGONAL = ((0, -1), (-1, 0), (1, 0), (0, 1))


def tile_area(tile_x: int, tile_y: int, area_size: int) -> Coord:
    """Area containing a tile. Floor division keeps negative tiles correct."""
    if area_size <= 0:
        raise ValueError("area_size must be >= 1")
    return (tile_x // area_size, tile_y // area_size)


def area_tile_bounds(area_x: int, area_y: int, area_size: int) -> tuple[Coord, Coord]:
    """Inclusive (min, max) tile corners of an area."""
    min_x, min_y = area_x * area_size, area_y * area_size
    return (min_x, min_y), (min_x + area_size - 1, min_y + area_size - 1)


def orthogonal_neighbors(x: int, y: int) -> List[Coord]:
    return [(x + dx, y + dy) for dx, dy in _ORTHOGONAL]


def manhattan_distance(a: Coord, b: Coord = ORIGIN) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])
