"""World storage: sparse tile/area maps and coordinate helpers."""

from .coords import (
    ORIGIN,
    area_tile_bounds,
    manhattan_distance,
    orthogonal_neighbors,
    tile_area,
)
from .store import CameraState, FarmWorld, SpatialStore, Tile

__all__ = [
    "ORIGIN",
    "area_tile_bounds",
    "manhattan_distance",
    "orthogonal_neighbors",
    "tile_area",
    "CameraState",
    "FarmWorld",
    "SpatialStore",
    "Tile",
]
