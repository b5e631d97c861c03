"""Sparse spatial storage for tiles and areas.

``SpatialStore`` is pure storage: it never enforces game rules and never
emits notifications. Callers (crop lifecycle, area policy, actions) validate
before they mutate.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, Optional, Tuple

from ..schemas import AreaData, BareTile, Coord, RoadTile, SoilTile

Tile = BareTile | SoilTile | RoadTile


@dataclass
class SpatialStore:
    """Coordinate-keyed maps of tiles and areas with O(1) lookup."""

    tiles: Dict[Coord, Tile] = field(default_factory=dict)
    areas: Dict[Coord, AreaData] = field(default_factory=dict)

    # -- tiles ---------------------------------------------------------------

    def get_tile(self, x: int, y: int) -> Optional[Tile]:
        return self.tiles.get((x, y))

    def set_tile(self, x: int, y: int, data: Tile) -> None:
        self.tiles[(x, y)] = data

    def delete_tile(self, x: int, y: int) -> Optional[Tile]:
        return self.tiles.pop((x, y), None)

    def iter_tiles(self) -> Iterator[Tuple[Coord, Tile]]:
        # Snapshot the items so callers may replace tiles while iterating.
        return iter(list(self.tiles.items()))

    def for_each_tile(self, fn: Callable[[int, int, Tile], None]) -> None:
        for (x, y), tile in self.iter_tiles():
            fn(x, y, tile)

    @property
    def tile_count(self) -> int:
        return len(self.tiles)

    # -- areas ---------------------------------------------------------------

    def get_area(self, x: int, y: int) -> Optional[AreaData]:
        return self.areas.get((x, y))

    def set_area(self, data: AreaData) -> None:
        """Store an area under its own coordinate (key always equals content)."""
        self.areas[data.coord] = data

    def delete_area(self, x: int, y: int) -> Optional[AreaData]:
        return self.areas.pop((x, y), None)

    def iter_areas(self) -> Iterator[Tuple[Coord, AreaData]]:
        return iter(list(self.areas.items()))

    def for_each_area(self, fn: Callable[[int, int, AreaData], None]) -> None:
        for (x, y), area in self.iter_areas():
            fn(x, y, area)

    @property
    def area_count(self) -> int:
        return len(self.areas)

    # -- lifecycle -----------------------------------------------------------

    def clear(self) -> None:
        self.tiles.clear()
        self.areas.clear()


@dataclass
class CameraState:
    """Viewport and tool selection owned by the world, read by renderers."""

    offset_x: float = 0.0
    offset_y: float = 0.0
    scale: float = 1.0
    selected_tool: Optional[str] = None


@dataclass
class FarmWorld:
    """Everything a save captures except the coin balance (owned by the ledger)."""

    store: SpatialStore = field(default_factory=SpatialStore)
    camera: CameraState = field(default_factory=CameraState)
    area_size: int = 12

    def genesis(self) -> None:
        """Reset to a fresh world: no tiles, only the origin area unlocked."""
        self.store.clear()
        self.store.set_area(AreaData(x=0, y=0, unlocked=True))
        self.camera = CameraState()
