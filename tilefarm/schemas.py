"""
Pydantic schemas for the Tilefarm world.

All data structures that are stored in the world or written to a save file
are defined here.

Design Philosophy:
- Tiles are tagged variants discriminated on ``type`` so a crop can only ever
  live on a soil tile (a crop on a road is not representable)
- Crop stage is a cache; ``planted_at`` plus the crop's grow time is the truth
- JSON field names follow the save envelope (camelCase); Python code uses
  snake_case attribute names via aliases
"""

from enum import Enum
from typing import Annotated, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


# (x, y) integer pair. Used as the dict key for both tiles and areas, which
# keeps keys collision-free for every int, negatives included.
Coord = Tuple[int, int]


class _SaveModel(BaseModel):
    """Base for models that round-trip through the camelCase save envelope."""

    model_config = ConfigDict(populate_by_name=True)


# ============================================================================
# Enumerations
# ============================================================================


class TerrainKind(str, Enum):
    """Surface of a tile. Only soil accepts crops."""

    BARE = "bare"
    SOIL = "soil"
    ROAD = "road"


class CropType(str, Enum):
    """Recognized crop identifiers (closed set, never free text)."""

    WHEAT = "wheat"
    SPINACH = "spinach"
    CARROT = "carrot"
    POTATO = "potato"
    TOMATO = "tomato"
    CORN = "corn"
    ONION = "onion"
    PEA = "pea"
    EGGPLANT = "eggplant"
    PEPPER = "pepper"


# ============================================================================
# Tile Schemas
# ============================================================================


class CropInstance(_SaveModel):
    """Mutable growth state attached to a soil tile.

    ``stage`` is recomputed from ``planted_at`` by the growth scheduler and is
    only persisted as a cache. ``watered`` and ``fertilized`` are one-shot
    flags that raise the harvest reward; they never change grow time.
    """

    crop_type: CropType = Field(..., alias="cropType")
    stage: int = Field(0, ge=0, description="Cached growth stage in [0, max_stages]")
    max_stages: int = Field(..., alias="maxStages", ge=1)
    planted_at: int = Field(..., alias="plantedAt", description="Epoch milliseconds")
    watered: bool = False
    fertilized: bool = False

    @model_validator(mode="after")
    def _stage_within_bounds(self) -> "CropInstance":
        if self.stage > self.max_stages:
            raise ValueError(
                f"stage {self.stage} exceeds max_stages {self.max_stages}"
            )
        return self


class BareTile(_SaveModel):
    """Cleared ground. Nothing can be planted here."""

    type: Literal["bare"] = "bare"


class RoadTile(_SaveModel):
    """Paved tile. Walkable, never plantable."""

    type: Literal["road"] = "road"


class SoilTile(_SaveModel):
    """Tilled soil, optionally bearing a crop.

    ``watered``/``fertilized`` hold care applied to empty soil. Planting moves
    them onto the new crop, so only one of the two places is ever set.
    """

    type: Literal["soil"] = "soil"
    crop: Optional[CropInstance] = None
    watered: bool = False
    fertilized: bool = False


TileData = Annotated[
    Union[BareTile, SoilTile, RoadTile],
    Field(discriminator="type"),
]


def make_tile(kind: TerrainKind) -> Union[BareTile, SoilTile, RoadTile]:
    """Return an empty tile of the requested terrain kind."""

    kind = TerrainKind(kind)
    if kind is TerrainKind.SOIL:
        return SoilTile()
    if kind is TerrainKind.ROAD:
        return RoadTile()
    return BareTile()


def terrain_of(tile: Optional[Union[BareTile, SoilTile, RoadTile]]) -> Optional[TerrainKind]:
    """Terrain kind for a tile, or None when the tile does not exist."""

    if tile is None:
        return None
    return TerrainKind(tile.type)


# ============================================================================
# Area Schemas
# ============================================================================


class AreaData(_SaveModel):
    """One unlockable region of ``area_size x area_size`` tiles.

    Purchase cost is not stored; the pricing policy derives it.
    """

    x: int
    y: int
    unlocked: bool = False

    @property
    def coord(self) -> Coord:
        return (self.x, self.y)


# ============================================================================
# Snapshot Schemas
# ============================================================================


class GameViewState(_SaveModel):
    """Auxiliary state persisted with the world (camera, tool, coins)."""

    offset_x: float = Field(0.0, alias="offsetX")
    offset_y: float = Field(0.0, alias="offsetY")
    scale: float = Field(1.0, gt=0)
    selected_tool: Optional[str] = Field(None, alias="selectedTool")
    coins: int = Field(0, ge=0)


class TileEntry(_SaveModel):
    x: int
    y: int
    data: TileData


class AreaEntry(_SaveModel):
    x: int
    y: int
    data: AreaData


class WorldSnapshot(_SaveModel):
    """Complete, self-describing serialization of the world at one instant.

    Built on demand for every save/export and applied wholesale on
    load/import. Never partially merged into a live world.
    """

    version: str
    timestamp: int = Field(..., description="Creation time, epoch milliseconds")
    game_state: GameViewState = Field(..., alias="gameState")
    tiles: List[TileEntry] = Field(default_factory=list)
    areas: List[AreaEntry] = Field(default_factory=list)


class SaveInfo(BaseModel):
    """Header of a stored save, readable without loading the world."""

    version: str
    timestamp: int
