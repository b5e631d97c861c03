"""Balance tables: crop growth/economics and action prices.

These are data, not logic. Everything that consumes them receives a
``CropCatalog`` (or a ``PriceList``) by injection so scenarios and tests can
swap in their own numbers without touching the lifecycle code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, Mapping, Optional

from .schemas import CropType, TerrainKind


@dataclass(frozen=True)
class CropSpec:
    """Static properties of one crop type."""

    grow_time_ms: int
    stages: int
    seed_cost: int
    base_reward: int

    def __post_init__(self) -> None:
        if self.grow_time_ms <= 0:
            raise ValueError("grow_time_ms must be positive")
        if self.stages < 1:
            raise ValueError("stages must be >= 1")
        if self.seed_cost < 0 or self.base_reward < 0:
            raise ValueError("seed_cost and base_reward cannot be negative")


# Growth times are in seconds in the balance sheet; converted on load below.
_DEFAULT_CROPS: Dict[CropType, tuple[int, int, int, int]] = {
    #                 cost, reward, grow (s), stages
    CropType.WHEAT: (12, 20, 25, 5),
    CropType.SPINACH: (8, 15, 18, 5),
    CropType.CARROT: (15, 25, 30, 5),
    CropType.POTATO: (10, 18, 22, 5),
    CropType.TOMATO: (20, 35, 35, 5),
    CropType.CORN: (25, 45, 40, 5),
    CropType.ONION: (18, 32, 45, 5),
    CropType.PEA: (16, 28, 28, 5),
    CropType.EGGPLANT: (30, 55, 50, 5),
    CropType.PEPPER: (35, 65, 55, 5),
}


class CropCatalog:
    """Lookup of ``CropType`` → ``CropSpec``.

    Only crops present in the catalog can be planted, so a catalog with a
    subset of ``CropType`` effectively disables the missing crops.
    """

    def __init__(self, specs: Optional[Mapping[CropType, CropSpec]] = None):
        if specs is None:
            specs = {
                crop: CropSpec(
                    grow_time_ms=grow_s * 1000,
                    stages=stages,
                    seed_cost=cost,
                    base_reward=reward,
                )
                for crop, (cost, reward, grow_s, stages) in _DEFAULT_CROPS.items()
            }
        self._specs: Dict[CropType, CropSpec] = {CropType(k): v for k, v in specs.items()}

    def __contains__(self, crop_type: object) -> bool:
        try:
            return CropType(crop_type) in self._specs
        except ValueError:
            return False

    def __iter__(self) -> Iterator[CropType]:
        return iter(self._specs)

    def __len__(self) -> int:
        return len(self._specs)

    def get(self, crop_type: CropType | str) -> Optional[CropSpec]:
        """Return the CropSpec, or None for unknown/unsupported crop ids."""
        try:
            return self._specs.get(CropType(crop_type))
        except ValueError:
            return None

    def require(self, crop_type: CropType | str) -> CropSpec:
        spec = self.get(crop_type)
        if spec is None:
            raise KeyError(f"Unknown crop type '{crop_type}'")
        return spec

    def grow_time_ms(self, crop_type: CropType | str) -> int:
        return self.require(crop_type).grow_time_ms


@dataclass(frozen=True)
class PriceList:
    """Coin prices for terrain placement and crop care actions."""

    terrain: Dict[TerrainKind, int] = field(
        default_factory=lambda: {
            TerrainKind.SOIL: 3,
            TerrainKind.ROAD: 8,
            TerrainKind.BARE: 0,
        }
    )
    water: int = 5
    fertilize: int = 15
    harvest: int = 0

    def terrain_cost(self, kind: TerrainKind) -> int:
        return self.terrain.get(TerrainKind(kind), 0)


DEFAULT_CATALOG = CropCatalog()
DEFAULT_PRICES = PriceList()
