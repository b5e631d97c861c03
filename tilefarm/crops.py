"""Crop lifecycle: planting, stage derivation, care and harvest.

Every function here is stateless and operates on a tile borrowed from the
``SpatialStore``. Growth is derived from ``planted_at`` and the crop's grow
time, never accumulated tick by tick, so recomputing with the same ``now``
always gives the same stage and a missed or late tick cannot cause drift.

Watering and fertilizing affect yield only, not time to maturity. Either may be
applied to empty soil ahead of planting.
"""

from __future__ import annotations

import math
from typing import Optional

from .catalog import DEFAULT_CATALOG, CropCatalog
from .results import ActionResult, FailureReason
from .schemas import CropInstance, CropType, SoilTile
from .world.store import Tile

WATER_MULTIPLIER = 1.2
FERTILIZER_MULTIPLIER = 1.3


def _round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; rewards round .5 upward.
    return int(math.floor(value + 0.5))


def can_plant(
    tile: Optional[Tile],
    crop_type: CropType | str,
    catalog: CropCatalog = DEFAULT_CATALOG,
) -> bool:
    """True iff the tile is soil, bears no crop, and the crop is recognized."""
    return plant_rejection(tile, crop_type, catalog) is None


def plant_rejection(
    tile: Optional[Tile],
    crop_type: CropType | str,
    catalog: CropCatalog = DEFAULT_CATALOG,
) -> Optional[ActionResult]:
    """Why ``plant`` would fail on this tile, or None if it would succeed."""
    if tile is None:
        return ActionResult.fail(FailureReason.TILE_MISSING, "There is no tile here")
    if not isinstance(tile, SoilTile):
        return ActionResult.fail(FailureReason.NOT_SOIL, "Crops can only be planted on soil")
    if tile.crop is not None:
        return ActionResult.fail(FailureReason.CROP_PRESENT, "This tile already has a crop")
    if crop_type not in catalog:
        return ActionResult.fail(FailureReason.UNKNOWN_CROP, f"Unknown crop type '{crop_type}'")
    return None


def plant(
    tile: Optional[Tile],
    crop_type: CropType | str,
    *,
    now: int,
    max_stages: Optional[int] = None,
    catalog: CropCatalog = DEFAULT_CATALOG,
) -> ActionResult:
    """Attach a fresh ``CropInstance`` (stage 0) to a soil tile.

    Care already applied to the empty soil carries over to the new crop.
    """
    failure = plant_rejection(tile, crop_type, catalog)
    if failure is not None:
        return failure

    crop = CropType(crop_type)
    stages = max_stages if max_stages is not None else catalog.require(crop).stages
    if stages < 1:
        return ActionResult.fail(
            FailureReason.INVALID_STAGES, f"A crop needs at least one stage, got {stages}"
        )

    tile.crop = CropInstance(
        crop_type=crop,
        stage=0,
        max_stages=stages,
        planted_at=now,
        watered=tile.watered,
        fertilized=tile.fertilized,
    )
    tile.watered = False
    tile.fertilized = False
    return ActionResult.ok(f"{crop.value} planted", details={"crop_type": crop.value})


def progress(crop: CropInstance, now: int, catalog: CropCatalog = DEFAULT_CATALOG) -> float:
    """Fraction of total grow time elapsed, clamped to [0, 1]."""
    elapsed = now - crop.planted_at
    if elapsed <= 0:
        return 0.0
    return min(1.0, elapsed / catalog.grow_time_ms(crop.crop_type))


def is_mature(crop: CropInstance, now: int, catalog: CropCatalog = DEFAULT_CATALOG) -> bool:
    return progress(crop, now, catalog) >= 1.0


def current_stage(crop: CropInstance, now: int, catalog: CropCatalog = DEFAULT_CATALOG) -> int:
    """``floor(progress * max_stages)`` clamped to [0, max_stages]."""
    stage = math.floor(progress(crop, now, catalog) * crop.max_stages)
    return max(0, min(crop.max_stages, stage))


def _crop_on(tile: Optional[Tile]) -> tuple[Optional[CropInstance], Optional[ActionResult]]:
    failure = _soil_rejection(tile)
    if failure is not None:
        return None, failure
    if tile.crop is None:
        return None, ActionResult.fail(FailureReason.CROP_ABSENT, "There is no crop on this tile")
    return tile.crop, None


def _soil_rejection(tile: Optional[Tile]) -> Optional[ActionResult]:
    if tile is None:
        return ActionResult.fail(FailureReason.TILE_MISSING, "There is no tile here")
    if not isinstance(tile, SoilTile):
        return ActionResult.fail(FailureReason.NOT_SOIL, "This tile has no soil")
    return None


def _care_target(tile: SoilTile) -> CropInstance | SoilTile:
    # Care lands on the crop when there is one, else waits on the soil.
    return tile.crop if tile.crop is not None else tile


def water_rejection(tile: Optional[Tile]) -> Optional[ActionResult]:
    """Why ``water`` would fail on this tile, or None if it would succeed."""
    failure = _soil_rejection(tile)
    if failure is not None:
        return failure
    if _care_target(tile).watered:
        return ActionResult.fail(FailureReason.ALREADY_WATERED, "This tile is already watered")
    return None


def fertilize_rejection(tile: Optional[Tile]) -> Optional[ActionResult]:
    """Why ``fertilize`` would fail on this tile, or None if it would succeed."""
    failure = _soil_rejection(tile)
    if failure is not None:
        return failure
    if _care_target(tile).fertilized:
        return ActionResult.fail(
            FailureReason.ALREADY_FERTILIZED, "This tile is already fertilized"
        )
    return None


def water(tile: Optional[Tile]) -> ActionResult:
    """Set the one-shot watered flag on the tile's crop, or on empty soil."""
    failure = water_rejection(tile)
    if failure is not None:
        return failure
    _care_target(tile).watered = True
    return ActionResult.ok("Tile watered")


def fertilize(tile: Optional[Tile]) -> ActionResult:
    """Set the one-shot fertilized flag on the tile's crop, or on empty soil."""
    failure = fertilize_rejection(tile)
    if failure is not None:
        return failure
    _care_target(tile).fertilized = True
    return ActionResult.ok("Tile fertilized")


def harvest_reward(base_reward: int, *, watered: bool, fertilized: bool) -> int:
    """``round(base * 1.2^watered * 1.3^fertilized)``, rounded once."""
    value = float(base_reward)
    if watered:
        value *= WATER_MULTIPLIER
    if fertilized:
        value *= FERTILIZER_MULTIPLIER
    return _round_half_up(value)


def harvest(
    tile: Optional[Tile],
    *,
    now: int,
    catalog: CropCatalog = DEFAULT_CATALOG,
) -> ActionResult:
    """Clear a mature crop and report its reward. The caller credits the ledger."""
    crop, failure = _crop_on(tile)
    if failure is not None:
        return failure

    spec = catalog.get(crop.crop_type)
    if spec is None:
        return ActionResult.fail(
            FailureReason.UNKNOWN_CROP, f"Unknown crop type '{crop.crop_type}'"
        )
    if not is_mature(crop, now, catalog):
        pct = int(progress(crop, now, catalog) * 100)
        return ActionResult.fail(
            FailureReason.CROP_IMMATURE,
            f"{crop.crop_type.value} is not ready yet ({pct}% grown)",
        )

    reward = harvest_reward(spec.base_reward, watered=crop.watered, fertilized=crop.fertilized)
    tile.crop = None
    return ActionResult.ok(
        f"{crop.crop_type.value} harvested for {reward} coins",
        reward=reward,
        details={
            "crop_type": crop.crop_type.value,
            "watered": crop.watered,
            "fertilized": crop.fertilized,
        },
    )
