"""Throttled recomputation of crop stages.

Every invocation recomputes the stage of every planted crop from its
``planted_at`` timestamp. That is O(live crops) per update and needs no
per-crop timers. The scheduler only throttles how often the full pass runs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from .catalog import DEFAULT_CATALOG, CropCatalog
from .crops import current_stage
from .events import EventType, GameEvent, NullNotifier, Notifier
from .logging_utils import log_growth
from .schemas import CropType, SoilTile
from .world.store import SpatialStore


@dataclass(frozen=True)
class CropAdvance:
    """A crop whose cached stage changed during an update."""

    x: int
    y: int
    crop_type: CropType
    previous_stage: int
    stage: int
    max_stages: int


class GrowthScheduler:
    """Recompute crop stages no more often than ``min_interval_ms``."""

    def __init__(
        self,
        store: SpatialStore,
        catalog: CropCatalog = DEFAULT_CATALOG,
        notifier: Optional[Notifier] = None,
        min_interval_ms: int = 1000,
    ):
        if min_interval_ms < 0:
            raise ValueError("min_interval_ms cannot be negative")
        self.store = store
        self.catalog = catalog
        self.notifier = notifier or NullNotifier()
        self.min_interval_ms = min_interval_ms
        self.last_update_ms: Optional[int] = None

    def should_update(self, now: int) -> bool:
        if self.last_update_ms is None:
            return True
        return now - self.last_update_ms >= self.min_interval_ms

    def update_all(self, now: int) -> List[CropAdvance]:
        """Recompute every crop unconditionally and report the ones that moved."""
        advanced: List[CropAdvance] = []

        for (x, y), tile in self.store.iter_tiles():
            if not isinstance(tile, SoilTile) or tile.crop is None:
                continue
            crop = tile.crop
            if crop.crop_type not in self.catalog:
                # Loaded from a save made with a different crop table.
                continue

            stage = current_stage(crop, now, self.catalog)
            if stage == crop.stage:
                continue

            advance = CropAdvance(
                x=x,
                y=y,
                crop_type=crop.crop_type,
                previous_stage=crop.stage,
                stage=stage,
                max_stages=crop.max_stages,
            )
            crop.stage = stage
            advanced.append(advance)
            self.notifier.notify(
                GameEvent(
                    type=EventType.CROP_GROWN,
                    timestamp=now,
                    payload={
                        "x": x,
                        "y": y,
                        "crop_type": crop.crop_type.value,
                        "stage": stage,
                        "max_stages": crop.max_stages,
                    },
                )
            )

        self.last_update_ms = now
        if advanced:
            log_growth(f"[Growth] {len(advanced)} crop(s) grew to the next stage")
        return advanced

    def tick(self, now: int) -> List[CropAdvance]:
        """Entry point for the game loop; a no-op while throttled."""
        if not self.should_update(now):
            return []
        return self.update_all(now)

    def reset(self) -> None:
        self.last_update_ms = None
