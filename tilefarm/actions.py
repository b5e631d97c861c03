"""Player actions: the ledger-aware layer between input and the world.

Each action validates first, then charges, then mutates, then notifies.
Every debit is preceded by ``can_afford``. If a step after the debit fails,
the exact amount is credited back under a distinct ``"... refund"`` reason,
so every action is all-or-nothing from the ledger's point of view.

Actions never raise for rule violations; they return ``ActionResult``.
"""

from __future__ import annotations

from typing import Optional

from . import crops
from .areas import AreaUnlockPolicy
from .catalog import DEFAULT_CATALOG, DEFAULT_PRICES, CropCatalog, PriceList
from .clock import Clock, SystemClock
from .events import EventType, GameEvent, NullNotifier, Notifier
from .ledger import Ledger
from .logging_utils import log_info
from .results import ActionResult, FailureReason
from .schemas import CropType, SoilTile, TerrainKind, make_tile, terrain_of
from .world.store import FarmWorld


class FarmActions:
    """Plant, harvest, care for crops, shape terrain and buy areas."""

    def __init__(
        self,
        world: FarmWorld,
        ledger: Ledger,
        *,
        areas: Optional[AreaUnlockPolicy] = None,
        catalog: CropCatalog = DEFAULT_CATALOG,
        prices: PriceList = DEFAULT_PRICES,
        notifier: Optional[Notifier] = None,
        clock: Optional[Clock] = None,
    ):
        self.world = world
        self.ledger = ledger
        self.areas = areas or AreaUnlockPolicy(world.store, area_size=world.area_size)
        self.catalog = catalog
        self.prices = prices
        self.notifier = notifier or NullNotifier()
        self.clock = clock or SystemClock()

    @property
    def store(self):
        return self.world.store

    def _emit(self, event_type: EventType, **payload) -> None:
        self.notifier.notify(
            GameEvent(type=event_type, timestamp=self.clock.now_ms(), payload=payload)
        )

    def _locked(self, x: int, y: int) -> Optional[ActionResult]:
        if self.areas.is_tile_unlocked(x, y):
            return None
        ax, ay = self.areas.tile_area(x, y)
        return ActionResult.fail(
            FailureReason.AREA_LOCKED,
            f"Tile ({x}, {y}) is in locked area ({ax}, {ay})",
            details={"area": (ax, ay)},
        )

    def _charge(self, cost: int, reason: str, what: str) -> Optional[ActionResult]:
        """Debit ``cost``; return a failure result if it cannot be taken."""
        if not self.ledger.can_afford(cost):
            return ActionResult.fail(
                FailureReason.INSUFFICIENT_FUNDS,
                f"Not enough coins! Need {cost} coins to {what}",
                cost=cost,
            )
        if not self.ledger.spend(cost, reason):
            return ActionResult.fail(
                FailureReason.PAYMENT_REJECTED, f"Payment of {cost} coins was rejected", cost=cost
            )
        return None

    # -- terrain -------------------------------------------------------------

    def place_terrain(self, x: int, y: int, kind: TerrainKind | str) -> ActionResult:
        kind = TerrainKind(kind)
        locked = self._locked(x, y)
        if locked is not None:
            return locked

        current = self.store.get_tile(x, y)
        if terrain_of(current) is kind:
            return ActionResult.fail(FailureReason.NO_CHANGE, f"Tile is already {kind.value}")
        if isinstance(current, SoilTile) and current.crop is not None:
            return ActionResult.fail(
                FailureReason.CROP_PRESENT, "Harvest or clear the crop before changing terrain"
            )

        cost = self.prices.terrain_cost(kind)
        failure = self._charge(cost, f"{kind.value} placement", f"place {kind.value}")
        if failure is not None:
            return failure

        self.store.set_tile(x, y, make_tile(kind))
        self._emit(
            EventType.TILE_CHANGED,
            x=x,
            y=y,
            new_type=kind.value,
            old_type=current.type if current is not None else None,
        )
        return ActionResult.ok(f"Placed {kind.value} for {cost} coins", cost=cost)

    def clear_tile(self, x: int, y: int) -> ActionResult:
        """Remove a tile entirely. Refuses while a crop is growing on it."""
        current = self.store.get_tile(x, y)
        if current is None:
            return ActionResult.fail(FailureReason.TILE_MISSING, "There is no tile here")
        if isinstance(current, SoilTile) and current.crop is not None:
            return ActionResult.fail(
                FailureReason.CROP_PRESENT, "Harvest the crop before clearing this tile"
            )
        self.store.delete_tile(x, y)
        self._emit(EventType.TILE_CHANGED, x=x, y=y, new_type=None, old_type=current.type)
        return ActionResult.ok("Tile cleared")

    # -- crops ---------------------------------------------------------------

    def plant(self, x: int, y: int, crop_type: CropType | str) -> ActionResult:
        locked = self._locked(x, y)
        if locked is not None:
            return locked

        tile = self.store.get_tile(x, y)
        rejection = crops.plant_rejection(tile, crop_type, self.catalog)
        if rejection is not None:
            return rejection

        crop = CropType(crop_type)
        cost = self.catalog.require(crop).seed_cost
        failure = self._charge(cost, f"{crop.value} seed", f"plant {crop.value}")
        if failure is not None:
            return failure

        planted = crops.plant(tile, crop, now=self.clock.now_ms(), catalog=self.catalog)
        if not planted.success:
            self.ledger.earn(cost, "Seed purchase refund")
            return ActionResult.fail(planted.reason, planted.message, cost=cost)

        self._emit(EventType.CROP_PLANTED, x=x, y=y, crop_type=crop.value)
        log_info(f"[Crops] {crop.value} planted at ({x}, {y}) for {cost} coins")
        return ActionResult.ok(f"{crop.value} planted for {cost} coins!", cost=cost)

    def harvest(self, x: int, y: int) -> ActionResult:
        tile = self.store.get_tile(x, y)
        result = crops.harvest(tile, now=self.clock.now_ms(), catalog=self.catalog)
        if not result.success:
            return result

        crop_type = result.details["crop_type"]
        self.ledger.earn(result.reward, f"{crop_type} harvest")
        self._emit(EventType.CROP_HARVESTED, x=x, y=y, crop_type=crop_type, reward=result.reward)
        log_info(f"[Crops] {crop_type} harvested from ({x}, {y}) for {result.reward} coins")
        return result

    def water(self, x: int, y: int) -> ActionResult:
        tile = self.store.get_tile(x, y)
        rejection = crops.water_rejection(tile)
        if rejection is not None:
            return rejection

        cost = self.prices.water
        failure = self._charge(cost, "watering", "water")
        if failure is not None:
            return failure

        result = crops.water(tile)
        if not result.success:
            self.ledger.earn(cost, "Watering refund")
            return ActionResult.fail(result.reason, result.message, cost=cost)

        self._emit(EventType.CROP_WATERED, x=x, y=y)
        return ActionResult.ok(f"Tile watered for {cost} coins!", cost=cost)

    def fertilize(self, x: int, y: int) -> ActionResult:
        tile = self.store.get_tile(x, y)
        rejection = crops.fertilize_rejection(tile)
        if rejection is not None:
            return rejection

        cost = self.prices.fertilize
        failure = self._charge(cost, "fertilizing", "fertilize")
        if failure is not None:
            return failure

        result = crops.fertilize(tile)
        if not result.success:
            self.ledger.earn(cost, "Fertilizing refund")
            return ActionResult.fail(result.reason, result.message, cost=cost)

        self._emit(EventType.CROP_FERTILIZED, x=x, y=y)
        return ActionResult.ok(f"Tile fertilized for {cost} coins!", cost=cost)

    # -- areas ---------------------------------------------------------------

    def purchase_area(self, area_x: int, area_y: int) -> ActionResult:
        """Unlock an area and debit its cost as one all-or-nothing step."""
        coord = (area_x, area_y)
        if not self.areas.can_purchase(coord):
            return self.areas.purchase(coord, self.ledger.balance)

        cost = self.areas.purchase_cost(coord)
        if not self.ledger.can_afford(cost):
            return ActionResult.fail(
                FailureReason.INSUFFICIENT_FUNDS,
                f"Not enough coins! Need {cost} coins, but only have {self.ledger.balance}",
                cost=cost,
            )

        result = self.areas.purchase(coord, self.ledger.balance)
        if not result.success:
            return result

        if not self.ledger.spend(cost, f"Purchased area ({area_x}, {area_y})"):
            self.areas.revert_purchase(coord)
            return ActionResult.fail(
                FailureReason.PAYMENT_REJECTED,
                f"Payment for area ({area_x}, {area_y}) was rejected; area stays locked",
                cost=cost,
            )

        self._emit(EventType.AREA_UNLOCKED, x=area_x, y=area_y, cost=cost)
        self._emit(EventType.VIEW_REFRESH_REQUESTED, reason="area")
        log_info(f"[Areas] Area ({area_x}, {area_y}) purchased for {cost} coins")
        return result

    def purchase_area_at_tile(self, tile_x: int, tile_y: int) -> ActionResult:
        return self.purchase_area(*self.areas.tile_area(tile_x, tile_y))
