"""Tests for ledger-aware player actions."""

from tilefarm.actions import FarmActions
from tilefarm.catalog import CropCatalog, CropSpec, PriceList
from tilefarm.clock import ManualClock
from tilefarm.events import EventBus, EventType
from tilefarm.ledger import CoinLedger
from tilefarm.results import FailureReason
from tilefarm.schemas import CropType, RoadTile, SoilTile, TerrainKind
from tilefarm.world import FarmWorld
from tilefarm.growth import GrowthScheduler


class RejectingLedger(CoinLedger):
    """Reports it can afford anything but refuses every debit."""

    def can_afford(self, amount: int) -> bool:
        return True

    def spend(self, amount: int, reason: str) -> bool:
        return False


def build(balance: int = 300, ledger=None):
    clock = ManualClock()
    world = FarmWorld()
    world.genesis()
    ledger = ledger or CoinLedger(balance)
    bus = EventBus()
    events = []
    bus.subscribe(events.append)
    catalog = CropCatalog(
        {CropType.WHEAT: CropSpec(grow_time_ms=60_000, stages=4, seed_cost=10, base_reward=50)}
    )
    actions = FarmActions(
        world, ledger, catalog=catalog, prices=PriceList(), notifier=bus, clock=clock
    )
    return actions, world, ledger, clock, events


def test_plant_grow_harvest_scenario():
    actions, world, ledger, clock, events = build(balance=20)
    world.store.set_tile(2, 3, SoilTile())
    growth = GrowthScheduler(world.store, actions.catalog)

    planted = actions.plant(2, 3, "wheat")
    assert planted.success is True
    assert ledger.balance == 10
    assert world.store.get_tile(2, 3).crop.stage == 0

    clock.advance(seconds=45)
    growth.update_all(clock.now_ms())
    assert world.store.get_tile(2, 3).crop.stage == 3

    clock.advance(seconds=16)
    growth.update_all(clock.now_ms())
    crop = world.store.get_tile(2, 3).crop
    assert crop.stage == 4

    harvested = actions.harvest(2, 3)
    assert harvested.success is True
    assert harvested.reward == 50
    assert ledger.balance == 60
    assert world.store.get_tile(2, 3).crop is None

    types = [event.type for event in events]
    assert types == [EventType.CROP_PLANTED, EventType.CROP_HARVESTED]


def test_plant_without_funds_leaves_balance_and_tile_untouched():
    actions, world, ledger, _, _ = build(balance=9)
    world.store.set_tile(0, 0, SoilTile())

    result = actions.plant(0, 0, CropType.WHEAT)

    assert result.reason is FailureReason.INSUFFICIENT_FUNDS
    assert ledger.balance == 9
    assert world.store.get_tile(0, 0).crop is None


def test_plant_in_locked_area_fails():
    actions, world, ledger, _, _ = build()
    world.store.set_tile(12, 0, SoilTile())

    result = actions.plant(12, 0, "wheat")

    assert result.reason is FailureReason.AREA_LOCKED
    assert ledger.balance == 300


def test_plant_validation_happens_before_charging():
    actions, world, ledger, _, _ = build()
    world.store.set_tile(1, 1, RoadTile())

    assert actions.plant(1, 1, "wheat").reason is FailureReason.NOT_SOIL
    assert actions.plant(5, 5, "wheat").reason is FailureReason.TILE_MISSING
    assert ledger.balance == 300
    assert ledger.history == []


def test_harvest_immature_earns_nothing():
    actions, world, ledger, clock, _ = build(balance=20)
    world.store.set_tile(0, 0, SoilTile())
    actions.plant(0, 0, "wheat")
    clock.advance(seconds=30)

    result = actions.harvest(0, 0)

    assert result.reason is FailureReason.CROP_IMMATURE
    assert ledger.balance == 10


def test_water_and_fertilize_charge_once_and_boost_reward():
    actions, world, ledger, clock, _ = build(balance=100)
    world.store.set_tile(0, 0, SoilTile())
    actions.plant(0, 0, "wheat")

    assert actions.water(0, 0).cost == 5
    assert actions.water(0, 0).reason is FailureReason.ALREADY_WATERED
    assert actions.fertilize(0, 0).cost == 15
    assert actions.fertilize(0, 0).reason is FailureReason.ALREADY_FERTILIZED
    assert ledger.balance == 100 - 10 - 5 - 15

    clock.advance(seconds=60)
    result = actions.harvest(0, 0)

    # round(50 * 1.2 * 1.3) = 78
    assert result.reward == 78
    assert ledger.balance == 70 + 78


def test_water_before_planting_boosts_the_harvest():
    actions, world, ledger, clock, _ = build(balance=100)
    world.store.set_tile(0, 0, SoilTile())

    assert actions.water(0, 0).success is True
    assert actions.plant(0, 0, "wheat").success is True
    assert actions.water(0, 0).reason is FailureReason.ALREADY_WATERED

    clock.advance(seconds=60)
    result = actions.harvest(0, 0)

    # round(50 * 1.2) = 60
    assert result.reward == 60
    assert ledger.balance == 100 - 5 - 10 + 60


def test_water_without_funds_fails():
    actions, world, ledger, _, _ = build(balance=10)
    world.store.set_tile(0, 0, SoilTile())
    actions.plant(0, 0, "wheat")

    result = actions.water(0, 0)

    assert result.reason is FailureReason.INSUFFICIENT_FUNDS
    assert world.store.get_tile(0, 0).crop.watered is False
    assert ledger.balance == 0


def test_place_terrain_charges_and_notifies():
    actions, world, ledger, _, events = build()

    result = actions.place_terrain(3, 4, TerrainKind.SOIL)

    assert result.success is True
    assert ledger.balance == 297
    assert isinstance(world.store.get_tile(3, 4), SoilTile)
    assert events[-1].type is EventType.TILE_CHANGED
    assert events[-1].payload["new_type"] == "soil"

    again = actions.place_terrain(3, 4, "soil")
    assert again.reason is FailureReason.NO_CHANGE
    assert ledger.balance == 297

    assert actions.place_terrain(3, 4, "road").success is True
    assert ledger.balance == 289


def test_place_terrain_refuses_to_bury_a_crop():
    actions, world, ledger, _, _ = build()
    world.store.set_tile(0, 0, SoilTile())
    actions.plant(0, 0, "wheat")

    assert actions.place_terrain(0, 0, "road").reason is FailureReason.CROP_PRESENT
    assert actions.clear_tile(0, 0).reason is FailureReason.CROP_PRESENT
    assert ledger.balance == 290


def test_clear_tile():
    actions, world, _, _, _ = build()
    world.store.set_tile(1, 0, RoadTile())

    assert actions.clear_tile(1, 0).success is True
    assert world.store.get_tile(1, 0) is None
    assert actions.clear_tile(1, 0).reason is FailureReason.TILE_MISSING


def test_purchase_area_debits_and_unlocks():
    actions, world, ledger, _, events = build(balance=300)

    result = actions.purchase_area(1, 0)

    assert result.success is True
    assert ledger.balance == 0
    assert world.store.get_area(1, 0).unlocked is True
    assert EventType.AREA_UNLOCKED in [event.type for event in events]


def test_purchase_area_not_adjacent_or_unaffordable():
    actions, world, ledger, _, _ = build(balance=299)

    assert actions.purchase_area(2, 2).reason is FailureReason.NOT_ADJACENT
    assert actions.purchase_area(0, 1).reason is FailureReason.INSUFFICIENT_FUNDS
    assert ledger.balance == 299
    assert world.store.get_area(0, 1) is None


def test_purchase_area_reverts_when_payment_rejected():
    actions, world, ledger, _, events = build(ledger=RejectingLedger(1000))

    result = actions.purchase_area(0, -1)

    assert result.reason is FailureReason.PAYMENT_REJECTED
    assert actions.areas.is_unlocked((0, -1)) is False
    assert ledger.balance == 1000
    assert events == []


def test_purchase_area_at_tile_maps_to_containing_area():
    actions, world, _, _, _ = build(balance=1000)

    assert actions.purchase_area_at_tile(-1, 5).success is True
    assert world.store.get_area(-1, 0).unlocked is True
