"""Tests for throttled crop stage recomputation."""

from tilefarm import crops
from tilefarm.catalog import CropCatalog, CropSpec
from tilefarm.events import EventBus, EventType
from tilefarm.growth import GrowthScheduler
from tilefarm.schemas import CropInstance, CropType, RoadTile, SoilTile
from tilefarm.world import SpatialStore


def make_catalog() -> CropCatalog:
    return CropCatalog(
        {CropType.WHEAT: CropSpec(grow_time_ms=60_000, stages=4, seed_cost=10, base_reward=50)}
    )


def make_scheduler(min_interval_ms: int = 1000):
    catalog = make_catalog()
    store = SpatialStore()
    bus = EventBus()
    events = []
    bus.subscribe(events.append, EventType.CROP_GROWN)
    scheduler = GrowthScheduler(store, catalog, bus, min_interval_ms=min_interval_ms)
    return scheduler, store, catalog, events


def test_update_all_advances_cached_stage_and_notifies():
    scheduler, store, catalog, events = make_scheduler()
    tile = SoilTile()
    crops.plant(tile, CropType.WHEAT, now=0, catalog=catalog)
    store.set_tile(2, 3, tile)
    store.set_tile(0, 0, RoadTile())
    store.set_tile(1, 1, SoilTile())

    advanced = scheduler.update_all(45_000)

    assert len(advanced) == 1
    assert (advanced[0].x, advanced[0].y) == (2, 3)
    assert advanced[0].previous_stage == 0
    assert advanced[0].stage == 3
    assert tile.crop.stage == 3
    assert len(events) == 1
    assert events[0].payload == {
        "x": 2,
        "y": 3,
        "crop_type": "wheat",
        "stage": 3,
        "max_stages": 4,
    }


def test_unchanged_stage_emits_nothing():
    scheduler, store, catalog, events = make_scheduler()
    tile = SoilTile()
    crops.plant(tile, CropType.WHEAT, now=0, catalog=catalog)
    store.set_tile(0, 0, tile)

    scheduler.update_all(20_000)
    scheduler.update_all(25_000)

    assert len(events) == 1
    assert tile.crop.stage == 1


def test_tick_is_throttled():
    scheduler, store, catalog, events = make_scheduler(min_interval_ms=1000)
    tile = SoilTile()
    crops.plant(tile, CropType.WHEAT, now=0, catalog=catalog)
    store.set_tile(0, 0, tile)

    scheduler.tick(14_000)
    assert scheduler.last_update_ms == 14_000
    assert scheduler.tick(14_999) == []
    assert scheduler.last_update_ms == 14_000
    assert tile.crop.stage == 0

    assert len(scheduler.tick(15_000)) == 1
    assert tile.crop.stage == 1


def test_missed_ticks_cause_no_drift():
    scheduler, store, catalog, _ = make_scheduler()
    tile = SoilTile()
    crops.plant(tile, CropType.WHEAT, now=0, catalog=catalog)
    store.set_tile(0, 0, tile)

    # One late tick jumps straight to the correct stage.
    scheduler.tick(61_000)
    assert tile.crop.stage == 4


def test_unknown_crop_is_skipped():
    scheduler, store, _, events = make_scheduler()
    store.set_tile(
        0,
        0,
        SoilTile(crop=CropInstance(crop_type=CropType.PEPPER, max_stages=5, planted_at=0)),
    )

    assert scheduler.update_all(1_000_000) == []
    assert events == []


def test_reset_clears_throttle():
    scheduler, _, _, _ = make_scheduler()
    scheduler.tick(100)
    assert scheduler.should_update(200) is False
    scheduler.reset()
    assert scheduler.should_update(200) is True
