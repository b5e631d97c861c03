"""Tests for FarmSession wiring and the game loop."""

import pytest

from tilefarm.catalog import CropCatalog, CropSpec
from tilefarm.clock import ManualClock
from tilefarm.events import EventType
from tilefarm.persistence import InMemoryStorage
from tilefarm.saves import LoadStatus
from tilefarm.schemas import CropType, SoilTile
from tilefarm.session import FarmSession


def make_session(**kwargs) -> FarmSession:
    catalog = CropCatalog(
        {CropType.WHEAT: CropSpec(grow_time_ms=60_000, stages=4, seed_cost=10, base_reward=50)}
    )
    defaults = dict(
        clock=ManualClock(1_000_000),
        catalog=catalog,
        starting_coins=300,
        growth_interval_ms=1000,
        storage=InMemoryStorage(),
    )
    defaults.update(kwargs)
    return FarmSession(**defaults)


def test_new_session_starts_at_genesis():
    session = make_session()

    assert session.ledger.balance == 300
    assert session.world.store.tile_count == 0
    assert [area.coord for area in session.areas.unlocked_areas()] == [(0, 0)]


@pytest.mark.asyncio
async def test_run_grows_crops_with_manual_clock():
    session = make_session()
    session.world.store.set_tile(1, 1, SoilTile())
    grown = []
    session.notifier.subscribe(grown.append, EventType.CROP_GROWN)
    assert session.actions.plant(1, 1, "wheat").success

    summary = await session.run(num_ticks=61, tick_ms=1000)

    assert summary["ticks"] == 61
    assert summary["crops_advanced"] == 4
    assert session.world.store.get_tile(1, 1).crop.stage == 4
    assert [event.payload["stage"] for event in grown] == [1, 2, 3, 4]

    harvest = session.actions.harvest(1, 1)
    assert harvest.reward == 50
    assert session.ledger.balance == 340


def test_tick_listeners_receive_advances_and_failures_are_contained():
    session = make_session()
    session.world.store.set_tile(0, 0, SoilTile())
    session.actions.plant(0, 0, "wheat")
    seen = []

    def broken(tick, now, advanced):
        raise RuntimeError("listener bug")

    session.tick_listeners.extend([broken, lambda tick, now, advanced: seen.append((tick, len(advanced)))])

    session.clock.advance(seconds=30)
    session.tick()

    assert seen == [(1, 1)]


def test_new_game_resets_world_and_coins():
    session = make_session()
    session.actions.purchase_area(1, 0)
    session.world.store.set_tile(3, 3, SoilTile())

    session.new_game()

    assert session.ledger.balance == 300
    assert session.world.store.tile_count == 0
    assert session.world.store.area_count == 1
    assert session.tick_count == 0


@pytest.mark.asyncio
async def test_start_and_stop_persist_the_session():
    storage = InMemoryStorage()
    session = make_session(storage=storage)

    result = await session.start(autosave=False)
    assert result.status is LoadStatus.ABSENT

    session.actions.purchase_area(0, 1)
    await session.stop()
    assert "farming-game-save" in storage.items

    restored = make_session(storage=storage)
    loaded = await restored.start(autosave=False)
    assert loaded.success is True
    assert restored.ledger.balance == 0
    assert restored.areas.is_unlocked((0, 1)) is True
    await restored.stop(save=False)


@pytest.mark.asyncio
async def test_start_arms_autosave_and_stop_disarms_it():
    session = make_session(autosave_interval_ms=50)

    await session.start(load=False)
    assert session.autosave.is_running is True
    assert session.autosave.interval_ms == 50

    await session.stop(save=False)
    assert session.autosave.is_running is False


@pytest.mark.asyncio
async def test_delete_save_resets_to_session_starting_coins():
    session = make_session(starting_coins=500)
    await session.start(load=False, autosave=False)
    session.actions.purchase_area(1, 0)
    await session.saves.save()

    assert await session.saves.delete_save() is True

    assert session.ledger.balance == 500
    assert session.world.store.area_count == 1
    await session.stop(save=False)
