"""
Example: Basic Farm - Headless Season
=====================================

WHAT THIS SHOWS:
- Building a FarmSession with a ManualClock (no real waiting)
- Placing soil, planting, watering and harvesting
- Buying the neighbouring area once the coins allow it
- Saving to JSON files and exporting a dated copy

RUN:
    python -m examples.basic_farm.run
"""

import asyncio
import tempfile
from pathlib import Path

from tilefarm import (
    EventType,
    FarmSession,
    JsonFileStorage,
    ManualClock,
    TerrainKind,
)


async def main():
    print("=" * 60)
    print("BASIC FARM")
    print("=" * 60)
    print()

    save_dir = Path(tempfile.mkdtemp(prefix="tilefarm-"))
    clock = ManualClock(1_760_000_000_000)
    session = FarmSession(
        clock=clock,
        storage=JsonFileStorage(save_dir),
        starting_coins=300,
    )

    # Print every harvest as it happens
    session.notifier.subscribe(
        lambda event: print(f"  harvested {event.payload['crop_type']} for {event.payload['reward']}"),
        EventType.CROP_HARVESTED,
    )

    await session.start(load=False, autosave=False)

    # Till a 3x3 patch and plant wheat everywhere
    patch = [(x, y) for x in range(2, 5) for y in range(2, 5)]
    for x, y in patch:
        session.actions.place_terrain(x, y, TerrainKind.SOIL)
        session.actions.plant(x, y, "wheat")
    session.actions.water(2, 2)
    print(f"Planted {len(patch)} wheat, {session.ledger.balance} coins left")

    # Three growing seasons of 30 seconds each
    for season in range(1, 4):
        await session.run(num_ticks=30, tick_ms=1000)
        for x, y in patch:
            session.actions.harvest(x, y)
            session.actions.plant(x, y, "wheat")
        print(f"Season {season}: {session.ledger.balance} coins")

    frontier = session.areas.list_purchasable()
    cheapest = min(frontier, key=lambda entry: entry.cost)
    result = session.actions.purchase_area(cheapest.x, cheapest.y)
    print(result.message)

    await session.saves.save()
    exported = await session.saves.export_to_file(save_dir / "exports")
    print(f"\nSaves written to {save_dir}")
    print(f"Export: {exported}")

    await session.stop(save=False)


if __name__ == "__main__":
    asyncio.run(main())
