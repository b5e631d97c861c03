"""
Farm session: the explicitly constructed world object.

Every collaborator is created here or injected by the caller. There are no
module-level singletons, so several independent sessions (tests, tools, a
headless simulation) can live in the same process.

Coordinates the game loop:
1. Recompute crop stages (throttled by the growth scheduler)
2. Invoke tick listeners with the crops that advanced
3. Auto-save runs on its own timer, independent of ticks
"""

import asyncio
from typing import Callable, Dict, List, Optional

from .actions import FarmActions
from .areas import AreaPricing, AreaUnlockPolicy
from .autosave import AutoSaveScheduler
from .catalog import DEFAULT_CATALOG, DEFAULT_PRICES, CropCatalog, PriceList
from .clock import Clock, ManualClock, SystemClock
from .config import Config
from .events import EventBus, Notifier
from .growth import CropAdvance, GrowthScheduler
from .ledger import CoinLedger, Ledger
from .logging_utils import log_info, log_success, log_warning
from .persistence import SaveStorage
from .saves import SAVE_FORMAT_VERSION, LoadResult, SaveManager
from .world.store import FarmWorld

TickListener = Callable[[int, int, List[CropAdvance]], None]


class FarmSession:
    """
    One farm: world, ledger and the services that act on them.

    Fully decoupled - storage, clock, notifier, catalog and pricing are all
    injectable. Defaults give an in-memory game on the system clock.
    """

    def __init__(
        self,
        *,
        world: Optional[FarmWorld] = None,
        ledger: Optional[Ledger] = None,
        storage: Optional[SaveStorage] = None,
        notifier: Optional[Notifier] = None,
        clock: Optional[Clock] = None,
        catalog: CropCatalog = DEFAULT_CATALOG,
        prices: PriceList = DEFAULT_PRICES,
        pricing: Optional[AreaPricing] = None,
        starting_coins: Optional[int] = None,
        growth_interval_ms: Optional[int] = None,
        autosave_interval_ms: Optional[int] = None,
        save_key: Optional[str] = None,
        version: str = SAVE_FORMAT_VERSION,
        tick_listeners: Optional[List[TickListener]] = None,
    ):
        """Wire the session.

        Args:
            world: Existing world to adopt; a fresh one (origin area only) by default
            ledger: Coin authority; a ``CoinLedger`` with ``starting_coins`` by default
            storage: Save backend; ``SaveManager`` falls back to in-memory storage
            notifier: Event sink; an ``EventBus`` by default so callers can subscribe
            clock: Time source; ``SystemClock`` by default, ``ManualClock`` in tests
            catalog: Crop definitions
            prices: Terrain and care action prices
            pricing: Area cost curve
            starting_coins: Balance for a new game (``Config.STARTING_COINS``)
            growth_interval_ms: Minimum time between growth passes
            autosave_interval_ms: Default auto-save period
            save_key: Storage key (``Config.SAVE_KEY``)
            version: Format version written into saves
            tick_listeners: Callables invoked after each tick with
                (tick, now_ms, advanced_crops)
        """
        self.starting_coins = Config.STARTING_COINS if starting_coins is None else starting_coins
        self.clock = clock or SystemClock()
        self.notifier = notifier or EventBus()
        self.catalog = catalog
        self.prices = prices

        fresh_world = world is None
        self.world = world or FarmWorld(area_size=Config.AREA_SIZE)
        if fresh_world:
            self.world.genesis()
        self.ledger = ledger or CoinLedger(self.starting_coins)

        self.areas = AreaUnlockPolicy(self.world.store, pricing, area_size=self.world.area_size)
        self.growth = GrowthScheduler(
            self.world.store,
            catalog,
            self.notifier,
            min_interval_ms=(
                Config.GROWTH_REFRESH_MS if growth_interval_ms is None else growth_interval_ms
            ),
        )
        self.actions = FarmActions(
            self.world,
            self.ledger,
            areas=self.areas,
            catalog=catalog,
            prices=prices,
            notifier=self.notifier,
            clock=self.clock,
        )
        self.saves = SaveManager(
            self.world,
            self.ledger,
            storage,
            notifier=self.notifier,
            clock=self.clock,
            save_key=save_key,
            version=version,
            reset_world=self.reset,
        )
        self.autosave = AutoSaveScheduler(self._autosave, autosave_interval_ms)

        self.tick_listeners = tick_listeners or []
        self.tick_count = 0
        self._started = False

    # -- lifecycle -----------------------------------------------------------

    def reset(self) -> None:
        """Back to genesis: only area (0, 0) unlocked and the starting balance."""
        self.world.genesis()
        self.ledger.reset(self.starting_coins)
        self.growth.reset()
        self.tick_count = 0

    def new_game(self) -> None:
        self.reset()
        log_info(f"[Session] New game started with {self.starting_coins} coins")

    async def start(self, *, load: bool = True, autosave: bool = True) -> Optional[LoadResult]:
        """Prepare storage, optionally restore the saved game and arm auto-save.

        Returns the load result when ``load`` is set, otherwise None.
        """
        await self.saves.initialize()
        self._started = True

        result = None
        if load:
            result = await self.saves.load()
        if autosave:
            self.autosave.start()
        return result

    async def stop(self, *, save: bool = True) -> None:
        """Disarm auto-save, write a final save and release storage."""
        await self.autosave.shutdown()
        if not self._started:
            return
        try:
            if save:
                await self.saves.save()
        finally:
            await self.saves.close()
            self._started = False

    async def _autosave(self) -> bool:
        return await self.saves.save(skip_if_busy=True)

    # -- game loop -----------------------------------------------------------

    def tick(self) -> List[CropAdvance]:
        """Run one growth pass (if due) and notify tick listeners."""
        self.tick_count += 1
        now = self.clock.now_ms()
        advanced = self.growth.tick(now)

        # Listener failures are logged but never stop the loop.
        for listener in self.tick_listeners:
            try:
                listener(self.tick_count, now, advanced)
            except Exception as exc:
                log_warning(f"[Session] Tick listener failed: {exc}")
        return advanced

    async def run(self, num_ticks: int, tick_ms: Optional[int] = None) -> Dict:
        """Run the game loop for ``num_ticks`` ticks, ``tick_ms`` apart.

        A ``ManualClock`` is advanced instead of sleeping, so a headless run
        of simulated hours finishes immediately.

        Returns:
            Dict with ticks, crops_advanced, coins and tiles
        """
        interval = self.growth.min_interval_ms if tick_ms is None else tick_ms
        if interval < 0:
            raise ValueError("tick_ms cannot be negative")

        total_advanced = 0
        for _ in range(num_ticks):
            if isinstance(self.clock, ManualClock):
                self.clock.advance(ms=interval)
            else:
                await asyncio.sleep(interval / 1000)
            total_advanced += len(self.tick())

        log_success(
            f"[Session] Ran {num_ticks} ticks, "
            f"{total_advanced} crop stage change(s), {self.ledger.balance} coins"
        )
        return {
            "ticks": num_ticks,
            "crops_advanced": total_advanced,
            "coins": self.ledger.balance,
            "tiles": self.world.store.tile_count,
        }
