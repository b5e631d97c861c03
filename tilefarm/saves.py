"""
Versioned save envelope: snapshot, encode/decode, save/load, export/import.

The envelope is a JSON object::

    {
      "version": "1.0.0",
      "timestamp": 1760000000000,
      "gameState": {"offsetX": 0, "offsetY": 0, "scale": 1,
                    "selectedTool": null, "coins": 300},
      "tiles": [{"x": 2, "y": 3, "data": {"type": "soil", "crop": null,
                                         "watered": false, "fertilized": false}}],
      "areas": [{"x": 0, "y": 0, "data": {"x": 0, "y": 0, "unlocked": true}}]
    }

Key behaviors:
- A snapshot is built on demand from the live world and never retained
- Loading validates the entire envelope before touching the live world, then
  clears and repopulates it (never a partial merge)
- A version mismatch is reported as a warning and the data is loaded as-is.
  No migration exists yet; saves from other versions are trusted to match
  the current schema
- Storage and format failures are caught here and converted to ``False`` /
  ``LoadResult(FAILED)``; they never propagate to the game loop
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

from pydantic import ValidationError

from .clock import Clock, SystemClock
from .config import Config
from .events import EventType, GameEvent, NullNotifier, Notifier
from .ledger import Ledger
from .logging_utils import log_error, log_info, log_success, log_warning
from .persistence import (
    InMemoryStorage,
    PersistenceError,
    SaveFormatError,
    SaveStorage,
)
from .schemas import (
    AreaData,
    AreaEntry,
    GameViewState,
    SaveInfo,
    TileEntry,
    WorldSnapshot,
)
from .world.store import CameraState, FarmWorld

SAVE_FORMAT_VERSION = "1.0.0"
EXPORT_FILE_PREFIX = "farming-game-save"


# ============================================================================
# Pure codec functions
# ============================================================================


def build_snapshot(world: FarmWorld, coins: int, now: int, version: str = SAVE_FORMAT_VERSION) -> WorldSnapshot:
    """Capture the world as a detached ``WorldSnapshot``.

    Entries are sorted by coordinate and deep-copied so the result is
    deterministic and unaffected by later mutation of the live world.
    """
    camera = world.camera
    tiles = [
        TileEntry(x=x, y=y, data=tile.model_copy(deep=True))
        for (x, y), tile in sorted(world.store.tiles.items())
    ]
    areas = [
        AreaEntry(x=x, y=y, data=area.model_copy(deep=True))
        for (x, y), area in sorted(world.store.areas.items())
    ]
    return WorldSnapshot(
        version=version,
        timestamp=now,
        game_state=GameViewState(
            offset_x=camera.offset_x,
            offset_y=camera.offset_y,
            scale=camera.scale,
            selected_tool=camera.selected_tool,
            coins=coins,
        ),
        tiles=tiles,
        areas=areas,
    )


def encode_snapshot(snapshot: WorldSnapshot) -> str:
    return json.dumps(snapshot.model_dump(mode="json", by_alias=True), indent=2)


def decode_snapshot(text: str | bytes) -> WorldSnapshot:
    """Parse and validate an envelope.

    Raises:
        SaveFormatError: If the text is not JSON or does not match the schema
    """
    try:
        payload = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise SaveFormatError(f"Save data is not valid JSON: {exc}") from exc
    try:
        return WorldSnapshot.model_validate(payload)
    except ValidationError as exc:
        raise SaveFormatError(
            f"Save data does not match the save schema ({exc.error_count()} issue(s)): {exc}"
        ) from exc


def check_version(snapshot: WorldSnapshot, current: str = SAVE_FORMAT_VERSION) -> Optional[str]:
    """Return a warning message when versions differ, else None. Never blocks a load."""
    if snapshot.version == current:
        return None
    message = (
        f"Save data version mismatch. Expected {current}, got {snapshot.version}; "
        "loading without migration"
    )
    log_warning(f"[Saves] {message}")
    return message


def apply_snapshot(snapshot: WorldSnapshot, world: FarmWorld, ledger: Ledger) -> None:
    """Replace the live world and balance with the snapshot's contents.

    The entry's ``x``/``y`` are authoritative; stored area data is rewritten
    to match so the area key can never drift from its content.
    """
    state = snapshot.game_state
    world.store.clear()
    for entry in snapshot.tiles:
        world.store.set_tile(entry.x, entry.y, entry.data.model_copy(deep=True))
    for entry in snapshot.areas:
        world.store.set_area(AreaData(x=entry.x, y=entry.y, unlocked=entry.data.unlocked))
    world.camera = CameraState(
        offset_x=state.offset_x,
        offset_y=state.offset_y,
        scale=state.scale,
        selected_tool=state.selected_tool,
    )
    ledger.reset(state.coins)


def export_filename(now: int) -> str:
    """``farming-game-save-YYYY-MM-DD.json`` using the UTC date of ``now``."""
    day = datetime.fromtimestamp(now / 1000, tz=timezone.utc).date().isoformat()
    return f"{EXPORT_FILE_PREFIX}-{day}.json"


# ============================================================================
# Save manager
# ============================================================================


class LoadStatus(str, Enum):
    LOADED = "loaded"
    ABSENT = "absent"
    FAILED = "failed"


@dataclass
class LoadResult:
    """Outcome of a load/import. ``ABSENT`` (no save yet) is not a failure."""

    status: LoadStatus
    message: str = ""
    snapshot: Optional[WorldSnapshot] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.status is LoadStatus.LOADED


class SaveManager:
    """Manual save/load, export/import and deletion for one world.

    At most one save or load runs at a time. Callers that must not queue
    behind a running save (the auto-saver) pass ``skip_if_busy=True`` and the
    request is dropped instead.
    """

    def __init__(
        self,
        world: FarmWorld,
        ledger: Ledger,
        storage: Optional[SaveStorage] = None,
        *,
        notifier: Optional[Notifier] = None,
        clock: Optional[Clock] = None,
        save_key: Optional[str] = None,
        version: str = SAVE_FORMAT_VERSION,
        reset_world: Optional[Callable[[], None]] = None,
    ):
        self.world = world
        self.ledger = ledger
        self.storage = storage or InMemoryStorage()
        self.notifier = notifier or NullNotifier()
        self.clock = clock or SystemClock()
        self.save_key = save_key or Config.SAVE_KEY
        self.version = version
        self._reset_world = reset_world or self._default_reset
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        await self.storage.initialize()

    async def close(self) -> None:
        await self.storage.close()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def snapshot(self) -> WorldSnapshot:
        return build_snapshot(self.world, self.ledger.balance, self.clock.now_ms(), self.version)

    def _emit(self, event_type: EventType, **payload) -> None:
        self.notifier.notify(
            GameEvent(type=event_type, timestamp=self.clock.now_ms(), payload=payload)
        )

    # -- save ----------------------------------------------------------------

    async def save(self, *, skip_if_busy: bool = False) -> bool:
        """Serialize the world under the fixed key. Returns False on any failure."""
        if skip_if_busy and self._lock.locked():
            log_warning("[Saves] Save already in progress; skipping this request")
            return False

        async with self._lock:
            try:
                snapshot = self.snapshot()
                await self.storage.write(self.save_key, encode_snapshot(snapshot))
            except PersistenceError as exc:
                log_error(f"[Saves] Failed to save game: {exc}")
                return False

        log_success(
            f"[Saves] Game saved ({len(snapshot.tiles)} tiles, {len(snapshot.areas)} areas)"
        )
        self._emit(EventType.SAVE_COMPLETED, key=self.save_key, timestamp=snapshot.timestamp)
        return True

    # -- load ----------------------------------------------------------------

    async def load(self) -> LoadResult:
        async with self._lock:
            return await self._load_unlocked()

    async def _load_unlocked(self) -> LoadResult:
        try:
            text = await self.storage.read(self.save_key)
        except PersistenceError as exc:
            log_error(f"[Saves] Failed to read save data: {exc}")
            return LoadResult(LoadStatus.FAILED, message=str(exc))

        if text is None:
            log_info("[Saves] No save data found")
            return LoadResult(LoadStatus.ABSENT, message="No save data found")

        try:
            snapshot = decode_snapshot(text)
        except SaveFormatError as exc:
            log_error(f"[Saves] Failed to load game: {exc}")
            return LoadResult(LoadStatus.FAILED, message=str(exc))

        warnings: List[str] = []
        mismatch = check_version(snapshot, self.version)
        if mismatch:
            warnings.append(mismatch)

        apply_snapshot(snapshot, self.world, self.ledger)

        log_success(
            f"[Saves] Game loaded ({len(snapshot.tiles)} tiles, {len(snapshot.areas)} areas)"
        )
        self._emit(EventType.SAVE_LOADED, key=self.save_key, version=snapshot.version)
        self._emit(EventType.VIEW_REFRESH_REQUESTED, reason="load")
        return LoadResult(
            LoadStatus.LOADED,
            message="Game loaded",
            snapshot=snapshot,
            warnings=warnings,
        )

    # -- inspection / deletion -----------------------------------------------

    async def has_save(self) -> bool:
        try:
            return await self.storage.exists(self.save_key)
        except PersistenceError as exc:
            log_error(f"[Saves] Cannot check for save data: {exc}")
            return False

    async def save_info(self) -> Optional[SaveInfo]:
        """Version and timestamp of the stored save without loading it."""
        try:
            text = await self.storage.read(self.save_key)
            if text is None:
                return None
            snapshot = decode_snapshot(text)
        except PersistenceError as exc:
            log_error(f"[Saves] Failed to get save info: {exc}")
            return None
        return SaveInfo(version=snapshot.version, timestamp=snapshot.timestamp)

    async def delete_save(self) -> bool:
        """Remove stored data and reset the live world to a new game."""
        async with self._lock:
            try:
                await self.storage.delete(self.save_key)
            except PersistenceError as exc:
                log_error(f"[Saves] Failed to delete save data: {exc}")
                return False
            self._reset_world()

        log_info("[Saves] Save data deleted and game state reset")
        self._emit(EventType.SAVE_DELETED, key=self.save_key)
        self._emit(EventType.VIEW_REFRESH_REQUESTED, reason="delete")
        return True

    def _default_reset(self) -> None:
        self.world.genesis()
        self.ledger.reset(Config.STARTING_COINS)

    # -- export / import -----------------------------------------------------

    def export_bytes(self, snapshot: Optional[WorldSnapshot] = None) -> bytes:
        """The same JSON a save writes, as UTF-8 bytes."""
        return encode_snapshot(snapshot or self.snapshot()).encode("utf-8")

    async def export_to_file(self, directory: Path | str) -> Optional[Path]:
        """Write the current world to ``directory/farming-game-save-<date>.json``."""
        snapshot = self.snapshot()
        path = Path(directory) / export_filename(snapshot.timestamp)
        data = self.export_bytes(snapshot)

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)

        try:
            await asyncio.to_thread(_write)
        except OSError as exc:
            log_error(f"[Saves] Failed to export save data: {exc}")
            return None

        log_success(f"[Saves] Save data exported to {path}")
        return path

    async def import_bytes(self, data: bytes | str) -> LoadResult:
        """Validate an exported save, store it under the fixed key, then load it."""
        async with self._lock:
            try:
                snapshot = decode_snapshot(data)
                await self.storage.write(self.save_key, encode_snapshot(snapshot))
            except PersistenceError as exc:
                log_error(f"[Saves] Failed to import save data: {exc}")
                return LoadResult(LoadStatus.FAILED, message=str(exc))

            result = await self._load_unlocked()

        if result.success:
            self._emit(EventType.SAVE_IMPORTED, key=self.save_key, version=snapshot.version)
        return result

    async def import_file(self, path: Path | str) -> LoadResult:
        try:
            data = await asyncio.to_thread(Path(path).read_bytes)
        except OSError as exc:
            log_error(f"[Saves] Failed to read file {path}: {exc}")
            return LoadResult(LoadStatus.FAILED, message=str(exc))
        return await self.import_bytes(data)
