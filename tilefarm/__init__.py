"""
Tilefarm - tile-based farm world engine.

Sparse tile and area storage, time-derived crop growth, adjacency-gated
area unlocking and versioned JSON saves with auto-save.

No renderer and no input handling. All collaborators (storage, clock,
ledger, notifier) are injected; ``FarmSession`` wires the defaults.
"""

__version__ = "0.1.0"

# Main entry point
from .session import FarmSession

# Player actions and rules
from .actions import FarmActions
from .areas import (
    AreaPricing,
    AreaStats,
    AreaUnlockPolicy,
    ConsistencyReport,
    DistancePricing,
    PurchasableArea,
)
from .growth import CropAdvance, GrowthScheduler
from .results import ActionResult, FailureReason

# Crop definitions and prices
from .catalog import DEFAULT_CATALOG, DEFAULT_PRICES, CropCatalog, CropSpec, PriceList

# Collaborator contracts
from .clock import Clock, ManualClock, SystemClock
from .events import EventBus, EventType, GameEvent, Notifier, NullNotifier
from .ledger import CoinLedger, Ledger, LedgerEntry

# Persistence
from .persistence import (
    InMemoryStorage,
    JsonFileStorage,
    PersistenceError,
    SaveFormatError,
    SaveStorage,
    StorageUnavailableError,
)
from .saves import SAVE_FORMAT_VERSION, LoadResult, LoadStatus, SaveManager
from .autosave import AutoSaveScheduler

# Core schemas
from .schemas import (
    AreaData,
    BareTile,
    CropInstance,
    CropType,
    GameViewState,
    RoadTile,
    SaveInfo,
    SoilTile,
    TerrainKind,
    WorldSnapshot,
)
from .world import FarmWorld, SpatialStore

__all__ = [
    # Main class
    "FarmSession",
    # Actions and rules
    "FarmActions",
    "AreaPricing",
    "AreaStats",
    "AreaUnlockPolicy",
    "ConsistencyReport",
    "DistancePricing",
    "PurchasableArea",
    "CropAdvance",
    "GrowthScheduler",
    "ActionResult",
    "FailureReason",
    # Catalog
    "DEFAULT_CATALOG",
    "DEFAULT_PRICES",
    "CropCatalog",
    "CropSpec",
    "PriceList",
    # Collaborators
    "Clock",
    "ManualClock",
    "SystemClock",
    "EventBus",
    "EventType",
    "GameEvent",
    "Notifier",
    "NullNotifier",
    "CoinLedger",
    "Ledger",
    "LedgerEntry",
    # Persistence
    "InMemoryStorage",
    "JsonFileStorage",
    "PersistenceError",
    "SaveFormatError",
    "SaveStorage",
    "StorageUnavailableError",
    "SAVE_FORMAT_VERSION",
    "LoadResult",
    "LoadStatus",
    "SaveManager",
    "AutoSaveScheduler",
    # Schemas
    "AreaData",
    "BareTile",
    "CropInstance",
    "CropType",
    "GameViewState",
    "RoadTile",
    "SaveInfo",
    "SoilTile",
    "TerrainKind",
    "WorldSnapshot",
    "FarmWorld",
    "SpatialStore",
]
