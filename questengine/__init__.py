"""
Quest engine - goal tracking, rewards and daily/weekly rotation.

Subpackages:
- core: Event bus
- progression: Quests, objectives, progress, manager, refresh
- resources: Quest catalog loading
- save: Persistence
- economy: Coin wallet
- tracking: Match tracker
"""

from questengine.core import EventBus, Event, QuestEvent, CurrencyEvent, SaveEvent
from questengine.errors import (
    QuestError,
    QuestNotFoundError,
    NotClaimableError,
    ActiveSetFullError,
    CorruptRecordError,
)
from questengine.progression import (
    QuestDefinition,
    QuestType,
    QuestDifficulty,
    ObjectiveType,
    QuestConfig,
    NoContext,
    Placement,
    Distance,
    Flag,
    Tag,
    NO_CONTEXT,
    QuestProgress,
    ProgressStore,
    QuestManager,
    RefreshScheduler,
    RefreshClock,
    RefreshResult,
    RefreshState,
)
from questengine.resources import QuestCatalog
from questengine.save import QuestSaveManager, MemoryStorage, JsonFileStorage
from questengine.economy import CurrencyWallet
from questengine.tracking import MatchTracker
from questengine.session import QuestSession

__version__ = "0.1.0"

__all__ = [
    # Events
    "EventBus",
    "Event",
    "QuestEvent",
    "CurrencyEvent",
    "SaveEvent",
    # Errors
    "QuestError",
    "QuestNotFoundError",
    "NotClaimableError",
    "ActiveSetFullError",
    "CorruptRecordError",
    # Progression
    "QuestDefinition",
    "QuestType",
    "QuestDifficulty",
    "ObjectiveType",
    "QuestConfig",
    "NoContext",
    "Placement",
    "Distance",
    "Flag",
    "Tag",
    "NO_CONTEXT",
    "QuestProgress",
    "ProgressStore",
    "QuestManager",
    "RefreshScheduler",
    "RefreshClock",
    "RefreshResult",
    "RefreshState",
    # Resources
    "QuestCatalog",
    # Save
    "QuestSaveManager",
    "MemoryStorage",
    "JsonFileStorage",
    # Economy
    "CurrencyWallet",
    # Tracking
    "MatchTracker",
    # Session
    "QuestSession",
]
