"""
Progression module - quests, objectives, progress, refresh.

Provides:
- Quest definitions and objective kinds
- Typed objective contexts and eligibility rules
- Progress records and the bounded active store
- Quest manager (objective matching, completion, claims)
- Refresh scheduler (daily/weekly rotation, expiry, fill)
"""

from questengine.progression.quests import (
    QuestDefinition,
    QuestType,
    QuestDifficulty,
    ObjectiveType,
    describe_objective,
)
from questengine.progression.config import QuestConfig
from questengine.progression.objectives import (
    ObjectiveContext,
    NoContext,
    Placement,
    Distance,
    Flag,
    Tag,
    NO_CONTEXT,
    is_eligible,
)
from questengine.progression.progress import QuestProgress, format_time_remaining
from questengine.progression.store import ProgressStore
from questengine.progression.manager import QuestManager
from questengine.progression.refresh import (
    RefreshScheduler,
    RefreshClock,
    RefreshResult,
    RefreshState,
)

__all__ = [
    # Quests
    "QuestDefinition",
    "QuestType",
    "QuestDifficulty",
    "ObjectiveType",
    "describe_objective",
    # Config
    "QuestConfig",
    # Objectives
    "ObjectiveContext",
    "NoContext",
    "Placement",
    "Distance",
    "Flag",
    "Tag",
    "NO_CONTEXT",
    "is_eligible",
    # Progress
    "QuestProgress",
    "format_time_remaining",
    "ProgressStore",
    # Manager
    "QuestManager",
    # Refresh
    "RefreshScheduler",
    "RefreshClock",
    "RefreshResult",
    "RefreshState",
]
