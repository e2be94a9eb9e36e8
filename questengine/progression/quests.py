"""
Quest definitions - types, objectives, rewards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto


class QuestType(Enum):
    """Quest categories. DAILY and WEEKLY rotate on a schedule."""
    DAILY = auto()
    COMBAT = auto()
    WEEKLY = auto()
    PROGRESSION = auto()
    SPECIAL = auto()


class QuestDifficulty(Enum):
    """Difficulty tier (informational)."""
    EASY = auto()
    MEDIUM = auto()
    HARD = auto()
    EXPERT = auto()


class ObjectiveType(Enum):
    """What kind of gameplay occurrence a quest tracks."""
    PLAY_MATCHES = auto()
    SURVIVE_TIME = auto()
    LOOT_BUILDINGS = auto()
    FINISH_TOP_PERCENT = auto()
    TRAVEL_DISTANCE = auto()
    SURVIVE_STORM_CIRCLES = auto()
    GET_ELIMINATIONS = auto()
    DEAL_DAMAGE = auto()
    CLOSE_RANGE_ELIMINATIONS = auto()
    HEADSHOT_ELIMINATIONS = auto()
    WIN_MATCHES = auto()
    FINISH_TOP_TEN = auto()
    TOTAL_ELIMINATIONS = auto()
    SURVIVE_FINAL_CIRCLE = auto()
    TAKE_STORM_DAMAGE = auto()
    USE_WEAPON_TYPES = auto()
    LAND_IN_LOCATIONS = auto()
    WIN_WITHOUT_STORM_DAMAGE = auto()
    LAND_IN_HIGH_RISK_AREAS = auto()
    USE_HEALING_ITEMS = auto()


# Objective text templates. "{n}" is the target amount.
_OBJECTIVE_TEXT: dict[ObjectiveType, str] = {
    ObjectiveType.PLAY_MATCHES: "Play {n} match(es)",
    ObjectiveType.SURVIVE_TIME: "Survive for 5+ minutes",
    ObjectiveType.LOOT_BUILDINGS: "Loot {n} buildings",
    ObjectiveType.FINISH_TOP_PERCENT: "Finish in top 50%",
    ObjectiveType.TRAVEL_DISTANCE: "Travel 1000+ meters",
    ObjectiveType.SURVIVE_STORM_CIRCLES: "Survive 3+ storm circles",
    ObjectiveType.GET_ELIMINATIONS: "Get {n} elimination(s)",
    ObjectiveType.DEAL_DAMAGE: "Deal 200+ damage",
    ObjectiveType.CLOSE_RANGE_ELIMINATIONS: "Get {n} close-range elimination(s)",
    ObjectiveType.HEADSHOT_ELIMINATIONS: "Get {n} headshot elimination(s)",
    ObjectiveType.WIN_MATCHES: "Win {n} match(es)",
    ObjectiveType.FINISH_TOP_TEN: "Finish top 10 {n} times",
    ObjectiveType.TOTAL_ELIMINATIONS: "Get {n} total eliminations",
    ObjectiveType.SURVIVE_FINAL_CIRCLE: "Survive to final circle {n} times",
    ObjectiveType.TAKE_STORM_DAMAGE: "Take storm damage {n} times",
    ObjectiveType.USE_WEAPON_TYPES: "Use {n} different weapon types",
    ObjectiveType.LAND_IN_LOCATIONS: "Land in {n} different locations",
    ObjectiveType.WIN_WITHOUT_STORM_DAMAGE: "Win without storm damage",
    ObjectiveType.LAND_IN_HIGH_RISK_AREAS: "Land in high-risk areas {n} times",
    ObjectiveType.USE_HEALING_ITEMS: "Use healing items {n} times",
}


def describe_objective(objective_type: ObjectiveType, target_amount: int) -> str:
    """Get a short human-readable objective line."""
    template = _OBJECTIVE_TEXT.get(objective_type, "Complete {n} objectives")
    return template.format(n=target_amount)


@dataclass(frozen=True)
class QuestDefinition:
    """A catalog quest. Never mutated after loading."""
    id: str
    name: str
    quest_type: QuestType
    objective_type: ObjectiveType
    description: str = ""
    difficulty: QuestDifficulty = QuestDifficulty.EASY

    # Objective
    target_amount: int = 1
    objective_description: str = ""

    # Rewards
    coin_reward: int = 25

    # Timing
    has_time_limit: bool = False
    time_limit_hours: float = 0.0

    # Prerequisites (informational, gating happens when content is authored)
    minimum_level: int = 0
    prerequisite_quests: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if self.target_amount < 1:
            raise ValueError(f"Quest {self.id}: target_amount must be positive")
        if self.coin_reward < 0:
            raise ValueError(f"Quest {self.id}: coin_reward must be non-negative")

    @property
    def expires(self) -> bool:
        """Whether records of this quest can expire."""
        return self.has_time_limit and self.time_limit_hours > 0

    @property
    def formatted_reward(self) -> str:
        return f"{self.coin_reward} coins"

    @property
    def objective_text(self) -> str:
        return self.objective_description or describe_objective(
            self.objective_type, self.target_amount
        )
