"""
Objective contexts and eligibility rules.

An objective event carries at most one typed context. Each context is a
small frozen dataclass, so a rule can check the type it expects and treat
anything else as ineligible:

    manager.record_objective(ObjectiveType.PLAY_MATCHES)
    manager.record_objective(ObjectiveType.FINISH_TOP_PERCENT, context=Placement(5, 100))
    manager.record_objective(ObjectiveType.CLOSE_RANGE_ELIMINATIONS, context=Distance(4.5))
    manager.record_objective(ObjectiveType.HEADSHOT_ELIMINATIONS, context=Flag(True))
    manager.record_objective(ObjectiveType.USE_WEAPON_TYPES, context=Tag("Rifle"))
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from questengine.progression.quests import ObjectiveType

if TYPE_CHECKING:
    from questengine.progression.config import QuestConfig
    from questengine.progression.progress import QuestProgress


@dataclass(frozen=True)
class NoContext:
    """The event carries no extra data."""


@dataclass(frozen=True)
class Placement:
    """Final placement out of the number of entrants."""
    place: int
    total_entrants: int

    @property
    def fraction(self) -> float | None:
        if self.total_entrants <= 0 or self.place <= 0:
            return None
        return self.place / self.total_entrants


@dataclass(frozen=True)
class Distance:
    """Distance in meters."""
    meters: float


@dataclass(frozen=True)
class Flag:
    value: bool


@dataclass(frozen=True)
class Tag:
    """A weapon type, location name, or other label."""
    value: str


ObjectiveContext = Union[NoContext, Placement, Distance, Flag, Tag]

NO_CONTEXT = NoContext()

# Kinds that count each distinct tag once per quest
TAG_SET_OBJECTIVES = frozenset({
    ObjectiveType.USE_WEAPON_TYPES,
    ObjectiveType.LAND_IN_LOCATIONS,
})


def is_high_risk_area(location: str, high_risk_areas: tuple[str, ...]) -> bool:
    """Check a location name against the high-risk list (substring match)."""
    return any(area in location for area in high_risk_areas)


def is_eligible(
    objective_type: ObjectiveType,
    context: ObjectiveContext,
    progress: QuestProgress,
    config: QuestConfig,
) -> bool:
    """
    Decide whether an event counts toward a quest.

    Args:
        objective_type: The quest's objective kind
        context: Context attached to the event
        progress: The quest's progress record (for already-recorded tags)
        config: Thresholds and high-risk area names

    Returns:
        True if progress should be added
    """
    if objective_type == ObjectiveType.FINISH_TOP_PERCENT:
        if not isinstance(context, Placement):
            return False
        fraction = context.fraction
        return fraction is not None and fraction <= config.top_percent_threshold

    if objective_type == ObjectiveType.CLOSE_RANGE_ELIMINATIONS:
        return (
            isinstance(context, Distance)
            and 0 <= context.meters <= config.close_range_distance
        )

    if objective_type == ObjectiveType.HEADSHOT_ELIMINATIONS:
        return isinstance(context, Flag) and context.value

    if objective_type == ObjectiveType.LAND_IN_HIGH_RISK_AREAS:
        return isinstance(context, Tag) and is_high_risk_area(
            context.value, config.high_risk_areas
        )

    if objective_type in TAG_SET_OBJECTIVES:
        return (
            isinstance(context, Tag)
            and bool(context.value)
            and context.value not in progress.recorded_tags
        )

    return True
