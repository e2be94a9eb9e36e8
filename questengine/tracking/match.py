"""
Match tracker - turns match occurrences into objective events.

The tracker keeps per-match tallies and converts continuous quantities
(damage, distance, storm circles) into single threshold-crossing events,
so the quest manager only has to count.

Usage:
    tracker = MatchTracker(manager)
    tracker.start_match()
    tracker.on_elimination("Rifle", is_headshot=True, distance=6.0)
    tracker.on_damage_dealt(250)
    tracker.end_match(placement=3, total_players=100, is_victory=False)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Callable

from questengine.progression.objectives import (
    NO_CONTEXT,
    Distance,
    Flag,
    ObjectiveContext,
    Placement,
    Tag,
)
from questengine.progression.quests import ObjectiveType

if TYPE_CHECKING:
    from questengine.progression.manager import QuestManager

logger = logging.getLogger(__name__)

# Thresholds
SURVIVE_TIME_SECONDS = 300.0
DAMAGE_THRESHOLD = 200.0
DISTANCE_THRESHOLD = 1000.0
STORM_CIRCLE_THRESHOLD = 3
TOP_TEN_PLACEMENT = 10
FINAL_CIRCLE_FRACTION = 0.1

# Per-step movement outside this range is noise or a teleport
MIN_STEP_DISTANCE = 0.1
MAX_STEP_DISTANCE = 50.0


@dataclass
class MatchStats:
    """Tallies for the current match."""
    start_time: datetime
    eliminations: int = 0
    damage_dealt: float = 0.0
    distance_traveled: float = 0.0
    storm_circle: int = 0
    buildings_looted: int = 0
    healing_items_used: int = 0
    took_storm_damage: bool = False
    weapon_types: list[str] = field(default_factory=list)
    locations: list[str] = field(default_factory=list)

    # Crossings already signalled this match
    damage_signalled: bool = False
    distance_signalled: bool = False
    storm_circles_signalled: bool = False


class MatchTracker:
    """Feeds a quest manager from match lifecycle callbacks."""

    def __init__(
        self,
        manager: QuestManager,
        enabled: bool = True,
        now: Callable[[], datetime] | None = None,
    ):
        self.manager = manager
        self.enabled = enabled
        self._now = now or manager.now
        self.stats: MatchStats | None = None

    @property
    def in_match(self) -> bool:
        return self.stats is not None

    def _tracking(self) -> bool:
        return self.enabled and self.stats is not None

    def _record(
        self,
        objective_type: ObjectiveType,
        amount: int = 1,
        context: ObjectiveContext = NO_CONTEXT,
    ) -> None:
        self.manager.record_objective(objective_type, amount, context)

    # Lifecycle

    def start_match(self) -> None:
        if not self.enabled:
            return

        self.stats = MatchStats(start_time=self._now())
        self._record(ObjectiveType.PLAY_MATCHES)
        logger.debug("Match started - quest tracking enabled")

    def end_match(self, placement: int, total_players: int, is_victory: bool) -> None:
        """Emit the derived match-end objectives."""
        if not self._tracking():
            return

        stats = self.stats
        self.stats = None

        survival = (self._now() - stats.start_time).total_seconds()
        if survival >= SURVIVE_TIME_SECONDS:
            self._record(ObjectiveType.SURVIVE_TIME)

        result = Placement(placement, total_players)
        fraction = result.fraction
        if fraction is not None:
            self._record(ObjectiveType.FINISH_TOP_PERCENT, context=result)
            if fraction <= FINAL_CIRCLE_FRACTION:
                self._record(ObjectiveType.SURVIVE_FINAL_CIRCLE)

        if 0 < placement <= TOP_TEN_PLACEMENT:
            self._record(ObjectiveType.FINISH_TOP_TEN)

        if is_victory:
            self._record(ObjectiveType.WIN_MATCHES)
            if not stats.took_storm_damage:
                self._record(ObjectiveType.WIN_WITHOUT_STORM_DAMAGE)

        if stats.eliminations > 0:
            self._record(ObjectiveType.TOTAL_ELIMINATIONS, stats.eliminations)

        for weapon_type in stats.weapon_types:
            self._record(ObjectiveType.USE_WEAPON_TYPES, context=Tag(weapon_type))

        for location in stats.locations:
            self._record(ObjectiveType.LAND_IN_LOCATIONS, context=Tag(location))

        logger.debug(
            f"Match ended - Placement: {placement}/{total_players}, Victory: {is_victory}, "
            f"Eliminations: {stats.eliminations}, Distance: {stats.distance_traveled:.1f}m, "
            f"Damage: {stats.damage_dealt:.1f}"
        )

    # Combat

    def on_elimination(
        self,
        weapon_type: str = "",
        is_headshot: bool = False,
        distance: float | None = None,
    ) -> None:
        if not self._tracking():
            return

        self.stats.eliminations += 1
        self._record(ObjectiveType.GET_ELIMINATIONS)

        if is_headshot:
            self._record(ObjectiveType.HEADSHOT_ELIMINATIONS, context=Flag(True))

        if distance is not None:
            self._record(ObjectiveType.CLOSE_RANGE_ELIMINATIONS, context=Distance(distance))

        if weapon_type and weapon_type not in self.stats.weapon_types:
            self.stats.weapon_types.append(weapon_type)

    def on_damage_dealt(self, damage: float) -> None:
        if not self._tracking() or damage <= 0:
            return

        self.stats.damage_dealt += damage
        if not self.stats.damage_signalled and self.stats.damage_dealt >= DAMAGE_THRESHOLD:
            self.stats.damage_signalled = True
            self._record(ObjectiveType.DEAL_DAMAGE)

    # World

    def on_building_looted(self) -> None:
        if not self._tracking():
            return

        self.stats.buildings_looted += 1
        self._record(ObjectiveType.LOOT_BUILDINGS)

    def on_location_entered(self, location_name: str, is_high_risk: bool = False) -> None:
        if not self._tracking() or not location_name:
            return
        if location_name in self.stats.locations:
            return

        self.stats.locations.append(location_name)
        if is_high_risk:
            self._record(ObjectiveType.LAND_IN_HIGH_RISK_AREAS, context=Tag(location_name))

    def on_distance_traveled(self, meters: float) -> None:
        """Add one movement step."""
        if not self._tracking():
            return
        if not MIN_STEP_DISTANCE < meters < MAX_STEP_DISTANCE:
            return

        self.stats.distance_traveled += meters
        if not self.stats.distance_signalled and self.stats.distance_traveled >= DISTANCE_THRESHOLD:
            self.stats.distance_signalled = True
            self._record(ObjectiveType.TRAVEL_DISTANCE)

    # Storm

    def on_storm_circle(self, circle_number: int) -> None:
        if not self._tracking():
            return

        self.stats.storm_circle = circle_number
        if not self.stats.storm_circles_signalled and circle_number >= STORM_CIRCLE_THRESHOLD:
            self.stats.storm_circles_signalled = True
            self._record(ObjectiveType.SURVIVE_STORM_CIRCLES)

    def on_storm_damage(self, damage: float) -> None:
        if not self._tracking() or self.stats.took_storm_damage:
            return

        self.stats.took_storm_damage = True
        self._record(ObjectiveType.TAKE_STORM_DAMAGE)
        logger.debug(f"Storm damage taken: {damage:.1f}")

    # Items

    def on_healing_item_used(self, item_type: str = "") -> None:
        if not self._tracking():
            return

        self.stats.healing_items_used += 1
        self._record(ObjectiveType.USE_HEALING_ITEMS)
