"""
Quest refresh - daily/weekly rotation, expiry and filling the active set.

Daily quests rotate when the calendar date rolls over, not after a fixed
24 hours. Weekly quests rotate once a full week has elapsed since the
last weekly refresh. Rotation discards the category's records outright,
including completed quests whose reward was never claimed.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum, auto
from typing import TYPE_CHECKING

from questengine.core.events import QuestEvent
from questengine.progression.quests import QuestDefinition, QuestType

if TYPE_CHECKING:
    from questengine.progression.manager import QuestManager

logger = logging.getLogger(__name__)


class RefreshState(Enum):
    """Whether a rotating category has crossed its boundary."""
    PENDING = auto()
    DUE = auto()


@dataclass
class RefreshClock:
    """Timestamps of the last daily and weekly rotations."""
    last_daily_refresh: datetime
    last_weekly_refresh: datetime

    @classmethod
    def default(cls, now: datetime) -> RefreshClock:
        """Clock for a fresh install: both rotations are due immediately."""
        return cls(
            last_daily_refresh=now - timedelta(days=1),
            last_weekly_refresh=now - timedelta(days=7),
        )


@dataclass
class RefreshResult:
    """What a refresh pass changed."""
    rotated: list[QuestType] = field(default_factory=list)
    expired: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    added: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.rotated or self.expired or self.removed or self.added)


class RefreshScheduler:
    """
    Rotates the active quest set on time boundaries.

    Shares the manager's store and runs every pass through the manager's
    exclusive operation, so a refresh never interleaves with objective
    processing.

    Usage:
        scheduler = RefreshScheduler(manager, clock=loaded_clock, rng=random.Random(7))
        scheduler.fill_active_set()      # at startup
        scheduler.check_for_refresh()    # periodically
    """

    ROTATING_TYPES = (QuestType.DAILY, QuestType.WEEKLY)

    def __init__(
        self,
        manager: QuestManager,
        clock: RefreshClock | None = None,
        rng: random.Random | None = None,
    ):
        self.manager = manager
        self.config = manager.config
        self.clock = clock or RefreshClock.default(manager.now())
        self.rng = rng or random.Random()

    # Boundary checks

    def is_daily_due(self, now: datetime | None = None) -> bool:
        now = now or self.manager.now()
        return now.date() > self.clock.last_daily_refresh.date()

    def is_weekly_due(self, now: datetime | None = None) -> bool:
        now = now or self.manager.now()
        interval = timedelta(days=self.config.weekly_refresh_days)
        return now - self.clock.last_weekly_refresh >= interval

    def state_for(self, quest_type: QuestType, now: datetime | None = None) -> RefreshState:
        """
        Get the refresh state of a rotating category.

        Categories without a cadence are always PENDING.
        """
        if quest_type == QuestType.DAILY:
            due = self.config.enable_daily_refresh and self.is_daily_due(now)
        elif quest_type == QuestType.WEEKLY:
            due = self.config.enable_weekly_refresh and self.is_weekly_due(now)
        else:
            due = False
        return RefreshState.DUE if due else RefreshState.PENDING

    # Passes

    def check_for_refresh(self) -> RefreshResult:
        """Expire old quests and rotate any category whose boundary has passed."""
        return self.manager.run_exclusive(self._check_for_refresh) or RefreshResult()

    def _check_for_refresh(self) -> RefreshResult:
        now = self.manager.now()
        result = RefreshResult()
        result.expired = self._remove_expired(now)

        due = [t for t in self.ROTATING_TYPES if self.state_for(t, now) == RefreshState.DUE]
        if due:
            result.removed.extend(self._drop_orphans())

        for quest_type in due:
            removed, added = self._rotate(quest_type)
            result.rotated.append(quest_type)
            result.removed.extend(removed)
            result.added.extend(added)

            if quest_type == QuestType.DAILY:
                self.clock.last_daily_refresh = now
            else:
                self.clock.last_weekly_refresh = now

        if result.changed:
            logger.info(
                f"Quests refreshed ({', '.join(t.name for t in result.rotated) or 'expiry'}). "
                f"Active quests: {len(self.manager.store)}"
            )
            self.manager.save()
            self.manager.notify(QuestEvent.QUESTS_REFRESHED, result=result)

        return result

    def refresh_category(self, quest_type: QuestType) -> RefreshResult:
        """Rotate one category now, regardless of its boundary."""
        return self.manager.run_exclusive(self._refresh_category, quest_type) or RefreshResult()

    def _refresh_category(self, quest_type: QuestType) -> RefreshResult:
        removed, added = self._rotate(quest_type)
        now = self.manager.now()
        if quest_type == QuestType.DAILY:
            self.clock.last_daily_refresh = now
        elif quest_type == QuestType.WEEKLY:
            self.clock.last_weekly_refresh = now

        result = RefreshResult(rotated=[quest_type], removed=removed, added=added)
        self.manager.save()
        self.manager.notify(QuestEvent.QUESTS_REFRESHED, result=result)
        return result

    def _rotate(self, quest_type: QuestType) -> tuple[list[str], list[str]]:
        """Drop every record of a category and draw replacements."""
        removed = []
        for definition, progress in self.manager.get_active_quests():
            if definition.quest_type == quest_type:
                self.manager.deactivate(progress.quest_id, reason="rotated")
                removed.append(progress.quest_id)

        limit = min(self.config.quota_for(quest_type), self.manager.store.free_slots)
        candidates = self._shuffled_candidates(self.manager.catalog.by_type(quest_type))
        added = self._activate_all(candidates[:limit])

        logger.debug(f"Refreshed {quest_type.name} quests: -{len(removed)} +{len(added)}")
        return removed, added

    def remove_expired(self) -> list[str]:
        """Remove records that have outlived their quest's time limit."""
        result = self.manager.run_exclusive(self._expire_and_save)
        return result or []

    def _expire_and_save(self) -> list[str]:
        expired = self._remove_expired(self.manager.now())
        if expired:
            self.manager.save()
        return expired

    def _remove_expired(self, now: datetime) -> list[str]:
        expired = []
        for definition, progress in self.manager.get_active_quests():
            if definition.expires and progress.is_expired(definition.time_limit_hours, now):
                self.manager.deactivate(progress.quest_id, reason="expired")
                expired.append(progress.quest_id)
                logger.info(f"Removed expired quest: {progress.quest_id}")
        return expired

    def fill_active_set(self) -> list[str]:
        """Top up the active set with random inactive catalog quests."""
        return self.manager.run_exclusive(self._fill_and_save) or []

    def _fill_and_save(self) -> list[str]:
        added = self._fill_active_set()
        if added:
            self.manager.save()
        return added

    def _fill_active_set(self) -> list[str]:
        free = self.manager.store.free_slots
        if free <= 0:
            return []

        candidates = self._shuffled_candidates(self.manager.catalog.all())
        return self._activate_all(candidates[:free])

    def refresh_quests(self) -> RefreshResult:
        """Expire old quests, then fill the free slots."""
        return self.manager.run_exclusive(self._refresh_quests) or RefreshResult()

    def _refresh_quests(self) -> RefreshResult:
        result = RefreshResult()
        result.expired = self._remove_expired(self.manager.now())
        result.removed = self._drop_orphans()
        result.added = self._fill_active_set()

        logger.info(f"Quests refreshed. Active quests: {len(self.manager.store)}")
        if result.changed:
            self.manager.save()
        self.manager.notify(QuestEvent.QUESTS_REFRESHED, result=result)
        return result

    def force_refresh_all(self) -> RefreshResult:
        """Drop the entire active set and draw a new one."""
        return self.manager.run_exclusive(self._force_refresh_all) or RefreshResult()

    def _force_refresh_all(self) -> RefreshResult:
        result = RefreshResult()
        for quest_id in self.manager.store.ids():
            self.manager.deactivate(quest_id, reason="force refresh")
            result.removed.append(quest_id)

        result.added = self._fill_active_set()
        logger.info(f"Force refreshed all quests. Active quests: {len(self.manager.store)}")
        self.manager.save()
        self.manager.notify(QuestEvent.QUESTS_REFRESHED, result=result)
        return result

    # Helpers

    def _drop_orphans(self) -> list[str]:
        """Remove loaded records whose quest is no longer in the catalog."""
        orphans = [qid for qid in self.manager.store.ids() if qid not in self.manager.catalog]
        for quest_id in orphans:
            self.manager.deactivate(quest_id, reason="not in catalog")
            logger.info(f"Dropped quest missing from catalog: {quest_id}")
        return orphans

    def _shuffled_candidates(self, definitions: list[QuestDefinition]) -> list[QuestDefinition]:
        candidates = [d for d in definitions if d.id not in self.manager.store]
        self.rng.shuffle(candidates)
        return candidates

    def _activate_all(self, definitions: list[QuestDefinition]) -> list[str]:
        added = []
        for definition in definitions:
            if self.manager.activate(definition) is not None:
                added.append(definition.id)
        return added
