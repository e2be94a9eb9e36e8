"""
Quest manager - objective matching, completion and reward claims.
"""

from __future__ import annotations

import logging
from collections import deque
from datetime import datetime
from enum import Enum
from functools import partial
from typing import TYPE_CHECKING, Any, Callable, Mapping

from questengine.core.events import EventBus, QuestEvent
from questengine.errors import (
    ActiveSetFullError,
    NotClaimableError,
    QuestError,
    QuestNotFoundError,
)
from questengine.progression.config import QuestConfig
from questengine.progression.objectives import (
    NO_CONTEXT,
    TAG_SET_OBJECTIVES,
    ObjectiveContext,
    Tag,
    is_eligible,
)
from questengine.progression.progress import QuestProgress
from questengine.progression.quests import ObjectiveType, QuestDefinition
from questengine.progression.store import ProgressStore

if TYPE_CHECKING:
    from questengine.resources.catalog import QuestCatalog

logger = logging.getLogger(__name__)


class QuestManager:
    """
    Tracks progress of the active quests.

    The manager is the only owner of the progress store. Every mutating
    operation runs to completion before the next one starts: calls made
    from notification handlers are deferred until the current operation
    has applied, persisted and published.

    Usage:
        manager = QuestManager(catalog, event_bus=bus, reward_sink=wallet)
        manager.add_quest("Daily_FirstDrop")
        manager.record_objective(ObjectiveType.PLAY_MATCHES)
        manager.claim_reward("Daily_FirstDrop")

    The reward sink is any object with an ``add_coins(amount)`` method.
    """

    def __init__(
        self,
        catalog: QuestCatalog,
        config: QuestConfig | None = None,
        event_bus: EventBus | None = None,
        reward_sink: Any = None,
        now: Callable[[], datetime] = datetime.now,
    ):
        self.catalog = catalog
        self.config = config or QuestConfig()
        self.event_bus = event_bus or EventBus()
        self.reward_sink = reward_sink
        self.store = ProgressStore(self.config.max_active_quests)

        self._now = now
        self._persist: Callable[[], None] | None = None

        # Exclusive operation state
        self._busy = False
        self._deferred: deque[Callable[[], Any]] = deque()
        self._notifications: list[tuple[Enum, dict[str, Any]]] = []

    def set_persistence(self, callback: Callable[[], None] | None) -> None:
        """Set the callback that writes the store to durable storage."""
        self._persist = callback

    def now(self) -> datetime:
        """Current time from the injected clock."""
        return self._now()

    # Read access

    @property
    def active_quests(self) -> Mapping[str, QuestProgress]:
        """Read-only mapping of quest id -> progress."""
        return self.store.view()

    def get_progress(self, quest_id: str) -> QuestProgress | None:
        return self.store.get(quest_id)

    def get_quest_definition(self, quest_id: str) -> QuestDefinition | None:
        return self.catalog.get(quest_id)

    def is_quest_active(self, quest_id: str) -> bool:
        return quest_id in self.store

    def get_active_quests(self) -> list[tuple[QuestDefinition, QuestProgress]]:
        """Get (definition, progress) pairs for active quests known to the catalog."""
        pairs = []
        for progress in self.store.records():
            definition = self.catalog.get(progress.quest_id)
            if definition is not None:
                pairs.append((definition, progress))
        return pairs

    def get_claimable_quests(self) -> list[str]:
        """Get ids of completed quests with an unclaimed reward."""
        return [p.quest_id for p in self.store.records() if p.is_claimable]

    # Objective events

    def record_objective(
        self,
        objective_type: ObjectiveType,
        amount: int = 1,
        context: ObjectiveContext = NO_CONTEXT,
    ) -> list[str]:
        """
        Apply an objective event to every matching active quest.

        Args:
            objective_type: What happened
            amount: How much progress to add (positive)
            context: Optional typed context checked by eligibility rules

        Returns:
            Ids of quests completed by this event (empty if deferred)
        """
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise ValueError(f"Objective amount must be a positive integer, got {amount!r}")

        result = self.run_exclusive(self._record_objective, objective_type, amount, context)
        return result or []

    def _record_objective(
        self,
        objective_type: ObjectiveType,
        amount: int,
        context: ObjectiveContext,
    ) -> list[str]:
        completed: list[str] = []
        changed = False

        for progress in self.store.records():
            if progress.is_completed:
                continue

            definition = self.catalog.get(progress.quest_id)
            if definition is None or definition.objective_type != objective_type:
                continue

            if not is_eligible(objective_type, context, progress, self.config):
                continue

            tag = None
            if objective_type in TAG_SET_OBJECTIVES and isinstance(context, Tag):
                tag = context.value

            progress.add_progress(amount, tag=tag)
            changed = True

            if progress.current_progress >= definition.target_amount:
                self._complete(definition, progress)
                completed.append(definition.id)
            else:
                logger.debug(
                    f"Quest progress: {definition.name} "
                    f"({progress.current_progress}/{definition.target_amount})"
                )
                self.notify(
                    QuestEvent.QUEST_PROGRESS_UPDATED,
                    definition=definition,
                    progress=progress,
                )

        if changed:
            self.save()

        return completed

    def _complete(self, definition: QuestDefinition, progress: QuestProgress) -> None:
        """Latch completion and queue the notification."""
        if not progress.complete(self.now()):
            return

        progress.current_progress = min(progress.current_progress, definition.target_amount)
        logger.info(f"Quest completed: {definition.name} - Reward: {definition.formatted_reward}")
        self.notify(QuestEvent.QUEST_COMPLETED, definition=definition, progress=progress)

    # Rewards

    def claim_reward(self, quest_id: str) -> int | None:
        """
        Claim the reward of a completed quest.

        Returns:
            Coins credited, or None if the claim was deferred

        Raises:
            NotClaimableError: Quest missing, incomplete, or already claimed
            QuestNotFoundError: Quest is active but unknown to the catalog
        """
        return self.run_exclusive(self._claim_reward, quest_id)

    def _claim_reward(self, quest_id: str) -> int:
        progress = self.store.get(quest_id)
        if progress is None:
            raise NotClaimableError(quest_id, "quest is not active")

        definition = self.catalog.get(quest_id)
        if definition is None:
            logger.warning(f"Cannot claim reward for unknown quest: {quest_id}")
            raise QuestNotFoundError(quest_id)

        if not progress.is_completed:
            raise NotClaimableError(quest_id, "quest is not completed")
        if progress.is_reward_claimed:
            raise NotClaimableError(quest_id, "reward already claimed")

        progress.claim_reward()

        if self.reward_sink is not None:
            self.reward_sink.add_coins(definition.coin_reward)

        logger.info(f"Claimed reward: {definition.formatted_reward} for quest: {definition.name}")
        self.save()
        self.notify(
            QuestEvent.REWARD_CLAIMED,
            definition=definition,
            progress=progress,
            amount=definition.coin_reward,
        )
        return definition.coin_reward

    # Active set

    def add_quest(self, quest_id: str) -> bool | None:
        """
        Activate a catalog quest.

        Returns:
            True if added, False if already active, None if deferred

        Raises:
            QuestNotFoundError: Quest is not in the catalog
            ActiveSetFullError: The active set is at its bound
        """
        return self.run_exclusive(self._add_quest, quest_id)

    def _add_quest(self, quest_id: str) -> bool:
        if quest_id in self.store:
            return False

        definition = self.catalog.get(quest_id)
        if definition is None:
            logger.warning(f"Cannot add unknown quest: {quest_id}")
            raise QuestNotFoundError(quest_id)

        if self.store.is_full:
            logger.warning(
                f"Cannot add quest {definition.name}: Maximum active quests reached"
            )
            raise ActiveSetFullError(quest_id, self.store.max_size)

        self.activate(definition)
        self.save()
        return True

    def activate(self, definition: QuestDefinition) -> QuestProgress | None:
        """Create a fresh record for a quest. Caller holds the operation."""
        progress = QuestProgress(quest_id=definition.id, start_time=self.now())
        if not self.store.add(progress):
            return None

        logger.debug(f"Added quest: {definition.name}")
        self.notify(QuestEvent.QUEST_ADDED, definition=definition, progress=progress)
        return progress

    def deactivate(self, quest_id: str, reason: str) -> QuestProgress | None:
        """Remove a record from the active set. Caller holds the operation."""
        progress = self.store.remove(quest_id)
        if progress is None:
            return None

        logger.debug(f"Removed quest {quest_id} ({reason})")
        self.notify(
            QuestEvent.QUEST_REMOVED,
            definition=self.catalog.get(quest_id),
            progress=progress,
            reason=reason,
        )
        return progress

    # Debug controls

    def debug_complete_all(self) -> list[str]:
        """Complete every active quest known to the catalog."""
        return self.run_exclusive(self._debug_complete_all) or []

    def _debug_complete_all(self) -> list[str]:
        completed = []
        for definition, progress in self.get_active_quests():
            if progress.is_completed:
                continue
            progress.current_progress = definition.target_amount
            self._complete(definition, progress)
            completed.append(definition.id)

        if completed:
            self.save()
        return completed

    def debug_claim_all(self) -> int:
        """Claim every claimable reward. Returns total coins credited."""
        return self.run_exclusive(self._debug_claim_all) or 0

    def _debug_claim_all(self) -> int:
        total = 0
        for quest_id in self.get_claimable_quests():
            try:
                total += self._claim_reward(quest_id)
            except QuestError as e:
                logger.warning(f"Skipped claim: {e}")
        return total

    # Operation plumbing

    def run_exclusive(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """
        Run a store-mutating operation to completion.

        If another operation is in progress (a notification handler called
        back into the engine), the call is queued and None is returned.
        Queued notifications are published once the operation has applied.
        """
        if self._busy:
            self._deferred.append(partial(func, *args, **kwargs))
            logger.debug(f"Deferred {getattr(func, '__name__', func)} until current operation finishes")
            return None

        self._busy = True
        try:
            return func(*args, **kwargs)
        finally:
            try:
                self._flush_notifications()
            finally:
                self._busy = False
            self._drain_deferred()

    def notify(self, event_type: Enum, **data: Any) -> None:
        """Publish now, or after the current operation if one is running."""
        if self._busy:
            self._notifications.append((event_type, data))
        else:
            self.event_bus.publish(event_type, **data)

    def save(self) -> None:
        """Persist the store through the configured callback."""
        if self._persist is not None:
            self._persist()

    def _flush_notifications(self) -> None:
        while self._notifications:
            event_type, data = self._notifications.pop(0)
            self.event_bus.publish(event_type, **data)

    def _drain_deferred(self) -> None:
        while self._deferred and not self._busy:
            call = self._deferred.popleft()
            try:
                self.run_exclusive(call)
            except QuestError as e:
                logger.warning(f"Deferred quest operation failed: {e}")
