"""
Quest session - owns the quest engine for one player session.

The session constructs every collaborator, wires them together and
defines the lifecycle boundary:

    session = QuestSession(storage=JsonFileStorage("saves/player.json"))
    session.start()                 # load, rotate if due, fill
    session.tracker.start_match()
    ...
    session.update(dt)              # periodic refresh check
    session.shutdown()              # final save, detach handlers
"""

from __future__ import annotations

import logging
import random
from datetime import datetime
from typing import Callable

from questengine.core.events import EventBus
from questengine.economy.wallet import CurrencyWallet
from questengine.errors import QuestError
from questengine.progression.config import QuestConfig
from questengine.progression.manager import QuestManager
from questengine.progression.refresh import RefreshResult, RefreshScheduler
from questengine.resources.catalog import QuestCatalog
from questengine.save.manager import LoadResult, QuestSaveManager
from questengine.save.storage import MemoryStorage, Storage
from questengine.tracking.match import MatchTracker

logger = logging.getLogger(__name__)


class QuestSession:
    """
    Owner of the quest engine instances.

    Nothing here is a process-wide singleton: create one session per
    player, call start() before use and shutdown() when done.
    """

    def __init__(
        self,
        catalog: QuestCatalog | None = None,
        config: QuestConfig | None = None,
        storage: Storage | None = None,
        event_bus: EventBus | None = None,
        now: Callable[[], datetime] = datetime.now,
        rng: random.Random | None = None,
    ):
        self.config = config or QuestConfig()
        self.event_bus = event_bus or EventBus()
        self.catalog = catalog if catalog is not None else QuestCatalog.load()
        self.storage = storage if storage is not None else MemoryStorage()

        self.save_manager = QuestSaveManager(self.storage, self.event_bus, now=now)
        self.wallet = CurrencyWallet(
            starting_coins=self.config.starting_coins,
            storage=self.storage,
            event_bus=self.event_bus,
        )
        self.manager = QuestManager(
            self.catalog,
            config=self.config,
            event_bus=self.event_bus,
            reward_sink=self.wallet,
            now=now,
        )
        self.scheduler = RefreshScheduler(self.manager, rng=rng)
        self.tracker = MatchTracker(self.manager)

        self._running = False
        self._check_timer = 0.0
        self.last_load: LoadResult | None = None

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Load saved state, rotate anything due and fill the active set."""
        if self._running:
            return

        if self.config.debug_mode:
            logging.getLogger("questengine").setLevel(logging.DEBUG)

        self.last_load = self.save_manager.load()
        if self.last_load.clock is not None:
            self.scheduler.clock = self.last_load.clock

        overflow = self.manager.store.replace_all(self.last_load.records)
        if overflow:
            logger.warning(f"Active set over its bound, dropped: {', '.join(overflow)}")

        self.manager.set_persistence(self.save)
        self._running = True
        self._check_timer = 0.0

        self.scheduler.check_for_refresh()
        self.scheduler.fill_active_set()

        logger.info(f"Quest session started with {len(self.manager.store)} active quests")

    def shutdown(self) -> None:
        """Save and release the session's handlers."""
        if not self._running:
            return

        self.save()
        self.manager.set_persistence(None)
        self.tracker.stats = None
        self.event_bus.clear()
        self._running = False
        logger.info("Quest session shut down")

    def __enter__(self) -> QuestSession:
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    def save(self) -> bool:
        """Persist the active set and the refresh clock."""
        return self.save_manager.save(self.manager.store, self.scheduler.clock)

    def update(self, dt: float) -> RefreshResult | None:
        """
        Advance the refresh timer (call each tick).

        Returns:
            The refresh result when a check ran, else None
        """
        if not self._running:
            return None

        self._check_timer += dt
        if self._check_timer < self.config.refresh_check_interval:
            return None

        self._check_timer = 0.0
        return self.scheduler.check_for_refresh()

    # Player actions

    def claim_reward(self, quest_id: str) -> bool:
        """Claim a reward, logging instead of raising on failure."""
        try:
            return bool(self.manager.claim_reward(quest_id))
        except QuestError as e:
            logger.warning(f"Claim rejected: {e}")
            return False

    def add_quest(self, quest_id: str) -> bool:
        """Activate a quest, logging instead of raising on failure."""
        try:
            return bool(self.manager.add_quest(quest_id))
        except QuestError as e:
            logger.warning(f"Add rejected: {e}")
            return False

    # Manual controls

    def force_refresh(self) -> RefreshResult:
        """Drop and repopulate the whole active set."""
        return self.scheduler.force_refresh_all()

    def complete_all(self) -> list[str]:
        """Debug: complete every active quest."""
        return self.manager.debug_complete_all()

    def claim_all_completed(self) -> int:
        """Debug: claim every completed quest. Returns coins credited."""
        return self.manager.debug_claim_all()
