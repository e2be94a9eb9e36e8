"""
Quest save/load - persisting progress records and the refresh clock.

Storage layout (string keys and values):
    Quest_<id>          JSON progress record, one per active quest
    ActiveQuestKeys     JSON list of active quest ids
    LastDailyRefresh    ISO-8601 timestamp
    LastWeeklyRefresh   ISO-8601 timestamp
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Callable

from questengine.core.events import EventBus, SaveEvent
from questengine.errors import CorruptRecordError
from questengine.progression.progress import QuestProgress
from questengine.progression.refresh import RefreshClock
from questengine.save.storage import Storage, StorageError

if TYPE_CHECKING:
    from questengine.progression.store import ProgressStore

logger = logging.getLogger(__name__)

RECORD_KEY_PREFIX = "Quest_"
INDEX_KEY = "ActiveQuestKeys"
DAILY_KEY = "LastDailyRefresh"
WEEKLY_KEY = "LastWeeklyRefresh"


@dataclass
class LoadResult:
    """Outcome of loading persisted quest state."""
    records: list[QuestProgress] = field(default_factory=list)
    clock: RefreshClock | None = None
    dropped: list[str] = field(default_factory=list)


class QuestSaveManager:
    """
    Saves and loads quest state through a key-value storage backend.

    Record entries are written before the index, and the backend commits
    everything in one flush. A record that fails to decode is dropped on
    its own; the rest of the state still loads.

    Usage:
        save_mgr = QuestSaveManager(JsonFileStorage("saves/quests.json"), event_bus)
        save_mgr.save(manager.store, scheduler.clock)
        result = save_mgr.load()
    """

    def __init__(
        self,
        storage: Storage,
        event_bus: EventBus | None = None,
        now: Callable[[], datetime] = datetime.now,
    ):
        self.storage = storage
        self.event_bus = event_bus
        self._now = now

    @staticmethod
    def record_key(quest_id: str) -> str:
        return f"{RECORD_KEY_PREFIX}{quest_id}"

    def save(self, store: ProgressStore, clock: RefreshClock) -> bool:
        """
        Save the active records and the refresh clock.

        Returns:
            True if the write was committed
        """
        try:
            active_ids = store.ids()
            for progress in store.records():
                self.storage.set(
                    self.record_key(progress.quest_id),
                    json.dumps(progress.to_dict(), sort_keys=True),
                )

            # Drop entries of quests that left the active set
            for key in self.storage.keys():
                if key.startswith(RECORD_KEY_PREFIX):
                    if key[len(RECORD_KEY_PREFIX):] not in store:
                        self.storage.delete(key)

            self.storage.set(INDEX_KEY, json.dumps(active_ids))
            self.storage.set(DAILY_KEY, clock.last_daily_refresh.isoformat())
            self.storage.set(WEEKLY_KEY, clock.last_weekly_refresh.isoformat())
            self.storage.flush()

        except StorageError as e:
            logger.error(f"Save failed: {e}")
            self._publish(SaveEvent.SAVE_FAILED, error=str(e))
            return False

        self._publish(SaveEvent.SAVE_COMPLETED, count=len(active_ids))
        return True

    def load(self) -> LoadResult:
        """Load persisted quest state. Never raises for bad data."""
        result = LoadResult(clock=self._load_clock())

        load_error = getattr(self.storage, 'load_error', None)
        if load_error:
            self._publish(SaveEvent.LOAD_FAILED, error=load_error)

        for quest_id in self._load_index():
            raw = self.storage.get(self.record_key(quest_id))
            if raw is None:
                logger.warning(f"Active quest {quest_id} has no saved record, skipping")
                continue

            try:
                result.records.append(decode_record(quest_id, raw))
            except CorruptRecordError as e:
                logger.warning(f"Failed to load quest progress for {quest_id}: {e.detail}")
                result.dropped.append(quest_id)
                self._publish(SaveEvent.RECORD_DROPPED, quest_id=quest_id, error=e.detail)

        logger.info(
            f"Loaded {len(result.records)} quest records"
            + (f" ({len(result.dropped)} dropped)" if result.dropped else "")
        )
        self._publish(
            SaveEvent.LOAD_COMPLETED,
            count=len(result.records),
            dropped=list(result.dropped),
        )
        return result

    def clear(self) -> None:
        """Delete all persisted quest state."""
        for key in self.storage.keys():
            if key.startswith(RECORD_KEY_PREFIX) or key in (INDEX_KEY, DAILY_KEY, WEEKLY_KEY):
                self.storage.delete(key)
        self.storage.flush()

    def _load_index(self) -> list[str]:
        raw = self.storage.get(INDEX_KEY)
        if not raw:
            return []

        try:
            ids = json.loads(raw)
        except json.JSONDecodeError:
            ids = None

        if not isinstance(ids, list):
            # Index is damaged; recover membership from record keys
            logger.warning("Active quest index is corrupt, rebuilding from records")
            return [
                key[len(RECORD_KEY_PREFIX):]
                for key in self.storage.keys()
                if key.startswith(RECORD_KEY_PREFIX)
            ]

        seen: list[str] = []
        for quest_id in ids:
            if isinstance(quest_id, str) and quest_id and quest_id not in seen:
                seen.append(quest_id)
        return seen

    def _load_clock(self) -> RefreshClock:
        default = RefreshClock.default(self._now())
        return RefreshClock(
            last_daily_refresh=self._load_timestamp(DAILY_KEY, default.last_daily_refresh),
            last_weekly_refresh=self._load_timestamp(WEEKLY_KEY, default.last_weekly_refresh),
        )

    def _load_timestamp(self, key: str, default: datetime) -> datetime:
        raw = self.storage.get(key)
        if not raw:
            return default
        try:
            value = datetime.fromisoformat(raw)
        except ValueError:
            logger.warning(f"Unreadable timestamp for {key}: {raw!r}, using default")
            return default

        if value.tzinfo is not None:
            logger.warning(f"Timestamp for {key} is not naive local time: {raw!r}, using default")
            return default
        return value

    def _publish(self, event_type: SaveEvent, **data) -> None:
        if self.event_bus:
            self.event_bus.publish(event_type, **data)


def decode_record(quest_id: str, raw: str) -> QuestProgress:
    """
    Decode one stored record.

    Raises:
        CorruptRecordError: If the payload is not a valid record for quest_id
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise CorruptRecordError(quest_id, f"invalid JSON: {e.msg}") from e

    return QuestProgress.from_dict(data, quest_id=quest_id)
