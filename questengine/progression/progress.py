"""
Quest progress records.

A record moves one way only:

    in progress -> completed -> reward claimed

Completion and claim are latched. Nothing resets them short of removing
the record from the active set.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

import jsonschema

from questengine.errors import CorruptRecordError


# Shape of a serialized record
PROGRESS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["quest_id", "current_progress", "is_completed", "is_reward_claimed", "start_time"],
    "properties": {
        "quest_id": {"type": "string", "minLength": 1},
        "current_progress": {"type": "integer", "minimum": 0},
        "is_completed": {"type": "boolean"},
        "is_reward_claimed": {"type": "boolean"},
        "start_time": {"type": "string"},
        "completion_time": {"type": ["string", "null"]},
        "recorded_tags": {"type": "array", "items": {"type": "string"}},
    },
}


@dataclass
class QuestProgress:
    """Mutable progress for one active quest."""
    quest_id: str
    start_time: datetime
    current_progress: int = 0
    is_completed: bool = False
    is_reward_claimed: bool = False
    completion_time: datetime | None = None

    # Weapon types / locations already counted toward this quest
    recorded_tags: set[str] = field(default_factory=set)

    def progress_fraction(self, target_amount: int) -> float:
        """Get progress as a 0..1 fraction."""
        if target_amount <= 0:
            return 1.0
        return max(0.0, min(1.0, self.current_progress / target_amount))

    def add_progress(self, amount: int = 1, tag: str | None = None) -> bool:
        """
        Add progress unless already completed.

        Returns:
            True if progress was added
        """
        if self.is_completed:
            return False

        self.current_progress += amount
        if tag:
            self.recorded_tags.add(tag)
        return True

    def complete(self, now: datetime) -> bool:
        """
        Latch completion.

        Returns:
            True if this call completed the record
        """
        if self.is_completed:
            return False

        self.is_completed = True
        self.completion_time = now
        return True

    def claim_reward(self) -> bool:
        """
        Latch the reward claim.

        Returns:
            True if this call claimed the reward
        """
        if not self.is_completed or self.is_reward_claimed:
            return False

        self.is_reward_claimed = True
        return True

    @property
    def is_claimable(self) -> bool:
        return self.is_completed and not self.is_reward_claimed

    def time_remaining(self, time_limit_hours: float, now: datetime) -> timedelta | None:
        """Get time left before expiry, or None if there is no limit."""
        if time_limit_hours <= 0:
            return None
        return timedelta(hours=time_limit_hours) - (now - self.start_time)

    def is_expired(self, time_limit_hours: float, now: datetime) -> bool:
        """Check whether the record has outlived its time limit."""
        remaining = self.time_remaining(time_limit_hours, now)
        return remaining is not None and remaining < timedelta(0)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to plain JSON-compatible data."""
        return {
            'quest_id': self.quest_id,
            'current_progress': self.current_progress,
            'is_completed': self.is_completed,
            'is_reward_claimed': self.is_reward_claimed,
            'start_time': self.start_time.isoformat(),
            'completion_time': self.completion_time.isoformat() if self.completion_time else None,
            'recorded_tags': sorted(self.recorded_tags),
        }

    @classmethod
    def from_dict(cls, data: Any, quest_id: str | None = None) -> QuestProgress:
        """
        Deserialize a record.

        Args:
            data: Serialized record
            quest_id: Expected id (checked against the payload if given)

        Raises:
            CorruptRecordError: If the payload is malformed
        """
        label = quest_id or "<unknown>"
        try:
            jsonschema.validate(instance=data, schema=PROGRESS_SCHEMA)
        except jsonschema.ValidationError as e:
            raise CorruptRecordError(label, e.message) from e

        if quest_id is not None and data['quest_id'] != quest_id:
            raise CorruptRecordError(label, f"payload belongs to {data['quest_id']}")

        try:
            start_time = datetime.fromisoformat(data['start_time'])
            completion_raw = data.get('completion_time')
            completion_time = datetime.fromisoformat(completion_raw) if completion_raw else None
        except ValueError as e:
            raise CorruptRecordError(label, f"bad timestamp: {e}") from e

        if start_time.tzinfo is not None or (completion_time and completion_time.tzinfo is not None):
            raise CorruptRecordError(label, "timestamps must be naive local time")

        if data['is_reward_claimed'] and not data['is_completed']:
            raise CorruptRecordError(label, "reward claimed on an incomplete quest")

        return cls(
            quest_id=data['quest_id'],
            start_time=start_time,
            current_progress=data['current_progress'],
            is_completed=data['is_completed'],
            is_reward_claimed=data['is_reward_claimed'],
            completion_time=completion_time,
            recorded_tags=set(data.get('recorded_tags', [])),
        )


def format_time_remaining(remaining: timedelta | None) -> str:
    """Format time left for display ("2d 3h", "4h 10m", "12m")."""
    if remaining is None:
        return "No time limit"

    total_seconds = int(remaining.total_seconds())
    if total_seconds <= 0:
        return "Expired"

    days, rest = divmod(total_seconds, 86400)
    hours, rest = divmod(rest, 3600)
    minutes = rest // 60

    if days >= 1:
        return f"{days}d {hours}h"
    if hours >= 1:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"
