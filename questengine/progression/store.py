"""
Active quest store.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterator, Mapping

from questengine.progression.progress import QuestProgress


class ProgressStore:
    """
    Bounded mapping of quest id -> progress record.

    A quest is active exactly when it has a record here.
    """

    def __init__(self, max_size: int = 10):
        self.max_size = max_size
        self._records: dict[str, QuestProgress] = {}

    def __contains__(self, quest_id: object) -> bool:
        return quest_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    @property
    def is_full(self) -> bool:
        return len(self._records) >= self.max_size

    @property
    def free_slots(self) -> int:
        return max(0, self.max_size - len(self._records))

    def view(self) -> Mapping[str, QuestProgress]:
        """Read-only view of the records."""
        return MappingProxyType(self._records)

    def get(self, quest_id: str) -> QuestProgress | None:
        return self._records.get(quest_id)

    def ids(self) -> list[str]:
        return list(self._records)

    def records(self) -> list[QuestProgress]:
        return list(self._records.values())

    def add(self, progress: QuestProgress) -> bool:
        """
        Add a record.

        Returns:
            False if the quest is already active or the store is full
        """
        if progress.quest_id in self._records or self.is_full:
            return False
        self._records[progress.quest_id] = progress
        return True

    def remove(self, quest_id: str) -> QuestProgress | None:
        return self._records.pop(quest_id, None)

    def clear(self) -> None:
        self._records.clear()

    def replace_all(self, records: list[QuestProgress]) -> list[str]:
        """
        Replace contents with loaded records, up to the bound.

        Returns:
            Ids that did not fit
        """
        self._records.clear()
        overflow = []
        for progress in records:
            if not self.add(progress):
                overflow.append(progress.quest_id)
        return overflow
