"""
Quest engine errors.

All of these are recoverable. None of them should end a session.
"""


class QuestError(Exception):
    """Base class for quest engine errors."""


class QuestNotFoundError(QuestError, KeyError):
    """A quest id is not in the catalog."""

    def __init__(self, quest_id: str):
        super().__init__(quest_id)
        self.quest_id = quest_id

    def __str__(self) -> str:
        return f"Quest not found in catalog: {self.quest_id}"


class NotClaimableError(QuestError, ValueError):
    """Reward claim on a missing, incomplete or already claimed quest."""

    def __init__(self, quest_id: str, reason: str):
        super().__init__(f"Quest {quest_id} is not claimable: {reason}")
        self.quest_id = quest_id
        self.reason = reason


class ActiveSetFullError(QuestError, RuntimeError):
    """The active quest set is at its bound."""

    def __init__(self, quest_id: str, limit: int):
        super().__init__(f"Cannot add quest {quest_id}: maximum of {limit} active quests reached")
        self.quest_id = quest_id
        self.limit = limit


class CorruptRecordError(QuestError, ValueError):
    """A persisted progress record could not be decoded."""

    def __init__(self, quest_id: str, detail: str):
        super().__init__(f"Corrupt progress record for {quest_id}: {detail}")
        self.quest_id = quest_id
        self.detail = detail
