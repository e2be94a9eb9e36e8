"""
Core module.

Exports:
- EventBus, Event: Event system
- QuestEvent, CurrencyEvent, SaveEvent: Event types
"""

from questengine.core.events import (
    EventBus,
    Event,
    EventHandler,
    QuestEvent,
    CurrencyEvent,
    SaveEvent,
)

__all__ = [
    "EventBus",
    "Event",
    "EventHandler",
    "QuestEvent",
    "CurrencyEvent",
    "SaveEvent",
]
