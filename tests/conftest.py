import os
import sys
import random
from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest

# Ensure questengine can be imported without installing
sys.path.append(os.getcwd())

from questengine.core.events import EventBus, QuestEvent
from questengine.economy.wallet import CurrencyWallet
from questengine.progression.config import QuestConfig
from questengine.progression.manager import QuestManager
from questengine.progression.quests import (
    ObjectiveType,
    QuestDefinition,
    QuestDifficulty,
    QuestType,
)
from questengine.progression.refresh import RefreshClock, RefreshScheduler
from questengine.resources.catalog import QuestCatalog
from questengine.save.storage import MemoryStorage


class ManualClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current += timedelta(**kwargs)
        return self.current

    def set(self, value: datetime) -> None:
        self.current = value


def make_quest(quest_id, quest_type, objective_type, target=1, reward=25, hours=0.0):
    return QuestDefinition(
        id=quest_id,
        name=quest_id.replace("_", " ").title(),
        quest_type=quest_type,
        objective_type=objective_type,
        difficulty=QuestDifficulty.EASY,
        target_amount=target,
        coin_reward=reward,
        has_time_limit=hours > 0,
        time_limit_hours=hours,
    )


CATALOG_QUESTS = [
    make_quest("daily_play", QuestType.DAILY, ObjectiveType.PLAY_MATCHES, 1, 25, 24),
    make_quest("daily_top", QuestType.DAILY, ObjectiveType.FINISH_TOP_PERCENT, 1, 60, 24),
    make_quest("daily_loot", QuestType.DAILY, ObjectiveType.LOOT_BUILDINGS, 3, 40, 24),
    make_quest("daily_storm", QuestType.DAILY, ObjectiveType.SURVIVE_STORM_CIRCLES, 1, 75, 24),
    make_quest("combat_headshot", QuestType.COMBAT, ObjectiveType.HEADSHOT_ELIMINATIONS, 2, 175),
    make_quest("combat_close", QuestType.COMBAT, ObjectiveType.CLOSE_RANGE_ELIMINATIONS, 1, 150),
    make_quest("weekly_win", QuestType.WEEKLY, ObjectiveType.WIN_MATCHES, 1, 500, 168),
    make_quest("weekly_elims", QuestType.WEEKLY, ObjectiveType.TOTAL_ELIMINATIONS, 5, 200, 168),
    make_quest("weekly_top10", QuestType.WEEKLY, ObjectiveType.FINISH_TOP_TEN, 3, 250, 168),
    make_quest("prog_weapons", QuestType.PROGRESSION, ObjectiveType.USE_WEAPON_TYPES, 3, 350),
    make_quest("prog_explorer", QuestType.PROGRESSION, ObjectiveType.LAND_IN_LOCATIONS, 2, 250),
    make_quest("special_hotdrop", QuestType.SPECIAL, ObjectiveType.LAND_IN_HIGH_RISK_AREAS, 2, 200),
]


@pytest.fixture
def clock():
    """Clock fixed at 2024-03-13 12:00 (a Wednesday)."""
    return ManualClock(datetime(2024, 3, 13, 12, 0, 0))


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    return EventBus()


@pytest.fixture
def recorded_events(event_bus):
    """List that collects every quest event published on the bus."""
    received = []
    for event_type in QuestEvent:
        event_bus.subscribe(event_type, received.append, weak=False)
    return received


@pytest.fixture
def catalog():
    return QuestCatalog(CATALOG_QUESTS)


@pytest.fixture
def config():
    return QuestConfig()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def wallet(event_bus):
    return CurrencyWallet(starting_coins=0, event_bus=event_bus)


@pytest.fixture
def persist():
    """Stand-in persistence callback."""
    return MagicMock()


@pytest.fixture
def manager(catalog, config, event_bus, wallet, clock, persist):
    manager = QuestManager(catalog, config=config, event_bus=event_bus, reward_sink=wallet, now=clock)
    manager.set_persistence(persist)
    return manager


@pytest.fixture
def scheduler(manager, clock, rng):
    """Scheduler whose daily and weekly boundaries are not yet due."""
    refresh_clock = RefreshClock(last_daily_refresh=clock(), last_weekly_refresh=clock())
    return RefreshScheduler(manager, clock=refresh_clock, rng=rng)
