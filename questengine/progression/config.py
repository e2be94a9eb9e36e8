"""
Quest engine configuration.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from questengine.progression.quests import QuestType

logger = logging.getLogger(__name__)


DEFAULT_TYPE_QUOTAS: dict[QuestType, int] = {
    QuestType.DAILY: 3,
    QuestType.COMBAT: 2,
    QuestType.WEEKLY: 2,
    QuestType.PROGRESSION: 2,
    QuestType.SPECIAL: 1,
}

DEFAULT_HIGH_RISK_AREAS: tuple[str, ...] = (
    "Hot Zone",
    "Military Base",
    "Supply Drop",
    "High Loot Area",
)


class QuestConfig:
    """Configuration for the quest engine."""

    def __init__(
        self,
        max_active_quests: int = 10,
        enable_daily_refresh: bool = True,
        enable_weekly_refresh: bool = True,
        weekly_refresh_days: int = 7,
        type_quotas: dict[QuestType, int] | None = None,
        default_quota: int = 1,
        high_risk_areas: tuple[str, ...] | list[str] = DEFAULT_HIGH_RISK_AREAS,
        close_range_distance: float = 10.0,
        top_percent_threshold: float = 0.5,
        refresh_check_interval: float = 60.0,
        starting_coins: int = 1000,
        debug_mode: bool = False,
    ):
        if max_active_quests < 0:
            raise ValueError("max_active_quests must be non-negative")

        self.max_active_quests = max_active_quests
        self.enable_daily_refresh = enable_daily_refresh
        self.enable_weekly_refresh = enable_weekly_refresh
        self.weekly_refresh_days = weekly_refresh_days
        self.type_quotas = dict(DEFAULT_TYPE_QUOTAS)
        if type_quotas:
            self.type_quotas.update(type_quotas)
        self.default_quota = default_quota
        self.high_risk_areas = tuple(high_risk_areas)
        self.close_range_distance = close_range_distance
        self.top_percent_threshold = top_percent_threshold
        self.refresh_check_interval = refresh_check_interval
        self.starting_coins = starting_coins
        self.debug_mode = debug_mode

    def quota_for(self, quest_type: QuestType) -> int:
        """Get how many quests of a type a refresh may activate."""
        return self.type_quotas.get(quest_type, self.default_quota)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> QuestConfig:
        """
        Build a config from plain data.

        Quota keys are quest type names ("DAILY", "weekly", ...).
        Unknown keys are logged and ignored.
        """
        known = {
            'max_active_quests', 'enable_daily_refresh', 'enable_weekly_refresh',
            'weekly_refresh_days', 'default_quota', 'high_risk_areas',
            'close_range_distance', 'top_percent_threshold',
            'refresh_check_interval', 'starting_coins', 'debug_mode',
        }
        kwargs: dict[str, Any] = {}

        for key, value in data.items():
            if key == 'type_quotas':
                kwargs['type_quotas'] = {
                    QuestType[name.upper()]: int(quota)
                    for name, quota in value.items()
                }
            elif key in known:
                kwargs[key] = value
            else:
                logger.warning(f"Ignoring unknown config key: {key}")

        return cls(**kwargs)

    @classmethod
    def load(cls, path: str | Path) -> QuestConfig:
        """Load config from a JSON file."""
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return cls.from_dict(data)
