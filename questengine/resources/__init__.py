"""
Resources module - static quest data.
"""

from questengine.resources.catalog import QuestCatalog, parse_quest, DEFAULT_DATA_PATH

__all__ = [
    "QuestCatalog",
    "parse_quest",
    "DEFAULT_DATA_PATH",
]
