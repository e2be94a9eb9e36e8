"""
Quest catalog.

Handles loading and validation of quest definitions. The catalog is read
once at startup and never mutated afterwards.

Layout of a data directory:
    <data_path>/schemas/quest.schema.json
    <data_path>/database/quests/*.json      (one quest object or a list)
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Iterator

import jsonschema

from questengine.progression.quests import (
    ObjectiveType,
    QuestDefinition,
    QuestDifficulty,
    QuestType,
)

DEFAULT_DATA_PATH = Path(__file__).resolve().parent.parent / "data"
SCHEMA_NAME = "quest.schema.json"


class QuestCatalog:
    """
    Read-only set of quest definitions, keyed by id.

    Iteration follows load order, so seeded shuffles over the catalog are
    reproducible.
    """

    def __init__(self, definitions: Iterable[QuestDefinition] = ()):
        self._quests: dict[str, QuestDefinition] = {}
        self.logger = logging.getLogger(__name__)

        for definition in definitions:
            if definition.id in self._quests:
                self.logger.warning(f"Duplicate quest id ignored: {definition.id}")
                continue
            self._quests[definition.id] = definition

    @classmethod
    def load(cls, data_path: Path | str = DEFAULT_DATA_PATH) -> QuestCatalog:
        """Load and validate every quest file under a data directory."""
        logger = logging.getLogger(__name__)
        data_path = Path(data_path)

        schema = _load_schema(data_path / "schemas" / SCHEMA_NAME, logger)
        if schema is None:
            return cls()

        quest_dir = data_path / "database" / "quests"
        if not quest_dir.exists():
            logger.warning(f"Data directory not found: {quest_dir}")
            return cls()

        definitions: list[QuestDefinition] = []
        for file_path in sorted(quest_dir.glob("*.json")):
            definitions.extend(_load_file(file_path, schema, logger))

        catalog = cls(definitions)
        logger.info(f"Loaded {len(catalog)} quests from {quest_dir}.")
        return catalog

    def __contains__(self, quest_id: object) -> bool:
        return quest_id in self._quests

    def __len__(self) -> int:
        return len(self._quests)

    def __iter__(self) -> Iterator[QuestDefinition]:
        return iter(self._quests.values())

    def get(self, quest_id: str) -> QuestDefinition | None:
        return self._quests.get(quest_id)

    def all(self) -> list[QuestDefinition]:
        return list(self._quests.values())

    def by_type(self, quest_type: QuestType) -> list[QuestDefinition]:
        return [q for q in self._quests.values() if q.quest_type == quest_type]

    def by_objective(self, objective_type: ObjectiveType) -> list[QuestDefinition]:
        return [q for q in self._quests.values() if q.objective_type == objective_type]


def parse_quest(data: dict[str, Any]) -> QuestDefinition:
    """Build a definition from validated JSON data."""
    return QuestDefinition(
        id=data['id'],
        name=data.get('name', data['id']),
        description=data.get('description', ''),
        quest_type=QuestType[data['type'].upper()],
        difficulty=QuestDifficulty[data.get('difficulty', 'easy').upper()],
        objective_type=ObjectiveType[data['objective'].upper()],
        target_amount=data.get('target', 1),
        objective_description=data.get('objective_description', ''),
        coin_reward=data.get('coin_reward', 25),
        has_time_limit=data.get('has_time_limit', False),
        time_limit_hours=float(data.get('time_limit_hours', 0.0)),
        minimum_level=data.get('minimum_level', 0),
        prerequisite_quests=tuple(data.get('prerequisites', [])),
    )


def _load_schema(schema_path: Path, logger: logging.Logger) -> dict[str, Any] | None:
    if not schema_path.exists():
        logger.warning(f"Schema not found: {schema_path}")
        return None

    try:
        with open(schema_path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to load schema {schema_path}: {e}")
        return None


def _load_file(
    file_path: Path,
    schema: dict[str, Any],
    logger: logging.Logger,
) -> list[QuestDefinition]:
    """Load one quest file, skipping entries that fail validation."""
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to load {file_path}: {e}")
        return []

    entries = data if isinstance(data, list) else [data]
    definitions = []

    for entry in entries:
        try:
            jsonschema.validate(instance=entry, schema=schema)
            definitions.append(parse_quest(entry))
        except jsonschema.ValidationError as e:
            logger.error(f"Validation error in {file_path}: {e.message}")
        except (KeyError, ValueError) as e:
            logger.error(f"Invalid quest in {file_path}: {e}")

    return definitions
