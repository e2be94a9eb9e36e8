import sys
import logging
from pathlib import Path

from questengine.progression.quests import QuestType
from questengine.resources.catalog import QuestCatalog, DEFAULT_DATA_PATH


def main():
    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger("CatalogVerification")

    data_path = Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_DATA_PATH

    try:
        logger.info(f"Loading quest catalog from {data_path}...")
        catalog = QuestCatalog.load(data_path)

        assert len(catalog) > 0, "Catalog is empty"

        # Every rotating category needs candidates to draw from
        for quest_type in (QuestType.DAILY, QuestType.WEEKLY):
            assert catalog.by_type(quest_type), f"No {quest_type.name} quests"

        for quest_type in QuestType:
            logger.info(f"  {quest_type.name}: {len(catalog.by_type(quest_type))} quests")

        # Prerequisites must point at catalog quests
        for quest in catalog:
            for prerequisite in quest.prerequisite_quests:
                assert prerequisite in catalog, (
                    f"{quest.id} requires unknown quest {prerequisite}"
                )

        logger.info("VERIFICATION SUCCESSFUL: Quest catalog loaded and validated.")

    except AssertionError as e:
        logger.error(f"VERIFICATION FAILED: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
