import pytest
from datetime import datetime, timedelta
from questengine.errors import CorruptRecordError
from questengine.progression.progress import QuestProgress, format_time_remaining
from questengine.progression.quests import ObjectiveType, QuestDefinition, QuestType

START = datetime(2024, 3, 13, 12, 0, 0)

@pytest.fixture
def record():
    return QuestProgress(quest_id="daily_play", start_time=START)

def test_add_progress(record):
    assert record.add_progress(2)
    assert record.current_progress == 2
    assert record.progress_fraction(4) == 0.5

def test_completion_is_latched(record):
    assert record.complete(START)
    assert not record.complete(START + timedelta(hours=1))
    assert record.completion_time == START

    # Completed records take no more progress
    assert not record.add_progress(1)
    assert record.current_progress == 0

def test_claim_requires_completion(record):
    assert not record.is_claimable
    assert not record.claim_reward()

    record.complete(START)
    assert record.is_claimable
    assert record.claim_reward()
    assert not record.claim_reward()
    assert not record.is_claimable

def test_progress_fraction_is_clamped(record):
    record.current_progress = 7
    assert record.progress_fraction(5) == 1.0
    assert record.progress_fraction(0) == 1.0

def test_expiry_is_strict(record):
    limit = 24.0
    assert not record.is_expired(limit, START + timedelta(hours=24))
    assert record.is_expired(limit, START + timedelta(hours=24, seconds=1))

def test_no_time_limit_never_expires(record):
    assert record.time_remaining(0, START + timedelta(days=400)) is None
    assert not record.is_expired(0, START + timedelta(days=400))

def test_round_trip_keeps_tags_and_times(record):
    record.add_progress(1, tag="Rifle")
    record.add_progress(1, tag="Pistol")
    record.complete(START + timedelta(minutes=30))

    data = record.to_dict()
    assert data['recorded_tags'] == ["Pistol", "Rifle"]

    restored = QuestProgress.from_dict(data, quest_id="daily_play")
    assert restored == record

@pytest.mark.parametrize("mutate", [
    lambda d: d.pop('current_progress'),
    lambda d: d.update(current_progress=-1),
    lambda d: d.update(is_completed="yes"),
    lambda d: d.update(start_time="not a time"),
    lambda d: d.update(is_reward_claimed=True),
    lambda d: d.update(quest_id="someone_else"),
    lambda d: d.update(start_time="2024-03-13T11:00:00+00:00"),
    lambda d: d.update(is_completed=True, completion_time="2024-03-13T12:30:00+02:00"),
])
def test_from_dict_rejects_bad_records(record, mutate):
    data = record.to_dict()
    mutate(data)

    with pytest.raises(CorruptRecordError):
        QuestProgress.from_dict(data, quest_id="daily_play")

def test_from_dict_rejects_non_object():
    with pytest.raises(CorruptRecordError) as exc_info:
        QuestProgress.from_dict(["not", "a", "record"], quest_id="q")
    assert exc_info.value.quest_id == "q"

@pytest.mark.parametrize("remaining, text", [
    (None, "No time limit"),
    (timedelta(0), "Expired"),
    (timedelta(seconds=-5), "Expired"),
    (timedelta(days=2, hours=3, minutes=10), "2d 3h"),
    (timedelta(hours=4, minutes=10), "4h 10m"),
    (timedelta(minutes=12, seconds=30), "12m"),
])
def test_format_time_remaining(remaining, text):
    assert format_time_remaining(remaining) == text

def test_definition_validation():
    with pytest.raises(ValueError):
        QuestDefinition(id="bad", name="Bad", quest_type=QuestType.DAILY,
                        objective_type=ObjectiveType.PLAY_MATCHES, target_amount=0)
    with pytest.raises(ValueError):
        QuestDefinition(id="bad", name="Bad", quest_type=QuestType.DAILY,
                        objective_type=ObjectiveType.PLAY_MATCHES, coin_reward=-1)

def test_definition_properties():
    quest = QuestDefinition(id="d", name="D", quest_type=QuestType.DAILY,
                            objective_type=ObjectiveType.LOOT_BUILDINGS, target_amount=5,
                            coin_reward=40, has_time_limit=True, time_limit_hours=24)
    assert quest.expires
    assert quest.formatted_reward == "40 coins"
    assert quest.objective_text == "Loot 5 buildings"
