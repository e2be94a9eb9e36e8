import json
import os
import pytest
from questengine.save.storage import JsonFileStorage, MemoryStorage, StorageError

def test_memory_storage():
    storage = MemoryStorage({"a": "1"})
    storage.set("b", "2")
    storage.delete("a")
    storage.delete("missing")
    storage.flush()

    assert storage.get("a") is None
    assert storage.get("a", "x") == "x"
    assert storage.keys() == ["b"]
    assert storage.flush_count == 1

def test_json_storage_round_trip(tmp_path):
    path = tmp_path / "saves" / "player.json"
    storage = JsonFileStorage(path)
    storage.set("Quest_A", '{"x": 1}')
    storage.set("PlayerCoins", "1200")
    storage.flush()

    reopened = JsonFileStorage(path)

    assert reopened.get("PlayerCoins") == "1200"
    assert reopened.get("Quest_A") == '{"x": 1}'
    assert reopened.load_error is None
    # No temporary files left behind
    assert [p.name for p in path.parent.iterdir()] == ["player.json"]

def test_unflushed_writes_are_not_persisted(tmp_path):
    path = tmp_path / "player.json"
    storage = JsonFileStorage(path)
    storage.set("PlayerCoins", "5")

    assert JsonFileStorage(path).get("PlayerCoins") is None

def test_checksum_mismatch_discards_data(tmp_path):
    path = tmp_path / "player.json"
    storage = JsonFileStorage(path)
    storage.set("PlayerCoins", "10")
    storage.flush()

    payload = json.loads(path.read_text())
    payload["entries"]["PlayerCoins"] = "999999"
    path.write_text(json.dumps(payload))

    reopened = JsonFileStorage(path)

    assert reopened.keys() == []
    assert reopened.load_error == "checksum mismatch"

def test_unreadable_file(tmp_path):
    path = tmp_path / "player.json"
    path.write_text("not json at all")

    storage = JsonFileStorage(path)

    assert storage.keys() == []
    assert storage.load_error.startswith("unreadable save file")

def test_failed_write_raises_storage_error(tmp_path, monkeypatch):
    path = tmp_path / "player.json"
    storage = JsonFileStorage(path)
    storage.set("PlayerCoins", "10")

    def broken_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", broken_replace)

    with pytest.raises(StorageError):
        storage.flush()

    assert not path.exists()
    assert list(tmp_path.iterdir()) == []

def test_missing_directory_raises_storage_error(tmp_path):
    path = tmp_path / "saves" / "player.json"
    storage = JsonFileStorage(path)
    storage.set("PlayerCoins", "10")
    path.parent.rmdir()

    with pytest.raises(StorageError):
        storage.flush()

def test_missing_checksum_discards_data(tmp_path):
    path = tmp_path / "player.json"
    path.write_text(json.dumps({"version": "1.0", "entries": {"PlayerCoins": "999999"}}))

    storage = JsonFileStorage(path)

    assert storage.keys() == []
    assert storage.load_error == "missing checksum"
