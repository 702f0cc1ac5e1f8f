import json

import pytest
import redis

from storage import (
    JsonFileStorage,
    MalformedStateError,
    MemoryStorage,
    RedisStorage,
    StorageReadError,
    get_storage,
)


class FakeRedis:
    def __init__(self, fail_writes=False, fail_reads=False):
        self.data = {}
        self.fail_writes = fail_writes
        self.fail_reads = fail_reads

    def get(self, key):
        if self.fail_reads:
            raise redis.ConnectionError("connection reset")
        return self.data.get(key)

    def set(self, key, value):
        if self.fail_writes:
            raise redis.ConnectionError("connection refused")
        self.data[key] = value


def test_memory_storage_json_round_trip():
    storage = MemoryStorage()
    assert storage.load_json("tasks") is None
    assert storage.save_json("tasks", [{"id": "task-1"}])
    assert storage.load_json("tasks") == [{"id": "task-1"}]


def test_malformed_entry_raises():
    storage = MemoryStorage({"tasks": "{not json"})
    with pytest.raises(MalformedStateError) as exc:
        storage.load_json("tasks")
    assert exc.value.key == "tasks"


def test_file_storage_keeps_keys_independent(tmp_path):
    path = tmp_path / "state.json"
    storage = JsonFileStorage(str(path))
    storage.save_json("tasks", [1, 2])
    storage.save_json("tickets", [3])
    assert storage.load_json("tasks") == [1, 2]
    assert storage.load_json("tickets") == [3]
    assert set(json.loads(path.read_text())) == {"tasks", "tickets"}


def test_file_storage_tolerates_missing_and_corrupt_file(tmp_path):
    path = tmp_path / "state.json"
    storage = JsonFileStorage(str(path))
    assert storage.load_json("tasks") is None
    path.write_text("garbage")
    assert storage.load_json("tasks") is None
    storage.save_json("tasks", [])
    assert storage.load_json("tasks") == []


def test_redis_storage_uses_client():
    client = FakeRedis()
    storage = RedisStorage(client=client)
    storage.save_json("tickets", [{"id": "TKT-123456"}])
    assert json.loads(client.data["tickets"]) == [{"id": "TKT-123456"}]
    assert storage.load_json("tickets") == [{"id": "TKT-123456"}]


def test_failed_write_is_reported_not_raised():
    storage = RedisStorage(client=FakeRedis(fail_writes=True))
    assert storage.save_json("tickets", []) is False


def test_failed_read_raises_instead_of_looking_absent():
    client = FakeRedis(fail_reads=True)
    client.data["tickets"] = "[]"
    storage = RedisStorage(client=client)
    with pytest.raises(StorageReadError) as exc:
        storage.load_json("tickets")
    assert exc.value.key == "tickets"


def test_unknown_backend_rejected():
    assert isinstance(get_storage("memory"), MemoryStorage)
    with pytest.raises(ValueError):
        get_storage("sqlite")
