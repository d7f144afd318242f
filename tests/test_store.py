"""
Tests for the document stores.
"""

import sys
import os
from unittest import mock

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from lems.database import MemoryStore, MongoStore, create_store


def test_filters():
    store = MemoryStore()
    store.insert_many("teams", [
        {"number": 101, "divisionId": "d1", "affiliation": {"city": "Haifa"}},
        {"number": 102, "divisionId": "d1", "affiliation": {"city": "Tel Aviv"}},
        {"number": 201, "divisionId": "d2"},
    ])

    assert len(store.find("teams", {"divisionId": "d1"})) == 2
    assert store.find_one("teams", {"affiliation.city": "Haifa"})["number"] == 101
    assert len(store.find("teams", {"number": {"$in": [101, 201]}})) == 2
    assert len(store.find("teams", {"divisionId": {"$ne": "d1"}})) == 1
    # None matches a missing field, like MongoDB
    assert store.find_one("teams", {"affiliation": None})["number"] == 201
    assert store.count("teams") == 3

    with pytest.raises(ValueError):
        store.find("teams", {"number": {"$gt": 100}})

    print("[PASS] Filter test passed")


def test_sort_and_isolation():
    store = MemoryStore()
    store.insert_many("matches", [{"number": 3}, {"number": 1}, {"number": 2}, {"name": "unnumbered"}])

    numbers = [m.get("number") for m in store.find("matches", sort=[("number", 1)])]
    assert numbers == [None, 1, 2, 3]
    numbers = [m.get("number") for m in store.find("matches", sort=[("number", -1)])]
    assert numbers == [3, 2, 1, None]

    # Returned documents are copies
    match = store.find_one("matches", {"number": 1})
    match["number"] = 99
    assert store.find_one("matches", {"number": 99}) is None

    print("[PASS] Sort test passed")


def test_update_and_upsert():
    store = MemoryStore()
    inserted = store.insert_one("sessions", {"number": 1, "status": "not-started"})

    result = store.update_one("sessions", {"_id": inserted.inserted_id}, {"status": "in-progress"})
    assert result.matched_count == 1 and result.modified_count == 1

    # Same value again: matched but not modified
    result = store.update_one("sessions", {"_id": inserted.inserted_id}, {"status": "in-progress"})
    assert result.modified_count == 0

    result = store.update_one("sessions", {"number": 2}, {"status": "in-progress"})
    assert result.acknowledged and result.matched_count == 0 and result.upserted_id is None

    result = store.update_one("sessions", {"number": 2}, {"status": "in-progress"}, upsert=True)
    assert result.upserted_id is not None
    created = store.find_one("sessions", {"_id": result.upserted_id})
    assert created["number"] == 2 and created["status"] == "in-progress"

    result = store.update_many("sessions", {"status": "in-progress"}, {"status": "completed"})
    assert result.matched_count == 2

    print("[PASS] Update test passed")


def test_delete():
    store = MemoryStore()
    store.insert_many("tickets", [{"teamId": "a"}, {"teamId": "a"}, {"teamId": "b"}])

    assert store.delete_one("tickets", {"teamId": "b"}).deleted_count == 1
    assert store.delete_one("tickets", {"teamId": "b"}).deleted_count == 0
    assert store.delete_many("tickets", {"teamId": "a"}).deleted_count == 2
    assert store.find("tickets") == []

    print("[PASS] Delete test passed")


def test_unacknowledged_writes():
    store = MemoryStore()
    store.insert_one("awards", {"name": "champions"})
    store.acknowledge_writes = False

    assert not store.insert_one("awards", {"name": "robot-design"}).acknowledged
    assert not store.update_one("awards", {"name": "champions"}, {"winner": "x"}, upsert=True).acknowledged
    assert not store.delete_many("awards", {}).acknowledged
    assert store.find_one("awards", {"name": "champions"}).get("winner") is None
    assert store.count("awards") == 1

    print("[PASS] Unacknowledged write test passed")


def test_mongo_store_upsert_assigns_string_id():
    client = mock.MagicMock()
    collection = client.__getitem__.return_value.__getitem__.return_value
    collection.update_one.return_value = mock.Mock(
        acknowledged=True, upserted_id="abc", matched_count=0, modified_count=0
    )

    store = MongoStore("mongodb://unused", "lems", client=client)
    result = store.update_one("states", {"divisionId": "d1"}, {"completed": True}, upsert=True)

    filter, update = collection.update_one.call_args[0]
    assert filter == {"divisionId": "d1"}
    assert update["$set"] == {"completed": True}
    assert isinstance(update["$setOnInsert"]["_id"], str)
    assert result.upserted_id == "abc"

    # Key already carries the id: nothing to set on insert
    store.update_one("states", {"_id": "s1"}, {"completed": True}, upsert=True)
    _, update = collection.update_one.call_args[0]
    assert "$setOnInsert" not in update

    print("[PASS] Mongo upsert test passed")


def test_create_store():
    assert isinstance(create_store("memory"), MemoryStore)
    with pytest.raises(ValueError):
        create_store("sqlite")

    print("[PASS] Store factory test passed")


def run_all_tests():
    """Run all tests."""
    print("\n" + "=" * 60)
    print("Running Document Store Tests")
    print("=" * 60 + "\n")

    try:
        test_filters()
        test_sort_and_isolation()
        test_update_and_upsert()
        test_delete()
        test_unacknowledged_writes()
        test_mongo_store_upsert_assigns_string_id()
        test_create_store()

        print("\n" + "=" * 60)
        print("All tests passed!")
        print("=" * 60 + "\n")
        return 0

    except AssertionError as e:
        print(f"\n[FAIL] Test failed: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(run_all_tests())
