"""
Tests for the durable key-value storage
"""
from budget_app.services.storage import DurableStorage


def test_get_missing_key_returns_default(db):
    storage = DurableStorage(db, namespace="chapter")
    assert storage.get("budget") is None
    assert storage.get("budget", default={}) == {}


def test_put_then_get_round_trip(db):
    storage = DurableStorage(db, namespace="chapter")
    storage.put("budget", {"members": 40, "duesPerMember": 150, "expenses": 4000})

    assert storage.get("budget") == {"members": 40, "duesPerMember": 150, "expenses": 4000}


def test_put_overwrites_whole_value(db):
    storage = DurableStorage(db, namespace="chapter")
    storage.put("budget", {"members": 40, "duesPerMember": 150, "expenses": 4000})
    storage.put("budget", {"members": 1, "duesPerMember": 2, "expenses": 3})

    assert storage.get("budget") == {"members": 1, "duesPerMember": 2, "expenses": 3}


def test_string_values(db):
    storage = DurableStorage(db, namespace="chapter")
    storage.put("lastMessage", "what if dues go up?")
    assert storage.get("lastMessage") == "what if dues go up?"


def test_namespaces_are_isolated(db):
    first = DurableStorage(db, namespace="alpha")
    second = DurableStorage(db, namespace="beta")

    first.put("budget", {"members": 1, "duesPerMember": 1, "expenses": 1})

    assert second.get("budget") is None


def test_values_survive_new_storage_instance(db):
    DurableStorage(db, namespace="chapter").put("lastMessage", "hello")
    assert DurableStorage(db, namespace="chapter").get("lastMessage") == "hello"
