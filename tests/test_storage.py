"""Tests for the key-value stores and JSON helpers."""

import json

import pytest

from nebula_arcade.storage import JsonFileStore, MemoryStore, load_json, save_json


def test_memory_store_roundtrip():
    store = MemoryStore()
    store.set_item("a", "1")
    assert store.get_item("a") == "1"
    store.remove_item("a")
    assert store.get_item("a") is None


def test_memory_store_remove_missing_is_noop():
    store = MemoryStore({"a": "1"})
    store.remove_item("zzz")
    assert store.keys() == ["a"]


def test_json_file_store_persists_across_instances(tmp_path):
    path = tmp_path / "arcade.json"
    JsonFileStore(path).set_item("nebula_api_key", "abc123")
    assert JsonFileStore(path).get_item("nebula_api_key") == "abc123"
    assert json.loads(path.read_text(encoding="utf-8")) == {"nebula_api_key": "abc123"}


def test_json_file_store_missing_file_is_empty(tmp_path):
    store = JsonFileStore(tmp_path / "nested" / "arcade.json")
    assert store.get_item("anything") is None
    assert not store.path.exists()


def test_json_file_store_remove(tmp_path):
    path = tmp_path / "arcade.json"
    store = JsonFileStore(path)
    store.set_item("a", "1")
    store.remove_item("a")
    assert JsonFileStore(path).get_item("a") is None


def test_json_file_store_rejects_non_object(tmp_path):
    path = tmp_path / "arcade.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")
    with pytest.raises(ValueError):
        JsonFileStore(path)


def test_json_file_store_keeps_unicode(tmp_path):
    path = tmp_path / "arcade.json"
    JsonFileStore(path).set_item("x", "Água 💧")
    assert "Água 💧" in path.read_text(encoding="utf-8")


def test_load_json_default_when_absent():
    assert load_json(MemoryStore(), "emoji_history", []) == []


def test_save_then_load_json():
    store = MemoryStore()
    save_json(store, "cipher_history", ["Carpe diem"])
    assert store.get_item("cipher_history") == '["Carpe diem"]'
    assert load_json(store, "cipher_history", []) == ["Carpe diem"]
