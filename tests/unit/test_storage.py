"""Unit tests for local tool-frequency storage."""

import json

import pytest

from src.finder.storage import InMemoryStore, JsonFileStore, ToolFrequency, sanitize_counts


KEY = "toolFrequency"


class TestSanitizeCounts:
    def test_keeps_valid_entries(self):
        assert sanitize_counts({"Panci": 2, "Kompor": 0}) == {"Panci": 2, "Kompor": 0}

    @pytest.mark.parametrize("payload", [None, [], "Panci", 3])
    def test_non_mapping_is_empty(self, payload):
        assert sanitize_counts(payload) == {}

    def test_drops_invalid_counts(self):
        payload = {"Panci": -1, "Kompor": "3", "Wajan": 1.5, "Oven": True, "Teflon": 4}
        assert sanitize_counts(payload) == {"Teflon": 4}


class TestInMemoryStore:
    def test_read_missing_key(self):
        assert InMemoryStore().read(KEY) == {}

    def test_write_then_read_returns_copy(self):
        store = InMemoryStore()
        store.write(KEY, {"Panci": 1})
        value = store.read(KEY)
        value["Panci"] = 99

        assert store.read(KEY) == {"Panci": 1}


class TestJsonFileStore:
    def test_missing_file_is_empty(self, tmp_path):
        assert JsonFileStore(tmp_path / "state.json").read(KEY) == {}

    def test_malformed_file_is_empty(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("{not json", encoding="utf-8")

        assert JsonFileStore(path).read(KEY) == {}

    def test_non_object_document_is_empty(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")

        assert JsonFileStore(path).read(KEY) == {}

    def test_write_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "state.json"
        JsonFileStore(path).write(KEY, {"Panci": 2})

        assert json.loads(path.read_text(encoding="utf-8")) == {KEY: {"Panci": 2}}

    def test_write_keeps_other_keys(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text(json.dumps({"theme": {"dark": 1}}), encoding="utf-8")

        JsonFileStore(path).write(KEY, {"Kompor": 1})

        assert json.loads(path.read_text(encoding="utf-8")) == {"theme": {"dark": 1}, KEY: {"Kompor": 1}}

    def test_write_leaves_no_temp_files(self, tmp_path):
        path = tmp_path / "state.json"
        JsonFileStore(path).write(KEY, {"Kompor": 1})

        assert [p.name for p in tmp_path.iterdir()] == ["state.json"]


class TestToolFrequency:
    def test_rank_sorts_by_descending_count(self):
        frequency = ToolFrequency(InMemoryStore({KEY: {"Wajan": 5, "Panci": 2}}), KEY)

        assert frequency.rank(["Kompor", "Panci", "Wajan", "Oven"]) == ["Wajan", "Panci", "Kompor", "Oven"]

    def test_rank_ties_keep_vocabulary_order(self):
        frequency = ToolFrequency(InMemoryStore({KEY: {"Oven": 1, "Kompor": 1}}), KEY)

        assert frequency.rank(["Kompor", "Panci", "Wajan", "Oven"]) == ["Kompor", "Oven", "Panci", "Wajan"]

    def test_rank_without_history_is_vocabulary_order(self):
        frequency = ToolFrequency(InMemoryStore(), KEY)

        assert frequency.rank(["Kompor", "Panci"]) == ["Kompor", "Panci"]

    def test_increment_adds_one_per_tool(self):
        store = InMemoryStore({KEY: {"Panci": 2}})
        ToolFrequency(store, KEY).increment(["Panci", "Kompor", "Panci"])

        assert store.read(KEY) == {"Panci": 3, "Kompor": 1}

    def test_increment_merges_concurrent_writes(self, tmp_path):
        path = tmp_path / "state.json"
        first = ToolFrequency(JsonFileStore(path), KEY)
        second = ToolFrequency(JsonFileStore(path), KEY)

        first.increment(["Panci"])
        second.increment(["Kompor"])

        assert JsonFileStore(path).read(KEY) == {"Panci": 1, "Kompor": 1}

    def test_increment_survives_write_failure(self):
        class ReadOnlyStore(InMemoryStore):
            def write(self, key, mapping):
                raise PermissionError("read-only")

        counts = ToolFrequency(ReadOnlyStore(), KEY).increment(["Panci"])

        assert counts == {"Panci": 1}
