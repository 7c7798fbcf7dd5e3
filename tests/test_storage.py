"""
Storage Tests — in-memory and SQLite adapters.
"""

from __future__ import annotations

import os
import tempfile

import pytest

from epistemica.config import Settings
from epistemica.doctrine import DEFAULT_DOCTRINES
from epistemica.errors import PersistenceFailure
from epistemica.storage import (
    AnalysisRecord,
    AnalysisStore,
    InMemoryAnalysisStore,
    InMemoryPolicyStore,
    PolicyStore,
    SQLiteAnalysisStore,
)


def _record(text="Because X, Y.", user_id=None, created_at=None) -> AnalysisRecord:
    return AnalysisRecord(
        module_type="epistemic-inference",
        input_text=text,
        word_count=len(text.split()),
        result={"overallCoherence": 0.7, "arguments": []},
        processing_time_ms=42,
        user_id=user_id,
        created_at=created_at,
    )


@pytest.fixture
def sqlite_store():
    with tempfile.TemporaryDirectory() as tmp:
        yield SQLiteAnalysisStore(os.path.join(tmp, "test.db"))


@pytest.fixture(params=["memory", "sqlite"])
def store(request, sqlite_store):
    if request.param == "memory":
        return InMemoryAnalysisStore()
    return sqlite_store


class TestAnalysisStores:

    def test_protocol_conformance(self, store):
        assert isinstance(store, AnalysisStore)

    @pytest.mark.asyncio
    async def test_save_assigns_id_and_timestamp(self, store):
        saved = await store.save(_record())
        assert saved.id
        assert saved.created_at

    @pytest.mark.asyncio
    async def test_round_trip(self, store):
        saved = await store.save(_record())
        loaded = await store.get_by_id(saved.id)
        assert loaded == saved
        assert loaded.result == {"overallCoherence": 0.7, "arguments": []}

    @pytest.mark.asyncio
    async def test_missing_id(self, store):
        assert await store.get_by_id("nope") is None

    @pytest.mark.asyncio
    async def test_list_recent_newest_first_and_filtered(self, store):
        await store.save(_record("old", user_id="u1", created_at="2024-01-01T00:00:00+00:00"))
        await store.save(_record("new", user_id="u1", created_at="2024-06-01T00:00:00+00:00"))
        await store.save(_record("other", user_id="u2", created_at="2024-03-01T00:00:00+00:00"))

        everything = await store.list_recent()
        assert [r.input_text for r in everything] == ["new", "other", "old"]

        mine = await store.list_recent(user_id="u1")
        assert [r.input_text for r in mine] == ["new", "old"]

        assert len(await store.list_recent(limit=1)) == 1

    @pytest.mark.asyncio
    async def test_delete(self, store):
        saved = await store.save(_record())
        await store.delete(saved.id)
        assert await store.get_by_id(saved.id) is None


class TestSQLiteFailures:

    @pytest.mark.asyncio
    async def test_duplicate_id_raises_persistence_failure(self, sqlite_store):
        saved = await sqlite_store.save(_record())
        with pytest.raises(PersistenceFailure):
            await sqlite_store.save(saved)

    def test_history_survives_reopen(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "history.db")
            first = SQLiteAnalysisStore(path)
            record_id = first._save_sync(_record()).id
            second = SQLiteAnalysisStore(path)
            assert second._get_sync(record_id).input_text == "Because X, Y."

    def test_default_path_comes_from_settings(self, monkeypatch):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "configured.db")
            monkeypatch.setattr("epistemica.storage.settings", Settings(DB_PATH=path))
            store = SQLiteAnalysisStore()
            assert store.db_path == path
            assert os.path.exists(path)


class TestPolicyStore:

    def test_protocol_conformance(self):
        assert isinstance(InMemoryPolicyStore(), PolicyStore)

    @pytest.mark.asyncio
    async def test_initialize_defaults(self):
        store = InMemoryPolicyStore()
        await store.initialize_defaults()
        policy = await store.get_all()
        assert policy == {key: value for key, (value, _) in DEFAULT_DOCTRINES.items()}
        assert await store.describe("DN_MODEL") == DEFAULT_DOCTRINES["DN_MODEL"][1]

    @pytest.mark.asyncio
    async def test_existing_values_win(self):
        store = InMemoryPolicyStore({"DN_MODEL": "accepted"})
        await store.initialize_defaults()
        assert await store.get("DN_MODEL") == "accepted"
        assert await store.get("LAW_TYPE") == "proportional_dependencies"

    @pytest.mark.asyncio
    async def test_set_and_get(self):
        store = InMemoryPolicyStore()
        await store.set("LAW_TYPE", "universal_regularities", "Humean view")
        assert await store.get("LAW_TYPE") == "universal_regularities"
        assert await store.describe("LAW_TYPE") == "Humean view"
        assert await store.get("MISSING") is None

    @pytest.mark.asyncio
    async def test_get_all_returns_copy(self):
        store = InMemoryPolicyStore({"LAW_TYPE": "x"})
        snapshot = await store.get_all()
        snapshot["LAW_TYPE"] = "mutated"
        assert await store.get("LAW_TYPE") == "x"
