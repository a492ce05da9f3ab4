"""
tests/test_store.py — DocumentStore and collection codecs
==========================================================
"""

from __future__ import annotations

from tierbot.database.models import Document
from tierbot.engine.tiers import TierRule
from tierbot.services.store import (
    decode_id_set,
    decode_int_map,
    decode_tiers,
    encode_id_set,
    encode_int_map,
)


class TestDocumentStore:
    def test_absent_document_is_none(self, store):
        assert store.load("points") is None

    def test_save_then_load(self, store):
        store.save("points", {"1": 5})
        assert store.load("points") == {"1": 5}

    def test_save_overwrites(self, store, db_session):
        store.save("tiers", [1])
        store.save("tiers", [2])
        assert store.load("tiers") == [2]
        assert db_session.query(Document).count() == 1

    def test_invalid_json_reads_as_none(self, store, db_session):
        db_session.add(Document(name="points", value_json="{not json"))
        db_session.commit()
        assert store.load("points") is None

    def test_documents_are_independent(self, store):
        store.save("points", {"1": 1})
        store.save("command_channels", {"100": 555})
        assert store.load("points") == {"1": 1}
        assert store.load("command_channels") == {"100": 555}


class TestCodecs:
    def test_int_map_keys_become_strings(self):
        assert encode_int_map({1: 2}) == {"1": 2}

    def test_decode_int_map_parses_keys(self):
        assert decode_int_map({"10": 3, "11": -1}) == {10: 3, 11: -1}

    def test_decode_empty_inputs(self):
        assert decode_int_map(None) == {}
        assert decode_id_set(None) == set()
        assert decode_tiers(None) == []

    def test_id_set_is_sorted_list(self):
        assert encode_id_set({3, 1, 2}) == [1, 2, 3]

    def test_decode_tiers(self):
        raw = [{"old_role_id": "1", "new_role_id": 2, "required_points": 10}]
        assert decode_tiers(raw) == [TierRule(1, 2, 10)]
