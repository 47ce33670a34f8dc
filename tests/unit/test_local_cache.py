"""Tests for the SQLite-backed local cache store."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from pap.repositories.cache_entry_repo import CacheEntryRepository
from pap.stores.local_cache import COLLECTION_KEYS, LocalCacheStore
from pap.stores.local_cache import UnknownCollectionError


def _put_raw(session_factory, key: str, payload: str) -> None:
    with session_factory() as session:
        CacheEntryRepository(session).put_payload(key, payload)
        session.commit()


class TestLoadSave:
    def test_empty_cache_loads_empty(self, local_cache):
        assert local_cache.load("claims") == []

    def test_save_then_load(self, local_cache):
        items = [{"id": "1", "text": "Nepali text: नेपाल"}, {"id": "2"}]

        assert local_cache.save("claims", items) is True
        assert local_cache.load("claims") == items

    def test_save_overwrites(self, local_cache):
        local_cache.save("claims", [{"id": "1"}])
        local_cache.save("claims", [{"id": "2"}])

        assert local_cache.load("claims") == [{"id": "2"}]

    def test_collections_are_separate(self, local_cache):
        local_cache.save("claims", [{"id": "1"}])

        assert local_cache.load("claimants") == []

    def test_unknown_collection(self, local_cache):
        with pytest.raises(UnknownCollectionError):
            local_cache.load("users")

    def test_unserializable_entities_rejected(self, local_cache):
        assert local_cache.save("claims", [{"id": object()}]) is False


class TestLegacyKeys:
    def test_primary_key_is_first(self):
        assert COLLECTION_KEYS["claims"][0] == "pap_claims_v1"
        assert COLLECTION_KEYS["claimants"][0] == "pap_claimants_v1"

    def test_reads_legacy_alias(self, local_cache, session_factory):
        _put_raw(session_factory, "pap_claims", '[{"id": "old"}]')

        assert local_cache.load("claims") == [{"id": "old"}]

    def test_primary_wins_over_legacy(self, local_cache, session_factory):
        _put_raw(session_factory, "claims", '[{"id": "oldest"}]')
        local_cache.save("claims", [{"id": "current"}])

        assert local_cache.load("claims") == [{"id": "current"}]

    def test_empty_primary_falls_through(self, local_cache, session_factory):
        local_cache.save("claims", [])
        _put_raw(session_factory, "claims", '[{"id": "legacy"}]')

        assert local_cache.load("claims") == [{"id": "legacy"}]

    def test_writes_go_to_primary_key(self, local_cache, session_factory):
        _put_raw(session_factory, "pap_claims", '[{"id": "old"}]')
        local_cache.save("claims", [{"id": "new"}])

        with session_factory() as session:
            repo = CacheEntryRepository(session)
            assert repo.get_payload("pap_claims") == '[{"id": "old"}]'
            assert repo.get_payload("pap_claims_v1") == '[{"id": "new"}]'


class TestCorruption:
    @pytest.mark.parametrize("payload", ["{not json", '{"id": "1"}', '"text"', "null"])
    def test_corrupt_payload_reads_empty(self, local_cache, session_factory, payload):
        _put_raw(session_factory, "pap_claims_v1", payload)

        assert local_cache.load("claims") == []

    def test_corrupt_primary_uses_legacy(self, local_cache, session_factory):
        _put_raw(session_factory, "pap_claims_v1", "garbage")
        _put_raw(session_factory, "pap_claims", '[{"id": "legacy"}]')

        assert local_cache.load("claims") == [{"id": "legacy"}]

    def test_non_object_items_dropped(self, local_cache, session_factory):
        _put_raw(session_factory, "pap_claims_v1", '[{"id": "1"}, 5, null, "x"]')

        assert local_cache.load("claims") == [{"id": "1"}]


class TestStorageFailures:
    def test_write_failure_returns_false(self):
        session = MagicMock()
        session.commit.side_effect = OperationalError("UPDATE", {}, Exception("disk full"))
        store = LocalCacheStore(lambda: session)

        assert store.save("claims", [{"id": "1"}]) is False
        session.rollback.assert_called_once()
        session.close.assert_called_once()

    def test_read_failure_returns_empty(self):
        session = MagicMock()
        session.__enter__.return_value = session
        session.get.side_effect = OperationalError("SELECT", {}, Exception("locked"))
        store = LocalCacheStore(lambda: session)

        assert store.load("claims") == []
