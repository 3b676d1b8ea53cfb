from datetime import datetime, timezone

import pytest

from campus_portal.client import bundle as codec
from campus_portal.client.errors import ValidationError
from campus_portal.client.local_store import LocalStore
from campus_portal.client.storage import MemoryStorage
from tests.conftest import fast_hash


def fb(fid, message_id, rating):
    return {"id": fid, "messageId": message_id, "userId": "2", "agentId": "nav", "rating": rating,
            "createdAt": "2024-05-01T10:00:00+00:00"}


class TestEncodeDecode:

    def test_encode_covers_every_table(self):
        bundle = codec.encode_bundle({codec.DOCS: [{"id": "d1"}], "tbl_other": [{"id": "x"}]},
                                     exported_at=datetime(2024, 5, 1, tzinfo=timezone.utc))
        assert bundle["version"] == codec.BUNDLE_VERSION
        assert bundle["exportedAt"] == "2024-05-01T00:00:00+00:00"
        assert list(bundle["tables"]) == list(codec.TABLES)
        assert bundle["tables"][codec.DOCS] == [{"id": "d1"}]
        assert bundle["tables"][codec.USERS] == []

    def test_decode_returns_only_listed_known_tables(self):
        decoded = codec.decode_bundle({"version": 1, "tables": {codec.DOCS: [], "tbl_other": [{}]}})
        assert decoded == {codec.DOCS: []}

    @pytest.mark.parametrize("bundle", [
        None,
        [],
        {"tables": {}},
        {"version": 2, "tables": {}},
        {"version": "1", "tables": {}},
        {"version": True, "tables": {}},
        {"version": 1},
        {"version": 1, "tables": []},
        {"version": 1, "tables": {codec.DOCS: {"id": "d1"}}},
        {"version": 1, "tables": {codec.DOCS: ["row"]}},
    ])
    def test_decode_rejects_invalid_bundles(self, bundle):
        with pytest.raises(ValidationError):
            codec.decode_bundle(bundle)

    def test_unknown_mode(self):
        with pytest.raises(ValidationError):
            codec.apply_bundle({}, {"version": 1, "tables": {}}, "append")

    def test_loads_rejects_bad_json(self):
        with pytest.raises(ValidationError):
            codec.loads("{")
        assert codec.loads(codec.dumps({"version": 1, "tables": {}})) == {"version": 1, "tables": {}}


class TestApply:

    def test_replace_only_touches_listed_tables(self):
        current = {codec.DOCS: [{"id": "d1"}], codec.AUDIT: [{"id": "a1"}]}
        result = codec.apply_bundle(current, {"version": 1, "tables": {codec.DOCS: [{"id": "d2"}]}}, "replace")
        assert result == {codec.DOCS: [{"id": "d2"}]}

    def test_merge_appends_rows(self):
        current = {codec.DOCS: [{"id": "d1"}]}
        result = codec.apply_bundle(current, {"version": 1, "tables": {codec.DOCS: [{"id": "d2"}]}}, "merge")
        assert result[codec.DOCS] == [{"id": "d1"}, {"id": "d2"}]

    def test_merge_upserts_feedback_by_message(self):
        current = {codec.FEEDBACK: [fb("f1", "m1", 1), fb("f2", "m2", 1)]}
        bundle = {"version": 1, "tables": {codec.FEEDBACK: [fb("f3", "m1", -1)]}}
        result = codec.apply_bundle(current, bundle, "merge")[codec.FEEDBACK]
        assert [(row["messageId"], row["rating"]) for row in result] == [("m2", 1), ("m1", -1)]


class TestStoreRoundTrip:

    def test_replace_import_restores_exported_tables(self):
        source = LocalStore(MemoryStorage(), hash_password=fast_hash)
        source.notifications.broadcast("Hello", "World")
        bundle = source.export_bundle()

        target = LocalStore(MemoryStorage(), hash_password=fast_hash)
        target.notifications.mark_read("seed_n1")
        target.import_bundle(bundle, "replace")

        for name in codec.TABLES:
            assert target.read_rows(name) == source.read_rows(name)

    def test_merge_never_removes_rows(self):
        store = LocalStore(MemoryStorage(), hash_password=fast_hash)
        before = {name: len(store.read_rows(name)) for name in codec.TABLES}
        store.import_bundle(store.export_bundle(), "merge")
        for name in codec.TABLES:
            assert len(store.read_rows(name)) >= before[name]
        assert len(store.read_rows(codec.USERS)) == 2 * before[codec.USERS]
