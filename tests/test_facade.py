import json

import pytest

from campus_portal.client.errors import ConflictError, ValidationError
from campus_portal.client.facade import DataAccessFacade
from tests.conftest import json_response

USER_ROW = {
    "id": "2", "email": "student@bolashak.kz", "name": "Иван Иванов", "role": "STUDENT",
    "joinedAt": "2024-05-01T10:00:00+00:00",
}


def echo_created(extra: dict):
    """Route answering 201 with the request body plus `extra` fields."""
    def respond(request):
        return json_response(201, {**json.loads(request.content), **extra})
    return respond


@pytest.fixture
async def facade(remote, store):
    facade = DataAccessFacade(remote, store)
    yield facade
    await facade.flush_audit()


def audit_bodies(handler) -> list[dict]:
    return [json.loads(r.content) for r in handler.calls("POST", "/api/audit")]


class TestAuth:

    async def test_login_sets_actor_for_audit_events(self, facade, handler):
        handler.routes["POST /api/auth"] = json_response(200, USER_ROW)
        handler.routes["POST /api/audit"] = json_response(201, {})

        user = await facade.auth.login("student@bolashak.kz", "password")
        await facade.flush_audit()

        assert user.id == "2"
        assert facade.actor_user_id == "2"
        [event] = audit_bodies(handler)
        assert event["type"] == "login"
        assert event["actorUserId"] == "2"

    async def test_register_requires_name(self, facade, handler):
        with pytest.raises(ValidationError):
            await facade.auth.register("new@bolashak.kz", "secret1", "  ")
        assert handler.calls("POST", "/api/auth") == []

    async def test_register_passes_mode(self, facade, handler):
        handler.routes["POST /api/auth"] = json_response(201, {**USER_ROW, "id": "u9"})
        await facade.auth.register("new@bolashak.kz", "secret1", "New")
        assert handler.calls("POST", "/api/auth")[0].url.params["mode"] == "register"

    async def test_duplicate_email_is_conflict(self, facade, handler):
        handler.routes["POST /api/users"] = json_response(409, {"error": "email already exists"})
        with pytest.raises(ConflictError):
            await facade.users.create(email="student@bolashak.kz", name="Dup")


class TestAudit:

    async def test_failing_audit_write_never_fails_the_call(self, facade, handler, caplog):
        handler.routes["POST /api/messages"] = echo_created({"timestamp": "2024-05-01T10:00:00+00:00"})
        handler.routes["POST /api/audit"] = json_response(500, {"error": "audit down"})

        message = await facade.messages.save(user_id="2", agent_id="nav", role="user", content="hi")
        await facade.flush_audit()

        assert message.id.startswith("m_")
        assert len(handler.calls("POST", "/api/audit")) == 1
        assert "Audit event message_save dropped" in caplog.text

    async def test_explicit_log(self, facade, handler):
        handler.routes["POST /api/audit"] = json_response(201, {})
        await facade.audit.log("chat_export", {"agentId": "nav", "format": "md"})
        await facade.flush_audit()
        assert audit_bodies(handler)[0]["details"] == {"agentId": "nav", "format": "md"}


class TestGateways:

    async def test_validation_happens_before_transport(self, facade, handler):
        with pytest.raises(ValidationError):
            await facade.docs.create(user_id="2", title="No content")
        with pytest.raises(ValidationError):
            await facade.feedback.upsert(message_id="m1", user_id="2", agent_id="nav", rating=5)
        assert [r for r in handler.requests if r.url.path != "/api/audit"] == []

    async def test_unread_count(self, facade, handler):
        handler.routes["GET /api/notifications"] = json_response(200, {"count": 3})
        assert await facade.notifications.count_unread("2") == 3
        assert handler.requests[0].url.params["mode"] == "count"

    async def test_broadcast_returns_created_notifications(self, facade, handler):
        rows = [
            {"id": f"n_{uid}", "userId": uid, "title": "T", "message": "M", "severity": "ALERT",
             "isRead": False, "createdAt": "2024-05-01T10:00:00+00:00"}
            for uid in ("1", "2", "3")
        ]
        handler.routes["POST /api/notifications"] = json_response(201, rows)
        created = await facade.notifications.broadcast("T", "M", severity="ALERT")
        assert [n.user_id for n in created] == ["1", "2", "3"]
        assert handler.calls("POST", "/api/notifications")[0].url.params["mode"] == "broadcast"

    async def test_messages_clear_returns_deleted_count(self, facade, handler):
        handler.routes["DELETE /api/messages"] = json_response(200, {"success": True, "deleted": 4})
        assert await facade.messages.clear("2", "nav") == 4


class TestBackup:

    async def test_unsupported_version_is_rejected_locally(self, facade, handler):
        with pytest.raises(ValidationError):
            await facade.backup.import_bundle({"version": 2, "tables": {}}, "replace")
        assert handler.calls("POST", "/api/backup") == []

    async def test_unknown_mode_is_rejected_locally(self, facade, handler):
        with pytest.raises(ValidationError):
            await facade.backup.import_bundle({"version": 1, "tables": {}}, "overwrite")

    async def test_valid_bundle_is_uploaded(self, facade, handler):
        handler.routes["POST /api/backup"] = json_response(200, {"success": True, "written": {"tbl_docs": 0}})
        result = await facade.backup.import_bundle({"version": 1, "tables": {"tbl_docs": []}}, "merge")
        assert result["written"] == {"tbl_docs": 0}
        assert handler.calls("POST", "/api/backup")[0].url.params["mode"] == "merge"
