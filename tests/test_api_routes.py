import httpx
import pytest

from campus_portal.api.fast_api import get_upstream_client
from campus_portal.client import bundle as codec


def login(api, email="student@bolashak.kz", password="password"):
    return api.post("/api/auth", json={"email": email, "password": password})


class TestAuth:

    def test_seeded_user_can_log_in(self, api):
        response = login(api, email="  Student@Bolashak.kz ")
        assert response.status_code == 200
        body = response.json()
        assert body["id"] == "2"
        assert "passwordHash" not in body
        assert "token" in response.cookies

        me = api.get("/api/me")
        assert me.status_code == 200
        assert me.json()["email"] == "student@bolashak.kz"

    def test_login_failures(self, api):
        assert login(api, email="nobody@bolashak.kz").status_code == 404
        wrong = login(api, password="wrong-password")
        assert wrong.status_code == 401
        assert wrong.json() == {"error": "invalid password"}

    def test_me_without_cookie(self, api):
        assert api.get("/api/me").status_code == 401

    def test_register(self, api):
        payload = {"email": "New@Bolashak.kz", "password": "secret1", "name": "Новый"}
        created = api.post("/api/auth", params={"mode": "register"}, json=payload)
        assert created.status_code == 201
        assert created.json()["email"] == "new@bolashak.kz"
        assert created.json()["role"] == "STUDENT"

        again = api.post("/api/auth", params={"mode": "register"}, json=payload)
        assert again.status_code == 409
        assert login(api, email="new@bolashak.kz", password="secret1").status_code == 200

    @pytest.mark.parametrize("payload", [
        {"email": "a@b.kz", "password": "123", "name": "A"},
        {"email": "a@b.kz", "password": "secret1"},
    ])
    def test_register_rejects_bad_input(self, api, payload):
        assert api.post("/api/auth", params={"mode": "register"}, json=payload).status_code == 400

    def test_logout_drops_cookie(self, api):
        login(api)
        api.post("/api/logout")
        assert api.get("/api/me").status_code == 401


class TestUsers:

    def test_duplicate_email_conflicts(self, api):
        response = api.post("/api/users", json={"email": "ADMIN@bolashak.kz", "name": "Dup"})
        assert response.status_code == 409
        assert response.json() == {"error": "email already exists"}

    def test_update(self, api):
        response = api.patch("/api/users", params={"id": "3"}, json={"department": "Кафедра IT"})
        assert response.status_code == 200
        assert response.json()["department"] == "Кафедра IT"
        assert api.patch("/api/users", params={"id": "nope"}, json={"name": "X"}).status_code == 404

    def test_missing_required_field_is_400(self, api):
        response = api.post("/api/users", json={"name": "No email"})
        assert response.status_code == 400
        assert "error" in response.json()


class TestMessagesAndDocs:

    def test_chat_roundtrip(self, api):
        for i, role in enumerate(["user", "model"]):
            response = api.post("/api/messages", json={
                "id": f"m{i}", "userId": "2", "agentId": "nav", "role": role, "content": f"c{i}",
                "latencyMs": 120, "timestamp": f"2024-05-01T10:00:0{i}+00:00",
            })
            assert response.status_code == 201
        chat = api.get("/api/messages", params={"userId": "2", "agentId": "nav"}).json()
        assert [m["id"] for m in chat] == ["m0", "m1"]
        assert chat[0]["latencyMs"] is None
        assert chat[1]["latencyMs"] == 120

        cleared = api.delete("/api/messages", params={"userId": "2", "agentId": "nav"})
        assert cleared.json() == {"success": True, "deleted": 2}

    def test_clear_requires_ids(self, api):
        assert api.delete("/api/messages", params={"userId": "2"}).status_code == 400

    def test_docs_crud(self, api):
        doc = api.post("/api/docs", json={"userId": "2", "title": "Rules", "content": "No pets"}).json()
        assert api.put("/api/docs", params={"id": doc["id"]}, json={"title": "Dorm rules"}).status_code == 200
        [stored] = api.get("/api/docs", params={"userId": "2"}).json()
        assert stored["title"] == "Dorm rules"
        assert stored["content"] == "No pets"
        assert api.delete("/api/docs", params={"id": doc["id"]}).status_code == 200
        assert api.delete("/api/docs", params={"id": doc["id"]}).status_code == 404
        assert api.put("/api/docs", params={"id": "nope"}, json={"title": "x"}).status_code == 404


class TestNotifications:

    def test_seeded_unread_count_and_mark_read(self, api):
        assert api.get("/api/notifications", params={"userId": "2", "mode": "count"}).json() == {"count": 2}
        assert api.patch("/api/notifications", params={"id": "seed_n1"}).status_code == 200
        assert api.get("/api/notifications", params={"userId": "2", "mode": "count"}).json() == {"count": 1}
        assert api.patch("/api/notifications", params={"id": "nope"}).status_code == 404

    def test_broadcast_reaches_every_user(self, api):
        response = api.post(
            "/api/notifications", params={"mode": "broadcast"},
            json={"title": "Exam week", "message": "Schedule published", "severity": "ALERT"},
        )
        assert response.status_code == 201
        created = response.json()
        assert sorted(n["userId"] for n in created) == ["1", "2", "3"]
        assert len({n["id"] for n in created}) == 3

    def test_invalid_severity(self, api):
        response = api.post("/api/notifications", json={"userId": "2", "title": "t", "message": "m", "severity": "LOUD"})
        assert response.status_code == 400


class TestFeedbackAndAudit:

    def test_feedback_is_upserted_per_message(self, api):
        body = {"messageId": "m1", "userId": "2", "agentId": "nav", "rating": 1}
        api.post("/api/feedback", json=body)
        api.post("/api/feedback", json={**body, "rating": -1, "comment": "wrong"})
        rows = api.get("/api/feedback", params={"messageId": "m1"}).json()
        assert len(rows) == 1
        assert rows[0]["rating"] == -1
        assert len(api.get("/api/feedback").json()) == 1

    def test_audit_log_and_clear(self, api):
        api.post("/api/audit", json={"type": "login", "actorUserId": "2", "details": {"email": "x"}})
        api.post("/api/audit", json={"type": "logout"})
        events = api.get("/api/audit").json()
        assert [e["type"] for e in events] == ["logout", "login"]
        assert api.delete("/api/audit").json() == {"success": True, "deleted": 2}


class TestCasesAndCatalog:

    def test_case_lifecycle(self, api):
        created = api.post("/api/cases", json={
            "userId": "2", "agentId": "room", "caseType": "repair", "title": "Tap", "payload": {"room": "214"},
        })
        assert created.status_code == 201
        case = created.json()
        assert case["status"] == "OPEN"

        updated = api.patch("/api/cases", params={"id": case["id"]}, json={"status": "RESOLVED"}).json()
        assert updated["status"] == "RESOLVED"
        assert updated["payload"] == {"room": "214"}

        message = api.post("/api/case-messages", json={"caseId": case["id"], "message": "Fixed", "authorRole": "ADMIN"})
        assert message.status_code == 201
        thread = api.get("/api/case-messages", params={"caseId": case["id"]}).json()
        assert [m["message"] for m in thread] == ["Fixed"]

        cases = api.get("/api/cases", params={"userId": "2", "agentId": "room"}).json()
        assert [c["id"] for c in cases] == [case["id"]]

    def test_case_errors(self, api):
        assert api.patch("/api/cases", params={"id": "nope"}, json={"status": "CLOSED"}).status_code == 404
        assert api.post("/api/case-messages", json={"caseId": "nope", "message": "x"}).status_code == 404
        assert api.get("/api/cases", params={"userId": "2"}).status_code == 400

    def test_seeded_catalog(self, api):
        items = api.get("/api/ui-items", params={"agentId": "abitur", "kind": "quick", "groupKey": "Сроки"}).json()
        assert [i["id"] for i in items] == ["ui_abitur_quick_deadlines_1"]
        topics = api.get("/api/ui-items", params={"agentId": "kadr", "kind": "topic"}).json()
        assert [i["title"] for i in topics] == ["Справки студентам", "Кадровые документы"]


class TestBackup:

    def test_export_contains_every_table(self, api):
        bundle = api.get("/api/backup").json()
        assert bundle["version"] == 1
        assert set(bundle["tables"]) == set(codec.TABLES)
        assert all(user["passwordHash"] for user in bundle["tables"][codec.USERS])

    def test_replace_restores_snapshot(self, api):
        snapshot = api.get("/api/backup").json()
        api.post("/api/docs", json={"userId": "2", "title": "Temp", "content": "x"})
        response = api.post("/api/backup", params={"mode": "replace"}, json=snapshot)
        assert response.status_code == 200
        assert api.get("/api/docs").json() == []
        assert len(api.get("/api/users").json()) == 3

    def test_merge_keeps_existing_rows(self, api):
        api.post("/api/docs", json={"id": "d_keep", "userId": "2", "title": "Keep", "content": "x"})
        bundle = codec.encode_bundle({codec.DOCS: [{
            "id": "d_new", "userId": "2", "title": "New", "content": "y",
            "createdAt": "2024-05-01T10:00:00+00:00", "updatedAt": "2024-05-01T10:00:00+00:00",
        }]})
        response = api.post("/api/backup", params={"mode": "merge"}, json=bundle)
        assert response.json()["written"][codec.DOCS] == 1
        assert sorted(d["id"] for d in api.get("/api/docs").json()) == ["d_keep", "d_new"]

    def test_unsupported_version_changes_nothing(self, api):
        response = api.post("/api/backup", json={"version": 2, "tables": {codec.USERS: []}})
        assert response.status_code == 400
        assert len(api.get("/api/users").json()) == 3

    def test_malformed_row_is_rejected(self, api):
        bundle = {"version": 1, "tables": {codec.DOCS: [{"id": "d1"}]}}
        assert api.post("/api/backup", params={"mode": "merge"}, json=bundle).status_code == 400


class TestHealthAndProxy:

    def test_health(self, api):
        assert api.get("/api/health", params={"init": "true"}).json() == {"ok": True, "db": "ok"}

    def test_vacancy_proxy_relays_upstream(self, api):
        seen = []

        def upstream(request):
            seen.append(request)
            return httpx.Response(200, json={"items": [], "found": 0})

        async def override():
            async with httpx.AsyncClient(base_url="https://hh.test", transport=httpx.MockTransport(upstream)) as client:
                yield client

        api.app.dependency_overrides[get_upstream_client] = override
        response = api.get("/api/hh/vacancies", params={"text": "python", "area": "40"})
        assert response.status_code == 200
        assert response.json() == {"items": [], "found": 0}
        assert dict(seen[0].url.params) == {"text": "python", "area": "40"}
        assert seen[0].headers["user-agent"]

    def test_vacancy_proxy_upstream_failure(self, api):
        def upstream(request):
            raise httpx.ConnectError("refused")

        async def override():
            async with httpx.AsyncClient(base_url="https://hh.test", transport=httpx.MockTransport(upstream)) as client:
                yield client

        api.app.dependency_overrides[get_upstream_client] = override
        response = api.get("/api/hh/vacancies", params={"text": "python"})
        assert response.status_code == 502
        assert response.json() == {"error": "proxy_error"}
