"""
Data Access Facade
==================

One stable async function surface per entity, independent of where the data
lives. Gateways are attributes of `DataAccessFacade`:

=================  ===========================================================
``auth``           login / register / logout (remembers the acting user)
``users``          list, create, update
``messages``       list, list by user+agent, save, clear
``docs``           list, create, update, remove
``notifications``  list, count unread, create, broadcast, mark read
``feedback``       list, upsert (keyed on messageId)
``audit``          list, log, clear
``backup``         export, import (``replace`` | ``merge``)
``cases``          list, create, update, thread, post message   (falls back)
``catalog``        list catalog items                          (falls back)
=================  ===========================================================

Errors
------
Calls fail with `campus_portal.client.errors` types. Caller input is checked
against the request models before any transport call; a missing or malformed
field raises `ValidationError`.

Audit
-----
Each mutating call schedules one audit event on the running event loop and
returns without waiting for it. A failing audit write is logged and dropped;
it never fails the call that produced it. `flush_audit()` awaits the pending
writes (shutdown, tests).
"""

import asyncio
import logging
from typing import Type, TypeVar

import pydantic

from campus_portal.api import models
from campus_portal.client import bundle as codec
from campus_portal.client.errors import NetworkError, ValidationError
from campus_portal.client.fallback import (
    LocalCasesProvider,
    LocalCatalogProvider,
    RemoteCasesProvider,
    RemoteCatalogProvider,
    resolve_provider,
)
from campus_portal.client.local_store import LocalStore
from campus_portal.client.remote_api import RemoteApi, parse_many, parse_one
from campus_portal.ids import make_id

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)


def build(model: Type[ModelT], **fields) -> ModelT:
    """Validate caller input against a request model; failures raise `ValidationError`."""
    try:
        return model.model_validate(fields)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        raise ValidationError(f"{model.__name__}.{field}: {first['msg']}") from e


class AuditTrail:
    """Fire-and-forget writer of audit events."""

    def __init__(self, facade: "DataAccessFacade"):
        self.facade = facade
        self._pending: set[asyncio.Task] = set()

    def record(self, event_type: str, details: dict | None = None) -> None:
        """Schedule one audit event; returns immediately."""
        try:
            event = models.AuditCreate(
                id=make_id("a_"),
                actor_user_id=self.facade.actor_user_id,
                type=event_type,
                details=details,
            )
            loop = asyncio.get_running_loop()
        except (pydantic.ValidationError, RuntimeError) as e:
            logger.warning("Audit event %s dropped: %s", event_type, e)
            return
        task = loop.create_task(self._send(event))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _send(self, event: models.AuditCreate) -> None:
        try:
            await self.facade.remote.post("/audit", json=event.to_wire())
        except Exception as e:
            logger.warning("Audit event %s dropped: %s", event.type, e)

    async def drain(self) -> None:
        while self._pending:
            await asyncio.gather(*list(self._pending))


class Gateway:
    def __init__(self, facade: "DataAccessFacade"):
        self.facade = facade

    @property
    def remote(self) -> RemoteApi:
        return self.facade.remote

    def audit(self, event_type: str, details: dict | None = None) -> None:
        self.facade.audit_trail.record(event_type, details)


class AuthGateway(Gateway):

    async def login(self, email: str, password: str) -> models.User:
        """Authenticate and remember the user as the actor of later audit events."""
        credentials = build(models.Credentials, email=email, password=password)
        user = parse_one(models.User, await self.remote.post("/auth", json=credentials.to_wire()))
        self.facade.actor_user_id = user.id
        self.audit("login", {"email": user.email})
        return user

    async def register(self, email: str, password: str, name: str) -> models.User:
        credentials = build(models.Credentials, email=email, password=password, name=name)
        if not credentials.name or not credentials.name.strip():
            raise ValidationError("name required")
        row = await self.remote.post("/auth", json=credentials.to_wire(), mode="register")
        user = parse_one(models.User, row)
        self.audit("register", {"userId": user.id})
        return user

    async def logout(self) -> None:
        self.audit("logout")
        self.facade.actor_user_id = None


class UsersGateway(Gateway):

    async def list_all(self) -> list[models.User]:
        return parse_many(models.User, await self.remote.get("/users"))

    async def create(self, **fields) -> models.User:
        data = build(models.UserCreate, **fields)
        user = parse_one(models.User, await self.remote.post("/users", json=data.to_wire()))
        self.audit("user_create", {"userId": user.id, "role": user.role})
        return user

    async def update(self, user_id: str, **fields) -> models.User:
        data = build(models.UserUpdate, **fields)
        user = parse_one(models.User, await self.remote.patch("/users", json=data.to_wire(), id=user_id))
        self.audit("user_update", {"userId": user_id, "fields": sorted(data.model_dump(exclude_none=True))})
        return user


class MessagesGateway(Gateway):

    async def list_all(self) -> list[models.Message]:
        return parse_many(models.Message, await self.remote.get("/messages"))

    async def list_by_user_and_agent(self, user_id: str, agent_id: str) -> list[models.Message]:
        """One chat, oldest first."""
        return parse_many(models.Message, await self.remote.get("/messages", userId=user_id, agentId=agent_id))

    async def save(self, **fields) -> models.Message:
        fields.setdefault("id", make_id("m_"))
        data = build(models.MessageCreate, **fields)
        message = parse_one(models.Message, await self.remote.post("/messages", json=data.to_wire()))
        self.audit("message_save", {"messageId": message.id, "agentId": message.agent_id, "role": message.role})
        return message

    async def clear(self, user_id: str, agent_id: str) -> int:
        result = await self.remote.delete("/messages", userId=user_id, agentId=agent_id)
        deleted = int((result or {}).get("deleted", 0))
        self.audit("chat_clear", {"userId": user_id, "agentId": agent_id, "deleted": deleted})
        return deleted


class DocsGateway(Gateway):

    async def list_all(self, user_id: str | None = None) -> list[models.Doc]:
        return parse_many(models.Doc, await self.remote.get("/docs", userId=user_id))

    async def create(self, **fields) -> models.Doc:
        data = build(models.DocCreate, **fields)
        doc = parse_one(models.Doc, await self.remote.post("/docs", json=data.to_wire()))
        self.audit("doc_create", {"docId": doc.id, "title": doc.title})
        return doc

    async def update(self, doc_id: str, title: str | None = None, content: str | None = None) -> None:
        data = build(models.DocUpdate, title=title, content=content)
        await self.remote.put("/docs", json=data.to_wire(), id=doc_id)
        self.audit("doc_update", {"docId": doc_id})

    async def remove(self, doc_id: str) -> None:
        await self.remote.delete("/docs", id=doc_id)
        self.audit("doc_delete", {"docId": doc_id})


class NotificationsGateway(Gateway):

    async def list_all(self, user_id: str | None = None) -> list[models.Notification]:
        return parse_many(models.Notification, await self.remote.get("/notifications", userId=user_id))

    async def count_unread(self, user_id: str) -> int:
        result = await self.remote.get("/notifications", userId=user_id, mode="count")
        if not isinstance(result, dict) or not isinstance(result.get("count"), int):
            raise NetworkError("invalid response for unread count")
        return result["count"]

    async def create(self, **fields) -> models.Notification:
        data = build(models.NotificationCreate, **fields)
        notification = parse_one(models.Notification, await self.remote.post("/notifications", json=data.to_wire()))
        self.audit("notification_create", {"notificationId": notification.id, "userId": notification.user_id})
        return notification

    async def broadcast(self, title: str, message: str, **options) -> list[models.Notification]:
        """Send one notification to every user; options: severity, link, created_by."""
        data = build(models.BroadcastRequest, title=title, message=message, **options)
        rows = await self.remote.post("/notifications", json=data.to_wire(), mode="broadcast")
        created = parse_many(models.Notification, rows)
        self.audit("notification_broadcast", {"title": data.title, "severity": data.severity, "recipients": len(created)})
        return created

    async def mark_read(self, notification_id: str) -> None:
        await self.remote.patch("/notifications", id=notification_id)
        self.audit("notification_read", {"notificationId": notification_id})


class FeedbackGateway(Gateway):

    async def list_all(self, message_id: str | None = None) -> list[models.MessageFeedback]:
        return parse_many(models.MessageFeedback, await self.remote.get("/feedback", messageId=message_id))

    async def upsert(self, **fields) -> models.MessageFeedback:
        """Rate a message; a second rating of the same message replaces the first."""
        data = build(models.FeedbackUpsert, **fields)
        feedback = parse_one(models.MessageFeedback, await self.remote.post("/feedback", json=data.to_wire()))
        self.audit("feedback", {"messageId": feedback.message_id, "rating": feedback.rating})
        return feedback


class AuditGateway(Gateway):
    """Direct access to the audit log (admin panel)."""

    async def list_all(self) -> list[models.AuditEvent]:
        return parse_many(models.AuditEvent, await self.remote.get("/audit"))

    async def log(self, event_type: str, details: dict | None = None) -> None:
        """Fire-and-forget event from application code (e.g. chat export)."""
        self.audit(event_type, details)

    async def clear(self) -> None:
        await self.remote.delete("/audit")
        self.audit("audit_clear")


class BackupGateway(Gateway):

    async def export(self) -> dict:
        bundle = await self.remote.get("/backup")
        self.audit("backup_export")
        return bundle

    async def import_bundle(self, bundle: dict, mode: str = "replace") -> dict:
        """Validate the whole bundle locally, then upload it."""
        codec.check_mode(mode)
        tables = codec.decode_bundle(bundle)
        result = await self.remote.post("/backup", json=bundle, mode=mode)
        self.audit("backup_import", {"mode": mode, "tables": sorted(tables)})
        return result


class CasesGateway(Gateway):
    """Workflow cases; served from the Local Store when the remote call fails."""

    def __init__(self, facade: "DataAccessFacade"):
        super().__init__(facade)
        self.provider = resolve_provider("cases", RemoteCasesProvider(facade.remote), LocalCasesProvider(facade.local))

    async def list_by_user_and_agent(self, user_id: str, agent_id: str) -> list[models.WorkflowCase]:
        return await self.provider.list_cases(user_id, agent_id)

    async def create(self, **fields) -> models.WorkflowCase:
        case = await self.provider.create_case(build(models.CaseCreate, **fields))
        self.audit("case_create", {"caseId": case.id, "caseType": case.case_type})
        return case

    async def update(self, case_id: str, **fields) -> models.WorkflowCase:
        case = await self.provider.update_case(case_id, build(models.CaseUpdate, **fields))
        self.audit("case_update", {"caseId": case_id, "status": case.status})
        return case

    async def list_messages(self, case_id: str) -> list[models.CaseMessage]:
        return await self.provider.list_case_messages(case_id)

    async def post_message(self, **fields) -> models.CaseMessage:
        message = await self.provider.post_case_message(build(models.CaseMessageCreate, **fields))
        self.audit("case_message", {"caseId": message.case_id, "authorRole": message.author_role})
        return message


class CatalogGateway(Gateway):

    def __init__(self, facade: "DataAccessFacade"):
        super().__init__(facade)
        self.provider = resolve_provider("catalog", RemoteCatalogProvider(facade.remote), LocalCatalogProvider(facade.local))

    async def list_items(self, agent_id: str, kind: str, group_key: str | None = None) -> list[models.UiItem]:
        return await self.provider.list_ui_items(agent_id, kind, group_key)


class DataAccessFacade:
    """
    Entry point of the client data layer.

    Parameters
    ----------
    remote : RemoteApi
        Transport to the portal API.
    local : LocalStore
        Store used by the fallback paths.
    actor_user_id : str | None
        Actor recorded on audit events; set by `auth.login`.
    """

    def __init__(self, remote: RemoteApi, local: LocalStore, actor_user_id: str | None = None):
        self.remote = remote
        self.local = local
        self.actor_user_id = actor_user_id
        self.audit_trail = AuditTrail(self)
        self.auth = AuthGateway(self)
        self.users = UsersGateway(self)
        self.messages = MessagesGateway(self)
        self.docs = DocsGateway(self)
        self.notifications = NotificationsGateway(self)
        self.feedback = FeedbackGateway(self)
        self.audit = AuditGateway(self)
        self.backup = BackupGateway(self)
        self.cases = CasesGateway(self)
        self.catalog = CatalogGateway(self)

    async def flush_audit(self) -> None:
        """Wait for every scheduled audit write."""
        await self.audit_trail.drain()

    async def aclose(self) -> None:
        await self.flush_audit()
        await self.remote.aclose()
