"""
Primary / fallback provider composition for the cases and catalog resources.

Each resource group has one abstract provider interface with a remote and a
local implementation. `resolve_provider` composes them according to
`FALLBACK_RESOURCES`: listed resources get a `FailoverProvider` that calls the
remote provider first and, when it fails, serves the same call from the Local
Store. Every call retries remote first; no failure state is remembered.
"""

import inspect
import logging
from abc import ABC, abstractmethod

from campus_portal.api import models
from campus_portal.client.errors import NotFoundError, PortalError
from campus_portal.client.local_store import LocalStore, now_iso
from campus_portal.client.remote_api import RemoteApi, parse_many, parse_one
from campus_portal.ids import make_id

logger = logging.getLogger(__name__)

FALLBACK_RESOURCES = frozenset({"cases", "catalog"})
"""Resource groups served from the Local Store when the remote call fails."""

LOCAL_CASE_PREFIX = "local_case_"
LOCAL_CASE_MESSAGE_PREFIX = "local_cm_"


class CasesProvider(ABC):
    """Workflow cases and their message threads."""

    @abstractmethod
    async def list_cases(self, user_id: str, agent_id: str) -> list[models.WorkflowCase]:
        ...

    @abstractmethod
    async def create_case(self, data: models.CaseCreate) -> models.WorkflowCase:
        ...

    @abstractmethod
    async def update_case(self, case_id: str, data: models.CaseUpdate) -> models.WorkflowCase:
        ...

    @abstractmethod
    async def list_case_messages(self, case_id: str) -> list[models.CaseMessage]:
        ...

    @abstractmethod
    async def post_case_message(self, data: models.CaseMessageCreate) -> models.CaseMessage:
        ...


class CatalogProvider(ABC):
    """Read access to the agent catalog (`UiItem` rows)."""

    @abstractmethod
    async def list_ui_items(self, agent_id: str, kind: str, group_key: str | None = None) -> list[models.UiItem]:
        ...


class RemoteCasesProvider(CasesProvider):

    def __init__(self, remote: RemoteApi):
        self.remote = remote

    async def list_cases(self, user_id, agent_id):
        return parse_many(models.WorkflowCase, await self.remote.get("/cases", userId=user_id, agentId=agent_id))

    async def create_case(self, data):
        return parse_one(models.WorkflowCase, await self.remote.post("/cases", json=data.to_wire()))

    async def update_case(self, case_id, data):
        row = await self.remote.patch("/cases", json=data.to_wire(), id=case_id)
        return parse_one(models.WorkflowCase, row)

    async def list_case_messages(self, case_id):
        return parse_many(models.CaseMessage, await self.remote.get("/case-messages", caseId=case_id))

    async def post_case_message(self, data):
        return parse_one(models.CaseMessage, await self.remote.post("/case-messages", json=data.to_wire()))


class LocalCasesProvider(CasesProvider):
    """Cases kept in the Local Store; generated ids carry the ``local_`` prefixes."""

    def __init__(self, store: LocalStore):
        self.store = store

    async def list_cases(self, user_id, agent_id):
        return self.store.cases.find_by_user_and_agent(user_id, agent_id)

    async def create_case(self, data):
        now = now_iso()
        case = models.WorkflowCase(
            id=make_id(LOCAL_CASE_PREFIX),
            user_id=data.user_id,
            agent_id=data.agent_id,
            case_type=data.case_type,
            title=data.title,
            status="OPEN",
            payload=data.payload,
            created_at=now,
            updated_at=now,
        )
        return self.store.cases.create(case)

    async def update_case(self, case_id, data):
        case = self.store.cases.update(case_id, status=data.status, title=data.title, payload=data.payload)
        if case is None:
            raise NotFoundError(f"case {case_id} not found")
        return case

    async def list_case_messages(self, case_id):
        return self.store.case_messages.find_by_case(case_id)

    async def post_case_message(self, data):
        message = models.CaseMessage(
            id=make_id(LOCAL_CASE_MESSAGE_PREFIX),
            case_id=data.case_id,
            author_user_id=data.author_user_id,
            author_role=data.author_role,
            message=data.message,
            created_at=now_iso(),
        )
        return self.store.case_messages.create(message)


class RemoteCatalogProvider(CatalogProvider):

    def __init__(self, remote: RemoteApi):
        self.remote = remote

    async def list_ui_items(self, agent_id, kind, group_key=None):
        rows = await self.remote.get("/ui-items", agentId=agent_id, kind=kind, groupKey=group_key or None)
        return parse_many(models.UiItem, rows)


class LocalCatalogProvider(CatalogProvider):

    def __init__(self, store: LocalStore):
        self.store = store

    async def list_ui_items(self, agent_id, kind, group_key=None):
        return self.store.ui_items.find(agent_id, kind, group_key)


class FailoverProvider:
    """
    Wraps two providers of the same interface.

    Every coroutine method runs on `primary`; when it raises any `PortalError`
    (transport failure, non-2xx status, unparseable body) the same call is
    repeated on `fallback` and its result returned. Caller input is validated
    by the facade before it gets here; other exceptions propagate unchanged.
    """

    def __init__(self, resource: str, primary, fallback):
        self.resource = resource
        self.primary = primary
        self.fallback = fallback

    def __getattr__(self, name: str):
        primary_method = getattr(self.primary, name)
        if not inspect.iscoroutinefunction(primary_method):
            return primary_method
        fallback_method = getattr(self.fallback, name)

        async def call(*args, **kwargs):
            try:
                return await primary_method(*args, **kwargs)
            except PortalError as e:
                logger.warning("%s.%s failed remotely (%s); serving from local store", self.resource, name, e)
                return await fallback_method(*args, **kwargs)

        call.__name__ = name
        return call


def resolve_provider(resource: str, primary, fallback):
    """`FailoverProvider` for resources in `FALLBACK_RESOURCES`, otherwise `primary` alone."""
    if resource in FALLBACK_RESOURCES:
        return FailoverProvider(resource, primary, fallback)
    return primary
