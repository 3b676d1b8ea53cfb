"""
Pydantic models used for request/response validation and API data contracts.

The record models (`User`, `Message`, ... `UiItem`) describe rows exactly as
they travel over the wire and as they are kept in the Local Store and the
backup bundle: camelCase keys, ISO-8601 timestamps. The `*Create` / `*Update`
models are request bodies; they are shared by the FastAPI routes and the
client-side Data Access Facade, which validates caller input with them before
any transport call.
"""

from datetime import datetime
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Role = Literal["STUDENT", "FACULTY", "ALUMNI", "ADMIN"]
AgentIdLiteral = Literal["abitur", "kadr", "nav", "career", "room"]
Severity = Literal["INFO", "WARN", "ALERT"]
CaseStatus = Literal["OPEN", "IN_PROGRESS", "RESOLVED", "CLOSED"]
UiItemKind = Literal[
    "category", "quick", "reference", "topic", "procedure",
    "request", "schedule", "direction", "offer", "resume_tip",
]

Primitive = Union[str, int, float, bool, None]
StructuredValue = Optional[dict[str, Union[Primitive, list[Primitive], dict[str, Primitive]]]]
"""Either null or an object of primitives, lists of primitives, or nested objects of primitives."""


class WireModel(BaseModel):
    """Base for every portal model: camelCase aliases, construction by field name."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict:
        """JSON-ready dict with camelCase keys; unset optional fields are omitted."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

class User(WireModel):
    """A portal account."""
    id: str
    email: str
    name: str
    role: Role
    department: Optional[str] = None
    avatar: Optional[str] = None
    password_hash: Optional[str] = None
    """bcrypt hash; stripped from every API response."""
    joined_at: datetime


class Message(WireModel):
    """One chat turn between a user and an agent."""
    id: str
    user_id: str
    agent_id: str
    role: Literal["user", "model"]
    content: str
    attachment: Optional[str] = None
    """Inline image as a data URL."""
    latency_ms: Optional[int] = None
    """Only set on model turns."""
    timestamp: datetime


class Notification(WireModel):
    id: str
    user_id: str
    title: str
    message: str
    is_read: bool = False
    severity: Severity = "INFO"
    link: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime


class Doc(WireModel):
    """A personal knowledge-base document."""
    id: str
    user_id: str
    title: str
    content: str
    created_at: datetime
    updated_at: Optional[datetime] = None


class MessageFeedback(WireModel):
    """Rating of one assistant message; at most one per `message_id`."""
    id: str
    message_id: str
    user_id: str
    agent_id: str
    rating: Literal[1, -1]
    comment: Optional[str] = None
    created_at: datetime


class AuditEvent(WireModel):
    id: str
    at: datetime
    actor_user_id: Optional[str] = None
    type: str
    details: StructuredValue = None


class WorkflowCase(WireModel):
    """A tracked request of a user towards one agent."""
    id: str
    user_id: str
    agent_id: str
    case_type: str
    title: Optional[str] = None
    status: CaseStatus = "OPEN"
    payload: StructuredValue = None
    created_at: datetime
    updated_at: datetime


class CaseMessage(WireModel):
    id: str
    case_id: str
    author_user_id: Optional[str] = None
    author_role: Literal["USER", "ADMIN"]
    message: str
    created_at: datetime


class UiItem(WireModel):
    """A global catalog row driving agent menus and reference text."""
    id: str
    agent_id: str
    kind: UiItemKind
    group_key: Optional[str] = None
    title: str
    content: Optional[str] = None
    meta: StructuredValue = None
    sort: int = 0
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------

class Credentials(WireModel):
    """Login / registration payload (`name` is required on registration only)."""
    email: str = Field(..., description="Email address; compared lower-cased.", examples=["student@bolashak.kz"])
    password: str = Field(..., description="Plaintext password.")
    name: Optional[str] = Field(None, description="Display name (registration).")


class UserCreate(WireModel):
    id: Optional[str] = None
    email: str
    name: str
    role: Role = "STUDENT"
    department: Optional[str] = None
    avatar: Optional[str] = None
    password: Optional[str] = Field(None, description="Plaintext password; hashed before storage.")


class UserUpdate(WireModel):
    email: Optional[str] = None
    name: Optional[str] = None
    role: Optional[Role] = None
    department: Optional[str] = None
    avatar: Optional[str] = None
    password: Optional[str] = None


class MessageCreate(WireModel):
    id: Optional[str] = None
    user_id: str
    agent_id: AgentIdLiteral
    role: Literal["user", "model"]
    content: str
    attachment: Optional[str] = None
    latency_ms: Optional[int] = None
    timestamp: Optional[datetime] = None


class DocCreate(WireModel):
    id: Optional[str] = None
    user_id: str
    title: str
    content: str


class DocUpdate(WireModel):
    title: Optional[str] = None
    content: Optional[str] = None


class NotificationCreate(WireModel):
    id: Optional[str] = None
    user_id: str
    title: str
    message: str
    severity: Severity = "INFO"
    link: Optional[str] = None
    created_by: Optional[str] = None


class BroadcastRequest(WireModel):
    """One notification fanned out to every user."""
    title: str
    message: str
    severity: Severity = "INFO"
    link: Optional[str] = None
    created_by: Optional[str] = None


class FeedbackUpsert(WireModel):
    id: Optional[str] = None
    message_id: str
    user_id: str
    agent_id: str
    rating: Literal[1, -1]
    comment: Optional[str] = None


class AuditCreate(WireModel):
    id: Optional[str] = None
    actor_user_id: Optional[str] = None
    type: str
    details: StructuredValue = None


class CaseCreate(WireModel):
    user_id: str
    agent_id: AgentIdLiteral
    case_type: str
    title: Optional[str] = None
    payload: StructuredValue = None


class CaseUpdate(WireModel):
    status: Optional[CaseStatus] = None
    title: Optional[str] = None
    payload: StructuredValue = None


class CaseMessageCreate(WireModel):
    case_id: str
    author_user_id: Optional[str] = None
    author_role: Literal["USER", "ADMIN"] = "USER"
    message: str
