"""
WorkflowCase / CaseMessage ORM Models
=====================================

Workflow cases are tickets a user opens with an agent (a certificate request,
a dormitory repair, ...). Each case carries a status lifecycle
``OPEN → IN_PROGRESS → RESOLVED → CLOSED`` and an ordered thread of
case messages written by the user or by an administrator.

Key features
~~~~~~~~~~~~
- ``payload`` is an optional JSON object with the request form fields
- ``tbl_case_messages.case_id`` cascades on case deletion
- Case messages are read in creation order (ascending)
"""

from campus_portal.database.config.connection_engine import declarativeBase
from campus_portal.database.entities.timestamps import to_datetime, to_iso, utcnow
from sqlalchemy import ForeignKey, DateTime, TEXT, JSON, Index
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime

class WorkflowCase(declarativeBase):
    """
    ORM model for the `tbl_cases` table.

    Attributes
    ----------
    id : str
        Primary key.
    user_id : str
        Owner of the case.
    agent_id : str
        Agent the case was opened with.
    case_type : str
        Request type (e.g. "certificate", "repair").
    title : str | None
        Optional short title.
    status : str
        OPEN, IN_PROGRESS, RESOLVED or CLOSED.
    payload : dict | None
        Structured request data.
    created_at, updated_at : datetime
        Lifecycle timestamps (UTC).
    """

    __tablename__ = "tbl_cases"
    __table_args__ = (Index("idx_cases_user_agent", "user_id", "agent_id"),)

    id: Mapped[str] = mapped_column(TEXT, primary_key=True)
    user_id: Mapped[str] = mapped_column(TEXT, ForeignKey("tbl_users.id", ondelete="CASCADE"), nullable=False)
    agent_id: Mapped[str] = mapped_column(TEXT, nullable=False)
    case_type: Mapped[str] = mapped_column(TEXT, nullable=False)
    title: Mapped[str | None] = mapped_column(TEXT, nullable=True)
    status: Mapped[str] = mapped_column(TEXT, nullable=False, default="OPEN")
    payload: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __init__(
        self,
        case_id: str,
        user_id: str,
        agent_id: str,
        case_type: str,
        created_at,
        updated_at=None,
        title: str | None = None,
        status: str = "OPEN",
        payload: dict | None = None,
    ):
        self.id = case_id
        self.user_id = user_id
        self.agent_id = agent_id
        self.case_type = case_type
        self.title = title
        self.status = status
        self.payload = payload
        self.created_at = to_datetime(created_at)
        self.updated_at = to_datetime(updated_at) or self.created_at

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "agentId": self.agent_id,
            "caseType": self.case_type,
            "title": self.title,
            "status": self.status,
            "payload": self.payload,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }


class CaseMessage(declarativeBase):
    """ORM model for the `tbl_case_messages` table (one entry of a case thread)."""

    __tablename__ = "tbl_case_messages"

    id: Mapped[str] = mapped_column(TEXT, primary_key=True)
    case_id: Mapped[str] = mapped_column(TEXT, ForeignKey("tbl_cases.id", ondelete="CASCADE"), nullable=False, index=True)
    author_user_id: Mapped[str | None] = mapped_column(
        TEXT, ForeignKey("tbl_users.id", ondelete="SET NULL"), nullable=True
    )
    author_role: Mapped[str] = mapped_column(TEXT, nullable=False)
    message: Mapped[str] = mapped_column(TEXT, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __init__(self, message_id: str, case_id: str, author_role: str, message: str, created_at, author_user_id: str | None = None):
        self.id = message_id
        self.case_id = case_id
        self.author_user_id = author_user_id
        self.author_role = author_role
        self.message = message
        self.created_at = to_datetime(created_at)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "caseId": self.case_id,
            "authorUserId": self.author_user_id,
            "authorRole": self.author_role,
            "message": self.message,
            "createdAt": to_iso(self.created_at),
        }
