"""
AuditEvent ORM Model
====================

Append-only audit trail. Rows are only ever inserted or bulk-deleted; reads
return the most recent 500 events.
"""

from campus_portal.database.config.connection_engine import declarativeBase
from campus_portal.database.entities.timestamps import to_datetime, to_iso, utcnow
from sqlalchemy import ForeignKey, DateTime, TEXT, JSON
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime

class AuditEvent(declarativeBase):
    """
    ORM model for the `tbl_audit` table.

    `type` is a free-form tag such as ``chat_clear`` or ``backup_import``;
    `details` is an optional JSON object.
    """

    __tablename__ = "tbl_audit"

    id: Mapped[str] = mapped_column(TEXT, primary_key=True)
    actor_user_id: Mapped[str | None] = mapped_column(
        TEXT, ForeignKey("tbl_users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    type: Mapped[str] = mapped_column(TEXT, nullable=False)
    details: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __init__(self, event_id: str, type: str, at, actor_user_id: str | None = None, details: dict | None = None):
        self.id = event_id
        self.type = type
        self.actor_user_id = actor_user_id
        self.details = details
        self.at = to_datetime(at)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "at": to_iso(self.at),
            "actorUserId": self.actor_user_id,
            "type": self.type,
            "details": self.details,
        }
