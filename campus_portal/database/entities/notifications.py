"""
Notification ORM Model
======================

Per-user notification rows. A broadcast fans out into one independent row per
user; after that each copy is only mutated by marking it read.
"""

from campus_portal.database.config.connection_engine import declarativeBase
from campus_portal.database.entities.timestamps import to_datetime, to_iso, utcnow
from sqlalchemy import ForeignKey, DateTime, Boolean, TEXT
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime

class Notification(declarativeBase):
    """
    ORM model for the `tbl_notifications` table.

    Attributes
    ----------
    id : str
        Primary key.
    user_id : str
        Recipient (`tbl_users.id`).
    title, message : str
        Headline and body.
    is_read : bool
        Read flag, False on creation.
    severity : str
        INFO, WARN or ALERT.
    link : str | None
        Optional deep link.
    created_by : str | None
        Author tag (e.g. "ADMIN", "SYSTEM").
    created_at : datetime
        Creation time (UTC).
    """

    __tablename__ = "tbl_notifications"

    id: Mapped[str] = mapped_column(TEXT, primary_key=True)
    user_id: Mapped[str] = mapped_column(TEXT, ForeignKey("tbl_users.id", ondelete="CASCADE"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(TEXT, nullable=False)
    message: Mapped[str] = mapped_column(TEXT, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    severity: Mapped[str] = mapped_column(TEXT, nullable=False, default="INFO")
    link: Mapped[str | None] = mapped_column(TEXT, nullable=True)
    created_by: Mapped[str | None] = mapped_column(TEXT, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __init__(
        self,
        notification_id: str,
        user_id: str,
        title: str,
        message: str,
        created_at,
        is_read: bool = False,
        severity: str | None = None,
        link: str | None = None,
        created_by: str | None = None,
    ):
        self.id = notification_id
        self.user_id = user_id
        self.title = title
        self.message = message
        self.is_read = bool(is_read)
        self.severity = severity or "INFO"
        self.link = link
        self.created_by = created_by
        self.created_at = to_datetime(created_at)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "title": self.title,
            "message": self.message,
            "isRead": self.is_read,
            "severity": self.severity,
            "link": self.link,
            "createdBy": self.created_by,
            "createdAt": to_iso(self.created_at),
        }
