"""
Doc ORM Model
=============

Free-text documents a user keeps in the portal. Their title and content feed
the relevance ranker that grounds agent replies.
"""

from campus_portal.database.config.connection_engine import declarativeBase
from campus_portal.database.entities.timestamps import to_datetime, to_iso, utcnow
from sqlalchemy import ForeignKey, DateTime, TEXT
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime

class Doc(declarativeBase):
    """ORM model for the `tbl_docs` table (owned by exactly one user)."""

    __tablename__ = "tbl_docs"

    id: Mapped[str] = mapped_column(TEXT, primary_key=True)
    user_id: Mapped[str] = mapped_column(TEXT, ForeignKey("tbl_users.id", ondelete="CASCADE"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(TEXT, nullable=False)
    content: Mapped[str] = mapped_column(TEXT, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __init__(self, doc_id: str, user_id: str, title: str, content: str, created_at, updated_at=None):
        self.id = doc_id
        self.user_id = user_id
        self.title = title
        self.content = content
        self.created_at = to_datetime(created_at)
        self.updated_at = to_datetime(updated_at) or self.created_at

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "title": self.title,
            "content": self.content,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }

    def __str__(self) -> str:
        return f"Doc: id:{self.id}, user: {self.user_id}, title: {self.title}"
