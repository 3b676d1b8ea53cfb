"""
MessageFeedback ORM Model
=========================

The ``MessageFeedback`` ORM model stores a thumbs-up / thumbs-down rating a
user gave to one assistant reply.

Table
-----
- PostgreSQL table: ``tbl_feedback`` (SQLAlchemy 2.0 typed mappings)
- Unique index on ``message_id``: at most one feedback row per message

Integration Notes
~~~~~~~~~~~~~~~~~
- Written through ``POST /api/feedback`` which upserts on ``message_id``
- Read by the admin analytics panel and by the chat window to restore ratings
"""

from campus_portal.database.config.connection_engine import declarativeBase
from campus_portal.database.entities.timestamps import to_datetime, to_iso, utcnow
from sqlalchemy import ForeignKey, DateTime, Integer, TEXT
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime

class MessageFeedback(declarativeBase):
    """
    ORM model for the `tbl_feedback` table.

    Attributes
    ----------
    id : str
        Primary key for this feedback record.
    message_id : str
        Rated message. Unique: a second rating replaces the first.
    user_id : str
        Author of the rating (`tbl_users.id`).
    agent_id : str
        Agent that produced the rated reply.
    rating : int
        +1 or -1.
    comment : str | None
        Optional free-text remark.
    created_at : datetime
        Time when the feedback was recorded (UTC, timezone-aware).
    """

    __tablename__ = 'tbl_feedback'

    id: Mapped[str] = mapped_column(TEXT, primary_key=True)
    """Primary key for this feedback record."""

    message_id: Mapped[str] = mapped_column(TEXT, nullable=False, unique=True)
    """Identifier of the rated message (unique)."""

    user_id: Mapped[str] = mapped_column(TEXT, ForeignKey('tbl_users.id', ondelete="CASCADE"), nullable=False)
    """Author of the rating."""

    agent_id: Mapped[str] = mapped_column(TEXT, nullable=False)
    """Agent whose reply was rated."""

    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    """+1 (helpful) or -1 (not helpful)."""

    comment: Mapped[str | None] = mapped_column(TEXT, nullable=True)
    """Optional remark."""

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    """Creation timestamp (UTC, timezone-aware)."""

    def __init__(
        self,
        feedback_id: str,
        message_id: str,
        user_id: str,
        agent_id: str,
        rating: int,
        created_at,
        comment: str | None = None,
    ):
        """
        Initialize a new MessageFeedback object.

        Parameters
        ----------
        feedback_id : str
            Unique identifier for this feedback record.
        message_id : str
            ID of the rated message.
        user_id : str
            ID of the user giving the rating.
        agent_id : str
            Agent identifier.
        rating : int
            +1 or -1.
        created_at : datetime | str
            Creation timestamp; accepts a `datetime` or ISO8601 string.
        comment : str | None
            Optional remark.
        """
        self.id = feedback_id
        self.message_id = message_id
        self.user_id = user_id
        self.agent_id = agent_id
        self.rating = rating
        self.comment = comment
        self.created_at = to_datetime(created_at)

    def to_dict(self) -> dict:
        """Return the camelCase wire representation of the feedback row."""
        return {
            "id": self.id,
            "messageId": self.message_id,
            "userId": self.user_id,
            "agentId": self.agent_id,
            "rating": self.rating,
            "comment": self.comment,
            "createdAt": to_iso(self.created_at),
        }

    def __str__(self) -> str:
        return (
            f"Feedback: id:{self.id}, "
            f"message_id: {self.message_id}, "
            f"rating: {self.rating}"
        )
