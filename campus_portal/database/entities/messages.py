"""
UserMessage ORM Model
=====================

The ``UserMessage`` ORM model represents one chat turn between a user and an
agent. Turns are grouped by the ``(user_id, agent_id)`` pair; there is no
separate conversation table.

Key features
~~~~~~~~~~~~
- Opaque text primary key (``id``)
- Foreign key to ``tbl_users.id`` (cascade on delete)
- Sender role (``user`` | ``model``) and text content
- Optional inline attachment (data URL) and model latency
- Timezone-aware ``timestamp`` (UTC)

"""

from campus_portal.database.config.connection_engine import declarativeBase
from campus_portal.database.entities.timestamps import to_datetime, to_iso, utcnow
from sqlalchemy import ForeignKey, DateTime, Integer, TEXT, Index
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime

class UserMessage(declarativeBase):
    """
    ORM model for the `tbl_messages` table.

    Attributes
    ----------
    id : str
        Primary key.
    user_id : str
        Owner of the turn (`tbl_users.id`).
    agent_id : str
        Assistant the turn belongs to (abitur, kadr, nav, career, room).
    role : str
        "user" or "model".
    content : str
        Message text.
    attachment : str | None
        Optional base64 data URL of an image.
    latency_ms : int | None
        Model response time; only set for "model" turns.
    timestamp : datetime
        Creation time (UTC).
    """

    __tablename__ = 'tbl_messages'
    __table_args__ = (Index("idx_messages_user_agent", "user_id", "agent_id"),)

    id: Mapped[str] = mapped_column(TEXT, primary_key=True)
    user_id: Mapped[str] = mapped_column(TEXT, ForeignKey('tbl_users.id', ondelete="CASCADE"), nullable=False)
    agent_id: Mapped[str] = mapped_column(TEXT, nullable=False)
    role: Mapped[str] = mapped_column(TEXT, nullable=False)
    content: Mapped[str] = mapped_column(TEXT, nullable=False)
    attachment: Mapped[str | None] = mapped_column(TEXT, nullable=True)
    latency_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __init__(
        self,
        message_id: str,
        user_id: str,
        agent_id: str,
        role: str,
        content: str,
        timestamp,
        attachment: str | None = None,
        latency_ms: int | None = None,
    ):
        self.id = message_id
        self.user_id = user_id
        self.agent_id = agent_id
        self.role = role
        self.content = content
        self.attachment = attachment
        self.latency_ms = latency_ms
        self.timestamp = to_datetime(timestamp)

    def to_dict(self) -> dict:
        """Return the camelCase wire representation of the message."""
        return {
            "id": self.id,
            "userId": self.user_id,
            "agentId": self.agent_id,
            "role": self.role,
            "content": self.content,
            "attachment": self.attachment,
            "latencyMs": self.latency_ms,
            "timestamp": to_iso(self.timestamp),
        }

    def __str__(self) -> str:
        return (
            f"Message: user:{self.user_id}, "
            f"agent: {self.agent_id}, "
            f"role: {self.role}, "
            f"time_created: {self.timestamp}"
        )
