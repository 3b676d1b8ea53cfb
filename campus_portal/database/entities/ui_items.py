"""
UiItem ORM Model
================

Global catalog rows that drive each agent's quick-action menus, reference
snippets, procedures and categorized prompts. Read-mostly; grouped by
``(agent_id, kind[, group_key])`` and ordered by ``(sort, title)``.
"""

from campus_portal.database.config.connection_engine import declarativeBase
from campus_portal.database.entities.timestamps import to_datetime, to_iso, utcnow
from sqlalchemy import DateTime, Integer, TEXT, JSON, Index
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime

class UiItem(declarativeBase):
    """ORM model for the `tbl_ui_items` table."""

    __tablename__ = "tbl_ui_items"
    __table_args__ = (Index("idx_ui_items_agent_kind", "agent_id", "kind"),)

    id: Mapped[str] = mapped_column(TEXT, primary_key=True)
    agent_id: Mapped[str] = mapped_column(TEXT, nullable=False)
    kind: Mapped[str] = mapped_column(TEXT, nullable=False)
    group_key: Mapped[str | None] = mapped_column(TEXT, nullable=True)
    title: Mapped[str] = mapped_column(TEXT, nullable=False)
    content: Mapped[str | None] = mapped_column(TEXT, nullable=True)
    meta: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    sort: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __init__(
        self,
        item_id: str,
        agent_id: str,
        kind: str,
        title: str,
        created_at,
        updated_at=None,
        group_key: str | None = None,
        content: str | None = None,
        meta: dict | None = None,
        sort: int = 0,
    ):
        self.id = item_id
        self.agent_id = agent_id
        self.kind = kind
        self.group_key = group_key
        self.title = title
        self.content = content
        self.meta = meta
        self.sort = sort
        self.created_at = to_datetime(created_at)
        self.updated_at = to_datetime(updated_at) or self.created_at

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "agentId": self.agent_id,
            "kind": self.kind,
            "groupKey": self.group_key,
            "title": self.title,
            "content": self.content,
            "meta": self.meta,
            "sort": self.sort,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }
