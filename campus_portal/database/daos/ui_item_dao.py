"""
UiItem DAO

Read access to the global agent catalog, plus idempotent inserts used by the
startup seed.
"""

import logging
from sqlalchemy.orm import Session
from sqlalchemy import asc
from campus_portal.database.entities.ui_items import UiItem

logger = logging.getLogger(__name__)

class UiItemDao:
    """Data Access Object for `UiItem`."""

    def fetchItems(self, session: Session, agent_id: str, kind: str, group_key: str | None = None) -> list[UiItem]:
        """
        Catalog rows of one agent and kind, ordered by (sort, title).

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        agent_id : str
            Agent identifier.
        kind : str
            Item kind (category, quick, reference, ...).
        group_key : str | None
            Restrict to one group when given and non-empty.
        """
        try:
            query = session.query(UiItem).filter(UiItem.agent_id == agent_id, UiItem.kind == kind)
            if group_key:
                query = query.filter(UiItem.group_key == group_key)
            return query.order_by(asc(UiItem.sort), asc(UiItem.title)).all()
        except Exception as e:
            logger.error("Error in UiItemDao.fetchItems. Error Message: %s", e)
            raise

    def insertIfMissing(self, session: Session, item: UiItem) -> bool:
        """Add `item` unless a row with the same id exists. Returns True when inserted."""
        try:
            if session.get(UiItem, item.id) is not None:
                return False
            session.add(item)
            return True
        except Exception as e:
            logger.error("Error in UiItemDao.insertIfMissing. Error Message: %s", e)
            raise
