"""
Audit DAO

Append-only access to `tbl_audit`: insert, read the latest events, clear.
"""

import logging
from sqlalchemy.orm import Session
from sqlalchemy import desc
from campus_portal.database.entities.audit import AuditEvent

logger = logging.getLogger(__name__)

AUDIT_READ_LIMIT = 500
"""Maximum number of events returned by `fetchEvents`."""

class AuditDao:
    """Data Access Object for `AuditEvent`."""

    def createEvent(self, session: Session, event: AuditEvent) -> AuditEvent:
        try:
            session.add(event)
            return event
        except Exception as e:
            logger.error("Error in AuditDao.createEvent. Error Message: %s", e)
            raise

    def fetchEvents(self, session: Session, limit: int = AUDIT_READ_LIMIT) -> list[AuditEvent]:
        """Most recent events first."""
        try:
            return session.query(AuditEvent).order_by(desc(AuditEvent.at)).limit(limit).all()
        except Exception as e:
            logger.error("Error in AuditDao.fetchEvents. Error Message: %s", e)
            raise

    def clearEvents(self, session: Session) -> int:
        try:
            return session.query(AuditEvent).delete(synchronize_session=False)
        except Exception as e:
            logger.error("Error in AuditDao.clearEvents. Error Message: %s", e)
            raise
