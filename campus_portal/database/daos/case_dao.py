"""
Workflow Case DAO

Purpose
-------
Persistence for workflow cases and their message threads:
- Cases of one user with one agent (newest first, capped at 100)
- Case creation and partial updates (status / title / payload)
- Case messages in creation order (capped at 500) and message creation

Design
------
- Requires an active SQLAlchemy `Session` provided by the caller.
- `updateCase` returns None for an unknown id so the service layer can
  answer 404.
"""

import logging
from sqlalchemy.orm import Session
from sqlalchemy import desc, asc
from campus_portal.database.entities.cases import WorkflowCase, CaseMessage
from campus_portal.database.entities.timestamps import utcnow

logger = logging.getLogger(__name__)

CASES_READ_LIMIT = 100
CASE_MESSAGES_READ_LIMIT = 500

class CaseDao:
    """Data Access Object for `WorkflowCase` and `CaseMessage`."""

    def fetchCasesByUserAndAgent(self, session: Session, user_id: str, agent_id: str) -> list[WorkflowCase]:
        try:
            return (
                session.query(WorkflowCase)
                .filter(WorkflowCase.user_id == user_id, WorkflowCase.agent_id == agent_id)
                .order_by(desc(WorkflowCase.created_at))
                .limit(CASES_READ_LIMIT)
                .all()
            )
        except Exception as e:
            logger.error("Error in CaseDao.fetchCasesByUserAndAgent. Error Message: %s", e)
            raise

    def fetchCaseById(self, session: Session, case_id: str) -> WorkflowCase | None:
        try:
            return session.get(WorkflowCase, case_id)
        except Exception as e:
            logger.error("Error in CaseDao.fetchCaseById. Error Message: %s", e)
            raise

    def createCase(self, session: Session, case: WorkflowCase) -> WorkflowCase:
        try:
            session.add(case)
            return case
        except Exception as e:
            logger.error("Error in CaseDao.createCase. Error Message: %s", e)
            raise

    def updateCase(self, session: Session, case_id: str, status: str | None = None, title: str | None = None, payload: dict | None = None) -> WorkflowCase | None:
        """
        Apply the non-None fields to a case and stamp `updated_at`.

        Returns
        -------
        WorkflowCase | None
            The updated case, or None when the id is unknown.
        """
        try:
            case = session.get(WorkflowCase, case_id)
            if case is None:
                return None
            if status is not None:
                case.status = status
            if title is not None:
                case.title = title
            if payload is not None:
                case.payload = payload
            case.updated_at = utcnow()
            return case
        except Exception as e:
            logger.error("Error in CaseDao.updateCase. Error Message: %s", e)
            raise

    def fetchCaseMessages(self, session: Session, case_id: str) -> list[CaseMessage]:
        """Thread of one case, oldest first."""
        try:
            return (
                session.query(CaseMessage)
                .filter(CaseMessage.case_id == case_id)
                .order_by(asc(CaseMessage.created_at))
                .limit(CASE_MESSAGES_READ_LIMIT)
                .all()
            )
        except Exception as e:
            logger.error("Error in CaseDao.fetchCaseMessages. Error Message: %s", e)
            raise

    def createCaseMessage(self, session: Session, message: CaseMessage) -> CaseMessage:
        try:
            session.add(message)
            return message
        except Exception as e:
            logger.error("Error in CaseDao.createCaseMessage. Error Message: %s", e)
            raise
