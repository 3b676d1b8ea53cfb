"""
MessageFeedback DAO: Upsert & Fetch
====================================

Purpose
-------
Thin data-access layer for the MessageFeedback entity:
- Upsert a rating keyed on `message_id` (one row per message).
- Fetch all feedback records, or the record of one message.

Transaction Model
-----------------
- This DAO **adds** objects to the SQLAlchemy session but does **not** call `commit()`.
  The caller controls transactions (commit/rollback) and session lifecycle.

Error Handling
--------------
- Operational errors are logged and re-raised for the caller to handle.
"""

import logging
from sqlalchemy.orm import Session
from sqlalchemy import desc
from campus_portal.database.entities.feedback import MessageFeedback

logger = logging.getLogger(__name__)

class FeedbackDao:
    """
    Data Access Object for `MessageFeedback`.

    Responsibilities:
        - Insert or replace the rating of a message.
        - Retrieve `MessageFeedback` rows.

    Notes:
        - Session management (commit/rollback/close) is delegated to the caller.
    """

    def upsertFeedback(self, session: Session, feedback: MessageFeedback) -> MessageFeedback:
        """
        Insert a feedback row, or update rating/comment of the existing row for the same message.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session (transaction boundary controlled by the caller).
        feedback : MessageFeedback
            Incoming feedback.

        Returns
        -------
        MessageFeedback
            The persisted row (either the new one or the updated existing one).
        """
        try:
            existing = self.fetchFeedbackByMessage(session, feedback.message_id)
            if existing is None:
                session.add(feedback)
                return feedback
            existing.rating = feedback.rating
            existing.comment = feedback.comment
            return existing
        except Exception as e:
            logger.error("Error in FeedbackDao.upsertFeedback. Error Message: %s", e)
            raise

    def fetchFeedbackByMessage(self, session: Session, message_id: str) -> MessageFeedback | None:
        """Return the feedback of one message, or None."""
        try:
            return session.query(MessageFeedback).filter(MessageFeedback.message_id == message_id).one_or_none()
        except Exception as e:
            logger.error("Error in FeedbackDao.fetchFeedbackByMessage. Error Message: %s", e)
            raise

    def fetchFeedback(self, session: Session) -> list[MessageFeedback]:
        """
        Fetch all `MessageFeedback` records, newest first.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.

        Returns
        -------
        list[MessageFeedback]
            Every feedback row.
        """
        try:
            return session.query(MessageFeedback).order_by(desc(MessageFeedback.created_at)).all()
        except Exception as e:
            logger.error("Error in FeedbackDao.fetchFeedback. Error Message: %s", e)
            raise
