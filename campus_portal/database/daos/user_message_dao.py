"""
User Messages DAO

Purpose
-------
Data-access layer for the `UserMessage` ORM entity. Provides:
- Message creation
- Retrieval of one chat (user + agent) in chronological order
- Retrieval of every message (admin analytics, newest first)
- Bulk deletion of a chat ("clear chat")

Design
------
- Requires an active SQLAlchemy `Session` provided by the caller.
- Keeps business rules (validation, audit) in higher layers.

Error Handling
--------------
- Methods log the failing operation and re-raise.
"""

import logging
from sqlalchemy.orm import Session
from sqlalchemy import desc, asc
from campus_portal.database.entities.messages import UserMessage

logger = logging.getLogger(__name__)

class UserMessagesDao:
    """
    Data Access Object (DAO) for managing chat turns.
    """

    def createMessage(self, session: Session, userMessage: UserMessage) -> UserMessage:
        """
        Create a new message record.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        userMessage : UserMessage
            Message entity instance to be added.

        Returns
        -------
        UserMessage
            The message object that was added.
        """
        try:
            session.add(userMessage)
            return userMessage
        except Exception as e:
            logger.error("Error in UserMessagesDao.createMessage. Error Message: %s", e)
            raise

    def fetchMessages(self, session: Session) -> list[UserMessage]:
        """Return every message, newest first."""
        try:
            return session.query(UserMessage).order_by(desc(UserMessage.timestamp)).all()
        except Exception as e:
            logger.error("Error in UserMessagesDao.fetchMessages. Error Message: %s", e)
            raise

    def fetchMessagesByUserAndAgent(self, session: Session, user_id: str, agent_id: str) -> list[UserMessage]:
        """
        Fetch one chat, ordered by creation time (ascending).

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        user_id : str
            Owner of the chat.
        agent_id : str
            Agent of the chat.

        Returns
        -------
        list[UserMessage]
            Chat turns, oldest first.
        """
        try:
            return (
                session.query(UserMessage)
                .filter(UserMessage.user_id == user_id, UserMessage.agent_id == agent_id)
                .order_by(asc(UserMessage.timestamp))
                .all()
            )
        except Exception as e:
            logger.error("Error in UserMessagesDao.fetchMessagesByUserAndAgent. Error Message: %s", e)
            raise

    def clearMessages(self, session: Session, user_id: str, agent_id: str) -> int:
        """
        Delete every turn of one chat.

        Returns
        -------
        int
            Number of deleted rows.
        """
        try:
            return (
                session.query(UserMessage)
                .filter(UserMessage.user_id == user_id, UserMessage.agent_id == agent_id)
                .delete(synchronize_session=False)
            )
        except Exception as e:
            logger.error("Error in UserMessagesDao.clearMessages. Error Message: %s", e)
            raise
