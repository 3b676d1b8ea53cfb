"""
Notification DAO

Purpose
-------
Persistence for `Notification` rows: creation, per-user listing (newest
first), unread counting and the read flag.

Transaction Model
-----------------
- Objects are added to the caller's session; commit happens in `@transactional`.
"""

import logging
from sqlalchemy.orm import Session
from sqlalchemy import desc, func
from campus_portal.database.entities.notifications import Notification

logger = logging.getLogger(__name__)

class NotificationDao:
    """Data Access Object for `Notification`."""

    def createNotification(self, session: Session, notification: Notification) -> Notification:
        try:
            session.add(notification)
            return notification
        except Exception as e:
            logger.error("Error in NotificationDao.createNotification. Error Message: %s", e)
            raise

    def fetchNotifications(self, session: Session) -> list[Notification]:
        try:
            return session.query(Notification).order_by(desc(Notification.created_at)).all()
        except Exception as e:
            logger.error("Error in NotificationDao.fetchNotifications. Error Message: %s", e)
            raise

    def fetchNotificationsByUser(self, session: Session, user_id: str) -> list[Notification]:
        """Return a user's notifications, newest first."""
        try:
            return (
                session.query(Notification)
                .filter(Notification.user_id == user_id)
                .order_by(desc(Notification.created_at))
                .all()
            )
        except Exception as e:
            logger.error("Error in NotificationDao.fetchNotificationsByUser. Error Message: %s", e)
            raise

    def countUnread(self, session: Session, user_id: str) -> int:
        """Number of unread notifications of a user."""
        try:
            count = (
                session.query(func.count(Notification.id))
                .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
                .scalar()
            )
            return int(count or 0)
        except Exception as e:
            logger.error("Error in NotificationDao.countUnread. Error Message: %s", e)
            raise

    def markRead(self, session: Session, notification_id: str) -> bool:
        """
        Set `is_read` on one notification.

        Returns
        -------
        bool
            False when the notification does not exist.
        """
        try:
            notification = session.get(Notification, notification_id)
            if notification is None:
                return False
            notification.is_read = True
            return True
        except Exception as e:
            logger.error("Error in NotificationDao.markRead. Error Message: %s", e)
            raise
