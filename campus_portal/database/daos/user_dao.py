"""
User DAO

Purpose
-------
Thin data-access layer for the `User` ORM entity. Provides:
- Creation (the caller supplies an already-hashed password)
- Listing and lookup by id or email
- Partial updates of profile / credential fields

Design
------
- The DAO expects an active SQLAlchemy `Session` supplied by the caller.
- Business rules (email normalization, uniqueness checks, password hashing)
  live in `campus_portal.database.core.funcs`; the DAO only persists.

Entity (expected columns)
-------------------------
- id: str / primary key
- email: str (unique)
- name: str
- role: str
- avatar, department, password_hash: str | None
- joined_at: datetime

Usage
-----
.. code-block:: python

    from campus_portal.database.helpers.transactionManagement import SessionFactory
    from campus_portal.database.daos.user_dao import UserDao

    dao = UserDao()
    with SessionFactory() as session:
        users = dao.fetchUserByEmail(session, "student@bolashak.kz")
        dao.updateUser(session, users[0].id, {"name": "Ivan Ivanov"})
        session.commit()

Error Handling
--------------
- Each method logs the failing operation and re-raises.
- Integrity errors (duplicate email) surface as `sqlalchemy.exc.IntegrityError`.
"""

import logging
from sqlalchemy.orm import Session
from sqlalchemy import desc
from campus_portal.database.entities.user import User

logger = logging.getLogger(__name__)

USER_UPDATABLE_FIELDS = ("email", "name", "role", "avatar", "department", "password_hash")
"""Columns `updateUser` is allowed to touch."""

class UserDao:
    """
    Data Access Object (DAO) for managing User entities.
    """

    def createUser(self, session: Session, user_data: User) -> bool:
        """
        Stage a new user.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        user_data : User
            User entity; `password_hash` must already be hashed.

        Returns
        -------
        bool
            True if the user was added to the session.
        """
        try:
            session.add(user_data)
            session.flush()
            return True
        except Exception as e:
            logger.error("Error in UserDao.createUser. Error Message: %s", e)
            raise

    def fetchUsers(self, session: Session) -> list[User]:
        """Return every user, most recently joined first."""
        try:
            return session.query(User).order_by(desc(User.joined_at)).all()
        except Exception as e:
            logger.error("Error in UserDao.fetchUsers. Error Message: %s", e)
            raise

    def fetchUserById(self, session: Session, user_id: str) -> User | None:
        """Return the user with the given id, or None."""
        try:
            return session.get(User, user_id)
        except Exception as e:
            logger.error("Error in UserDao.fetchUserById. Error Message: %s", e)
            raise

    def fetchUserByEmail(self, session: Session, email: str) -> list[User]:
        """
        Fetch a user by email.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        email : str
            Normalized email address.

        Returns
        -------
        list[User]
            A list containing the matching user (at most one due to limit(1)).
        """
        try:
            return session.query(User).filter(User.email == email).limit(1).all()
        except Exception as e:
            logger.error("Error in UserDao.fetchUserByEmail. Error Message: %s", e)
            raise

    def updateUser(self, session: Session, user_id: str, updates: dict) -> bool:
        """
        Apply a partial update to a user.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        user_id : str
            Identifier of the user to update.
        updates : dict
            Column name → new value; keys outside `USER_UPDATABLE_FIELDS` are ignored.

        Returns
        -------
        bool
            False when no user has that id.
        """
        try:
            user = session.get(User, user_id)
            if user is None:
                return False
            for field, value in updates.items():
                if field in USER_UPDATABLE_FIELDS:
                    setattr(user, field, value)
            session.flush()
            return True
        except Exception as e:
            logger.error("Error in UserDao.updateUser. Error Message: %s", e)
            raise
