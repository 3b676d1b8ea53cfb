"""
Service-layer operations for authentication, users and the per-user records
(messages, docs, notifications, feedback, audit), workflow cases and the
agent catalog.

All functions are wrapped with the `@transactional` decorator, which manages
SQLAlchemy sessions and transactions automatically. Each function accepts (and
uses) an injected `session: Session` provided by the decorator; callers pass
every other argument by keyword.

Results are returned as camelCase dicts (`entity.to_dict()`), ready to be
sent as JSON. Failures the client must see with a specific status are raised
as `fastapi.HTTPException` (400 / 404 / 409) and rendered by the app as
``{"error": detail}``.
"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from campus_portal.api import models
from campus_portal.crypt.encrypt_decrypt import EncryptionDec
from campus_portal.database.daos.audit_dao import AuditDao
from campus_portal.database.daos.case_dao import CaseDao
from campus_portal.database.daos.doc_dao import DocDao
from campus_portal.database.daos.feedback_dao import FeedbackDao
from campus_portal.database.daos.notification_dao import NotificationDao
from campus_portal.database.daos.ui_item_dao import UiItemDao
from campus_portal.database.daos.user_dao import UserDao
from campus_portal.database.daos.user_message_dao import UserMessagesDao
from campus_portal.database.entities.audit import AuditEvent
from campus_portal.database.entities.cases import WorkflowCase, CaseMessage
from campus_portal.database.entities.docs import Doc
from campus_portal.database.entities.feedback import MessageFeedback
from campus_portal.database.entities.messages import UserMessage
from campus_portal.database.entities.notifications import Notification
from campus_portal.database.entities.timestamps import utcnow
from campus_portal.database.entities.user import User
from campus_portal.database.helpers.transactionManagement import transactional
from campus_portal.ids import make_id

logger = logging.getLogger(__name__)


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

@transactional
def login_user(session: Session, email: str, password: str) -> dict:
    """
    Authenticate a user by email and password.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session (injected by @transactional).
    email : str
        Email address; trimmed and lower-cased before lookup.
    password : str
        Plaintext password to verify.

    Returns
    -------
    dict
        - authenticated (bool): True if credentials are valid.
        - status (int): 200, 404 (unknown email) or 401 (wrong password).
        - detail (str): Error message on failure.
        - user_details (dict | None): The user without its password hash.
    """
    user_dao = UserDao()
    enc = EncryptionDec()
    users_fetched = user_dao.fetchUserByEmail(session, normalize_email(email))
    if len(users_fetched) == 0:
        return {"authenticated": False, "status": 404, "detail": "user not found", "user_details": None}
    user = users_fetched[0]
    if not enc.check_passwords(password, user.password_hash):
        return {"authenticated": False, "status": 401, "detail": "invalid password", "user_details": None}
    return {"authenticated": True, "status": 200, "detail": "", "user_details": user.to_dict()}


@transactional
def register_user(session: Session, email: str, password: str, name: str | None) -> dict:
    """
    Validate and create a STUDENT account.

    Returns
    -------
    dict
        - On success: {'res': True, 'status': 201, 'user': <user dict>}
        - On failure: {'res': False, 'status': 400 | 409, 'detail': <reason>}
    """
    user_dao = UserDao()
    enc = EncryptionDec()
    email = normalize_email(email)
    name = (name or "").strip()
    if not email or not password:
        return {"res": False, "status": 400, "detail": "email and password required"}
    if not name:
        return {"res": False, "status": 400, "detail": "name required"}
    if not enc.is_valid_password(password):
        return {"res": False, "status": 400, "detail": "password too short"}
    if len(user_dao.fetchUserByEmail(session, email)) > 0:
        return {"res": False, "status": 409, "detail": "email already exists"}

    user = User(
        user_id=make_id(),
        email=email,
        name=name,
        role="STUDENT",
        password_hash=enc.hash_password(password),
        joined_at=utcnow(),
    )
    user_dao.createUser(session=session, user_data=user)
    return {"res": True, "status": 201, "user": user.to_dict()}


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

@transactional
def get_users(session: Session) -> list[dict]:
    return [user.to_dict() for user in UserDao().fetchUsers(session)]


@transactional
def create_user(session: Session, data: models.UserCreate) -> dict:
    """
    Create a user from the admin panel.

    Raises
    ------
    HTTPException
        409 when the email is already registered.
    """
    user_dao = UserDao()
    email = normalize_email(data.email)
    if len(user_dao.fetchUserByEmail(session, email)) > 0:
        raise HTTPException(status_code=409, detail="email already exists")
    user = User(
        user_id=data.id or make_id(),
        email=email,
        name=data.name,
        role=data.role,
        password_hash=EncryptionDec().hash_password(data.password) if data.password else None,
        department=data.department,
        avatar=data.avatar,
        joined_at=utcnow(),
    )
    user_dao.createUser(session=session, user_data=user)
    return user.to_dict()


@transactional
def update_user(session: Session, user_id: str, data: models.UserUpdate) -> dict:
    """
    Partially update a user; a new password is re-hashed.

    Raises
    ------
    HTTPException
        404 for an unknown id, 409 when the new email belongs to another user.
    """
    user_dao = UserDao()
    updates = data.model_dump(exclude_none=True, exclude={"password"})
    if "email" in updates:
        updates["email"] = normalize_email(updates["email"])
        owners = user_dao.fetchUserByEmail(session, updates["email"])
        if owners and owners[0].id != user_id:
            raise HTTPException(status_code=409, detail="email already exists")
    if data.password:
        updates["password_hash"] = EncryptionDec().hash_password(data.password)
    if not user_dao.updateUser(session, user_id, updates):
        raise HTTPException(status_code=404, detail="user not found")
    return user_dao.fetchUserById(session, user_id).to_dict()


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------

@transactional
def get_messages(session: Session, user_id: str | None = None, agent_id: str | None = None) -> list[dict]:
    """One chat (oldest first) when both ids are given, otherwise every message (newest first)."""
    dao = UserMessagesDao()
    if user_id and agent_id:
        messages = dao.fetchMessagesByUserAndAgent(session, user_id, agent_id)
    else:
        messages = dao.fetchMessages(session)
    return [message.to_dict() for message in messages]


@transactional
def create_message(session: Session, data: models.MessageCreate) -> dict:
    message = UserMessage(
        message_id=data.id or make_id(),
        user_id=data.user_id,
        agent_id=data.agent_id,
        role=data.role,
        content=data.content,
        attachment=data.attachment,
        latency_ms=data.latency_ms if data.role == "model" else None,
        timestamp=data.timestamp or utcnow(),
    )
    UserMessagesDao().createMessage(session, message)
    return message.to_dict()


@transactional
def clear_messages(session: Session, user_id: str, agent_id: str) -> int:
    return UserMessagesDao().clearMessages(session, user_id, agent_id)


# ---------------------------------------------------------------------------
# Docs
# ---------------------------------------------------------------------------

@transactional
def get_docs(session: Session, user_id: str | None = None) -> list[dict]:
    dao = DocDao()
    docs = dao.fetchDocsByUser(session, user_id) if user_id else dao.fetchDocs(session)
    return [doc.to_dict() for doc in docs]


@transactional
def create_doc(session: Session, data: models.DocCreate) -> dict:
    doc = Doc(doc_id=data.id or make_id(), user_id=data.user_id, title=data.title, content=data.content, created_at=utcnow())
    DocDao().createDoc(session, doc)
    return doc.to_dict()


@transactional
def update_doc(session: Session, doc_id: str, data: models.DocUpdate) -> None:
    if not DocDao().updateDoc(session, doc_id, title=data.title, content=data.content):
        raise HTTPException(status_code=404, detail="doc not found")


@transactional
def delete_doc(session: Session, doc_id: str) -> None:
    if not DocDao().removeDoc(session, doc_id):
        raise HTTPException(status_code=404, detail="doc not found")


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------

@transactional
def get_notifications(session: Session, user_id: str | None = None) -> list[dict]:
    dao = NotificationDao()
    rows = dao.fetchNotificationsByUser(session, user_id) if user_id else dao.fetchNotifications(session)
    return [row.to_dict() for row in rows]


@transactional
def count_unread(session: Session, user_id: str) -> int:
    return NotificationDao().countUnread(session, user_id)


@transactional
def create_notification(session: Session, data: models.NotificationCreate) -> dict:
    notification = Notification(
        notification_id=data.id or make_id("n_"),
        user_id=data.user_id,
        title=data.title,
        message=data.message,
        severity=data.severity,
        link=data.link,
        created_by=data.created_by,
        created_at=utcnow(),
    )
    NotificationDao().createNotification(session, notification)
    return notification.to_dict()


@transactional
def broadcast_notification(session: Session, data: models.BroadcastRequest) -> list[dict]:
    """Insert one copy of the notification for every user."""
    dao = NotificationDao()
    now = utcnow()
    created = []
    for user in UserDao().fetchUsers(session):
        notification = Notification(
            notification_id=make_id("n_"),
            user_id=user.id,
            title=data.title,
            message=data.message,
            severity=data.severity,
            link=data.link,
            created_by=data.created_by,
            created_at=now,
        )
        dao.createNotification(session, notification)
        created.append(notification.to_dict())
    logger.info("Broadcast '%s' to %d users", data.title, len(created))
    return created


@transactional
def mark_notification_read(session: Session, notification_id: str) -> None:
    if not NotificationDao().markRead(session, notification_id):
        raise HTTPException(status_code=404, detail="notification not found")


# ---------------------------------------------------------------------------
# Feedback & audit
# ---------------------------------------------------------------------------

@transactional
def get_feedback(session: Session, message_id: str | None = None) -> list[dict]:
    dao = FeedbackDao()
    if message_id:
        row = dao.fetchFeedbackByMessage(session, message_id)
        return [row.to_dict()] if row else []
    return [row.to_dict() for row in dao.fetchFeedback(session)]


@transactional
def upsert_feedback(session: Session, data: models.FeedbackUpsert) -> dict:
    feedback = MessageFeedback(
        feedback_id=data.id or make_id("fb_"),
        message_id=data.message_id,
        user_id=data.user_id,
        agent_id=data.agent_id,
        rating=data.rating,
        comment=data.comment,
        created_at=utcnow(),
    )
    return FeedbackDao().upsertFeedback(session, feedback).to_dict()


@transactional
def get_audit(session: Session) -> list[dict]:
    return [event.to_dict() for event in AuditDao().fetchEvents(session)]


@transactional
def create_audit(session: Session, data: models.AuditCreate) -> dict:
    event = AuditEvent(
        event_id=data.id or make_id("a_"),
        type=data.type,
        at=utcnow(),
        actor_user_id=data.actor_user_id,
        details=data.details,
    )
    AuditDao().createEvent(session, event)
    return event.to_dict()


@transactional
def clear_audit(session: Session) -> int:
    return AuditDao().clearEvents(session)


# ---------------------------------------------------------------------------
# Workflow cases & catalog
# ---------------------------------------------------------------------------

@transactional
def get_cases(session: Session, user_id: str, agent_id: str) -> list[dict]:
    return [case.to_dict() for case in CaseDao().fetchCasesByUserAndAgent(session, user_id, agent_id)]


@transactional
def create_case(session: Session, data: models.CaseCreate) -> dict:
    now = utcnow()
    case = WorkflowCase(
        case_id=make_id(),
        user_id=data.user_id,
        agent_id=data.agent_id,
        case_type=data.case_type,
        title=data.title,
        status="OPEN",
        payload=data.payload,
        created_at=now,
        updated_at=now,
    )
    CaseDao().createCase(session, case)
    return case.to_dict()


@transactional
def update_case(session: Session, case_id: str, data: models.CaseUpdate) -> dict:
    case = CaseDao().updateCase(session, case_id, status=data.status, title=data.title, payload=data.payload)
    if case is None:
        raise HTTPException(status_code=404, detail="case not found")
    return case.to_dict()


@transactional
def get_case_messages(session: Session, case_id: str) -> list[dict]:
    return [message.to_dict() for message in CaseDao().fetchCaseMessages(session, case_id)]


@transactional
def create_case_message(session: Session, data: models.CaseMessageCreate) -> dict:
    dao = CaseDao()
    if dao.fetchCaseById(session, data.case_id) is None:
        raise HTTPException(status_code=404, detail="case not found")
    message = CaseMessage(
        message_id=make_id(),
        case_id=data.case_id,
        author_user_id=data.author_user_id,
        author_role=data.author_role,
        message=data.message,
        created_at=utcnow(),
    )
    dao.createCaseMessage(session, message)
    return message.to_dict()


@transactional
def get_ui_items(session: Session, agent_id: str, kind: str, group_key: str | None = None) -> list[dict]:
    return [item.to_dict() for item in UiItemDao().fetchItems(session, agent_id, kind, group_key)]
