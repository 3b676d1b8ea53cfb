"""
Schema initialization, demo seeding and backup export / import.

- `init_tables` creates every portal table (idempotent).
- `seed_database` inserts the demo users, the two demo notifications and the
  default catalog rows when they are missing; running it twice changes nothing.
- `export_backup` / `import_backup` speak the bundle format of
  `campus_portal.client.bundle`. Import validates the whole bundle first;
  merge upserts rows by primary key, feedback by ``messageId``.
"""

import logging

from sqlalchemy import text
from sqlalchemy.orm import Session

from campus_portal.api import models
from campus_portal.client import bundle as codec
from campus_portal.crypt.encrypt_decrypt import EncryptionDec
from campus_portal.database.config.connection_engine import declarativeBase
from campus_portal.database.daos.feedback_dao import FeedbackDao
from campus_portal.database.daos.ui_item_dao import UiItemDao
from campus_portal.database.entities.audit import AuditEvent
from campus_portal.database.entities.cases import WorkflowCase, CaseMessage  # noqa: F401  (table registration)
from campus_portal.database.entities.docs import Doc
from campus_portal.database.entities.feedback import MessageFeedback
from campus_portal.database.entities.messages import UserMessage
from campus_portal.database.entities.notifications import Notification
from campus_portal.database.entities.timestamps import utcnow
from campus_portal.database.entities.ui_items import UiItem
from campus_portal.database.entities.user import User
from campus_portal.database.helpers.transactionManagement import transactional
from campus_portal import seeds

logger = logging.getLogger(__name__)


@transactional
def ping(session: Session) -> bool:
    session.execute(text("SELECT 1"))
    return True


@transactional
def init_tables(session: Session) -> None:
    """Create every portal table that does not exist yet."""
    declarativeBase.metadata.create_all(bind=session.connection())


@transactional
def seed_database(session: Session) -> dict:
    """
    Insert missing demo rows.

    Returns
    -------
    dict
        Number of inserted users, notifications and catalog items.
    """
    now = utcnow()
    inserted = {"users": 0, "notifications": 0, "uiItems": 0}

    missing_users = [
        row for row in seeds.SEED_USERS
        if session.get(User, row["id"]) is None
        and session.query(User).filter(User.email == row["email"]).first() is None
    ]
    if missing_users:
        password_hash = EncryptionDec().hash_password(seeds.DEFAULT_PASSWORD)
        for row in missing_users:
            session.add(
                User(
                    user_id=row["id"],
                    email=row["email"],
                    name=row["name"],
                    role=row["role"],
                    department=row.get("department"),
                    password_hash=password_hash,
                    joined_at=now,
                )
            )
            inserted["users"] += 1
        session.flush()

    for row in seeds.build_seed_notifications(now):
        if session.get(Notification, row["id"]) is None and session.get(User, row["userId"]) is not None:
            session.add(_notification_from_row(row))
            inserted["notifications"] += 1

    ui_item_dao = UiItemDao()
    for row in seeds.build_ui_items(now):
        if ui_item_dao.insertIfMissing(session, _ui_item_from_row(row)):
            inserted["uiItems"] += 1

    logger.info("Seed complete: %s", inserted)
    return inserted


# ---------------------------------------------------------------------------
# Row → entity conversion (rows are validated with the wire models first)
# ---------------------------------------------------------------------------

def _user_from_row(row: dict) -> User:
    user = models.User.model_validate(row)
    return User(
        user_id=user.id,
        email=user.email.strip().lower(),
        name=user.name,
        role=user.role,
        joined_at=user.joined_at,
        password_hash=user.password_hash,
        department=user.department,
        avatar=user.avatar,
    )


def _message_from_row(row: dict) -> UserMessage:
    message = models.Message.model_validate(row)
    return UserMessage(
        message_id=message.id,
        user_id=message.user_id,
        agent_id=message.agent_id,
        role=message.role,
        content=message.content,
        timestamp=message.timestamp,
        attachment=message.attachment,
        latency_ms=message.latency_ms,
    )


def _notification_from_row(row: dict) -> Notification:
    notification = models.Notification.model_validate(row)
    return Notification(
        notification_id=notification.id,
        user_id=notification.user_id,
        title=notification.title,
        message=notification.message,
        created_at=notification.created_at,
        is_read=notification.is_read,
        severity=notification.severity,
        link=notification.link,
        created_by=notification.created_by,
    )


def _doc_from_row(row: dict) -> Doc:
    doc = models.Doc.model_validate(row)
    return Doc(
        doc_id=doc.id,
        user_id=doc.user_id,
        title=doc.title,
        content=doc.content,
        created_at=doc.created_at,
        updated_at=doc.updated_at,
    )


def _feedback_from_row(row: dict) -> MessageFeedback:
    feedback = models.MessageFeedback.model_validate(row)
    return MessageFeedback(
        feedback_id=feedback.id,
        message_id=feedback.message_id,
        user_id=feedback.user_id,
        agent_id=feedback.agent_id,
        rating=feedback.rating,
        created_at=feedback.created_at,
        comment=feedback.comment,
    )


def _audit_from_row(row: dict) -> AuditEvent:
    event = models.AuditEvent.model_validate(row)
    return AuditEvent(
        event_id=event.id,
        type=event.type,
        at=event.at,
        actor_user_id=event.actor_user_id,
        details=event.details,
    )


def _ui_item_from_row(row: dict) -> UiItem:
    item = models.UiItem.model_validate(row)
    return UiItem(
        item_id=item.id,
        agent_id=item.agent_id,
        kind=item.kind,
        title=item.title,
        created_at=item.created_at,
        updated_at=item.updated_at,
        group_key=item.group_key,
        content=item.content,
        meta=item.meta,
        sort=item.sort,
    )


TABLE_ENTITIES = {
    codec.USERS: (User, _user_from_row),
    codec.MESSAGES: (UserMessage, _message_from_row),
    codec.NOTIFICATIONS: (Notification, _notification_from_row),
    codec.DOCS: (Doc, _doc_from_row),
    codec.FEEDBACK: (MessageFeedback, _feedback_from_row),
    codec.AUDIT: (AuditEvent, _audit_from_row),
}
"""Bundle table → (entity class, row converter)."""

DELETE_ORDER = (codec.FEEDBACK, codec.MESSAGES, codec.DOCS, codec.NOTIFICATIONS, codec.AUDIT, codec.USERS)
"""Children before `tbl_users` so foreign keys hold while replacing."""


@transactional
def export_backup(session: Session) -> dict:
    """Every stored row of the bundle tables, password hashes included."""
    tables = {}
    for name, (entity, _) in TABLE_ENTITIES.items():
        rows = session.query(entity).all()
        if entity is User:
            tables[name] = [row.to_dict(include_password=True) for row in rows]
        else:
            tables[name] = [row.to_dict() for row in rows]
    return codec.encode_bundle(tables)


@transactional
def import_backup(session: Session, bundle: dict, mode: str = "replace") -> dict:
    """
    Restore a bundle.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session (injected by @transactional).
    bundle : dict
        Raw bundle as uploaded.
    mode : str
        ``replace`` empties every listed table first; ``merge`` keeps existing rows.

    Returns
    -------
    dict
        Rows written per table.

    Raises
    ------
    campus_portal.client.errors.ValidationError
        Bad version, missing `tables`, or unknown mode (nothing is written).
    pydantic.ValidationError
        A row does not match its record model (the transaction is rolled back).
    """
    mode = codec.check_mode(mode)
    tables = codec.decode_bundle(bundle)
    converted = {
        name: [TABLE_ENTITIES[name][1](row) for row in rows]
        for name, rows in tables.items()
    }

    if mode == "replace":
        for name in DELETE_ORDER:
            if name in converted:
                session.query(TABLE_ENTITIES[name][0]).delete(synchronize_session=False)
        session.flush()

    written = {}
    feedback_dao = FeedbackDao()
    for name in codec.TABLES:
        if name not in converted:
            continue
        for entity in converted[name]:
            if name == codec.FEEDBACK:
                feedback_dao.upsertFeedback(session, entity)
            else:
                session.merge(entity)
        session.flush()
        written[name] = len(converted[name])
    logger.info("Backup import (%s): %s", mode, written)
    return written
