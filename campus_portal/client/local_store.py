"""
Local Store
===========

Emulates the portal schema inside a key-value namespace so the client keeps
working offline and can serve the cases / catalog fallback paths.

Each table is one key (``tbl_users``, ``tbl_messages``, ...) holding a JSON
array of camelCase rows exactly as the remote API returns them. Table
accessors return the pydantic record models of `campus_portal.api.models`.

Lifecycle
---------
- Construct explicitly and pass by reference; there is no module-level instance.
- `init()` seeds the demo users when ``tbl_users`` is absent and the demo
  notifications when ``tbl_notifications`` is absent; it is idempotent.
- Reading users migrates rows without ``passwordHash`` (default password)
  and writes the corrected table back at once.

Semantics
---------
- ``find*`` never mutates (except the user migration above).
- ``create`` appends, ``update`` shallow-merges and stamps ``updatedAt``
  where the record has one, ``remove`` filters by id.
- The audit log keeps the most recent `AUDIT_LIMIT` rows after each append.
- Feedback ``upsert`` drops any row with the same ``messageId`` first.
- Last write wins; there is no locking.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Callable, Generic, Iterable, Type, TypeVar

import pydantic
from pydantic.alias_generators import to_camel

from campus_portal import seeds
from campus_portal.api import models
from campus_portal.client import bundle as codec
from campus_portal.client.errors import ValidationError
from campus_portal.client.storage import JsonFileStorage, KeyValueStorage, MemoryStorage
from campus_portal.crypt.encrypt_decrypt import EncryptionDec
from campus_portal.database.config.config import settings
from campus_portal.ids import make_id

logger = logging.getLogger(__name__)

AUDIT_LIMIT = 500
CASES_LIMIT = 100
CASE_MESSAGES_LIMIT = 500

CASES = "tbl_cases"
CASE_MESSAGES = "tbl_case_messages"
UI_ITEMS = "tbl_ui_items"

RecordT = TypeVar("RecordT", bound=models.WireModel)


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def camel_updates(updates: dict) -> dict:
    """snake_case or camelCase update fields → camelCase, dropping None values."""
    return {to_camel(key): value for key, value in updates.items() if value is not None}


class Table(Generic[RecordT]):
    """One JSON array under one storage key."""

    model: Type[RecordT]
    stamps_updated_at = False

    def __init__(self, store: "LocalStore", key: str, model: Type[RecordT]):
        self.store = store
        self.key = key
        self.model = model

    def rows(self) -> list[dict]:
        return self.store.read_rows(self.key)

    def write(self, rows: list[dict]) -> None:
        self.store.write_rows(self.key, rows)

    def to_records(self, rows: Iterable[dict]) -> list[RecordT]:
        records = []
        for row in rows:
            try:
                records.append(self.model.model_validate(row))
            except pydantic.ValidationError as e:
                logger.warning("Skipping malformed %s row %r: %s", self.key, row.get("id"), e.errors()[0]["msg"])
        return records

    def find_all(self) -> list[RecordT]:
        return self.to_records(self.rows())

    def find_by_id(self, record_id: str) -> RecordT | None:
        for record in self.to_records(row for row in self.rows() if row.get("id") == record_id):
            return record
        return None

    def create(self, record: RecordT) -> RecordT:
        rows = self.rows()
        rows.append(record.to_wire())
        self.write(rows)
        return record

    def update(self, record_id: str, **updates) -> RecordT | None:
        """
        Shallow-merge `updates` into the row with `record_id`; None when absent.

        The merged row is validated before anything is written; an invalid
        update raises `ValidationError` and leaves the table untouched.
        """
        rows = self.rows()
        changes = camel_updates(updates)
        if self.stamps_updated_at:
            changes["updatedAt"] = now_iso()
        index = next((i for i, row in enumerate(rows) if row.get("id") == record_id), None)
        if index is None:
            return None
        merged = {**rows[index], **changes}
        try:
            record = self.model.model_validate(merged)
        except pydantic.ValidationError as e:
            raise ValidationError(f"invalid update of {self.key} row {record_id}: {e.error_count()} field error(s)") from e
        rows[index] = merged
        self.write(rows)
        return record

    def remove(self, record_id: str) -> bool:
        rows = self.rows()
        kept = [row for row in rows if row.get("id") != record_id]
        if len(kept) == len(rows):
            return False
        self.write(kept)
        return True


class UsersTable(Table[models.User]):

    def rows(self) -> list[dict]:
        rows = self.store.read_rows(self.key)
        if any(not row.get("passwordHash") for row in rows):
            default_hash = self.store.hash_password(seeds.DEFAULT_PASSWORD)
            rows = [row if row.get("passwordHash") else {**row, "passwordHash": default_hash} for row in rows]
            self.write(rows)
            logger.info("Assigned default password hash to legacy user rows")
        return rows

    def find_by_email(self, email: str) -> models.User | None:
        email = (email or "").strip().lower()
        for record in self.to_records(row for row in self.rows() if (row.get("email") or "").lower() == email):
            return record
        return None


class MessagesTable(Table[models.Message]):

    def find_by_user_and_agent(self, user_id: str, agent_id: str) -> list[models.Message]:
        """Chat turns in insertion order."""
        return self.to_records(
            row for row in self.rows() if row.get("userId") == user_id and row.get("agentId") == agent_id
        )

    def save(self, message: models.Message) -> models.Message:
        return self.create(message)

    def clear(self, user_id: str, agent_id: str) -> int:
        rows = self.rows()
        kept = [row for row in rows if not (row.get("userId") == user_id and row.get("agentId") == agent_id)]
        self.write(kept)
        return len(rows) - len(kept)


class NotificationsTable(Table[models.Notification]):

    def find_by_user(self, user_id: str) -> list[models.Notification]:
        """Newest first."""
        records = self.to_records(row for row in self.rows() if row.get("userId") == user_id)
        return sorted(records, key=lambda record: record.created_at, reverse=True)

    def count_unread(self, user_id: str) -> int:
        return sum(1 for row in self.rows() if row.get("userId") == user_id and not row.get("isRead"))

    def mark_read(self, notification_id: str) -> bool:
        return self.update(notification_id, is_read=True) is not None

    def broadcast(
        self,
        title: str,
        message: str,
        severity: str = "INFO",
        created_by: str | None = None,
        link: str | None = None,
    ) -> list[models.Notification]:
        """One copy per current user, each with its own id."""
        created_at = now_iso()
        created = [
            models.Notification(
                id=make_id("n_"),
                user_id=user.id,
                title=title,
                message=message,
                severity=severity or "INFO",
                created_by=created_by,
                link=link,
                created_at=created_at,
            )
            for user in self.store.users.find_all()
        ]
        rows = self.rows()
        rows.extend(notification.to_wire() for notification in created)
        self.write(rows)
        return created


class DocsTable(Table[models.Doc]):
    stamps_updated_at = True

    def find_by_user(self, user_id: str) -> list[models.Doc]:
        """Newest first."""
        records = self.to_records(row for row in self.rows() if row.get("userId") == user_id)
        return sorted(records, key=lambda record: record.created_at, reverse=True)


class FeedbackTable(Table[models.MessageFeedback]):

    def find_by_message(self, message_id: str) -> models.MessageFeedback | None:
        for record in self.to_records(row for row in self.rows() if row.get("messageId") == message_id):
            return record
        return None

    def upsert(self, feedback: models.MessageFeedback) -> models.MessageFeedback:
        self.write(codec.upsert_feedback_rows(self.rows(), [feedback.to_wire()]))
        return feedback


class AuditTable(Table[models.AuditEvent]):

    def log(self, event: models.AuditEvent) -> models.AuditEvent:
        rows = self.rows()
        rows.append(event.to_wire())
        self.write(rows[-AUDIT_LIMIT:])
        return event

    def clear(self) -> None:
        self.write([])


class CasesTable(Table[models.WorkflowCase]):
    stamps_updated_at = True

    def find_by_user_and_agent(self, user_id: str, agent_id: str) -> list[models.WorkflowCase]:
        records = self.to_records(
            row for row in self.rows() if row.get("userId") == user_id and row.get("agentId") == agent_id
        )
        return sorted(records, key=lambda record: record.created_at, reverse=True)[:CASES_LIMIT]


class CaseMessagesTable(Table[models.CaseMessage]):

    def find_by_case(self, case_id: str) -> list[models.CaseMessage]:
        records = self.to_records(row for row in self.rows() if row.get("caseId") == case_id)
        return sorted(records, key=lambda record: record.created_at)[:CASE_MESSAGES_LIMIT]


class UiItemsTable(Table[models.UiItem]):

    def find(self, agent_id: str, kind: str, group_key: str | None = None) -> list[models.UiItem]:
        """Catalog rows ordered by (sort, title); the default catalog stands in for an empty table."""
        rows = self.rows() or seeds.build_ui_items(datetime.now(timezone.utc))
        selected = [
            row for row in rows
            if row.get("agentId") == agent_id and row.get("kind") == kind
            and (not group_key or row.get("groupKey") == group_key)
        ]
        return sorted(self.to_records(selected), key=lambda record: (record.sort, record.title))


class LocalStore:
    """
    Persisted table set of the client.

    Parameters
    ----------
    storage : KeyValueStorage | None
        Backend; defaults to a fresh `MemoryStorage`.
    hash_password : Callable[[str], str] | None
        Password hasher for seeds and migrations (bcrypt by default).
    seed : bool
        Run `init()` right away.
    """

    def __init__(
        self,
        storage: KeyValueStorage | None = None,
        hash_password: Callable[[str], str] | None = None,
        seed: bool = True,
    ):
        self.storage = storage if storage is not None else MemoryStorage()
        self.hash_password = hash_password or EncryptionDec().hash_password
        self.users = UsersTable(self, codec.USERS, models.User)
        self.messages = MessagesTable(self, codec.MESSAGES, models.Message)
        self.notifications = NotificationsTable(self, codec.NOTIFICATIONS, models.Notification)
        self.docs = DocsTable(self, codec.DOCS, models.Doc)
        self.feedback = FeedbackTable(self, codec.FEEDBACK, models.MessageFeedback)
        self.audit = AuditTable(self, codec.AUDIT, models.AuditEvent)
        self.cases = CasesTable(self, CASES, models.WorkflowCase)
        self.case_messages = CaseMessagesTable(self, CASE_MESSAGES, models.CaseMessage)
        self.ui_items = UiItemsTable(self, UI_ITEMS, models.UiItem)
        if seed:
            self.init()

    @classmethod
    def from_settings(cls, path: str | None = None, **options) -> "LocalStore":
        """File-backed store at ``settings.LOCAL_STORE_PATH`` (or `path`)."""
        return cls(JsonFileStorage(path or settings.LOCAL_STORE_PATH), **options)

    # -- raw access ---------------------------------------------------------

    def read_rows(self, key: str) -> list[dict]:
        """Rows under `key`; absent, corrupt or non-array values read as empty."""
        raw = self.storage.get_item(key)
        if raw is None:
            return []
        try:
            value = json.loads(raw)
        except ValueError:
            logger.warning("Discarding corrupt value under %s", key)
            return []
        if not isinstance(value, list):
            return []
        return [row for row in value if isinstance(row, dict)]

    def write_rows(self, key: str, rows: list[dict]) -> None:
        self.storage.set_item(key, json.dumps(rows, ensure_ascii=False))

    def has_table(self, key: str) -> bool:
        return self.storage.get_item(key) is not None

    # -- lifecycle ----------------------------------------------------------

    def init(self) -> None:
        """Seed demo rows into absent tables and create the other tables empty."""
        now = datetime.now(timezone.utc)
        if not self.has_table(codec.USERS):
            self.write_rows(codec.USERS, seeds.build_seed_users(now, self.hash_password(seeds.DEFAULT_PASSWORD)))
            logger.info("Seeded demo users")
        if not self.has_table(codec.NOTIFICATIONS):
            self.write_rows(codec.NOTIFICATIONS, seeds.build_seed_notifications(now))
        for key in (codec.MESSAGES, codec.DOCS, codec.FEEDBACK, codec.AUDIT, CASES, CASE_MESSAGES, UI_ITEMS):
            if not self.has_table(key):
                self.write_rows(key, [])
        # reading users runs the password migration
        self.users.rows()

    # -- backup -------------------------------------------------------------

    def export_bundle(self) -> dict:
        """Bundle of every covered table, rows as stored."""
        return codec.encode_bundle({name: self.read_rows(name) for name in codec.TABLES})

    def import_bundle(self, bundle: dict, mode: str = "replace") -> None:
        """
        Restore a bundle (``replace`` or ``merge``).

        Raises
        ------
        campus_portal.client.errors.ValidationError
            Unsupported version, missing tables or unknown mode; nothing is written.
        """
        current = {name: self.read_rows(name) for name in codec.TABLES}
        for name, rows in codec.apply_bundle(current, bundle, mode).items():
            self.write_rows(name, rows)
        logger.info("Imported backup bundle (%s)", mode)
