"""
Backup Bundle Codec
===================

Serializes a whole table set into a versioned JSON bundle and restores it:

.. code-block:: json

    {"version": 1, "exportedAt": "...", "tables": {"tbl_users": [...], ...}}

Import modes
------------
- ``replace``: every table listed in the bundle is discarded and replaced by
  the bundle rows verbatim.
- ``merge``: bundle rows are appended to the existing rows. Feedback rows are
  upserted by ``messageId`` so a message never carries two ratings.

A bundle is validated as a whole before anything is applied; a rejected
bundle leaves the target untouched. The functions here are pure; the Local
Store and the server backup service do the writing.
"""

import json
from datetime import datetime, timezone
from typing import Literal, Mapping

from campus_portal.client.errors import ValidationError

BUNDLE_VERSION = 1

USERS = "tbl_users"
MESSAGES = "tbl_messages"
NOTIFICATIONS = "tbl_notifications"
DOCS = "tbl_docs"
FEEDBACK = "tbl_feedback"
AUDIT = "tbl_audit"

TABLES = (USERS, MESSAGES, NOTIFICATIONS, DOCS, FEEDBACK, AUDIT)
"""Tables covered by a bundle, in export order."""

ImportMode = Literal["replace", "merge"]
IMPORT_MODES = ("replace", "merge")


def encode_bundle(tables: Mapping[str, list], exported_at: datetime | None = None) -> dict:
    """
    Build a bundle from stored rows.

    Parameters
    ----------
    tables : Mapping[str, list]
        Table name → stored rows. Tables outside `TABLES` are ignored; missing
        ones are exported as empty arrays.
    exported_at : datetime | None
        Export timestamp (defaults to now, UTC).

    Returns
    -------
    dict
        The bundle.
    """
    exported_at = exported_at or datetime.now(timezone.utc)
    return {
        "version": BUNDLE_VERSION,
        "exportedAt": exported_at.isoformat(),
        "tables": {name: [dict(row) for row in tables.get(name) or []] for name in TABLES},
    }


def decode_bundle(bundle) -> dict[str, list[dict]]:
    """
    Validate a bundle and return its listed tables.

    Raises
    ------
    ValidationError
        When the bundle is not an object, its version is not `BUNDLE_VERSION`,
        `tables` is missing, or a listed table is not an array of objects.
    """
    if not isinstance(bundle, Mapping):
        raise ValidationError("invalid bundle: expected a JSON object")
    version = bundle.get("version")
    if version != BUNDLE_VERSION or isinstance(version, bool):
        raise ValidationError(f"unsupported bundle version: {version!r}")
    tables = bundle.get("tables")
    if not isinstance(tables, Mapping):
        raise ValidationError("invalid bundle: missing tables")

    decoded = {}
    for name in TABLES:
        if name not in tables:
            continue
        rows = tables[name]
        if not isinstance(rows, list) or not all(isinstance(row, Mapping) for row in rows):
            raise ValidationError(f"invalid bundle: {name} must be an array of objects")
        decoded[name] = [dict(row) for row in rows]
    return decoded


def check_mode(mode: str) -> ImportMode:
    if mode not in IMPORT_MODES:
        raise ValidationError(f"unknown import mode: {mode!r}")
    return mode


def upsert_feedback_rows(existing: list[dict], incoming: list[dict]) -> list[dict]:
    """Append `incoming` feedback rows, dropping earlier rows that rate the same message."""
    rows = list(existing)
    for row in incoming:
        rows = [current for current in rows if current.get("messageId") != row.get("messageId")]
        rows.append(row)
    return rows


def apply_bundle(current: Mapping[str, list], bundle, mode: str) -> dict[str, list[dict]]:
    """
    Compute the tables to write for importing `bundle` into `current`.

    Parameters
    ----------
    current : Mapping[str, list]
        Existing rows per table.
    bundle : dict
        Raw bundle, validated here.
    mode : str
        ``replace`` or ``merge``.

    Returns
    -------
    dict[str, list[dict]]
        New contents of every table listed in the bundle.
    """
    mode = check_mode(mode)
    incoming = decode_bundle(bundle)
    if mode == "replace":
        return incoming

    merged = {}
    for name, rows in incoming.items():
        existing = list(current.get(name) or [])
        if name == FEEDBACK:
            merged[name] = upsert_feedback_rows(existing, rows)
        else:
            merged[name] = existing + rows
    return merged


def dumps(bundle: dict) -> str:
    """Bundle → UTF-8 JSON text (the backup file format)."""
    return json.dumps(bundle, ensure_ascii=False, indent=2)


def loads(text: str | bytes) -> dict:
    """Backup file text → raw bundle. Unparseable input raises `ValidationError`."""
    try:
        return json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationError(f"invalid bundle file: {e}") from e
