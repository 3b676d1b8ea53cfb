"""
Entities Package: SQLAlchemy 2.0 ORM models of the campus portal
=================================================================

The `entities` package maps the portal tables to Python classes using
SQLAlchemy 2.0 typed mappings. DAOs (`daos` package) consume these classes;
every entity also exposes `to_dict()` returning the camelCase JSON shape
used by the HTTP API and the backup bundle.

Conventions
-----------
- Text primary keys (ids are generated by clients or the service layer)
- Timezone-aware timestamps (UTC), serialized as ISO-8601 strings
- SQLAlchemy 2.0 style `Mapped[...]` + `mapped_column(...)`
- Child rows reference `tbl_users.id` with `ON DELETE CASCADE`

Contents
--------
- User (`tbl_users`)
    Portal account: email (unique), name, role, optional avatar/department,
    bcrypt password hash.

- UserMessage (`tbl_messages`)
    One chat turn between a user and an agent; optional attachment and latency.

- Notification (`tbl_notifications`)
    Per-user notice with severity (INFO/WARN/ALERT) and read flag.

- Doc (`tbl_docs`)
    Personal knowledge-base document used to ground assistant answers.

- MessageFeedback (`tbl_feedback`)
    A 1/-1 rating of an assistant message; at most one row per `message_id`.

- AuditEvent (`tbl_audit`)
    Typed audit record with free-form JSON details.

- WorkflowCase / CaseMessage (`tbl_cases`, `tbl_case_messages`)
    Agent workflow cases (status OPEN ...) and their message threads.

- UiItem (`tbl_ui_items`)
    Global catalog entries shown by the agents (categories, quick actions, references).
"""
