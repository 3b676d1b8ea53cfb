"""
DAOs Package: Data Access Layer (SQLAlchemy 2.0)
================================================

The `daos` package encapsulates every query against the ORM entities and
exposes small CRUD APIs to the service layer (`database.core.funcs`).

Conventions
-----------
- Session lifecycle (open/commit/rollback) is handled by callers (`@transactional`)
- DAOs log and re-raise so upper layers decide the error policy
- Method names follow the `createX` / `fetchX` / `updateX` pattern

Contents
--------
- UserDao: create, list, lookup by id/email, partial update
- UserMessagesDao: create, list one chat, clear one chat
- NotificationDao: create, list per user, unread count, mark read
- DocDao: create, list, update (stamps `updated_at`), remove
- FeedbackDao: upsert keyed on `message_id`, list
- AuditDao: append, read latest, clear
- CaseDao: cases per user+agent, create/update, case message threads
- UiItemDao: catalog lookup ordered by (sort, title), idempotent seed inserts
"""
