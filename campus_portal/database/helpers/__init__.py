"""
Session plumbing for the service layer.

Contents
--------
- transactionManagement
    `@transactional` gives every service function (`database.core.funcs`,
    `database.core.backup`) a session: nested calls share the caller's session
    through `db_session_context`, the outermost call commits or rolls back.
    `bind_engine` repoints the session factory (tests use an in-memory SQLite engine).
"""
