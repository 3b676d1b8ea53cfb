"""
Session-per-call transactions for the portal service layer.

A service function decorated with ``@transactional`` receives its SQLAlchemy
session as the ``session`` keyword. The first decorated call on a stack opens
the session and owns the commit; decorated helpers it calls pick the same
session up from ``db_session_context`` so a backup restore or a broadcast is
written in one transaction.
"""

from functools import wraps
from sqlalchemy.orm import sessionmaker
import contextvars
from campus_portal.database.config.connection_engine import connection_engine

db_session_context = contextvars.ContextVar("db_session_context", default=None)
"""Session of the outermost running ``@transactional`` call, if any."""

SessionFactory = sessionmaker(bind=connection_engine)


def bind_engine(engine) -> None:
    """Point new transactional sessions at ``engine`` (in-memory SQLite in tests)."""
    SessionFactory.configure(bind=engine)


def transactional(func):
    """
    Run ``func`` inside a portal transaction.

    Parameters
    ----------
    func : callable
        Service function taking a ``session`` keyword argument. Callers pass
        everything else by keyword and never supply ``session`` themselves.

    Returns
    -------
    callable
        Wrapper that joins the active session, or opens one, commits it when
        ``func`` returns and rolls it back when ``func`` raises.

    Example
    -------
    >>> @transactional
    ... def rename_doc(session=None, doc_id=None, title=None):
    ...     session.get(Doc, doc_id).title = title
    """
    @wraps(func)
    def wrap_func(*args, **kwargs):
        active = db_session_context.get()
        if active:
            return func(*args, session=active, **kwargs)

        session = SessionFactory()
        token = db_session_context.set(session)
        try:
            result = func(*args, session=session, **kwargs)
            session.flush()
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
            db_session_context.reset(token)
        return result

    return wrap_func
