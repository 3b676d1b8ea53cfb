"""
Doc DAO

Purpose
-------
Full CRUD for user documents (`tbl_docs`). Listings are newest first.
"""

import logging
from sqlalchemy.orm import Session
from sqlalchemy import desc
from campus_portal.database.entities.docs import Doc
from campus_portal.database.entities.timestamps import utcnow

logger = logging.getLogger(__name__)

class DocDao:
    """Data Access Object for `Doc`."""

    def createDoc(self, session: Session, doc: Doc) -> Doc:
        try:
            session.add(doc)
            return doc
        except Exception as e:
            logger.error("Error in DocDao.createDoc. Error Message: %s", e)
            raise

    def fetchDocs(self, session: Session) -> list[Doc]:
        try:
            return session.query(Doc).order_by(desc(Doc.created_at)).all()
        except Exception as e:
            logger.error("Error in DocDao.fetchDocs. Error Message: %s", e)
            raise

    def fetchDocsByUser(self, session: Session, user_id: str) -> list[Doc]:
        try:
            return session.query(Doc).filter(Doc.user_id == user_id).order_by(desc(Doc.created_at)).all()
        except Exception as e:
            logger.error("Error in DocDao.fetchDocsByUser. Error Message: %s", e)
            raise

    def updateDoc(self, session: Session, doc_id: str, title: str | None = None, content: str | None = None) -> bool:
        """
        Update title and/or content and stamp `updated_at`.

        Returns
        -------
        bool
            False when the document does not exist.
        """
        try:
            doc = session.get(Doc, doc_id)
            if doc is None:
                return False
            if title is not None:
                doc.title = title
            if content is not None:
                doc.content = content
            doc.updated_at = utcnow()
            return True
        except Exception as e:
            logger.error("Error in DocDao.updateDoc. Error Message: %s", e)
            raise

    def removeDoc(self, session: Session, doc_id: str) -> bool:
        try:
            deleted = session.query(Doc).filter(Doc.id == doc_id).delete(synchronize_session=False)
            return deleted > 0
        except Exception as e:
            logger.error("Error in DocDao.removeDoc. Error Message: %s", e)
            raise
