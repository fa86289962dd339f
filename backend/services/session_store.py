"""Durable storage for live interview sessions, keyed by session id"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import sessionmaker

from core.exceptions import StoreWriteFailed
from database.db import SessionLocal
from services.interview_service import InterviewService

logger = logging.getLogger(__name__)


class SessionStore:
    """
    Key-value view over the interviews table.
    Every call opens its own short-lived database session, so it is safe to
    run from worker threads.
    """

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self.session_factory = session_factory or SessionLocal

    def create(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert the initial record for a session.

        Raises:
            StoreWriteFailed: The insert did not go through
        """
        db = self.session_factory()
        try:
            interview = InterviewService.create_interview(
                db,
                user_id=record["user_id"],
                topic_id=record.get("topic_id"),
                interview_id=record["id"],
                started_at=record.get("started_at"),
                status=record.get("status", "active"),
            )
            return interview.to_dict()
        except Exception as e:
            raise StoreWriteFailed(f"Could not create session {record.get('id')}: {e}") from e
        finally:
            db.close()

    def update(self, session_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply a partial update to a session record.

        Raises:
            StoreWriteFailed: The record is missing or the update failed
        """
        db = self.session_factory()
        try:
            interview = InterviewService.update_interview(db, session_id, **fields)
        except Exception as e:
            raise StoreWriteFailed(f"Could not update session {session_id}: {e}") from e
        finally:
            db.close()

        if interview is None:
            raise StoreWriteFailed(f"Session record not found: {session_id}")
        return interview.to_dict()

    def get(self, session_id: str) -> Optional[Dict[str, Any]]:
        db = self.session_factory()
        try:
            interview = InterviewService.get_interview(db, session_id)
            return interview.to_dict() if interview else None
        finally:
            db.close()
