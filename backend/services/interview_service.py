from sqlalchemy.orm import Session
from models.interview import Interview
from datetime import datetime
from typing import Any, List, Optional
import logging

logger = logging.getLogger(__name__)

# Columns a caller may set through update_interview
UPDATABLE_FIELDS = (
    "status",
    "transcript",
    "ai_evaluation",
    "score",
    "completed_at",
    "duration_mins",
    "questions_count",
)

class InterviewService:
    """
    Business logic for interview records.
    Handles creation, partial updates and history reads.
    """

    @staticmethod
    def create_interview(
        db: Session,
        user_id: str,
        topic_id: Optional[str],
        interview_id: Optional[str] = None,
        started_at: Optional[datetime] = None,
        status: str = "active"
    ) -> Interview:
        """
        Create a new interview record.

        Args:
            db: Database session
            user_id: Participant user ID
            topic_id: Resolved topic ID
            interview_id: Record ID (defaults to a new UUID)
            started_at: Start timestamp (defaults to now)
            status: Initial session status

        Returns:
            Created Interview object
        """
        try:
            interview = Interview(
                user_id=user_id,
                topic_id=topic_id,
                status=status,
                started_at=started_at or datetime.utcnow(),
                transcript=[],
                ai_evaluation={
                    "overallScore": 0,
                    "strengths": [],
                    "areasToImprove": [],
                    "summary": "",
                    "raw": "",
                },
                score=0,
                duration_mins=0,
                questions_count=0,
            )
            if interview_id:
                interview.id = interview_id

            db.add(interview)
            db.commit()
            db.refresh(interview)

            logger.info(f"Interview created: {interview.id} for user {user_id}")

            return interview

        except Exception as e:
            logger.error(f"Failed to create interview: {str(e)}")
            db.rollback()
            raise

    @staticmethod
    def update_interview(
        db: Session,
        interview_id: str,
        **fields: Any
    ) -> Optional[Interview]:
        """
        Apply a partial update to an interview.

        Args:
            db: Database session
            interview_id: Interview ID
            **fields: Column values to set (see UPDATABLE_FIELDS)

        Returns:
            Updated Interview object, or None if not found
        """
        unknown = set(fields) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update interview fields: {sorted(unknown)}")

        try:
            interview = db.query(Interview).filter(
                Interview.id == interview_id
            ).first()

            if not interview:
                logger.error(f"Interview not found: {interview_id}")
                return None

            for name, value in fields.items():
                setattr(interview, name, value)

            db.add(interview)
            db.commit()
            db.refresh(interview)

            logger.info(f"Interview updated: {interview_id} ({', '.join(sorted(fields))})")

            return interview

        except Exception as e:
            logger.error(f"Failed to update interview: {str(e)}")
            db.rollback()
            raise

    @staticmethod
    def get_interview(
        db: Session,
        interview_id: str,
        user_id: Optional[str] = None
    ) -> Optional[Interview]:
        """
        Fetch one interview, optionally restricted to its owner.
        """
        query = db.query(Interview).filter(Interview.id == interview_id)
        if user_id is not None:
            query = query.filter(Interview.user_id == user_id)
        return query.first()

    @staticmethod
    def list_interviews(db: Session, user_id: str) -> List[Interview]:
        """
        Interview history for a user, newest first.
        """
        return (
            db.query(Interview)
            .filter(Interview.user_id == user_id)
            .order_by(Interview.started_at.desc())
            .all()
        )

    @staticmethod
    def sanitize_transcript(transcript: Any) -> List[dict]:
        """
        Coerce a client-supplied transcript into [{question, answer}, ...].
        Bare strings become answers to an unknown question.
        """
        if not isinstance(transcript, list):
            return [{"question": "N/A", "answer": str(transcript)}]

        entries = []
        for item in transcript:
            if isinstance(item, str):
                entries.append({"question": "N/A", "answer": item})
            elif isinstance(item, dict):
                entries.append({
                    "question": item.get("question") or "N/A",
                    "answer": item.get("answer") or "",
                })
            else:
                entries.append({"question": "N/A", "answer": str(item)})
        return entries
