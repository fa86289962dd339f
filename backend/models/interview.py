from sqlalchemy import Column, String, DateTime, Integer, JSON, ForeignKey
from sqlalchemy.orm import relationship
from database.db import Base
from datetime import datetime
import uuid

class Interview(Base):
    """
    Interview model for storing mock interview session records.
    One row per interview attempt, keyed by the live session id.
    """
    __tablename__ = "interviews"

    # Primary key
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    """Unique interview ID (UUID), shared with the live session"""

    # Foreign key
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    """Reference to the participant (User)"""

    topic_id = Column(String, nullable=True, index=True)
    """Resolved topic ID; UUID references are stored as given"""

    status = Column(String(30), default="active")
    """Session status: active, terminated_abuse, terminated_evasion or completed"""

    # Interview timing
    started_at = Column(DateTime, default=datetime.utcnow)
    """Interview start timestamp"""

    completed_at = Column(DateTime, nullable=True)
    """Interview end timestamp"""

    duration_mins = Column(Integer, default=0)
    """Interview duration in whole minutes"""

    # Interview data (stored as JSON)
    transcript = Column(JSON, default=list)
    """
    Ordered question/answer pairs.
    Format: [{"question": "...", "answer": "..."}, ...]
    """

    ai_evaluation = Column(JSON, default=dict)
    """
    Normalized evaluation.
    Format: {
        "overallScore": 7,
        "strengths": [...],
        "areasToImprove": [...],
        "summary": "...",
        "raw": "..."
    }
    """

    score = Column(Integer, default=0)
    """Overall score (0-10)"""

    questions_count = Column(Integer, default=0)
    """Number of answered questions"""

    # Metadata
    created_at = Column(DateTime, default=datetime.utcnow)
    """Interview record creation timestamp"""

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    """Interview record last update timestamp"""

    # Relationship
    user = relationship("User", backref="interviews")
    """Relationship to User (participant)"""

    def __repr__(self):
        return f"<Interview(id={self.id}, user_id={self.user_id}, status={self.status}, score={self.score})>"

    def calculate_duration(self):
        """
        Calculate interview duration in whole minutes.
        Returns None if interview is still ongoing.
        """
        if self.completed_at and self.started_at:
            delta = self.completed_at - self.started_at
            self.duration_mins = round(delta.total_seconds() / 60)
            return self.duration_mins
        return None

    def to_dict(self) -> dict:
        """Serialize the record in its persisted shape."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "topic_id": self.topic_id,
            "status": self.status,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "transcript": self.transcript or [],
            "ai_evaluation": self.ai_evaluation or {},
            "score": self.score,
            "duration_mins": self.duration_mins,
            "questions_count": self.questions_count,
        }
