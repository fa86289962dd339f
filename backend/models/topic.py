from sqlalchemy import Column, String, DateTime, Integer, Text, ForeignKey
from sqlalchemy.orm import relationship
from database.db import Base
from datetime import datetime
import uuid

class Topic(Base):
    """
    Interview topic (e.g. "JavaScript").
    Topics are addressed by UUID, by legacy numeric id or by name.
    """
    __tablename__ = "topics"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    """Unique topic ID (UUID)"""

    number = Column(Integer, unique=True, nullable=True, index=True)
    """Legacy numeric identifier"""

    name = Column(String(100), unique=True, nullable=False, index=True)
    """Display name, matched case-insensitively"""

    description = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    questions = relationship("Question", back_populates="topic", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Topic(id={self.id}, number={self.number}, name={self.name})>"

class Question(Base):
    """
    Stored question bank entry for a topic.
    """
    __tablename__ = "questions"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    topic_id = Column(String, ForeignKey("topics.id"), nullable=False, index=True)

    text = Column(Text, nullable=False)

    difficulty = Column(String(20), nullable=True)
    """Optional difficulty label: "easy", "medium", "hard" """

    created_at = Column(DateTime, default=datetime.utcnow)

    topic = relationship("Topic", back_populates="questions")

    def __repr__(self):
        return f"<Question(id={self.id}, topic_id={self.topic_id})>"
