from sqlalchemy import func
from sqlalchemy.orm import Session, sessionmaker
from dataclasses import dataclass
from typing import Any, List, Optional
import logging
import random
import re

from core.exceptions import InvalidTopicReference, TopicNotFound
from database.db import SessionLocal
from models.topic import Topic, Question

logger = logging.getLogger(__name__)

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)

@dataclass(frozen=True)
class ResolvedTopic:
    """Canonical topic reference for a session"""
    id: str
    name: str

def looks_like_uuid(value: Any) -> bool:
    return isinstance(value, str) and bool(UUID_PATTERN.match(value.strip()))

def _as_number(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None

class TopicService:
    """
    Topic lookups and question bank reads.
    """

    @staticmethod
    def resolve(
        db: Session,
        topic_id: Any = None,
        topic_name: Optional[str] = None
    ) -> ResolvedTopic:
        """
        Resolve a topic reference to its canonical form.

        Order: UUID passthrough, numeric id lookup, case-insensitive name lookup.

        Args:
            db: Database session
            topic_id: UUID string or legacy numeric id (optional)
            topic_name: Topic name (optional)

        Returns:
            ResolvedTopic

        Raises:
            TopicNotFound: A name was supplied and nothing matched
            InvalidTopicReference: No usable id and no name
        """
        name = topic_name.strip() if isinstance(topic_name, str) else ""

        if looks_like_uuid(topic_id):
            topic_uuid = topic_id.strip()
            topic = db.query(Topic).filter(Topic.id == topic_uuid).first()
            return ResolvedTopic(id=topic_uuid, name=topic.name if topic else name)

        number = _as_number(topic_id)
        if number is not None:
            topic = db.query(Topic).filter(Topic.number == number).first()
            if topic:
                return ResolvedTopic(id=topic.id, name=topic.name)

        if name:
            topic = db.query(Topic).filter(func.lower(Topic.name) == name.lower()).first()
            if topic:
                return ResolvedTopic(id=topic.id, name=topic.name)
            logger.warning(f"Topic not found by name: {name}")
            raise TopicNotFound()

        logger.warning(f"Invalid topic reference: topic_id={topic_id!r}")
        raise InvalidTopicReference()

    @staticmethod
    def random_question(db: Session, topic_id: str) -> Optional[Question]:
        """
        Pick a random stored question for a topic.

        Returns:
            Question object, or None if the topic has no questions
        """
        questions = db.query(Question).filter(Question.topic_id == topic_id).all()
        if not questions:
            return None
        return random.choice(questions)

    @staticmethod
    def seed_defaults(db: Session, names: List[str]) -> int:
        """
        Create the given topics when the topics table is empty.

        Returns:
            Number of topics created
        """
        if db.query(Topic).first() is not None:
            return 0

        try:
            for number, name in enumerate(names, start=1):
                db.add(Topic(number=number, name=name))
            db.commit()
            logger.info(f"Seeded {len(names)} default topics")
            return len(names)
        except Exception as e:
            logger.error(f"Failed to seed topics: {str(e)}")
            db.rollback()
            raise

class TopicResolver:
    """
    Resolves topics for live sessions using a short-lived database session.
    """

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self.session_factory = session_factory or SessionLocal

    def resolve(self, topic_id: Any = None, topic_name: Optional[str] = None) -> ResolvedTopic:
        db = self.session_factory()
        try:
            return TopicService.resolve(db, topic_id, topic_name)
        finally:
            db.close()
