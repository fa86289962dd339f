"""Registry of live interview sessions"""

import logging
from typing import Dict, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from services.interview_session import InterviewSession

logger = logging.getLogger(__name__)


class SessionRegistry:
    """
    Owns every live InterviewSession, keyed by session id.
    Sessions are added once started and removed on disconnect or when they finish.
    """

    def __init__(self):
        self._sessions: Dict[str, "InterviewSession"] = {}

    def add(self, session: "InterviewSession") -> None:
        self._sessions[session.session_id] = session
        logger.info(f"Session registered: {session.session_id} (live={len(self._sessions)})")

    def get(self, session_id: Optional[str]) -> Optional["InterviewSession"]:
        if session_id is None:
            return None
        return self._sessions.get(session_id)

    def remove(self, session_id: Optional[str]) -> Optional["InterviewSession"]:
        session = self._sessions.pop(session_id, None) if session_id else None
        if session is not None:
            logger.info(f"Session removed: {session_id} (live={len(self._sessions)})")
        return session

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
