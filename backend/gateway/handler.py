from fastapi import WebSocket
from functools import partial
from typing import Any, Dict, Optional
import logging
import uuid

from core.exceptions import InterviewError
from core.registry import SessionRegistry
from services.interview_session import InterviewSession
from services.llm_oracles import EvaluationOracle, QuestionOracle
from services.session_store import SessionStore
from services.topic_service import TopicResolver

logger = logging.getLogger(__name__)

class SessionGateway:
    """
    Map WebSocket events onto live interview sessions.
    One connection drives at most one session at a time.
    """

    def __init__(
        self,
        registry: Optional[SessionRegistry] = None,
        store: Optional[SessionStore] = None,
        topic_resolver: Optional[TopicResolver] = None,
        question_oracle: Optional[QuestionOracle] = None,
        evaluation_oracle: Optional[EvaluationOracle] = None
    ):
        self.registry = registry or SessionRegistry()
        self.store = store or SessionStore()
        self.topic_resolver = topic_resolver or TopicResolver()
        self.question_oracle = question_oracle or QuestionOracle()
        self.evaluation_oracle = evaluation_oracle or EvaluationOracle()
        self.active_connections: Dict[str, WebSocket] = {}  # {connection_id: websocket}
        self.connection_sessions: Dict[str, str] = {}  # {connection_id: session_id}

    async def connect(self, websocket: WebSocket, user_id: str) -> str:
        """
        Accept WebSocket connection for an authenticated user.

        Args:
            websocket: WebSocket connection
            user_id: Authenticated user ID

        Returns:
            Connection ID
        """
        await websocket.accept()
        connection_id = str(uuid.uuid4())
        self.active_connections[connection_id] = websocket

        logger.info(f"✅ WebSocket connected: connection={connection_id}, user={user_id}")

        await self.send(connection_id, "connected", {"message": "WebSocket connection established"})
        return connection_id

    def disconnect(self, connection_id: str):
        """
        Forget a connection and evict its session.
        In-flight work for the session keeps running but can no longer emit.
        """
        self.active_connections.pop(connection_id, None)
        session_id = self.connection_sessions.pop(connection_id, None)
        self.registry.remove(session_id)

        logger.info(f"WebSocket disconnected: connection={connection_id}")

    async def send(self, connection_id: str, event: str, payload: Dict[str, Any]):
        """
        Send one event to a connection; dropped if it is gone.
        """
        websocket = self.active_connections.get(connection_id)
        if websocket is None:
            logger.debug(f"Dropping {event} for closed connection {connection_id}")
            return
        try:
            await websocket.send_json({"type": event, **payload})
        except Exception as e:
            logger.error(f"Failed to send {event} to {connection_id}: {str(e)}")

    async def send_error(self, connection_id: str, message: str):
        await self.send(connection_id, "error", {"message": message})

    async def handle_message(self, connection_id: str, user_id: str, message: Any):
        """
        Dispatch one client message by its ``type``.
        """
        if not isinstance(message, dict):
            await self.send_error(connection_id, "Message must be a JSON object")
            return

        message_type = message.get("type")

        if message_type == "startInterview":
            await self.handle_start(connection_id, user_id, message)

        elif message_type == "submitAnswer":
            await self.handle_answer(connection_id, message.get("previousAnswer"))

        elif message_type == "heartbeat":
            # Keep-alive heartbeat
            await self.send(connection_id, "heartbeat_ack", {"status": "alive"})

        else:
            logger.warning(f"Unknown message type: {message_type}")
            await self.send_error(connection_id, f"Unknown message type: {message_type}")

    async def handle_start(self, connection_id: str, user_id: str, message: Dict[str, Any]):
        """
        Create, start and register a session for this connection.
        """
        previous = self.connection_sessions.pop(connection_id, None)
        if self.registry.remove(previous):
            logger.info(f"Discarding previous session {previous} on restart")

        session = InterviewSession(
            participant_id=user_id,
            question_oracle=self.question_oracle,
            evaluation_oracle=self.evaluation_oracle,
            store=self.store,
            topic_resolver=self.topic_resolver,
            emit=partial(self.send, connection_id),
        )

        try:
            await session.start(
                topic_id=message.get("topic_id"),
                topic_name=message.get("topic_name") or message.get("topic"),
            )
        except InterviewError as e:
            logger.warning(f"startInterview rejected: {str(e)}")
            await self.send_error(connection_id, str(e))
            return
        except Exception as e:
            logger.error(f"startInterview error: {str(e)}")
            await self.send_error(connection_id, "Failed to start interview")
            return

        if connection_id not in self.active_connections:
            return

        self.registry.add(session)
        self.connection_sessions[connection_id] = session.session_id

    async def handle_answer(self, connection_id: str, answer: Any):
        """
        Forward an answer to the connection's session.
        """
        session_id = self.connection_sessions.get(connection_id)
        if session_id is None:
            await self.send_error(connection_id, "Interview has not been started")
            return

        session = self.registry.get(session_id)
        if session is None:
            # Finished sessions ignore further answers
            return

        try:
            await session.submit_answer(answer)
        except Exception as e:
            logger.error(f"submitAnswer error: {str(e)}")
            await self.send_error(connection_id, "Failed while submitting answer")
            return

        if not session.is_active:
            self.registry.remove(session_id)

# Global handler instance
ws_handler = SessionGateway()
