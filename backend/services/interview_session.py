"""
Live interview session state machine.

One InterviewSession drives one participant through a bounded run of
question/answer turns:

    active -> terminated_abuse | terminated_evasion | completed

Terminal states absorb: once a session has left ``active`` every further
answer is ignored without emitting anything.
"""

import asyncio
import enum
import logging
import uuid
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional

from config.settings import settings
from core.exceptions import StoreWriteFailed
from services.content_screen import ScreenVerdict, answer_feedback, normalize_answer, screen_answer
from services.evaluation import (
    EvaluationResult,
    abuse_termination_result,
    evaluation_failed_result,
    evasion_termination_result,
)
from services.llm_oracles import EvaluationOracle, QuestionOracle
from services.session_store import SessionStore
from services.topic_service import ResolvedTopic, TopicResolver

logger = logging.getLogger(__name__)

Emitter = Callable[[str, Dict[str, Any]], Awaitable[None]]


class SessionStatus(str, enum.Enum):
    """Interview session status"""
    ACTIVE = "active"
    TERMINATED_ABUSE = "terminated_abuse"
    TERMINATED_EVASION = "terminated_evasion"
    COMPLETED = "completed"


class TurnOutcome(str, enum.Enum):
    """What a single submit_answer call did"""
    IGNORED = "ignored"
    TERMINATED_ABUSE = "terminated_abuse"
    TERMINATED_EVASION = "terminated_evasion"
    COMPLETED = "completed"
    CONTINUED = "continued"


class InterviewSession:
    """
    State for one interview attempt.

    Answers are processed one at a time under a per-session lock, so
    overlapping submissions cannot interleave transcript updates.
    """

    def __init__(
        self,
        participant_id: str,
        question_oracle: QuestionOracle,
        evaluation_oracle: EvaluationOracle,
        store: SessionStore,
        topic_resolver: TopicResolver,
        emit: Emitter,
        max_turns: Optional[int] = None,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.session_id = str(uuid.uuid4())
        self.participant_id = participant_id
        self.question_oracle = question_oracle
        self.evaluation_oracle = evaluation_oracle
        self.store = store
        self.topic_resolver = topic_resolver
        self.emit = emit
        self.max_turns = settings.MAX_TURNS if max_turns is None else max_turns
        self.clock = clock

        self.topic: Optional[ResolvedTopic] = None
        self.status = SessionStatus.ACTIVE
        self.turn_index = 0
        self.questions_issued = 0
        self.transcript: List[Dict[str, str]] = []
        self.pending_question: Optional[str] = None
        self.started_at: datetime = clock()
        self.result: Optional[EvaluationResult] = None

        self._lock = asyncio.Lock()

    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE

    @property
    def started(self) -> bool:
        return self.topic is not None

    # ============ Lifecycle ============

    async def start(self, topic_id: Any = None, topic_name: Optional[str] = None) -> Dict[str, str]:
        """
        Resolve the topic, persist the session and issue the first question.

        Raises:
            TopicNotFound: A topic name was given but nothing matched
            InvalidTopicReference: No usable topic id or name
        """
        async with self._lock:
            if self.started:
                raise RuntimeError(f"Session {self.session_id} already started")

            self.topic = await asyncio.to_thread(self.topic_resolver.resolve, topic_id, topic_name)

            await self._persist("create", {
                "id": self.session_id,
                "user_id": self.participant_id,
                "topic_id": self.topic.id,
                "status": self.status.value,
                "started_at": self.started_at,
            })

            question = await self.question_oracle.next_question("", self.topic.name, 0)
            self.pending_question = question
            self.questions_issued = 1

            logger.info(f"✨ Interview started: {self.session_id} topic={self.topic.name!r} user={self.participant_id}")

            await self.emit("interviewStarted", {"sessionId": self.session_id})
            await self.emit("nextQuestion", {"question": question, "questionNumber": self.questions_issued})

            return {"sessionId": self.session_id, "question": question}

    async def submit_answer(self, text: Any) -> TurnOutcome:
        """
        Process one answer. Exactly one of abuse termination, evasion
        termination, completion or continuation happens per accepted call.
        """
        async with self._lock:
            if not self.is_active or not self.started:
                logger.debug(f"Answer ignored for session {self.session_id} (status={self.status.value})")
                return TurnOutcome.IGNORED

            answer = normalize_answer(text)
            verdict = screen_answer(answer)

            if verdict == ScreenVerdict.ABUSIVE:
                await self._terminate(SessionStatus.TERMINATED_ABUSE, abuse_termination_result())
                return TurnOutcome.TERMINATED_ABUSE

            if verdict == ScreenVerdict.EVASIVE:
                await self._terminate(SessionStatus.TERMINATED_EVASION, evasion_termination_result())
                return TurnOutcome.TERMINATED_EVASION

            self.transcript.append({"question": self.pending_question or "", "answer": answer})
            self.turn_index += 1

            await self.emit("answerFeedback", answer_feedback(answer))

            if self.questions_issued >= self.max_turns:
                await self._complete()
                return TurnOutcome.COMPLETED

            question = await self.question_oracle.next_question(answer, self.topic.name, self.questions_issued)
            self.pending_question = question
            self.questions_issued += 1

            await self.emit("nextQuestion", {"question": question, "questionNumber": self.questions_issued})
            return TurnOutcome.CONTINUED

    # ============ Transitions ============

    async def _terminate(self, status: SessionStatus, result: EvaluationResult) -> None:
        self.status = status
        self.result = result
        self.pending_question = None
        logger.warning(f"⚠️ Interview {self.session_id} terminated early: {status.value}")

        await self._finish(message=result.summary)

    async def _complete(self) -> None:
        try:
            result = await self.evaluation_oracle.evaluate(list(self.transcript))
        except Exception as e:
            logger.error(f"❌ Evaluation failed for interview {self.session_id}: {str(e)}")
            result = evaluation_failed_result()
        self.status = SessionStatus.COMPLETED
        self.result = result
        self.pending_question = None
        logger.info(f"🏁 Interview {self.session_id} completed: score={result.overall_score}")

        await self._finish(message="Interview complete!")

    async def _finish(self, message: str) -> None:
        completed_at = self.clock()
        transcript = list(self.transcript)
        evaluation = self.result.to_payload()

        await self.emit("interviewFinished", {
            "message": message,
            "status": self.status.value,
            **evaluation,
            "transcript": transcript,
        })

        await self._persist("update", {
            "status": self.status.value,
            "transcript": transcript,
            "ai_evaluation": evaluation,
            "score": self.result.overall_score,
            "completed_at": completed_at,
            "duration_mins": self.duration_minutes(completed_at),
            "questions_count": len(transcript),
        })

    def duration_minutes(self, now: Optional[datetime] = None) -> int:
        """Elapsed time since start, in whole minutes."""
        elapsed = (now or self.clock()) - self.started_at
        return max(0, round(elapsed.total_seconds() / 60))

    async def _persist(self, operation: str, fields: Dict[str, Any]) -> bool:
        """
        Write to the store off the event loop. A failed write is logged and
        reported through the return value; the in-memory state stands.
        """
        try:
            if operation == "create":
                await asyncio.to_thread(self.store.create, fields)
            else:
                await asyncio.to_thread(self.store.update, self.session_id, fields)
            return True
        except StoreWriteFailed as e:
            logger.error(f"💾 Store write failed for session {self.session_id}: {e}")
            return False

