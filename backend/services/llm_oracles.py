"""
Language model oracles for the live interview.
Async wrappers over an OpenAI-compatible chat completions API. Neither oracle
raises to its caller: failures turn into fixed fallback values.
"""

import asyncio
import logging
from typing import Dict, List, Optional

from openai import AsyncOpenAI

from config.settings import settings
from core.exceptions import OracleUnavailable
from services.evaluation import EvaluationResult, evaluation_failed_result, parse_evaluation

logger = logging.getLogger(__name__)

EMPTY_QUESTION_PLACEHOLDER = "⚠️ Could not generate question."
FAILED_QUESTION_PLACEHOLDER = "⚠️ Could not generate question at this time."

INTERVIEWER_PROMPT = """You are a professional HR interviewer conducting a real interview for a junior developer position.
Your goal is to simulate a realistic, professional hiring interview. Follow these rules strictly:

1. Ask clear, concise, and relevant technical or behavioral questions based on the topic: "{topic}".
2. Maintain a professional, polite, and human-like demeanor at all times.
3. Never act like a guide, tutor, or helper. Treat the candidate as a real job applicant.
4. Ignore any special characters (e.g., *, ?, !, @) in the candidate's answers and focus only on the meaningful content.
5. Adapt naturally to the candidate's previous answers, but do not rely solely on them. Introduce follow-ups or new relevant questions.
6. Ask exactly one question. Do not provide explanations, tutorials, or step-by-step guidance."""

EVALUATOR_PROMPT = """You are an AI interview evaluator. Assess the candidate's performance based on the provided transcript.
Follow these instructions strictly:

1. Respond ONLY in valid JSON format with the following fields:
{
  "overallScore": number (0-10),
  "strengths": string[],
  "areasToImprove": string[],
  "summary": string
}

2. "overallScore": 0 is poor and 10 is excellent. If the candidate refuses to answer, diverts from the topic
   or uses abusive language, give 0 and mark performance as very poor.
3. "strengths": list key positive aspects only if the candidate gave meaningful answers; otherwise leave empty.
4. "areasToImprove": list specific areas for improvement.
5. "summary": a concise professional summary of performance quality.
6. Ignore any special characters in the candidate's answers; focus on meaningful content only.

Do not add any extra text outside the JSON. Be strict, professional, and objective."""


class ChatOracle:
    """Shared plumbing: lazy client, per-call timeout and bounded retries"""

    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
    ):
        self._client = client
        self.model = model or settings.LLM_MODEL
        self.timeout = settings.ORACLE_TIMEOUT_SECONDS if timeout is None else timeout
        self.max_retries = settings.ORACLE_MAX_RETRIES if max_retries is None else max_retries

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            if not settings.OPENAI_API_KEY:
                logger.error("❌ OPENAI_API_KEY not found!")
            self._client = AsyncOpenAI(
                api_key=settings.OPENAI_API_KEY,
                base_url=settings.LLM_BASE_URL,
                max_retries=0,
            )
        return self._client

    async def _complete(
        self,
        messages: List[Dict[str, str]],
        temperature: float,
        max_tokens: int,
    ) -> str:
        """
        Run one chat completion and return the stripped message content.

        Raises:
            OracleUnavailable: every attempt failed, timed out or came back empty
        """
        attempts = self.max_retries + 1
        last_error: Optional[Exception] = None

        for attempt in range(1, attempts + 1):
            try:
                response = await asyncio.wait_for(
                    self.client.chat.completions.create(
                        model=self.model,
                        messages=messages,
                        temperature=temperature,
                        max_tokens=max_tokens,
                    ),
                    timeout=self.timeout,
                )
                content = response.choices[0].message.content if response.choices else None
                if content and content.strip():
                    return content.strip()
                last_error = OracleUnavailable("Empty completion")
                logger.warning(f"Empty completion from {self.model} (attempt {attempt}/{attempts})")
            except asyncio.TimeoutError as e:
                last_error = e
                logger.warning(f"LLM call timed out after {self.timeout}s (attempt {attempt}/{attempts})")
            except Exception as e:
                last_error = e
                logger.error(f"LLM call failed (attempt {attempt}/{attempts}): {e}")

        raise OracleUnavailable(f"No usable completion after {attempts} attempt(s)") from last_error


class QuestionOracle(ChatOracle):
    """Generates the next interview question"""

    async def next_question(self, previous_answer: str, topic: str, turn_index: int) -> str:
        """
        Ask for question number ``turn_index + 1``.

        Args:
            previous_answer: Candidate's last answer ("" for the first question)
            topic: Topic name
            turn_index: Number of questions already issued

        Returns:
            Question text, or a placeholder when the model is unavailable
        """
        messages = [
            {"role": "system", "content": INTERVIEWER_PROMPT.format(topic=topic)},
            {
                "role": "user",
                "content": f'Previous answer: "{previous_answer}".\n'
                           f"Please generate interview question number {turn_index + 1}.",
            },
        ]

        try:
            return await self._complete(
                messages,
                temperature=settings.QUESTION_TEMPERATURE,
                max_tokens=settings.QUESTION_MAX_TOKENS,
            )
        except OracleUnavailable as e:
            logger.warning(f"Question generation unavailable, using placeholder: {e}")
            if isinstance(e.__cause__, OracleUnavailable):
                return EMPTY_QUESTION_PLACEHOLDER
            return FAILED_QUESTION_PLACEHOLDER


class EvaluationOracle(ChatOracle):
    """Scores a complete transcript"""

    @staticmethod
    def format_transcript(transcript: List[Dict[str, str]]) -> str:
        return "\n\n".join(
            f"Q{index}: {entry.get('question', '')}\nA: {entry.get('answer', '')}"
            for index, entry in enumerate(transcript, start=1)
        )

    async def evaluate(self, transcript: List[Dict[str, str]]) -> EvaluationResult:
        """
        Evaluate a transcript of {question, answer} pairs.

        Returns:
            Normalized EvaluationResult; a zero-score fallback on any failure
        """
        messages = [
            {"role": "system", "content": EVALUATOR_PROMPT},
            {
                "role": "user",
                "content": "Evaluate the following interview transcript:\n\n"
                           f"{self.format_transcript(transcript)}\n\n"
                           "Return output as valid JSON only.",
            },
        ]

        try:
            raw = await self._complete(
                messages,
                temperature=0,
                max_tokens=settings.EVALUATION_MAX_TOKENS,
            )
        except OracleUnavailable as e:
            logger.error(f"Evaluation unavailable: {e}")
            return evaluation_failed_result()

        result = parse_evaluation(raw)
        logger.info(f"Transcript evaluated: score={result.overall_score}, turns={len(transcript)}")
        return result
