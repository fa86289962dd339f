"""
Evaluation results and normalization of raw evaluator output.

The evaluator is asked for JSON but is free to rename fields, wrap the object
in prose or code fences, or return something unparsable. Everything that
leaves this module is an EvaluationResult with a clamped integer score and a
non-empty summary.
"""

import json
import logging
import math
from typing import Any, Iterable, List, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

MIN_SCORE = 0
MAX_SCORE = 10

# Alias precedence per target field, first present (non-null) key wins
SCORE_KEYS = ("overallScore", "overall_score", "score")
STRENGTH_KEYS = ("strengths", "Strengths", "positives")
IMPROVEMENT_KEYS = ("areasToImprove", "areas_to_improve", "weaknesses")
SUMMARY_KEYS = ("summary", "feedback")

DEFAULT_SUMMARY = "No summary provided."


class EvaluationResult(BaseModel):
    """Normalized interview evaluation"""
    overall_score: int = Field(default=0, alias="overallScore", ge=MIN_SCORE, le=MAX_SCORE)
    strengths: List[str] = Field(default_factory=list)
    areas_to_improve: List[str] = Field(default_factory=list, alias="areasToImprove")
    summary: str = DEFAULT_SUMMARY
    raw: str = ""

    class Config:
        populate_by_name = True

    def to_payload(self) -> dict:
        """Serialize with the camelCase keys used on the wire and in storage."""
        return self.model_dump(by_alias=True)


# ============ Fixed Results ============

def abuse_termination_result() -> EvaluationResult:
    return EvaluationResult(
        overall_score=0,
        strengths=[],
        areas_to_improve=["Used abusive language."],
        summary="⚠️ Interview terminated immediately due to unprofessional or abusive language.",
        raw="",
    )


def evasion_termination_result() -> EvaluationResult:
    return EvaluationResult(
        overall_score=0,
        strengths=[],
        areas_to_improve=[
            "Candidate refused to answer or diverted from topic. Performance unacceptable."
        ],
        summary="⚠️ Interview ended due to candidate refusing/diverting from questions; performance considered very poor.",
        raw="",
    )


def evaluation_failed_result() -> EvaluationResult:
    return EvaluationResult(
        overall_score=0,
        strengths=[],
        areas_to_improve=["Evaluation failed due to system error."],
        summary="⚠️ Evaluation failed",
        raw="",
    )


def malformed_output_result(raw: str) -> EvaluationResult:
    return EvaluationResult(
        overall_score=0,
        strengths=[],
        areas_to_improve=["Candidate did not provide relevant answers or misbehaved."],
        summary="⚠️ Interview ended due to unprofessional/diverted responses; performance unacceptable.",
        raw=raw,
    )


# ============ Normalization ============

def clamp_score(value: Any) -> int:
    """
    Coerce a raw score into an integer within [0, 10].
    Non-numeric values count as 0.
    """
    if isinstance(value, bool):
        return MIN_SCORE
    if isinstance(value, int):
        return max(MIN_SCORE, min(MAX_SCORE, value))
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return MIN_SCORE
    if math.isnan(number):
        return MIN_SCORE
    if number <= MIN_SCORE:
        return MIN_SCORE
    if number >= MAX_SCORE:
        return MAX_SCORE
    return int(round(number))


def _first_present(data: dict, keys: Iterable[str]) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def _as_text_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        items = [value]
    elif isinstance(value, (list, tuple)):
        items = list(value)
    else:
        items = [value]
    return [str(item).strip() for item in items if item is not None and str(item).strip()]


def normalize_evaluation(data: dict, raw: str = "") -> EvaluationResult:
    """Map an evaluator JSON object onto an EvaluationResult."""
    summary = _first_present(data, SUMMARY_KEYS)
    summary = str(summary).strip() if summary is not None else ""

    return EvaluationResult(
        overall_score=clamp_score(_first_present(data, SCORE_KEYS)),
        strengths=_as_text_list(_first_present(data, STRENGTH_KEYS)),
        areas_to_improve=_as_text_list(_first_present(data, IMPROVEMENT_KEYS)),
        summary=summary or DEFAULT_SUMMARY,
        raw=raw,
    )


def _extract_json_object(text: str) -> Any:
    try:
        return json.loads(text)
    except ValueError:
        # Try to extract the object if there's extra text around it
        start = text.find("{")
        end = text.rfind("}") + 1
        if start >= 0 and end > start:
            return json.loads(text[start:end])
        raise


def parse_evaluation(raw: Optional[str]) -> EvaluationResult:
    """
    Parse raw evaluator text. Unparsable or non-object output yields the
    zero-score fallback with the raw text retained.
    """
    raw = (raw or "").strip()

    try:
        data = _extract_json_object(raw)
    except (ValueError, RecursionError):
        logger.warning(f"⚠️ Failed to parse evaluation JSON: {raw[:200]!r}")
        return malformed_output_result(raw)

    if not isinstance(data, dict):
        logger.warning(f"⚠️ Evaluation JSON is not an object: {type(data).__name__}")
        return malformed_output_result(raw)

    return normalize_evaluation(data, raw)
