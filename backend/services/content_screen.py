"""
Answer screening for live interviews.
Matching is plain case-insensitive substring containment, so a longer benign
word containing a listed term (e.g. "quite" contains "quit") also matches.
"""

import enum
from typing import Any, Dict

ABUSIVE_TERMS = (
    "fuck",
    "shit",
    "bitch",
    "idiot",
    "stupid",
    "fool",
    "asshole",
    "dumb",
    "bastard",
    "crap",
    "screw you",
)

EVASION_PHRASES = (
    "end interview",
    "stop interview",
    "finish interview",
    "dont want to continue",
    "not interested",
    "quit",
    "dont want to give interview",
    "i want to end",
    "i will not tell you",
    "i am not telling",
    "no more questions",
    # Off-topic diversions
    "play cricket",
    "other topic",
)

MIN_ADEQUATE_LENGTH = 5


class ScreenVerdict(str, enum.Enum):
    """Result of screening one answer"""
    CLEAN = "clean"
    ABUSIVE = "abusive"
    EVASIVE = "evasive"


def normalize_answer(text: Any) -> str:
    """Trim an incoming answer; missing answers become the empty string."""
    if text is None:
        return ""
    return str(text).strip()


def screen_answer(text: Any) -> ScreenVerdict:
    """
    Classify an answer. The abuse list is checked before the evasion list
    and the first match wins.
    """
    lowered = normalize_answer(text).lower()

    if any(term in lowered for term in ABUSIVE_TERMS):
        return ScreenVerdict.ABUSIVE

    if any(phrase in lowered for phrase in EVASION_PHRASES):
        return ScreenVerdict.EVASIVE

    return ScreenVerdict.CLEAN


def answer_feedback(text: Any) -> Dict[str, str]:
    """Immediate length-based feedback, computed locally."""
    if len(normalize_answer(text)) >= MIN_ADEQUATE_LENGTH:
        return {"signal": "adequate", "feedback": "Good answer!"}
    return {"signal": "too short", "feedback": "Answer too short, elaborate more."}
