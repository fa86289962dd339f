"""Interview routes - REST API"""

import logging
from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from core.exceptions import InvalidTopicReference, TopicNotFound
from database.db import get_db
from models.user import User
from services.interview_service import InterviewService
from services.llm_oracles import EvaluationOracle
from services.topic_service import TopicService
from utils.security import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/interviews", tags=["interview"])

# ============ MODELS ============

class StartInterviewRequest(BaseModel):
    topic_id: Optional[Any] = None
    topic_name: Optional[str] = None

class EvaluateInterviewRequest(BaseModel):
    interview_id: Optional[str] = Field(default=None, alias="interviewId")
    transcript: Optional[Any] = None

    class Config:
        populate_by_name = True

# ============ DEPENDENCIES ============

_evaluation_oracle: Optional[EvaluationOracle] = None

def get_evaluation_oracle() -> EvaluationOracle:
    """Shared evaluation oracle; overridden in tests."""
    global _evaluation_oracle
    if _evaluation_oracle is None:
        _evaluation_oracle = EvaluationOracle()
    return _evaluation_oracle

# ============ REST API ENDPOINTS ============

@router.post("/start")
async def start_interview(
    request: StartInterviewRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a new interview record for the resolved topic"""
    try:
        topic = TopicService.resolve(db, request.topic_id, request.topic_name)
    except (TopicNotFound, InvalidTopicReference) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    try:
        interview = InterviewService.create_interview(db, current_user.id, topic.id)
        return interview.to_dict()
    except Exception as e:
        logger.error(f"startInterview error: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to start interview"
        )

@router.post("/question")
async def get_question(
    topic_id: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Return a random stored question for a topic"""
    if not topic_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="topic_id is required")

    question = TopicService.random_question(db, topic_id)
    if question is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No questions found for this topic"
        )

    return {
        "id": question.id,
        "topic_id": question.topic_id,
        "text": question.text,
        "difficulty": question.difficulty,
    }

@router.post("/evaluate")
async def submit_interview_for_evaluation(
    request: EvaluateInterviewRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    oracle: EvaluationOracle = Depends(get_evaluation_oracle)
):
    """Evaluate a full transcript and store the result on the interview"""
    if not request.interview_id or not request.transcript:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="interviewId and transcript are required"
        )

    interview = InterviewService.get_interview(db, request.interview_id, user_id=current_user.id)
    if interview is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Interview not found")

    transcript = InterviewService.sanitize_transcript(request.transcript)
    evaluation = await oracle.evaluate(transcript)

    try:
        completed_at = datetime.utcnow()
        interview = InterviewService.update_interview(
            db,
            interview.id,
            transcript=transcript,
            ai_evaluation=evaluation.to_payload(),
            score=evaluation.overall_score,
            completed_at=completed_at,
            status="completed",
            questions_count=len(transcript),
        )
        interview.calculate_duration()
        db.commit()
    except Exception as e:
        logger.error(f"submitInterviewForEvaluation error: {str(e)}")
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to store evaluation"
        )

    return {"success": True, "interview": interview.to_dict()}

@router.get("/history")
async def get_interview_history(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Interview history for the current user, newest first"""
    interviews = InterviewService.list_interviews(db, current_user.id)
    return [interview.to_dict() for interview in interviews]
