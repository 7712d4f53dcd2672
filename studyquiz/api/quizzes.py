from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import Field
from sqlalchemy.orm import Session

from studyquiz.api.common import CamelModel
from studyquiz.core.auth import get_current_owner
from studyquiz.core.config import settings
from studyquiz.core.database import get_db
from studyquiz.models.orm import Difficulty, QuestionType, SessionStatus
from studyquiz.services import scoring, sessions
from studyquiz.services.responses import submit_answer

router = APIRouter()


class QuizStart(CamelModel):
    document_id: Optional[str] = None
    question_count: int = Field(default=settings.DEFAULT_QUESTION_COUNT, ge=1)
    difficulty: Optional[Difficulty] = None
    question_types: Optional[List[QuestionType]] = None
    session_name: Optional[str] = Field(default=None, max_length=255)


class QuizQuestion(CamelModel):
    id: str
    question: str
    type: QuestionType
    options: List[str]
    topic: str
    difficulty: Difficulty


class QuizStarted(CamelModel):
    session_id: str
    questions: List[QuizQuestion]


class AnswerSubmit(CamelModel):
    session_id: str
    question_id: str
    answer: str


class AnswerResult(CamelModel):
    success: bool = True
    is_correct: bool
    correct_answer: str


class QuizComplete(CamelModel):
    session_id: str


class ReviewedResponse(CamelModel):
    question: str
    user_answer: Optional[str]
    correct_answer: str
    is_correct: Optional[bool]
    explanation: str
    topic: str
    difficulty: Difficulty


class QuizCompleted(CamelModel):
    score: int
    total_questions: int
    correct_answers: int
    responses: List[ReviewedResponse]


class SessionSummary(CamelModel):
    id: str
    document_id: Optional[str]
    session_name: Optional[str]
    status: SessionStatus
    total_questions: int
    score: Optional[int]
    started_at: datetime
    completed_at: Optional[datetime]


@router.post("/start", response_model=QuizStarted)
def start_quiz(payload: QuizStart, owner_id: str = Depends(get_current_owner), db: Session = Depends(get_db)):
    started = sessions.start_session(
        db, owner_id,
        question_count=payload.question_count,
        document_id=payload.document_id,
        difficulty=payload.difficulty,
        question_types=payload.question_types or [],
        session_name=payload.session_name,
    )
    return QuizStarted.model_validate(started)


@router.post("/submit", response_model=AnswerResult)
def submit(payload: AnswerSubmit, owner_id: str = Depends(get_current_owner), db: Session = Depends(get_db)):
    result = submit_answer(db, owner_id, payload.session_id, payload.question_id, payload.answer)
    return AnswerResult(is_correct=result.is_correct, correct_answer=result.correct_answer)


@router.post("/complete", response_model=QuizCompleted)
def complete(payload: QuizComplete, owner_id: str = Depends(get_current_owner), db: Session = Depends(get_db)):
    return QuizCompleted.model_validate(scoring.complete_session(db, owner_id, payload.session_id))


@router.get("/sessions", response_model=List[SessionSummary])
def session_history(owner_id: str = Depends(get_current_owner), db: Session = Depends(get_db)):
    return [SessionSummary.model_validate(s) for s in sessions.list_sessions(db, owner_id)]
