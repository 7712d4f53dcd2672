from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy.orm import Session

from studyquiz.api.common import CamelModel
from studyquiz.core.auth import get_current_owner
from studyquiz.core.database import get_db
from studyquiz.models.orm import Difficulty, QuestionType
from studyquiz.services import question_store
from studyquiz.services.question_store import QuestionDraft

router = APIRouter()


class QuestionIn(CamelModel):
    question: str = Field(min_length=1)
    type: QuestionType
    options: List[str] = Field(default_factory=list)
    correct_answer: str = Field(min_length=1)
    explanation: str = ""
    difficulty: Difficulty
    topic: str = Field(min_length=1, max_length=255)


class QuestionBatch(CamelModel):
    document_id: Optional[str] = None
    questions: List[QuestionIn] = Field(min_length=1)


class QuestionOut(CamelModel):
    id: str
    document_id: Optional[str]
    question: str
    type: QuestionType
    options: List[str]
    correct_answer: str
    explanation: str
    difficulty: Difficulty
    topic: str
    created_at: datetime


class QuestionsStored(CamelModel):
    success: bool = True
    count: int
    questions: List[QuestionOut]


class QuestionList(CamelModel):
    questions: List[QuestionOut]


@router.post("", response_model=QuestionsStored, status_code=201)
def store_questions(payload: QuestionBatch, owner_id: str = Depends(get_current_owner), db: Session = Depends(get_db)):
    drafts = [
        QuestionDraft(
            question=q.question, type=q.type, correct_answer=q.correct_answer,
            difficulty=q.difficulty, topic=q.topic, explanation=q.explanation, options=q.options,
        )
        for q in payload.questions
    ]
    stored = question_store.ingest_questions(db, owner_id, drafts, document_id=payload.document_id)
    return QuestionsStored(count=len(stored), questions=[QuestionOut.model_validate(q) for q in stored])


@router.get("", response_model=QuestionList)
def list_questions(
    document_id: Optional[str] = Query(default=None, alias="documentId"),
    difficulty: Optional[Difficulty] = None,
    question_type: Optional[QuestionType] = Query(default=None, alias="type"),
    owner_id: str = Depends(get_current_owner),
    db: Session = Depends(get_db),
):
    questions = question_store.list_questions(db, owner_id, document_id, difficulty, question_type)
    return QuestionList(questions=[QuestionOut.model_validate(q) for q in questions])
