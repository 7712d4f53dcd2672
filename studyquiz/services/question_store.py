"""
Read access to documents and questions, plus intake of questions produced by
the external generation pipeline.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from studyquiz.core.clock import resolve_now
from studyquiz.core.database import storage_operation
from studyquiz.core.errors import NotFoundError, ValidationError
from studyquiz.models.orm import Difficulty, Document, Question, QuestionType

logger = logging.getLogger(__name__)

MIN_CHOICE_OPTIONS = 2


@dataclass
class QuestionDraft:
    question: str
    type: QuestionType
    correct_answer: str
    difficulty: Difficulty
    topic: str
    explanation: str = ""
    options: List[str] = field(default_factory=list)


def get_owned_document(db: Session, owner_id: str, document_id: str) -> Document:
    doc = db.scalar(select(Document).where(Document.id == document_id, Document.user_id == owner_id))
    if doc is None:
        raise NotFoundError("Document not found")
    return doc


def get_owned_question(db: Session, owner_id: str, question_id: str) -> Question:
    q = db.scalar(select(Question).where(Question.id == question_id, Question.user_id == owner_id))
    if q is None:
        raise NotFoundError("Question not found")
    return q


def list_documents(db: Session, owner_id: str) -> List[Document]:
    with storage_operation(db, "Failed to fetch documents"):
        stmt = select(Document).where(Document.user_id == owner_id).order_by(Document.upload_date.desc())
        return list(db.scalars(stmt).all())


def register_document(
    db: Session,
    owner_id: str,
    title: str,
    file_name: Optional[str] = None,
    file_type: Optional[str] = None,
    file_size: Optional[int] = None,
    processed: bool = False,
    now: Optional[datetime] = None,
) -> Document:
    if not title.strip():
        raise ValidationError("Document title is required")
    with storage_operation(db, "Failed to save document"):
        doc = Document(user_id=owner_id, title=title.strip(), file_name=file_name, file_type=file_type,
                       file_size=file_size, processed=processed, upload_date=resolve_now(now))
        db.add(doc)
        db.commit()
    logger.info("Registered document %s for %s", doc.id, owner_id)
    return doc


def list_questions(
    db: Session,
    owner_id: str,
    document_id: Optional[str] = None,
    difficulty: Optional[Difficulty] = None,
    question_type: Optional[QuestionType] = None,
) -> List[Question]:
    with storage_operation(db, "Failed to fetch questions"):
        stmt = select(Question).where(Question.user_id == owner_id)
        if document_id:
            stmt = stmt.where(Question.document_id == document_id)
        if difficulty:
            stmt = stmt.where(Question.difficulty == difficulty)
        if question_type:
            stmt = stmt.where(Question.type == question_type)
        stmt = stmt.order_by(Question.created_at.desc(), Question.id.desc())
        return list(db.scalars(stmt).all())


def _check_draft(index: int, draft: QuestionDraft) -> None:
    if not draft.question.strip():
        raise ValidationError(f"Question {index + 1} has no text")
    if not draft.correct_answer.strip():
        raise ValidationError(f"Question {index + 1} has no correct answer")
    if not draft.topic.strip():
        raise ValidationError(f"Question {index + 1} has no topic")
    if draft.type == QuestionType.MULTIPLE_CHOICE and len(draft.options) < MIN_CHOICE_OPTIONS:
        raise ValidationError(f"Question {index + 1} needs at least {MIN_CHOICE_OPTIONS} options")


def ingest_questions(
    db: Session,
    owner_id: str,
    drafts: Sequence[QuestionDraft],
    document_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> List[Question]:
    """Store a generated batch all-or-nothing."""
    if not drafts:
        raise ValidationError("At least one question is required")
    for i, draft in enumerate(drafts):
        _check_draft(i, draft)

    created_at = resolve_now(now)
    with storage_operation(db, "Failed to save questions"):
        if document_id:
            get_owned_document(db, owner_id, document_id)
        questions = []
        for draft in drafts:
            options = list(draft.options)
            if draft.type == QuestionType.TRUE_FALSE and not options:
                options = ["True", "False"]
            questions.append(Question(
                user_id=owner_id,
                document_id=document_id,
                question=draft.question.strip(),
                type=draft.type,
                options=options if draft.type in (QuestionType.MULTIPLE_CHOICE, QuestionType.TRUE_FALSE) else [],
                correct_answer=draft.correct_answer,
                explanation=draft.explanation,
                difficulty=draft.difficulty,
                topic=draft.topic.strip(),
                created_at=created_at,
            ))
        db.add_all(questions)
        db.commit()

    logger.info("Stored %d questions for %s", len(questions), owner_id)
    return questions
