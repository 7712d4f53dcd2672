import enum
import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    Boolean, DateTime, Enum as SQLEnum, ForeignKey, Index, Integer, JSON, String, Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from studyquiz.core.clock import utcnow


class Base(DeclarativeBase): pass


def _new_id() -> str:
    return str(uuid.uuid4())


def _enum(enum_cls: type[enum.Enum]) -> SQLEnum:
    # persist the wire values ("multiple-choice"), not member names
    return SQLEnum(enum_cls, values_callable=lambda e: [m.value for m in e], native_enum=False, length=32)


class QuestionType(str, enum.Enum):
    MULTIPLE_CHOICE = "multiple-choice"
    TRUE_FALSE = "true-false"
    SHORT_ANSWER = "short-answer"
    ESSAY = "essay"


class Difficulty(str, enum.Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class SessionStatus(str, enum.Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


# ========== Question Store ==========

class Document(Base):
    __tablename__ = "documents"
    __table_args__ = (Index("idx_documents_user", "user_id"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    file_name: Mapped[Optional[str]] = mapped_column(String(500))
    file_type: Mapped[Optional[str]] = mapped_column(String(100))
    file_size: Mapped[Optional[int]] = mapped_column(Integer)
    processed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    upload_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    questions: Mapped[List["Question"]] = relationship(back_populates="document")


class Question(Base):
    """Generated question. Immutable once stored."""

    __tablename__ = "questions"
    __table_args__ = (
        Index("idx_questions_user", "user_id"),
        Index("idx_questions_created", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    document_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("documents.id", ondelete="SET NULL")
    )
    question: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[QuestionType] = mapped_column(_enum(QuestionType), nullable=False)
    options: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    correct_answer: Mapped[str] = mapped_column(Text, nullable=False)
    explanation: Mapped[str] = mapped_column(Text, default="", nullable=False)
    difficulty: Mapped[Difficulty] = mapped_column(_enum(Difficulty), nullable=False)
    topic: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    document: Mapped[Optional["Document"]] = relationship(back_populates="questions")


# ========== Delivery Models ==========

class QuizSession(Base):
    __tablename__ = "quiz_sessions"
    __table_args__ = (
        Index("idx_qs_user", "user_id"),
        Index("idx_qs_started", "started_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    document_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("documents.id", ondelete="SET NULL")
    )
    session_name: Mapped[Optional[str]] = mapped_column(String(255))
    total_questions: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[SessionStatus] = mapped_column(
        _enum(SessionStatus), nullable=False, default=SessionStatus.IN_PROGRESS
    )
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    score: Mapped[Optional[int]] = mapped_column(Integer)

    responses: Mapped[List["QuizResponse"]] = relationship(
        back_populates="session", cascade="all, delete-orphan", order_by="QuizResponse.position"
    )


class QuizResponse(Base):
    """One slot per question assigned to a session, created with the session."""

    __tablename__ = "quiz_responses"
    __table_args__ = (
        Index("idx_qr_session", "session_id"),
        Index("idx_qr_user", "user_id"),
        UniqueConstraint("session_id", "question_id", name="uq_quiz_response"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    session_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("quiz_sessions.id", ondelete="CASCADE"), nullable=False
    )
    question_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("questions.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    user_answer: Mapped[Optional[str]] = mapped_column(Text)
    is_correct: Mapped[Optional[bool]] = mapped_column(Boolean)
    answered_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    session: Mapped["QuizSession"] = relationship(back_populates="responses")
    question: Mapped["Question"] = relationship()


class Feedback(Base):
    __tablename__ = "feedback"
    __table_args__ = (Index("idx_feedback_user", "user_id"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    question_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("questions.id", ondelete="CASCADE"), nullable=False
    )
    feedback_type: Mapped[str] = mapped_column(String(50), nullable=False)
    rating: Mapped[Optional[int]] = mapped_column(Integer)
    comment: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    question: Mapped["Question"] = relationship()
