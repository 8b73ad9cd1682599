"""
Questions component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from src.domain.entities import Question, RoomType, User


@dataclass(frozen=True)
class CreateQuestionInput:
    text: str
    type: str = "CODING"
    hint: str | None = None
    options: list[str] = field(default_factory=list)
    correct_answer: str | None = None
    is_snake_question: bool = False
    is_active: bool = True
    actor: User | None = None


@dataclass(frozen=True)
class UpdateQuestionInput:
    question_id: UUID
    text: str | None = None
    type: str | None = None
    hint: str | None = None
    options: list[str] | None = None
    correct_answer: str | None = None
    is_snake_question: bool | None = None
    is_active: bool | None = None
    actor: User | None = None


@dataclass(frozen=True)
class ListQuestionsInput:
    active: bool | None = None
    question_type: str | None = None


@dataclass(frozen=True)
class SelectQuestionInput:
    team_id: UUID
    is_snake: bool


@dataclass
class QuestionOutput:
    question: Question | None = None
    success: bool = False
    error: str | None = None
    error_code: str | None = None


@dataclass
class QuestionListOutput:
    questions: list[Question] = field(default_factory=list)
    success: bool = False
    error: str | None = None
    error_code: str | None = None


@dataclass
class QuestionPickOutput:
    question: Question | None = None
    room_type: RoomType | None = None
    success: bool = False
    error: str | None = None
    error_code: str | None = None
