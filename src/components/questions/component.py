"""
Questions component - question bank management and per-checkpoint selection.
"""

from __future__ import annotations

import logging
from uuid import UUID

from src.components.audit import AuditAction, AuditService
from src.domain.entities import QUESTION_TYPES, Question, User
from src.domain.game import room_type_for_question
from src.ports.clock import ClockPort
from src.ports.randomness import RandomPort
from src.ports.repo import GameStorePort
from src.rules.models import GameRules

from ._impl import eligible_pool, pick_question
from .models import (
    CreateQuestionInput,
    ListQuestionsInput,
    QuestionListOutput,
    QuestionOutput,
    QuestionPickOutput,
    SelectQuestionInput,
    UpdateQuestionInput,
)

logger = logging.getLogger(__name__)


def _normalise_type(value: str | None) -> str:
    # Unknown types fall back to CODING.
    value = (value or "").strip().upper()
    return value if value in QUESTION_TYPES else "CODING"


def run_select_for_team(
    inp: SelectQuestionInput,
    store: GameStorePort,
    rng: RandomPort,
    rules: GameRules,
) -> QuestionPickOutput:
    """Pick a question the team has never been given and the room type it needs."""
    used = store.assignments.question_ids_for_team(inp.team_id)
    pool = eligible_pool(store.questions.list_all(active=True), used)
    question = pick_question(pool, inp.is_snake, rng, rules.coding_question_probability)
    if question is None:
        kind = "snake" if inp.is_snake else "regular"
        logger.warning("no %s questions left for team %s", kind, inp.team_id)
        return QuestionPickOutput(
            success=False, error=f"No available {kind} questions", error_code="conflict"
        )
    return QuestionPickOutput(
        question=question, room_type=room_type_for_question(question.type), success=True
    )


def run_create(inp: CreateQuestionInput, store: GameStorePort, time: ClockPort) -> QuestionOutput:
    text = inp.text.strip()
    if not text:
        return QuestionOutput(
            success=False, error="Question text is required", error_code="invalid"
        )

    question = Question(
        text=text,
        hint=inp.hint,
        type=_normalise_type(inp.type),  # type: ignore[arg-type]
        options=list(inp.options),
        correct_answer=inp.correct_answer,
        is_snake_question=inp.is_snake_question,
        is_active=inp.is_active,
        created_at=time.now_utc(),
    )
    store.questions.save(question)
    AuditService(store.audit, time).log(
        AuditAction.QUESTION_CREATED, actor=inp.actor, target=str(question.id)
    )
    return QuestionOutput(question=question, success=True)


def run_update(inp: UpdateQuestionInput, store: GameStorePort, time: ClockPort) -> QuestionOutput:
    question = store.questions.get_by_id(inp.question_id)
    if not question:
        return QuestionOutput(success=False, error="Question not found", error_code="not_found")

    updates: dict[str, object] = {}
    if inp.text is not None:
        if not inp.text.strip():
            return QuestionOutput(
                success=False, error="Question text is required", error_code="invalid"
            )
        updates["text"] = inp.text.strip()
    if inp.type is not None:
        updates["type"] = _normalise_type(inp.type)
    if inp.hint is not None:
        updates["hint"] = inp.hint
    if inp.options is not None:
        updates["options"] = list(inp.options)
    if inp.correct_answer is not None:
        updates["correct_answer"] = inp.correct_answer
    if inp.is_snake_question is not None:
        updates["is_snake_question"] = inp.is_snake_question
    if inp.is_active is not None:
        updates["is_active"] = inp.is_active

    updated = question.model_copy(update=updates)
    store.questions.save(updated)
    AuditService(store.audit, time).log(
        AuditAction.QUESTION_UPDATED,
        actor=inp.actor,
        target=str(question.id),
        details={"fields": sorted(updates)},
    )
    return QuestionOutput(question=updated, success=True)


def run_toggle_active(
    question_id: UUID, store: GameStorePort, time: ClockPort, actor: User | None = None
) -> QuestionOutput:
    question = store.questions.get_by_id(question_id)
    if not question:
        return QuestionOutput(success=False, error="Question not found", error_code="not_found")
    return run_update(
        UpdateQuestionInput(question_id=question_id, is_active=not question.is_active, actor=actor),
        store,
        time,
    )


def run_delete(
    question_id: UUID, store: GameStorePort, time: ClockPort, actor: User | None = None
) -> QuestionOutput:
    question = store.questions.get_by_id(question_id)
    if not question:
        return QuestionOutput(success=False, error="Question not found", error_code="not_found")

    if question.id in store.assignments.pending_question_ids():
        return QuestionOutput(
            success=False,
            error="Question is assigned to a pending checkpoint",
            error_code="conflict",
        )

    # Answered assignments go with it (ON DELETE CASCADE).
    store.questions.delete(question.id)
    AuditService(store.audit, time).log(
        AuditAction.QUESTION_DELETED, actor=actor, target=str(question.id)
    )
    return QuestionOutput(question=question, success=True)


def run_get(question_id: UUID, store: GameStorePort) -> QuestionOutput:
    question = store.questions.get_by_id(question_id)
    if not question:
        return QuestionOutput(success=False, error="Question not found", error_code="not_found")
    return QuestionOutput(question=question, success=True)


def _type_filter(value: str | None) -> tuple[str | None, bool]:
    if not value:
        return None, True
    value = value.strip().upper()
    return value, value in QUESTION_TYPES


def run_list(inp: ListQuestionsInput, store: GameStorePort) -> QuestionListOutput:
    question_type, ok = _type_filter(inp.question_type)
    if not ok:
        return QuestionListOutput(
            success=False, error="Invalid question type", error_code="invalid"
        )
    return QuestionListOutput(
        questions=store.questions.list_all(active=inp.active, question_type=question_type),
        success=True,
    )


def run_available(inp: ListQuestionsInput, store: GameStorePort) -> QuestionListOutput:
    """Active questions not currently sitting in a pending assignment."""
    question_type, ok = _type_filter(inp.question_type)
    if not ok:
        return QuestionListOutput(
            success=False, error="Invalid question type", error_code="invalid"
        )
    busy = store.assignments.pending_question_ids()
    questions = [
        q
        for q in store.questions.list_all(active=True, question_type=question_type)
        if q.id not in busy
    ]
    return QuestionListOutput(questions=questions, success=True)
