from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.adapters.clock import SystemClock
from src.adapters.sqlite.repos import SQLiteUnitOfWork
from src.api.deps import get_clock, get_store, require_permission
from src.api.responses import ok, raise_for_result
from src.api.schemas import QuestionCreateRequest, QuestionUpdateRequest
from src.components.questions import (
    CreateQuestionInput,
    ListQuestionsInput,
    UpdateQuestionInput,
    run_create,
    run_delete,
    run_get,
    run_list,
    run_toggle_active,
    run_update,
)
from src.domain.entities import User

router = APIRouter()


@router.get("")
def list_questions(
    active: bool | None = Query(None),
    question_type: str | None = Query(None, alias="type"),
    _: User = Depends(require_permission("questions:view")),
    store: SQLiteUnitOfWork = Depends(get_store),
) -> dict[str, Any]:
    result = run_list(ListQuestionsInput(active=active, question_type=question_type), store)
    raise_for_result(result)
    return ok(result.questions)


@router.get("/{question_id}")
def get_question(
    question_id: UUID,
    _: User = Depends(require_permission("questions:view")),
    store: SQLiteUnitOfWork = Depends(get_store),
) -> dict[str, Any]:
    result = run_get(question_id, store)
    raise_for_result(result)
    return ok(result.question)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_question(
    req: QuestionCreateRequest,
    user: User = Depends(require_permission("questions:manage")),
    store: SQLiteUnitOfWork = Depends(get_store),
    clock: SystemClock = Depends(get_clock),
) -> dict[str, Any]:
    result = run_create(CreateQuestionInput(actor=user, **req.model_dump()), store, clock)
    raise_for_result(result)
    return ok(result.question, message="Question created")


@router.put("/{question_id}")
def update_question(
    question_id: UUID,
    req: QuestionUpdateRequest,
    user: User = Depends(require_permission("questions:manage")),
    store: SQLiteUnitOfWork = Depends(get_store),
    clock: SystemClock = Depends(get_clock),
) -> dict[str, Any]:
    result = run_update(
        UpdateQuestionInput(question_id=question_id, actor=user, **req.model_dump()),
        store,
        clock,
    )
    raise_for_result(result)
    return ok(result.question, message="Question updated")


@router.post("/{question_id}/toggle")
def toggle_question(
    question_id: UUID,
    user: User = Depends(require_permission("questions:manage")),
    store: SQLiteUnitOfWork = Depends(get_store),
    clock: SystemClock = Depends(get_clock),
) -> dict[str, Any]:
    result = run_toggle_active(question_id, store, clock, actor=user)
    raise_for_result(result)
    if result.question is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Question not found")
    state = "activated" if result.question.is_active else "deactivated"
    return ok(result.question, message=f"Question {state}")


@router.delete("/{question_id}")
def delete_question(
    question_id: UUID,
    user: User = Depends(require_permission("questions:manage")),
    store: SQLiteUnitOfWork = Depends(get_store),
    clock: SystemClock = Depends(get_clock),
) -> dict[str, Any]:
    result = run_delete(question_id, store, clock, actor=user)
    raise_for_result(result)
    return ok(message="Question deleted")
