"""
Questions component - question bank and checkpoint question selection.
"""

from ._impl import eligible_pool, pick_question
from .component import (
    run_available,
    run_create,
    run_delete,
    run_get,
    run_list,
    run_select_for_team,
    run_toggle_active,
    run_update,
)
from .models import (
    CreateQuestionInput,
    ListQuestionsInput,
    QuestionListOutput,
    QuestionOutput,
    QuestionPickOutput,
    SelectQuestionInput,
    UpdateQuestionInput,
)

__all__ = [
    # Entry points
    "run_select_for_team",
    "run_create",
    "run_update",
    "run_toggle_active",
    "run_delete",
    "run_get",
    "run_list",
    "run_available",
    # Selection rules
    "eligible_pool",
    "pick_question",
    # Models
    "CreateQuestionInput",
    "UpdateQuestionInput",
    "ListQuestionsInput",
    "SelectQuestionInput",
    "QuestionOutput",
    "QuestionListOutput",
    "QuestionPickOutput",
]
