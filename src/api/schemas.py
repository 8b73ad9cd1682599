from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.components.board import BoardOutput
from src.components.checkpoints import CheckpointView
from src.components.teams import TeamSummary
from src.domain.entities import (
    Checkpoint,
    Question,
    QuestionAssignment,
    QuestionType,
    RoleType,
    RoomType,
    Team,
    User,
)

# --- Requests ---


class LoginRequest(BaseModel):
    username: str
    password: str


class SubmitAnswerRequest(BaseModel):
    assignment_id: UUID
    answer: str


class HintRequest(BaseModel):
    assignment_id: UUID


class MarkAnswerRequest(BaseModel):
    is_correct: bool


class TeamCreateRequest(BaseModel):
    team_name: str
    members: list[str] = []
    password: str | None = None
    map_id: UUID | None = None


class PasswordRequest(BaseModel):
    password: str


class RoomChangeRequest(BaseModel):
    room_number: str


class TeamUpdateRequest(BaseModel):
    team_name: str | None = None
    current_position: int | None = None
    points: int | None = None
    total_time_sec: int | None = None


class MapAssignRequest(BaseModel):
    map_id: UUID


class TimerAdjustRequest(BaseModel):
    seconds: int
    reason: str = "Manual adjustment"


class TimerSetRequest(BaseModel):
    total_seconds: int | None = None
    time: str | None = Field(None, description="HH:MM:SS, used when total_seconds is omitted")
    reason: str = "Timer set by admin"


class StaffCreateRequest(BaseModel):
    username: str
    password: str


class RoomCreateRequest(BaseModel):
    room_number: str
    capacity: int = 1
    room_type: RoomType = "NON_TECH"
    floor: int | None = None


class RoomUpdateRequest(BaseModel):
    capacity: int | None = None
    room_type: RoomType | None = None
    floor: int | None = None


class MapCreateRequest(BaseModel):
    name: str
    snake_positions: list[int] = []


class SnakeCreateRequest(BaseModel):
    start_pos: int


class QuestionCreateRequest(BaseModel):
    text: str
    type: str = "CODING"
    hint: str | None = None
    options: list[str] = []
    correct_answer: str | None = None
    is_snake_question: bool = False
    is_active: bool = True


class QuestionUpdateRequest(BaseModel):
    text: str | None = None
    type: str | None = None
    hint: str | None = None
    options: list[str] | None = None
    correct_answer: str | None = None
    is_snake_question: bool | None = None
    is_active: bool | None = None


# --- Responses ---


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    role: RoleType
    team_id: UUID | None = None
    created_at: datetime


class TeamResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    team_code: str
    team_name: str
    current_position: int
    current_room: str | None
    points: int
    total_time_sec: int
    status: str
    can_roll_dice: bool
    timer_paused: bool
    timer_started_at: datetime | None
    map_id: UUID | None
    members: list[str]
    updated_at: datetime

    @classmethod
    def from_team(cls, team: Team, total_time_sec: int | None = None) -> "TeamResponse":
        data = team.model_dump(exclude={"members"})
        data["members"] = [m.name for m in team.members]
        if total_time_sec is not None:
            data["total_time_sec"] = total_time_sec
        return cls.model_validate(data)


class ParticipantQuestion(BaseModel):
    """A question as a team sees it: never the correct answer."""

    id: UUID
    text: str
    type: QuestionType
    options: list[str]
    has_hint: bool
    is_snake_question: bool

    @classmethod
    def from_question(cls, question: Question) -> "ParticipantQuestion":
        return cls(
            id=question.id,
            text=question.text,
            type=question.type,
            options=question.options,
            has_hint=bool(question.hint),
            is_snake_question=question.is_snake_question,
        )


class AssignmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    question_id: UUID
    status: str
    participant_answer: str | None
    hint_used: bool
    submitted_at: datetime | None
    answered_at: datetime | None


def assignment_out(assignment: QuestionAssignment | None) -> dict[str, Any] | None:
    if assignment is None:
        return None
    return AssignmentResponse.model_validate(assignment).model_dump(mode="json")


def checkpoint_out(
    view: CheckpointView, for_participant: bool = False
) -> dict[str, Any]:
    """Checkpoint with its assignment and question.

    Participants get the question only once it is visible to them and never
    the answer; staff get everything.
    """
    question: Any = None
    if view.question is not None:
        if for_participant:
            question = ParticipantQuestion.from_question(view.question).model_dump(mode="json")
        else:
            question = view.question.model_dump(mode="json")
    return {
        **view.checkpoint.model_dump(mode="json"),
        "assignment": assignment_out(view.assignment),
        "question": question,
        "team": TeamResponse.from_team(view.team).model_dump(mode="json") if view.team else None,
    }


def checkpoint_plain(checkpoint: Checkpoint | None) -> dict[str, Any] | None:
    return checkpoint.model_dump(mode="json") if checkpoint else None


def user_out(user: User | None) -> dict[str, Any] | None:
    return UserResponse.model_validate(user).model_dump(mode="json") if user else None


def board_out(board: BoardOutput | None) -> dict[str, Any] | None:
    if board is None or not board.success:
        return None
    return {
        "board_size": board.board_size,
        "map_id": board.map_id,
        "map_name": board.map_name,
        "snake_positions": board.snake_positions,
    }


def team_summary_out(summary: TeamSummary) -> dict[str, Any]:
    return {
        **TeamResponse.from_team(summary.team, summary.live_time_sec).model_dump(mode="json"),
        "username": summary.username,
        "checkpoint_count": summary.checkpoint_count,
        "approved_count": summary.approved_count,
    }
