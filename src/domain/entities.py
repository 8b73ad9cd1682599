from datetime import UTC, datetime
from typing import Any, Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

# --- Enums / Literals ---
RoleType = Literal["participant", "admin", "superadmin"]
TeamStatus = Literal["ACTIVE", "COMPLETED", "DISQUALIFIED"]
RoomType = Literal["TECH", "NON_TECH"]
QuestionType = Literal["CODING", "NUMERICAL", "MCQ", "PHYSICAL"]
CheckpointStatus = Literal["PENDING", "APPROVED"]
AssignmentStatus = Literal["PENDING", "CORRECT", "INCORRECT"]
RuleType = Literal["SNAKE"]

QUESTION_TYPES: tuple[QuestionType, ...] = ("CODING", "NUMERICAL", "MCQ", "PHYSICAL")


def utc_now() -> datetime:
    return datetime.now(UTC)


# --- Users & Auth ---

class User(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    username: str
    password_hash: str
    role: RoleType = "participant"
    team_id: UUID | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


# --- Teams ---

class TeamMember(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    team_id: UUID
    name: str


class Team(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    team_code: str
    team_name: str
    current_position: int = 1
    current_room: str | None = None
    points: int = 0
    total_time_sec: int = 0
    status: TeamStatus = "ACTIVE"
    can_roll_dice: bool = True
    timer_paused: bool = True
    timer_started_at: datetime | None = None
    timer_paused_at: datetime | None = None
    map_id: UUID | None = None
    members: list[TeamMember] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def timer_running(self) -> bool:
        return not self.timer_paused and self.timer_started_at is not None


# --- Board ---

class Room(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    room_number: str
    capacity: int = 1
    floor: int
    room_type: RoomType = "NON_TECH"


class BoardMap(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    name: str
    is_active: bool = True
    created_at: datetime = Field(default_factory=utc_now)


class BoardRule(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    map_id: UUID
    type: RuleType = "SNAKE"
    start_pos: int


# --- Questions ---

class Question(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    text: str
    hint: str | None = None
    type: QuestionType = "CODING"
    options: list[str] = Field(default_factory=list)
    correct_answer: str | None = None
    is_snake_question: bool = False
    is_active: bool = True
    created_at: datetime = Field(default_factory=utc_now)


# --- Game progress ---

class Checkpoint(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    team_id: UUID
    checkpoint_number: int
    position_before: int
    position_after: int
    room_number: str
    room_before: str | None = None
    status: CheckpointStatus = "PENDING"
    is_snake_position: bool = False
    created_at: datetime = Field(default_factory=utc_now)


class QuestionAssignment(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    checkpoint_id: UUID
    question_id: UUID
    status: AssignmentStatus = "PENDING"
    participant_answer: str | None = None
    hint_used: bool = False
    submitted_at: datetime | None = None
    answered_at: datetime | None = None
    created_at: datetime = Field(default_factory=utc_now)


class DiceRoll(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    team_id: UUID
    value: int
    position_from: int
    position_to: int
    room_assigned: str | None = None
    created_at: datetime = Field(default_factory=utc_now)


class TimeLog(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    team_id: UUID
    seconds: int
    reason: str
    created_at: datetime = Field(default_factory=utc_now)


# --- Audit ---

class AuditEvent(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    actor: str | None = None
    actor_role: str | None = None
    action: str
    target: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utc_now)
