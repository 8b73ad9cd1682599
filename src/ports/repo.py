from datetime import datetime
from typing import Protocol
from uuid import UUID

from src.domain.entities import (
    AuditEvent,
    BoardMap,
    BoardRule,
    Checkpoint,
    DiceRoll,
    Question,
    QuestionAssignment,
    Room,
    Team,
    TimeLog,
    User,
)


class UserRepoPort(Protocol):
    def get_by_id(self, user_id: UUID) -> User | None: ...
    def get_by_username(self, username: str) -> User | None: ...
    def get_by_team(self, team_id: UUID) -> User | None: ...
    def list_by_role(self, role: str) -> list[User]: ...
    def save(self, user: User) -> User: ...
    def delete(self, user_id: UUID) -> None: ...


class TokenRepoPort(Protocol):
    """Latest issued token hash per user (one active session)."""

    def set(self, user_id: UUID, token_hash: str, expires_at: datetime) -> None: ...
    def get(self, user_id: UUID) -> str | None: ...
    def clear(self, user_id: UUID) -> None: ...


class TeamRepoPort(Protocol):
    def get_by_id(self, team_id: UUID) -> Team | None: ...
    def get_by_code(self, team_code: str) -> Team | None: ...
    def list_all(self) -> list[Team]: ...
    def save(self, team: Team) -> Team: ...
    def lock_dice(self, team_id: UUID) -> bool:
        """Atomically flip can_roll_dice from true to false. False if already locked."""
        ...
    def room_occupancy(self, exclude_team_id: UUID | None = None) -> dict[str, int]:
        """Count ACTIVE teams per room number."""
        ...


class RoomRepoPort(Protocol):
    def get_by_id(self, room_id: UUID) -> Room | None: ...
    def get_by_number(self, room_number: str) -> Room | None: ...
    def list_all(self) -> list[Room]: ...
    def save(self, room: Room) -> Room: ...
    def delete(self, room_id: UUID) -> None: ...


class MapRepoPort(Protocol):
    def get_by_id(self, map_id: UUID) -> BoardMap | None: ...
    def get_by_name(self, name: str) -> BoardMap | None: ...
    def list_all(self, active_only: bool = False) -> list[BoardMap]: ...
    def save(self, board_map: BoardMap) -> BoardMap: ...
    def delete(self, map_id: UUID) -> None: ...
    def list_rules(self, map_id: UUID) -> list[BoardRule]: ...
    def get_rule(self, rule_id: UUID) -> BoardRule | None: ...
    def save_rule(self, rule: BoardRule) -> BoardRule: ...
    def delete_rule(self, rule_id: UUID) -> None: ...
    def snake_positions(self, map_id: UUID) -> set[int]: ...
    def count_teams(self, map_id: UUID) -> int: ...


class QuestionRepoPort(Protocol):
    def get_by_id(self, question_id: UUID) -> Question | None: ...
    def list_all(
        self, active: bool | None = None, question_type: str | None = None
    ) -> list[Question]: ...
    def save(self, question: Question) -> Question: ...
    def delete(self, question_id: UUID) -> None: ...


class CheckpointRepoPort(Protocol):
    def get_by_id(self, checkpoint_id: UUID) -> Checkpoint | None: ...
    def list_for_team(self, team_id: UUID) -> list[Checkpoint]:
        """Checkpoints in ascending checkpoint_number order."""
        ...
    def latest_for_team(self, team_id: UUID) -> Checkpoint | None: ...
    def latest_for_team_with_status(self, team_id: UUID, status: str) -> Checkpoint | None: ...
    def latest_with_pending_assignment(self, team_id: UUID) -> Checkpoint | None:
        """Newest checkpoint whose question has not been marked yet."""
        ...
    def previous(self, team_id: UUID, checkpoint_number: int) -> Checkpoint | None: ...
    def count_for_team(self, team_id: UUID, status: str | None = None) -> int: ...
    def list_by_status(self, status: str) -> list[Checkpoint]: ...
    def save(self, checkpoint: Checkpoint) -> Checkpoint: ...
    def delete(self, checkpoint_id: UUID) -> None: ...


class AssignmentRepoPort(Protocol):
    def get_by_id(self, assignment_id: UUID) -> QuestionAssignment | None: ...
    def get_by_checkpoint(self, checkpoint_id: UUID) -> QuestionAssignment | None: ...
    def question_ids_for_team(self, team_id: UUID) -> set[UUID]: ...
    def pending_question_ids(self) -> set[UUID]: ...
    def save(self, assignment: QuestionAssignment) -> QuestionAssignment: ...
    def delete(self, assignment_id: UUID) -> None: ...


class DiceRollRepoPort(Protocol):
    def save(self, roll: DiceRoll) -> DiceRoll: ...
    def list_for_team(self, team_id: UUID, limit: int | None = None) -> list[DiceRoll]: ...


class TimeLogRepoPort(Protocol):
    def save(self, log: TimeLog) -> TimeLog: ...
    def list_for_team(self, team_id: UUID) -> list[TimeLog]: ...


class AuditRepoPort(Protocol):
    def save(self, event: AuditEvent) -> AuditEvent: ...
    def query(
        self,
        action: str | None = None,
        actor: str | None = None,
        target: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[AuditEvent]: ...
    def count(
        self, action: str | None = None, actor: str | None = None, target: str | None = None
    ) -> int: ...


class GameStorePort(Protocol):
    """All repositories bound to one transaction."""

    users: UserRepoPort
    tokens: TokenRepoPort
    teams: TeamRepoPort
    rooms: RoomRepoPort
    maps: MapRepoPort
    questions: QuestionRepoPort
    checkpoints: CheckpointRepoPort
    assignments: AssignmentRepoPort
    dice_rolls: DiceRollRepoPort
    time_logs: TimeLogRepoPort
    audit: AuditRepoPort
