"""
SQLite repositories for the event database.

Each repository either opens its own connection per call (standalone use from
scripts) or shares a connection handed in by SQLiteUnitOfWork, in which case
it never commits on its own.
"""

from __future__ import annotations

import json
import sqlite3
from collections.abc import Callable
from datetime import datetime
from types import TracebackType
from typing import Any
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
    TeamMember,
    TimeLog,
    User,
)

# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def parse_dt(s: str | None) -> datetime | None:
    return datetime.fromisoformat(s) if s else None


def parse_uuid(s: str | None) -> UUID | None:
    return UUID(s) if s else None


def fmt_dt(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt else None


def connect(db_path: str) -> sqlite3.Connection:
    # Sync FastAPI dependencies and routes may run on different worker threads.
    conn = sqlite3.connect(db_path, timeout=10, check_same_thread=False)
    conn.row_factory = dict_factory
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


# -----------------------------------------------------------------------------
# Base SQLite Repository
# -----------------------------------------------------------------------------


class SQLiteRepoBase:
    """Base class for SQLite repositories."""

    def __init__(self, db_path: str, connection: sqlite3.Connection | None = None):
        self.db_path = db_path
        self._external_conn = connection

    def _get_conn(self) -> sqlite3.Connection:
        """Get database connection (uses external if provided)."""
        if self._external_conn is not None:
            return self._external_conn
        return connect(self.db_path)

    def _should_close(self) -> bool:
        """Whether to close connection after use."""
        return self._external_conn is None

    def _fetch_one(self, sql: str, params: tuple[Any, ...] = ()) -> dict[str, Any] | None:
        conn = self._get_conn()
        try:
            row: dict[str, Any] | None = conn.execute(sql, params).fetchone()
            return row
        finally:
            if self._should_close():
                conn.close()

    def _fetch_all(self, sql: str, params: tuple[Any, ...] = ()) -> list[dict[str, Any]]:
        conn = self._get_conn()
        try:
            rows: list[dict[str, Any]] = conn.execute(sql, params).fetchall()
            return rows
        finally:
            if self._should_close():
                conn.close()

    def _execute(self, sql: str, params: tuple[Any, ...] = ()) -> int:
        """Run a write statement. Returns the affected row count."""
        conn = self._get_conn()
        try:
            cursor = conn.execute(sql, params)
            if self._should_close():
                conn.commit()
            return cursor.rowcount
        except Exception:
            if self._should_close():
                conn.rollback()
            raise
        finally:
            if self._should_close():
                conn.close()


# -----------------------------------------------------------------------------
# Users & tokens
# -----------------------------------------------------------------------------


class SQLiteUserRepo(SQLiteRepoBase):
    def get_by_id(self, user_id: UUID) -> User | None:
        row = self._fetch_one("SELECT * FROM users WHERE id = ?", (str(user_id),))
        return self._map_row(row) if row else None

    def get_by_username(self, username: str) -> User | None:
        row = self._fetch_one("SELECT * FROM users WHERE username = ?", (username,))
        return self._map_row(row) if row else None

    def get_by_team(self, team_id: UUID) -> User | None:
        row = self._fetch_one(
            "SELECT * FROM users WHERE team_id = ? ORDER BY created_at LIMIT 1", (str(team_id),)
        )
        return self._map_row(row) if row else None

    def list_by_role(self, role: str) -> list[User]:
        rows = self._fetch_all(
            "SELECT * FROM users WHERE role = ? ORDER BY created_at DESC", (role,)
        )
        return [self._map_row(r) for r in rows]

    def save(self, user: User) -> User:
        self._execute(
            """
            INSERT INTO users (id, username, password_hash, role, team_id, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                username=excluded.username,
                password_hash=excluded.password_hash,
                role=excluded.role,
                team_id=excluded.team_id,
                updated_at=excluded.updated_at
            """,
            (
                str(user.id),
                user.username,
                user.password_hash,
                user.role,
                str(user.team_id) if user.team_id else None,
                user.created_at.isoformat(),
                user.updated_at.isoformat(),
            ),
        )
        return user

    def delete(self, user_id: UUID) -> None:
        self._execute("DELETE FROM users WHERE id = ?", (str(user_id),))

    def _map_row(self, row: dict[str, Any]) -> User:
        return User(
            id=UUID(row["id"]),
            username=row["username"],
            password_hash=row["password_hash"],
            role=row["role"],
            team_id=parse_uuid(row["team_id"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )


class SQLiteTokenRepo(SQLiteRepoBase):
    def set(self, user_id: UUID, token_hash: str, expires_at: datetime) -> None:
        self._execute(
            """
            INSERT INTO user_tokens (user_id, token_hash, expires_at) VALUES (?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                token_hash=excluded.token_hash,
                expires_at=excluded.expires_at
            """,
            (str(user_id), token_hash, expires_at.isoformat()),
        )

    def get(self, user_id: UUID) -> str | None:
        row = self._fetch_one(
            "SELECT token_hash FROM user_tokens WHERE user_id = ?", (str(user_id),)
        )
        return row["token_hash"] if row else None

    def clear(self, user_id: UUID) -> None:
        self._execute("DELETE FROM user_tokens WHERE user_id = ?", (str(user_id),))


# -----------------------------------------------------------------------------
# Teams
# -----------------------------------------------------------------------------


class SQLiteTeamRepo(SQLiteRepoBase):
    _ORDER = "ORDER BY current_position DESC, total_time_sec ASC, created_at ASC"

    def get_by_id(self, team_id: UUID) -> Team | None:
        row = self._fetch_one("SELECT * FROM teams WHERE id = ?", (str(team_id),))
        return self._map_row(row) if row else None

    def get_by_code(self, team_code: str) -> Team | None:
        row = self._fetch_one("SELECT * FROM teams WHERE team_code = ?", (team_code,))
        return self._map_row(row) if row else None

    def list_all(self) -> list[Team]:
        rows = self._fetch_all(f"SELECT * FROM teams {self._ORDER}")
        return [self._map_row(r) for r in rows]

    def save(self, team: Team) -> Team:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO teams (
                    id, team_code, team_name, current_position, current_room,
                    points, total_time_sec, status, can_roll_dice, timer_paused,
                    timer_started_at, timer_paused_at, map_id, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    team_code=excluded.team_code,
                    team_name=excluded.team_name,
                    current_position=excluded.current_position,
                    current_room=excluded.current_room,
                    points=excluded.points,
                    total_time_sec=excluded.total_time_sec,
                    status=excluded.status,
                    can_roll_dice=excluded.can_roll_dice,
                    timer_paused=excluded.timer_paused,
                    timer_started_at=excluded.timer_started_at,
                    timer_paused_at=excluded.timer_paused_at,
                    map_id=excluded.map_id,
                    updated_at=excluded.updated_at
                """,
                (
                    str(team.id),
                    team.team_code,
                    team.team_name,
                    team.current_position,
                    team.current_room,
                    team.points,
                    team.total_time_sec,
                    team.status,
                    1 if team.can_roll_dice else 0,
                    1 if team.timer_paused else 0,
                    fmt_dt(team.timer_started_at),
                    fmt_dt(team.timer_paused_at),
                    str(team.map_id) if team.map_id else None,
                    team.created_at.isoformat(),
                    team.updated_at.isoformat(),
                ),
            )

            # Members are owned by the team row; replace them wholesale.
            conn.execute("DELETE FROM team_members WHERE team_id = ?", (str(team.id),))
            for member in team.members:
                conn.execute(
                    "INSERT INTO team_members (id, team_id, name) VALUES (?, ?, ?)",
                    (str(member.id), str(team.id), member.name),
                )

            if self._should_close():
                conn.commit()
            return team
        except Exception:
            if self._should_close():
                conn.rollback()
            raise
        finally:
            if self._should_close():
                conn.close()

    def lock_dice(self, team_id: UUID) -> bool:
        changed = self._execute(
            "UPDATE teams SET can_roll_dice = 0 WHERE id = ? AND can_roll_dice = 1",
            (str(team_id),),
        )
        return changed == 1

    def room_occupancy(self, exclude_team_id: UUID | None = None) -> dict[str, int]:
        rows = self._fetch_all(
            """
            SELECT current_room, COUNT(*) AS n FROM teams
            WHERE status = 'ACTIVE' AND current_room IS NOT NULL AND id != ?
            GROUP BY current_room
            """,
            (str(exclude_team_id) if exclude_team_id else "",),
        )
        return {r["current_room"]: r["n"] for r in rows}

    def _map_row(self, row: dict[str, Any]) -> Team:
        member_rows = self._fetch_all(
            "SELECT * FROM team_members WHERE team_id = ? ORDER BY rowid", (row["id"],)
        )
        team_id = UUID(row["id"])
        return Team(
            id=team_id,
            team_code=row["team_code"],
            team_name=row["team_name"],
            current_position=row["current_position"],
            current_room=row["current_room"],
            points=row["points"],
            total_time_sec=row["total_time_sec"],
            status=row["status"],
            can_roll_dice=bool(row["can_roll_dice"]),
            timer_paused=bool(row["timer_paused"]),
            timer_started_at=parse_dt(row["timer_started_at"]),
            timer_paused_at=parse_dt(row["timer_paused_at"]),
            map_id=parse_uuid(row["map_id"]),
            members=[
                TeamMember(id=UUID(m["id"]), team_id=team_id, name=m["name"])
                for m in member_rows
            ],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )


# -----------------------------------------------------------------------------
# Rooms & maps
# -----------------------------------------------------------------------------


class SQLiteRoomRepo(SQLiteRepoBase):
    def get_by_id(self, room_id: UUID) -> Room | None:
        row = self._fetch_one("SELECT * FROM rooms WHERE id = ?", (str(room_id),))
        return self._map_row(row) if row else None

    def get_by_number(self, room_number: str) -> Room | None:
        row = self._fetch_one("SELECT * FROM rooms WHERE room_number = ?", (room_number,))
        return self._map_row(row) if row else None

    def list_all(self) -> list[Room]:
        rows = self._fetch_all("SELECT * FROM rooms ORDER BY room_number ASC")
        return [self._map_row(r) for r in rows]

    def save(self, room: Room) -> Room:
        self._execute(
            """
            INSERT INTO rooms (id, room_number, capacity, floor, room_type)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                room_number=excluded.room_number,
                capacity=excluded.capacity,
                floor=excluded.floor,
                room_type=excluded.room_type
            """,
            (str(room.id), room.room_number, room.capacity, room.floor, room.room_type),
        )
        return room

    def delete(self, room_id: UUID) -> None:
        self._execute("DELETE FROM rooms WHERE id = ?", (str(room_id),))

    def _map_row(self, row: dict[str, Any]) -> Room:
        return Room(
            id=UUID(row["id"]),
            room_number=row["room_number"],
            capacity=row["capacity"],
            floor=row["floor"],
            room_type=row["room_type"],
        )


class SQLiteMapRepo(SQLiteRepoBase):
    def get_by_id(self, map_id: UUID) -> BoardMap | None:
        row = self._fetch_one("SELECT * FROM maps WHERE id = ?", (str(map_id),))
        return self._map_row(row) if row else None

    def get_by_name(self, name: str) -> BoardMap | None:
        row = self._fetch_one("SELECT * FROM maps WHERE name = ?", (name,))
        return self._map_row(row) if row else None

    def list_all(self, active_only: bool = False) -> list[BoardMap]:
        sql = "SELECT * FROM maps"
        if active_only:
            sql += " WHERE is_active = 1"
        rows = self._fetch_all(sql + " ORDER BY name ASC")
        return [self._map_row(r) for r in rows]

    def save(self, board_map: BoardMap) -> BoardMap:
        self._execute(
            """
            INSERT INTO maps (id, name, is_active, created_at) VALUES (?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                name=excluded.name,
                is_active=excluded.is_active
            """,
            (
                str(board_map.id),
                board_map.name,
                1 if board_map.is_active else 0,
                board_map.created_at.isoformat(),
            ),
        )
        return board_map

    def delete(self, map_id: UUID) -> None:
        self._execute("DELETE FROM maps WHERE id = ?", (str(map_id),))

    def list_rules(self, map_id: UUID) -> list[BoardRule]:
        rows = self._fetch_all(
            "SELECT * FROM board_rules WHERE map_id = ? ORDER BY start_pos ASC", (str(map_id),)
        )
        return [self._map_rule(r) for r in rows]

    def get_rule(self, rule_id: UUID) -> BoardRule | None:
        row = self._fetch_one("SELECT * FROM board_rules WHERE id = ?", (str(rule_id),))
        return self._map_rule(row) if row else None

    def save_rule(self, rule: BoardRule) -> BoardRule:
        self._execute(
            """
            INSERT INTO board_rules (id, map_id, type, start_pos) VALUES (?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                type=excluded.type,
                start_pos=excluded.start_pos
            """,
            (str(rule.id), str(rule.map_id), rule.type, rule.start_pos),
        )
        return rule

    def delete_rule(self, rule_id: UUID) -> None:
        self._execute("DELETE FROM board_rules WHERE id = ?", (str(rule_id),))

    def snake_positions(self, map_id: UUID) -> set[int]:
        rows = self._fetch_all(
            "SELECT start_pos FROM board_rules WHERE map_id = ? AND type = 'SNAKE'",
            (str(map_id),),
        )
        return {r["start_pos"] for r in rows}

    def count_teams(self, map_id: UUID) -> int:
        row = self._fetch_one("SELECT COUNT(*) AS n FROM teams WHERE map_id = ?", (str(map_id),))
        return int(row["n"]) if row else 0

    def _map_row(self, row: dict[str, Any]) -> BoardMap:
        return BoardMap(
            id=UUID(row["id"]),
            name=row["name"],
            is_active=bool(row["is_active"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def _map_rule(self, row: dict[str, Any]) -> BoardRule:
        return BoardRule(
            id=UUID(row["id"]),
            map_id=UUID(row["map_id"]),
            type=row["type"],
            start_pos=row["start_pos"],
        )


# -----------------------------------------------------------------------------
# Questions
# -----------------------------------------------------------------------------


class SQLiteQuestionRepo(SQLiteRepoBase):
    def get_by_id(self, question_id: UUID) -> Question | None:
        row = self._fetch_one("SELECT * FROM questions WHERE id = ?", (str(question_id),))
        return self._map_row(row) if row else None

    def list_all(
        self, active: bool | None = None, question_type: str | None = None
    ) -> list[Question]:
        clauses = []
        params: list[Any] = []
        if active is not None:
            clauses.append("is_active = ?")
            params.append(1 if active else 0)
        if question_type is not None:
            clauses.append("type = ?")
            params.append(question_type)

        sql = "SELECT * FROM questions"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        rows = self._fetch_all(sql + " ORDER BY created_at DESC", tuple(params))
        return [self._map_row(r) for r in rows]

    def save(self, question: Question) -> Question:
        self._execute(
            """
            INSERT INTO questions (
                id, text, hint, type, options_json, correct_answer,
                is_snake_question, is_active, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                text=excluded.text,
                hint=excluded.hint,
                type=excluded.type,
                options_json=excluded.options_json,
                correct_answer=excluded.correct_answer,
                is_snake_question=excluded.is_snake_question,
                is_active=excluded.is_active
            """,
            (
                str(question.id),
                question.text,
                question.hint,
                question.type,
                json.dumps(question.options),
                question.correct_answer,
                1 if question.is_snake_question else 0,
                1 if question.is_active else 0,
                question.created_at.isoformat(),
            ),
        )
        return question

    def delete(self, question_id: UUID) -> None:
        self._execute("DELETE FROM questions WHERE id = ?", (str(question_id),))

    def _map_row(self, row: dict[str, Any]) -> Question:
        return Question(
            id=UUID(row["id"]),
            text=row["text"],
            hint=row["hint"],
            type=row["type"],
            options=json.loads(row["options_json"] or "[]"),
            correct_answer=row["correct_answer"],
            is_snake_question=bool(row["is_snake_question"]),
            is_active=bool(row["is_active"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )


# -----------------------------------------------------------------------------
# Checkpoints & assignments
# -----------------------------------------------------------------------------


class SQLiteCheckpointRepo(SQLiteRepoBase):
    def get_by_id(self, checkpoint_id: UUID) -> Checkpoint | None:
        row = self._fetch_one("SELECT * FROM checkpoints WHERE id = ?", (str(checkpoint_id),))
        return self._map_row(row) if row else None

    def list_for_team(self, team_id: UUID) -> list[Checkpoint]:
        rows = self._fetch_all(
            "SELECT * FROM checkpoints WHERE team_id = ? ORDER BY checkpoint_number ASC",
            (str(team_id),),
        )
        return [self._map_row(r) for r in rows]

    def latest_for_team(self, team_id: UUID) -> Checkpoint | None:
        row = self._fetch_one(
            "SELECT * FROM checkpoints WHERE team_id = ? "
            "ORDER BY checkpoint_number DESC LIMIT 1",
            (str(team_id),),
        )
        return self._map_row(row) if row else None

    def latest_for_team_with_status(self, team_id: UUID, status: str) -> Checkpoint | None:
        row = self._fetch_one(
            "SELECT * FROM checkpoints WHERE team_id = ? AND status = ? "
            "ORDER BY checkpoint_number DESC LIMIT 1",
            (str(team_id), status),
        )
        return self._map_row(row) if row else None

    def latest_with_pending_assignment(self, team_id: UUID) -> Checkpoint | None:
        row = self._fetch_one(
            "SELECT c.* FROM checkpoints c "
            "JOIN question_assignments qa ON qa.checkpoint_id = c.id "
            "WHERE c.team_id = ? AND qa.status = 'PENDING' "
            "ORDER BY c.checkpoint_number DESC LIMIT 1",
            (str(team_id),),
        )
        return self._map_row(row) if row else None

    def previous(self, team_id: UUID, checkpoint_number: int) -> Checkpoint | None:
        row = self._fetch_one(
            "SELECT * FROM checkpoints WHERE team_id = ? AND checkpoint_number < ? "
            "ORDER BY checkpoint_number DESC LIMIT 1",
            (str(team_id), checkpoint_number),
        )
        return self._map_row(row) if row else None

    def count_for_team(self, team_id: UUID, status: str | None = None) -> int:
        if status is None:
            row = self._fetch_one(
                "SELECT COUNT(*) AS n FROM checkpoints WHERE team_id = ?", (str(team_id),)
            )
        else:
            row = self._fetch_one(
                "SELECT COUNT(*) AS n FROM checkpoints WHERE team_id = ? AND status = ?",
                (str(team_id), status),
            )
        return int(row["n"]) if row else 0

    def list_by_status(self, status: str) -> list[Checkpoint]:
        rows = self._fetch_all(
            "SELECT * FROM checkpoints WHERE status = ? ORDER BY created_at ASC", (status,)
        )
        return [self._map_row(r) for r in rows]

    def save(self, checkpoint: Checkpoint) -> Checkpoint:
        self._execute(
            """
            INSERT INTO checkpoints (
                id, team_id, checkpoint_number, position_before, position_after,
                room_number, room_before, status, is_snake_position, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                status=excluded.status,
                room_number=excluded.room_number
            """,
            (
                str(checkpoint.id),
                str(checkpoint.team_id),
                checkpoint.checkpoint_number,
                checkpoint.position_before,
                checkpoint.position_after,
                checkpoint.room_number,
                checkpoint.room_before,
                checkpoint.status,
                1 if checkpoint.is_snake_position else 0,
                checkpoint.created_at.isoformat(),
            ),
        )
        return checkpoint

    def delete(self, checkpoint_id: UUID) -> None:
        self._execute("DELETE FROM checkpoints WHERE id = ?", (str(checkpoint_id),))

    def _map_row(self, row: dict[str, Any]) -> Checkpoint:
        return Checkpoint(
            id=UUID(row["id"]),
            team_id=UUID(row["team_id"]),
            checkpoint_number=row["checkpoint_number"],
            position_before=row["position_before"],
            position_after=row["position_after"],
            room_number=row["room_number"],
            room_before=row["room_before"],
            status=row["status"],
            is_snake_position=bool(row["is_snake_position"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )


class SQLiteAssignmentRepo(SQLiteRepoBase):
    def get_by_id(self, assignment_id: UUID) -> QuestionAssignment | None:
        row = self._fetch_one(
            "SELECT * FROM question_assignments WHERE id = ?", (str(assignment_id),)
        )
        return self._map_row(row) if row else None

    def get_by_checkpoint(self, checkpoint_id: UUID) -> QuestionAssignment | None:
        row = self._fetch_one(
            "SELECT * FROM question_assignments WHERE checkpoint_id = ?", (str(checkpoint_id),)
        )
        return self._map_row(row) if row else None

    def question_ids_for_team(self, team_id: UUID) -> set[UUID]:
        rows = self._fetch_all(
            """
            SELECT qa.question_id FROM question_assignments qa
            JOIN checkpoints c ON c.id = qa.checkpoint_id
            WHERE c.team_id = ?
            """,
            (str(team_id),),
        )
        return {UUID(r["question_id"]) for r in rows}

    def pending_question_ids(self) -> set[UUID]:
        rows = self._fetch_all(
            "SELECT DISTINCT question_id FROM question_assignments WHERE status = 'PENDING'"
        )
        return {UUID(r["question_id"]) for r in rows}

    def save(self, assignment: QuestionAssignment) -> QuestionAssignment:
        self._execute(
            """
            INSERT INTO question_assignments (
                id, checkpoint_id, question_id, status, participant_answer,
                hint_used, submitted_at, answered_at, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                status=excluded.status,
                participant_answer=excluded.participant_answer,
                hint_used=excluded.hint_used,
                submitted_at=excluded.submitted_at,
                answered_at=excluded.answered_at
            """,
            (
                str(assignment.id),
                str(assignment.checkpoint_id),
                str(assignment.question_id),
                assignment.status,
                assignment.participant_answer,
                1 if assignment.hint_used else 0,
                fmt_dt(assignment.submitted_at),
                fmt_dt(assignment.answered_at),
                assignment.created_at.isoformat(),
            ),
        )
        return assignment

    def delete(self, assignment_id: UUID) -> None:
        self._execute("DELETE FROM question_assignments WHERE id = ?", (str(assignment_id),))

    def _map_row(self, row: dict[str, Any]) -> QuestionAssignment:
        return QuestionAssignment(
            id=UUID(row["id"]),
            checkpoint_id=UUID(row["checkpoint_id"]),
            question_id=UUID(row["question_id"]),
            status=row["status"],
            participant_answer=row["participant_answer"],
            hint_used=bool(row["hint_used"]),
            submitted_at=parse_dt(row["submitted_at"]),
            answered_at=parse_dt(row["answered_at"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )


# -----------------------------------------------------------------------------
# Dice rolls, time logs, audit
# -----------------------------------------------------------------------------


class SQLiteDiceRollRepo(SQLiteRepoBase):
    def save(self, roll: DiceRoll) -> DiceRoll:
        self._execute(
            """
            INSERT INTO dice_rolls (
                id, team_id, value, position_from, position_to, room_assigned, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                str(roll.id),
                str(roll.team_id),
                roll.value,
                roll.position_from,
                roll.position_to,
                roll.room_assigned,
                roll.created_at.isoformat(),
            ),
        )
        return roll

    def list_for_team(self, team_id: UUID, limit: int | None = None) -> list[DiceRoll]:
        sql = "SELECT * FROM dice_rolls WHERE team_id = ? ORDER BY created_at DESC, rowid DESC"
        params: tuple[Any, ...] = (str(team_id),)
        if limit is not None:
            sql += " LIMIT ?"
            params = (str(team_id), limit)
        return [
            DiceRoll(
                id=UUID(r["id"]),
                team_id=UUID(r["team_id"]),
                value=r["value"],
                position_from=r["position_from"],
                position_to=r["position_to"],
                room_assigned=r["room_assigned"],
                created_at=datetime.fromisoformat(r["created_at"]),
            )
            for r in self._fetch_all(sql, params)
        ]


class SQLiteTimeLogRepo(SQLiteRepoBase):
    def save(self, log: TimeLog) -> TimeLog:
        self._execute(
            "INSERT INTO time_logs (id, team_id, seconds, reason, created_at) "
            "VALUES (?, ?, ?, ?, ?)",
            (str(log.id), str(log.team_id), log.seconds, log.reason, log.created_at.isoformat()),
        )
        return log

    def list_for_team(self, team_id: UUID) -> list[TimeLog]:
        rows = self._fetch_all(
            "SELECT * FROM time_logs WHERE team_id = ? ORDER BY created_at DESC, rowid DESC",
            (str(team_id),),
        )
        return [
            TimeLog(
                id=UUID(r["id"]),
                team_id=UUID(r["team_id"]),
                seconds=r["seconds"],
                reason=r["reason"],
                created_at=datetime.fromisoformat(r["created_at"]),
            )
            for r in rows
        ]


class SQLiteAuditRepo(SQLiteRepoBase):
    def save(self, event: AuditEvent) -> AuditEvent:
        self._execute(
            """
            INSERT INTO audit_logs (id, actor, actor_role, action, target, details_json, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                str(event.id),
                event.actor,
                event.actor_role,
                event.action,
                event.target,
                json.dumps(event.details, default=str),
                event.created_at.isoformat(),
            ),
        )
        return event

    def query(
        self,
        action: str | None = None,
        actor: str | None = None,
        target: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[AuditEvent]:
        where, params = self._filters(action, actor, target)
        rows = self._fetch_all(
            f"SELECT * FROM audit_logs{where} ORDER BY created_at DESC, rowid DESC "
            "LIMIT ? OFFSET ?",
            (*params, limit, offset),
        )
        return [
            AuditEvent(
                id=UUID(r["id"]),
                actor=r["actor"],
                actor_role=r["actor_role"],
                action=r["action"],
                target=r["target"],
                details=json.loads(r["details_json"] or "{}"),
                created_at=datetime.fromisoformat(r["created_at"]),
            )
            for r in rows
        ]

    def count(
        self, action: str | None = None, actor: str | None = None, target: str | None = None
    ) -> int:
        where, params = self._filters(action, actor, target)
        row = self._fetch_one(f"SELECT COUNT(*) AS n FROM audit_logs{where}", params)
        return int(row["n"]) if row else 0

    def _filters(
        self, action: str | None, actor: str | None, target: str | None
    ) -> tuple[str, tuple[Any, ...]]:
        clauses = []
        params: list[Any] = []
        for column, value in (("action", action), ("actor", actor), ("target", target)):
            if value is not None:
                clauses.append(f"{column} = ?")
                params.append(value)
        where = " WHERE " + " AND ".join(clauses) if clauses else ""
        return where, tuple(params)


# -----------------------------------------------------------------------------
# Unit of work
# -----------------------------------------------------------------------------


class SQLiteUnitOfWork:
    """
    All repositories on one connection; commits on a clean exit and rolls
    back when the block raises.

        with SQLiteUnitOfWork(db_path) as store:
            team = store.teams.get_by_id(team_id)
            ...
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._conn: sqlite3.Connection | None = None
        self._after_commit: list[tuple[Callable[..., object], tuple[object, ...]]] = []

    def after_commit(self, fn: Callable[..., object], *args: object) -> None:
        """Run `fn(*args)` once the current transaction has committed; dropped on rollback."""
        self._after_commit.append((fn, args))

    def _run_after_commit(self) -> None:
        hooks, self._after_commit = self._after_commit, []
        for fn, args in hooks:
            fn(*args)

    def __enter__(self) -> SQLiteUnitOfWork:
        conn = connect(self.db_path)
        self._conn = conn
        self.users = SQLiteUserRepo(self.db_path, conn)
        self.tokens = SQLiteTokenRepo(self.db_path, conn)
        self.teams = SQLiteTeamRepo(self.db_path, conn)
        self.rooms = SQLiteRoomRepo(self.db_path, conn)
        self.maps = SQLiteMapRepo(self.db_path, conn)
        self.questions = SQLiteQuestionRepo(self.db_path, conn)
        self.checkpoints = SQLiteCheckpointRepo(self.db_path, conn)
        self.assignments = SQLiteAssignmentRepo(self.db_path, conn)
        self.dice_rolls = SQLiteDiceRollRepo(self.db_path, conn)
        self.time_logs = SQLiteTimeLogRepo(self.db_path, conn)
        self.audit = SQLiteAuditRepo(self.db_path, conn)
        return self

    def commit(self) -> None:
        if self._conn is not None:
            self._conn.commit()
            self._run_after_commit()

    def rollback(self) -> None:
        self._after_commit.clear()
        if self._conn is not None:
            self._conn.rollback()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._conn is None:
            return
        try:
            if exc_type is None:
                self._conn.commit()
            else:
                self._after_commit.clear()
                self._conn.rollback()
        finally:
            self._conn.close()
            self._conn = None
        self._run_after_commit()
