"""
Dice component - a single roll of the die for a team.

A roll moves the team along the board, sends it to a room on the other
floor and creates a PENDING checkpoint carrying the question it must answer
there. The team cannot roll again until that checkpoint is resolved.

Invariants:
- Only a team for which can_roll() holds may roll
- The dice lock is claimed atomically before anything else is written
- A roll past the last tile changes nothing but the roll history
- Reaching the last tile completes the team
"""

from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from src.components.audit import AuditAction, AuditService
from src.components.questions import SelectQuestionInput, run_select_for_team
from src.domain import state
from src.domain.entities import Checkpoint, DiceRoll, QuestionAssignment, Team
from src.domain.game import (
    NoRoomAvailableError,
    calculate_new_position,
    choose_room,
    has_reached_goal,
    roll_dice,
)
from src.ports.clock import ClockPort
from src.ports.randomness import RandomPort
from src.ports.repo import GameStorePort
from src.rules.models import GameRules

from .models import DiceHistoryOutput, RollDiceInput, RollDiceOutput

logger = logging.getLogger(__name__)


def _first_roll_starts_timer(team: Team, now: datetime) -> Team:
    if team.timer_started_at is None:
        return state.start_timer(team, now)
    return team


def run_roll_dice(
    inp: RollDiceInput,
    store: GameStorePort,
    rng: RandomPort,
    time: ClockPort,
    rules: GameRules,
) -> RollDiceOutput:
    team = store.teams.get_by_id(inp.team_id)
    if not team:
        return RollDiceOutput(success=False, error="Team not found", error_code="not_found")

    allowed, reason = state.can_roll(team)
    if not allowed:
        logger.warning("roll refused for %s: %s", team.team_code, reason)
        return RollDiceOutput(success=False, error=reason, error_code="forbidden")

    if not store.teams.lock_dice(team.id):
        # Another request claimed this roll first.
        return RollDiceOutput(
            success=False, error=state.PENDING_REASON, error_code="forbidden"
        )

    now = time.now_utc()
    audit = AuditService(store.audit, time)

    dice_value = roll_dice(rng, rules)
    before = team.current_position
    after = calculate_new_position(before, dice_value, rules.board_size)

    if after == before:
        roll = store.dice_rolls.save(
            DiceRoll(
                team_id=team.id,
                value=dice_value,
                position_from=before,
                position_to=before,
                room_assigned=team.current_room,
                created_at=now,
            )
        )
        team = _first_roll_starts_timer(team, now)
        team = team.model_copy(update={"can_roll_dice": True, "updated_at": now})
        store.teams.save(team)
        audit.log(
            AuditAction.DICE_ROLLED,
            actor=inp.actor,
            target=str(team.id),
            details={"dice": dice_value, "from": before, "to": before, "moved": False},
        )
        logger.info("dice_rolled team=%s dice=%s overshoot stays=%s",
                    team.team_code, dice_value, before)
        return RollDiceOutput(
            dice_value=dice_value,
            position_before=before,
            position_after=before,
            moved=False,
            room_number=team.current_room,
            dice_roll=roll,
            success=True,
        )

    is_snake = bool(team.map_id and after in store.maps.snake_positions(team.map_id))

    pick = run_select_for_team(
        SelectQuestionInput(team_id=team.id, is_snake=is_snake), store, rng, rules
    )
    if not pick.success or pick.question is None or pick.room_type is None:
        store.teams.save(team.model_copy(update={"can_roll_dice": True}))
        return RollDiceOutput(success=False, error=pick.error, error_code=pick.error_code)

    try:
        room = choose_room(
            store.rooms.list_all(),
            store.teams.room_occupancy(exclude_team_id=team.id),
            team.current_room,
            pick.room_type,
            rng,
        )
    except NoRoomAvailableError as e:
        logger.warning("roll for %s has no room: %s", team.team_code, e)
        store.teams.save(team.model_copy(update={"can_roll_dice": True}))
        return RollDiceOutput(success=False, error=str(e), error_code="conflict")

    roll = store.dice_rolls.save(
        DiceRoll(
            team_id=team.id,
            value=dice_value,
            position_from=before,
            position_to=after,
            room_assigned=room.room_number,
            created_at=now,
        )
    )

    checkpoint = store.checkpoints.save(
        Checkpoint(
            team_id=team.id,
            checkpoint_number=store.checkpoints.count_for_team(team.id) + 1,
            position_before=before,
            position_after=after,
            room_number=room.room_number,
            room_before=team.current_room,
            status="PENDING",
            is_snake_position=is_snake,
            created_at=now,
        )
    )
    assignment = store.assignments.save(
        QuestionAssignment(
            checkpoint_id=checkpoint.id,
            question_id=pick.question.id,
            status="PENDING",
            created_at=now,
        )
    )

    team = team.model_copy(
        update={
            "current_position": after,
            "current_room": room.room_number,
            "can_roll_dice": False,
            "updated_at": now,
        }
    )
    team = _first_roll_starts_timer(team, now)
    has_won = has_reached_goal(after, rules.board_size)
    if has_won:
        team = state.complete(team, now)
    store.teams.save(team)

    audit.log(
        AuditAction.DICE_ROLLED,
        actor=inp.actor,
        target=str(team.id),
        details={"dice": dice_value, "from": before, "to": after, "room": room.room_number},
    )
    audit.log(
        AuditAction.CHECKPOINT_REACHED,
        actor=inp.actor,
        target=str(checkpoint.id),
        details={
            "team": team.team_code,
            "number": checkpoint.checkpoint_number,
            "snake": is_snake,
            "question_type": pick.question.type,
        },
    )
    logger.info(
        "dice_rolled team=%s dice=%s %s->%s room=%s snake=%s",
        team.team_code, dice_value, before, after, room.room_number, is_snake,
    )

    return RollDiceOutput(
        dice_value=dice_value,
        position_before=before,
        position_after=after,
        moved=True,
        room_number=room.room_number,
        room_type=room.room_type,
        is_snake_position=is_snake,
        question_type=pick.question.type,
        checkpoint=checkpoint,
        assignment=assignment,
        dice_roll=roll,
        has_won=has_won,
        success=True,
    )


def run_dice_history(
    team_id: UUID, store: GameStorePort, limit: int | None = None
) -> DiceHistoryOutput:
    if not store.teams.get_by_id(team_id):
        return DiceHistoryOutput(success=False, error="Team not found", error_code="not_found")
    return DiceHistoryOutput(rolls=store.dice_rolls.list_for_team(team_id, limit), success=True)
