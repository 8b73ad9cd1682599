"""Approve, mark, delete and undo checkpoints from the admin side."""

import pytest

from src.components.checkpoints import (
    CheckpointActionInput,
    MarkAnswerInput,
    run_approve_checkpoint,
    run_delete_checkpoint,
    run_get_checkpoint,
    run_list_pending,
    run_mark_answer,
    run_team_checkpoints,
    run_undo_checkpoint,
)
from src.components.dice import RollDiceInput, run_roll_dice
from tests.helpers import add_question, make_team


def roll(store, rng, clock, rules, team, value):
    rng.rolls.append(value)
    result = run_roll_dice(RollDiceInput(team_id=team.id), store, rng, clock, rules.game)
    assert result.success, result.error
    return result


@pytest.fixture
def reached(store, rng, clock, rules, team):
    """A team sitting on a fresh PENDING checkpoint with a numerical question."""
    add_question(store)
    return roll(store, rng, clock, rules, team, 4)


def approve(store, clock, checkpoint_id, actor=None):
    return run_approve_checkpoint(
        CheckpointActionInput(checkpoint_id=checkpoint_id, actor=actor), store, clock
    )


def mark(store, clock, rules, assignment_id, is_correct, actor=None):
    return run_mark_answer(
        MarkAnswerInput(assignment_id=assignment_id, is_correct=is_correct, actor=actor),
        store,
        clock,
        rules.game,
    )


class TestApprove:
    def test_approve_keeps_dice_locked(self, store, clock, reached, admin):
        result = approve(store, clock, reached.checkpoint.id, admin)
        assert result.success
        assert result.checkpoint.status == "APPROVED"
        assert result.question is not None
        assert store.teams.get_by_id(reached.checkpoint.team_id).can_roll_dice is False

    def test_approve_twice_conflicts(self, store, clock, reached):
        approve(store, clock, reached.checkpoint.id)
        again = approve(store, clock, reached.checkpoint.id)
        assert again.success is False
        assert again.error_code == "conflict"

    def test_unknown_checkpoint(self, store, clock):
        from uuid import uuid4

        assert approve(store, clock, uuid4()).error_code == "not_found"

    def test_pending_list_shows_team(self, store, reached, team):
        pending = run_list_pending(store)
        assert [v.checkpoint.id for v in pending.items] == [reached.checkpoint.id]
        assert pending.items[0].team.team_code == team.team_code
        assert pending.items[0].assignment is not None


class TestMark:
    def test_correct_mark_scores_and_unlocks(self, store, clock, rules, reached, team):
        approve(store, clock, reached.checkpoint.id)
        result = mark(store, clock, rules, reached.assignment.id, True)

        assert result.success
        assert result.points_delta == 1
        assert result.assignment.status == "CORRECT"
        saved = store.teams.get_by_id(team.id)
        assert saved.points == 1
        assert saved.can_roll_dice is True
        assert saved.current_position == reached.position_after

    def test_marking_pending_checkpoint_approves_it(self, store, clock, rules, reached):
        result = mark(store, clock, rules, reached.assignment.id, False)
        assert result.checkpoint.status == "APPROVED"
        assert result.points_delta == 0

    def test_remark_reverses_previous_points(self, store, clock, rules, reached, team):
        mark(store, clock, rules, reached.assignment.id, True)
        result = mark(store, clock, rules, reached.assignment.id, False)
        assert result.points_delta == -1
        assert store.teams.get_by_id(team.id).points == 0

        result = mark(store, clock, rules, reached.assignment.id, True)
        assert result.points_delta == 1
        assert store.teams.get_by_id(team.id).points == 1

    def test_manual_question_needs_submission(self, store, rng, clock, rules, team):
        add_question(store, text="Human pyramid", type="PHYSICAL", correct_answer=None)
        reached = roll(store, rng, clock, rules, team, 2)

        result = mark(store, clock, rules, reached.assignment.id, True)
        assert result.success is False
        assert result.error_code == "invalid"

    def test_snake_wrong_answer_costs_a_point(self, store, rng, clock, rules, team, questions):
        from src.components.board import CreateMapInput, run_create_map

        board_map = run_create_map(
            CreateMapInput(name="Map-S", snake_positions=[3]), store, rules.game
        ).view.board_map
        store.teams.save(team.model_copy(update={"map_id": board_map.id}))
        reached = roll(store, rng, clock, rules, team, 2)
        assert reached.is_snake_position
        store.assignments.save(reached.assignment.model_copy(update={"participant_answer": "x"}))

        result = mark(store, clock, rules, reached.assignment.id, False)
        assert result.points_delta == -1
        assert store.teams.get_by_id(team.id).points == -1

    def test_older_checkpoint_does_not_move_team(self, store, rng, clock, rules, team):
        add_question(store)
        add_question(store, text="What is 2 + 2?", correct_answer="4")
        first = roll(store, rng, clock, rules, team, 3)
        mark(store, clock, rules, first.assignment.id, True)
        second = roll(store, rng, clock, rules, team, 2)
        mark(store, clock, rules, second.assignment.id, True)

        mark(store, clock, rules, first.assignment.id, False)
        saved = store.teams.get_by_id(team.id)
        assert saved.current_position == second.position_after
        assert saved.points == 1


class TestDeleteAndUndo:
    def test_delete_pending_rewinds_to_start(self, store, clock, rules, reached, team):
        result = run_delete_checkpoint(
            CheckpointActionInput(checkpoint_id=reached.checkpoint.id), store, clock, rules.game
        )
        assert result.success
        saved = store.teams.get_by_id(team.id)
        assert saved.current_position == rules.game.starting_position
        assert saved.current_room == team.current_room
        assert saved.can_roll_dice is True
        assert store.checkpoints.count_for_team(team.id) == 0
        assert store.assignments.get_by_id(reached.assignment.id) is None

    def test_delete_restores_position_before_roll(self, store, rng, clock, rules, rooms):
        add_question(store)
        team = make_team(store, code="TEAM2002", current_position=50, current_room="AB1 205")
        rolled = roll(store, rng, clock, rules, team, 3)
        assert rolled.checkpoint.position_before == 50

        run_delete_checkpoint(
            CheckpointActionInput(checkpoint_id=rolled.checkpoint.id), store, clock, rules.game
        )
        saved = store.teams.get_by_id(team.id)
        assert saved.current_position == 50
        assert saved.current_room == "AB1 205"
        assert saved.can_roll_dice is True

    def test_delete_keeps_override_after_earlier_checkpoint(
        self, store, rng, clock, rules, team
    ):
        add_question(store)
        add_question(store, text="What is 2 + 2?", correct_answer="4")
        first = roll(store, rng, clock, rules, team, 3)
        mark(store, clock, rules, first.assignment.id, True)
        store.teams.save(
            store.teams.get_by_id(team.id).model_copy(update={"current_position": 20})
        )

        second = roll(store, rng, clock, rules, team, 2)
        run_delete_checkpoint(
            CheckpointActionInput(checkpoint_id=second.checkpoint.id), store, clock, rules.game
        )
        saved = store.teams.get_by_id(team.id)
        assert saved.current_position == 20
        assert saved.current_room == first.room_number

    def test_delete_rejects_approved(self, store, clock, rules, reached):
        approve(store, clock, reached.checkpoint.id)
        result = run_delete_checkpoint(
            CheckpointActionInput(checkpoint_id=reached.checkpoint.id), store, clock, rules.game
        )
        assert result.error_code == "conflict"

    def test_undo_returns_to_previous_checkpoint(self, store, rng, clock, rules, team):
        add_question(store)
        add_question(store, text="What is 2 + 2?", correct_answer="4")
        first = roll(store, rng, clock, rules, team, 3)
        mark(store, clock, rules, first.assignment.id, True)
        second = roll(store, rng, clock, rules, team, 5)
        mark(store, clock, rules, second.assignment.id, True)

        result = run_undo_checkpoint(
            CheckpointActionInput(checkpoint_id=second.checkpoint.id), store, clock, rules.game
        )
        assert result.success
        assert result.points_delta == -1
        saved = store.teams.get_by_id(team.id)
        assert saved.current_position == first.position_after
        assert saved.current_room == first.room_number
        assert saved.points == 1

    def test_undo_only_latest(self, store, rng, clock, rules, team):
        add_question(store)
        add_question(store, text="What is 2 + 2?", correct_answer="4")
        first = roll(store, rng, clock, rules, team, 3)
        mark(store, clock, rules, first.assignment.id, True)
        roll(store, rng, clock, rules, team, 5)

        result = run_undo_checkpoint(
            CheckpointActionInput(checkpoint_id=first.checkpoint.id), store, clock, rules.game
        )
        assert result.error_code == "conflict"

    def test_undo_of_winning_checkpoint_reopens_team(self, store, rng, clock, rules, rooms):
        add_question(store)
        team = make_team(store, current_position=147)
        won = roll(store, rng, clock, rules, team, 3)
        assert store.teams.get_by_id(team.id).status == "COMPLETED"

        run_undo_checkpoint(
            CheckpointActionInput(checkpoint_id=won.checkpoint.id), store, clock, rules.game
        )
        saved = store.teams.get_by_id(team.id)
        assert saved.status == "ACTIVE"
        assert saved.timer_running


def test_team_checkpoint_views(store, clock, reached, team):
    listing = run_team_checkpoints(team.id, store)
    assert listing.success
    assert listing.items[0].question.text == "What is 6 x 7?"

    detail = run_get_checkpoint(CheckpointActionInput(checkpoint_id=reached.checkpoint.id), store)
    assert detail.team.id == team.id
