"""What a team sees and does between rolls."""

from uuid import uuid4

import pytest

from src.components.checkpoints import CheckpointActionInput, run_approve_checkpoint
from src.components.dice import RollDiceInput, run_roll_dice
from src.components.participant import (
    SubmitAnswerInput,
    UseHintInput,
    run_can_roll,
    run_checkpoints,
    run_dashboard,
    run_pending_checkpoint,
    run_submit_answer,
    run_team_state,
    run_use_hint,
)
from tests.helpers import add_question, make_team


def _arrive(store, rng, clock, team, rules, value=4, approve=True):
    rng.rolls.append(value)
    result = run_roll_dice(RollDiceInput(team_id=team.id), store, rng, clock, rules.game)
    assert result.success, result.error
    if approve:
        run_approve_checkpoint(
            CheckpointActionInput(checkpoint_id=result.checkpoint.id), store, clock
        )
    return result


def _submit(store, clock, rules, team, assignment_id, answer):
    return run_submit_answer(
        SubmitAnswerInput(team_id=team.id, assignment_id=assignment_id, answer=answer),
        store,
        clock,
        rules.game,
    )


def _hint(store, clock, rules, team, assignment_id):
    return run_use_hint(
        UseHintInput(team_id=team.id, assignment_id=assignment_id), store, clock, rules.game
    )


class TestVisibility:
    def test_question_hidden_until_approved(self, store, rng, clock, rules, team):
        add_question(store)
        reached = _arrive(store, rng, clock, team, rules, approve=False)

        pending = run_pending_checkpoint(team.id, store)
        assert pending.item.checkpoint.id == reached.checkpoint.id
        assert pending.item.question is None

        run_approve_checkpoint(
            CheckpointActionInput(checkpoint_id=reached.checkpoint.id), store, clock
        )
        pending = run_pending_checkpoint(team.id, store)
        assert pending.item.question.text == "What is 6 x 7?"

    def test_unmarked_older_answer_stays_pending(self, store, rng, clock, rules, team):
        add_question(store, text="Build a paper tower", type="PHYSICAL", correct_answer=None)
        tower = _arrive(store, rng, clock, team, rules, value=3)
        assert _submit(store, clock, rules, team, tower.assignment.id, "done").auto_marked is False

        add_question(store)
        sums = _arrive(store, rng, clock, team, rules, value=2)
        assert _submit(store, clock, rules, team, sums.assignment.id, "42").is_correct

        pending = run_pending_checkpoint(team.id, store)
        assert pending.item is not None
        assert pending.item.checkpoint.id == tower.checkpoint.id
        assert pending.item.assignment.participant_answer == "done"
        assert run_dashboard(team.id, store, clock, rules.game).pending.checkpoint.id == (
            tower.checkpoint.id
        )

    def test_nothing_pending_once_marked(self, store, rng, clock, rules, team):
        add_question(store)
        reached = _arrive(store, rng, clock, team, rules)
        _submit(store, clock, rules, team, reached.assignment.id, "42")
        assert run_pending_checkpoint(team.id, store).item is None

    def test_checkpoint_history(self, store, rng, clock, rules, team):
        add_question(store)
        _arrive(store, rng, clock, team, rules)
        history = run_checkpoints(team.id, store)
        assert len(history.items) == 1
        assert history.items[0].question is not None

    def test_dashboard(self, store, rng, clock, rules, team):
        add_question(store)
        _arrive(store, rng, clock, team, rules)
        clock.advance(90)

        dashboard = run_dashboard(team.id, store, clock, rules.game)
        assert dashboard.success
        assert dashboard.can_roll is False
        assert dashboard.can_roll_reason == "Pending checkpoint approval"
        assert dashboard.total_time_sec == 90
        assert dashboard.pending is not None
        assert len(dashboard.recent_checkpoints) == 1
        assert dashboard.board.success

    def test_state_and_can_roll(self, store, clock, team):
        assert run_team_state(team.id, store, clock).team.team_code == "TEAM1001"
        assert run_can_roll(team.id, store).can_roll is True
        missing = run_can_roll(uuid4(), store)
        assert missing.can_roll is False
        assert missing.reason == "Team not found"


class TestSubmit:
    def test_auto_marked_correct(self, store, rng, clock, rules, team):
        add_question(store)
        reached = _arrive(store, rng, clock, team, rules)

        result = _submit(store, clock, rules, team, reached.assignment.id, " 42 ")
        assert result.success
        assert result.auto_marked is True
        assert result.is_correct is True
        assert result.points_delta == 1
        assert result.assignment.participant_answer == "42"
        saved = store.teams.get_by_id(team.id)
        assert saved.points == 1
        assert saved.can_roll_dice is True

    def test_mcq_match_ignores_case(self, store, rng, clock, rules, team):
        add_question(store, text="Capital?", type="MCQ", options=["Paris", "Rome"],
                     correct_answer="Paris")
        reached = _arrive(store, rng, clock, team, rules)
        assert _submit(store, clock, rules, team, reached.assignment.id, "paris").is_correct

    def test_auto_marked_wrong(self, store, rng, clock, rules, team):
        add_question(store)
        reached = _arrive(store, rng, clock, team, rules)
        result = _submit(store, clock, rules, team, reached.assignment.id, "41")
        assert result.is_correct is False
        assert result.points_delta == 0
        assert store.teams.get_by_id(team.id).can_roll_dice is True

    def test_manual_question_unlocks_without_scoring(self, store, rng, clock, rules, team):
        add_question(store, text="Reverse a string", type="CODING", correct_answer=None)
        reached = _arrive(store, rng, clock, team, rules)

        result = _submit(store, clock, rules, team, reached.assignment.id, "s[::-1]")
        assert result.auto_marked is False
        assert result.is_correct is None
        assert result.assignment.status == "PENDING"
        assert store.teams.get_by_id(team.id).can_roll_dice is True

    def test_submit_before_approval(self, store, rng, clock, rules, team):
        add_question(store)
        reached = _arrive(store, rng, clock, team, rules, approve=False)
        result = _submit(store, clock, rules, team, reached.assignment.id, "42")
        assert result.error_code == "conflict"

    def test_submit_twice(self, store, rng, clock, rules, team):
        add_question(store, text="Reverse a string", type="CODING", correct_answer=None)
        reached = _arrive(store, rng, clock, team, rules)
        _submit(store, clock, rules, team, reached.assignment.id, "first")
        assert _submit(store, clock, rules, team, reached.assignment.id, "again").error_code == (
            "conflict"
        )

    def test_blank_answer(self, store, rng, clock, rules, team):
        add_question(store)
        reached = _arrive(store, rng, clock, team, rules)
        assert _submit(store, clock, rules, team, reached.assignment.id, "   ").error_code == (
            "invalid"
        )

    def test_other_teams_question(self, store, rng, clock, rules, team):
        add_question(store)
        reached = _arrive(store, rng, clock, team, rules)
        other = make_team(store, code="TEAM2002")
        result = _submit(store, clock, rules, other, reached.assignment.id, "42")
        assert result.error_code == "forbidden"

    def test_unknown_assignment(self, store, clock, rules, team):
        assert _submit(store, clock, rules, team, uuid4(), "42").error_code == "not_found"


class TestHint:
    @pytest.fixture
    def reached(self, store, rng, clock, rules, team):
        add_question(store, hint="Think of Douglas Adams")
        return _arrive(store, rng, clock, team, rules)

    def test_hint_adds_penalty_once(self, store, clock, rules, team, reached):
        first = _hint(store, clock, rules, team, reached.assignment.id)
        assert first.success
        assert first.hint == "Think of Douglas Adams"
        assert first.penalty_seconds == rules.game.hint_penalty_seconds

        second = _hint(store, clock, rules, team, reached.assignment.id)
        assert second.already_used is True
        assert second.penalty_seconds == 0

        saved = store.teams.get_by_id(team.id)
        assert saved.total_time_sec == rules.game.hint_penalty_seconds
        logs = store.time_logs.list_for_team(team.id)
        assert [(log.seconds, log.reason) for log in logs] == [
            (rules.game.hint_penalty_seconds, "Hint penalty")
        ]

    def test_no_hint_available(self, store, rng, clock, rules, team):
        add_question(store)
        reached = _arrive(store, rng, clock, team, rules)
        assert _hint(store, clock, rules, team, reached.assignment.id).error_code == "not_found"

    def test_hint_after_answer(self, store, clock, rules, team, reached):
        _submit(store, clock, rules, team, reached.assignment.id, "42")
        assert _hint(store, clock, rules, team, reached.assignment.id).error_code == "conflict"
