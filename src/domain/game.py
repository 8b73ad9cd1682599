"""
Pure game rules: dice, board arithmetic, room choice and scoring.

Nothing here touches storage. Randomness comes in through a RandomPort so
callers (and tests) decide how dice and room draws are produced.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence

from src.domain.entities import QuestionType, Room, RoomType
from src.ports.randomness import RandomPort
from src.rules.models import GameRules

_ROOM_FLOOR_RE = re.compile(r"(\d)\d{2}$")


class NoRoomAvailableError(ValueError):
    """Raised when no room of the required type exists on the target floor."""


def roll_dice(rng: RandomPort, rules: GameRules) -> int:
    return rng.randint(rules.dice_min, rules.dice_max)


def calculate_new_position(before: int, dice: int, board_size: int) -> int:
    """Exact landing is required: a roll past the last tile leaves the team in place."""
    after = before + dice
    if after > board_size:
        return before
    return after


def has_reached_goal(position: int, board_size: int) -> bool:
    return position >= board_size


def get_floor_from_room(room_number: str | None) -> int:
    """Floor is the hundreds digit of the trailing room number ("AB1 205" -> 2)."""
    if not room_number:
        return 1
    match = _ROOM_FLOOR_RE.search(room_number.strip())
    if not match:
        return 1
    return int(match.group(1))


def opposite_floor(floor: int) -> int:
    return 2 if floor == 1 else 1


def room_type_for_question(question_type: QuestionType) -> RoomType:
    return "TECH" if question_type == "CODING" else "NON_TECH"


def choose_room(
    rooms: Sequence[Room],
    occupancy: Mapping[str, int],
    current_room: str | None,
    room_type: RoomType,
    rng: RandomPort,
) -> Room:
    """
    Pick the next room for a team.

    Teams alternate floors on every move. Candidates are rooms of the requested
    type on the other floor, never the room the team is leaving. A room with
    spare capacity is drawn at random; when every candidate is full the least
    occupied one is used.

    `occupancy` counts active teams per room number, excluding the roller.
    """
    target_floor = opposite_floor(get_floor_from_room(current_room))
    candidates = [
        r
        for r in rooms
        if r.floor == target_floor
        and r.room_type == room_type
        and r.room_number != current_room
    ]
    if not candidates:
        raise NoRoomAvailableError(
            f"No {room_type} rooms available on floor {target_floor}"
        )

    open_rooms = [r for r in candidates if occupancy.get(r.room_number, 0) < r.capacity]
    if open_rooms:
        return rng.choice(open_rooms)

    return min(candidates, key=lambda r: occupancy.get(r.room_number, 0))


def points_for_answer(is_snake: bool, is_correct: bool) -> int:
    """Snake questions can only cost a point; normal questions can only earn one."""
    if is_snake:
        return 0 if is_correct else -1
    return 1 if is_correct else 0


def is_auto_marked(question_type: str, rules: GameRules) -> bool:
    return question_type in rules.auto_marked_types


def answers_match(submitted: str | None, correct: str | None) -> bool:
    if submitted is None or correct is None:
        return False
    return submitted.strip().lower() == correct.strip().lower()


def generate_team_code(rng: RandomPort) -> str:
    return f"TEAM{rng.randint(1000, 9999)}"


def format_time(seconds: int) -> str:
    sign = "-" if seconds < 0 else ""
    seconds = abs(int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{sign}{hours:02d}:{minutes:02d}:{secs:02d}"


def parse_time(value: str) -> int:
    """Parse HH:MM:SS (or MM:SS) into seconds. Raises ValueError on bad input."""
    parts = value.strip().split(":")
    if not 2 <= len(parts) <= 3 or not all(p.isdigit() for p in parts):
        raise ValueError(f"Invalid time format: {value!r}")
    numbers = [int(p) for p in parts]
    if len(numbers) == 2:
        numbers.insert(0, 0)
    hours, minutes, secs = numbers
    if minutes >= 60 or secs >= 60:
        raise ValueError(f"Invalid time format: {value!r}")
    return hours * 3600 + minutes * 60 + secs
