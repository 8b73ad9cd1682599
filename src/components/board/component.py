"""
Board component - rooms, maps and snake rules.

Rooms carry a capacity and a type (TECH hosts coding questions). Maps are
named sets of snake tiles; each team plays on one map.
"""

from __future__ import annotations

from uuid import UUID

from src.domain.entities import BoardMap, BoardRule, Room
from src.domain.game import get_floor_from_room
from src.ports.repo import GameStorePort
from src.rules.models import GameRules

from .models import (
    AddRuleInput,
    BoardOutput,
    CreateMapInput,
    CreateRoomInput,
    MapListOutput,
    MapOutput,
    MapView,
    RoomListOutput,
    RoomOutput,
    RoomView,
    RuleOutput,
    UpdateRoomInput,
)

ROOM_TYPES = ("TECH", "NON_TECH")


# --- Rooms ---


def run_list_rooms(store: GameStorePort) -> RoomListOutput:
    occupancy = store.teams.room_occupancy()
    rooms = [
        RoomView(room=r, occupancy=occupancy.get(r.room_number, 0))
        for r in store.rooms.list_all()
    ]
    return RoomListOutput(rooms=rooms, success=True)


def run_create_room(inp: CreateRoomInput, store: GameStorePort) -> RoomOutput:
    room_number = inp.room_number.strip()
    if not room_number:
        return RoomOutput(success=False, error="Room number is required", error_code="invalid")
    if inp.capacity < 1:
        return RoomOutput(success=False, error="Capacity must be at least 1", error_code="invalid")
    if inp.room_type not in ROOM_TYPES:
        return RoomOutput(success=False, error="Invalid room type", error_code="invalid")
    if store.rooms.get_by_number(room_number):
        return RoomOutput(success=False, error="Room already exists", error_code="conflict")

    room = Room(
        room_number=room_number,
        capacity=inp.capacity,
        room_type=inp.room_type,  # type: ignore[arg-type]
        floor=inp.floor if inp.floor is not None else get_floor_from_room(room_number),
    )
    store.rooms.save(room)
    return RoomOutput(room=room, success=True)


def run_update_room(inp: UpdateRoomInput, store: GameStorePort) -> RoomOutput:
    room = store.rooms.get_by_id(inp.room_id)
    if not room:
        return RoomOutput(success=False, error="Room not found", error_code="not_found")

    updates: dict[str, object] = {}
    if inp.capacity is not None:
        if inp.capacity < 1:
            return RoomOutput(
                success=False, error="Capacity must be at least 1", error_code="invalid"
            )
        updates["capacity"] = inp.capacity
    if inp.room_type is not None:
        if inp.room_type not in ROOM_TYPES:
            return RoomOutput(success=False, error="Invalid room type", error_code="invalid")
        updates["room_type"] = inp.room_type
    if inp.floor is not None:
        updates["floor"] = inp.floor

    updated = room.model_copy(update=updates)
    store.rooms.save(updated)
    return RoomOutput(room=updated, success=True)


def run_delete_room(room_id: UUID, store: GameStorePort) -> RoomOutput:
    room = store.rooms.get_by_id(room_id)
    if not room:
        return RoomOutput(success=False, error="Room not found", error_code="not_found")
    if store.teams.room_occupancy().get(room.room_number, 0) > 0:
        return RoomOutput(
            success=False, error="Room is occupied by active teams", error_code="conflict"
        )
    store.rooms.delete(room.id)
    return RoomOutput(room=room, success=True)


# --- Maps ---


def _map_view(store: GameStorePort, board_map: BoardMap) -> MapView:
    return MapView(
        board_map=board_map,
        snakes=store.maps.list_rules(board_map.id),
        team_count=store.maps.count_teams(board_map.id),
    )


def _check_position(start_pos: int, rules: GameRules) -> str | None:
    if not 1 < start_pos < rules.board_size:
        return f"Snake position must be between 2 and {rules.board_size - 1}"
    return None


def run_list_maps(store: GameStorePort, active_only: bool = True) -> MapListOutput:
    maps = [_map_view(store, m) for m in store.maps.list_all(active_only=active_only)]
    return MapListOutput(maps=maps, success=True)


def run_get_map(map_id: UUID, store: GameStorePort) -> MapOutput:
    board_map = store.maps.get_by_id(map_id)
    if not board_map:
        return MapOutput(success=False, error="Map not found", error_code="not_found")
    return MapOutput(view=_map_view(store, board_map), success=True)


def run_create_map(inp: CreateMapInput, store: GameStorePort, rules: GameRules) -> MapOutput:
    name = inp.name.strip()
    if not name:
        return MapOutput(success=False, error="Map name is required", error_code="invalid")
    if store.maps.get_by_name(name):
        return MapOutput(success=False, error="Map name already exists", error_code="conflict")
    for pos in inp.snake_positions:
        error = _check_position(pos, rules)
        if error:
            return MapOutput(success=False, error=error, error_code="invalid")

    board_map = BoardMap(name=name)
    store.maps.save(board_map)
    for pos in sorted(set(inp.snake_positions)):
        store.maps.save_rule(BoardRule(map_id=board_map.id, start_pos=pos))
    return MapOutput(view=_map_view(store, board_map), success=True)


def run_delete_map(map_id: UUID, store: GameStorePort) -> MapOutput:
    board_map = store.maps.get_by_id(map_id)
    if not board_map:
        return MapOutput(success=False, error="Map not found", error_code="not_found")
    view = _map_view(store, board_map)
    if view.team_count:
        return MapOutput(
            success=False, error="Map is assigned to one or more teams", error_code="conflict"
        )
    store.maps.delete(board_map.id)
    return MapOutput(view=view, success=True)


def run_add_snake(inp: AddRuleInput, store: GameStorePort, rules: GameRules) -> RuleOutput:
    if not store.maps.get_by_id(inp.map_id):
        return RuleOutput(success=False, error="Map not found", error_code="not_found")
    error = _check_position(inp.start_pos, rules)
    if error:
        return RuleOutput(success=False, error=error, error_code="invalid")
    if inp.start_pos in store.maps.snake_positions(inp.map_id):
        return RuleOutput(
            success=False, error="A snake already exists at this position", error_code="conflict"
        )
    rule = store.maps.save_rule(BoardRule(map_id=inp.map_id, start_pos=inp.start_pos))
    return RuleOutput(rule=rule, success=True)


def run_delete_rule(rule_id: UUID, store: GameStorePort) -> RuleOutput:
    rule = store.maps.get_rule(rule_id)
    if not rule:
        return RuleOutput(success=False, error="Rule not found", error_code="not_found")
    store.maps.delete_rule(rule.id)
    return RuleOutput(rule=rule, success=True)


# --- Board for a team ---


def run_board_for_team(team_id: UUID, store: GameStorePort, rules: GameRules) -> BoardOutput:
    team = store.teams.get_by_id(team_id)
    if not team:
        return BoardOutput(success=False, error="Team not found", error_code="not_found")

    board_map = store.maps.get_by_id(team.map_id) if team.map_id else None
    snakes = sorted(store.maps.snake_positions(board_map.id)) if board_map else []
    return BoardOutput(
        board_size=rules.board_size,
        map_id=board_map.id if board_map else None,
        map_name=board_map.name if board_map else None,
        snake_positions=snakes,
        success=True,
    )
