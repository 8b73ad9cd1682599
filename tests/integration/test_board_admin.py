from uuid import uuid4

import pytest

from src.components.board import (
    AddRuleInput,
    CreateMapInput,
    CreateRoomInput,
    UpdateRoomInput,
    run_add_snake,
    run_board_for_team,
    run_create_map,
    run_create_room,
    run_delete_map,
    run_delete_room,
    run_delete_rule,
    run_get_map,
    run_list_maps,
    run_list_rooms,
    run_update_room,
)
from src.domain.entities import BoardMap


class TestRooms:
    def test_floor_taken_from_room_number(self, store):
        result = run_create_room(
            CreateRoomInput(room_number=" AB1 305 ", capacity=4, room_type="TECH"), store
        )
        assert result.success
        assert result.room.room_number == "AB1 305"
        assert result.room.floor == 3

    def test_duplicate_room(self, store, rooms):
        result = run_create_room(CreateRoomInput(room_number="AB1 101"), store)
        assert result.error_code == "conflict"

    @pytest.mark.parametrize(
        "inp",
        [
            CreateRoomInput(room_number=""),
            CreateRoomInput(room_number="AB1 150", capacity=0),
            CreateRoomInput(room_number="AB1 150", room_type="LAB"),
        ],
    )
    def test_invalid_room(self, store, inp):
        assert run_create_room(inp, store).error_code == "invalid"

    def test_list_shows_occupancy(self, store, team):
        listing = {v.room.room_number: v.occupancy for v in run_list_rooms(store).rooms}
        assert len(listing) == 14
        assert listing["AB1 104"] == 1
        assert listing["AB1 101"] == 0

    def test_update_room(self, store, rooms):
        room = store.rooms.get_by_number("AB1 101")
        result = run_update_room(
            UpdateRoomInput(room_id=room.id, capacity=20, room_type="NON_TECH"), store
        )
        assert (result.room.capacity, result.room.room_type) == (20, "NON_TECH")
        assert store.rooms.get_by_id(room.id).capacity == 20

    def test_update_rejects_bad_capacity(self, store, rooms):
        room = store.rooms.get_by_number("AB1 101")
        result = run_update_room(UpdateRoomInput(room_id=room.id, capacity=0), store)
        assert result.error_code == "invalid"

    def test_delete_occupied_room(self, store, team):
        occupied = store.rooms.get_by_number("AB1 104")
        assert run_delete_room(occupied.id, store).error_code == "conflict"

        empty = store.rooms.get_by_number("AB1 207")
        assert run_delete_room(empty.id, store).success
        assert store.rooms.get_by_number("AB1 207") is None

    def test_delete_unknown_room(self, store):
        assert run_delete_room(uuid4(), store).error_code == "not_found"


class TestMaps:
    def test_create_map_deduplicates_snakes(self, store, rules):
        result = run_create_map(
            CreateMapInput(name="Map-X", snake_positions=[40, 12, 40]), store, rules.game
        )
        assert result.success
        assert [s.start_pos for s in result.view.snakes] == [12, 40]

    @pytest.mark.parametrize("position", [1, 150, 0])
    def test_snake_must_be_inside_board(self, store, rules, position):
        result = run_create_map(
            CreateMapInput(name="Map-Bad", snake_positions=[position]), store, rules.game
        )
        assert result.error_code == "invalid"
        assert store.maps.get_by_name("Map-Bad") is None

    def test_duplicate_map_name(self, store, rules):
        run_create_map(CreateMapInput(name="Map-1"), store, rules.game)
        assert run_create_map(CreateMapInput(name="Map-1"), store, rules.game).error_code == (
            "conflict"
        )

    def test_add_and_remove_snake(self, store, rules):
        board_map = run_create_map(CreateMapInput(name="Map-Y"), store, rules.game).view.board_map
        added = run_add_snake(AddRuleInput(map_id=board_map.id, start_pos=77), store, rules.game)
        assert added.success
        assert store.maps.snake_positions(board_map.id) == {77}

        again = run_add_snake(AddRuleInput(map_id=board_map.id, start_pos=77), store, rules.game)
        assert again.error_code == "conflict"

        assert run_delete_rule(added.rule.id, store).success
        assert store.maps.snake_positions(board_map.id) == set()
        assert run_delete_rule(added.rule.id, store).error_code == "not_found"

    def test_add_snake_to_unknown_map(self, store, rules):
        result = run_add_snake(AddRuleInput(map_id=uuid4(), start_pos=10), store, rules.game)
        assert result.error_code == "not_found"

    def test_map_in_use_cannot_be_deleted(self, store, rules, team):
        view = run_create_map(CreateMapInput(name="Map-Z", snake_positions=[9]), store, rules.game)
        store.teams.save(team.model_copy(update={"map_id": view.view.board_map.id}))

        assert run_get_map(view.view.board_map.id, store).view.team_count == 1
        assert run_delete_map(view.view.board_map.id, store).error_code == "conflict"

    def test_delete_map(self, store, rules):
        view = run_create_map(CreateMapInput(name="Map-Q", snake_positions=[9]), store, rules.game)
        assert run_delete_map(view.view.board_map.id, store).success
        assert run_get_map(view.view.board_map.id, store).error_code == "not_found"

    def test_list_active_only(self, store, rules):
        run_create_map(CreateMapInput(name="Map-A"), store, rules.game)
        store.maps.save(BoardMap(name="Map-Retired", is_active=False))

        assert [v.board_map.name for v in run_list_maps(store).maps] == ["Map-A"]
        assert len(run_list_maps(store, active_only=False).maps) == 2


def test_board_for_team(store, rules, team):
    board_map = run_create_map(
        CreateMapInput(name="Map-B", snake_positions=[30, 7]), store, rules.game
    ).view.board_map
    assert run_board_for_team(team.id, store, rules.game).map_id is None

    store.teams.save(team.model_copy(update={"map_id": board_map.id}))
    board = run_board_for_team(team.id, store, rules.game)
    assert board.board_size == 150
    assert board.map_name == "Map-B"
    assert board.snake_positions == [7, 30]
