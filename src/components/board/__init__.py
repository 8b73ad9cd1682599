"""
Board component - rooms, maps and snake rules.
"""

from .component import (
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

__all__ = [
    # Rooms
    "run_list_rooms",
    "run_create_room",
    "run_update_room",
    "run_delete_room",
    # Maps
    "run_list_maps",
    "run_get_map",
    "run_create_map",
    "run_delete_map",
    "run_add_snake",
    "run_delete_rule",
    "run_board_for_team",
    # Models
    "CreateRoomInput",
    "UpdateRoomInput",
    "CreateMapInput",
    "AddRuleInput",
    "RoomView",
    "RoomOutput",
    "RoomListOutput",
    "MapView",
    "MapOutput",
    "MapListOutput",
    "RuleOutput",
    "BoardOutput",
]
