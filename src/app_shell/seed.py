"""Reference event data: the AB1 rooms and the standard board maps."""

import logging
import os

from src.adapters.auth.crypto import JWTAuthAdapter
from src.adapters.clock import SystemClock
from src.adapters.sqlite.repos import SQLiteUnitOfWork
from src.components.auth import CreateStaffInput, run_create_staff
from src.components.board import CreateMapInput, CreateRoomInput, run_create_map, run_create_room
from src.rules.models import Rules

logger = logging.getLogger(__name__)

# (room_number, capacity, floor, room_type); three TECH and four NON_TECH per floor.
ROOMS: list[tuple[str, int, int, str]] = [
    ("AB1 101", 8, 1, "TECH"),
    ("AB1 102", 7, 1, "TECH"),
    ("AB1 103", 6, 1, "TECH"),
    ("AB1 104", 9, 1, "NON_TECH"),
    ("AB1 105", 8, 1, "NON_TECH"),
    ("AB1 106", 7, 1, "NON_TECH"),
    ("AB1 107", 10, 1, "NON_TECH"),
    ("AB1 201", 8, 2, "TECH"),
    ("AB1 202", 7, 2, "TECH"),
    ("AB1 203", 6, 2, "TECH"),
    ("AB1 204", 9, 2, "NON_TECH"),
    ("AB1 205", 8, 2, "NON_TECH"),
    ("AB1 206", 7, 2, "NON_TECH"),
    ("AB1 207", 10, 2, "NON_TECH"),
]

BOARD_MAPS: dict[str, list[int]] = {
    "Map-1": [
        3, 8, 12, 16, 32, 39, 44, 47, 52, 58, 64, 67, 73, 78, 83, 89, 95, 99,
        101, 106, 111, 117, 124, 128, 133, 136, 143, 147, 149,
    ],
    "Map-2": [
        2, 6, 15, 18, 22, 29, 33, 37, 45, 48, 52, 57, 65, 68, 72, 77, 85, 88,
        92, 97, 105, 108, 112, 117, 125, 128, 132, 137, 143, 147, 149,
    ],
    "Map-3": [
        4, 9, 12, 19, 24, 28, 31, 39, 44, 48, 51, 59, 64, 68, 71, 79, 84, 88,
        91, 99, 104, 108, 111, 119, 124, 128, 131, 139, 143, 147, 149,
    ],
    "Map-4": [
        4, 10, 13, 17, 25, 28, 32, 39, 42, 49, 53, 58, 62, 69, 73, 78, 82, 89,
        93, 98, 102, 109, 113, 118, 122, 129, 133, 138, 143, 147, 149,
    ],
    "Map-5": [
        5, 9, 14, 19, 23, 28, 34, 37, 44, 49, 52, 59, 63, 68, 74, 77, 84, 89,
        94, 97, 103, 108, 114, 117, 124, 129, 134, 137, 143, 147, 149,
    ],
}


def seed_rooms(store: SQLiteUnitOfWork) -> int:
    created = 0
    for room_number, capacity, floor, room_type in ROOMS:
        if store.rooms.get_by_number(room_number):
            continue
        result = run_create_room(
            CreateRoomInput(
                room_number=room_number, capacity=capacity, room_type=room_type, floor=floor
            ),
            store,
        )
        if not result.success:
            raise RuntimeError(f"Seeding room {room_number} failed: {result.error}")
        created += 1
    return created


def seed_maps(store: SQLiteUnitOfWork, rules: Rules) -> int:
    created = 0
    for name, snakes in BOARD_MAPS.items():
        if store.maps.get_by_name(name):
            continue
        result = run_create_map(
            CreateMapInput(name=name, snake_positions=snakes), store, rules.game
        )
        if not result.success:
            raise RuntimeError(f"Seeding map {name} failed: {result.error}")
        created += 1
    return created


def seed_superadmin(store: SQLiteUnitOfWork, auth_adapter: JWTAuthAdapter) -> bool:
    """Create the superadmin named by SNL_SUPERADMIN_USERNAME / _PASSWORD, if set."""
    username = os.environ.get("SNL_SUPERADMIN_USERNAME")
    password = os.environ.get("SNL_SUPERADMIN_PASSWORD")
    if not username or not password:
        return False
    if store.users.get_by_username(username):
        logger.info("Superadmin %s already exists", username)
        return False
    result = run_create_staff(
        CreateStaffInput(username=username, password=password, role="superadmin"),
        store,
        auth_adapter,
        SystemClock(),
    )
    if not result.success:
        raise RuntimeError(f"Seeding superadmin failed: {result.error}")
    return True


def seed(db_path: str, rules: Rules) -> None:
    with SQLiteUnitOfWork(db_path) as store:
        rooms = seed_rooms(store)
        maps = seed_maps(store, rules)
        admin = seed_superadmin(store, JWTAuthAdapter())
    logger.info(
        "Seeded %d room(s), %d map(s)%s", rooms, maps, ", superadmin" if admin else ""
    )
