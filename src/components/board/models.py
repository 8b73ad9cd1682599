"""
Board component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from src.domain.entities import BoardMap, BoardRule, Room, User


@dataclass(frozen=True)
class CreateRoomInput:
    room_number: str
    capacity: int = 1
    room_type: str = "NON_TECH"
    floor: int | None = None
    actor: User | None = None


@dataclass(frozen=True)
class UpdateRoomInput:
    room_id: UUID
    capacity: int | None = None
    room_type: str | None = None
    floor: int | None = None
    actor: User | None = None


@dataclass(frozen=True)
class CreateMapInput:
    name: str
    snake_positions: list[int] = field(default_factory=list)
    actor: User | None = None


@dataclass(frozen=True)
class AddRuleInput:
    map_id: UUID
    start_pos: int
    actor: User | None = None


@dataclass
class RoomView:
    room: Room
    occupancy: int = 0


@dataclass
class RoomOutput:
    room: Room | None = None
    success: bool = False
    error: str | None = None
    error_code: str | None = None


@dataclass
class RoomListOutput:
    rooms: list[RoomView] = field(default_factory=list)
    success: bool = False
    error: str | None = None
    error_code: str | None = None


@dataclass
class MapView:
    board_map: BoardMap
    snakes: list[BoardRule] = field(default_factory=list)
    team_count: int = 0


@dataclass
class MapOutput:
    view: MapView | None = None
    success: bool = False
    error: str | None = None
    error_code: str | None = None


@dataclass
class MapListOutput:
    maps: list[MapView] = field(default_factory=list)
    success: bool = False
    error: str | None = None
    error_code: str | None = None


@dataclass
class RuleOutput:
    rule: BoardRule | None = None
    success: bool = False
    error: str | None = None
    error_code: str | None = None


@dataclass
class BoardOutput:
    board_size: int = 0
    map_id: UUID | None = None
    map_name: str | None = None
    snake_positions: list[int] = field(default_factory=list)
    success: bool = False
    error: str | None = None
    error_code: str | None = None
