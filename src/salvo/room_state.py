"""Contains basic data structures that represent a Salvo room and its players

The state machine that mutates rooms is contained in room_game.py.

"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Optional


MAX_PLAYERS = 3


class SalvoError(Exception):
    """Base class for all room errors."""
    pass


class RoomNotFound(SalvoError):
    """Exception raised when a room id does not refer to a live room.

    Attributes
    ----------
    room_id : str
        The room id that was looked up
    """

    def __init__(self, room_id: str):
        self.room_id = room_id
        super().__init__(f"Room '{room_id}' not found")


class RoomFull(SalvoError):
    """Exception raised when a room has no free seat left."""

    def __init__(self, room_id: str):
        self.room_id = room_id
        super().__init__(f"Room '{room_id}' is full")


class AlreadyInRoom(SalvoError):
    """Exception raised when a connection tries to take a second seat."""

    def __init__(self, room_id: str, connection_id: str):
        self.room_id = room_id
        self.connection_id = connection_id
        super().__init__(f"Connection '{connection_id}' is already in room '{room_id}'")


class InvalidStateTransition(SalvoError):
    """Exception raised when a room is asked to make an illegal state change.

    Attributes
    ----------
    current : RoomState
        The state the room was in
    requested : RoomState
        The state that was requested
    """

    def __init__(self, current: 'RoomState', requested: 'RoomState'):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot transition from {current.value} to {requested.value}")


class RoomState(Enum):
    WAITING = 'waiting'
    PLAYING = 'playing'


@dataclass
class Player:
    """A seated participant of a room.

    Attributes
    ----------
    connection_id : str
        Id of the connection that owns this seat
    display_name : str
        Name shown to the other players
    slot : int
        Permanent seat number in the room, 1 to 3
    ready : bool
        Whether the player has readied up
    """
    connection_id: str
    display_name: str
    slot: int
    ready: bool = False

    def to_dict(self) -> dict:
        """Wire representation used in every event payload."""
        return {
            'id': self.connection_id,
            'name': self.display_name,
            'playerNum': self.slot,
            'ready': self.ready,
        }


@dataclass
class Room:
    """A game session holding up to MAX_PLAYERS players.

    Attributes
    ----------
    id : str
        Short token identifying the room
    host_connection_id : str
        Connection that created the room
    players : List[Player]
        Seated players in join order
    state : RoomState
        WAITING until all three players are ready, then PLAYING
    current_turn_slot : Optional[int]
        Seat whose turn it is; None while WAITING
    created_at : str
        ISO timestamp of creation, informational only
    """
    id: str
    host_connection_id: str
    players: List[Player] = field(default_factory=list)
    state: RoomState = RoomState.WAITING
    current_turn_slot: Optional[int] = None
    created_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    def find_player(self, connection_id: str) -> Optional[Player]:
        for player in self.players:
            if player.connection_id == connection_id:
                return player
        return None

    def occupied_slots(self) -> List[int]:
        return [player.slot for player in self.players]

    def free_slot(self) -> Optional[int]:
        """Lowest seat number no current player holds."""
        occupied = self.occupied_slots()
        for slot in range(1, MAX_PLAYERS + 1):
            if slot not in occupied:
                return slot
        return None

    def is_empty(self) -> bool:
        return len(self.players) == 0

    def players_as_dicts(self) -> List[dict]:
        return [player.to_dict() for player in self.players]


@dataclass(frozen=True)
class ReadyChange:
    """Outcome of a player readying up."""
    player: Player
    players: List[dict]
    game_started: bool


@dataclass(frozen=True)
class AttackResult:
    """Outcome of one attack, including the turn that follows it."""
    attacker: Optional[int]
    target: Optional[int]
    row: Any
    col: Any
    is_hit: bool
    timestamp: int
    current_turn: int

    def to_dict(self) -> dict:
        return {
            'attacker': self.attacker,
            'target': self.target,
            'row': self.row,
            'col': self.col,
            'isHit': self.is_hit,
            'timestamp': self.timestamp,
        }


@dataclass(frozen=True)
class LeaveResult:
    """Outcome of a connection leaving a room."""
    removed: bool
    room_empty: bool
    players: List[dict]
