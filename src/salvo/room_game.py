"""Implements the room state machine: membership, readiness, turns and leaving.

Every function here is synchronous and touches only the Room it is given, so
the caller is responsible for serialising access to shared rooms.

"""
import random
import time
from typing import Optional

from loguru import logger

from .room_state import (
    MAX_PLAYERS,
    AlreadyInRoom,
    AttackResult,
    InvalidStateTransition,
    LeaveResult,
    Player,
    ReadyChange,
    Room,
    RoomFull,
    RoomState,
)

HIT_PROBABILITY = 0.5

# Allowed state changes. Room deletion is handled by the registry, not here.
TRANSITIONS = {
    RoomState.WAITING: {RoomState.PLAYING},
    RoomState.PLAYING: set(),
}


def default_display_name(slot: int) -> str:
    return f"Player {slot}"


def transition(room: Room, new_state: RoomState):
    """Move a room to a new state.

    Raises InvalidStateTransition if the transition table does not allow it.

    """
    if new_state not in TRANSITIONS[room.state]:
        raise InvalidStateTransition(room.state, new_state)
    room.state = new_state


def can_attack(room: Room) -> bool:
    return room.state == RoomState.PLAYING


def next_turn_slot(slot: int) -> int:
    """Fixed round robin over seat numbers: 1 -> 2 -> 3 -> 1."""
    return slot % MAX_PLAYERS + 1


def join(room: Room, connection_id: str, display_name: Optional[str] = None) -> Player:
    """Seat a connection in the room and return the new Player.

    The new player takes the lowest vacant seat, so seated players never
    share a slot. Raises RoomFull if the room already has MAX_PLAYERS
    players. Raises AlreadyInRoom if the connection holds a seat already.

    """
    if room.find_player(connection_id) is not None:
        raise AlreadyInRoom(room.id, connection_id)
    if len(room.players) >= MAX_PLAYERS:
        raise RoomFull(room.id)

    slot = room.free_slot()
    player = Player(
        connection_id=connection_id,
        display_name=display_name or default_display_name(slot),
        slot=slot,
    )
    room.players.append(player)
    return player


def set_ready(room: Room, connection_id: str) -> Optional[ReadyChange]:
    """Mark a seated player as ready, starting the game once all three are.

    Returns None when the connection has no seat in the room, so stale events
    arriving after a leave are ignored.

    """
    player = room.find_player(connection_id)
    if player is None:
        logger.debug(f"Ignoring ready from unseated connection {connection_id} in room {room.id}")
        return None

    player.ready = True

    all_ready = (len(room.players) == MAX_PLAYERS
                 and all(p.ready for p in room.players))
    game_started = False
    if all_ready and room.state == RoomState.WAITING:
        transition(room, RoomState.PLAYING)
        room.current_turn_slot = 1
        game_started = True

    return ReadyChange(
        player=player,
        players=room.players_as_dicts(),
        game_started=game_started,
    )


def attack(room: Room, attacker_slot: Optional[int], target_slot: Optional[int],
           row, col, rng: Optional[random.Random] = None) -> Optional[AttackResult]:
    """Resolve one attack and pass the turn on.

    Returns None if the room is not PLAYING. The hit outcome is a coin flip;
    the turn advances by seat number regardless of who attacked whom.

    """
    if not can_attack(room):
        logger.debug(f"Ignoring attack in room {room.id} while {room.state.value}")
        return None

    rng = rng or random
    is_hit = rng.random() < HIT_PROBABILITY

    room.current_turn_slot = next_turn_slot(room.current_turn_slot)
    if room.current_turn_slot not in room.occupied_slots():
        logger.warning(f"Room {room.id}: turn passed to vacant seat {room.current_turn_slot}")

    return AttackResult(
        attacker=attacker_slot,
        target=target_slot,
        row=row,
        col=col,
        is_hit=is_hit,
        timestamp=int(time.time() * 1000),
        current_turn=room.current_turn_slot,
    )


def leave(room: Room, connection_id: str) -> LeaveResult:
    """Remove a connection's player from the room, if it has one.

    Leaving never changes the room state or whose turn it is.

    """
    player = room.find_player(connection_id)
    if player is not None:
        room.players.remove(player)

    return LeaveResult(
        removed=player is not None,
        room_empty=room.is_empty(),
        players=room.players_as_dicts(),
    )
