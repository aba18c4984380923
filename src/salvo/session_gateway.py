"""
Session gateway between Socket.IO connections and the room state machine.

Each handler takes the connection id of the sender and the event payload and
returns the outbound messages the transport has to deliver, in order. The
gateway never talks to the network itself.
"""

import random
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Union

from loguru import logger

from . import room_game
from .join_link import JoinLinkService
from .room_server import RoomRegistry
from .room_state import AlreadyInRoom, RoomFull, RoomNotFound

ERROR_MESSAGES = {
    RoomNotFound: 'Room not found',
    RoomFull: 'Room is full',
    AlreadyInRoom: 'You are already in this room',
}


@dataclass(frozen=True)
class JoinGroup:
    """Subscribe a connection to a room's broadcast group."""
    connection_id: str
    room_id: str


@dataclass(frozen=True)
class Unicast:
    """Send an event to a single connection."""
    event: str
    payload: dict
    connection_id: str


@dataclass(frozen=True)
class Broadcast:
    """Send an event to every connection in a room's group."""
    event: str
    payload: dict
    room_id: str


Outbound = Union[JoinGroup, Unicast, Broadcast]


def _payload(data) -> dict:
    return data if isinstance(data, dict) else {}


class SessionGateway(object):
    """Translates client events into room transitions.

    Also keeps the reverse lookup from connection id to the rooms it holds
    a seat in, which is what disconnect cleanup walks.

    `lock` is re-entrant so the transport can hold it across a handler call
    and the delivery of its messages.

    """

    def __init__(self, registry: RoomRegistry, join_links: JoinLinkService,
                 rng: Optional[random.Random] = None):
        self.registry = registry
        self.join_links = join_links
        self.rng = rng or random.Random()
        self.connection_rooms: Dict[str, Set[str]] = {}
        self.lock = threading.RLock()

    def _track(self, connection_id: str, room_id: str):
        self.connection_rooms.setdefault(connection_id, set()).add(room_id)

    def rooms_of(self, connection_id: str) -> List[str]:
        return sorted(self.connection_rooms.get(connection_id, ()))

    def create_room(self, connection_id: str, data) -> List[Outbound]:
        data = _payload(data)
        with self.lock:
            room = self.registry.create_room(connection_id, data.get('playerName'))
            self._track(connection_id, room.id)
            players = room.players_as_dicts()
        logger.info(f"Room {room.id} created by {connection_id}")

        # Only the room id is needed here, so this runs outside the lock.
        join_url = self.join_links.join_url(room.id)
        qr_code = self.join_links.qr_data_url(join_url)

        return [
            JoinGroup(connection_id, room.id),
            Unicast('room-created', {
                'roomId': room.id,
                'playerNum': 1,
                'qrCode': qr_code,
                'roomUrl': join_url,
                'players': players,
            }, connection_id),
        ]

    def join_room(self, connection_id: str, data) -> List[Outbound]:
        data = _payload(data)
        room_id = data.get('roomId')
        with self.lock:
            try:
                room = self.registry.require_room(room_id)
                player = room_game.join(room, connection_id, data.get('playerName'))
            except (RoomNotFound, RoomFull, AlreadyInRoom) as e:
                logger.info(f"Join of {connection_id} to room {room_id} refused: {e}")
                return [Unicast('error', {'message': ERROR_MESSAGES[type(e)]}, connection_id)]
            self._track(connection_id, room.id)
            players = room.players_as_dicts()
        logger.info(f"{player.display_name} joined room {room.id} at slot {player.slot}")

        return [
            JoinGroup(connection_id, room.id),
            Broadcast('player-joined', {
                'player': player.to_dict(),
                'players': players,
            }, room.id),
            Unicast('room-joined', {
                'roomId': room.id,
                'playerNum': player.slot,
                'players': players,
            }, connection_id),
        ]

    def player_ready(self, connection_id: str, data) -> List[Outbound]:
        data = _payload(data)
        with self.lock:
            room = self.registry.get_room(data.get('roomId'))
            if room is None:
                logger.debug(f"Ignoring ready from {connection_id} for unknown room {data.get('roomId')}")
                return []
            change = room_game.set_ready(room, connection_id)
            if change is None:
                return []
            current_turn = room.current_turn_slot

        messages = [
            Broadcast('player-ready-changed', {
                'playerId': connection_id,
                'playerNum': change.player.slot,
                'ready': True,
                'players': change.players,
            }, room.id),
        ]
        if change.game_started:
            logger.info(f"Game started in room {room.id}")
            messages.append(Broadcast('game-started', {
                'currentPlayer': current_turn,
                'players': change.players,
            }, room.id))
        return messages

    def attack(self, connection_id: str, data) -> List[Outbound]:
        data = _payload(data)
        with self.lock:
            room = self.registry.get_room(data.get('roomId'))
            if room is None:
                return []
            attacker = room.find_player(connection_id)
            if attacker is None:
                logger.debug(f"Ignoring attack from unseated connection {connection_id} in room {room.id}")
                return []
            result = room_game.attack(
                room,
                attacker.slot,
                data.get('targetPlayer'),
                data.get('row'),
                data.get('col'),
                rng=self.rng,
            )
        if result is None:
            return []

        logger.debug(f"Room {room.id}: turn changed to {result.current_turn}")
        return [
            Broadcast('attack-result', result.to_dict(), room.id),
            Broadcast('turn-changed', {'currentPlayer': result.current_turn}, room.id),
        ]

    def disconnect(self, connection_id: str) -> List[Outbound]:
        messages = []
        with self.lock:
            for room_id in sorted(self.connection_rooms.pop(connection_id, ())):
                room = self.registry.get_room(room_id)
                if room is None:
                    continue
                result = room_game.leave(room, connection_id)
                if not result.removed:
                    continue
                if result.room_empty:
                    self.registry.remove_room(room_id)
                    logger.info(f"Room {room_id} removed, last player left")
                else:
                    messages.append(Broadcast('player-left', {'playerId': connection_id}, room_id))
        return messages
