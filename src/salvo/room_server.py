import random
import string
from typing import Dict, List, Optional

from .room_game import join
from .room_state import Room, RoomNotFound

ROOM_ID_LENGTH = 6
ROOM_ID_ALPHABET = string.ascii_letters + string.digits


class RoomRegistry(object):
    """Holds every live room of the process.

    The model here is:
    - Each room has a unique 6 character id made of letters and digits.
    - A room is created with its host seated at slot 1.
    - A room is removed as soon as its last player leaves; the registry
      itself never inspects players, callers decide when to remove.

    """
    def __init__(self, rng: Optional[random.Random] = None):
        """Initialize the registry with no rooms."""
        self.rooms: Dict[str, Room] = {}
        self.rng = rng or random.SystemRandom()

    def __len__(self) -> int:
        return len(self.rooms)

    def __contains__(self, room_id: str) -> bool:
        return room_id in self.rooms

    def _generate_room_id(self) -> str:
        room_id = ''.join(self.rng.choices(ROOM_ID_ALPHABET, k=ROOM_ID_LENGTH))
        while room_id in self.rooms:
            room_id = ''.join(self.rng.choices(ROOM_ID_ALPHABET, k=ROOM_ID_LENGTH))
        return room_id

    def create_room(self, host_connection_id: str, display_name: Optional[str] = None) -> Room:
        """Create a room with the host as its only player and return it.

        """
        room = Room(id=self._generate_room_id(), host_connection_id=host_connection_id)
        join(room, host_connection_id, display_name)
        self.rooms[room.id] = room
        return room

    def get_room(self, room_id: str) -> Optional[Room]:
        """Look up a room; returns None if there is no such room.

        """
        return self.rooms.get(room_id)

    def require_room(self, room_id: str) -> Room:
        """Like get_room, but raises RoomNotFound if the room doesn't exist.

        """
        room = self.rooms.get(room_id)
        if room is None:
            raise RoomNotFound(room_id)
        return room

    def remove_room(self, room_id: str):
        """Remove the given room. Removing an unknown room does nothing.

        """
        self.rooms.pop(room_id, None)

    def list_rooms(self) -> List[str]:
        """Lists current room ids.

        """
        return list(self.rooms.keys())
