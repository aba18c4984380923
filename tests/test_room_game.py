"""
Unit tests for the room state machine in room_game
"""

import random
import unittest

from src.salvo import room_game
from src.salvo.room_state import (
    AlreadyInRoom, InvalidStateTransition, Room, RoomFull, RoomState,
)


def make_room(*connection_ids):
    """Room with the given connections seated in order."""
    room = Room(id="AbC123", host_connection_id=connection_ids[0])
    for connection_id in connection_ids:
        room_game.join(room, connection_id)
    return room


def make_playing_room():
    room = make_room("a", "b", "c")
    for connection_id in ("a", "b", "c"):
        room_game.set_ready(room, connection_id)
    return room


class FixedRng:
    """Stands in for random.Random with a constant draw."""

    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value


class TestJoin(unittest.TestCase):
    """Test cases for seating players"""

    def test_slots_assigned_in_join_order(self):
        room = make_room("a", "b", "c")
        self.assertEqual([p.slot for p in room.players], [1, 2, 3])
        self.assertEqual([p.connection_id for p in room.players], ["a", "b", "c"])

    def test_new_player_not_ready(self):
        room = make_room("a")
        player = room_game.join(room, "b", "Bob")
        self.assertEqual(player.display_name, "Bob")
        self.assertFalse(player.ready)

    def test_default_name_uses_slot(self):
        room = make_room("a")
        player = room_game.join(room, "b")
        self.assertEqual(player.display_name, "Player 2")

    def test_fourth_join_rejected(self):
        room = make_room("a", "b", "c")
        with self.assertRaises(RoomFull):
            room_game.join(room, "d")
        self.assertEqual(len(room.players), 3)

    def test_same_connection_cannot_join_twice(self):
        room = make_room("a", "b")
        with self.assertRaises(AlreadyInRoom):
            room_game.join(room, "b")
        self.assertEqual(len(room.players), 2)

    def test_remaining_slots_unchanged_after_leave(self):
        room = make_room("a", "b", "c")
        room_game.leave(room, "b")
        self.assertEqual(room.occupied_slots(), [1, 3])

    def test_join_after_leave_takes_vacant_seat(self):
        room = make_room("a", "b", "c")
        room_game.leave(room, "b")
        player = room_game.join(room, "d")
        self.assertEqual(player.slot, 2)
        self.assertEqual(sorted(room.occupied_slots()), [1, 2, 3])

    def test_join_after_last_seat_leaves(self):
        room = make_room("a", "b", "c")
        room_game.leave(room, "c")
        player = room_game.join(room, "d")
        self.assertEqual(player.slot, 3)
        self.assertEqual(player.display_name, "Player 3")

    def test_seated_players_never_share_a_slot(self):
        room = make_room("a", "b")
        room_game.leave(room, "a")
        room_game.join(room, "c")
        room_game.join(room, "d")
        slots = room.occupied_slots()
        self.assertEqual(sorted(slots), [1, 2, 3])
        with self.assertRaises(RoomFull):
            room_game.join(room, "e")


class TestSetReady(unittest.TestCase):
    """Test cases for readiness and game start"""

    def test_room_refilled_before_start_can_start(self):
        room = make_room("a", "b", "c")
        room_game.leave(room, "c")
        room_game.join(room, "d")
        for connection_id in ("a", "b"):
            self.assertFalse(room_game.set_ready(room, connection_id).game_started)
        self.assertTrue(room_game.set_ready(room, "d").game_started)
        self.assertEqual(room.state, RoomState.PLAYING)

    def test_ready_sets_flag(self):
        room = make_room("a", "b")
        change = room_game.set_ready(room, "b")
        self.assertTrue(room.players[1].ready)
        self.assertEqual(change.player.slot, 2)
        self.assertFalse(change.game_started)
        self.assertEqual(change.players[1]['ready'], True)
        self.assertEqual(room.state, RoomState.WAITING)

    def test_unknown_connection_ignored(self):
        room = make_room("a")
        self.assertIsNone(room_game.set_ready(room, "ghost"))
        self.assertFalse(room.players[0].ready)

    def test_two_ready_players_do_not_start(self):
        room = make_room("a", "b")
        room_game.set_ready(room, "a")
        change = room_game.set_ready(room, "b")
        self.assertFalse(change.game_started)
        self.assertEqual(room.state, RoomState.WAITING)

    def test_third_ready_starts_game(self):
        room = make_room("a", "b", "c")
        self.assertFalse(room_game.set_ready(room, "a").game_started)
        self.assertFalse(room_game.set_ready(room, "b").game_started)
        change = room_game.set_ready(room, "c")
        self.assertTrue(change.game_started)
        self.assertEqual(room.state, RoomState.PLAYING)
        self.assertEqual(room.current_turn_slot, 1)

    def test_ready_again_does_not_restart(self):
        room = make_playing_room()
        room_game.attack(room, 1, 2, 0, 0, rng=FixedRng(0.9))
        change = room_game.set_ready(room, "a")
        self.assertFalse(change.game_started)
        self.assertEqual(room.current_turn_slot, 2)


class TestTransitions(unittest.TestCase):
    """Test cases for the explicit state table"""

    def test_playing_cannot_go_back_to_waiting(self):
        room = make_playing_room()
        with self.assertRaises(InvalidStateTransition):
            room_game.transition(room, RoomState.WAITING)
        self.assertEqual(room.state, RoomState.PLAYING)

    def test_waiting_to_waiting_invalid(self):
        room = make_room("a")
        with self.assertRaises(InvalidStateTransition):
            room_game.transition(room, RoomState.WAITING)

    def test_can_attack_only_while_playing(self):
        self.assertFalse(room_game.can_attack(make_room("a", "b", "c")))
        self.assertTrue(room_game.can_attack(make_playing_room()))


class TestAttack(unittest.TestCase):
    """Test cases for attacks and turn rotation"""

    def test_attack_ignored_while_waiting(self):
        room = make_room("a", "b", "c")
        self.assertIsNone(room_game.attack(room, 1, 2, 3, 4))
        self.assertIsNone(room.current_turn_slot)

    def test_attack_result_fields(self):
        room = make_playing_room()
        result = room_game.attack(room, 1, 3, 4, 5, rng=FixedRng(0.1))
        self.assertTrue(result.is_hit)
        self.assertEqual(result.attacker, 1)
        self.assertEqual(result.target, 3)
        self.assertEqual((result.row, result.col), (4, 5))
        self.assertIsInstance(result.timestamp, int)
        self.assertEqual(result.to_dict()['isHit'], True)

    def test_coordinates_passed_through(self):
        room = make_playing_room()
        result = room_game.attack(room, 1, 2, "B", [3], rng=FixedRng(0.2))
        self.assertEqual(result.to_dict()['row'], "B")
        self.assertEqual(result.to_dict()['col'], [3])

    def test_miss(self):
        room = make_playing_room()
        result = room_game.attack(room, 1, 3, 4, 5, rng=FixedRng(0.7))
        self.assertFalse(result.is_hit)

    def test_turn_cycles_one_two_three(self):
        room = make_playing_room()
        rng = random.Random(7)
        turns = [room_game.attack(room, 1, 2, 0, 0, rng=rng).current_turn for _ in range(6)]
        self.assertEqual(turns, [2, 3, 1, 2, 3, 1])

    def test_turn_ignores_attacker_and_target(self):
        room = make_playing_room()
        result = room_game.attack(room, 3, 1, 0, 0, rng=FixedRng(0.2))
        self.assertEqual(result.current_turn, 2)

    def test_turn_passes_through_vacated_seat(self):
        room = make_playing_room()
        room_game.leave(room, "b")
        result = room_game.attack(room, 1, 3, 0, 0, rng=FixedRng(0.2))
        self.assertEqual(result.current_turn, 2)
        self.assertEqual(room.occupied_slots(), [1, 3])

    def test_hit_rate_roughly_half(self):
        room = make_playing_room()
        rng = random.Random(42)
        hits = sum(room_game.attack(room, 1, 2, 0, 0, rng=rng).is_hit for _ in range(2000))
        self.assertTrue(800 < hits < 1200)


class TestLeave(unittest.TestCase):
    """Test cases for players leaving"""

    def test_leave_removes_player(self):
        room = make_room("a", "b", "c")
        result = room_game.leave(room, "b")
        self.assertTrue(result.removed)
        self.assertFalse(result.room_empty)
        self.assertEqual([p['playerNum'] for p in result.players], [1, 3])

    def test_leave_unknown_connection_noop(self):
        room = make_room("a")
        result = room_game.leave(room, "ghost")
        self.assertFalse(result.removed)
        self.assertFalse(result.room_empty)
        self.assertEqual(len(room.players), 1)

    def test_last_leave_empties_room(self):
        room = make_room("a")
        self.assertTrue(room_game.leave(room, "a").room_empty)

    def test_leave_mid_game_keeps_state_and_turn(self):
        room = make_playing_room()
        room_game.attack(room, 1, 2, 0, 0, rng=FixedRng(0.2))
        room_game.leave(room, "b")
        self.assertEqual(room.state, RoomState.PLAYING)
        self.assertEqual(room.current_turn_slot, 2)


if __name__ == '__main__':
    unittest.main()
