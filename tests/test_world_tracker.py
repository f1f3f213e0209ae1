# tests/test_world_tracker.py
"""
Unit tests for WorldTracker.

Covers:
- ready snapshot
- position_update / dimension_change
- player_joined / player_left
- entity_update / entity_gone
- nearest_entity
"""

from __future__ import annotations

from bot_core.testing.fakes import FakePacketTransport
from bot_core.world_tracker import WorldTracker
from interfaces import Vec3


def test_ready_seeds_position_dimension_and_players() -> None:
    transport = FakePacketTransport()
    tracker = WorldTracker(transport)

    transport.emit(
        "ready",
        {
            "position": {"x": 1.5, "y": 70.0, "z": -3.25},
            "dimension": "the_nether",
            "players": ["Alice", "Bob"],
        },
    )

    assert tracker.position() == Vec3(1.5, 70.0, -3.25)
    assert tracker.dimension() == "the_nether"
    assert set(tracker.players()) == {"Alice", "Bob"}


def test_position_update_updates_own_position() -> None:
    transport = FakePacketTransport()
    tracker = WorldTracker(transport)

    transport.emit("position_update", {"x": 10.5, "y": 65.0, "z": -3.0})

    assert tracker.position() == Vec3(10.5, 65.0, -3.0)


def test_malformed_position_update_keeps_previous_position() -> None:
    transport = FakePacketTransport()
    tracker = WorldTracker(transport)
    transport.emit("position_update", {"x": 1.0, "y": 2.0, "z": 3.0})

    transport.emit("position_update", {"x": "north", "y": 2.0, "z": 3.0})

    assert tracker.position() == Vec3(1.0, 2.0, 3.0)


def test_dimension_change() -> None:
    transport = FakePacketTransport()
    tracker = WorldTracker(transport)

    transport.emit("dimension_change", {"dimension": "the_end"})

    assert tracker.dimension() == "the_end"


def test_player_join_and_leave() -> None:
    transport = FakePacketTransport()
    tracker = WorldTracker(transport)

    transport.emit("player_joined", {"username": "Alice"})
    transport.emit("player_joined", {"username": "Bob"})
    transport.emit("player_left", {"username": "Alice"})

    players = tracker.players()
    assert list(players) == ["Bob"]
    # Connected but not in range yet.
    assert players["Bob"].entity is None


def test_player_entity_is_attached_when_in_range() -> None:
    transport = FakePacketTransport()
    tracker = WorldTracker(transport)

    transport.emit("player_joined", {"username": "Alice"})
    transport.emit(
        "entity_update",
        {"entity_id": 7, "name": "player", "username": "Alice", "x": 5, "y": 64, "z": 5},
    )

    alice = tracker.players()["Alice"]
    assert alice.entity is not None
    assert alice.entity.position == Vec3(5.0, 64.0, 5.0)


def test_entity_update_moves_existing_entity() -> None:
    transport = FakePacketTransport()
    tracker = WorldTracker(transport)

    transport.emit("entity_update", {"entity_id": 3, "name": "villager", "x": 0, "y": 64, "z": 0})
    transport.emit("entity_update", {"entity_id": 3, "x": 4, "y": 64, "z": 0})

    entities = list(tracker.entities())
    assert len(entities) == 1
    assert entities[0].name == "villager"
    assert entities[0].position == Vec3(4.0, 64.0, 0.0)


def test_entity_gone_accepts_single_id_and_list() -> None:
    transport = FakePacketTransport()
    tracker = WorldTracker(transport)
    for eid in (1, 2, 3):
        transport.emit("entity_update", {"entity_id": eid, "name": "zombie", "x": eid, "y": 64, "z": 0})

    transport.emit("entity_gone", {"entity_id": 1})
    transport.emit("entity_gone", {"entity_ids": [2]})

    assert [e.entity_id for e in tracker.entities()] == [3]


def test_nearest_entity_respects_predicate_and_distance() -> None:
    transport = FakePacketTransport()
    tracker = WorldTracker(transport)
    transport.emit("position_update", {"x": 0, "y": 64, "z": 0})
    transport.emit("entity_update", {"entity_id": 1, "name": "villager", "x": 30, "y": 64, "z": 0})
    transport.emit("entity_update", {"entity_id": 2, "name": "villager", "x": 10, "y": 64, "z": 0})
    transport.emit("entity_update", {"entity_id": 3, "name": "zombie", "x": 1, "y": 64, "z": 0})

    nearest = tracker.nearest_entity(lambda e: e.name == "villager")

    assert nearest is not None
    assert nearest.entity_id == 2
    assert tracker.nearest_entity(lambda e: e.name == "creeper") is None


def test_reset_forgets_everything() -> None:
    transport = FakePacketTransport()
    tracker = WorldTracker(transport)
    transport.emit("player_joined", {"username": "Alice"})
    transport.emit("entity_update", {"entity_id": 1, "name": "cow", "x": 0, "y": 0, "z": 0})

    tracker.reset()

    assert tracker.players() == {}
    assert list(tracker.entities()) == []
