# tests/test_bridge_game_client.py
"""
Integration tests for BridgeGameClient using FakePacketTransport.

Covers:
- connect / quit packets
- chat, whisper, look_at and control packets
- lifecycle events (ready, chat, whisper, error, disconnected)
- pathfinder exposure and goal packets
- find_blocks request parsing
"""

from __future__ import annotations

from typing import Any, List

import pytest

from bot_core import BridgeGameClient, GameClientError
from bot_core.testing.fakes import FakePacketTransport
from env.schema import ServerConfig
from interfaces import BlockQuery, GoalNear, Vec3


def make_client() -> tuple:
    transport = FakePacketTransport()
    client = BridgeGameClient(
        ServerConfig(host="mc.example.org", port=25565, version="1.20.1"),
        "AIBot",
        transport,
    )
    return client, transport


def test_connect_sends_offline_connect_packet() -> None:
    client, transport = make_client()

    client.connect()

    assert transport.connected
    assert transport.sent_of_type("connect") == [
        {
            "host": "mc.example.org",
            "port": 25565,
            "username": "AIBot",
            "version": "1.20.1",
            "auth": "offline",
        }
    ]


def test_connect_failure_raises_game_client_error() -> None:
    client, transport = make_client()
    transport.fail_connect = True

    with pytest.raises(GameClientError) as excinfo:
        client.connect()

    assert excinfo.value.code == "bridge_connect_failed"


def test_quit_is_idempotent() -> None:
    client, transport = make_client()
    client.connect()

    client.quit()
    client.quit()

    assert len(transport.sent_of_type("quit")) == 1
    assert not transport.connected


def test_output_packets() -> None:
    client, transport = make_client()
    client.connect()

    client.chat("hello")
    client.whisper("Alice", "psst")
    client.look_at(Vec3(1.0, 2.0, 3.0))
    client.set_control_state("forward", True)

    assert transport.sent_of_type("chat") == [{"text": "hello"}]
    assert transport.sent_of_type("whisper") == [{"username": "Alice", "text": "psst"}]
    assert transport.sent_of_type("look_at") == [{"x": 1.0, "y": 2.0, "z": 3.0}]
    assert transport.sent_of_type("control") == [{"control": "forward", "state": True}]


def test_chat_before_connect_raises() -> None:
    client, _ = make_client()

    with pytest.raises(GameClientError):
        client.chat("too early")


def test_lifecycle_events_are_forwarded() -> None:
    client, transport = make_client()
    seen: List[Any] = []
    client.on("ready", lambda: seen.append("ready"))
    client.on("chat", lambda user, msg: seen.append(("chat", user, msg)))
    client.on("whisper", lambda user, msg: seen.append(("whisper", user, msg)))
    client.on("error", lambda err: seen.append(("error", err.code)))
    client.on("disconnected", lambda reason: seen.append(("disconnected", reason)))
    client.connect()

    transport.emit("ready", {"pathfinder": False})
    transport.emit("chat", {"username": "Alice", "message": "hi"})
    transport.emit("whisper", {"username": "Bob", "message": "secret"})
    transport.emit("chat", {"username": "Alice"})  # malformed, dropped
    transport.emit("error", {"message": "boom"})
    transport.emit("end", {"reason": "kicked"})

    assert seen == [
        "ready",
        ("chat", "Alice", "hi"),
        ("whisper", "Bob", "secret"),
        ("error", "bridge_error"),
        ("disconnected", "kicked"),
    ]
    assert not transport.connected


def test_unknown_event_name_is_rejected() -> None:
    client, _ = make_client()

    with pytest.raises(ValueError):
        client.on("spawn", lambda: None)


def test_failing_handler_does_not_stop_other_handlers() -> None:
    client, transport = make_client()
    seen: List[str] = []

    def broken() -> None:
        raise RuntimeError("handler bug")

    client.on("ready", broken)
    client.on("ready", lambda: seen.append("second"))
    client.connect()

    transport.emit("ready", {})

    assert seen == ["second"]


def test_pathfinder_only_when_bridge_reports_one() -> None:
    client, transport = make_client()
    client.connect()

    transport.emit("ready", {"pathfinder": False})
    assert client.pathfinder is None

    transport.emit("ready", {"pathfinder": True})
    assert client.pathfinder is not None

    client.pathfinder.set_goal(GoalNear(x=1.0, y=2.0, z=3.0, radius=2.0))
    client.pathfinder.clear_goal()

    assert transport.sent_of_type("set_goal") == [{"x": 1.0, "y": 2.0, "z": 3.0, "radius": 2.0}]
    assert transport.sent_of_type("clear_goal") == [{}]


def test_find_blocks_parses_positions_and_skips_garbage() -> None:
    client, transport = make_client()
    client.connect()
    transport.responses["find_blocks"] = [
        {"x": 1, "y": 60, "z": 2},
        {"x": "bad"},
        "not a mapping",
        {"x": 4, "y": 61, "z": 5},
    ]
    query = BlockQuery(names=("water",), max_distance=100)

    result = client.find_blocks(query)

    assert result == [Vec3(1.0, 60.0, 2.0), Vec3(4.0, 61.0, 5.0)]
    assert transport.requests == [("find_blocks", query.to_payload())]


def test_find_blocks_rejects_non_list_result() -> None:
    client, transport = make_client()
    client.connect()
    transport.responses["find_blocks"] = {"oops": True}

    with pytest.raises(GameClientError) as excinfo:
        client.find_blocks(BlockQuery(names=("lava",)))

    assert excinfo.value.code == "bad_bridge_response"
