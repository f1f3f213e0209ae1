# tests/test_conversation_memory.py
"""
Tests for llm_stack.memory.ConversationMemory.

Covers:
- bound of 10 turns after every update
- context window of the most recent turns, oldest first
"""

from __future__ import annotations

from llm_stack.memory import CONTEXT_WINDOW, MAX_TURNS, ConversationMemory, Role


def test_record_exchange_appends_user_then_assistant() -> None:
    memory = ConversationMemory()

    memory.record_exchange("hi bot", "hello!")

    assert [(t.role, t.content) for t in memory.turns()] == [
        (Role.USER, "hi bot"),
        (Role.ASSISTANT, "hello!"),
    ]


def test_memory_never_exceeds_max_turns() -> None:
    memory = ConversationMemory()

    for i in range(12):
        memory.record_exchange(f"q{i}", f"a{i}")
        assert len(memory) <= MAX_TURNS

    assert len(memory) == 10
    # Oldest turns were dropped.
    assert memory.turns()[0].content == "q7"
    assert memory.turns()[-1].content == "a11"


def test_window_returns_most_recent_turns_oldest_first() -> None:
    memory = ConversationMemory()
    for i in range(4):
        memory.record_exchange(f"q{i}", f"a{i}")

    window = memory.window()

    assert len(window) == CONTEXT_WINDOW == 5
    assert [t.content for t in window] == ["a1", "q2", "a2", "q3", "a3"]


def test_window_on_short_memory_and_zero_size() -> None:
    memory = ConversationMemory()
    memory.record_exchange("only", "one")

    assert [t.content for t in memory.window()] == ["only", "one"]
    assert memory.window(0) == []


def test_clear() -> None:
    memory = ConversationMemory()
    memory.record_exchange("q", "a")

    memory.clear()

    assert len(memory) == 0
