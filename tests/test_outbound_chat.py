# tests/test_outbound_chat.py
"""
Tests for agent.outbound.

Covers:
- hard 100-character chunking
- "@speaker " prefix on every public fragment
- whispers and announcements without prefix
- fragments spaced one second apart
"""

from __future__ import annotations

import math

import pytest

from agent.outbound import chunk_message


@pytest.mark.parametrize("length", [1, 99, 100, 101, 250, 300])
def test_chunk_message_sizes_and_concatenation(length: int) -> None:
    text = "".join(chr(ord("a") + i % 26) for i in range(length))

    fragments = chunk_message(text)

    assert len(fragments) == math.ceil(length / 100)
    assert all(len(f) <= 100 for f in fragments)
    assert "".join(fragments) == text


def test_chunk_message_ignores_word_boundaries() -> None:
    text = "word " * 30  # 150 chars

    fragments = chunk_message(text)

    assert fragments[0] == text[:100]
    assert fragments[1] == text[100:]


def test_chunk_message_empty_and_bad_limit() -> None:
    assert chunk_message("") == []
    with pytest.raises(ValueError):
        chunk_message("abc", limit=0)


def test_short_public_reply_is_prefixed(harness) -> None:
    harness.bot.outbox.reply("Alice", "hello")

    assert harness.chat() == ["@Alice hello"]


def test_long_public_reply_is_sent_one_fragment_per_second(harness) -> None:
    text = "x" * 250

    harness.bot.outbox.reply("Alice", text)
    assert harness.chat() == ["@Alice " + "x" * 100]

    harness.advance(0.5)
    assert len(harness.chat()) == 1

    harness.advance(0.5)
    assert len(harness.chat()) == 2

    harness.advance(1.0)
    fragments = [line[len("@Alice "):] for line in harness.chat()]
    assert all(line.startswith("@Alice ") for line in harness.chat())
    assert "".join(fragments) == text


def test_whisper_reply_has_no_prefix(harness) -> None:
    harness.bot.outbox.reply("Bob", "y" * 150, whisper=True)
    harness.advance(1.0)

    assert harness.client.whispers == [("Bob", "y" * 100), ("Bob", "y" * 50)]
    assert harness.chat() == []


def test_announce_has_no_prefix(harness) -> None:
    harness.bot.outbox.announce("Stopped following.")

    assert harness.chat() == ["Stopped following."]


def test_fragments_are_dropped_while_disconnected(harness) -> None:
    harness.bot.outbox.reply("Alice", "z" * 150)
    client = harness.client
    harness.session.client = None

    harness.advance(1.0)

    assert client.chat_log == ["@Alice " + "z" * 100]
