# JSON-lines link to the external game-protocol bridge
# src/bot_core/net/bridge.py
"""
Bridge transport.

The game protocol itself is spoken by an external bridge process (for
example a small mineflayer sidecar). This transport talks to it over TCP.

Message format (version 1):
  - Each message is a single line of UTF-8 JSON.
  - JSON object:
      {
        "type": "<packet_type>",
        "payload": { ... }
      }

Requests that need an answer (block searches) are sent as
  {"type": "request", "payload": {"id": N, "op": "...", "args": {...}}}
and answered with
  {"type": "response", "payload": {"id": N, "ok": true, "result": ...}}

The goal is:
- keep Python-side logic simple
- keep a clean PacketTransport interface
- never let a malformed line or a failing handler break the pump
"""

from __future__ import annotations

import itertools
import json
import logging
import select
import socket
import time
from collections import deque
from threading import Lock
from typing import Any, Deque, Dict, List, Mapping, Optional, Tuple

from interfaces import PacketHandler, PacketTransport

from ..errors import GameClientError

log = logging.getLogger(__name__)

_RECV_SIZE = 4096


class BridgeTransport(PacketTransport):
    """
    TCP client for the bridge process.

    Closing is reported to handlers as a synthetic "end" packet (preceded
    by "error" when the socket failed), so the game client sees the same
    shape whether the server kicked the bot or the bridge went away.
    """

    def __init__(
        self,
        host: str,
        port: int,
        *,
        request_timeout_s: float = 5.0,
        connect_timeout_s: float = 10.0,
    ) -> None:
        self._host = host
        self._port = int(port)
        self._request_timeout_s = request_timeout_s
        self._connect_timeout_s = connect_timeout_s

        self._sock: socket.socket | None = None
        self._handlers: Dict[str, List[PacketHandler]] = {}
        self._lock = Lock()
        self._connected = False

        # Buffer for partial lines
        self._recv_buffer = b""
        # Messages read while waiting for a response; dispatched on next tick.
        self._backlog: Deque[Tuple[str, Dict[str, Any]]] = deque()
        self._request_ids = itertools.count(1)

    # ------------------------------------------------------------------
    # PacketTransport protocol
    # ------------------------------------------------------------------

    @property
    def connected(self) -> bool:
        return self._connected

    def connect(self) -> None:
        """Open the TCP connection to the bridge."""
        if self._connected:
            return

        log.info("BridgeTransport connecting to %s:%d", self._host, self._port)
        try:
            sock = socket.create_connection(
                (self._host, self._port), timeout=self._connect_timeout_s
            )
        except OSError as exc:
            raise GameClientError(
                code="bridge_connect_failed",
                details={"host": self._host, "port": self._port, "exception": repr(exc)},
            ) from exc

        sock.settimeout(self._request_timeout_s)
        self._sock = sock
        self._recv_buffer = b""
        self._backlog.clear()
        self._connected = True

    def disconnect(self) -> None:
        """Close the connection without notifying handlers."""
        with self._lock:
            if not self._connected:
                return
            log.info("BridgeTransport disconnecting")
            try:
                if self._sock is not None:
                    self._sock.close()
            finally:
                self._sock = None
                self._connected = False

    def tick(self) -> None:
        """
        Pump the socket and dispatch any complete messages.

        Never blocks: only reads when select() says data is waiting.
        """
        while self._backlog:
            packet_type, payload = self._backlog.popleft()
            self._dispatch(packet_type, payload)

        if not self._connected or self._sock is None:
            return

        while self._connected and self._readable(0.0):
            if not self._read_chunk():
                return
            for packet_type, payload in self._drain_lines():
                self._dispatch(packet_type, payload)

    def send_packet(self, packet_type: str, data: Mapping[str, Any]) -> None:
        """
        Send a JSON message to the bridge.

        Format:
          {"type": "<packet_type>", "payload": { ... }}
        """
        if not self._connected or self._sock is None:
            raise GameClientError(code="not_connected", details={"packet_type": packet_type})

        msg = {"type": packet_type, "payload": dict(data)}
        encoded = json.dumps(msg, separators=(",", ":")).encode("utf-8") + b"\n"

        try:
            with self._lock:
                self._sock.sendall(encoded)
        except OSError as exc:
            self._close_with_error(exc)
            raise GameClientError(
                code="send_failed",
                details={"packet_type": packet_type, "exception": repr(exc)},
            ) from exc

    def request(self, op: str, args: Mapping[str, Any]) -> Any:
        """
        Send a request and wait (bounded) for its response.

        Unrelated messages that arrive meanwhile are kept in order and
        dispatched on the next tick().
        """
        request_id = next(self._request_ids)
        self.send_packet("request", {"id": request_id, "op": op, "args": dict(args)})

        deadline = time.monotonic() + self._request_timeout_s
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise GameClientError(
                    code="bridge_request_timeout",
                    details={"op": op, "id": request_id},
                )
            if not self._connected:
                raise GameClientError(code="not_connected", details={"op": op})
            if not self._readable(remaining):
                continue
            if not self._read_chunk():
                raise GameClientError(code="not_connected", details={"op": op})

            messages = self._drain_lines()
            for i, (packet_type, payload) in enumerate(messages):
                if packet_type == "response" and payload.get("id") == request_id:
                    # Whatever followed the response in this read waits for tick().
                    self._backlog.extend(messages[i + 1:])
                    if not payload.get("ok", False):
                        raise GameClientError(
                            code="bridge_request_failed",
                            details={"op": op, "error": payload.get("error")},
                        )
                    return payload.get("result")
                self._backlog.append((packet_type, payload))

    def on_packet(self, packet_type: str, handler: PacketHandler) -> None:
        """Register a handler for incoming messages of a given type."""
        self._handlers.setdefault(packet_type, []).append(handler)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _readable(self, timeout: float) -> bool:
        if self._sock is None:
            return False
        try:
            ready, _, _ = select.select([self._sock], [], [], timeout)
        except (OSError, ValueError) as exc:
            self._close_with_error(exc)
            return False
        return bool(ready)

    def _read_chunk(self) -> bool:
        """Read once from the socket. Returns False if the link closed."""
        sock = self._sock
        if sock is None:
            return False
        try:
            chunk = sock.recv(_RECV_SIZE)
        except OSError as exc:
            log.warning("BridgeTransport socket error: %s", exc)
            self._close_with_error(exc)
            return False

        if not chunk:
            log.info("BridgeTransport received EOF")
            self._close_and_notify("bridge closed the connection")
            return False

        self._recv_buffer += chunk
        return True

    def _drain_lines(self) -> List[Tuple[str, Dict[str, Any]]]:
        messages: List[Tuple[str, Dict[str, Any]]] = []
        while b"\n" in self._recv_buffer:
            line, self._recv_buffer = self._recv_buffer.split(b"\n", 1)
            line = line.strip()
            if not line:
                continue
            decoded = self._decode_line(line)
            if decoded is not None:
                messages.append(decoded)
        return messages

    def _decode_line(self, line: bytes) -> Optional[Tuple[str, Dict[str, Any]]]:
        try:
            obj = json.loads(line.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            log.warning("BridgeTransport failed to decode JSON line: %r", line)
            return None

        if not isinstance(obj, dict):
            log.warning("BridgeTransport received non-object message: %r", obj)
            return None

        packet_type = obj.get("type")
        payload = obj.get("payload", {})

        if not isinstance(packet_type, str):
            log.warning("BridgeTransport received message without valid type: %r", obj)
            return None
        if not isinstance(payload, dict):
            log.warning("BridgeTransport received message with non-dict payload: %r", obj)
            return None
        return packet_type, payload

    def _dispatch(self, packet_type: str, payload: Mapping[str, Any]) -> None:
        handlers = self._handlers.get(packet_type)
        if not handlers:
            log.debug("BridgeTransport no handler for packet_type=%s", packet_type)
            return
        for handler in list(handlers):
            try:
                handler(payload)
            except Exception:
                log.exception("Error in bridge handler for %s", packet_type)

    def _close_with_error(self, exc: BaseException) -> None:
        if not self._connected:
            return
        self._dispatch("error", {"message": repr(exc)})
        self._close_and_notify(repr(exc))

    def _close_and_notify(self, reason: str) -> None:
        if not self._connected:
            return
        self.disconnect()
        self._dispatch("end", {"reason": reason})
