# rich-based TUI dashboard
# src/monitoring/dashboard_tui.py
"""
TUI dashboard for the bot.

A lightweight terminal UI (using `rich`) that subscribes to the monitoring
EventBus and renders:

- Connection:
    - State (CONNECTING / READY / DISCONNECTED / ...)
    - Attempt number
    - Last auth command sent

- AI:
    - Active backend
    - Reply / failure counters
    - Last failure

- Movement:
    - Follow state + target
    - Last navigation intent

- Chat + commands:
    - Most recent lines and commands

This runs entirely offline. No web server, no external services.
"""

from __future__ import annotations

import threading
import time
from collections import deque
from typing import Any, Deque, Dict, Optional

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .bus import EventBus
from .events import EventType, MonitoringEvent

RECENT_LINES = 8


# ============================================================
# TUI Dashboard
# ============================================================

class TuiDashboard:
    """
    Live terminal dashboard bound to a monitoring.EventBus.

    It consumes MonitoringEvents and keeps a small in-memory state
    representation, which is rendered periodically via rich.
    """

    def __init__(self, bus: EventBus, *, console: Optional[Console] = None) -> None:
        self._bus = bus
        self._console = console or Console()
        self._lock = threading.Lock()

        # Internal state snapshot for display
        self._state: Dict[str, Any] = {
            "connection_state": "UNKNOWN",
            "attempt": None,
            "auth": None,
            "backend": None,
            "replies": 0,
            "failures": 0,
            "last_failure": None,
            "follow_state": "IDLE",
            "follow_target": None,
            "last_intent": None,
        }
        self._chat: Deque[str] = deque(maxlen=RECENT_LINES)
        self._commands: Deque[str] = deque(maxlen=RECENT_LINES)

        # Subscribe to events
        self._unsubscribe = self._bus.subscribe(self._on_event)

    def close(self) -> None:
        self._unsubscribe()

    @property
    def state(self) -> Dict[str, Any]:
        with self._lock:
            return dict(self._state)

    # --------------------------------------------------------
    # Event handler
    # --------------------------------------------------------

    def _on_event(self, event: MonitoringEvent) -> None:
        """
        Update dashboard state based on a MonitoringEvent.
        This should be cheap and non-blocking.
        """
        et = event.event_type
        payload = event.payload

        with self._lock:
            if et == EventType.CONNECTION_STATE:
                self._state["connection_state"] = payload.get("state", "UNKNOWN")
                if payload.get("attempt") is not None:
                    self._state["attempt"] = payload["attempt"]
                if payload.get("state") == "CONNECTING":
                    self._state["auth"] = None

            elif et == EventType.AUTH_SENT:
                self._state["auth"] = f"/{payload.get('mode')} ({payload.get('auth_phase')})"

            elif et == EventType.CHAT_RECEIVED:
                marker = "[w] " if payload.get("whisper") else ""
                self._chat.append(f"{marker}<{payload.get('speaker')}> {payload.get('text')}")

            elif et == EventType.AI_REPLY:
                self._state["backend"] = payload.get("backend")
                self._state["replies"] += 1

            elif et == EventType.BACKEND_FAILURE:
                self._state["backend"] = payload.get("backend")
                self._state["failures"] += 1
                self._state["last_failure"] = payload.get("error")

            elif et == EventType.BACKEND_SWITCHED:
                self._state["backend"] = payload.get("backend")

            elif et == EventType.COMMAND_EXECUTED:
                args = " ".join(payload.get("args") or [])
                self._commands.append(f"{payload.get('speaker')}: {payload.get('command')} {args}".rstrip())

            elif et == EventType.FOLLOW_STATE:
                self._state["follow_state"] = payload.get("state", "IDLE")
                self._state["follow_target"] = payload.get("target")

            elif et == EventType.NAVIGATION_INTENT:
                self._state["last_intent"] = payload

    # --------------------------------------------------------
    # Rendering helpers
    # --------------------------------------------------------

    def _render_connection_panel(self) -> Panel:
        """
        Top-left: connection state + attempt + auth.
        """
        txt = Text()
        txt.append("State: ", style="bold")
        txt.append(f"{self._state['connection_state']}\n")
        txt.append("Attempt: ", style="bold")
        txt.append(f"{self._state['attempt'] or '-'}\n")
        txt.append("Auth: ", style="bold")
        txt.append(f"{self._state['auth'] or '<none>'}\n")
        return Panel(txt, title="Connection", border_style="cyan")

    def _render_ai_panel(self) -> Panel:
        table = Table.grid(pad_edge=False)
        table.add_column(justify="left")
        table.add_row(f"[bold]Backend:[/bold] {self._state['backend'] or '<unknown>'}")
        table.add_row(f"[bold]Replies:[/bold] {self._state['replies']}")
        table.add_row(f"[bold]Failures:[/bold] {self._state['failures']}")
        if self._state["last_failure"]:
            table.add_row(f"[bold red]Last failure:[/bold red] {self._state['last_failure']}")
        return Panel(table, title="AI", border_style="magenta")

    def _render_movement_panel(self) -> Panel:
        table = Table.grid(pad_edge=False)
        table.add_column(justify="left")
        target = self._state["follow_target"]
        follow = self._state["follow_state"]
        table.add_row(f"[bold]Follow:[/bold] {follow}{f' ({target})' if target else ''}")

        intent = self._state["last_intent"]
        if intent:
            pos = intent.get("target") or {}
            table.add_row(
                f"[bold]Last intent:[/bold] {intent.get('reason')} -> "
                f"{pos.get('x', 0):.0f}, {pos.get('y', 0):.0f}, {pos.get('z', 0):.0f} "
                f"via {intent.get('via')}"
            )
        else:
            table.add_row("[bold]Last intent:[/bold] <none>")
        return Panel(table, title="Movement", border_style="green")

    def _render_lines_panel(self, title: str, lines: Deque[str], style: str) -> Panel:
        body = "\n".join(lines) if lines else "<none>"
        return Panel(Text(body), title=title, border_style=style)

    def _build_layout(self) -> Layout:
        """
        Construct the overall layout for the dashboard.
        """
        layout = Layout()

        # Overall layout: status row + activity row
        layout.split(
            Layout(name="top", size=7),
            Layout(name="middle", ratio=1),
        )

        with self._lock:
            layout["top"].split_row(
                Layout(name="connection"),
                Layout(name="ai"),
                Layout(name="movement"),
            )
            layout["connection"].update(self._render_connection_panel())
            layout["ai"].update(self._render_ai_panel())
            layout["movement"].update(self._render_movement_panel())

            layout["middle"].split_row(
                Layout(name="chat", ratio=2),
                Layout(name="commands"),
            )
            layout["chat"].update(self._render_lines_panel("Chat", self._chat, "yellow"))
            layout["commands"].update(self._render_lines_panel("Commands", self._commands, "blue"))

        return layout

    # --------------------------------------------------------
    # Main loop
    # --------------------------------------------------------

    def run(
        self,
        refresh_per_second: float = 4.0,
        stop_event: Optional[threading.Event] = None,
    ) -> None:
        """
        Run the TUI refresh loop.

        This blocks the current thread until `stop_event` is set. Use
        start_in_thread() to run it next to the bot.
        """
        stop_event = stop_event or threading.Event()
        refresh_delay = 1.0 / max(refresh_per_second, 0.1)
        with Live(self._build_layout(), console=self._console, refresh_per_second=refresh_per_second) as live:
            while not stop_event.is_set():
                # Re-render using the latest state
                live.update(self._build_layout())
                time.sleep(refresh_delay)

    def start_in_thread(self, refresh_per_second: float = 4.0) -> threading.Event:
        """Run the dashboard on a daemon thread; set the returned event to stop it."""
        stop_event = threading.Event()
        thread = threading.Thread(
            target=self.run,
            kwargs={"refresh_per_second": refresh_per_second, "stop_event": stop_event},
            name="tui-dashboard",
            daemon=True,
        )
        thread.start()
        return stop_event
