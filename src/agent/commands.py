# src/agent/commands.py
"""
Structured "!command" handling.

BotCommands owns the fixed command table. Every chat line (not whispers)
is offered to dispatch(); only the first token is case-folded, arguments
keep the case they were typed in. Unknown tokens do nothing.

Each handler runs inside its own failure boundary: an exception is logged
and the line is dropped, it never reaches the connection.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Optional

from interfaces import Location
from monitoring.bus import EventBus
from monitoring.integration import emit_command_executed

from .finder import StructureFinder
from .movement import MovementCoordinator
from .outbound import ChatOutbox
from .session import Session

log = logging.getLogger(__name__)

HELP_TEXT = (
    "Available commands: !help, !ping, !time, !players, !follow <player>, "
    "!sethome, !base, !team <player>, !find <structure>, !stop, !home, "
    "!switch to [ai_model]"
)
TIME_FORMAT = "%m/%d/%Y, %I:%M:%S %p"

Handler = Callable[[str, List[str]], None]


@dataclass(frozen=True)
class CommandSpec:
    handler: Handler
    min_args: int = 0


class BotCommands:
    def __init__(
        self,
        session: Session,
        outbox: ChatOutbox,
        movement: MovementCoordinator,
        finder: StructureFinder,
        *,
        bus: Optional[EventBus] = None,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._session = session
        self._outbox = outbox
        self._movement = movement
        self._finder = finder
        self._bus = bus
        self._now = now

        self.table: Dict[str, CommandSpec] = {
            "!help": CommandSpec(self._help),
            "!ping": CommandSpec(self._ping),
            "!time": CommandSpec(self._time),
            "!players": CommandSpec(self._players),
            "!follow": CommandSpec(self._follow, min_args=1),
            "!stop": CommandSpec(self._stop),
            "!sethome": CommandSpec(self._sethome),
            "!home": CommandSpec(self._home),
            "!base": CommandSpec(self._base),
            "!team": CommandSpec(self._team_add, min_args=1),
            "!teamlist": CommandSpec(self._team_list),
            "!removeteam": CommandSpec(self._team_remove, min_args=1),
            "!find": CommandSpec(self._find, min_args=1),
        }

    def dispatch(self, speaker: str, text: str) -> bool:
        """
        Run the command named by the first token of `text`.

        Returns True if a handler ran (even if it then failed).
        """
        tokens = text.split(" ")
        command = tokens[0].lower()
        args = tokens[1:]

        entry = self.table.get(command)
        if entry is None or len(args) < entry.min_args:
            return False

        log.info("%s ran %s %s", speaker, command, " ".join(args))
        try:
            entry.handler(speaker, args)
        except Exception:
            log.exception("Command %s from %s failed", command, speaker)
        if self._bus is not None:
            emit_command_executed(self._bus, command, speaker, args)
        return True

    # ------------------------------------------------------------------
    # Info
    # ------------------------------------------------------------------

    def _help(self, speaker: str, args: List[str]) -> None:
        self._outbox.announce(HELP_TEXT)

    def _ping(self, speaker: str, args: List[str]) -> None:
        backend = self._session.active_backend.value.upper()
        self._outbox.announce(f"Pong! Using {backend} model")

    def _time(self, speaker: str, args: List[str]) -> None:
        self._outbox.announce(f"Current time: {self._now().strftime(TIME_FORMAT)}")

    def _players(self, speaker: str, args: List[str]) -> None:
        names = self._session.require_client().players().keys()
        self._outbox.announce(f"Online players: {', '.join(names)}")

    # ------------------------------------------------------------------
    # Movement
    # ------------------------------------------------------------------

    def _follow(self, speaker: str, args: List[str]) -> None:
        self._movement.follow(args[0])

    def _stop(self, speaker: str, args: List[str]) -> None:
        self._movement.stop()

    def _find(self, speaker: str, args: List[str]) -> None:
        self._finder.find(" ".join(args))

    # ------------------------------------------------------------------
    # Locations
    # ------------------------------------------------------------------

    def _capture_location(self) -> Location:
        client = self._session.require_client()
        return Location.from_position(client.position(), client.dimension())

    def _sethome(self, speaker: str, args: List[str]) -> None:
        self._session.home = self._capture_location()
        self._outbox.announce(f"Home set at coordinates: {self._session.home.coords_text()}")

    def _home(self, speaker: str, args: List[str]) -> None:
        home = self._session.home
        if home is None:
            self._outbox.announce("No home location set! Use !sethome first.")
            return
        self._outbox.announce(f"Going home to {home.coords_text()}")
        self._movement.navigate_to(home.as_vec3(), reason="home")

    def _base(self, speaker: str, args: List[str]) -> None:
        self._session.base = self._capture_location()
        self._outbox.announce(f"Base set at coordinates: {self._session.base.coords_text()}")

    # ------------------------------------------------------------------
    # Team
    # ------------------------------------------------------------------

    def _team_add(self, speaker: str, args: List[str]) -> None:
        name = self._session.resolve_player(args[0])
        if name is None:
            self._outbox.announce(f"Player {args[0]} not found!")
            return
        self._session.team.add(name)
        self._outbox.announce(f"{name} added to team! Team size: {len(self._session.team)}")

    def _team_remove(self, speaker: str, args: List[str]) -> None:
        name = args[0]
        member = self._session.team.find(name)
        if member is None:
            self._outbox.announce(f"{name} is not in the team!")
            return
        self._session.team.remove(member)
        self._outbox.announce(f"{member} removed from team! Team size: {len(self._session.team)}")

    def _team_list(self, speaker: str, args: List[str]) -> None:
        members = self._session.team.members()
        if not members:
            self._outbox.announce("No team members yet!")
        else:
            self._outbox.announce(f"Team members: {', '.join(members)}")
