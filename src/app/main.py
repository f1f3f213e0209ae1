# src/app/main.py

from __future__ import annotations

import argparse
import logging
import signal
from pathlib import Path
from typing import List, Optional

from agent.bot import MinecraftBot
from agent.logging_config import configure_logging
from env.loader import PROJECT_ROOT, ConfigError, load_bot_config
from monitoring.bus import default_bus
from monitoring.dashboard_tui import TuiDashboard
from monitoring.logger import JsonFileLogger

log = logging.getLogger(__name__)

DEFAULT_EVENTS_LOG = PROJECT_ROOT / "logs" / "monitoring" / "events.log"


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcbot",
        description="Minecraft chat bot with pluggable AI backends.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to bot.yaml (default: $MCBOT_CONFIG or config/bot.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ...)",
    )
    parser.add_argument(
        "--events-log",
        default=str(DEFAULT_EVENTS_LOG),
        help="JSONL file receiving monitoring events",
    )
    parser.add_argument(
        "--dashboard",
        action="store_true",
        help="Show the live terminal dashboard",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        config = load_bot_config(args.config)
    except (FileNotFoundError, ConfigError) as exc:
        log.error("Cannot start: %s", exc)
        return 2

    bus = default_bus
    events_logger = JsonFileLogger(Path(args.events_log), bus)
    dashboard_stop = None
    if args.dashboard:
        dashboard_stop = TuiDashboard(bus).start_in_thread()

    bot = MinecraftBot(config, bus=bus)

    def _on_signal(signum: int, frame: object) -> None:
        log.info("Received %s", signal.Signals(signum).name)
        bot.loop.post(bot.shutdown)

    signal.signal(signal.SIGINT, _on_signal)
    signal.signal(signal.SIGTERM, _on_signal)

    try:
        bot.run_forever()
    finally:
        if dashboard_stop is not None:
            dashboard_stop.set()
        events_logger.close()
    return 0
