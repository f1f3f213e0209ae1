# src/app/__init__.py
"""
Application entrypoints for the Minecraft AI bot.

Exposes:
- build_arg_parser: the `mcbot` command line
- main: load config, wire monitoring + bot, run until signalled
"""

from __future__ import annotations

from .main import build_arg_parser, main

__all__ = [
    "build_arg_parser",
    "main",
]
