#!/usr/bin/env python3
"""
events.py  – central hub

• Translates raw Pygame events to high-level action dicts.
• Exposes a thread-safe queue so *any* external source can inject
  the same actions (web remote, GPIO, HID, etc.).
• Keeps the player-event listeners ("file-loaded", "end-file") and the
  named commands ("auto-fps-reset", …) that extensions register.

Listeners and commands are only ever invoked from the main loop.
"""

from __future__ import annotations
import logging
import queue
from typing import Callable, Dict, List

from pygame.locals import *

Action = dict      # alias for readability

log = logging.getLogger(__name__)

# key → registered command name
KEY_COMMANDS = {
    K_r: "auto-fps-reset",
    K_a: "auto-fps-toggle",
    K_d: "auto-fps-test",
}


class EventManager:
    _fifo: "queue.Queue[Action]" = queue.Queue()      # global, thread-safe
    _listeners: Dict[str, List[Callable[[], None]]] = {}
    _commands: Dict[str, Callable[[], object]] = {}

    # ── SDL / keyboard path ────────────────────────────────────────────
    @classmethod
    def handle(cls, event) -> None:
        """Translate one Pygame event → action and enqueue it."""
        act = cls._translate_pygame(event)
        if act:
            cls._fifo.put(act)

    # ── external / programmatic path ───────────────────────────────────
    @classmethod
    def post(cls, action: Action) -> None:
        """
        Any thread may call this to inject an already-formed action dict, e.g.:
            EventManager.post({"type":"command","name":"auto-fps-toggle"})
        """
        cls._fifo.put(action)

    # ── main-loop consumer ─────────────────────────────────────────────
    @classmethod
    def poll(cls) -> Action | None:
        """Return next queued action or None (non-blocking)."""
        try:
            return cls._fifo.get_nowait()
        except queue.Empty:
            return None

    # ── player events ──────────────────────────────────────────────────
    @classmethod
    def on(cls, name: str, callback: Callable[[], None]) -> None:
        cls._listeners.setdefault(name, []).append(callback)

    @classmethod
    def emit(cls, name: str) -> None:
        """Run every listener for *name*, in registration order."""
        for cb in list(cls._listeners.get(name, ())):
            cb()

    # ── commands ───────────────────────────────────────────────────────
    @classmethod
    def register_command(cls, name: str, callback: Callable[[], object]) -> None:
        if name in cls._commands:
            log.warning("Command %s re-registered", name)
        cls._commands[name] = callback

    @classmethod
    def commands(cls) -> list[str]:
        return sorted(cls._commands)

    @classmethod
    def run_command(cls, name: str) -> object:
        cb = cls._commands.get(name)
        if cb is None:
            log.warning("Unknown command %s", name)
            return None
        return cb()

    @classmethod
    def reset(cls) -> None:
        """Forget listeners, commands and queued actions."""
        cls._listeners = {}
        cls._commands = {}
        cls._fifo = queue.Queue()

    # ── internal translator ───────────────────────────────────────────
    @staticmethod
    def _translate_pygame(event) -> Action | None:
        if event.type == QUIT:
            return {"type": "quit"}

        if event.type == KEYDOWN:
            if event.key in (K_ESCAPE, K_q):
                return {"type": "quit"}
            if event.key == K_i:
                return {"type": "toggle_overlay"}
            if event.key == K_SPACE:
                return {"type": "toggle_pause"}
            if event.key in (K_RIGHT, K_LEFT):
                return {"type": "switch_file",
                        "to": "next" if event.key == K_RIGHT else "prev"}
            if event.key == K_f:
                return {"type": "toggle_fullscreen"}
            if event.key in KEY_COMMANDS:
                return {"type": "command", "name": KEY_COMMANDS[event.key]}

        return None
