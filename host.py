"""
host.py – what the auto-fps controller needs from the player.

The controller only talks to these protocols, never to GStreamer or
pygame directly.  `player_host.GstPlayerHost` is the real binding;
the test-suite ships a fake.
"""

from __future__ import annotations

from typing import Callable, Optional, Protocol

Callback = Callable[[], None]

FILE_LOADED = "file-loaded"
END_FILE = "end-file"


class TimerHandle(Protocol):
    def cancel(self) -> None: ...

    @property
    def active(self) -> bool: ...


class PlayerHost(Protocol):
    # ── media queries ──────────────────────────────────────────────────
    def is_current_track_image_or_album_art(self) -> bool: ...

    def get_container_or_stream_fps(self) -> Optional[float]: ...

    def get_cumulative_dropped_frame_count(self) -> Optional[int]: ...

    def get_pause_state(self) -> bool: ...

    # ── mutators ───────────────────────────────────────────────────────
    def set_rate_limiting_filter(self, target_fps: Optional[int]) -> None:
        """None removes the limiter; an int (re)installs it at that rate."""

    def set_display_timing_override(self, fps: Optional[float]) -> None: ...

    def show_transient_message(self, text: str, duration: float) -> None: ...

    # ── scheduling ─────────────────────────────────────────────────────
    def schedule_after(self, delay: float, callback: Callback) -> TimerHandle: ...

    def schedule_periodic(self, interval: float, callback: Callback) -> TimerHandle: ...

    def cancel(self, handle: TimerHandle) -> None: ...

    # ── wiring ─────────────────────────────────────────────────────────
    def on(self, event_name: str, callback: Callback) -> None: ...

    def register_command(self, name: str, callback: Callable[[], object]) -> None: ...
