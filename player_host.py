"""
player_host.py – binds the auto-fps capabilities to the real player.

    queries   → VideoPlayer (GStreamer) + MediaInfo (PyAV probe)
    limiter   → videorate max-rate
    display   → main-loop pacing (`display_fps`)
    messages  → OsdMessage
    timers    → TimerScheduler
    events    → EventManager
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from events import EventManager
from media_probe import MediaInfo
from overlays import OsdMessage
from timing import Timer, TimerScheduler
from video_player import VideoPlayer

log = logging.getLogger(__name__)


class GstPlayerHost:
    def __init__(self, player: VideoPlayer, scheduler: TimerScheduler,
                 osd: OsdMessage) -> None:
        self.player = player
        self.scheduler = scheduler
        self.osd = osd
        self.media: Optional[MediaInfo] = None
        self.display_fps: Optional[float] = None
        self.limit_fps: Optional[int] = None

    # ── media queries ──────────────────────────────────────────────────
    def is_current_track_image_or_album_art(self) -> bool:
        return bool(self.media and self.media.is_still)

    def get_container_or_stream_fps(self) -> Optional[float]:
        if self.media and self.media.fps:
            return self.media.fps
        return self.player.fps

    def get_cumulative_dropped_frame_count(self) -> Optional[int]:
        return self.player.dropped_frames()

    def get_pause_state(self) -> bool:
        return self.player.paused

    # ── mutators ───────────────────────────────────────────────────────
    def set_rate_limiting_filter(self, target_fps: Optional[int]) -> None:
        self.limit_fps = target_fps
        self.player.set_max_rate(target_fps)

    def set_display_timing_override(self, fps: Optional[float]) -> None:
        self.display_fps = fps

    def show_transient_message(self, text: str, duration: float) -> None:
        self.osd.show(text, duration)

    # ── scheduling ─────────────────────────────────────────────────────
    def schedule_after(self, delay: float, callback: Callable[[], object]) -> Timer:
        return self.scheduler.schedule_after(delay, callback)

    def schedule_periodic(self, interval: float, callback: Callable[[], object]) -> Timer:
        return self.scheduler.schedule_periodic(interval, callback)

    def cancel(self, handle: Timer) -> None:
        self.scheduler.cancel(handle)

    # ── wiring ─────────────────────────────────────────────────────────
    def on(self, event_name: str, callback: Callable[[], None]) -> None:
        EventManager.on(event_name, callback)

    def register_command(self, name: str, callback: Callable[[], object]) -> None:
        EventManager.register_command(name, callback)
