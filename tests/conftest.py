"""Shared pytest fixtures: a scripted player host driven by a fake clock."""

import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest

# Ensure the project root is in the path for imports
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from fps_session import AutoFpsSettings  # noqa: E402
from timing import Timer, TimerScheduler  # noqa: E402


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class FakeHost:
    """In-memory PlayerHost; records every mutation it is asked to make."""

    def __init__(self, fps: Optional[float] = 60.0, still: bool = False) -> None:
        self.clock = FakeClock()
        self.scheduler = TimerScheduler(self.clock)
        self.fps = fps
        self.still = still
        self.drops: Optional[int] = 0
        self.paused = False

        self.filter_calls: List[Optional[int]] = []
        self.display_calls: List[Optional[float]] = []
        self.messages: List[str] = []
        self.listeners: Dict[str, List[Callable[[], None]]] = {}
        self.commands: Dict[str, Callable[[], object]] = {}

    # capabilities
    def is_current_track_image_or_album_art(self) -> bool:
        return self.still

    def get_container_or_stream_fps(self) -> Optional[float]:
        return self.fps

    def get_cumulative_dropped_frame_count(self) -> Optional[int]:
        return self.drops

    def get_pause_state(self) -> bool:
        return self.paused

    def set_rate_limiting_filter(self, target_fps: Optional[int]) -> None:
        self.filter_calls.append(target_fps)

    def set_display_timing_override(self, fps: Optional[float]) -> None:
        self.display_calls.append(fps)

    def show_transient_message(self, text: str, duration: float) -> None:
        self.messages.append(text)

    def schedule_after(self, delay: float, callback) -> Timer:
        return self.scheduler.schedule_after(delay, callback)

    def schedule_periodic(self, interval: float, callback) -> Timer:
        return self.scheduler.schedule_periodic(interval, callback)

    def cancel(self, handle: Timer) -> None:
        self.scheduler.cancel(handle)

    def on(self, event_name: str, callback) -> None:
        self.listeners.setdefault(event_name, []).append(callback)

    def register_command(self, name: str, callback) -> None:
        self.commands[name] = callback

    # test drivers
    def emit(self, event_name: str) -> None:
        for cb in self.listeners.get(event_name, []):
            cb()

    def advance(self, seconds: int, drops_per_second: int = 0) -> None:
        """Play for *seconds*, one second at a time, firing due timers."""
        for _ in range(seconds):
            self.clock.now += 1.0
            if self.drops is not None and not self.paused:
                self.drops += drops_per_second
            self.scheduler.run_due()

    def forget_calls(self) -> None:
        self.filter_calls.clear()
        self.display_calls.clear()
        self.messages.clear()


@pytest.fixture
def settings() -> AutoFpsSettings:
    return AutoFpsSettings()


@pytest.fixture
def host() -> FakeHost:
    return FakeHost()
