"""
fps_session.py

Tunables, per-file session state and the fps step math shared by the
calibration and steady-state samplers.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from typing import List, Optional

from sample_buffer import MIN_TRIM_SAMPLES, SampleBuffer


# ── tunables ───────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class AutoFpsSettings:
    initial_sample_count: int = 10
    sample_interval: float = 10
    sample_count: int = 6
    fps_step: int = 5
    min_fps: int = 25
    warning_threshold: int = 30
    initial_delay: float = 2
    drop_threshold: float = 2
    fallback_fps: int = 60

    def __post_init__(self) -> None:
        if self.initial_sample_count <= 0:
            raise ValueError("initial_sample_count must be > 0")
        if self.sample_interval <= 0:
            raise ValueError("sample_interval must be > 0")
        if self.sample_count < MIN_TRIM_SAMPLES:
            raise ValueError(f"sample_count must be >= {MIN_TRIM_SAMPLES}")
        if self.fps_step <= 0:
            raise ValueError("fps_step must be > 0")
        if self.min_fps <= 0:
            raise ValueError("min_fps must be > 0")
        if self.initial_delay < 0:
            raise ValueError("initial_delay must be >= 0")
        if self.drop_threshold < 0:
            raise ValueError("drop_threshold must be >= 0")
        if self.fallback_fps <= 0:
            raise ValueError("fallback_fps must be > 0")

    @classmethod
    def from_config(cls, cfg) -> "AutoFpsSettings":
        """Build from the AUTO_FPS_* constants of a config module."""
        d = cls()
        return cls(
            initial_sample_count=getattr(cfg, "AUTO_FPS_INITIAL_SAMPLE_COUNT", d.initial_sample_count),
            sample_interval=getattr(cfg, "AUTO_FPS_SAMPLE_INTERVAL", d.sample_interval),
            sample_count=getattr(cfg, "AUTO_FPS_SAMPLE_COUNT", d.sample_count),
            fps_step=getattr(cfg, "AUTO_FPS_STEP", d.fps_step),
            min_fps=getattr(cfg, "AUTO_FPS_MIN_FPS", d.min_fps),
            warning_threshold=getattr(cfg, "AUTO_FPS_WARNING_THRESHOLD", d.warning_threshold),
            initial_delay=getattr(cfg, "AUTO_FPS_INITIAL_DELAY", d.initial_delay),
            drop_threshold=getattr(cfg, "AUTO_FPS_DROP_THRESHOLD", d.drop_threshold),
            fallback_fps=getattr(cfg, "AUTO_FPS_FALLBACK_FPS", d.fallback_fps),
        )


# ── step math ──────────────────────────────────────────────────────────────
def snap_to_step(fps: float, settings: AutoFpsSettings) -> int:
    """Round half-up to the nearest fps_step multiple, floored at min_fps."""
    step = settings.fps_step
    snapped = math.floor((fps + step / 2) / step) * step
    return max(int(snapped), settings.min_fps)


def native_fps_from(detected: Optional[float], settings: AutoFpsSettings) -> int:
    """Round a probed frame rate to an int; fall back when absent or bogus."""
    if detected and detected > 0:
        return int(math.floor(detected + 0.5))
    return settings.fallback_fps


# ── session ────────────────────────────────────────────────────────────────
class Phase(enum.Enum):
    NO_FILE = "no-file"
    ARMED = "armed"
    CALIBRATING = "calibrating"
    STEADY_STATE = "steady-state"
    DISABLED = "disabled"


@dataclass
class SessionState:
    """Everything the controller knows about the file currently playing."""

    native_fps: int
    sample_count: int
    current_target_fps: int = 0
    last_drop_count: int = 0
    phase: Phase = Phase.ARMED
    calibration_samples: List[int] = field(default_factory=list)
    steady_samples: SampleBuffer = field(init=False)

    def __post_init__(self) -> None:
        if not self.current_target_fps:
            self.current_target_fps = self.native_fps
        self.steady_samples = SampleBuffer(self.sample_count)

    @property
    def initialized(self) -> bool:
        """True once calibration has produced a starting target."""
        return self.phase in (Phase.STEADY_STATE, Phase.DISABLED)

    def snapshot(self) -> dict:
        return {
            "phase": self.phase.value,
            "initialized": self.initialized,
            "native_fps": self.native_fps,
            "target_fps": self.current_target_fps,
            "last_drop_count": self.last_drop_count,
            "calibration_samples": len(self.calibration_samples),
            "steady_samples": [round(v, 3) for v in self.steady_samples],
        }
