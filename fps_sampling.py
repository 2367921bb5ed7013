"""
fps_sampling.py

The two samplers that drive the target frame rate:

* `CalibrationPhase` – one sample per second for a fixed count, then a
  starting target from the plain mean drop rate.
* `SteadyStateController` – one sample per interval, trimmed mean over a
  sliding window, and a single fps_step up or down per tick.

Both read telemetry through the host and mutate only the `SessionState`
handed to them.  Timers belong to `auto_fps.AutoFpsController`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from fps_filter import FilterApplier
from fps_session import AutoFpsSettings, Phase, SessionState, snap_to_step
from host import PlayerHost

log = logging.getLogger(__name__)


def _read_drop_count(host: PlayerHost) -> Optional[int]:
    drops = host.get_cumulative_dropped_frame_count()
    if drops is None:
        log.debug("Could not get frame drop count, skipping sample")
    return drops


# ── calibration ────────────────────────────────────────────────────────────
class CalibrationPhase:
    def __init__(self, host: PlayerHost, settings: AutoFpsSettings,
                 applier: FilterApplier) -> None:
        self.host = host
        self.settings = settings
        self.applier = applier

    def tick(self, session: SessionState) -> Optional[int]:
        """Take one per-second sample; return the starting target once done."""
        if session.phase is not Phase.CALIBRATING:
            log.warning("Calibration tick while %s – ignored", session.phase.value)
            return None
        if self.host.get_pause_state():
            return None
        drops = _read_drop_count(self.host)
        if drops is None:
            return None

        session.calibration_samples.append(drops - session.last_drop_count)
        session.last_drop_count = drops

        done = len(session.calibration_samples)
        total = self.settings.initial_sample_count
        log.debug("Initial sample %d/%d: %d drops", done, total,
                  session.calibration_samples[-1])
        self.host.show_transient_message(f"Sampling performance: {done}/{total}", 1)

        if done < total:
            return None

        avg_drop_rate = sum(session.calibration_samples) / total
        effective_fps = session.native_fps - avg_drop_rate
        target = min(snap_to_step(effective_fps, self.settings), session.native_fps)
        log.info("Initial sampling complete – avg drop rate %.2f, target %dfps",
                 avg_drop_rate, target)
        self.applier.apply(session, target)
        return target


# ── steady state ───────────────────────────────────────────────────────────
@dataclass(frozen=True)
class Adjustment:
    """Outcome of one steady-state decision."""

    filtered_rate: float
    target_fps: int
    changed: bool
    warned: bool


class SteadyStateController:
    def __init__(self, host: PlayerHost, settings: AutoFpsSettings,
                 applier: FilterApplier) -> None:
        self.host = host
        self.settings = settings
        self.applier = applier

    def tick(self, session: SessionState) -> Optional[Adjustment]:
        """One sample_interval tick; returns None when no decision was made."""
        if session.phase is not Phase.STEADY_STATE:
            log.warning("Adjustment tick while %s – ignored", session.phase.value)
            return None
        if self.host.get_pause_state():
            # last_drop_count stays put: the next window spans the pause
            log.debug("Video paused, skipping adjustment")
            return None
        drops = _read_drop_count(self.host)
        if drops is None:
            return None

        drop_rate = (drops - session.last_drop_count) / self.settings.sample_interval
        session.steady_samples.push(drop_rate)
        session.last_drop_count = drops

        if not session.steady_samples.ready():
            log.debug("Not enough samples yet (%d/3)", len(session.steady_samples))
            return None

        filtered = session.steady_samples.trimmed_mean()
        new_target = self.decide(session, filtered)

        warned = self._warn_if_struggling(session, new_target, filtered)
        changed = False
        if new_target != session.current_target_fps:
            changed = self.applier.apply(session, new_target)
        return Adjustment(filtered, new_target, changed, warned)

    def decide(self, session: SessionState, filtered_rate: float) -> int:
        s = self.settings
        target = session.current_target_fps
        if filtered_rate > s.drop_threshold:
            target -= s.fps_step
            log.debug("Drops detected (%.2f/s), stepping down to %d", filtered_rate, target)
        elif filtered_rate == 0:
            target = min(target + s.fps_step, session.native_fps)
        return max(target, s.min_fps)

    def _warn_if_struggling(self, session: SessionState, new_target: int,
                            filtered_rate: float) -> bool:
        s = self.settings
        low = new_target < s.warning_threshold and session.native_fps > s.warning_threshold
        if not (low or filtered_rate > s.drop_threshold):
            return False
        self.host.show_transient_message(f"Low performance: {new_target}fps", 3)
        log.warning("Performance warning: %dfps (%.2f drops/s)", new_target, filtered_rate)
        return True
