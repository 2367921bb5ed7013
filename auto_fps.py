"""
auto_fps.py – lifecycle of the adaptive frame-rate limiter.

Wires player events and commands to the samplers and owns every timer:

    file-loaded ──(initial_delay)──▶ calibrating ──(N samples)──▶ steady-state
         ▲                                                          │  ▲
         │                             auto-fps-toggle              ▼  │
      end-file ◀── any phase                                      disabled

At most one periodic timer exists at a time; the calibration timer is
cancelled before the steady-state timer is created.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from fps_filter import FilterApplier
from fps_sampling import CalibrationPhase, SteadyStateController
from fps_session import AutoFpsSettings, Phase, SessionState, native_fps_from
from host import END_FILE, FILE_LOADED, PlayerHost, TimerHandle

log = logging.getLogger(__name__)

RESET_COMMAND = "auto-fps-reset"
TOGGLE_COMMAND = "auto-fps-toggle"
TEST_COMMAND = "auto-fps-test"


class AutoFpsController:
    def __init__(self, host: PlayerHost, settings: AutoFpsSettings) -> None:
        self.host = host
        self.settings = settings
        self.applier = FilterApplier(host)
        self.calibration = CalibrationPhase(host, settings, self.applier)
        self.steady = SteadyStateController(host, settings, self.applier)

        self.session: Optional[SessionState] = None
        self._delay_timer: Optional[TimerHandle] = None
        self._sample_timer: Optional[TimerHandle] = None

    def attach(self) -> "AutoFpsController":
        self.host.on(FILE_LOADED, self.on_file_loaded)
        self.host.on(END_FILE, self.on_end_file)
        self.host.register_command(RESET_COMMAND, self.reset)
        self.host.register_command(TOGGLE_COMMAND, self.toggle)
        self.host.register_command(TEST_COMMAND, self.diagnostic)
        return self

    @property
    def phase(self) -> Phase:
        return self.session.phase if self.session else Phase.NO_FILE

    # ── player events ──────────────────────────────────────────────────
    def on_file_loaded(self) -> None:
        if self.host.is_current_track_image_or_album_art():
            log.debug("Still image / album art – auto fps stays idle")
            return

        self._retire_session()

        # a limiter left over from the previous file must not leak into this one
        self.host.set_rate_limiting_filter(None)
        native = native_fps_from(self.host.get_container_or_stream_fps(), self.settings)
        self.host.set_display_timing_override(native)

        session = SessionState(native_fps=native, sample_count=self.settings.sample_count)
        self.session = session
        log.info("Auto fps armed – video fps: %d", native)
        self.host.show_transient_message(f"Auto fps: {native}fps detected", 2)

        self._delay_timer = self.host.schedule_after(
            self.settings.initial_delay, lambda: self._start_calibration(session)
        )

    def on_end_file(self) -> None:
        self._retire_session()
        log.info("Auto fps adjustment stopped")

    # ── phase transitions ──────────────────────────────────────────────
    def _start_calibration(self, session: SessionState) -> None:
        if session is not self.session or session.phase is not Phase.ARMED:
            log.warning("Calibration start for a stale session – ignored")
            return
        self._delay_timer = None

        session.last_drop_count = self.host.get_cumulative_dropped_frame_count() or 0
        session.calibration_samples.clear()
        session.phase = Phase.CALIBRATING
        self.host.show_transient_message("Starting performance analysis...", 2)
        self._replace_sample_timer(1, lambda: self._on_calibration_tick(session))

    def _on_calibration_tick(self, session: SessionState) -> None:
        target = self.calibration.tick(session)
        if target is None:
            return
        self._cancel_sample_timer()
        self._start_steady_state(session)
        self.host.show_transient_message(f"Auto fps initialized: {target}fps", 3)

    def _start_steady_state(self, session: SessionState) -> None:
        session.phase = Phase.STEADY_STATE
        self._replace_sample_timer(
            self.settings.sample_interval, lambda: self.steady.tick(session)
        )

    # ── commands ───────────────────────────────────────────────────────
    def reset(self) -> None:
        """Drop the sample history and go back to the native rate."""
        session = self.session
        if session is None:
            self.host.show_transient_message("Auto fps: no video loaded", 2)
            return
        session.steady_samples.clear()
        self.applier.apply(session, session.native_fps)
        log.info("Manual reset to native fps")
        self.host.show_transient_message(
            f"Auto fps reset to native {session.native_fps}fps", 2
        )

    def toggle(self) -> bool:
        """Pause or resume steady-state adjustment; returns the new on/off state."""
        session = self.session
        if session is not None and session.phase is Phase.STEADY_STATE:
            self._cancel_sample_timer()
            session.phase = Phase.DISABLED
            self.host.show_transient_message("Auto fps adjustment disabled", 2)
            return False
        if session is not None and session.phase is Phase.DISABLED:
            self._start_steady_state(session)
            self.host.show_transient_message("Auto fps adjustment enabled", 2)
            return True
        self.host.show_transient_message("Auto fps not initialized yet", 2)
        return False

    def report(self) -> dict:
        """Fresh dict of the current phase and counters, without notices."""
        session = self.session
        if session is not None:
            report = session.snapshot()
        else:
            report = {"phase": Phase.NO_FILE.value, "initialized": False}
        report["timer_active"] = self._sample_timer is not None
        return report

    def diagnostic(self) -> dict:
        report = self.report()
        state = "active" if report["initialized"] else "inactive"
        self.host.show_transient_message(f"Auto fps: Current state: {state}", 3)
        log.info("Auto fps test – phase: %s, initialized: %s",
                 report["phase"], report["initialized"])
        return report

    # ── timers ─────────────────────────────────────────────────────────
    def _replace_sample_timer(self, interval: float, callback: Callable[[], object]) -> None:
        self._cancel_sample_timer()
        self._sample_timer = self.host.schedule_periodic(interval, callback)

    def _cancel_sample_timer(self) -> None:
        if self._sample_timer is not None:
            self.host.cancel(self._sample_timer)
            self._sample_timer = None

    def _retire_session(self) -> None:
        if self._delay_timer is not None:
            self.host.cancel(self._delay_timer)
            self._delay_timer = None
        self._cancel_sample_timer()
        if self.session is not None:
            self.session.phase = Phase.NO_FILE
            self.session = None
