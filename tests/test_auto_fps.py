import logging

import pytest

from auto_fps import RESET_COMMAND, TEST_COMMAND, TOGGLE_COMMAND, AutoFpsController
from fps_session import Phase
from host import END_FILE, FILE_LOADED

# initial_delay (2) + initial_sample_count (10) one-second samples
CALIBRATED_AT = 12


@pytest.fixture
def controller(host, settings):
    return AutoFpsController(host, settings).attach()


def _load(host):
    host.emit(FILE_LOADED)


def test_attach_registers_events_and_commands(host, controller):
    assert set(host.listeners) == {FILE_LOADED, END_FILE}
    assert set(host.commands) == {RESET_COMMAND, TOGGLE_COMMAND, TEST_COMMAND}


def test_smooth_playback_stays_native(host, controller):
    _load(host)
    host.advance(CALIBRATED_AT)

    assert controller.phase is Phase.STEADY_STATE
    assert controller.session.current_target_fps == 60
    assert host.filter_calls == [None]          # only the reset at load
    assert host.display_calls == [60]
    assert host.messages[0] == "Auto fps: 60fps detected"
    assert host.messages[1] == "Starting performance analysis..."
    assert host.messages[-1] == "Auto fps initialized: 60fps"


def test_calibration_waits_for_initial_delay(host, controller):
    _load(host)
    assert controller.phase is Phase.ARMED
    host.advance(1)
    assert controller.phase is Phase.ARMED
    host.advance(1)
    assert controller.phase is Phase.CALIBRATING


def test_calibration_baseline_ignores_drops_before_start(host, controller):
    _load(host)
    host.advance(2, drops_per_second=40)          # settling, not measured
    host.advance(10)
    assert controller.session.calibration_samples == [0] * 10
    assert controller.session.current_target_fps == 60


def test_heavy_drops_calibrate_then_step_down(host, controller):
    _load(host)
    host.advance(CALIBRATED_AT, drops_per_second=5)
    assert controller.session.current_target_fps == 55     # 60 - 5 → 55
    assert host.filter_calls == [None, 55]

    host.advance(20, drops_per_second=5)
    assert controller.session.current_target_fps == 55     # only 2 samples
    host.advance(10, drops_per_second=5)
    assert controller.session.current_target_fps == 50
    assert host.filter_calls == [None, 55, 50]


def test_recovers_after_drops_stop(host, controller):
    _load(host)
    host.advance(CALIBRATED_AT, drops_per_second=15)
    assert controller.session.current_target_fps == 45

    host.advance(30)
    assert controller.session.current_target_fps == 50
    host.advance(10)
    assert controller.session.current_target_fps == 55
    host.advance(10)
    assert controller.session.current_target_fps == 60
    host.advance(10)
    assert controller.session.current_target_fps == 60
    assert host.filter_calls[-1] is None


def test_only_one_periodic_timer_at_a_time(host, controller):
    _load(host)
    assert host.scheduler.pending() == 1          # start delay
    host.advance(2)
    assert host.scheduler.pending() == 1          # calibration
    host.advance(10)
    assert host.scheduler.pending() == 1          # steady state
    host.advance(50)
    assert host.scheduler.pending() == 1


def test_paused_calibration_takes_longer(host, controller):
    _load(host)
    host.advance(2)
    host.paused = True
    host.advance(5)
    assert controller.session.calibration_samples == []
    host.paused = False
    host.advance(9)
    assert controller.phase is Phase.CALIBRATING
    host.advance(1)
    assert controller.phase is Phase.STEADY_STATE


def test_missing_drop_counter_delays_calibration(host, controller):
    _load(host)
    host.advance(2)
    host.drops = None
    host.advance(4)
    assert controller.phase is Phase.CALIBRATING
    host.drops = 0
    host.advance(10)
    assert controller.phase is Phase.STEADY_STATE


def test_image_files_are_ignored(host, controller):
    host.still = True
    _load(host)
    host.advance(20)
    assert controller.session is None
    assert controller.phase is Phase.NO_FILE
    assert host.scheduler.pending() == 0
    assert host.filter_calls == []
    assert host.messages == []


@pytest.mark.parametrize("detected, native", [(None, 60), (23.976, 24), (29.97, 30), (0.0, 60)])
def test_native_fps_detection(host, controller, detected, native):
    host.fps = detected
    _load(host)
    assert controller.session.native_fps == native
    assert controller.session.current_target_fps == native
    assert host.display_calls == [native]


def test_end_file_cancels_calibration(host, controller, caplog):
    _load(host)
    host.advance(5)
    old = controller.session
    samples = list(old.calibration_samples)

    host.emit(END_FILE)
    assert controller.phase is Phase.NO_FILE
    assert controller.session is None
    assert host.scheduler.pending() == 0

    with caplog.at_level(logging.WARNING):
        controller._on_calibration_tick(old)
        controller.steady.tick(old)
    assert old.calibration_samples == samples
    assert len(old.steady_samples) == 0
    assert caplog.text.count("ignored") == 2

    host.forget_calls()
    host.advance(30)
    assert host.messages == []


def test_end_file_cancels_steady_state(host, controller):
    _load(host)
    host.advance(CALIBRATED_AT + 10)
    old = controller.session
    host.emit(END_FILE)
    assert host.scheduler.pending() == 0

    host.advance(60, drops_per_second=50)
    assert old.current_target_fps == 60
    assert len(old.steady_samples) == 1


def test_end_file_before_delay_never_calibrates(host, controller):
    _load(host)
    host.advance(1)
    host.emit(END_FILE)
    host.advance(10)
    assert "Starting performance analysis..." not in host.messages


def test_reload_restarts_the_delay(host, controller):
    _load(host)
    host.advance(1)
    _load(host)
    host.advance(2)
    assert host.messages.count("Starting performance analysis...") == 1
    assert host.scheduler.pending() == 1


def test_new_file_resets_session(host, controller):
    _load(host)
    host.advance(CALIBRATED_AT, drops_per_second=15)
    old = controller.session
    assert old.current_target_fps == 45

    host.fps = 30
    _load(host)
    assert old.phase is Phase.NO_FILE
    assert controller.session is not old
    assert controller.session.native_fps == 30
    assert controller.session.current_target_fps == 30
    assert controller.phase is Phase.ARMED
    assert host.filter_calls[-1] is None
    assert host.scheduler.pending() == 1


# ── commands ───────────────────────────────────────────────────────────────
def test_toggle_before_initialized_is_refused(host, controller):
    _load(host)
    host.advance(5)

    assert host.commands[TOGGLE_COMMAND]() is False
    assert host.commands[TOGGLE_COMMAND]() is False
    assert host.messages.count("Auto fps not initialized yet") == 2
    assert controller.phase is Phase.CALIBRATING
    assert host.scheduler.pending() == 1

    host.advance(7)
    assert controller.phase is Phase.STEADY_STATE


def test_toggle_without_file(host, controller):
    assert controller.toggle() is False
    assert host.messages == ["Auto fps not initialized yet"]
    assert host.scheduler.pending() == 0


def test_toggle_off_and_on(host, controller):
    _load(host)
    host.advance(CALIBRATED_AT)

    assert controller.toggle() is False
    assert controller.phase is Phase.DISABLED
    assert host.scheduler.pending() == 0
    host.advance(60, drops_per_second=30)
    assert len(controller.session.steady_samples) == 0
    assert controller.session.current_target_fps == 60

    assert controller.toggle() is True
    assert controller.phase is Phase.STEADY_STATE
    assert host.scheduler.pending() == 1
    assert host.messages[-2:] == ["Auto fps adjustment disabled", "Auto fps adjustment enabled"]


def test_reset_returns_to_native(host, controller):
    _load(host)
    host.advance(CALIBRATED_AT + 10, drops_per_second=5)
    session = controller.session
    assert session.current_target_fps == 55
    assert len(session.steady_samples) == 1
    host.forget_calls()

    host.commands[RESET_COMMAND]()
    assert session.current_target_fps == 60
    assert len(session.steady_samples) == 0
    assert controller.phase is Phase.STEADY_STATE
    assert host.filter_calls == [None]
    assert host.messages == ["Native 60fps", "Auto fps reset to native 60fps"]


def test_reset_at_native_only_notifies(host, controller):
    _load(host)
    host.advance(CALIBRATED_AT)
    host.forget_calls()
    controller.reset()
    assert host.filter_calls == []
    assert host.messages == ["Auto fps reset to native 60fps"]


def test_reset_without_file(host, controller):
    controller.reset()
    assert host.messages == ["Auto fps: no video loaded"]
    assert host.filter_calls == []


def test_diagnostic_is_read_only(host, controller, caplog):
    _load(host)
    host.advance(CALIBRATED_AT + 10)
    before = controller.session.snapshot()

    with caplog.at_level(logging.INFO):
        report = host.commands[TEST_COMMAND]()
    assert report["phase"] == "steady-state"
    assert report["initialized"] is True
    assert report["timer_active"] is True
    assert controller.session.snapshot() == before
    assert host.messages[-1] == "Auto fps: Current state: active"
    assert "initialized: True" in caplog.text


def test_diagnostic_without_file(host, controller):
    report = controller.diagnostic()
    assert report == {"phase": "no-file", "initialized": False, "timer_active": False}
    assert host.messages == ["Auto fps: Current state: inactive"]


def test_report_matches_diagnostic_without_notices(host, controller):
    _load(host)
    host.advance(CALIBRATED_AT + 10, drops_per_second=5)
    host.forget_calls()

    report = controller.report()
    assert host.messages == []
    assert report == controller.diagnostic()


def test_report_is_detached_from_session(host, controller):
    _load(host)
    host.advance(CALIBRATED_AT + 30)
    report = controller.report()
    window = list(report["steady_samples"])

    controller.session.steady_samples.push(99.0)
    assert report["steady_samples"] == window
