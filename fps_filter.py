"""
fps_filter.py – turns a target fps into player state.
"""

from __future__ import annotations

import logging

from fps_session import SessionState
from host import PlayerHost

log = logging.getLogger(__name__)

OSD_SECONDS = 2


class FilterApplier:
    def __init__(self, host: PlayerHost) -> None:
        self.host = host

    def apply(self, session: SessionState, target_fps: int) -> bool:
        """
        Enforce *target_fps* for the current file.

        Returns False (and touches nothing) when the target is already
        in force, so repeated calls never rebuild the filter.
        """
        if target_fps == session.current_target_fps:
            return False
        session.current_target_fps = target_fps

        if target_fps >= session.native_fps:
            self.host.set_rate_limiting_filter(None)
            self.host.set_display_timing_override(session.native_fps)
            log.info("Removed fps limiter – native %dfps", session.native_fps)
            self.host.show_transient_message(f"Native {session.native_fps}fps", OSD_SECONDS)
        else:
            self.host.set_rate_limiting_filter(target_fps)
            self.host.set_display_timing_override(target_fps)
            log.info("Limited to %dfps (native %dfps)", target_fps, session.native_fps)
            self.host.show_transient_message(f"Adjusted to {target_fps}fps", OSD_SECONDS)
        return True
