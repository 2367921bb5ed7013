#!/usr/bin/env python3
"""
app.py – playlist player with adaptive frame-rate limiting

Plays a list of files through a single VideoPlayer, draws frames and the
OSD with pygame, and fires "file-loaded" / "end-file" for the auto-fps
controller.  Input is dispatched by events.py; every callback (keys,
web remote, timers) runs on this main loop.
"""
from __future__ import annotations

import logging
from typing import Optional

import pygame

import config
import media_probe
import web_remote
from auto_fps    import AutoFpsController
from events      import EventManager
from fps_session import AutoFpsSettings
from host        import END_FILE, FILE_LOADED
from overlays    import OsdMessage, draw_overlay
from player_host import GstPlayerHost
from renderer    import render_frame
from timing      import TimerScheduler
from video_player import VideoPlayer

log = logging.getLogger(__name__)


class PlaylistPlayer:
    def __init__(self, playlist: list[str], auto_fps: bool = True,
                 loop: Optional[bool] = None):
        # window ----------------------------------------------------------
        pygame.init()
        pygame.mouse.set_visible(False)
        self.screen = self._set_mode()
        self.clock = pygame.time.Clock()

        # core state ------------------------------------------------------
        self.playlist  = playlist
        self.index     = 0
        self.loop      = config.LOOP_PLAYLIST if loop is None else loop
        self.loaded    = False
        self.player    = VideoPlayer()
        self.scheduler = TimerScheduler()
        self.osd       = OsdMessage()
        self.host      = GstPlayerHost(self.player, self.scheduler, self.osd)
        self.force_overlay = False

        self.auto_fps: Optional[AutoFpsController] = None
        if auto_fps:
            settings = AutoFpsSettings.from_config(config)
            self.auto_fps = AutoFpsController(self.host, settings).attach()

    # ── display ------------------------------------------------------------
    def _set_mode(self) -> pygame.Surface:
        screen = pygame.display.set_mode(
            (0, 0) if config.FULLSCREEN else config.WINDOWED_SIZE,
            pygame.FULLSCREEN if config.FULLSCREEN else 0,
        )
        pygame.mouse.set_visible(False)
        return screen

    def _pace_fps(self) -> int:
        return int(self.host.display_fps or config.FPS)

    # ── file lifecycle -----------------------------------------------------
    @property
    def current_path(self) -> str:
        return self.playlist[self.index] if self.playlist else ""

    def _open_current(self) -> bool:
        self._end_file()
        fp = self.current_path
        self.host.media = media_probe.probe(fp)
        try:
            self.player.open(fp)
        except RuntimeError as exc:
            log.error("Cannot play %s: %s", fp, exc)
            self.host.media = None
            return False
        self.loaded = True
        log.info("Playing %s", fp)
        EventManager.emit(FILE_LOADED)
        return True

    def _end_file(self) -> None:
        if not self.loaded:
            return
        self.loaded = False
        EventManager.emit(END_FILE)
        self.player.close()
        self.host.display_fps = None
        self.host.limit_fps = None

    def _step(self, step: int) -> bool:
        """Open the next playable file *step* away; False when the list is done."""
        n = len(self.playlist)
        for _ in range(n):
            nxt = self.index + step
            if not self.loop and not 0 <= nxt < n:
                return False
            self.index = nxt % n
            if self._open_current():
                return True
        return False

    # ── actions ------------------------------------------------------------
    def _dispatch(self, act: dict) -> bool:
        """Handle one queued action; returns False to stop the loop."""
        t = act["type"]
        if t == "quit":
            return False
        if t == "toggle_overlay":
            self.force_overlay ^= True
        elif t == "toggle_pause" and self.loaded:
            if self.player.paused:
                self.player.resume()
            else:
                self.player.pause()
            self.osd.show("Paused" if self.player.paused else "Playing",
                          config.OSD_DEFAULT_DURATION)
        elif t == "switch_file":
            return self._step(1 if act.get("to") == "next" else -1) or self.loaded
        elif t == "toggle_fullscreen":
            config.FULLSCREEN ^= True
            self.screen = self._set_mode()
        elif t == "command":
            EventManager.run_command(act["name"])
        return True

    def status(self) -> dict:
        """Fresh status dict; call on the main loop only."""
        fps = self.auto_fps.report() if self.auto_fps else {}
        return {
            "path": self.current_path if self.loaded else "",
            "index": self.index,
            "count": len(self.playlist),
            "paused": self.player.paused,
            "display_fps": self.host.display_fps,
            "limit_fps": self.host.limit_fps,
            "auto_fps": fps,
        }

    # ── main loop ----------------------------------------------------------
    def run(self):
        if not self.playlist:
            log.error("Nothing to play")
            pygame.quit()
            return

        self.index = -1
        running = self._step(1)
        while running:
            for e in pygame.event.get():
                EventManager.handle(e)

            while running and (act := EventManager.poll()):
                running = self._dispatch(act)

            if running and self.loaded and self.player.eos:
                self._end_file()
                running = self._step(1)

            self.scheduler.run_due()

            frame = self.player.decode_frame() if self.loaded else None
            render_frame(self.screen, frame, self.player.sar)

            status = self.status()
            web_remote.publish_status(status)
            draw_overlay(
                self.screen,
                self.osd,
                self.current_path if self.loaded else "",
                status["auto_fps"],
                self.player.get_position_sec() if self.loaded else 0.0,
                self.force_overlay,
            )

            pygame.display.flip()
            self.clock.tick(self._pace_fps())

        self._end_file()
        self.scheduler.clear()
        pygame.quit()
