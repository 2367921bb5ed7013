"""
media_probe.py – what kind of file is this, and how fast does it run?

Uses PyAV so the answer is known before GStreamer has prerolled.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

import av  # PyAV – thin FFmpeg bindings

log = logging.getLogger(__name__)

# codecs that only ever carry a single picture when muxed next to audio
_STILL_CODECS = {"mjpeg", "png", "bmp", "gif", "webp", "tiff", "jpegls"}
_IMAGE_EXT = (".jpg", ".jpeg", ".png", ".bmp", ".gif", ".webp", ".tif", ".tiff")


@dataclass
class MediaInfo:
    path: str
    container_fps: Optional[float] = None
    stream_fps: Optional[float] = None
    duration: float = 0.0
    has_video: bool = False
    is_image: bool = False
    is_album_art: bool = False

    @property
    def is_still(self) -> bool:
        return self.is_image or self.is_album_art or not self.has_video

    @property
    def fps(self) -> Optional[float]:
        return self.container_fps or self.stream_fps


def probe(fp: str) -> MediaInfo:
    """Best-effort probe; unreadable files come back as plain video."""
    info = MediaInfo(path=fp, has_video=True)
    try:
        with av.open(fp) as c:
            vs = next((s for s in c.streams if s.type == "video"), None)
            has_audio = any(s.type == "audio" for s in c.streams)
            if c.duration:
                info.duration = c.duration / av.time_base

            if vs is None:
                info.has_video = False
                return info

            if vs.average_rate:
                info.container_fps = float(vs.average_rate)
            if vs.guessed_rate:
                info.stream_fps = float(vs.guessed_rate)

            fmt = c.format.name or ""
            single = (vs.frames or 0) <= 1
            info.is_image = (
                "image2" in fmt or fmt.endswith("_pipe")
                or fp.lower().endswith(_IMAGE_EXT)
            )
            info.is_album_art = (
                has_audio and single and vs.codec_context.name in _STILL_CODECS
            )
    except Exception:
        log.debug("Probe failed for %s", os.path.basename(fp), exc_info=True)
    return info
