# =========  video_player.py  =========
"""
GStreamer VideoPlayer with a run-time adjustable frame-rate limiter.

Public API
----------
open(path)
decode_frame()  → latest frame (HxWx3 uint8)
set_max_rate(fps | None)
pause() / resume()
dropped_frames()
close()
Properties
----------
.path    → current file path
.sar     → sample-aspect ratio
.fps     → negotiated stream frame rate (None if unknown / still image)
.paused
.eos     → set by the bus thread when the file finished
"""
import gi, threading, queue, numpy as np, pygame
gi.require_version("Gst", "1.0")
from gi.repository import Gst, GLib

import logging

log = logging.getLogger(__name__)

_UNLIMITED = 2**31 - 1      # videorate's own default for max-rate

# videorate only drops (never duplicates) so limiting can't add work
_SINK_DESC = (
    "videorate name=rate drop-only=true ! "
    "videoconvert ! "
    "video/x-raw,format=RGB ! "
    "appsink name=vsink emit-signals=true "
    "max-buffers=2 drop=true sync=true qos=true"
)


# ────────────────────────────────────────────────────────────────────────────
class VideoPlayer:
    def __init__(self):
        Gst.init(None)

        # build a playbin
        self.player = Gst.ElementFactory.make("playbin", "player")

        sink_bin    = Gst.parse_bin_from_description(_SINK_DESC, True)
        self._rate  = sink_bin.get_by_name("rate")
        self._vsink = sink_bin.get_by_name("vsink")
        self._vsink.connect("new-sample", self._on_sample)
        self.player.set_property("video-sink", sink_bin)
        self.player.set_property("audio-sink",
                                 Gst.ElementFactory.make("autoaudiosink", "aud"))

        # state
        self._q, self._last = queue.Queue(maxsize=1), None
        self._w = self._h = 0
        self._lock    = threading.Lock()
        self._skipped = 0          # frames decoded but never shown
        self.sar    = 1.0
        self.fps    = None
        self.path   = ""
        self.paused = False
        self.eos    = False
        self._ml  = None
        self._ml_thread = None
        self._bus_handler = None

    # ── public API ──────────────────────────────────────────────────────────
    def open(self, fp: str):
        self.close()
        while not self._q.empty():
            self._q.get_nowait()

        self.path   = fp
        self.eos    = False
        self.paused = False
        self._last  = None
        with self._lock:
            self._skipped = 0
        self.set_max_rate(None)
        self.player.set_property("uri", Gst.filename_to_uri(fp))
        self.player.set_state(Gst.State.PAUSED)

        # wait for preroll / caps
        bus = self.player.get_bus()
        msg = bus.timed_pop_filtered(
            5 * Gst.SECOND,
            Gst.MessageType.ASYNC_DONE | Gst.MessageType.ERROR,
        )
        if msg and msg.type == Gst.MessageType.ERROR:
            raise RuntimeError(msg.parse_error()[0])

        pad  = self._vsink.get_static_pad("sink")
        caps = pad.get_current_caps() if pad else None
        if caps:
            st = caps.get_structure(0)
            self._w, self._h = st.get_int("width")[1], st.get_int("height")[1]
            if st.has_field("pixel-aspect-ratio"):
                num, den = st.get_fraction("pixel-aspect-ratio")[-2:]
                self.sar = num / den if den else 1.0
            if st.has_field("framerate"):
                num, den = st.get_fraction("framerate")[-2:]
                self.fps = num / den if den and num else None

        self.player.set_state(Gst.State.PLAYING)
        pygame.mouse.set_visible(False)

        # bus watch in a side loop
        self._ml = GLib.MainLoop()
        bus.add_signal_watch()
        self._bus_handler = bus.connect("message", self._on_bus_msg)
        self._ml_thread = threading.Thread(target=self._ml.run, daemon=True)
        self._ml_thread.start()

    def decode_frame(self):
        data = None
        while True:
            try:
                nxt = self._q.get_nowait()
            except queue.Empty:
                break
            if data is not None:
                with self._lock:
                    self._skipped += 1
            data = nxt
        if data is not None:
            self._last = self._bytes_to_arr(data)
        return self._last

    def get_position_sec(self):
        ok, pos = self.player.query_position(Gst.Format.TIME)
        return pos / Gst.SECOND if ok else 0.0

    def set_max_rate(self, fps):
        """Limit delivered frames to *fps*; None lifts the limit."""
        self._rate.set_property("max-rate", int(fps) if fps else _UNLIMITED)

    def pause(self):
        self.player.set_state(Gst.State.PAUSED)
        self.paused = True

    def resume(self):
        self.player.set_state(Gst.State.PLAYING)
        self.paused = False

    def dropped_frames(self):
        """
        Cumulative late/undisplayed frames for the current file, or None
        when nothing is open.  Frames removed on purpose by the rate
        limiter are not counted.
        """
        if not self.path:
            return None
        stats = self._vsink.get_property("stats")
        sink_dropped = 0
        if stats is not None:
            ok, val = stats.get_uint64("dropped")
            sink_dropped = val if ok else 0
        with self._lock:
            return int(sink_dropped) + self._skipped

    def close(self):
        if self._ml:
            self._ml.quit()
            self._ml = None
        if self._ml_thread and threading.current_thread() is not self._ml_thread:
            self._ml_thread.join(timeout=0.5)
        self._ml_thread = None
        if self._bus_handler is not None:
            bus = self.player.get_bus()
            bus.disconnect(self._bus_handler)
            bus.remove_signal_watch()
            self._bus_handler = None
        self.player.set_state(Gst.State.NULL)
        self.path = ""
        self.fps  = None

    # ── internals ───────────────────────────────────────────────────────────
    def _bytes_to_arr(self, data: bytes):
        stride = len(data) // self._h
        rows   = np.frombuffer(data, np.uint8).reshape((self._h, stride))
        return np.ascontiguousarray(rows[:, : self._w * 3]
                                    .reshape((self._h, self._w, 3)))

    def _on_sample(self, sink):
        samp = sink.emit("pull-sample")
        if samp:
            buf = samp.get_buffer()
            ok, mi = buf.map(Gst.MapFlags.READ)
            if ok:
                try:
                    self._q.put_nowait(bytes(mi.data))
                except queue.Full:
                    with self._lock:
                        self._skipped += 1
                buf.unmap(mi)
        return Gst.FlowReturn.OK

    def _on_bus_msg(self, bus, msg):
        if msg.type == Gst.MessageType.EOS:
            self.eos = True
        elif msg.type == Gst.MessageType.ERROR:
            log.error("GStreamer error: %s", msg.parse_error()[0])
            self.eos = True
        return True
