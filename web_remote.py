#!/usr/bin/env python3
"""
web_remote.py  –  web UI + diagnostics + remote control

Endpoints
---------
/               → HTML page with buttons, player status, diagnostics, link to /log
/status         → JSON object: current file, pause state, auto-fps snapshot
/autofps        → JSON object: auto-fps phase, targets, sample window, timer
/diag, /data    → JSON object of machine diagnostic metrics
/action?cmd=…   → inject control commands (next, prev, pause, overlay, quit,
                  auto-fps-reset, auto-fps-toggle, auto-fps-test)
/log            → contents of the runtime log (if present)

Requests run on the server's threads.  They never touch live player
objects: the main loop publishes a fresh status dict every frame and
executes the queued actions.
"""

from __future__ import annotations
import http.server
import socketserver
import threading
import urllib.parse
import json
import logging
import time
import os
import traceback
import psutil
import platform
from typing import TYPE_CHECKING, Any

from events import EventManager
import config

if TYPE_CHECKING:                       # avoid circular import at runtime
    from app import PlaylistPlayer

log = logging.getLogger(__name__)

# ── diagnostics refresh cadence ───────────────────────────────────────────
_last_diag_time = 0.0
_diag_interval  = getattr(config, "DIAG_REFRESH_INTERVAL", 1.0)

# ── global diagnostic store ───────────────────────────────────────────────
monitor_data: dict[str, Any] = {
    "cpu_percent":       0.0,
    "cpu_per_core":      [],
    "mem_used":          "0 MB",
    "mem_total":         "0 MB",
    "script_uptime":     "0d 00:00:00",
    "load_avg":          "",
    "last_http_crash":   "",
    "python_version":    platform.python_version(),
}

_script_start = time.monotonic()

# ── player status, replaced wholesale by the main loop ────────────────────
_NO_FILE = {"phase": "no-file", "initialized": False, "timer_active": False}
_player_status: dict[str, Any] = {"auto_fps": dict(_NO_FILE)}

# web cmd → queued action
ACTIONS: dict[str, dict] = {
    "next":            {"type": "switch_file", "to": "next"},
    "prev":            {"type": "switch_file", "to": "prev"},
    "pause":           {"type": "toggle_pause"},
    "overlay":         {"type": "toggle_overlay"},
    "quit":            {"type": "quit"},
    "auto-fps-reset":  {"type": "command", "name": "auto-fps-reset"},
    "auto-fps-toggle": {"type": "command", "name": "auto-fps-toggle"},
    "auto-fps-test":   {"type": "command", "name": "auto-fps-test"},
}


# ── helpers ────────────────────────────────────────────────────────────────
def _fmt_duration(secs: float) -> str:
    d, rem = divmod(int(secs), 86400)
    h, rem = divmod(rem, 3600)
    m, s   = divmod(rem, 60)
    return f"{d}d {h:02}:{m:02}:{s:02}"


def _maybe_update_diagnostics() -> None:
    global _last_diag_time
    now = time.monotonic()
    if now - _last_diag_time >= _diag_interval:
        _last_diag_time = now
        _update_diagnostics()


def _update_diagnostics() -> None:
    """Refresh CPU, memory, uptime and load in `monitor_data`."""
    per_core = psutil.cpu_percent(percpu=True)
    avg_cpu  = sum(per_core) / len(per_core) if per_core else 0.0
    monitor_data["cpu_percent"]  = round(avg_cpu, 1)
    monitor_data["cpu_per_core"] = [round(p, 1) for p in per_core]
    vm = psutil.virtual_memory()
    monitor_data["mem_used"]  = f"{vm.used // 1024**2} MB"
    monitor_data["mem_total"] = f"{vm.total // 1024**2} MB"
    monitor_data["script_uptime"] = _fmt_duration(time.monotonic() - _script_start)
    try:
        la = os.getloadavg()
        monitor_data["load_avg"] = ", ".join(f"{x:.2f}" for x in la)
    except OSError:
        monitor_data["load_avg"] = "N/A"


def publish_status(status: dict) -> None:
    """Make *status* the dict served to web requests.  Never mutate it later."""
    global _player_status
    _player_status = status


def player_status() -> dict:
    return _player_status


def queue_command(cmd: str) -> bool:
    """Queue the action behind a web *cmd*; False if the cmd is unknown."""
    act = ACTIONS.get(cmd)
    if act is None:
        return False
    EventManager.post(dict(act))
    return True


# ── reusable threaded HTTP server ──────────────────────────────────────────
class ReusableTCPServer(socketserver.ThreadingMixIn, http.server.HTTPServer):
    daemon_threads      = True
    allow_reuse_address = True


# ── request handler ────────────────────────────────────────────────────────
class RemoteHandler(http.server.BaseHTTPRequestHandler):
    def log_message(self, fmt, *args):
        log.debug("web: " + fmt, *args)

    def do_GET(self):
        parsed = urllib.parse.urlparse(self.path)
        path, qs = parsed.path, parsed.query

        if path == "/":
            return self._serve_html()
        if path == "/status":
            return self._serve_json(player_status())
        if path == "/autofps":
            return self._serve_json(player_status().get("auto_fps", _NO_FILE))
        if path in ("/diag", "/data"):
            _maybe_update_diagnostics()
            return self._serve_json(monitor_data)
        if path == "/log":
            return self._serve_log()
        if path == "/action":
            return self._serve_action(qs)

        self.send_error(404, "Not found")

    # ── helpers for each route ───────────────────────────────────────────
    def _serve_html(self):
        self.send_response(200)
        self.send_header("Content-Type", "text/html")
        self.end_headers()
        self.wfile.write(HTML_PAGE.encode("utf-8"))

    def _serve_json(self, obj: Any):
        b = json.dumps(obj).encode("utf-8")
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(b)))
        self.end_headers()
        self.wfile.write(b)

    def _serve_log(self):
        try:
            with open(getattr(config, "LOG_FILE", "runtime.log"), "rb") as f:
                data = f.read()
        except OSError:
            return self.send_error(404, "Log file not found")
        self.send_response(200)
        self.send_header("Content-Type", "text/plain; charset=utf-8")
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        self.wfile.write(data)

    def _serve_action(self, query: str):
        qs = urllib.parse.parse_qs(query)
        cmd = qs.get("cmd", [""])[0]
        if not queue_command(cmd):
            return self.send_error(400, "Unknown cmd")
        self.send_response(204)
        self.end_headers()


# ── simple HTML UI ─────────────────────────────────────────────────────────
HTML_PAGE = """
<!doctype html><html><head><meta charset="utf-8">
<title>Player Remote & Diagnostics</title>
<style>
 body{background:#000;color:#0f0;font-family:monospace;padding:1em;}
 a.button{display:inline-block;margin:4px;padding:6px 12px;border:1px solid #0f0;
          text-decoration:none;color:#0f0;}
 pre{margin:0.5em 0;font-family:monospace;}
</style></head><body>
<h2>Player Remote</h2>
<a class="button" href="/action?cmd=prev">◀ Prev</a>
<a class="button" href="/action?cmd=pause">Pause / Play</a>
<a class="button" href="/action?cmd=next">Next ▶</a>

<!-- auto fps -->
<a class="button" href="/action?cmd=auto-fps-reset">Auto fps reset</a>
<a class="button" href="/action?cmd=auto-fps-toggle">Auto fps on/off</a>
<a class="button" href="/action?cmd=auto-fps-test">Auto fps state</a>

<!-- misc -->
<a class="button" href="/action?cmd=overlay">Toggle overlay</a>
<a class="button" href="/action?cmd=quit">Quit</a>
<a class="button" href="/log">View log</a>

<div><h3>Status</h3><pre id="status"></pre></div>
<div><h3>Diagnostics</h3><pre id="diag"></pre></div>

<script>
 function dump(obj){
   let txt = '';
   for (let [k,v] of Object.entries(obj)){
     txt += k.padEnd(20,' ') + JSON.stringify(v) + '\\n';
   }
   return txt;
 }
 async function refreshUI(){
   try {
     let s = await fetch('/status');
     document.getElementById('status').textContent = dump(await s.json());
     let d = await fetch('/diag');
     document.getElementById('diag').textContent = dump(await d.json());
   } catch(e){
     console.error(e);
   }
 }
 setInterval(refreshUI, 1000);
 refreshUI();
</script>
</body></html>
"""


# ── server bootstrap with auto-restart ────────────────────────────────────
def start(app: "PlaylistPlayer", port: int = getattr(config, "WEB_PORT", 8080)):
    publish_status(app.status())

    def _serve_loop():
        while True:
            try:
                with ReusableTCPServer(("", port), RemoteHandler) as httpd:
                    httpd.serve_forever()
            except Exception:
                monitor_data["last_http_crash"] = traceback.format_exc()
                log.exception("Web remote crashed, restarting")
                time.sleep(1)

    threading.Thread(target=_serve_loop, daemon=True).start()
    log.info("Web UI & diagnostics listening on port %d", port)
