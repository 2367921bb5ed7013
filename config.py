# config.py
"""
Configuration settings for the auto-fps playlist player.
"""

# ── Basic Application Settings ──────────────────────────────────────────────

# Folder scanned when no media paths are given on the command line
MEDIA_PATH = "movies"

# Restart the playlist from the top after the last file ends
LOOP_PLAYLIST = True

# Display settings
FULLSCREEN = True
WINDOWED_SIZE = (800, 600)

# Main-loop pacing when no display-timing override is active
FPS = 60

SHOW_OVERLAYS = True

# Web remote
WEB_PORT = 8080
DIAG_REFRESH_INTERVAL = 1.0

# Logging (the web remote serves this file at /log)
LOG_FILE = "runtime.log"
LOG_LEVEL = "INFO"

# ── Auto fps adjustment ────────────────────────────────────────────────────

AUTO_FPS_ENABLED = True

AUTO_FPS_INITIAL_SAMPLE_COUNT = 10   # 1 sample per second during calibration
AUTO_FPS_SAMPLE_INTERVAL      = 10   # seconds between steady-state measurements
AUTO_FPS_SAMPLE_COUNT         = 6    # window kept for outlier filtering
AUTO_FPS_STEP                 = 5    # snap to 25, 30, 35, 40 …
AUTO_FPS_MIN_FPS              = 25   # never limit below this
AUTO_FPS_WARNING_THRESHOLD    = 30   # warn below this, unless the file is slower
AUTO_FPS_INITIAL_DELAY        = 2    # let playback settle before calibrating
AUTO_FPS_DROP_THRESHOLD       = 2    # drops/sec considered "significant"
AUTO_FPS_FALLBACK_FPS         = 60   # when the file's rate can't be detected

# ── OSD durations ──────────────────────────────────────────────────────────

OSD_DEFAULT_DURATION = 2.0
