"""
overlays.py

Pygame on-screen display for the playlist player: transient messages
(the auto-fps notices land here), a file/fps badge and an optional
stats panel.
"""

from __future__ import annotations

import os, time, pygame, config

# ── colours ────────────────────────────────────────────────────────────────
WHITE = (255, 255, 255)
GREEN = (0, 255, 0)
YEL   = (200, 200, 50)
BG    = (0, 0, 0, 180)

if not hasattr(config, "SHOW_OVERLAYS"):
    config.SHOW_OVERLAYS = False

pygame.font.init()


# ── transient message ──────────────────────────────────────────────────────
class OsdMessage:
    """Last message wins; it disappears once its duration has elapsed."""

    def __init__(self, clock=time.monotonic):
        self.clock  = clock
        self.text   = ""
        self.expire = 0.0

    def show(self, text: str, duration: float) -> None:
        self.text   = text
        self.expire = self.clock() + duration

    def current(self) -> str | None:
        if self.text and self.clock() < self.expire:
            return self.text
        return None


# ── helpers ────────────────────────────────────────────────────────────────
def _compute_font_sizes(h: int) -> tuple[int, int, int]:
    return max(12, h // 60), max(16, h // 45), max(24, h // 20)


def _fmt_hms(sec: float) -> str:
    sec = int(max(0, sec))
    m, s = divmod(sec, 60)
    h, m = divmod(m, 60)
    return f"{h:02d}:{m:02d}:{s:02d}"


def _boxed(font, text: str, colour, pt: int) -> pygame.Surface:
    surf = font.render(text, True, colour)
    bg   = pygame.Surface(
        (surf.get_width() + pt // 3, surf.get_height() + pt // 5),
        pygame.SRCALPHA,
    )
    bg.fill(BG)
    bg.blit(surf, (pt // 6, pt // 10))
    return bg


# ── main entry point ───────────────────────────────────────────────────────
def draw_overlay(
    surface: pygame.Surface,
    osd: OsdMessage,
    path: str,
    fps_status: dict,
    position_sec: float,
    show_panel: bool,
) -> None:
    sw, sh = surface.get_width(), surface.get_height()
    tiny_pt, small_pt, large_pt = _compute_font_sizes(sh)
    FT = pygame.font.SysFont("monospace", tiny_pt)
    FS = pygame.font.SysFont("monospace", small_pt)
    FL = pygame.font.SysFont("monospace", large_pt)

    # ── transient message (always) ───────────────────────────────────────
    text = osd.current()
    if text:
        msg = _boxed(FL, text, GREEN, large_pt)
        surface.blit(msg, (20, 20))

    if not (show_panel and config.SHOW_OVERLAYS):
        return

    # ── fps badge ────────────────────────────────────────────────────────
    target = fps_status.get("target_fps")
    native = fps_status.get("native_fps")
    if target and native:
        colour = GREEN if target >= native else YEL
        badge  = _boxed(FS, f"{target}/{native} fps", colour, small_pt)
    else:
        badge  = _boxed(FS, "auto fps idle", WHITE, small_pt)
    surface.blit(badge, (sw - badge.get_width() - 10, 10))

    # ── stats panel ─────────────────────────────────────────────────────
    lines = [
        os.path.basename(path) or "-",
        f"Position     {_fmt_hms(position_sec)}",
        f"Phase        {fps_status.get('phase', 'no-file')}",
        f"Drop window  {fps_status.get('steady_samples', [])}",
        f"Sampling     {'on' if fps_status.get('timer_active') else 'off'}",
        f"Clock        {time.strftime('%H:%M:%S')}",
    ]

    widest = max(FT.size(t)[0] for t in lines)
    pbg = pygame.Surface(
        (widest + 20, len(lines) * (FT.get_linesize() + 2) + 10),
        pygame.SRCALPHA,
    )
    pbg.fill(BG)
    y = 5
    for t in lines:
        pbg.blit(FT.render(t, True, WHITE), (10, y))
        y += FT.get_linesize() + 2
    surface.blit(pbg, (sw - pbg.get_width() - 10, sh - pbg.get_height() - 10))
