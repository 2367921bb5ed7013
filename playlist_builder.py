"""
playlist_builder.py  – turns command-line paths into an ordered playlist.

Folders are expanded to the media files they contain (natural sort, so
ep2 plays before ep10); plain files are kept in the order given.
"""
from __future__ import annotations
import logging, os, re, typing as _t

log = logging.getLogger(__name__)

MEDIA_EXT = (".mp4", ".mkv", ".avi", ".mov", ".webm", ".flv", ".m4v",
             ".mp3", ".flac", ".m4a", ".ogg",
             ".jpg", ".jpeg", ".png")

# ---------- natural sort --------------------------------------------------
def _nat_key(s: str) -> list[_t.Union[int, str]]:
    return [int(t) if t.isdigit() else t.lower()
            for t in re.split(r"(\d+)", s)]


def _is_media(name: str) -> bool:
    return name.lower().endswith(MEDIA_EXT)

# ---------- builder -------------------------------------------------------
def build_playlist(paths: _t.Iterable[str]) -> list[str]:
    playlist: list[str] = []
    for p in paths:
        if os.path.isdir(p):
            names = [f for f in os.listdir(p)
                     if _is_media(f) and os.path.isfile(os.path.join(p, f))]
            names.sort(key=_nat_key)
            playlist += [os.path.abspath(os.path.join(p, n)) for n in names]
        elif os.path.isfile(p):
            playlist.append(os.path.abspath(p))
        else:
            log.warning("Skipping missing path: %s", p)

    log.info("Playlist built: %d file(s)", len(playlist))
    return playlist


# -------------------------------------------------------------------------
if __name__ == "__main__":
    import argparse
    ap = argparse.ArgumentParser(description="Print the playlist that would be played")
    ap.add_argument("paths", nargs="*", default=["movies"],
                    help="files or folders (default: ./movies)")
    args = ap.parse_args()

    for fp in build_playlist(args.paths):
        print(fp)
