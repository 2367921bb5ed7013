import argparse
import logging

import config


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        handlers=[
            logging.FileHandler(config.LOG_FILE, encoding="utf-8"),
            logging.StreamHandler(),
        ],
    )


def parse_args(argv=None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(
        description="Playlist player that limits the frame rate when frames drop.")
    ap.add_argument("paths", nargs="*", default=[config.MEDIA_PATH],
                    help=f"media files or folders (default: ./{config.MEDIA_PATH})")
    ap.add_argument("--no-auto-fps", action="store_true",
                    help="play at native rate, never limit")
    ap.add_argument("--windowed", action="store_true", help="do not go fullscreen")
    ap.add_argument("--loop", action=argparse.BooleanOptionalAction,
                    default=config.LOOP_PLAYLIST, help="restart after the last file")
    ap.add_argument("--web-port", type=int, default=config.WEB_PORT,
                    help="web remote port (0 disables it)")
    ap.add_argument("--log-level", default=config.LOG_LEVEL)
    return ap.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.log_level)
    if args.windowed:
        config.FULLSCREEN = False

    # imported late so --help works without a display / GStreamer
    from app import PlaylistPlayer
    from playlist_builder import build_playlist
    import web_remote

    player = PlaylistPlayer(build_playlist(args.paths),
                            auto_fps=config.AUTO_FPS_ENABLED and not args.no_auto_fps,
                            loop=args.loop)
    if args.web_port:
        web_remote.start(player, args.web_port)
    player.run()


if __name__ == "__main__":
    main()
