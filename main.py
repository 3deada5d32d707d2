import logging
import sys
import os
import argparse
from PySide6.QtWidgets import QApplication
from config.config_manager import ConfigManager
from gui.main_window import MainWindow


def setup_logging(log_level):
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)
    log_dir = os.path.expanduser("~/.photo-slideshow")
    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, "slideshow.log")
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        handlers=[
            logging.FileHandler(log_path, mode="a"),
            logging.StreamHandler(sys.stdout)
        ]
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Photo slideshow: full-screen photos from a JSON list or a directory.")
    parser.add_argument('source', help='Slideshow JSON (path or http(s) URL) or a directory of images.')
    parser.add_argument(
        '--timeout',
        type=int,
        default=None,
        help='Milliseconds each image stays on screen; overrides the source and config.'
    )
    parser.add_argument(
        '--shuffle',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='Show the images in random order. Use --no-shuffle to keep the listed order.'
    )
    parser.add_argument(
        '--fullscreen',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='Start full screen. Use --no-fullscreen for a normal window.'
    )
    parser.add_argument(
        '--log-level',
        default=None,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Initial logging level; Q and V change it while running.'
    )
    parser.add_argument('--config', default=None, help='Path to an alternative config.yaml.')
    return parser


def main():
    args = build_parser().parse_args()

    try:
        config_manager = ConfigManager(args.config)
    except ValueError as e:
        setup_logging("INFO")
        logging.error(str(e))
        return 1

    setup_logging(args.log_level or config_manager.logging_level)

    logging.info("Starting photo slideshow")

    fullscreen = args.fullscreen
    if fullscreen is None:
        fullscreen = config_manager.get("slideshow.fullscreen", True)

    app = QApplication(sys.argv)
    app.setApplicationName("Photo Slideshow")

    window = MainWindow(config_manager, args.source, shuffle=args.shuffle, timeout_ms=args.timeout)
    if fullscreen:
        window.showFullScreen()
    else:
        window.show()
    logging.info("[startup] window shown")

    window.start()

    exit_code = app.exec()

    logging.info(f"Application exiting with code {exit_code}.")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
