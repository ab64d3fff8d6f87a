"""Companion display - periodically renders whatever snapshot the app shared."""
import argparse
import logging
import signal
import sys
import time
from datetime import datetime
from typing import Callable, Optional

from app_config import load_config
from override_store import OverrideStore
from scenarios import make_widget_snapshot
from shared_store import KeyValueStore, open_shared_store
from snapshot import SNAPSHOT_KEY
from weather_data import WidgetSnapshot
from widget_canvas import PILCanvas, TextCanvas
from widget_layout import render_snapshot

# How often the display re-reads the shared store
REFRESH_INTERVAL_SECONDS = 30 * 60


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser("WearWeather companion display")
    parser.add_argument("--interval", type=float, default=REFRESH_INTERVAL_SECONDS,
                        help="Seconds between re-renders")
    parser.add_argument("--once", action="store_true", help="Render once and exit")
    parser.add_argument("--png", help="Also write a PNG preview to this path")
    parser.add_argument("--log-file")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args()


def setup_logging(log_file: Optional[str], verbose: bool) -> None:
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=handlers
    )


def load_snapshot(
    store: KeyValueStore,
    override_store: OverrideStore,
    clock: Callable[[], datetime] = datetime.now
) -> WidgetSnapshot:
    """
    The snapshot to show right now.

    The app's shared snapshot if one is readable, otherwise one derived
    locally from the mock scenarios. Never fetches live weather.
    """
    snapshot = store.load(SNAPSHOT_KEY, WidgetSnapshot)
    if snapshot is not None:
        logging.info(f"Using shared snapshot from {time.strftime('%H:%M', time.localtime(snapshot.updated_at))}")
        return snapshot
    logging.info("No shared snapshot available, deriving one from the mock scenarios")
    return make_widget_snapshot(clock(), override_store.get())


def render_once(store: KeyValueStore, override_store: OverrideStore, png_path: Optional[str] = None) -> str:
    """Render the current snapshot; returns the console text."""
    snapshot = load_snapshot(store, override_store)
    canvas = TextCanvas()
    render_snapshot(canvas, snapshot)
    if png_path:
        image_canvas = PILCanvas()
        render_snapshot(image_canvas, snapshot)
        image_canvas.save(png_path)
        logging.info(f"Wrote preview to {png_path}")
    return canvas.to_text()


def signal_handler(signum, frame):
    logging.info("Received signal %s, shutting down", signum)
    raise KeyboardInterrupt()


def main() -> None:
    args = parse_args()
    setup_logging(args.log_file, args.verbose)
    config = load_config()

    store = open_shared_store(config.group_id, config.shared_dir, config.local_dir("widget"))
    override_store = OverrideStore(store)

    if args.once:
        print(render_once(store, override_store, args.png))
        return

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        while True:
            print(render_once(store, override_store, args.png))
            print()
            time.sleep(max(args.interval, 1.0))
    except KeyboardInterrupt:
        logging.info("Stopping companion display")


if __name__ == "__main__":
    main()
