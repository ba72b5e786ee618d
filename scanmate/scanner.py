#!/usr/bin/env python3
"""
ScanMate - command line front end
Scans gallery images into pages and saves them as a named PDF
"""

import argparse
import logging
import queue
import sys

from .app import ScanMateApp
from .config import APP_TITLE, ScanMateConfig
from .engine import GalleryScanEngine
from .preview import render_page_strip, show_preview
from .utils import get_system_info

logger = logging.getLogger(__name__)


class EventQueue:
    """Runs engine callbacks on the thread that drains the queue"""

    def __init__(self):
        self._events = queue.Queue()

    def dispatch(self, fn, *args):
        self._events.put((fn, args))

    def run_next(self, timeout=None):
        fn, args = self._events.get(timeout=timeout)
        fn(*args)
        self._events.task_done()


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(description=APP_TITLE)
    parser.add_argument("images", nargs="*",
                        help="Gallery images to import, one page each")
    parser.add_argument("--name", "-n", type=str, default="",
                        help="File name of the saved PDF (without extension)")
    parser.add_argument("--mode", "-m", type=str, default=None, choices=["base", "full"],
                        help="Scanner mode: base keeps images as is, full straightens and cleans them")
    parser.add_argument("--page-limit", "-l", type=int, default=None,
                        help="Maximum number of pages per scan")
    parser.add_argument("--enhance", "-e", type=str, default=None,
                        choices=["auto", "text", "bw", "color", "none"],
                        help="Enhancement mode used in full scanner mode")
    parser.add_argument("--documents-dir", "-o", type=str, default=None,
                        help="Public documents directory the PDF is saved to")
    parser.add_argument("--files-dir", type=str, default=None,
                        help="App-private directory for the engine's combined PDF")
    parser.add_argument("--cache-dir", type=str, default=None,
                        help="Directory the engine writes scanned pages to")
    parser.add_argument("--strategy", type=str, default=None, choices=["concatenate", "combined"],
                        help="Save page streams concatenated or the engine's combined PDF")
    parser.add_argument("--reject-empty", action="store_true",
                        help="Refuse to save when no pages were scanned")
    parser.add_argument("--preview", "-p", action="store_true",
                        help="Show the scanned pages before saving")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Enable debug logging")
    return parser.parse_args(argv)


def build_config(args):
    return ScanMateConfig.from_env(
        documents_dir=args.documents_dir,
        files_dir=args.files_dir,
        cache_dir=args.cache_dir,
        scanner_mode=args.mode,
        page_limit=args.page_limit,
        enhancement_mode=args.enhance,
        export_strategy=args.strategy,
        empty_export_policy="reject" if args.reject_empty else None,
    )


def print_notices(app):
    while app.notices:
        print(app.dismiss_notice().message)


def main(argv=None):
    """Entry point function when script is run directly"""
    args = parse_arguments(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.debug("System info: %s", get_system_info())

    try:
        config = build_config(args)
    except ValueError as e:
        print(f"Error: {e}")
        return 2

    events = EventQueue()
    engine = GalleryScanEngine(
        picker=lambda page_limit: args.images,
        cache_dir=config.cache_dir,
        enhancement_mode=config.enhancement_mode,
        show_progress=True,
    )
    app = ScanMateApp(engine, config=config, dispatch=events.dispatch)

    try:
        app.start()
        app.set_file_name(args.name)

        if app.scan() is None:
            print_notices(app)
            return 1
        events.run_next()
        print_notices(app)

        if not app.pages:
            print("No pages scanned")
            return 1

        print(f"Scanned {len(app.pages)} page(s)")
        if args.preview:
            show_preview(render_page_strip(app.pages), APP_TITLE)

        path = app.save()
        print_notices(app)
        return 0 if path else 1
    finally:
        app.close()


if __name__ == "__main__":
    sys.exit(main())
