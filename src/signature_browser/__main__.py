"""Demo window: ``python -m signature_browser --base-url URL --token TOKEN``."""

import argparse
import logging
import sys

from PyQt6.QtWidgets import QApplication, QMainWindow

from signature_browser.api.client import ApiSession, SignatureApiClient
from signature_browser.core.log_utils import configure_logging
from signature_browser.protocols.browser_config import BrowserConfig, set_browser_config
from signature_browser.widgets import SignaturePathSelector, SingleSignaturePathPicker

logger = logging.getLogger("signature_browser.demo")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="signature_browser", description=__doc__)
    parser.add_argument("--base-url", default=BrowserConfig.base_url)
    parser.add_argument("--token", default=None, help="Session token sent as Authorization header")
    parser.add_argument("--single", action="store_true", help="Show the single-path picker")
    parser.add_argument("--path", default="", help="Initial path as comma separated element IDs")
    parser.add_argument("--log-dir", default=None)
    parser.add_argument("--log-level", default="INFO")
    return parser


def parse_path(text: str):
    return [int(part) for part in text.split(",") if part.strip()]


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    set_browser_config(BrowserConfig(base_url=args.base_url, log_dir=args.log_dir))
    configure_logging(args.log_level.upper(), args.log_dir)

    app = QApplication.instance() or QApplication(sys.argv[:1])
    client = SignatureApiClient(ApiSession.from_config(token=args.token))
    initial = parse_path(args.path)

    window = QMainWindow()
    if args.single:
        widget = SingleSignaturePathPicker(client, path=initial or None)
        widget.path_changed.connect(lambda path: logger.info("Path changed: %s", path))
    else:
        widget = SignaturePathSelector(client, paths=[initial] if initial else [])
        widget.paths_changed.connect(lambda paths: logger.info("Paths changed: %s", paths))
    window.setCentralWidget(widget)
    window.setWindowTitle("Signature Browser")
    window.resize(600, 400)
    window.show()

    try:
        return app.exec()
    finally:
        client.close()


if __name__ == "__main__":
    sys.exit(main())
