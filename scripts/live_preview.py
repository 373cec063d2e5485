"""Live preview server: poll WienMobil, gate renders, serve the latest card."""

from __future__ import annotations

import argparse
from http.server import BaseHTTPRequestHandler, HTTPServer
import logging
from pathlib import Path
import threading
import time
from typing import Any

from transit_card.card import TransportCard
from transit_card.config import load_config
from transit_card.data.poller import WienMobilPoller
from transit_card.data.wienmobil_client import WienMobilClient
from transit_card.log import configure_logging
from transit_card.rendering import CardView, compose_card, save_frame

FRAME_PATH = Path("preview_output/card.png")

logger = logging.getLogger("transit_card.live_preview")


class PreviewHandler(BaseHTTPRequestHandler):
    def do_GET(self) -> None:  # noqa: N802
        if self.path == "/healthz":
            self.send_response(200)
            self.send_header("Content-Type", "text/plain; charset=utf-8")
            self.end_headers()
            self.wfile.write(b"ok")
            return

        if self.path == "/card.png":
            if not FRAME_PATH.exists():
                self.send_response(404)
                self.end_headers()
                return
            self.send_response(200)
            self.send_header("Content-Type", "image/png")
            self.end_headers()
            self.wfile.write(FRAME_PATH.read_bytes())
            return

        if self.path == "/":
            html = """<!doctype html>
<html>
  <head>
    <meta http-equiv="refresh" content="10">
    <style>
      body { background: #111; color: #fff; font-family: sans-serif; }
      img { width: 640px; image-rendering: pixelated; }
    </style>
    <title>Transit Card Preview</title>
  </head>
  <body>
    <h1>Transit Card Preview</h1>
    <img src="/card.png" alt="Card">
  </body>
</html>"""
            self.send_response(200)
            self.send_header("Content-Type", "text/html; charset=utf-8")
            self.end_headers()
            self.wfile.write(html.encode("utf-8"))
            return

        self.send_response(404)
        self.end_headers()

    def log_message(self, format: str, *args: Any) -> None:
        return


def _run_server(port: int) -> None:
    server = HTTPServer(("0.0.0.0", port), PreviewHandler)
    server.serve_forever()


def _write_frame(view: CardView) -> None:
    save_frame(compose_card(view), str(FRAME_PATH))
    logger.info("Frame written to %s", FRAME_PATH)


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--config", default="config/config.yaml", help="Path to the YAML config")
    parser.add_argument("--port", type=int, default=8080, help="Preview server port")
    parser.add_argument(
        "--no-server",
        action="store_true",
        help="Disable preview web server",
    )
    args = parser.parse_args()

    config = load_config(args.config)
    configure_logging(config.log)

    card = TransportCard(renderer=_write_frame)
    card.set_config(config.card)

    client = WienMobilClient(config.api.base_url, config.api.timeout_seconds)
    poller = WienMobilPoller(client, config.card)
    poller.start()

    if not args.no_server:
        server_thread = threading.Thread(target=_run_server, args=(args.port,), daemon=True)
        server_thread.start()

    last_seen = None
    try:
        while True:
            result = poller.get_latest()
            if result is not None and result.fetched_at != last_seen:
                last_seen = result.fetched_at
                rendered = card.update(result.states, result.errors)
                logger.info(
                    "Poll applied: %d ok, %d failed, rendered=%s",
                    len(result.states),
                    len(result.errors),
                    rendered,
                )
            time.sleep(1)
    except KeyboardInterrupt:
        poller.stop()
        card.teardown()
        return 0


if __name__ == "__main__":
    raise SystemExit(main())
