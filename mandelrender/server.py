"""
Serving collaborators: every request renders a fresh image around a newly
selected zoom point. The PNG is fully encoded before anything is written
to the client, so a failed render turns into an error status rather than
a truncated image.
"""
from __future__ import annotations

import random
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any, BinaryIO, Dict, List, Optional, Tuple, Type

from mandelrender.output.png_writer import MIME_TYPE, OutputError, encode_png
from mandelrender.pipeline import render_image, select_point
from mandelrender.util.logging_setup import get_logger
from mandelrender.zoompoints import make_rng

NO_CACHE_HEADERS: List[Tuple[str, str]] = [
    ("Cache-Control", "no-store, no-cache, must-revalidate, max-age=0"),
    ("Cache-Control", "post-check=0, pre-check=0"),
    ("Pragma", "no-cache"),
]

def render_png(cfg: Dict[str, Any], rng: random.Random, log_queue=None) -> bytes:
    logger = get_logger()
    point = select_point(cfg, rng)
    logger.info("Serving zoom point %s", point.name)
    img = render_image(cfg, point, log_queue=log_queue, log_level=logger.getEffectiveLevel())
    return encode_png(img)

def make_handler(cfg: Dict[str, Any], rng: Optional[random.Random] = None, log_queue=None) -> Type[BaseHTTPRequestHandler]:
    if rng is None:
        rng = make_rng(cfg.get("seed"))

    class RenderHandler(BaseHTTPRequestHandler):

        def do_GET(self):
            logger = get_logger()
            try:
                body = render_png(cfg, rng, log_queue)
            except Exception:
                logger.exception("Render failed for %s", self.path)
                self.send_error(500, "Render failed")
                return

            self.send_response(200)
            self.send_header("Content-Type", MIME_TYPE)
            for k, v in NO_CACHE_HEADERS:
                self.send_header(k, v)
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            try:
                self.wfile.write(body)
            except OSError as e:
                logger.error("Response write failed for %s: %s", self.client_address, e)

        def log_message(self, format, *args):
            get_logger().info("%s - %s", self.address_string(), format % args)

    return RenderHandler

def make_server(cfg: Dict[str, Any], rng: Optional[random.Random] = None, log_queue=None) -> HTTPServer:
    return HTTPServer((str(cfg["host"]), int(cfg["port"])), make_handler(cfg, rng, log_queue))

def serve_http(cfg: Dict[str, Any], rng: Optional[random.Random] = None, log_queue=None) -> None:
    logger = get_logger()
    server = make_server(cfg, rng, log_queue)
    host, port = server.server_address[:2]
    logger.info("Server started http://%s:%s", host, port)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()
        logger.info("Server stopped.")

def serve_cgi(cfg: Dict[str, Any], stream: BinaryIO, rng: Optional[random.Random] = None, log_queue=None) -> None:
    """Write a single CGI response (headers, blank line, PNG body) to ``stream``."""
    if rng is None:
        rng = make_rng(cfg.get("seed"))
    body = render_png(cfg, rng, log_queue)

    headers = [("Content-Type", MIME_TYPE)] + NO_CACHE_HEADERS + [("Content-Length", str(len(body)))]
    head = "".join(f"{k}: {v}\r\n" for k, v in headers) + "\r\n"
    try:
        stream.write(head.encode("latin-1"))
        stream.write(body)
        stream.flush()
    except OSError as e:
        raise OutputError(f"Failed to write CGI response: {e}") from e
