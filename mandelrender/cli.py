from __future__ import annotations

import argparse
import logging
import subprocess
import sys
from typing import Optional

from mandelrender.config import load_config, normalise_config
from mandelrender.output.png_writer import OutputError
from mandelrender.pipeline import render_to_file
from mandelrender.renderers.cpu import INTENSITY_MODES
from mandelrender.server import serve_cgi, serve_http
from mandelrender.util.logging_setup import WorkerLogRelay, configure_root_logging, get_logger
from mandelrender.util.manifest import build_manifest, write_manifest
from mandelrender.zoompoints import INTERESTING_POINTS, make_rng

def _git_commit() -> Optional[str]:
    try:
        r = subprocess.run(["git", "rev-parse", "HEAD"], capture_output=True, text=True, check=True)
        return r.stdout.strip()
    except (OSError, subprocess.CalledProcessError):
        return None

def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="mandelrender", description="Render a grayscale Mandelbrot still around a curated zoom point.")
    p.add_argument("--config", type=str, default=None, help="Path to config JSON. If omitted, built-in defaults are used.")
    p.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG","INFO","WARNING","ERROR"], help="Log level.")
    p.add_argument("--log-file", type=str, default="render.log", help="Log file path (rotating). Set empty to disable file logging.")
    p.add_argument("--width", type=int, default=None, help="Raster width in pixels.")
    p.add_argument("--height", type=int, default=None, help="Raster height in pixels.")
    p.add_argument("--zoom-point", type=str, default=None, help="Render this named zoom point instead of a random one.")
    p.add_argument("--seed", type=int, default=None, help="Seed for zoom point selection (defaults to the wall clock).")
    p.add_argument("--intensity", type=str, default=None, choices=list(INTENSITY_MODES), help="Grey level mapping: reference 'wrap' or saturating 'clamp'.")
    p.add_argument("--workers", type=int, default=None, help="Worker processes; 1 renders serially.")
    sub = p.add_subparsers(dest="cmd", required=True)

    r = sub.add_parser("render", help="Render one image to a PNG file.")
    r.add_argument("--output", type=str, default=None, help="Override output from config.")
    r.add_argument("--manifest", type=str, default=None, help="Write a JSON run manifest to this path.")
    r.add_argument("--progress", action="store_true", help="Show a progress bar over rows (serial renders only).")

    s = sub.add_parser("serve", help="Serve a freshly rendered PNG on every HTTP GET.")
    s.add_argument("--host", type=str, default=None, help="Bind address (defaults to config.host).")
    s.add_argument("--port", type=int, default=None, help="Bind port (defaults to config.port).")

    sub.add_parser("cgi", help="Write a single CGI image response to stdout.")
    sub.add_parser("points", help="List the available zoom points.")

    return p

def _apply_overrides(cfg: dict, args: argparse.Namespace) -> dict:
    for key in ("width", "height", "zoom_point", "seed", "intensity", "workers", "output", "host", "port"):
        value = getattr(args, key, None)
        if value is not None:
            cfg[key] = value
    return cfg

def _run(args: argparse.Namespace, queue, log_level: int) -> int:
    logger = get_logger()
    cfg = normalise_config(_apply_overrides(load_config(args.config), args))
    rng = make_rng(cfg["seed"])

    if args.cmd == "render":
        result = render_to_file(cfg=cfg, rng=rng, progress=args.progress, log_queue=queue, log_level=log_level)
        if args.manifest:
            manifest = build_manifest(config=cfg, zoom_point=result["zoom_point"], output=result["output"], git_commit=_git_commit())
            write_manifest(args.manifest, manifest)
            logger.info("Run manifest written: %s", args.manifest)
        return 0

    if args.cmd == "serve":
        serve_http(cfg, rng, queue)
        return 0

    if args.cmd == "cgi":
        serve_cgi(cfg, sys.stdout.buffer, rng, queue)
        return 0

    raise RuntimeError("Unknown command.")

def main(argv: Optional[list] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    if args.cmd == "points":
        for zp in INTERESTING_POINTS:
            print(f"{zp.name:24s} center=({zp.center_real}, {zp.center_imag}) radius={zp.radius} iter={zp.max_iterations}")
        return 0

    log_level = getattr(logging, args.log_level.upper(), logging.INFO)
    log_file = args.log_file if args.log_file and args.log_file.strip() else None
    listener_logger = configure_root_logging(level=log_level, console=True, log_file=log_file)

    logger = get_logger()

    with WorkerLogRelay(listener_logger) as queue:
        try:
            return _run(args, queue, log_level)
        except OutputError as e:
            logger.error("Render succeeded but output failed: %s", e)
            return 1
