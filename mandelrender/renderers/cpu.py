from __future__ import annotations

import logging
import math
import pickle
from concurrent.futures import ProcessPoolExecutor
from functools import partial
from typing import List, NamedTuple, Optional, Tuple

import numpy as np
from PIL import Image
from tqdm import tqdm

from mandelrender.escape import Formula, quadratic, smooth_escape
from mandelrender.mapping import Viewport, pixel_to_complex
from mandelrender.util.logging_setup import configure_worker_logging, get_logger
from mandelrender.zoompoints import ZoomPoint

INTENSITY_MODES = ("wrap", "clamp")

class Pixel(NamedTuple):
    x: int
    y: int
    intensity: int

def intensity(nu: float, max_iter: int, mode: str = "wrap") -> int:
    """
    Grey level for a smoothed escape value.

    "wrap" masks floor(k * 255) to a byte, so values pushed past the ends
    by the smoothing step wrap around; this reproduces the reference
    visuals but is most likely an unintended artifact. "clamp" saturates
    into [0, 255] instead. Note that floor differs from the truncating
    int() conversion of the Go original for k * 255 in (-1, 0): this gives
    255 there, the original 0.
    """
    if nu <= 0:
        return 0
    k = 1.0 - nu / max_iter
    level = math.floor(k * 255.0)
    if mode == "wrap":
        return level & 0xFF
    if mode == "clamp":
        return min(255, max(0, level))
    raise ValueError(f"intensity mode must be one of: {', '.join(INTENSITY_MODES)}")

def orbit_color(
    row: int,
    col: int,
    width: int,
    height: int,
    point: ZoomPoint,
    viewport: Viewport,
    mode: str = "wrap",
    formula: Formula = quadratic,
) -> Pixel:
    c = pixel_to_complex(row, col, width, height, viewport)
    nu = smooth_escape(c, point.max_iterations, formula)
    return Pixel(col, row, intensity(nu, point.max_iterations, mode))

def _render_band(
    y0_y1: Tuple[int, int],
    *,
    point: ZoomPoint,
    width: int,
    height: int,
    mode: str,
    formula: Formula,
    progress: bool = False,
) -> Tuple[int, np.ndarray]:
    y0, y1 = y0_y1
    logger = get_logger()
    viewport = Viewport.from_zoom_point(point)
    band = np.zeros((y1 - y0, width, 4), dtype=np.uint8)
    band[..., 3] = 0xFF

    rows = range(y0, y1)
    for yi, y in enumerate(tqdm(rows, desc=point.name, unit="row", disable=not progress)):
        for x in range(width):
            p = orbit_color(y, x, width, height, point, viewport, mode, formula)
            band[yi, p.x, :3] = p.intensity

        if y % 128 == 0:
            logger.debug("[%s] Rendered row %s/%s", point.name, y, height)

    return y0, band

def _init_worker(log_queue, log_level: int) -> None:
    configure_worker_logging(log_queue, level=log_level)

def _check_picklable(formula: Formula) -> None:
    try:
        pickle.dumps(formula)
    except (pickle.PicklingError, AttributeError, TypeError) as e:
        raise ValueError(
            f"formula {formula!r} cannot be sent to worker processes; "
            "use a module-level function or workers=1"
        ) from e

def _bands(height: int, band_height: int) -> List[Tuple[int, int]]:
    if band_height <= 0:
        raise ValueError("band_height must be > 0")
    bands: List[Tuple[int, int]] = []
    y = 0
    while y < height:
        y1 = min(height, y + band_height)
        bands.append((y, y1))
        y = y1
    return bands

def render_raster(
    point: ZoomPoint,
    *,
    width: int,
    height: int,
    mode: str = "wrap",
    formula: Formula = quadratic,
    workers: int = 1,
    band_height: int = 32,
    progress: bool = False,
    log_queue=None,
    log_level: int = logging.INFO,
) -> np.ndarray:
    """
    Render a ``(height, width, 4)`` grayscale RGBA raster for ``point``.

    With ``workers > 1`` the rows are split into bands rendered in separate
    processes, so ``formula`` must be picklable (a module-level function).
    Records from the workers go to ``log_queue`` when one is given.
    """
    logger = get_logger()
    if width <= 0 or height <= 0:
        raise ValueError("width/height must be positive.")
    if mode not in INTENSITY_MODES:
        raise ValueError(f"intensity mode must be one of: {', '.join(INTENSITY_MODES)}")
    if workers < 1:
        raise ValueError("workers must be >= 1")
    if workers > 1:
        _check_picklable(formula)

    logger.info("[%s] Render start size=%sx%s center=(%s, %s) radius=%s iter=%s workers=%s",
                point.name, width, height, point.center_real, point.center_imag,
                point.radius, point.max_iterations, workers)

    render = partial(_render_band, point=point, width=width, height=height, mode=mode, formula=formula)

    if workers == 1:
        _, buf = render((0, height), progress=progress)
    else:
        buf = np.zeros((height, width, 4), dtype=np.uint8)
        with ProcessPoolExecutor(
            max_workers=workers,
            initializer=_init_worker,
            initargs=(log_queue, log_level),
        ) as pool:
            for y0, band in pool.map(render, _bands(height, band_height)):
                buf[y0:y0 + band.shape[0]] = band

    logger.info("[%s] Render done", point.name)
    return buf

def raster_to_image(buf: np.ndarray) -> Image.Image:
    if buf.ndim != 3 or buf.shape[2] != 4 or buf.dtype != np.uint8:
        raise ValueError("raster must be a (height, width, 4) uint8 array")
    return Image.fromarray(buf)
