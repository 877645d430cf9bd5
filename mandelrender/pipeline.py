from __future__ import annotations

import logging
import random
from typing import Any, Dict, Optional

from PIL import Image

from mandelrender.output.png_writer import write_png
from mandelrender.renderers.cpu import raster_to_image, render_raster
from mandelrender.util.logging_setup import get_logger
from mandelrender.zoompoints import ZoomPoint, choose_zoom_point, get_zoom_point

def select_point(cfg: Dict[str, Any], rng: Optional[random.Random] = None) -> ZoomPoint:
    name = cfg.get("zoom_point")
    if name:
        return get_zoom_point(name)
    return choose_zoom_point(rng)

def render_image(
    cfg: Dict[str, Any],
    point: ZoomPoint,
    *,
    progress: bool = False,
    log_queue=None,
    log_level: int = logging.INFO,
) -> Image.Image:
    buf = render_raster(
        point,
        width=int(cfg["width"]),
        height=int(cfg["height"]),
        mode=str(cfg.get("intensity", "wrap")),
        workers=int(cfg.get("workers", 1)),
        band_height=int(cfg.get("band_height", 32)),
        progress=progress,
        log_queue=log_queue,
        log_level=log_level,
    )
    return raster_to_image(buf)

def render_to_file(
    *,
    cfg: Dict[str, Any],
    rng: Optional[random.Random] = None,
    progress: bool = False,
    log_queue=None,
    log_level: int = logging.INFO,
) -> Dict[str, Any]:
    logger = get_logger()
    point = select_point(cfg, rng)
    logger.info("Zoom point selected: %s", point.name)

    img = render_image(cfg, point, progress=progress, log_queue=log_queue, log_level=log_level)
    path = write_png(img, str(cfg["output"]))
    return {"output": path, "zoom_point": point, "width": img.width, "height": img.height}
