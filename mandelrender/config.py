import json
from typing import Any, Dict, Optional

from mandelrender.renderers.cpu import INTENSITY_MODES
from mandelrender.zoompoints import point_names

DEFAULTS: Dict[str, Any] = {
    "width": 1024,
    "height": 768,
    "output": "mande.png",
    "zoom_point": None,
    "seed": None,
    "intensity": "wrap",
    "workers": 1,
    "band_height": 32,
    "host": "localhost",
    "port": 8080,
}

def load_config(config_path: Optional[str]) -> Dict[str, Any]:
    out = dict(DEFAULTS)
    if config_path:
        with open(config_path, "r", encoding="utf-8") as f:
            cfg = json.load(f)
        if not isinstance(cfg, dict):
            raise ValueError("Config JSON must be an object.")
        out.update(cfg)
    return out

def normalise_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(DEFAULTS)
    merged.update(cfg)

    width = int(merged["width"])
    height = int(merged["height"])
    if width <= 0 or height <= 0:
        raise ValueError("width/height must be positive.")

    intensity = str(merged["intensity"])
    if intensity not in INTENSITY_MODES:
        raise ValueError(f"intensity must be one of: {', '.join(INTENSITY_MODES)}")

    zoom_point = merged["zoom_point"]
    if zoom_point is not None:
        zoom_point = str(zoom_point)
        if zoom_point not in point_names():
            raise ValueError(f"Unknown zoom_point: {zoom_point}")

    seed = merged["seed"]
    if seed is not None:
        seed = int(seed)

    workers = int(merged["workers"])
    band_height = int(merged["band_height"])
    if workers < 1 or band_height < 1:
        raise ValueError("workers/band_height must be >= 1.")

    port = int(merged["port"])
    if not 0 <= port <= 65535:
        raise ValueError("port must be in 0..65535.")

    out = dict(merged)
    out["width"] = width
    out["height"] = height
    out["output"] = str(merged["output"])
    out["zoom_point"] = zoom_point
    out["seed"] = seed
    out["intensity"] = intensity
    out["workers"] = workers
    out["band_height"] = band_height
    out["host"] = str(merged["host"])
    out["port"] = port
    return out
