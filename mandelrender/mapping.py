from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from mandelrender.zoompoints import ZoomPoint

@dataclass(frozen=True)
class Viewport:
    """Rectangular region of the complex plane sampled by a render."""

    min_real: float
    max_real: float
    min_imag: float
    max_imag: float

    @classmethod
    def from_zoom_point(cls, point: ZoomPoint) -> "Viewport":
        cx, cy, r = point.center_real, point.center_imag, point.radius
        return cls(min_real=cx - r, max_real=cx + r, min_imag=cy - r, max_imag=cy + r)

def _check_size(width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise ValueError("width/height must be positive.")

def normalised(row: int, col: int, width: int, height: int) -> Tuple[float, float]:
    """Normalised (nx, ny) with the extra extent of the longer side centred."""
    _check_size(width, height)
    nx = col / width
    ny = row / height
    ratio = width / height
    if ratio < 1:
        iratio = height / width
        ny = ny * iratio - (iratio - 1) * 0.5
    elif ratio > 1:
        nx = nx * ratio - (ratio - 1) * 0.5
    return nx, ny

def pixel_to_complex(row: int, col: int, width: int, height: int, viewport: Viewport) -> complex:
    nx, ny = normalised(row, col, width, height)
    re = viewport.min_real + nx * (viewport.max_real - viewport.min_real)
    im = viewport.min_imag + ny * (viewport.max_imag - viewport.min_imag)
    return complex(re, im)
