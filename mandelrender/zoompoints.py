from __future__ import annotations

import random
import time
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

@dataclass(frozen=True)
class ZoomPoint:
    """A named view into the complex plane: center, half-width and iteration depth."""

    name: str
    center_real: float
    center_imag: float
    radius: float
    max_iterations: int

    def __post_init__(self) -> None:
        if not self.radius > 0:
            raise ValueError(f"radius must be > 0 (got {self.radius!r})")
        if int(self.max_iterations) <= 0:
            raise ValueError(f"max_iterations must be > 0 (got {self.max_iterations!r})")

INTERESTING_POINTS: Tuple[ZoomPoint, ...] = (
    ZoomPoint("overview", 0.0, 0.0, 2.0, 50),
    ZoomPoint("seahorse-valley", -0.747, 0.1, 0.001, 800),
    ZoomPoint("seahorse-valley-deep", -0.747, 0.1, 0.0001, 1000),
    ZoomPoint("triple-spiral", -0.088, 0.654, 0.005, 500),
    ZoomPoint("triple-spiral-near", -0.088, 0.656, 0.001, 800),
    ZoomPoint("triple-spiral-deep", -0.088, 0.656, 0.0001, 1000),
    ZoomPoint("quad-spiral", 0.274, 0.482, 0.005, 500),
    ZoomPoint("double-scepter-deep", -0.1002, 0.836, 0.0001, 1000),
    ZoomPoint("double-scepter", -0.100, 0.836, 0.001, 750),
    ZoomPoint("double-scepter-wide", -0.1002, 0.8383, 0.1, 500),
    ZoomPoint("scepter-valley", -1.36, 0.005, 0.1, 500),
    ZoomPoint("scepter-valley-deep", -1.3683, 0.005, 0.0001, 2000),
    ZoomPoint("scepter-valley-near", -1.3685, 0.005, 0.0005, 2000),
)

def point_names(points: Sequence[ZoomPoint] = INTERESTING_POINTS) -> Tuple[str, ...]:
    return tuple(p.name for p in points)

def get_zoom_point(name: str, points: Sequence[ZoomPoint] = INTERESTING_POINTS) -> ZoomPoint:
    for p in points:
        if p.name == name:
            return p
    raise KeyError(f"Unknown zoom point: {name!r}")

def make_rng(seed: Optional[int] = None) -> random.Random:
    """Selection RNG; seeded from the wall clock unless a seed is given."""
    if seed is None:
        seed = time.time_ns()
    return random.Random(seed)

def choose_zoom_point(
    rng: Optional[random.Random] = None,
    points: Sequence[ZoomPoint] = INTERESTING_POINTS,
) -> ZoomPoint:
    if not points:
        raise ValueError("No zoom points to choose from.")
    if rng is None:
        rng = make_rng()
    return points[rng.randrange(len(points))]
