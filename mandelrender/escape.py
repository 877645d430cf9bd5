"""
Escape-time evaluation of z -> f(z, c) starting from z = 0.

Both evaluators run the same loop: at step i (1-indexed) the current z is
tested against the bailout radius before being advanced, so a point with
|c| > 2 is caught at i = 2. The smoothed variant applies one extra
iteration after escape to reduce banding and returns the continuous count

    nu = i + 1 - log(log(|z|)) / log(2)

Points that never escape within the bound yield 0.
"""
from __future__ import annotations

import math
from typing import Callable

Formula = Callable[[complex, complex], complex]

ESCAPE_RADIUS = 2.0
_LN2 = math.log(2.0)

def quadratic(z: complex, c: complex) -> complex:
    return z * z + c

def _sqabs(z: complex) -> float:
    return z.real * z.real + z.imag * z.imag

def _abs_gt(z: complex, bound: float) -> bool:
    return _sqabs(z) > bound * bound

def diverges(c: complex, max_iter: int, formula: Formula = quadratic) -> int:
    """Return the 1-indexed step at which the orbit left the radius, or 0 if it never did."""
    z = 0j
    for i in range(1, max_iter + 1):
        if _abs_gt(z, ESCAPE_RADIUS):
            return i
        z = formula(z, c)
    return 0

def smooth_escape(c: complex, max_iter: int, formula: Formula = quadratic) -> float:
    z = 0j
    for i in range(1, max_iter + 1):
        if _abs_gt(z, ESCAPE_RADIUS):
            # one more step keeps log(log|z|) well away from the bailout edge
            z = formula(z, c)
            return i + 1 - math.log(math.log(abs(z))) / _LN2
        z = formula(z, c)
    return 0.0
