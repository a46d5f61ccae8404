# src/ccal/core/rootfind.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable
import math


@dataclass(frozen=True)
class RootResult:
    t: datetime
    iterations: int


def solve_bracketed(
    f: Callable[[datetime], float],
    a: datetime,
    b: datetime,
    *,
    tol_seconds: float = 1.0,
    max_iter: int = 80,
) -> RootResult:
    """
    Root of f on the datetime bracket [a, b] where f(a) * f(b) <= 0.

    Regula falsi with the Illinois modification: the bracket always keeps a
    sign change, and a stale endpoint has its value halved so convergence
    stays superlinear instead of stalling on one side.

    Returns the midpoint of the final bracket (or the exact hit).
    """
    if tol_seconds <= 0:
        raise ValueError("tol_seconds must be positive")
    if a > b:
        a, b = b, a

    fa = f(a)
    fb = f(b)
    if not (math.isfinite(fa) and math.isfinite(fb)):
        raise ValueError("Non-finite function value at bracket endpoints.")
    if fa == 0.0:
        return RootResult(a, 0)
    if fb == 0.0:
        return RootResult(b, 0)
    if fa * fb > 0.0:
        raise ValueError("Root is not bracketed (same sign).")

    # seconds relative to a, for numeric stability
    origin = a
    xa, xb = 0.0, (b - a).total_seconds()
    side = 0

    for it in range(1, max_iter + 1):
        if xb - xa <= tol_seconds:
            return RootResult(origin + timedelta(seconds=0.5 * (xa + xb)), it)

        xc = xb - fb * (xb - xa) / (fb - fa)
        if not (xa < xc < xb):
            xc = 0.5 * (xa + xb)

        fc = f(origin + timedelta(seconds=xc))
        if not math.isfinite(fc):
            raise ValueError("Non-finite function value during root finding.")
        if fc == 0.0:
            return RootResult(origin + timedelta(seconds=xc), it)

        if fa * fc < 0.0:
            xb, fb = xc, fc
            if side == -1:
                fa *= 0.5
            side = -1
        else:
            xa, fa = xc, fc
            if side == 1:
                fb *= 0.5
            side = 1

    return RootResult(origin + timedelta(seconds=0.5 * (xa + xb)), max_iter)
