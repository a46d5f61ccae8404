# src/ccal/core/astronomy.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Protocol, Sequence, runtime_checkable

from .timeutil import require_aware


def norm360(deg: float) -> float:
    x = deg % 360.0
    return x + 360.0 if x < 0 else x


def angdiff180(deg: float) -> float:
    """Map angle to (-180, 180]."""
    x = (deg + 180.0) % 360.0 - 180.0
    return 180.0 if x == -180.0 else x


@runtime_checkable
class AstroProvider(Protocol):
    def sun_ecliptic_longitude_deg(self, dt_utc: datetime) -> float: ...


@dataclass(frozen=True)
class AstronomyEngine:
    provider: AstroProvider

    @property
    def name(self) -> str:
        return str(getattr(self.provider, "name", type(self.provider).__name__))

    def sun_lon(self, dt_utc: datetime) -> float:
        """Return apparent solar ecliptic longitude (degrees) at dt_utc (timezone-aware)."""
        return norm360(self.provider.sun_ecliptic_longitude_deg(require_aware(dt_utc, "dt_utc")))

    def sun_lon_many(self, dts_utc: Sequence[datetime]) -> List[float]:
        """
        Vectorized solar longitude if provider supports it; otherwise fall back to loop.
        """
        if not dts_utc:
            return []
        dts = [require_aware(dt, "dt_utc") for dt in dts_utc]
        f = getattr(self.provider, "sun_ecliptic_longitude_deg_many", None)
        if callable(f):
            return [norm360(float(v)) for v in f(dts)]
        return [self.sun_lon(dt) for dt in dts]
