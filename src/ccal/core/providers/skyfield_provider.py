from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Literal, Optional, Sequence, Tuple, Union
import logging

from skyfield.api import Loader

log = logging.getLogger(__name__)


# ----------------------------
# Frame selection
# ----------------------------
EclipticFrameName = Literal[
    "of_date_true",   # true ecliptic/equinox of date (what the calendar rules use)
    "J2000",          # ecliptic J2000
    "builtin",        # obs.ecliptic_latlon() (Skyfield default)
]


def _resolve_ecliptic_frame(name: EclipticFrameName):
    """
    Return a Skyfield frame object, or None for builtin behavior.
    Skyfield versions differ; fall back to ecliptic_frame (of date).
    """
    if name == "builtin":
        return None

    from skyfield.framelib import ecliptic_frame, ecliptic_J2000_frame

    if name == "J2000":
        return ecliptic_J2000_frame

    try:
        from skyfield.framelib import true_ecliptic_and_equinox_of_date  # type: ignore
        return true_ecliptic_and_equinox_of_date
    except ImportError:
        return ecliptic_frame


# ----------------------------
# Ephemeris path resolution
# ----------------------------
def project_data_dir() -> Path:
    return Path(__file__).resolve().parents[4] / "data"


def _default_ephemeris_path() -> Path:
    """
    Prefer de440s (longer coverage) if present; otherwise fall back to de421.
    """
    data_dir = project_data_dir()
    p440s = data_dir / "de440s.bsp"
    p421 = data_dir / "de421.bsp"
    return p440s if p440s.exists() else p421


def resolve_ephemeris_path(
    *,
    ephemeris_path: Optional[Path],
    ephemeris: Optional[Union[str, Path]],
) -> Path:
    """
    Resolution priority:
      1) ephemeris_path (Path) if provided
      2) ephemeris (str|Path): absolute path as is, bare name under the data dir
      3) default: de440s if present else de421
    """
    if ephemeris_path is not None:
        return Path(ephemeris_path).expanduser()

    if ephemeris is not None:
        p = ephemeris if isinstance(ephemeris, Path) else Path(ephemeris)
        if p.is_absolute():
            return p
        return project_data_dir() / p

    return _default_ephemeris_path()


@dataclass(frozen=True)
class SkyfieldProvider:
    """
    Solar longitude from a JPL ephemeris loaded through Skyfield.

    Opt-in alternative to the lunar_python term tables; needs a .bsp file on disk
    (never downloaded implicitly).
    """

    ephemeris_path: Optional[Path] = None
    ephemeris: Optional[Union[str, Path]] = None
    ecliptic_frame: EclipticFrameName = "of_date_true"
    name: str = "skyfield"

    def __post_init__(self) -> None:
        resolved = resolve_ephemeris_path(
            ephemeris_path=self.ephemeris_path,
            ephemeris=self.ephemeris,
        )
        object.__setattr__(self, "ephemeris_path", resolved)

        if not resolved.exists():
            data_dir = project_data_dir()
            raise FileNotFoundError(
                f"Ephemeris not found: {resolved}\n"
                f"Place de440s.bsp or de421.bsp under {data_dir}, "
                "or set CCAL_EPHEMERIS_PATH."
            )

        loader = Loader(str(resolved.parent))
        eph = loader(resolved.name)
        ts = loader.timescale()

        object.__setattr__(self, "_eph", eph)
        object.__setattr__(self, "_ts", ts)
        object.__setattr__(self, "_earth", eph["earth"])
        object.__setattr__(self, "_sun", eph["sun"])
        object.__setattr__(self, "_ecliptic_frame_obj", _resolve_ecliptic_frame(self.ecliptic_frame))

        start_utc, end_utc = self._compute_ephemeris_utc_range()
        object.__setattr__(self, "_ephem_start_utc", start_utc)
        object.__setattr__(self, "_ephem_end_utc", end_utc)
        log.debug(
            "skyfield ephemeris loaded: path=%s coverage=%s..%s",
            resolved,
            start_utc.isoformat(),
            end_utc.isoformat(),
        )

    def _compute_ephemeris_utc_range(self) -> Tuple[datetime, datetime]:
        """
        Coverage from SPK segments; Skyfield would otherwise fail deep inside.
        """
        segments = getattr(self._eph, "spk", None)
        if segments is None or not getattr(segments, "segments", None):
            return (
                datetime.min.replace(tzinfo=timezone.utc),
                datetime.max.replace(tzinfo=timezone.utc),
            )

        segs = segments.segments
        t0 = self._ts.tt_jd(min(s.start_jd for s in segs))
        t1 = self._ts.tt_jd(max(s.end_jd for s in segs))
        return (
            t0.utc_datetime().replace(tzinfo=timezone.utc),
            t1.utc_datetime().replace(tzinfo=timezone.utc),
        )

    def _check_ephemeris_range(self, dt_utc: datetime) -> None:
        if dt_utc < self._ephem_start_utc or dt_utc > self._ephem_end_utc:
            raise ValueError(
                "Requested datetime is outside ephemeris coverage.\n"
                f"  requested: {dt_utc.isoformat()}\n"
                f"  ephemeris: {self.ephemeris_path}\n"
                f"  coverage : {self._ephem_start_utc.isoformat()} .. {self._ephem_end_utc.isoformat()}"
            )

    def _apparent_lon(self, t):
        obs = self._earth.at(t).observe(self._sun).apparent()
        if self._ecliptic_frame_obj is None:
            _lat, lon, _dist = obs.ecliptic_latlon()
        else:
            _lat, lon, _dist = obs.frame_latlon(self._ecliptic_frame_obj)
        return lon.degrees % 360.0

    def sun_ecliptic_longitude_deg(self, dt_utc: datetime) -> float:
        dt = dt_utc.astimezone(timezone.utc)
        self._check_ephemeris_range(dt)
        return float(self._apparent_lon(self._ts.from_datetime(dt)))

    def sun_ecliptic_longitude_deg_many(self, dts_utc: Sequence[datetime]) -> List[float]:
        if not dts_utc:
            return []
        xs = [dt.astimezone(timezone.utc) for dt in dts_utc]
        self._check_ephemeris_range(min(xs))
        self._check_ephemeris_range(max(xs))
        arr = self._apparent_lon(self._ts.from_datetimes(xs))
        return [float(x) for x in arr]
