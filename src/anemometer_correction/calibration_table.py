"""
Calibration tables for cup-anemometer housing correction.

A table is an ordered run of breakpoints, each carrying a raw speed and the
additive correction measured at approach angles of 0, 90 and 180 degrees.
Row 0 is a zero row (no correction at zero speed) and the final row repeats
the last real row under a sentinel speed, so readings above the calibrated
range keep the maximum correction.

Offsets are always held unscaled, as float64. Sources that store offsets as
scaled integers (e.g. tenths) are converted once on load via `scale`.
"""

from dataclasses import dataclass
from io import TextIOBase
from typing import Iterable, Optional, Tuple, Union
import logging
import math

import numpy as np
import pandas as pd

from .utils_numba import bracket_index

logger = logging.getLogger(__name__)

ANGLES = (0.0, 90.0, 180.0)


@dataclass(frozen=True)
class Breakpoint:
    raw_speed: float
    offset_0: float
    offset_90: float
    offset_180: float


class CalibrationTable:
    def __init__(self, speeds, offsets, name: Optional[str] = None):
        """
        Parameters
        ----------
        speeds : array-like, shape (N,)
            Raw speed of each breakpoint, ascending, sentinel last.
        offsets : array-like, shape (N, 3)
            Corrections at 0, 90 and 180 degrees for each breakpoint.
        name : str, optional
            Label used in logs and reprs.
        """
        speeds = np.array(speeds, dtype=np.float64)
        offsets = np.array(offsets, dtype=np.float64)
        _validate(speeds, offsets)

        speeds.setflags(write=False)
        offsets.setflags(write=False)
        self._speeds = speeds
        self._offsets = offsets
        self._name = name
        logger.debug("calibration table %s: %d breakpoints, calibrated to %.1f",
                     name, len(speeds), self.max_calibrated_speed)

    @classmethod
    def from_breakpoints(cls, rows: Iterable[Union[Breakpoint, Tuple[float, float, float, float]]],
                         name: Optional[str] = None) -> "CalibrationTable":
        speeds = []
        offsets = []
        for row in rows:
            if isinstance(row, Breakpoint):
                row = (row.raw_speed, row.offset_0, row.offset_90, row.offset_180)
            if len(row) != 4:
                raise ValueError(f"breakpoint needs (raw_speed, off0, off90, off180), got {row!r}")
            speeds.append(row[0])
            offsets.append(row[1:])
        return cls(speeds, np.reshape(np.array(offsets, dtype=np.float64), (-1, 3)), name=name)

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame, scale: float = 1.0,
                       name: Optional[str] = None) -> "CalibrationTable":
        """
        Build a table from a frame indexed by raw speed with one column per angle
        (labels 0, 90, 180 as int, float or str). Offsets are divided by `scale`.
        """
        if not scale or not math.isfinite(scale):
            raise ValueError(f"scale must be a finite non-zero number, got {scale!r}")

        by_angle = {}
        for col in df.columns:
            try:
                by_angle[float(str(col).strip())] = col
            except ValueError:
                continue
        missing = [a for a in ANGLES if a not in by_angle]
        if missing:
            raise ValueError(f"calibration table is missing angle columns {missing}")

        offsets = df[[by_angle[a] for a in ANGLES]].to_numpy(dtype=np.float64) / float(scale)
        speeds = df.index.to_numpy(dtype=np.float64)
        return cls(speeds, offsets, name=name)

    @classmethod
    def from_file(cls, path: Optional[str] = None, f: Optional[TextIOBase] = None,
                  scale: float = 1.0) -> "CalibrationTable":
        """
        Parameters
        ----------
        path : string
            Path of the table file
        f : File
            File object for passing an opened file

        The file is whitespace separated: a header `speed 0 90 180`, then one
        `raw_speed off0 off90 off180` row per breakpoint. `#` starts a comment.
        """
        if path is None and f is None:
            raise ValueError("from_file needs a path or an open file")
        source = f if f is not None else path
        df = pd.read_csv(source, sep=r"\s+", comment="#", index_col=0)
        logger.debug("read calibration table from %s (scale=%s)", path or "<file>", scale)
        return cls.from_dataframe(df, scale=scale, name=str(path) if path else None)

    def to_dataframe(self) -> pd.DataFrame:
        df = pd.DataFrame(np.array(self.offsets), columns=[0, 90, 180])
        df.index = pd.Index(np.array(self.speeds), name="raw_speed")
        return df

    # read-only views; the table is shared process-wide
    @property
    def speeds(self) -> np.ndarray:
        return self._speeds

    @property
    def offsets(self) -> np.ndarray:
        return self._offsets

    @property
    def name(self) -> Optional[str]:
        return self._name

    @property
    def max_calibrated_speed(self) -> float:
        return float(self.speeds[-2])

    def breakpoints(self):
        return [self[i] for i in range(len(self))]

    def bracket(self, raw_speed: float) -> Tuple[int, int]:
        """
        Return (low, high): high is the first breakpoint whose raw speed is >= the
        input and low = high - 1. Zero speed gives (0, 0); anything beyond the
        sentinel gives the last two rows, which share offsets.
        """
        raw_speed = float(raw_speed)
        if not math.isfinite(raw_speed) or raw_speed < 0.0:
            raise ValueError(f"raw speed must be finite and >= 0, got {raw_speed!r}")
        low, high = bracket_index(self.speeds, raw_speed)
        return int(low), int(high)

    def __len__(self):
        return len(self.speeds)

    def __getitem__(self, i) -> Breakpoint:
        o0, o90, o180 = (float(x) for x in self.offsets[i])
        return Breakpoint(float(self.speeds[i]), o0, o90, o180)

    def __iter__(self):
        return iter(self.breakpoints())

    def __repr__(self):
        return f"CalibrationTable(name={self.name!r}, breakpoints={len(self)})"


def _validate(speeds: np.ndarray, offsets: np.ndarray) -> None:
    if speeds.ndim != 1 or offsets.shape != (speeds.size, 3):
        raise ValueError(
            f"expected speeds (N,) and offsets (N, 3), got {speeds.shape} and {offsets.shape}"
        )
    if speeds.size < 3:
        raise ValueError("calibration table needs a zero row, at least one breakpoint and a sentinel")
    if not (np.all(np.isfinite(speeds)) and np.all(np.isfinite(offsets))):
        raise ValueError("calibration table values must be finite")
    if speeds[0] != 0.0 or np.any(offsets[0] != 0.0):
        raise ValueError("first breakpoint must be raw speed 0 with zero offsets")
    if np.any(np.diff(speeds) <= 0.0):
        raise ValueError("breakpoint raw speeds must be strictly increasing")
    if np.any(offsets[-1] != offsets[-2]):
        raise ValueError("sentinel breakpoint must repeat the offsets of the last calibrated row")


# Davis Vantage Pro 2 cup anemometer, vendor correction curves.
# http://www.davis-tr.com/Downloads/Davis_Rzgr_Kepceleri_Karakteristikleri.pdf
DAVIS_VANTAGE_PRO2 = CalibrationTable.from_breakpoints(
    [
        (0, 0.0, 0.0, 0.0),
        (20, 3.3, -2.3, -3.6),
        (25, 3.5, -2.7, -4.6),
        (30, 3.8, -2.9, -4.8),
        (35, 4.2, -3.4, -5.3),
        (40, 4.5, -4.1, -5.7),
        (45, 4.7, -3.8, -4.5),
        (50, 5.0, -4.5, -4.9),
        (55, 5.3, -4.8, -5.2),
        (60, 5.7, -5.3, -5.9),
        (65, 5.8, -6.0, -6.0),
        (70, 6.2, -5.6, -6.1),
        (75, 6.4, -6.0, -6.8),
        (80, 6.8, -6.4, -6.9),
        (85, 7.1, -7.4, -6.8),
        (90, 7.4, -8.0, -6.8),
        (95, 7.5, -8.1, -7.5),
        (100, 7.7, -7.9, -7.2),
        (105, 8.2, -8.1, -7.7),
        (110, 8.5, -8.5, -7.7),
        (115, 8.9, -8.8, -8.5),
        (120, 9.5, -9.4, -9.0),
        (125, 10.0, -9.6, -9.8),
        (130, 9.8, -9.8, -10.3),
        (135, 9.8, -10.0, -11.0),
        (140, 9.3, -10.2, -11.3),
        (145, 9.5, -10.9, -10.5),
        (150, 9.8, -12.1, -12.0),
        (999, 9.8, -12.1, -12.0),  # sentinel
    ],
    name="davis_vantage_pro2",
)
