import logging
import math

import numpy as np
import pandas as pd

from .calibration_table import CalibrationTable, DAVIS_VANTAGE_PRO2
from .utils_angle import fold_angle, wrap_angle360
from .utils_numba import correct_speeds, correction_kernel

logger = logging.getLogger(__name__)


class SpeedCorrector:
    def __init__(self, table: CalibrationTable = DAVIS_VANTAGE_PRO2, wrap_angles: bool = False):
        """
        SpeedCorrector: class
            :param table: CalibrationTable
                breakpoints to interpolate over, defaults to the Davis Vantage Pro 2 curves
            :param wrap_angles: bool
                if True, angles outside [0, 360] are taken modulo 360 instead of rejected
        """
        self.table = table
        self.wrap_angles = wrap_angles

    def _check_angle(self, angle):
        angle = float(angle)
        if not math.isfinite(angle):
            raise ValueError(f"angle must be finite, got {angle!r}")
        if self.wrap_angles:
            return wrap_angle360(angle)
        if angle < 0.0 or angle > 360.0:
            raise ValueError(f"angle must be within [0, 360] degrees, got {angle!r}")
        return angle

    def correction(self, raw_speed, angle) -> float:
        """Additive correction for a reading, without the raw speed itself."""
        raw_speed = float(raw_speed)
        folded = fold_angle(self._check_angle(angle))
        if not math.isfinite(raw_speed) or raw_speed < 0.0:
            raise ValueError(f"raw speed must be finite and >= 0, got {raw_speed!r}")
        if raw_speed > self.table.max_calibrated_speed:
            logger.debug("raw speed %.2f above calibrated range, correction clamped", raw_speed)
        return float(correction_kernel(raw_speed, folded, self.table.speeds, self.table.offsets))

    def correct(self, raw_speed, angle) -> float:
        # return corrected wind speed given raw speed and approach angle (0-360) deg
        return float(raw_speed) + self.correction(raw_speed, angle)

    def correct_array(self, raw_speeds, angles) -> np.ndarray:
        """
        Vectorised `correct` over broadcastable array-likes.
        The whole batch is validated before any value is computed.
        """
        raws, angs = np.broadcast_arrays(
            np.asarray(raw_speeds, dtype=np.float64),
            np.asarray(angles, dtype=np.float64),
        )
        shape = raws.shape
        raws = np.ascontiguousarray(raws).ravel()
        angs = np.ascontiguousarray(angs).ravel()

        if not np.all(np.isfinite(raws)) or np.any(raws < 0.0):
            raise ValueError("raw speeds must be finite and >= 0")
        if not np.all(np.isfinite(angs)):
            raise ValueError("angles must be finite")
        if self.wrap_angles:
            angs = np.mod(angs, 360.0)
        elif np.any((angs < 0.0) | (angs > 360.0)):
            raise ValueError("angles must be within [0, 360] degrees")

        clamped = int(np.count_nonzero(raws > self.table.max_calibrated_speed))
        if clamped:
            logger.debug("%d of %d raw speeds above calibrated range, corrections clamped", clamped, raws.size)
        out = correct_speeds(raws, angs, self.table.speeds, self.table.offsets)
        return out.reshape(shape)

    def correct_series(self, df: pd.DataFrame, speed_col: str = "tws", angle_col: str = "twa") -> pd.Series:
        corrected = self.correct_array(df[speed_col].to_numpy(), df[angle_col].to_numpy())
        return pd.Series(corrected, index=df.index, name=f"{speed_col}_corrected")


_default_corrector = SpeedCorrector()


def correct_speed(raw_speed, angle) -> float:
    return _default_corrector.correct(raw_speed, angle)
