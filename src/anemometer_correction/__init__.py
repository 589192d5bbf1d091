from .calibration_table import Breakpoint, CalibrationTable, DAVIS_VANTAGE_PRO2
from .speed_corrector import SpeedCorrector, correct_speed

__all__ = [
    "Breakpoint",
    "CalibrationTable",
    "DAVIS_VANTAGE_PRO2",
    "SpeedCorrector",
    "correct_speed",
]
