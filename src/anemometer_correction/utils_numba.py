import numpy as np
from numba import njit

from .utils_angle import angle_branch, fold_angle


@njit(cache=True)
def bracket_index(speeds, raw):
    """
    Return (low, high) breakpoint indices bracketing `raw` in an ascending array.
    Equivalent to scanning for the first speed >= raw.
    - raw == speeds[0] collapses to (0, 0)
    - raw beyond the last speed clamps to (n - 2, n - 1)
    """
    n = speeds.size
    left = 0
    right = n
    while left < right:
        mid = (left + right) // 2
        if speeds[mid] < raw:
            left = mid + 1
        else:
            right = mid
    if left == 0:
        return 0, 0
    if left >= n:
        return n - 2, n - 1
    return left - 1, left


@njit(cache=True, fastmath=True)
def row_correction(offsets, row, folded):
    col, factor = angle_branch(folded)
    lo = offsets[row, col]
    hi = offsets[row, col + 1]
    return lo + factor * (hi - lo)


@njit(cache=True, fastmath=True)
def correction_kernel(raw, folded, speeds, offsets):
    """
    Additive correction for one validated reading.
    `folded` must already be in [0, 180].
    """
    low, high = bracket_index(speeds, raw)
    delta = speeds[high] - speeds[low]
    if delta > 0.0:
        speed_factor = (raw - speeds[low]) / delta
    else:
        speed_factor = 0.0
    c_low = row_correction(offsets, low, folded)
    c_high = row_correction(offsets, high, folded)
    return c_low + speed_factor * (c_high - c_low)


@njit(cache=True, fastmath=True)
def correct_speed_kernel(raw, folded, speeds, offsets):
    return raw + correction_kernel(raw, folded, speeds, offsets)


@njit(cache=True)
def correct_speeds(raws, angles, speeds, offsets):
    """Batch form of correct_speed_kernel; `angles` in [0, 360] are folded here."""
    out = np.empty(raws.size, dtype=np.float64)
    for i in range(raws.size):
        out[i] = correct_speed_kernel(raws[i], fold_angle(angles[i]), speeds, offsets)
    return out
