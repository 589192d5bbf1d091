from numba import njit


@njit(cache=True, fastmath=True)
def wrap_angle360(angle_deg: float) -> float:
    return float(angle_deg) % 360.0


@njit(cache=True, fastmath=True)
def fold_angle(angle_deg: float) -> float:
    """
    Mirror an approach angle in [0, 360] onto [0, 180].
    The housing response is taken as symmetric about the 0-180 axis, so
    270 -> 90 and 360 -> 0.
    """
    a = float(angle_deg)
    if a > 180.0:
        return 180.0 - (a - 180.0)
    return a


@njit(cache=True, fastmath=True)
def angle_branch(folded_deg: float):
    """
    Return (lower_column, angle_factor) for a folded angle.
    lower_column is 0 for the 0-90 segment and 1 for the 90-180 segment of the
    offset columns (0, 90, 180).
    """
    if folded_deg <= 90.0:
        return 0, folded_deg / 90.0
    return 1, (folded_deg - 90.0) / 90.0
