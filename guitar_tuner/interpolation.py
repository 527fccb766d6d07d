"""
Sub-sample period refinement.
"""

import numpy as np


def parabolic_offset(y1: float, y2: float, y3: float) -> float | None:
    """
    Vertex offset of the parabola through (-1, y1), (0, y2), (1, y3).

    Returns None when the three points are collinear.
    """
    a = (y1 - 2 * y2 + y3) / 2
    b = (y3 - y1) / 2
    if a == 0:
        return None
    return -b / (2 * a)


def refine_frequency(correlations: np.ndarray, peak_period: int, sample_rate: float) -> float:
    """
    Refine a peak lag with parabolic interpolation and convert to Hz.

    Falls back to sample_rate / peak_period when the peak sits on the edge
    of the curve or its neighbours give a flat parabola.
    """
    if peak_period <= 0:
        return float("inf")
    if peak_period >= len(correlations) - 1:
        return sample_rate / peak_period

    y1, y2, y3 = correlations[peak_period - 1 : peak_period + 2]
    offset = parabolic_offset(float(y1), float(y2), float(y3))
    if offset is None:
        return sample_rate / peak_period

    return sample_rate / (peak_period + offset)
