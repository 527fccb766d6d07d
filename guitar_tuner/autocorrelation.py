"""
Normalized autocorrelation of an audio frame.

For a frame of N samples the result holds lags 0 .. N//2 - 1 with

    r[L] = sum(x[i] * x[i + L] for i in range(N - L)) / sum(x[i] ** 2)

so r[0] == 1 for any non-silent frame. The denominator does not shrink with
the lag (biased estimator), which makes longer lags slightly weaker.
"""

import numpy as np
from scipy.signal import fftconvolve

from .constants import SILENCE_ENERGY


def _centered(samples: np.ndarray) -> tuple[np.ndarray, float]:
    samples = np.asarray(samples, dtype=np.float64)
    centered = samples - np.mean(samples)
    return centered, float(np.dot(centered, centered))


def autocorrelate(samples: np.ndarray) -> np.ndarray:
    """
    Compute the normalized autocorrelation using FFT convolution.

    Args:
        samples: Audio frame (re-centred here even if already DC-free)

    Returns:
        Array of length len(samples) // 2. All zeros when the frame carries
        no energy (silence or pure DC), meaning nothing periodic was found.
    """
    n_lags = len(samples) // 2
    if n_lags == 0:
        return np.zeros(0, dtype=np.float64)

    centered, sum_squares = _centered(samples)
    if sum_squares <= SILENCE_ENERGY:
        return np.zeros(n_lags, dtype=np.float64)

    # Correlating with the reversed frame: index N - 1 + L holds lag L
    full = fftconvolve(centered, centered[::-1], mode="full")
    start = len(centered) - 1
    return full[start : start + n_lags] / sum_squares


def autocorrelate_direct(samples: np.ndarray) -> np.ndarray:
    """Direct O(N^2) form of autocorrelate(), used as a reference."""
    n_lags = len(samples) // 2
    correlations = np.zeros(n_lags, dtype=np.float64)
    if n_lags == 0:
        return correlations

    centered, sum_squares = _centered(samples)
    if sum_squares <= SILENCE_ENERGY:
        return correlations

    n = len(centered)
    for lag in range(n_lags):
        correlations[lag] = np.dot(centered[: n - lag], centered[lag:]) / sum_squares
    return correlations
