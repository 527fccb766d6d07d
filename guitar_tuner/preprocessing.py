"""
Frame preprocessing before autocorrelation.

A single-pole low-pass filter suppresses high-frequency noise (pick attack,
hiss) and the mean of the filtered frame is removed so that a DC offset from
the capture chain does not dominate the correlation.
"""

import numpy as np
from scipy.signal import lfilter

from .constants import LOW_PASS_ALPHA


def low_pass_filter(samples: np.ndarray, alpha: float = LOW_PASS_ALPHA) -> np.ndarray:
    """
    Apply y[0] = x[0], y[i] = alpha * y[i-1] + (1 - alpha) * x[i].

    Args:
        samples: Audio samples
        alpha: Smoothing coefficient (0 = no smoothing)

    Returns:
        Filtered samples as float64, same length as the input
    """
    samples = np.asarray(samples, dtype=np.float64)
    if len(samples) == 0:
        return samples.copy()

    # Initial state alpha * x[0] makes the first output equal x[0]
    zi = np.array([alpha * samples[0]])
    filtered, _ = lfilter([1.0 - alpha], [1.0, -alpha], samples, zi=zi)
    return filtered


def remove_dc(samples: np.ndarray) -> np.ndarray:
    """Subtract the arithmetic mean from every sample."""
    samples = np.asarray(samples, dtype=np.float64)
    if len(samples) == 0:
        return samples.copy()
    return samples - np.mean(samples)


def preprocess(samples: np.ndarray, alpha: float = LOW_PASS_ALPHA) -> np.ndarray:
    """Low-pass filter a frame, then remove its DC offset."""
    return remove_dc(low_pass_filter(samples, alpha))


def rms_level(samples: np.ndarray) -> float:
    """Root-mean-square level of a frame (0.0 for an empty frame)."""
    samples = np.asarray(samples, dtype=np.float64)
    if len(samples) == 0:
        return 0.0
    return float(np.sqrt(np.mean(samples * samples)))


def has_minimum_volume(samples: np.ndarray, threshold: float) -> bool:
    """True when the frame's RMS level is strictly above threshold."""
    return rms_level(samples) > threshold
