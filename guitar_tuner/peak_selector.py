"""
Peak selection and confidence scoring on an autocorrelation curve.

The fundamental period is taken as the strongest strict local maximum of the
autocorrelation inside the lag range allowed by the frequency band. The
confidence combines:
- the peak height itself
- how far it dominates the runner-up peak
- a boost for low strings, which autocorrelation tends to under-score
- harmonic consistency (peaks at period/2, period/3, period/4)
"""

from typing import NamedTuple

import numpy as np

from .constants import (
    CONSISTENCY_WEIGHT,
    CORRELATION_THRESHOLD,
    HARMONIC_PEAK_RATIO,
    HARMONIC_RATIO_TOLERANCE,
    HARMONIC_WINDOW,
    HARMONICS,
    LOW_FREQUENCY_BOOST,
    LOW_FREQUENCY_LIMIT,
)


class PeakCandidate(NamedTuple):
    """Best autocorrelation peak found in a frame."""

    period: int  # lag in samples
    correlation: float
    confidence: float


def period_range(
    sample_rate: float,
    min_frequency: float,
    max_frequency: float,
    n_correlations: int,
) -> tuple[int, int]:
    """
    Inclusive lag range to search.

    The upper bound is clipped to n_correlations - 2 so that every candidate
    has a right-hand neighbour. The range is empty when first > last.
    """
    min_period = int(sample_rate // max_frequency)
    max_period = int(sample_rate // min_frequency)
    return max(min_period, 1), min(max_period, n_correlations - 2)


def consistency_bonus(correlations: np.ndarray, period: int) -> float:
    """
    Fraction of harmonic lags that look like peaks themselves.

    A harmonic lag period // h counts when its correlation exceeds the
    average of its two neighbours by more than 10%. Lags too close to either
    end of the curve are not checked; returns 0.0 if none could be checked.
    """
    consistent = 0
    checked = 0
    for harmonic in HARMONICS:
        lag = period // harmonic
        if HARMONIC_WINDOW <= lag < len(correlations) - HARMONIC_WINDOW:
            neighbour_avg = (correlations[lag - 1] + correlations[lag + 1]) / 2
            if correlations[lag] > neighbour_avg * HARMONIC_PEAK_RATIO:
                consistent += 1
            checked += 1
    return consistent / checked if checked > 0 else 0.0


def calculate_confidence(
    max_correlation: float,
    second_correlation: float,
    correlations: np.ndarray,
    period: int,
    sample_rate: float,
) -> float:
    """
    Score how trustworthy a detected period is, at most 1.0.

    Args:
        max_correlation: Height of the chosen peak
        second_correlation: Height of the runner-up peak (0 when there is none)
        correlations: Full autocorrelation curve
        period: Lag of the chosen peak
        sample_rate: Sample rate in Hz

    Returns:
        Confidence score
    """
    confidence = max_correlation

    # Dominance over the runner-up; a lone peak keeps full weight
    if second_correlation > 0:
        confidence *= min(max_correlation / second_correlation / 2, 1.0)

    if sample_rate / period < LOW_FREQUENCY_LIMIT:
        confidence *= LOW_FREQUENCY_BOOST

    confidence *= 1 + CONSISTENCY_WEIGHT * consistency_bonus(correlations, period)

    return min(confidence, 1.0)


def select_peak(
    correlations: np.ndarray,
    sample_rate: float,
    min_frequency: float,
    max_frequency: float,
    threshold: float = CORRELATION_THRESHOLD,
) -> PeakCandidate | None:
    """
    Find the fundamental period in an autocorrelation curve.

    Args:
        correlations: Normalized autocorrelation (lag 0 first)
        sample_rate: Sample rate in Hz
        min_frequency: Lowest frequency of interest in Hz
        max_frequency: Highest frequency of interest in Hz
        threshold: Minimum correlation of an acceptable peak

    Returns:
        PeakCandidate, or None if no local maximum reaches the threshold
    """
    first, last = period_range(sample_rate, min_frequency, max_frequency, len(correlations))
    if first > last:
        return None

    lags = np.arange(first, last + 1)
    values = correlations[lags]
    is_peak = (values > correlations[lags - 1]) & (values > correlations[lags + 1])
    peak_lags = lags[is_peak]
    if len(peak_lags) == 0:
        return None

    peak_values = correlations[peak_lags]
    best = int(np.argmax(peak_values))  # first occurrence wins ties
    best_period = int(peak_lags[best])
    max_correlation = float(peak_values[best])

    others = np.delete(peak_values, best)
    second_correlation = max(float(np.max(others)), 0.0) if len(others) else 0.0

    if best_period == 0 or max_correlation < threshold:
        return None

    confidence = calculate_confidence(
        max_correlation, second_correlation, correlations, best_period, sample_rate
    )
    return PeakCandidate(best_period, max_correlation, confidence)


def shorter_period_peak(
    correlations: np.ndarray,
    below_period: int,
    peak_period: int,
    min_correlation: float,
) -> int | None:
    """
    Find a local maximum at a lag shorter than below_period of which
    peak_period is a multiple, and that is at least as strong as
    min_correlation.

    A periodic signal correlates best at its own period, so such a peak
    means the chosen in-band peak is only a multiple of a period that is
    too short for the band (the fundamental is above max_frequency). The
    chosen peak must also be the first multiple of that lag to reach the
    band, which is where the strongest in-band repeat of a short period
    lands. Ripples on the main lobe of noisy frames fail both tests.

    Returns:
        The strongest such lag, or None
    """
    last = min(below_period - 1, len(correlations) - 2)
    if last < 1 or peak_period < 2:
        return None

    lags = np.arange(1, last + 1)
    values = correlations[lags]
    is_peak = (values > correlations[lags - 1]) & (values > correlations[lags + 1])

    ratios = peak_period / lags
    multiples = np.rint(ratios)
    harmonic = (
        (multiples >= 2)
        & (np.abs(ratios - multiples) < HARMONIC_RATIO_TOLERANCE)
        & ((multiples - 1) * lags < below_period)
    )

    strong = lags[is_peak & harmonic & (values >= min_correlation)]
    if len(strong) == 0:
        return None
    return int(strong[np.argmax(correlations[strong])])
