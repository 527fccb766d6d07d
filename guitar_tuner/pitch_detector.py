"""
Autocorrelation pitch detector for a single plucked string.

Each call is independent: a frame goes through preprocessing,
autocorrelation, peak selection and parabolic refinement, and comes back as
a frequency (or None when no pitch could be identified). The only state a
detector keeps is its configuration, whose sample rate can be updated when
the capture device changes.
"""

import logging
import math
from typing import NamedTuple

import numpy as np

from .autocorrelation import autocorrelate
from .config import DetectionConfig
from .interpolation import refine_frequency
from .peak_selector import period_range, select_peak, shorter_period_peak
from .preprocessing import has_minimum_volume, preprocess

logger = logging.getLogger(__name__)


class PitchEstimate(NamedTuple):
    """Detected frequency with its confidence score."""

    frequency: float  # Hz
    confidence: float  # 0.0 to 1.0


class PitchDetector:
    """
    Detect the fundamental frequency of guitar frames.

    Not thread-safe; use one detector per input stream.
    """

    def __init__(
        self,
        sample_rate: float | None = None,
        config: DetectionConfig | None = None,
    ):
        """
        Initialize detector.

        Args:
            sample_rate: Audio sample rate in Hz; overrides config.sample_rate
            config: Frequency band and thresholds (defaults to the guitar band)

        Raises:
            ConfigurationError: If the resulting configuration is invalid
        """
        if config is None:
            config = DetectionConfig() if sample_rate is None else DetectionConfig(sample_rate)
        elif sample_rate is not None:
            config = config.with_sample_rate(sample_rate)
        self._config = config

    @property
    def config(self) -> DetectionConfig:
        return self._config

    @property
    def sample_rate(self) -> float:
        return self._config.sample_rate

    def update_sample_rate(self, sample_rate: float):
        """
        Use a new sample rate for subsequent frames.

        Raises:
            ConfigurationError: If the band no longer fits below Nyquist
        """
        if sample_rate == self._config.sample_rate:
            return
        self._config = self._config.with_sample_rate(sample_rate)
        logger.info("Sample rate updated to %s Hz", sample_rate)

    def detect(self, samples: np.ndarray) -> float | None:
        """
        Detect the pitch of a frame.

        Args:
            samples: Audio frame (float samples, roughly -1..1)

        Returns:
            Frequency in Hz, or None if nothing was detected with at least
            the configured minimum confidence
        """
        estimate = self.detect_with_confidence(samples)
        if estimate is None:
            return None

        if estimate.confidence < self._config.min_confidence:
            logger.debug(
                "Rejected %.2f Hz: confidence %.3f below %.3f",
                estimate.frequency,
                estimate.confidence,
                self._config.min_confidence,
            )
            return None

        return estimate.frequency

    def detect_with_confidence(self, samples: np.ndarray) -> PitchEstimate | None:
        """
        Detect the pitch of a frame without applying the confidence floor.

        Args:
            samples: Audio frame (float samples, roughly -1..1)

        Returns:
            PitchEstimate, or None when the frame is empty, silent, not
            finite, has no usable peak or lies outside the frequency band
        """
        samples = np.array(samples, dtype=np.float64)
        if samples.ndim != 1 or len(samples) == 0:
            return None

        if not np.all(np.isfinite(samples)):
            logger.debug("Ignoring frame with non-finite samples")
            return None

        config = self._config
        if config.min_volume_threshold > 0 and not has_minimum_volume(
            samples, config.min_volume_threshold
        ):
            return None

        correlations = autocorrelate(preprocess(samples))

        peak = select_peak(
            correlations,
            config.sample_rate,
            config.min_frequency,
            config.max_frequency,
        )
        if peak is None:
            return None

        # A stronger peak below the band that the chosen period repeats means
        # the pitch is above max_frequency
        first_period, _ = period_range(
            config.sample_rate, config.min_frequency, config.max_frequency, len(correlations)
        )
        shorter = shorter_period_peak(
            correlations, first_period, peak.period, peak.correlation
        )
        if shorter is not None:
            logger.debug(
                "Rejected period %d: stronger peak at lag %d (%.1f Hz) above the band",
                peak.period,
                shorter,
                config.sample_rate / shorter,
            )
            return None

        frequency = refine_frequency(correlations, peak.period, config.sample_rate)

        if not (math.isfinite(frequency) and math.isfinite(peak.confidence)):
            logger.debug("Discarding non-finite estimate for period %d", peak.period)
            return None

        if not config.min_frequency <= frequency <= config.max_frequency:
            logger.debug(
                "Rejected %.2f Hz: outside %.1f-%.1f Hz",
                frequency,
                config.min_frequency,
                config.max_frequency,
            )
            return None

        return PitchEstimate(float(frequency), float(peak.confidence))
