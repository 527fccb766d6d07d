"""
Detection configuration.

A DetectionConfig is validated once when it is built. Invalid settings are
programming errors and raise ConfigurationError immediately rather than
making every later detection fail.
"""

import math
from dataclasses import dataclass, replace

from .constants import MAX_FREQUENCY, MIN_CONFIDENCE, MIN_FREQUENCY, SAMPLE_RATE


class ConfigurationError(ValueError):
    """Raised when a detector is configured with impossible settings."""


@dataclass(frozen=True)
class DetectionConfig:
    """Settings for a PitchDetector."""

    sample_rate: float = SAMPLE_RATE
    min_frequency: float = MIN_FREQUENCY
    max_frequency: float = MAX_FREQUENCY
    min_confidence: float = MIN_CONFIDENCE
    # RMS level a frame must exceed to be analysed; 0 disables the gate
    min_volume_threshold: float = 0.0

    def __post_init__(self):
        values = (
            self.sample_rate,
            self.min_frequency,
            self.max_frequency,
            self.min_confidence,
            self.min_volume_threshold,
        )
        if not all(math.isfinite(v) for v in values):
            raise ConfigurationError(f"Configuration values must be finite: {self}")
        if self.sample_rate <= 0:
            raise ConfigurationError(f"Sample rate must be positive, got {self.sample_rate}")
        if not 0 < self.min_frequency < self.max_frequency:
            raise ConfigurationError(
                f"Need 0 < min_frequency < max_frequency, got "
                f"{self.min_frequency} and {self.max_frequency}"
            )
        if self.max_frequency >= self.sample_rate / 2:
            raise ConfigurationError(
                f"max_frequency {self.max_frequency} Hz is not below the Nyquist "
                f"frequency {self.sample_rate / 2} Hz"
            )
        if self.min_confidence < 0:
            raise ConfigurationError(f"min_confidence must be >= 0, got {self.min_confidence}")
        if self.min_volume_threshold < 0:
            raise ConfigurationError(
                f"min_volume_threshold must be >= 0, got {self.min_volume_threshold}"
            )

    def with_sample_rate(self, sample_rate: float) -> "DetectionConfig":
        """Return a validated copy using a different sample rate."""
        return replace(self, sample_rate=sample_rate)

    @property
    def nyquist(self) -> float:
        return self.sample_rate / 2
