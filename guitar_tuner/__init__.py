"""
guitar_tuner - Autocorrelation pitch detection and standard-tuning analysis for guitar
"""

from .autocorrelation import autocorrelate
from .config import ConfigurationError, DetectionConfig
from .constants import (
    BUFFER_SIZE,
    GUITAR_TUNING,
    MAX_FREQUENCY,
    MIN_CONFIDENCE,
    MIN_FREQUENCY,
    SAMPLE_RATE,
    TUNING_TOLERANCE_CENTS,
)
from .pitch_detector import PitchDetector, PitchEstimate
from .tuner_engine import NoteAnalysis, ReferencePitch, TunerEngine, TuningState

__version__ = "0.1.0"
__all__ = [
    "PitchDetector",
    "PitchEstimate",
    "DetectionConfig",
    "ConfigurationError",
    "TunerEngine",
    "NoteAnalysis",
    "ReferencePitch",
    "TuningState",
    "autocorrelate",
    "SAMPLE_RATE",
    "BUFFER_SIZE",
    "MIN_FREQUENCY",
    "MAX_FREQUENCY",
    "MIN_CONFIDENCE",
    "TUNING_TOLERANCE_CENTS",
    "GUITAR_TUNING",
]
