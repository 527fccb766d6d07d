"""
Tuning judgement against the standard guitar strings.

The engine maps a detected frequency to the nearest string of a fixed
reference table and reports the deviation in whole cents.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple

from .constants import (
    CENTS_PER_OCTAVE,
    GUITAR_TUNING,
    MAX_CENTS,
    METER_RANGE_CENTS,
    MIN_CENTS,
    TUNING_TOLERANCE_CENTS,
)

logger = logging.getLogger(__name__)


class ReferencePitch(NamedTuple):
    """Target pitch of one string."""

    name: str  # e.g. "A2"
    frequency: float  # Hz


class TuningState(Enum):
    """Direction the string needs to be tuned."""

    FLAT = "flat"
    IN_TUNE = "in-tune"
    SHARP = "sharp"


@dataclass
class NoteAnalysis:
    """Result of analysing one detected frequency."""

    frequency: float  # Detected frequency in Hz
    note: str  # Nearest string, e.g. "E2"
    cents: int  # Signed deviation from that string, rounded
    in_tune: bool  # |cents| within the tolerance
    confidence: float = 1.0  # Detector confidence passed through

    @property
    def tuning_state(self) -> TuningState:
        if self.in_tune:
            return TuningState.IN_TUNE
        return TuningState.FLAT if self.cents < 0 else TuningState.SHARP

    @property
    def meter_cents(self) -> int:
        """Cents clamped to the tuning meter range."""
        return max(-METER_RANGE_CENTS, min(METER_RANGE_CENTS, self.cents))


def round_half_away_from_zero(value: float) -> int:
    """Round to the nearest integer, halves away from zero (2.5 -> 3, -2.5 -> -3)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def cents_between(frequency: float, reference: float) -> int:
    """
    Interval from reference to frequency in whole cents.

    Ratios without a finite logarithm (zero, negative or non-finite
    frequencies) saturate to MIN_CENTS or MAX_CENTS.
    """
    ratio = frequency / reference
    if math.isnan(ratio) or ratio <= 0:
        return MIN_CENTS
    if math.isinf(ratio):
        return MAX_CENTS
    cents = round_half_away_from_zero(CENTS_PER_OCTAVE * math.log2(ratio))
    return max(MIN_CENTS, min(MAX_CENTS, cents))


class TunerEngine:
    """Compare detected frequencies with a static table of string pitches."""

    def __init__(
        self,
        tolerance_cents: int = TUNING_TOLERANCE_CENTS,
        tuning: dict[str, float] | None = None,
    ):
        """
        Initialize engine.

        Args:
            tolerance_cents: Largest |cents| still considered in tune
            tuning: Note name -> frequency table (standard tuning by default)

        Raises:
            ValueError: If the table is empty or holds a non-positive or
                non-finite frequency
        """
        if tuning is None:
            tuning = GUITAR_TUNING
        if not tuning:
            raise ValueError("Tuning table must contain at least one pitch")
        for name, freq in tuning.items():
            if not (math.isfinite(freq) and freq > 0):
                raise ValueError(f"Reference pitch {name} must be a positive frequency, got {freq}")

        self.tolerance_cents = tolerance_cents
        # Python's sort is stable, so equal frequencies keep table order
        self._references = tuple(
            sorted(
                (ReferencePitch(name, float(freq)) for name, freq in tuning.items()),
                key=lambda ref: ref.frequency,
            )
        )

    @property
    def reference_pitches(self) -> tuple[ReferencePitch, ...]:
        """Reference pitches sorted from lowest to highest."""
        return self._references

    def closest_reference(self, frequency: float) -> ReferencePitch:
        """Nearest reference pitch; the lower one wins a tie."""
        closest = self._references[0]
        min_difference = abs(frequency - closest.frequency)
        for reference in self._references[1:]:
            difference = abs(frequency - reference.frequency)
            if difference < min_difference:
                min_difference = difference
                closest = reference
        return closest

    def closest_note(self, frequency: float) -> str:
        return self.closest_reference(frequency).name

    def analyze(self, frequency: float, confidence: float = 1.0) -> NoteAnalysis:
        """
        Judge the tuning of a detected frequency.

        The frequency is not validated: zero or negative values map to the
        lowest string with a saturated cents value.

        Args:
            frequency: Detected frequency in Hz
            confidence: Detector confidence, passed through unchanged

        Returns:
            NoteAnalysis for the nearest string
        """
        reference = self.closest_reference(frequency)
        cents = cents_between(frequency, reference.frequency)
        in_tune = abs(cents) <= self.tolerance_cents

        logger.debug(
            "%.2f Hz -> %s %+d cents%s",
            frequency,
            reference.name,
            cents,
            " (in tune)" if in_tune else "",
        )

        return NoteAnalysis(
            frequency=frequency,
            note=reference.name,
            cents=cents,
            in_tune=in_tune,
            confidence=confidence,
        )
