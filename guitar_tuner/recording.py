"""
Offline analysis of recorded audio.

Splits a recording into fixed-size frames (as a capture device would deliver
them), runs the pitch detector and tuner engine on each and collects the
results. Used by scripts/analyze_recording.py and handy for regression
checks against real recordings.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
from scipy.io import wavfile

from .constants import BUFFER_SIZE
from .pitch_detector import PitchDetector
from .tuner_engine import NoteAnalysis, TunerEngine

logger = logging.getLogger(__name__)


@dataclass
class FrameResult:
    """Analysis of one frame of a recording."""

    index: int
    time: float  # Frame start in seconds
    analysis: NoteAnalysis | None = None  # None when no pitch was detected


@dataclass
class RecordingReport:
    """Frame-by-frame analysis of a recording."""

    sample_rate: float
    frames: list[FrameResult] = field(default_factory=list)

    @property
    def detected(self) -> list[FrameResult]:
        return [f for f in self.frames if f.analysis is not None]

    @property
    def detection_rate(self) -> float:
        if not self.frames:
            return 0.0
        return len(self.detected) / len(self.frames)

    def note_counts(self) -> dict[str, int]:
        """How many frames were matched to each string."""
        counts: dict[str, int] = {}
        for frame in self.detected:
            counts[frame.analysis.note] = counts.get(frame.analysis.note, 0) + 1
        return counts

    def median_frequency(self, note: str | None = None) -> float | None:
        """Median detected frequency, optionally restricted to one string."""
        freqs = [
            f.analysis.frequency
            for f in self.detected
            if note is None or f.analysis.note == note
        ]
        if not freqs:
            return None
        return float(np.median(freqs))


def load_wav(path: str | Path) -> tuple[np.ndarray, int]:
    """
    Read a WAV file as mono float64 samples in roughly -1..1.

    Integer PCM is scaled by its full-scale value and multi-channel audio is
    averaged down to mono.

    Returns:
        Tuple of (samples, sample_rate)
    """
    sample_rate, data = wavfile.read(str(path))

    if np.issubdtype(data.dtype, np.integer):
        info = np.iinfo(data.dtype)
        if info.min == 0:
            # Unsigned 8-bit PCM is offset by half scale
            data = (data.astype(np.float64) - (info.max + 1) / 2) / ((info.max + 1) / 2)
        else:
            data = data.astype(np.float64) / -info.min
    else:
        data = data.astype(np.float64)

    if data.ndim > 1:
        data = data.mean(axis=1)

    logger.info("Loaded %s: %d samples at %d Hz", path, len(data), sample_rate)
    return data, int(sample_rate)


def iter_frames(samples: np.ndarray, frame_size: int, hop_size: int):
    """Yield (start, frame) for every complete frame."""
    if frame_size <= 0 or hop_size <= 0:
        raise ValueError("frame_size and hop_size must be positive")
    for start in range(0, len(samples) - frame_size + 1, hop_size):
        yield start, samples[start : start + frame_size]


def analyze_samples(
    samples: np.ndarray,
    sample_rate: float,
    frame_size: int = BUFFER_SIZE,
    hop_size: int | None = None,
    detector: PitchDetector | None = None,
    engine: TunerEngine | None = None,
) -> RecordingReport:
    """
    Analyze a recording frame by frame.

    Args:
        samples: Mono audio samples
        sample_rate: Sample rate in Hz
        frame_size: Samples per analysed frame
        hop_size: Samples between frame starts (defaults to frame_size)
        detector: Detector to use (a default guitar detector if None)
        engine: Tuner engine to use (standard tuning if None)

    Returns:
        RecordingReport with one FrameResult per complete frame
    """
    if hop_size is None:
        hop_size = frame_size
    if detector is None:
        detector = PitchDetector(sample_rate)
    else:
        detector.update_sample_rate(sample_rate)
    if engine is None:
        engine = TunerEngine()

    report = RecordingReport(sample_rate=sample_rate)
    for index, (start, frame) in enumerate(iter_frames(samples, frame_size, hop_size)):
        result = FrameResult(index=index, time=start / sample_rate)

        estimate = detector.detect_with_confidence(frame)
        if estimate is not None and estimate.confidence >= detector.config.min_confidence:
            result.analysis = engine.analyze(estimate.frequency, estimate.confidence)

        report.frames.append(result)

    logger.info(
        "Analyzed %d frames, pitch found in %d", len(report.frames), len(report.detected)
    )
    return report


def analyze_file(
    path: str | Path,
    frame_size: int = BUFFER_SIZE,
    hop_size: int | None = None,
) -> RecordingReport:
    """Load a WAV file and analyze it frame by frame."""
    samples, sample_rate = load_wav(path)
    return analyze_samples(samples, sample_rate, frame_size, hop_size)
