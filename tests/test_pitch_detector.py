"""
Tests for PitchDetector using synthetic signals.

These tests generate sine waves at the standard guitar string frequencies
and check the detected frequency, the band limits, degenerate frames and
sample rate changes.
"""

import time

import numpy as np
import pytest

from guitar_tuner import (
    SAMPLE_RATE,
    ConfigurationError,
    DetectionConfig,
    PitchDetector,
    PitchEstimate,
    TunerEngine,
)

FRAME_100MS = SAMPLE_RATE // 10  # 4410 samples


def generate_sine_wave(
    frequency: float,
    duration_samples: int,
    sample_rate: float = SAMPLE_RATE,
    amplitude: float = 0.8,
) -> np.ndarray:
    """Generate a float32 sine wave like a capture device delivers."""
    t = np.arange(duration_samples) / sample_rate
    return (amplitude * np.sin(2 * np.pi * frequency * t)).astype(np.float32)


class TestStringDetection:
    """Known-frequency recovery for the six strings."""

    def setup_method(self):
        self.detector = PitchDetector(SAMPLE_RATE)

    @pytest.mark.parametrize(
        "frequency, tolerance",
        [
            (82.41, 2.0),  # E2
            (110.00, 2.0),  # A2
            (146.83, 1.0),  # D3
            (196.00, 1.0),  # G3
            (246.94, 1.0),  # B3
            (329.63, 2.0),  # E4
        ],
    )
    def test_standard_strings(self, frequency, tolerance):
        signal = generate_sine_wave(frequency, FRAME_100MS)
        detected = self.detector.detect(signal)

        assert detected is not None, f"Should detect {frequency} Hz"
        assert abs(detected - frequency) <= tolerance, f"Detected {detected} for {frequency} Hz"

    @pytest.mark.parametrize("frequency", [82.41, 110.00, 146.83, 196.00, 246.94, 329.63])
    def test_longer_frames(self, frequency):
        """Longer frames reduce the estimator bias."""
        detected = self.detector.detect(generate_sine_wave(frequency, 8192))
        assert detected == pytest.approx(frequency, abs=1.0)

    def test_a2_scenario(self):
        """4096 samples of A2 -> detected, then judged in tune."""
        detected = self.detector.detect(generate_sine_wave(110.0, 4096))

        assert detected is not None
        assert 108.0 <= detected < 112.0

        analysis = TunerEngine().analyze(detected)
        assert analysis.note == "A2"
        assert abs(analysis.cents) <= 5
        assert analysis.in_tune

    def test_amplitude_does_not_matter(self):
        quiet = self.detector.detect(generate_sine_wave(196.0, 4096, amplitude=0.05))
        loud = self.detector.detect(generate_sine_wave(196.0, 4096, amplitude=1.0))
        assert quiet == pytest.approx(loud, abs=0.01)

    def test_harmonic_rich_signal(self):
        """A plucked-string-like tone is detected at its fundamental."""
        t = np.arange(8192) / SAMPLE_RATE
        f0 = 110.0
        signal = (
            0.6 * np.sin(2 * np.pi * f0 * t)
            + 0.3 * np.sin(2 * np.pi * 2 * f0 * t)
            + 0.15 * np.sin(2 * np.pi * 3 * f0 * t)
        ).astype(np.float32)
        detected = self.detector.detect(signal)
        assert detected == pytest.approx(f0, abs=2.0)

    def test_noisy_sine(self):
        rng = np.random.default_rng(7)
        signal = generate_sine_wave(146.83, 8192) + rng.normal(0, 0.05, 8192).astype(np.float32)
        detected = self.detector.detect(signal)
        assert detected == pytest.approx(146.83, abs=2.0)

    @pytest.mark.parametrize("seed", [0, 9])
    def test_heavily_noisy_low_e(self, seed):
        """Noise ripples at short lags must not read as a pitch above the band."""
        rng = np.random.default_rng(seed)
        signal = generate_sine_wave(82.41, 4096) + rng.normal(0, 1.0, 4096).astype(np.float32)

        estimate = self.detector.detect_with_confidence(signal)

        assert estimate is not None
        assert estimate.frequency == pytest.approx(82.41, abs=4.0)


class TestBandLimits:
    """Frequencies outside the configured band are rejected."""

    def setup_method(self):
        self.detector = PitchDetector(SAMPLE_RATE)

    def test_below_band(self):
        assert self.detector.detect(generate_sine_wave(50.0, FRAME_100MS)) is None

    def test_above_band(self):
        """500 Hz must not be reported as its in-band subharmonic."""
        assert self.detector.detect(generate_sine_wave(500.0, FRAME_100MS)) is None

    def test_above_band_with_confidence(self):
        assert self.detector.detect_with_confidence(generate_sine_wave(500.0, FRAME_100MS)) is None

    def test_custom_band(self):
        detector = PitchDetector(
            config=DetectionConfig(sample_rate=SAMPLE_RATE, min_frequency=300.0, max_frequency=1000.0)
        )
        assert detector.detect(generate_sine_wave(500.0, 4096)) == pytest.approx(500.0, abs=2.0)
        assert detector.detect(generate_sine_wave(110.0, 4096)) is None


class TestDegenerateInput:
    """Degenerate frames return None without raising."""

    def setup_method(self):
        self.detector = PitchDetector(SAMPLE_RATE)

    def test_empty_frame(self):
        assert self.detector.detect(np.array([], dtype=np.float32)) is None
        assert self.detector.detect_with_confidence([]) is None

    def test_single_sample(self):
        assert self.detector.detect(np.array([0.5], dtype=np.float32)) is None

    def test_zeros(self):
        assert self.detector.detect(np.zeros(4096, dtype=np.float32)) is None

    def test_dc(self):
        assert self.detector.detect(np.full(4096, 0.5, dtype=np.float32)) is None

    def test_nan_sample(self):
        signal = generate_sine_wave(110.0, 4096)
        signal[100] = np.nan
        assert self.detector.detect(signal) is None
        assert self.detector.detect_with_confidence(signal) is None

    def test_infinite_sample(self):
        signal = generate_sine_wave(110.0, 4096)
        signal[0] = np.inf
        assert self.detector.detect(signal) is None

    def test_white_noise(self):
        rng = np.random.default_rng(0)
        noise = rng.uniform(-1, 1, 8192).astype(np.float32)
        assert self.detector.detect(noise) is None

    def test_short_frame(self):
        """A frame too short for the band has no candidate lags."""
        assert self.detector.detect(generate_sine_wave(110.0, 128)) is None

    def test_python_list_accepted(self):
        signal = generate_sine_wave(196.0, 4096).tolist()
        assert self.detector.detect(signal) == pytest.approx(196.0, abs=1.0)

    def test_input_not_modified(self):
        signal = generate_sine_wave(196.0, 4096)
        original = signal.copy()
        self.detector.detect(signal)
        np.testing.assert_array_equal(signal, original)


class TestConfidence:
    """Tests for the confidence floor."""

    def setup_method(self):
        self.detector = PitchDetector(SAMPLE_RATE)

    def test_estimate_fields(self):
        estimate = self.detector.detect_with_confidence(generate_sine_wave(110.0, 4096))
        assert isinstance(estimate, PitchEstimate)
        assert estimate.frequency == pytest.approx(110.0, abs=2.0)
        assert 0.3 <= estimate.confidence <= 1.0

    def test_detect_with_confidence_skips_floor(self):
        """Only detect() applies min_confidence."""
        detector = PitchDetector(SAMPLE_RATE, DetectionConfig(min_confidence=1.01))
        signal = generate_sine_wave(329.63, 4096)

        assert detector.detect(signal) is None
        estimate = detector.detect_with_confidence(signal)
        assert estimate is not None
        assert estimate.frequency == pytest.approx(329.63, abs=2.0)

    def test_detect_matches_estimate(self):
        signal = generate_sine_wave(246.94, 4096)
        estimate = self.detector.detect_with_confidence(signal)
        assert self.detector.detect(signal) == estimate.frequency

    def test_idempotent(self):
        signal = generate_sine_wave(146.83, 4096)
        assert self.detector.detect(signal) == self.detector.detect(signal)
        assert self.detector.detect_with_confidence(signal) == self.detector.detect_with_confidence(signal)


class TestVolumeGate:
    def test_quiet_frame_rejected(self):
        detector = PitchDetector(SAMPLE_RATE, DetectionConfig(min_volume_threshold=0.05))
        assert detector.detect(generate_sine_wave(110.0, 4096, amplitude=0.01)) is None
        assert detector.detect(generate_sine_wave(110.0, 4096, amplitude=0.8)) is not None

    def test_gate_disabled_by_default(self):
        detector = PitchDetector(SAMPLE_RATE)
        assert detector.detect(generate_sine_wave(110.0, 4096, amplitude=0.001)) is not None


class TestSampleRate:
    """Tests for sample rate handling."""

    def test_default_sample_rate(self):
        assert PitchDetector().sample_rate == SAMPLE_RATE

    def test_sample_rate_overrides_config(self):
        detector = PitchDetector(48000, DetectionConfig(sample_rate=22050))
        assert detector.sample_rate == 48000
        assert detector.config.sample_rate == 48000

    def test_update_sample_rate(self):
        detector = PitchDetector(SAMPLE_RATE)
        detector.update_sample_rate(48000)
        assert detector.sample_rate == 48000

        detected = detector.detect(generate_sine_wave(196.0, 4800, sample_rate=48000))
        assert detected == pytest.approx(196.0, abs=1.0)

    def test_update_keeps_other_settings(self):
        detector = PitchDetector(SAMPLE_RATE, DetectionConfig(min_frequency=80.0, min_confidence=0.5))
        detector.update_sample_rate(22050)
        assert detector.config.min_frequency == 80.0
        assert detector.config.min_confidence == 0.5

    def test_wrong_sample_rate_shifts_result(self):
        """A frame captured at 48 kHz but analysed as 44.1 kHz reads flat."""
        signal = generate_sine_wave(196.0, 4800, sample_rate=48000)
        detected = PitchDetector(SAMPLE_RATE).detect(signal)
        assert detected == pytest.approx(196.0 * SAMPLE_RATE / 48000, abs=1.0)

    def test_invalid_update_rejected(self):
        detector = PitchDetector(SAMPLE_RATE)
        with pytest.raises(ConfigurationError):
            detector.update_sample_rate(0)
        with pytest.raises(ConfigurationError):
            detector.update_sample_rate(700)  # band above Nyquist
        assert detector.sample_rate == SAMPLE_RATE

    def test_invalid_construction(self):
        with pytest.raises(ConfigurationError):
            PitchDetector(-1)


class TestPerformance:
    """Soft timing targets for per-frame processing."""

    def test_large_frame(self):
        detector = PitchDetector(SAMPLE_RATE)
        signal = generate_sine_wave(110.0, 16384)
        detector.detect(signal)  # warm up

        start = time.perf_counter()
        detector.detect(signal)
        assert time.perf_counter() - start < 0.05

    def test_typical_frames(self):
        detector = PitchDetector(SAMPLE_RATE)
        signal = generate_sine_wave(196.0, 4096)
        detector.detect(signal)

        runs = 50
        start = time.perf_counter()
        for _ in range(runs):
            detector.detect(signal)
        assert (time.perf_counter() - start) / runs < 0.01
