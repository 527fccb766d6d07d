"""
Constants for the guitar tuner.
"""

# Audio defaults (matches the usual capture device settings)
SAMPLE_RATE = 44100
BUFFER_SIZE = 4096

# Guitar frequency band searched by the detector (Hz)
MIN_FREQUENCY = 70.0  # a little below low E
MAX_FREQUENCY = 400.0  # a little above high E

# Standard tuning, low string to high string (Hz)
GUITAR_TUNING = {
    "E2": 82.41,
    "A2": 110.00,
    "D3": 146.83,
    "G3": 196.00,
    "B3": 246.94,
    "E4": 329.63,
}

# Preprocessing
LOW_PASS_ALPHA = 0.8  # single-pole smoothing coefficient (empirical)

# Autocorrelation energy below which a frame is treated as silence
SILENCE_ENERGY = 1e-20

# Peak selection and confidence scoring
CORRELATION_THRESHOLD = 0.15  # weakest acceptable autocorrelation peak
MIN_CONFIDENCE = 0.3  # floor applied by PitchDetector.detect()
LOW_FREQUENCY_LIMIT = 150.0  # below this (about D3) confidence is boosted
LOW_FREQUENCY_BOOST = 1.1
HARMONICS = (2, 3, 4)
HARMONIC_WINDOW = 3  # harmonic lags closer than this to either edge are skipped
HARMONIC_PEAK_RATIO = 1.1  # harmonic must beat its neighbour average by 10%
CONSISTENCY_WEIGHT = 0.2
HARMONIC_RATIO_TOLERANCE = 0.1  # peak_period / lag must be this close to an integer

# Tuning judgement
TUNING_TOLERANCE_CENTS = 5
METER_RANGE_CENTS = 50  # +/- range of the tuning meter
CENTS_PER_OCTAVE = 1200

# Cents reported when the frequency ratio has no finite logarithm
# (zero, negative or non-finite frequencies); signed 32-bit limits.
MIN_CENTS = -(2**31)
MAX_CENTS = 2**31 - 1
