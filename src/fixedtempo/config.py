"""
Estimator configuration and analysis constants.

Frame length and filterbank band edges are derived from the sample rate;
the constants here are the frequencies and weights they are derived from.
"""

import math
import numbers
from dataclasses import dataclass

from fixedtempo.errors import ConfigurationError


# ---------------------------------------------------------------------------
# Framing
# ---------------------------------------------------------------------------

# The frame is sized so that the band up to about an octave above middle C
# (C5 is ~523 Hz) covers LF_BINS transform bins.
LF_OCTAVE_HZ = 550.0
LF_BINS = 6
MIN_FRAME_LENGTH = 16

# ---------------------------------------------------------------------------
# Filterbank
# ---------------------------------------------------------------------------

LF_MIN_HZ = 0.0
LF_CUTOFF_HZ = 500.0
HF_HZ = 9000.0

# ---------------------------------------------------------------------------
# Autocorrelation weights (low-frequency flux dominates, others are fallbacks)
# ---------------------------------------------------------------------------

LF_WEIGHT = 1.0
HF_WEIGHT = 0.3
RMS_WEIGHT = 0.2

# ---------------------------------------------------------------------------
# Tempo search
# ---------------------------------------------------------------------------

BEAT_WEIGHT = 1.0
BAR_WEIGHT = 1.0
PERCEPTUAL_CENTRE_BPM = 125.0
PERCEPTUAL_WIDTH_OCTAVES = 1.25

DEFAULT_MIN_BPM = 55.0
DEFAULT_MAX_BPM = 190.0
DEFAULT_BEATS_PER_BAR = 4


def frame_length_for(sample_rate: float) -> int:
    """Frame length in samples for the given sample rate."""
    return int(round(sample_rate * LF_BINS / LF_OCTAVE_HZ))


def validate_sample_rate(sample_rate: float) -> float:
    """
    Check a sample rate and return it as a float.

    Raises:
        ConfigurationError: If the rate is not a positive finite number or
            is too low to form a frame of MIN_FRAME_LENGTH samples.
    """
    try:
        rate = float(sample_rate)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Sample rate must be a number, got {sample_rate!r}") from exc
    if not math.isfinite(rate) or rate <= 0:
        raise ConfigurationError(f"Sample rate must be positive, got {sample_rate!r}")
    if frame_length_for(rate) < MIN_FRAME_LENGTH:
        raise ConfigurationError(
            f"Sample rate {rate:g} Hz is too low to analyse "
            f"(frame would be shorter than {MIN_FRAME_LENGTH} samples)"
        )
    return rate


@dataclass
class EstimatorConfig:
    """Tempo search range in BPM and the beats-per-bar hint."""

    min_bpm: float = DEFAULT_MIN_BPM
    max_bpm: float = DEFAULT_MAX_BPM
    beats_per_bar: int = DEFAULT_BEATS_PER_BAR

    def validate(self) -> None:
        """
        Raise ConfigurationError if any field is out of bounds.

        No clamping is performed: a bad value is always a caller bug.
        """
        for name in ("min_bpm", "max_bpm"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise ConfigurationError(f"{name} must be a number, got {value!r}")
            if not math.isfinite(value) or value <= 0:
                raise ConfigurationError(f"{name} must be positive, got {value!r}")
        if self.min_bpm >= self.max_bpm:
            raise ConfigurationError(
                f"min_bpm ({self.min_bpm:g}) must be below max_bpm ({self.max_bpm:g})"
            )
        bpb = self.beats_per_bar
        if isinstance(bpb, bool) or not isinstance(bpb, numbers.Integral) or bpb < 1:
            raise ConfigurationError(f"beats_per_bar must be an integer >= 1, got {bpb!r}")
