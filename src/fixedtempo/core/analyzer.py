"""
Per-frame feature extraction.

Each frame yields three values:

* ``low_freq_diff``: half-wave rectified spectral flux over a small
  low-frequency filterbank (0 to ~500 Hz). This is the main periodicity
  signal for most music.
* ``high_freq_magnitude``: the magnitude of a single bin near 9 kHz, a
  proxy for broadband noise such as hi-hats.
* ``rms``: the frame's RMS amplitude.

The last two are fallbacks for material with weak low-frequency content.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from fixedtempo.config import HF_HZ, LF_CUTOFF_HZ, LF_MIN_HZ

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeatureTriple:
    """Features of one analysis frame (all non-negative)."""

    low_freq_diff: float
    high_freq_magnitude: float
    rms: float


class FourierFilterbank:
    """
    A DFT evaluated only at the bins covering [min_hz, max_hz].

    For the handful of bins needed here, a precomputed basis is cheaper
    than a full FFT per frame and keeps the band edges explicit.

    Args:
        frame_length: Frame (transform) length in samples.
        sample_rate: Sample rate in Hz.
        min_hz: Lowest frequency to cover.
        max_hz: Highest frequency to cover. Bins are clamped to Nyquist.
    """

    def __init__(
        self,
        frame_length: int,
        sample_rate: float,
        min_hz: float,
        max_hz: float,
    ):
        nyquist_bin = frame_length // 2
        bin_min = int(np.floor(frame_length * min_hz / sample_rate))
        bin_max = int(np.floor(frame_length * max_hz / sample_rate))
        bin_min = min(max(bin_min, 0), nyquist_bin)
        bin_max = min(max(bin_max, bin_min), nyquist_bin)

        self.frame_length = frame_length
        self.sample_rate = sample_rate
        self.bins = np.arange(bin_min, bin_max + 1)

        phase = 2.0 * np.pi * np.outer(self.bins, np.arange(frame_length)) / frame_length
        self._basis = np.exp(-1j * phase)

    @property
    def n_bins(self) -> int:
        return len(self.bins)

    @property
    def frequencies(self) -> np.ndarray:
        """Centre frequency of each bin in Hz."""
        return self.bins * self.sample_rate / self.frame_length

    def magnitudes(self, frame: np.ndarray) -> np.ndarray:
        """Magnitude of each filterbank bin for one frame."""
        return np.abs(self._basis @ frame)


class FeatureExtractor:
    """
    Computes a :class:`FeatureTriple` per frame.

    Holds the previous frame's low-band magnitudes so that the flux is
    continuous across frames; the first frame is compared against zero.
    """

    def __init__(self, frame_length: int, sample_rate: float):
        self.frame_length = frame_length
        self.sample_rate = sample_rate

        self.low_band = FourierFilterbank(frame_length, sample_rate, LF_MIN_HZ, LF_CUTOFF_HZ)
        self.high_band = FourierFilterbank(frame_length, sample_rate, HF_HZ, HF_HZ)

        self._previous: np.ndarray = np.zeros(self.low_band.n_bins, dtype=np.float64)

        logger.debug(
            "Filterbank: %d low bins (%.1f-%.1f Hz), high bin %.1f Hz, frame %d samples",
            self.low_band.n_bins,
            self.low_band.frequencies[0],
            self.low_band.frequencies[-1],
            self.high_band.frequencies[0],
            frame_length,
        )

    def extract(self, frame: np.ndarray) -> FeatureTriple:
        """Compute the features of one frame and advance the flux state."""
        low = self.low_band.magnitudes(frame)
        diff = low - self._previous
        self._previous[:] = low
        low_freq_diff = float(np.sum(diff[diff > 0.0]))

        high_freq_magnitude = float(self.high_band.magnitudes(frame)[0])
        rms = float(np.sqrt(np.mean(frame * frame)))

        return FeatureTriple(
            low_freq_diff=low_freq_diff,
            high_freq_magnitude=high_freq_magnitude,
            rms=rms,
        )

    def reset(self) -> None:
        """Forget the previous frame (next frame is compared against zero)."""
        self._previous[:] = 0.0
