"""
Fixed-tempo estimation over a streamed or in-memory signal.

Architecture Overview
---------------------
::

    sample blocks
        │
        ▼
    TempoEstimator.process(block)          (repeated, any block size)
        │
        ├─► FrameSegmenter    overlapping frames across block boundaries
        ├─► FeatureExtractor  low-band flux, 9 kHz bin, RMS
        └─► FeatureSequences  one triple per frame

    TempoEstimator.estimate_tempo()        (once, or whenever asked)
        │
        ├─► combined_autocorrelation
        └─► search_tempo  ──► ranked TempoCandidate list

Either feed blocks with :meth:`TempoEstimator.process` and then call
:meth:`TempoEstimator.estimate_tempo`, or hand the whole signal to
:meth:`TempoEstimator.estimate_tempo_of_samples`. Do not mix the two
without a :meth:`TempoEstimator.reset` in between.

Instances are not thread-safe; use one instance per thread or lock
around every call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Optional

import numpy as np

from fixedtempo.config import EstimatorConfig, frame_length_for, validate_sample_rate
from fixedtempo.core.accumulator import FeatureSequences
from fixedtempo.core.analyzer import FeatureExtractor
from fixedtempo.core.autocorrelation import combined_autocorrelation
from fixedtempo.core.framing import FrameSegmenter
from fixedtempo.core.search import (
    TempoCandidate,
    autocorrelation_length,
    lag_range,
    required_frames,
    search_tempo,
)
from fixedtempo.errors import UsageError

logger = logging.getLogger(__name__)

_STREAMING = "streaming"
_ONE_SHOT = "one-shot"


@dataclass
class _EstimatorState:
    """Mutable per-clip state, owned by a single TempoEstimator."""

    segmenter: FrameSegmenter
    extractor: FeatureExtractor
    features: FeatureSequences = field(default_factory=FeatureSequences)
    candidates: list[TempoCandidate] = field(default_factory=list)
    mode: Optional[str] = None


class TempoEstimator:
    """
    Estimates the single fixed tempo of a mono signal.

    Parameters
    ----------
    sample_rate:
        Samples per second. Fixed for the lifetime of the estimator; the
        frame length and filterbank bins are derived from it.

    Raises
    ------
    ConfigurationError
        If ``sample_rate`` is not positive, or too low to analyse.
    """

    def __init__(self, sample_rate: float):
        self._sample_rate = validate_sample_rate(sample_rate)
        self._frame_length = frame_length_for(self._sample_rate)
        self._hop_length = self._frame_length // 2
        self._config = EstimatorConfig()

        self._state = _EstimatorState(
            segmenter=FrameSegmenter(self._frame_length, self._hop_length),
            extractor=FeatureExtractor(self._frame_length, self._sample_rate),
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def sample_rate(self) -> float:
        return self._sample_rate

    @property
    def frame_length(self) -> int:
        return self._frame_length

    @property
    def hop_length(self) -> int:
        return self._hop_length

    @property
    def frame_rate(self) -> float:
        """Analysis frames per second."""
        return self._sample_rate / self._hop_length

    @property
    def n_frames(self) -> int:
        """Frames accumulated since construction or the last reset."""
        return len(self._state.features)

    @property
    def min_bpm(self) -> float:
        return self._config.min_bpm

    @property
    def max_bpm(self) -> float:
        return self._config.max_bpm

    @property
    def candidates(self) -> list[TempoCandidate]:
        """Ranked candidates (with scores) from the last estimate."""
        return list(self._state.candidates)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_tempo_range(self, min_bpm: float, max_bpm: float) -> None:
        """
        Set the range of valid tempi (default 55-190 BPM).

        Raises:
            ConfigurationError: If either bound is not positive or
                min_bpm >= max_bpm. The previous range is kept.
        """
        config = replace(self._config, min_bpm=min_bpm, max_bpm=max_bpm)
        config.validate()
        self._config = replace(config, min_bpm=float(min_bpm), max_bpm=float(max_bpm))

    def get_tempo_range(self) -> tuple[float, float]:
        return self._config.min_bpm, self._config.max_bpm

    def set_beats_per_bar(self, beats_per_bar: int) -> None:
        """
        Set the beats-per-bar hint (default 4).

        Only the comb filter uses it; meter is never estimated.

        Raises:
            ConfigurationError: If the value is not an integer >= 1.
        """
        config = replace(self._config, beats_per_bar=beats_per_bar)
        config.validate()
        self._config = replace(config, beats_per_bar=int(beats_per_bar))

    def get_beats_per_bar(self) -> int:
        return self._config.beats_per_bar

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    @staticmethod
    def _as_block(samples, count: Optional[int], offset: int = 0) -> np.ndarray:
        block = np.asarray(samples, dtype=np.float64)
        if block.ndim != 1:
            raise ValueError(
                f"Expected a 1-D block of mono samples, got shape {block.shape}; "
                "downmix multi-channel audio first"
            )
        if offset < 0:
            raise ValueError(f"offset must be non-negative, got {offset}")
        if count is None:
            count = len(block) - offset
        if count < 0:
            raise ValueError(f"count must be non-negative, got {count}")
        if offset + count > len(block):
            raise ValueError(
                f"offset + count ({offset} + {count}) exceeds the {len(block)} samples supplied"
            )
        return block[offset:offset + count]

    def _accumulate(self, block: np.ndarray) -> None:
        state = self._state
        for frame in state.segmenter.push(block):
            state.features.append(state.extractor.extract(frame))

    def process(self, samples, count: Optional[int] = None) -> None:
        """
        Supply the next block of a contiguous mono stream.

        Args:
            samples: 1-D array-like of samples; any length, including zero.
            count: Use only the first ``count`` samples (default: all).

        An empty block supplies nothing and leaves the estimator fresh.

        Raises:
            UsageError: If estimate_tempo_of_samples() was used since the
                last reset.
        """
        if self._state.mode == _ONE_SHOT:
            raise UsageError(
                "process() cannot follow estimate_tempo_of_samples(); call reset() first"
            )
        block = self._as_block(samples, count)
        if len(block) == 0:
            return
        self._state.mode = _STREAMING
        self._accumulate(block)

    def estimate_tempo_of_samples(
        self,
        samples,
        count: Optional[int] = None,
        offset: int = 0,
    ) -> float:
        """
        Estimate the tempo of a complete in-memory signal.

        Args:
            samples: 1-D array-like holding the whole clip.
            count: Number of samples to analyse (default: to the end).
            offset: Index of the first sample to analyse.

        Returns:
            Tempo in BPM, or 0.0 if the clip is too short.

        Raises:
            UsageError: If any samples were supplied since the last reset.
        """
        if self._state.mode is not None:
            raise UsageError(
                "estimate_tempo_of_samples() needs a fresh estimator; call reset() first"
            )
        block = self._as_block(samples, count, offset)
        self._state.mode = _ONE_SHOT
        self._accumulate(block)
        return self.estimate_tempo()

    def estimate_tempo(self) -> float:
        """
        Estimate the tempo of everything supplied so far.

        Recomputes from the accumulated features on every call and
        replaces the candidate list.

        Returns:
            Best tempo in BPM, or 0.0 if there is not enough data.
        """
        state = self._state
        config = self._config
        n = len(state.features)

        min_lag, max_lag = lag_range(config.min_bpm, config.max_bpm, self.frame_rate)
        logger.debug(
            "Estimating over %d frames (%.2f s), lags %d-%d, %d beats/bar",
            n, n / self.frame_rate, min_lag, max_lag, config.beats_per_bar,
        )

        if max_lag - min_lag + 1 < 2 or n < required_frames(max_lag):
            logger.debug("Not enough data for a tempo estimate")
            state.candidates = []
            return 0.0

        acf_lags = autocorrelation_length(max_lag, config.beats_per_bar, n)
        acf = combined_autocorrelation(state.features.as_arrays(), acf_lags)
        state.candidates = search_tempo(
            acf,
            self.frame_rate,
            config.min_bpm,
            config.max_bpm,
            config.beats_per_bar,
        )

        if not state.candidates:
            logger.debug("No tempo peak found")
            return 0.0

        best = state.candidates[0]
        logger.info("Estimated tempo %.2f BPM (%d candidates)", best.bpm, len(state.candidates))
        return best.bpm

    def get_tempo_candidates(self) -> list[float]:
        """Candidate tempi from the last estimate, best first."""
        return [c.bpm for c in self._state.candidates]

    def reset(self) -> None:
        """
        Prepare for a new clip.

        Clears accumulated features, the partial frame, filter state and
        candidates; the tempo range and beats-per-bar are kept.
        """
        state = self._state
        state.segmenter.reset()
        state.extractor.reset()
        state.features.clear()
        state.candidates = []
        state.mode = None
