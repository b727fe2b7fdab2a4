"""
Tempo search over a combined autocorrelation.

Steps, all over lags (in frames) rather than BPM:

1. Restrict to the lags corresponding to [min_bpm, max_bpm].
2. Comb filter: reinforce each lag with the strongest correlation around
   its bar-length multiple (``beats_per_bar * lag``). A beat lag whose bar
   length also correlates well is more credible than one that does not.
3. Perceptual weighting: a smooth log-tempo curve favouring 120-130 BPM.
   It only re-ranks; every lag keeps a positive weight.
4. Pick local maxima, refine by parabolic interpolation, convert to BPM
   and rank best first.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable

import numpy as np
from scipy.signal import find_peaks

from fixedtempo.config import (
    BAR_WEIGHT,
    BEAT_WEIGHT,
    PERCEPTUAL_CENTRE_BPM,
    PERCEPTUAL_WIDTH_OCTAVES,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TempoCandidate:
    """One tempo hypothesis."""

    bpm: float
    score: float
    lag: int  # beat period in frames


def lag_to_bpm(lag, frame_rate: float):
    """Convert a lag in frames (scalar or array) to BPM."""
    return 60.0 * frame_rate / lag


def lag_range(min_bpm: float, max_bpm: float, frame_rate: float) -> tuple[int, int]:
    """
    Inclusive lag bounds whose tempi fall inside [min_bpm, max_bpm].

    The range is empty (min_lag > max_lag) when no whole lag fits.
    """
    min_lag = max(1, int(math.ceil(60.0 * frame_rate / max_bpm)))
    max_lag = int(math.floor(60.0 * frame_rate / min_bpm))
    return min_lag, max_lag


def required_frames(max_lag: int) -> int:
    """Frames needed before lags up to max_lag are estimated reliably."""
    return 2 * (max_lag + 1)


def autocorrelation_length(max_lag: int, beats_per_bar: int, n_frames: int) -> int:
    """
    Largest lag worth computing for the comb filter.

    Covers the bar multiple of the slowest tempo, capped at half the
    sequence so every lag has at least n/2 products behind it.
    """
    wanted = beats_per_bar * (max_lag + 1) + beats_per_bar // 2
    return min(wanted, n_frames // 2)


def comb_filter(acf: np.ndarray, lags: np.ndarray, beats_per_bar: int) -> np.ndarray:
    """
    Beat-plus-bar score for each lag.

    The bar term is the maximum of ``acf`` within ``beats_per_bar // 2``
    lags of ``beats_per_bar * lag``, which absorbs the rounding of a
    fractional beat period. Bar lags past the end of ``acf`` are clamped
    to its last element.
    """
    last = len(acf) - 1
    half = beats_per_bar // 2
    scores = np.empty(len(lags), dtype=np.float64)
    for i, lag in enumerate(lags):
        centre = beats_per_bar * int(lag)
        lo = min(max(centre - half, 0), last)
        hi = min(centre + half, last)
        bar = float(np.max(acf[lo:hi + 1]))
        scores[i] = BEAT_WEIGHT * acf[lag] + BAR_WEIGHT * bar
    return scores


def perceptual_weight(bpm):
    """
    Preference curve over tempo, 1.0 at PERCEPTUAL_CENTRE_BPM.

    Gaussian in log2(tempo) with a standard deviation of
    PERCEPTUAL_WIDTH_OCTAVES; never reaches zero.
    """
    octaves = np.log2(np.asarray(bpm, dtype=np.float64) / PERCEPTUAL_CENTRE_BPM)
    return np.exp(-0.5 * (octaves / PERCEPTUAL_WIDTH_OCTAVES) ** 2)


def _parabolic_offset(left: float, centre: float, right: float) -> float:
    """Sub-lag offset of a peak's vertex, within [-0.5, 0.5]."""
    denom = left - 2.0 * centre + right
    if denom == 0.0:
        return 0.0
    offset = 0.5 * (left - right) / denom
    return float(np.clip(offset, -0.5, 0.5))


def rank_candidates(candidates: Iterable[TempoCandidate]) -> list[TempoCandidate]:
    """Sort best first: descending score, ties to the shorter lag (faster tempo)."""
    return sorted(candidates, key=lambda c: (-c.score, c.lag))


def search_tempo(
    acf: np.ndarray,
    frame_rate: float,
    min_bpm: float,
    max_bpm: float,
    beats_per_bar: int,
) -> list[TempoCandidate]:
    """
    Ranked tempo candidates from a combined autocorrelation.

    Args:
        acf: Combined autocorrelation indexed by lag in frames.
        frame_rate: Analysis frames per second.
        min_bpm: Slowest tempo to consider.
        max_bpm: Fastest tempo to consider.
        beats_per_bar: Bar-length hint for the comb filter.

    Returns:
        Candidates best first; empty when fewer than two lags are in range,
        ``acf`` does not reach the slowest tempo, or there is no peak.
    """
    min_lag, max_lag = lag_range(min_bpm, max_bpm, frame_rate)
    if max_lag - min_lag + 1 < 2:
        logger.debug("Lag range %d-%d holds fewer than two lags", min_lag, max_lag)
        return []
    if max_lag >= len(acf):
        logger.debug("Autocorrelation too short (%d lags) for max lag %d", len(acf), max_lag)
        return []

    # One lag either side so peaks at the range edges are judged fairly
    lo = max(min_lag - 1, 1)
    hi = min(max_lag + 1, len(acf) - 1)
    lags = np.arange(lo, hi + 1)

    scores = comb_filter(acf, lags, beats_per_bar) * perceptual_weight(lag_to_bpm(lags, frame_rate))
    if np.ptp(scores) == 0.0:
        logger.debug("Flat score series, no tempo peak")
        return []

    # Where lo or hi was clamped (lag 1, end of acf) the edge lag has no outer
    # neighbour; pad below the minimum so it can still be a local maximum.
    floor = float(scores.min()) - 1.0
    peaks, _ = find_peaks(np.concatenate(([floor], scores, [floor])))
    peaks -= 1
    last = len(scores) - 1
    candidates = []
    for p in peaks:
        lag = int(lags[p])
        if lag < min_lag or lag > max_lag:
            continue
        if 0 < p < last:
            offset = _parabolic_offset(scores[p - 1], scores[p], scores[p + 1])
        else:
            offset = 0.0
        bpm = float(np.clip(lag_to_bpm(lag + offset, frame_rate), min_bpm, max_bpm))
        candidates.append(TempoCandidate(bpm=bpm, score=float(scores[p]), lag=lag))

    ranked = rank_candidates(candidates)
    if ranked:
        logger.debug(
            "Top candidates: %s",
            ", ".join(f"{c.bpm:.1f} ({c.score:.3f})" for c in ranked[:5]),
        )
    return ranked
