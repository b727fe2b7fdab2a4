"""
Autocorrelation of accumulated feature sequences.

Each sequence is mean-removed, autocorrelated (unbiased estimate, lags
0..max_lag) and scaled to unit maximum magnitude. The three results are
summed lag by lag with fixed weights; no alignment between them is
attempted.
"""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np
from scipy import signal as scipy_signal

from fixedtempo.config import HF_WEIGHT, LF_WEIGHT, RMS_WEIGHT

logger = logging.getLogger(__name__)

# Relative size below which a mean-removed sequence counts as constant
_DEGENERATE_TOLERANCE = 1e-9

FEATURE_WEIGHTS = (LF_WEIGHT, HF_WEIGHT, RMS_WEIGHT)


def autocorrelate(sequence: np.ndarray, max_lag: int) -> np.ndarray:
    """
    Normalized unbiased autocorrelation for lags 0..max_lag.

    Args:
        sequence: 1-D feature sequence.
        max_lag: Largest lag to return. Must be below len(sequence).

    Returns:
        Array of length max_lag + 1 with maximum magnitude 1, or all zeros
        if the sequence is empty, silent or constant.
    """
    x = np.asarray(sequence, dtype=np.float64)
    n = len(x)
    if max_lag >= n:
        raise ValueError(f"max_lag ({max_lag}) must be below the sequence length ({n})")

    out = np.zeros(max_lag + 1, dtype=np.float64)
    scale = float(np.max(np.abs(x))) if n else 0.0
    if scale == 0.0:
        return out

    centred = x - np.mean(x)
    if np.max(np.abs(centred)) <= _DEGENERATE_TOLERANCE * scale:
        return out

    full = scipy_signal.correlate(centred, centred, mode="full", method="fft")
    acf = full[n - 1:n + max_lag]
    acf = acf / (n - np.arange(max_lag + 1))

    peak = float(np.max(np.abs(acf)))
    if peak <= 0.0:
        return out
    return acf / peak


def combined_autocorrelation(
    sequences: Sequence[np.ndarray],
    max_lag: int,
    weights: Sequence[float] = FEATURE_WEIGHTS,
) -> np.ndarray:
    """
    Weighted lag-by-lag sum of the normalized autocorrelations.

    Args:
        sequences: Feature sequences of equal length, in the same order
            as ``weights`` (low-frequency flux first).
        max_lag: Largest lag to compute.
        weights: One weight per sequence.

    Returns:
        Combined autocorrelation of length max_lag + 1.
    """
    if len(sequences) != len(weights):
        raise ValueError(f"Expected {len(weights)} sequences, got {len(sequences)}")

    combined = np.zeros(max_lag + 1, dtype=np.float64)
    for seq, weight in zip(sequences, weights):
        acf = autocorrelate(seq, max_lag)
        if not np.any(acf):
            logger.debug("Feature with weight %.2f is degenerate; contributes nothing", weight)
            continue
        combined += weight * acf
    return combined
