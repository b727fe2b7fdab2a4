"""Time-ordered storage of per-frame features."""

from __future__ import annotations

import numpy as np

from fixedtempo.core.analyzer import FeatureTriple


class FeatureSequences:
    """
    Three parallel feature sequences, one entry per analysed frame.

    Entries are only ever appended as a whole triple, so the three
    sequences always have the same length.
    """

    def __init__(self):
        self._low_freq_diff: list[float] = []
        self._high_freq_magnitude: list[float] = []
        self._rms: list[float] = []

    def __len__(self) -> int:
        return len(self._low_freq_diff)

    def append(self, triple: FeatureTriple) -> None:
        self._low_freq_diff.append(triple.low_freq_diff)
        self._high_freq_magnitude.append(triple.high_freq_magnitude)
        self._rms.append(triple.rms)

    def as_arrays(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Return (low_freq_diff, high_freq_magnitude, rms) as float64 arrays."""
        return (
            np.asarray(self._low_freq_diff, dtype=np.float64),
            np.asarray(self._high_freq_magnitude, dtype=np.float64),
            np.asarray(self._rms, dtype=np.float64),
        )

    def clear(self) -> None:
        self._low_freq_diff.clear()
        self._high_freq_magnitude.clear()
        self._rms.clear()
