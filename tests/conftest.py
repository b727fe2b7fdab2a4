"""Shared fixtures: synthetic click tracks and silence."""

import numpy as np
import pytest

TEST_SR = 22050


def make_click_track(
    bpm: float,
    sr: int = TEST_SR,
    bars: int = 16,
    beats_per_bar: int = 4,
    tail_seconds: float = 1.0,
) -> np.ndarray:
    """
    Evenly spaced kick-like clicks at exactly ``bpm``.

    Each click is a 100 Hz decaying sine with a short noise burst on top,
    so it has energy in both the low band and around 9 kHz.
    """
    period = sr * 60.0 / bpm
    n_beats = bars * beats_per_bar
    total = int(np.ceil(n_beats * period)) + int(tail_seconds * sr)
    y = np.zeros(total, dtype=np.float32)

    t = np.arange(int(0.08 * sr)) / sr
    rng = np.random.default_rng(1234)
    kick = np.sin(2 * np.pi * 100.0 * t) * np.exp(-t / 0.03)
    noise = rng.uniform(-1.0, 1.0, len(t)) * np.exp(-t / 0.005)
    click = (0.8 * kick + 0.3 * noise).astype(np.float32)

    for beat in range(n_beats):
        start = int(round(beat * period))
        end = min(start + len(click), total)
        y[start:end] += click[: end - start]
    return y


@pytest.fixture
def click_track_120():
    """16 bars of 4/4 at 120 BPM."""
    return make_click_track(120.0), TEST_SR


@pytest.fixture
def click_track_60():
    """10 bars of 4/4 at 60 BPM."""
    return make_click_track(60.0, bars=10), TEST_SR


@pytest.fixture
def silence():
    """Ten seconds of digital silence."""
    return np.zeros(10 * TEST_SR, dtype=np.float32), TEST_SR
