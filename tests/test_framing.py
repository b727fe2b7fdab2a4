"""Tests for FrameSegmenter and FeatureSequences."""

import numpy as np
import pytest

from fixedtempo.core.accumulator import FeatureSequences
from fixedtempo.core.analyzer import FeatureTriple
from fixedtempo.core.framing import FrameSegmenter


def _frames(segmenter, blocks):
    out = []
    for block in blocks:
        out.extend(segmenter.push(block))
    return out


# ---------------------------------------------------------------------------
# FrameSegmenter
# ---------------------------------------------------------------------------

class TestFrameSegmenter:
    def test_frame_count(self):
        seg = FrameSegmenter(frame_length=8, hop_length=4)
        frames = _frames(seg, [np.arange(30, dtype=float)])
        # Frames start at 0, 4, ..., 20 (the last one ends at 28)
        assert len(frames) == 1 + (30 - 8) // 4
        assert seg.pending == 8 - 4 + (30 - 8) % 4

    def test_frames_overlap_by_hop(self):
        seg = FrameSegmenter(frame_length=8, hop_length=4)
        frames = _frames(seg, [np.arange(16, dtype=float)])
        np.testing.assert_array_equal(frames[0], np.arange(0, 8))
        np.testing.assert_array_equal(frames[1], np.arange(4, 12))
        np.testing.assert_array_equal(frames[2], np.arange(8, 16))

    def test_short_input_yields_nothing(self):
        seg = FrameSegmenter(frame_length=8, hop_length=4)
        assert _frames(seg, [np.ones(7)]) == []
        assert seg.pending == 7

    def test_empty_block(self):
        seg = FrameSegmenter(frame_length=8, hop_length=4)
        assert _frames(seg, [np.array([])]) == []
        assert seg.pending == 0

    @pytest.mark.parametrize("sizes", [
        [1] * 50,
        [3, 7, 11, 29],
        [8, 0, 8, 0, 34],
        [49, 1],
    ])
    def test_chunking_does_not_change_frames(self, sizes):
        signal = np.random.default_rng(0).standard_normal(sum(sizes))
        whole = _frames(FrameSegmenter(12, 6), [signal])

        blocks = np.split(signal, np.cumsum(sizes)[:-1])
        chunked = _frames(FrameSegmenter(12, 6), blocks)

        assert len(chunked) == len(whole)
        for a, b in zip(whole, chunked):
            np.testing.assert_array_equal(a, b)

    def test_yielded_frames_are_independent_copies(self):
        seg = FrameSegmenter(frame_length=4, hop_length=2)
        frames = _frames(seg, [np.arange(8, dtype=float)])
        np.testing.assert_array_equal(frames[0], [0, 1, 2, 3])

    def test_reset_drops_partial_frame(self):
        seg = FrameSegmenter(frame_length=8, hop_length=4)
        _frames(seg, [np.ones(5)])
        seg.reset()
        assert seg.pending == 0
        frames = _frames(seg, [np.arange(8, dtype=float)])
        np.testing.assert_array_equal(frames[0], np.arange(8))

    def test_invalid_hop(self):
        with pytest.raises(ValueError):
            FrameSegmenter(frame_length=8, hop_length=0)
        with pytest.raises(ValueError):
            FrameSegmenter(frame_length=8, hop_length=9)


# ---------------------------------------------------------------------------
# FeatureSequences
# ---------------------------------------------------------------------------

class TestFeatureSequences:
    def test_append_keeps_lengths_equal(self):
        seqs = FeatureSequences()
        for i in range(5):
            seqs.append(FeatureTriple(float(i), 2.0 * i, 3.0 * i))
        lf, hf, rms = seqs.as_arrays()
        assert len(seqs) == len(lf) == len(hf) == len(rms) == 5
        np.testing.assert_array_equal(hf, 2.0 * np.arange(5))

    def test_clear(self):
        seqs = FeatureSequences()
        seqs.append(FeatureTriple(1.0, 1.0, 1.0))
        seqs.clear()
        assert len(seqs) == 0
        assert all(len(a) == 0 for a in seqs.as_arrays())
