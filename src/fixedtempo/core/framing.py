"""
Frame segmentation for streamed audio.

Slices a running sample stream into fixed-length overlapping frames.
Blocks handed to :meth:`FrameSegmenter.push` are treated as one contiguous
stream, so a frame may straddle two calls and the frames produced never
depend on how the stream was chunked.
"""

from __future__ import annotations

from typing import Iterator

import numpy as np


class FrameSegmenter:
    """
    Turns contiguous sample blocks into overlapping analysis frames.

    Parameters
    ----------
    frame_length:
        Samples per frame.
    hop_length:
        Samples between the starts of consecutive frames (< frame_length).
    """

    def __init__(self, frame_length: int, hop_length: int):
        if hop_length <= 0 or hop_length > frame_length:
            raise ValueError(
                f"hop_length must be in (0, {frame_length}], got {hop_length}"
            )
        self.frame_length = frame_length
        self.hop_length = hop_length

        self._buffer: np.ndarray = np.zeros(frame_length, dtype=np.float64)
        self._fill: int = 0

    @property
    def pending(self) -> int:
        """Samples buffered towards the next frame."""
        return self._fill

    def push(self, block: np.ndarray) -> Iterator[np.ndarray]:
        """
        Consume a block of samples and yield each frame it completes.

        Yielded frames are copies and may be kept by the caller.
        """
        block = np.asarray(block, dtype=np.float64)
        n = len(block)
        pos = 0

        while pos < n:
            wanted = self.frame_length - self._fill
            take = min(wanted, n - pos)
            self._buffer[self._fill:self._fill + take] = block[pos:pos + take]
            self._fill += take
            pos += take

            if self._fill < self.frame_length:
                break

            yield self._buffer.copy()

            # Slide the overlap to the front
            keep = self.frame_length - self.hop_length
            self._buffer[:keep] = self._buffer[self.hop_length:]
            self._fill = keep

    def reset(self) -> None:
        """Drop any partially filled frame."""
        self._buffer[:] = 0.0
        self._fill = 0
