"""
Audio file loading.

Reads audio files as mono signals, either whole or as a stream of
contiguous blocks for incremental analysis of long files.
"""

import logging
from pathlib import Path
from typing import Iterator, Union

import librosa
import numpy as np

logger = logging.getLogger(__name__)


class AudioLoader:
    """
    Loads audio files as mono float32 signals.

    Multi-channel files are downmixed by averaging the channels, which is
    the input the tempo estimator expects.
    """

    def __init__(self, block_seconds: float = 10.0):
        """
        Initialize the loader.

        Args:
            block_seconds: Approximate duration of each streamed block.
        """
        if block_seconds <= 0:
            raise ValueError(f"block_seconds must be positive, got {block_seconds}")
        self.block_seconds = block_seconds

    def load(
        self,
        audio_path: Union[str, Path],
        sr: int | None = None,
    ) -> tuple[np.ndarray, int]:
        """
        Load a whole file.

        Args:
            audio_path: Path to audio file (wav, mp3, flac).
            sr: Target sample rate. None preserves original.

        Returns:
            Tuple of (audio_signal, sample_rate).
        """
        y, sr_out = librosa.load(audio_path, sr=sr, mono=True)
        logger.debug("Loaded %s: %d samples at %d Hz", audio_path, len(y), sr_out)
        return y, int(sr_out)

    def sample_rate(self, audio_path: Union[str, Path]) -> int:
        """Native sample rate of a file."""
        return int(librosa.get_samplerate(str(audio_path)))

    def stream(self, audio_path: Union[str, Path]) -> Iterator[np.ndarray]:
        """
        Yield contiguous mono blocks of a file at its native sample rate.

        Blocks do not overlap, so feeding them in order to
        ``TempoEstimator.process`` is equivalent to processing the whole
        file at once.
        """
        sr = self.sample_rate(audio_path)
        frame = 2048
        block_frames = max(1, int(round(self.block_seconds * sr / frame)))

        blocks = librosa.stream(
            str(audio_path),
            block_length=block_frames,
            frame_length=frame,
            hop_length=frame,
            mono=True,
            fill_value=None,
        )
        for index, block in enumerate(blocks):
            logger.debug("Block %d: %d samples", index, len(block))
            yield block
