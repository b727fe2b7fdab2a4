"""
Command-line tempo estimation.

Usage:
    fixedtempo song.wav [-o report.json] [--min-bpm 55] [--max-bpm 190]
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from fixedtempo.config import DEFAULT_BEATS_PER_BAR, DEFAULT_MAX_BPM, DEFAULT_MIN_BPM
from fixedtempo.core.stream import TempoEstimator
from fixedtempo.errors import FixedTempoError
from fixedtempo.io.exporter import ResultExporter
from fixedtempo.io.loader import AudioLoader

logger = logging.getLogger(__name__)


def estimate_file(
    audio_path: Path,
    min_bpm: float = DEFAULT_MIN_BPM,
    max_bpm: float = DEFAULT_MAX_BPM,
    beats_per_bar: int = DEFAULT_BEATS_PER_BAR,
    sr: Optional[int] = None,
    block_seconds: float = 10.0,
) -> TempoEstimator:
    """
    Run a tempo estimate over an audio file.

    The file is streamed block by block at its native rate; when ``sr``
    is given it is instead loaded whole, resampled and analysed in one shot.

    Returns:
        The estimator, holding the result and candidates.
    """
    loader = AudioLoader(block_seconds=block_seconds)

    if sr is not None:
        y, sr_out = loader.load(audio_path, sr=sr)
        estimator = _configured(sr_out, min_bpm, max_bpm, beats_per_bar)
        estimator.estimate_tempo_of_samples(y)
        return estimator

    estimator = _configured(loader.sample_rate(audio_path), min_bpm, max_bpm, beats_per_bar)
    for block in loader.stream(audio_path):
        estimator.process(block)
    estimator.estimate_tempo()
    return estimator


def _configured(sample_rate, min_bpm, max_bpm, beats_per_bar) -> TempoEstimator:
    estimator = TempoEstimator(sample_rate)
    estimator.set_tempo_range(min_bpm, max_bpm)
    estimator.set_beats_per_bar(beats_per_bar)
    return estimator


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fixedtempo",
        description="Estimate the fixed tempo (BPM) of an audio file",
    )

    parser.add_argument(
        "audio",
        type=Path,
        help="Input audio file (wav, flac, ogg)",
    )

    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Write a JSON report to this path instead of printing",
    )

    parser.add_argument(
        "--min-bpm",
        type=float,
        default=DEFAULT_MIN_BPM,
        help=f"Slowest tempo to consider (default: {DEFAULT_MIN_BPM:g})",
    )

    parser.add_argument(
        "--max-bpm",
        type=float,
        default=DEFAULT_MAX_BPM,
        help=f"Fastest tempo to consider (default: {DEFAULT_MAX_BPM:g})",
    )

    parser.add_argument(
        "-b", "--beats-per-bar",
        type=int,
        default=DEFAULT_BEATS_PER_BAR,
        help=f"Beats per bar hint (default: {DEFAULT_BEATS_PER_BAR})",
    )

    parser.add_argument(
        "--sr",
        type=int,
        default=None,
        help="Resample to this rate and analyse in one pass (default: stream at native rate)",
    )

    parser.add_argument(
        "--block-seconds",
        type=float,
        default=10.0,
        help="Streaming block duration in seconds (default: 10)",
    )

    parser.add_argument(
        "-n", "--candidates",
        type=int,
        default=5,
        help="Number of candidates to show (default: 5)",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log analysis details",
    )

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.candidates < 0:
        parser.error(f"--candidates must be non-negative, got {args.candidates}")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.audio.exists():
        print(f"Error: Audio file not found: {args.audio}", file=sys.stderr)
        return 1

    try:
        estimator = estimate_file(
            args.audio,
            min_bpm=args.min_bpm,
            max_bpm=args.max_bpm,
            beats_per_bar=args.beats_per_bar,
            sr=args.sr,
            block_seconds=args.block_seconds,
        )
    except (FixedTempoError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    exporter = ResultExporter()
    report = exporter.build_report(
        estimator,
        source=args.audio,
        max_candidates=args.candidates,
    )

    if args.output is not None:
        path = exporter.export_json(report, args.output)
        print(f"Wrote {path}")
        return 0

    if report["tempo"] == 0.0:
        print("Tempo: undetermined (clip too short or no periodicity found)")
        return 0

    print(f"Tempo: {report['tempo']:.2f} BPM")
    for rank, cand in enumerate(report["candidates"], start=1):
        print(f"  #{rank}: {cand['bpm']:.2f} BPM  score={cand['score']:.4f}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
