"""
Result serialization module.

Exports a tempo estimate and its ranked candidates to a JSON report
for downstream consumers.
"""

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Optional, Union

import numpy as np

from fixedtempo.core.stream import TempoEstimator


@dataclass
class ReportMetadata:
    """Metadata header for the tempo report."""

    sample_rate: float
    frame_length: int
    hop_length: int
    n_frames: int
    duration: float
    min_bpm: float
    max_bpm: float
    beats_per_bar: int
    source: Optional[str] = None
    schema_version: str = "1.0"


class ResultExporter:
    """
    Exports an estimator's last result to a JSON-ready report.

    The report holds a metadata block, the best tempo (0.0 when it could
    not be determined) and the candidate list, best first.
    """

    def __init__(self, precision: int = 4):
        """
        Initialize the exporter.

        Args:
            precision: Decimal places for floating point values.
        """
        self.precision = precision

    def _round(self, value: float) -> float:
        """Round to configured precision."""
        f = float(value)
        if np.isnan(f) or np.isinf(f):
            return 0.0
        return round(f, self.precision)

    def build_metadata(
        self,
        estimator: TempoEstimator,
        source: Optional[Union[str, Path]] = None,
    ) -> ReportMetadata:
        """Describe the analysis setup and how much audio was seen."""
        # Frames start every hop, the last one ends a frame length later
        n_frames = estimator.n_frames
        if n_frames:
            samples = (n_frames - 1) * estimator.hop_length + estimator.frame_length
        else:
            samples = 0
        min_bpm, max_bpm = estimator.get_tempo_range()

        return ReportMetadata(
            sample_rate=self._round(estimator.sample_rate),
            frame_length=estimator.frame_length,
            hop_length=estimator.hop_length,
            n_frames=n_frames,
            duration=self._round(samples / estimator.sample_rate),
            min_bpm=self._round(min_bpm),
            max_bpm=self._round(max_bpm),
            beats_per_bar=estimator.get_beats_per_bar(),
            source=str(source) if source is not None else None,
        )

    def build_report(
        self,
        estimator: TempoEstimator,
        source: Optional[Union[str, Path]] = None,
        max_candidates: Optional[int] = None,
    ) -> dict[str, Any]:
        """
        Build the complete report for the estimator's last estimate.

        Args:
            estimator: Estimator on which an estimate has been run.
            source: Optional name of the analysed file.
            max_candidates: Keep only this many candidates (default: all).
                Does not affect the reported tempo.

        Returns:
            Dictionary ready for JSON serialization.

        Raises:
            ValueError: If max_candidates is negative.
        """
        if max_candidates is not None and max_candidates < 0:
            raise ValueError(f"max_candidates must be non-negative, got {max_candidates}")

        candidates = estimator.candidates
        tempo = self._round(candidates[0].bpm) if candidates else 0.0
        if max_candidates is not None:
            candidates = candidates[:max_candidates]

        return {
            "metadata": asdict(self.build_metadata(estimator, source)),
            "tempo": tempo,
            "candidates": [
                {"bpm": self._round(c.bpm), "score": self._round(c.score)}
                for c in candidates
            ],
        }

    def to_json(self, report: dict[str, Any], indent: int = 2) -> str:
        return json.dumps(report, indent=indent)

    def export_json(
        self,
        report: dict[str, Any],
        output_path: Union[str, Path],
        indent: int = 2,
    ) -> Path:
        """
        Write a report to a JSON file.

        Args:
            report: Report from :meth:`build_report`.
            output_path: Path for output JSON file.
            indent: JSON indentation level.

        Returns:
            Path to written file.
        """
        output_path = Path(output_path)

        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=indent)

        return output_path
