"""Tests for audio loading and JSON report export."""

import json

import numpy as np
import pytest
import soundfile as sf

from conftest import TEST_SR, make_click_track
from fixedtempo import AudioLoader, ResultExporter, TempoEstimator


@pytest.fixture
def wav_120(tmp_path):
    path = tmp_path / "click_120.wav"
    sf.write(path, make_click_track(120.0, bars=12), TEST_SR, subtype="FLOAT")
    return path


@pytest.fixture
def estimated(click_track_120):
    y, sr = click_track_120
    est = TempoEstimator(sr)
    est.estimate_tempo_of_samples(y)
    return est


# ---------------------------------------------------------------------------
# AudioLoader
# ---------------------------------------------------------------------------

class TestAudioLoader:
    def test_load_mono(self, wav_120):
        y, sr = AudioLoader().load(wav_120)
        assert sr == TEST_SR
        assert y.ndim == 1

    def test_stereo_is_downmixed(self, tmp_path):
        y = make_click_track(120.0, bars=2)
        path = tmp_path / "stereo.wav"
        sf.write(path, np.stack([y, 0.5 * y], axis=1), TEST_SR, subtype="FLOAT")
        mono, _ = AudioLoader().load(path)
        assert mono.ndim == 1
        np.testing.assert_allclose(mono, 0.75 * y, atol=1e-6)

    def test_stream_blocks_concatenate_to_whole_file(self, wav_120):
        loader = AudioLoader(block_seconds=1.5)
        blocks = list(loader.stream(wav_120))
        assert len(blocks) > 1
        whole, _ = loader.load(wav_120)
        np.testing.assert_allclose(np.concatenate(blocks), whole, atol=1e-6)

    def test_invalid_block_seconds(self):
        with pytest.raises(ValueError):
            AudioLoader(block_seconds=0)


# ---------------------------------------------------------------------------
# ResultExporter
# ---------------------------------------------------------------------------

class TestResultExporter:
    def test_report_structure(self, estimated):
        report = ResultExporter().build_report(estimated, source="click.wav")
        assert set(report) == {"metadata", "tempo", "candidates"}
        meta = report["metadata"]
        assert meta["schema_version"] == "1.0"
        assert meta["source"] == "click.wav"
        assert meta["n_frames"] == estimated.n_frames
        assert meta["beats_per_bar"] == 4
        assert (meta["min_bpm"], meta["max_bpm"]) == (55.0, 190.0)
        assert meta["duration"] > 30.0

    def test_tempo_is_first_candidate(self, estimated):
        report = ResultExporter(precision=3).build_report(estimated)
        assert report["tempo"] == round(estimated.estimate_tempo(), 3)
        assert report["tempo"] == report["candidates"][0]["bpm"]

    def test_max_candidates(self, estimated):
        report = ResultExporter().build_report(estimated, max_candidates=2)
        assert len(report["candidates"]) == min(2, len(estimated.candidates))

    def test_zero_candidates_keeps_tempo(self, estimated):
        report = ResultExporter().build_report(estimated, max_candidates=0)
        assert report["candidates"] == []
        assert report["tempo"] == pytest.approx(estimated.candidates[0].bpm, abs=1e-3)
        assert report["tempo"] == pytest.approx(120.0, abs=2.0)

    def test_negative_max_candidates(self, estimated):
        with pytest.raises(ValueError):
            ResultExporter().build_report(estimated, max_candidates=-1)

    def test_undetermined_tempo(self):
        est = TempoEstimator(TEST_SR)
        est.estimate_tempo()
        report = ResultExporter().build_report(est)
        assert report["tempo"] == 0.0
        assert report["candidates"] == []
        assert report["metadata"]["duration"] == 0.0

    def test_json_round_trip(self, estimated, tmp_path):
        exporter = ResultExporter()
        report = exporter.build_report(estimated)
        assert json.loads(exporter.to_json(report)) == report

        path = exporter.export_json(report, tmp_path / "report.json")
        with open(path, encoding="utf-8") as f:
            assert json.load(f) == report
