"""Core tempo estimation pipeline."""

from fixedtempo.core.analyzer import FeatureExtractor, FeatureTriple, FourierFilterbank
from fixedtempo.core.accumulator import FeatureSequences
from fixedtempo.core.framing import FrameSegmenter
from fixedtempo.core.search import TempoCandidate
from fixedtempo.core.stream import TempoEstimator

__all__ = [
    "FeatureExtractor",
    "FeatureTriple",
    "FourierFilterbank",
    "FeatureSequences",
    "FrameSegmenter",
    "TempoCandidate",
    "TempoEstimator",
]
