"""Fixed-tempo BPM estimation for mono audio."""

from fixedtempo.config import EstimatorConfig
from fixedtempo.core.search import TempoCandidate
from fixedtempo.core.stream import TempoEstimator
from fixedtempo.errors import ConfigurationError, FixedTempoError, UsageError
from fixedtempo.io.exporter import ResultExporter
from fixedtempo.io.loader import AudioLoader

__version__ = "0.1.0"
__all__ = [
    "TempoEstimator",
    "TempoCandidate",
    "EstimatorConfig",
    "ResultExporter",
    "AudioLoader",
    "FixedTempoError",
    "ConfigurationError",
    "UsageError",
]
