"""Audio loading and result serialization."""

from fixedtempo.io.exporter import ResultExporter
from fixedtempo.io.loader import AudioLoader

__all__ = ["AudioLoader", "ResultExporter"]
