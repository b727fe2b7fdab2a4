"""
Exception types raised by the tempo estimator.

Too little audio to estimate a tempo is not an error: the estimator
returns 0 and an empty candidate list instead.
"""


class FixedTempoError(Exception):
    """Base class for all fixedtempo errors."""


class ConfigurationError(FixedTempoError, ValueError):
    """An invalid sample rate, tempo range or beats-per-bar value."""


class UsageError(FixedTempoError, RuntimeError):
    """
    The estimator was driven in an unsupported order.

    Raised when the streaming entry point (``process``) and the one-shot
    entry point (``estimate_tempo_of_samples``) are mixed on the same
    accumulated state without a ``reset()`` in between.
    """
