"""
Exception types raised by spectro_paint.

Every error derives from ValueError, so existing ``except ValueError`` handlers
keep catching bad parameters. None of these are retried internally: each call is
a deterministic function of its inputs.
"""

from __future__ import annotations


class SpectroPaintError(ValueError):
    """Base class for all spectro_paint errors."""


class InvalidWinSizeError(SpectroPaintError):
    """Window size is not a power of two (or is smaller than 2)."""


class InvalidHopError(SpectroPaintError):
    """Hop size is outside (0, win_size]."""


class InvalidMaxFreqError(SpectroPaintError):
    """Frequency ceiling is outside (0, sample_rate / 2]."""


class InvalidDbRangeError(SpectroPaintError):
    """Dynamic range is not strictly positive."""


class InvalidSampleRateError(SpectroPaintError):
    """Sample rate is not a positive integer."""


class MaskDimensionMismatchError(SpectroPaintError):
    """Mask shape does not match the (frames, bins) geometry of the signal."""

    def __init__(self, expected: tuple, actual: tuple) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Mask has shape {actual}, expected {expected}")


class MaskValueError(SpectroPaintError):
    """Mask contains NaN or infinite gains."""
