"""
Spectro Paint: STFT analysis and masked resynthesis of mono audio.
"""

from spectro_paint.dsp.spectrogram import Spectrogram, analyze
from spectro_paint.dsp.resynth import resynthesize, resynthesize_spectrogram
from spectro_paint.errors import (
    SpectroPaintError,
    InvalidWinSizeError,
    InvalidHopError,
    InvalidMaxFreqError,
    InvalidDbRangeError,
    InvalidSampleRateError,
    MaskDimensionMismatchError,
    MaskValueError,
)

__version__ = "0.1.0"

__all__ = [
    "Spectrogram",
    "analyze",
    "resynthesize",
    "resynthesize_spectrogram",
    "SpectroPaintError",
    "InvalidWinSizeError",
    "InvalidHopError",
    "InvalidMaxFreqError",
    "InvalidDbRangeError",
    "InvalidSampleRateError",
    "MaskDimensionMismatchError",
    "MaskValueError",
]
