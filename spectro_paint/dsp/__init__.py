"""
Digital Signal Processing module for Spectro Paint.
"""

from spectro_paint.dsp.fft import fft_in_place, bit_reverse_permute
from spectro_paint.dsp.windows import hann
from spectro_paint.dsp.spectrogram import Spectrogram, analyze, frame_count, bin_count
from spectro_paint.dsp.mask import new_mask, band_mask, paint_cell, paint_line, validate_mask
from spectro_paint.dsp.resynth import apply_mirrored_gains, resynthesize, resynthesize_spectrogram

__all__ = [
    "fft_in_place",
    "bit_reverse_permute",
    "hann",
    "Spectrogram",
    "analyze",
    "frame_count",
    "bin_count",
    "new_mask",
    "band_mask",
    "paint_cell",
    "paint_line",
    "validate_mask",
    "apply_mirrored_gains",
    "resynthesize",
    "resynthesize_spectrogram",
]
