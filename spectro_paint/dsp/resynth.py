"""
Masked inverse STFT with weighted overlap-add (WOLA) reconstruction.

Every analysis frame is recomputed from the input signal, multiplied bin-by-bin
by the mask and inverse transformed. The result is windowed a second time and
summed into the output, while the squared window is summed into a parallel
normalization buffer. Dividing by that buffer at the end gives exact
reconstruction for a unit mask wherever the frames cover the signal, whether or
not the window/hop pair is COLA.
"""

from __future__ import annotations


import logging
import math
import time
from typing import Optional


import numpy as np


from spectro_paint.config import NORM_EPSILON
from spectro_paint.dsp.fft import fft_in_place
from spectro_paint.dsp.mask import observed_shape, validate_mask
from spectro_paint.dsp.spectrogram import (
    Spectrogram,
    bin_count,
    frame_count,
    validate_geometry,
)
from spectro_paint.dsp.windows import hann
from spectro_paint.errors import InvalidMaxFreqError, MaskDimensionMismatchError


logger = logging.getLogger(__name__)


def apply_mirrored_gains(re: np.ndarray, im: np.ndarray, gains: np.ndarray) -> None:
    """
    Scale one frame's spectrum in place by per-bin gains, mirrored onto negative frequencies.

    ``gains`` has win_size / 2 + 1 entries covering bins 0..N/2. Bin b and its
    mirror N - b (0 < b < N/2) get the same gain, so a spectrum that was
    conjugate-symmetric stays conjugate-symmetric and its inverse stays real.
    """
    n = re.shape[0]
    half = n // 2
    if gains.shape != (half + 1,):
        raise ValueError(f"Expected {half + 1} gains for a {n}-point frame, got {gains.shape}")

    re[:half + 1] *= gains
    im[:half + 1] *= gains
    if half > 1:
        # gains[half-1], ..., gains[1] line up with bins half+1, ..., n-1
        mirrored = gains[half - 1:0:-1]
        re[half + 1:] *= mirrored
        im[half + 1:] *= mirrored


def resynthesize(
    samples: np.ndarray,
    sample_rate: int,
    mask: np.ndarray,
    win_size: int,
    hop_size: int,
    max_freq_hz: Optional[float] = None,
) -> np.ndarray:
    """
    Rebuild the signal with a time-frequency gain mask applied.

    Parameters
    ----------
    samples : np.ndarray
        The mono signal that was analyzed.
    sample_rate : int
        Sample rate in Hz.
    mask : np.ndarray
        Gains of shape (frames, bins), normally in [0, 1]. Bins at or above
        ``bins`` (the cropped frequency range) are zeroed.
    win_size, hop_size : int
        Same geometry as the analysis.
    max_freq_hz : float, optional
        The analysis frequency ceiling. When given, the mask must have exactly
        the matching bin count; otherwise any bin count up to win_size / 2 is
        accepted.

    Returns
    -------
    y : np.ndarray
        float32 signal with the same length as ``samples``.

    Raises
    ------
    MaskDimensionMismatchError
        If the mask does not match the frame/bin geometry. Nothing is computed.
    """
    x = np.asarray(samples, dtype=np.float32)
    if x.ndim != 1:
        raise ValueError("resynthesize expects mono (1D) audio")

    validate_geometry(sample_rate, win_size, hop_size)
    win_size = int(win_size)
    hop_size = int(hop_size)
    half = win_size // 2

    n_samples = x.shape[0]
    frames = frame_count(n_samples, win_size, hop_size)

    if max_freq_hz is not None:
        nyquist = sample_rate / 2.0
        if not (math.isfinite(max_freq_hz) and 0.0 < max_freq_hz <= nyquist):
            raise InvalidMaxFreqError(f"max_freq_hz must be in (0, {nyquist}], got {max_freq_hz}")
        expected_bins = bin_count(sample_rate, win_size, max_freq_hz)
    else:
        mask_shape = observed_shape(mask)
        if len(mask_shape) == 2 and isinstance(mask_shape[1], int) and mask_shape[1] <= half:
            expected_bins = mask_shape[1]
        else:
            expected_bins = half

    gains_grid = validate_mask(mask, (frames, expected_bins))
    bins = expected_bins

    window = hann(win_size)
    window_sq = window * window

    out = np.zeros(n_samples, dtype=np.float64)
    norm = np.zeros(n_samples, dtype=np.float64)

    re = np.empty(win_size, dtype=np.float64)
    im = np.empty(win_size, dtype=np.float64)
    # Bins past the mask's range carry no gain information and are removed
    gains = np.zeros(half + 1, dtype=np.float64)

    start_time = time.perf_counter()
    for f in range(frames):
        start = f * hop_size
        np.multiply(x[start:start + win_size], window, out=re)
        im.fill(0.0)

        fft_in_place(re, im, inverse=False)
        gains[:bins] = gains_grid[f]
        apply_mirrored_gains(re, im, gains)
        fft_in_place(re, im, inverse=True)

        # Positions past the end of the signal are dropped
        stop = min(start + win_size, n_samples)
        count = stop - start
        out[start:stop] += re[:count] * window[:count]
        norm[start:stop] += window_sq[:count]

    y = np.zeros(n_samples, dtype=np.float64)
    np.divide(out, norm, out=y, where=norm > NORM_EPSILON)

    logger.debug(
        f"Resynthesized {n_samples} samples from {frames} frames x {bins} bins "
        f"(win={win_size}, hop={hop_size}) in {time.perf_counter() - start_time:.3f} s"
    )

    return y.astype(np.float32)


def resynthesize_spectrogram(
    spec: Spectrogram,
    samples: np.ndarray,
    mask: np.ndarray,
) -> np.ndarray:
    """
    Resynthesize using the geometry recorded in ``spec``; the mask must match spec.shape exactly.
    """
    x = np.asarray(samples)
    if x.ndim == 1 and x.shape[0] / float(spec.sample_rate) != spec.duration_sec:
        raise ValueError(
            f"Signal has {x.shape[0]} samples but the spectrogram was computed "
            f"from {spec.duration_sec * spec.sample_rate:.0f}"
        )
    mask_shape = observed_shape(mask)
    if mask_shape != spec.shape:
        raise MaskDimensionMismatchError(spec.shape, mask_shape)
    return resynthesize(
        samples,
        spec.sample_rate,
        mask,
        spec.win_size,
        spec.hop_size,
    )
