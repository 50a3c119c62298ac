"""
Log-magnitude STFT analysis.

The input signal is cut into overlapping frames of ``win_size`` samples spaced
``hop_size`` apart. Frames that would run past the end of the signal are not
computed, so a signal shorter than one window yields a valid zero-frame
spectrogram. Each frame is Hann-windowed, transformed with the in-place FFT,
cropped to the bins below ``max_freq_hz`` and converted to dB::

    db = 20 * log10(|X[b]| / win_size + 1e-12)

The same geometry helpers are used by resynthesis and mask sizing, so a mask
built from a Spectrogram always lines up with the frames resynthesis walks.
"""

from __future__ import annotations


from dataclasses import dataclass
import logging
import math
import time
from typing import Tuple


import numpy as np


from spectro_paint.config import (
    DB_EPSILON,
    DEFAULT_DB_RANGE,
    DEFAULT_HOP_SIZE,
    DEFAULT_MAX_FREQ_HZ,
    DEFAULT_WIN_SIZE,
)
from spectro_paint.dsp.fft import fft_in_place, is_power_of_two
from spectro_paint.dsp.windows import hann
from spectro_paint.errors import (
    InvalidDbRangeError,
    InvalidHopError,
    InvalidMaxFreqError,
    InvalidSampleRateError,
    InvalidWinSizeError,
)


logger = logging.getLogger(__name__)


def validate_geometry(sample_rate: int, win_size: int, hop_size: int) -> None:
    """
    Reject sample rate / window / hop combinations before any work is done.
    """
    if int(sample_rate) != sample_rate or sample_rate <= 0:
        raise InvalidSampleRateError(f"Sample rate must be a positive integer, got {sample_rate}")
    if int(win_size) != win_size or win_size < 2 or not is_power_of_two(int(win_size)):
        raise InvalidWinSizeError(f"Window size must be a power of two >= 2, got {win_size}")
    if int(hop_size) != hop_size or not 0 < hop_size <= win_size:
        raise InvalidHopError(f"Hop size must be an integer in (0, {win_size}], got {hop_size}")


def validate_transform_params(
    sample_rate: int,
    win_size: int,
    hop_size: int,
    max_freq_hz: float,
    db_range_db: float,
) -> None:
    """
    Full parameter check for analysis: geometry plus frequency ceiling and dB range.
    """
    validate_geometry(sample_rate, win_size, hop_size)
    nyquist = sample_rate / 2.0
    if not (math.isfinite(max_freq_hz) and 0.0 < max_freq_hz <= nyquist):
        raise InvalidMaxFreqError(f"max_freq_hz must be in (0, {nyquist}], got {max_freq_hz}")
    if not (math.isfinite(db_range_db) and db_range_db > 0.0):
        raise InvalidDbRangeError(f"db_range_db must be > 0, got {db_range_db}")


def frame_count(n_samples: int, win_size: int, hop_size: int) -> int:
    """Number of whole frames that fit in n_samples (0 if the signal is shorter than a window)."""
    if n_samples < win_size:
        return 0
    return (n_samples - win_size) // hop_size + 1


def bin_count(sample_rate: int, win_size: int, max_freq_hz: float) -> int:
    """Number of retained bins below the frequency ceiling, at most win_size / 2."""
    half = win_size // 2
    nyquist = sample_rate / 2.0
    return min(half, int(math.floor(max_freq_hz / nyquist * half)))


@dataclass(frozen=True, eq=False)
class Spectrogram:
    """
    Result of one analysis call.

    ``data`` holds dB values with shape (frames, bins) and is read-only.
    ``floor_db`` is ``max_db - db_range`` and is only meant for display
    normalization; values below it are kept as computed.
    """
    data: np.ndarray
    frames: int
    bins: int
    win_size: int
    hop_size: int
    sample_rate: int
    duration_sec: float
    max_db: float
    floor_db: float

    @property
    def shape(self) -> Tuple[int, int]:
        return self.frames, self.bins

    @property
    def db_range(self) -> float:
        return self.max_db - self.floor_db

    def db_at(self, frame: int, bin_index: int) -> float:
        return float(self.data[frame, bin_index])

    def frame_time_sec(self, frame: int) -> float:
        """Start time of a frame in seconds."""
        return frame * self.hop_size / float(self.sample_rate)

    def bin_freq_hz(self, bin_index: int) -> float:
        return bin_index * self.sample_rate / float(self.win_size)

    def frame_times(self) -> np.ndarray:
        return np.arange(self.frames, dtype=np.float64) * self.hop_size / float(self.sample_rate)

    def bin_freqs(self) -> np.ndarray:
        return np.arange(self.bins, dtype=np.float64) * self.sample_rate / float(self.win_size)

    def normalized(self) -> np.ndarray:
        """
        Map dB values onto [0, 1] between floor_db and max_db, clipping outside.

        This is the value a color ramp consumes.
        """
        if self.data.size == 0:
            return np.zeros(self.data.shape, dtype=np.float64)
        t = (self.data - self.floor_db) / (self.max_db - self.floor_db)
        return np.clip(t, 0.0, 1.0)


def analyze(
    samples: np.ndarray,
    sample_rate: int,
    win_size: int = DEFAULT_WIN_SIZE,
    hop_size: int = DEFAULT_HOP_SIZE,
    max_freq_hz: float = DEFAULT_MAX_FREQ_HZ,
    db_range_db: float = DEFAULT_DB_RANGE,
) -> Spectrogram:
    """
    Compute a cropped log-magnitude spectrogram of a mono signal.

    Parameters
    ----------
    samples : np.ndarray
        Mono (1D) audio signal.
    sample_rate : int
        Sample rate in Hz.
    win_size : int
        FFT/window length, a power of two.
    hop_size : int
        Frame advance in samples, in (0, win_size].
    max_freq_hz : float
        Frequency ceiling in (0, sample_rate / 2]; higher bins are dropped.
    db_range_db : float
        Dynamic range used to derive floor_db.

    Returns
    -------
    spec : Spectrogram

    Raises
    ------
    InvalidWinSizeError, InvalidHopError, InvalidMaxFreqError,
    InvalidDbRangeError, InvalidSampleRateError
        On bad parameters, before any frame is computed.
    """
    x = np.asarray(samples, dtype=np.float32)
    if x.ndim != 1:
        raise ValueError("analyze expects mono (1D) audio")

    validate_transform_params(sample_rate, win_size, hop_size, max_freq_hz, db_range_db)
    sample_rate = int(sample_rate)
    win_size = int(win_size)
    hop_size = int(hop_size)

    n_samples = x.shape[0]
    frames = frame_count(n_samples, win_size, hop_size)
    bins = bin_count(sample_rate, win_size, max_freq_hz)

    window = hann(win_size)
    data = np.empty((frames, bins), dtype=np.float64)

    # Scratch buffers reused for every frame
    re = np.empty(win_size, dtype=np.float64)
    im = np.empty(win_size, dtype=np.float64)

    max_db = float("-inf")
    start_time = time.perf_counter()
    for f in range(frames):
        start = f * hop_size
        np.multiply(x[start:start + win_size], window, out=re)
        im.fill(0.0)

        fft_in_place(re, im, inverse=False)

        row = data[f]
        np.hypot(re[:bins], im[:bins], out=row)
        row /= win_size
        row += DB_EPSILON
        np.log10(row, out=row)
        row *= 20.0

        if bins > 0:
            frame_max = float(row.max())
            if frame_max > max_db:
                max_db = frame_max

    data.flags.writeable = False
    floor_db = max_db - db_range_db

    logger.debug(
        f"Analyzed {n_samples} samples @ {sample_rate} Hz: {frames} frames x {bins} bins "
        f"(win={win_size}, hop={hop_size}) in {time.perf_counter() - start_time:.3f} s"
    )

    return Spectrogram(
        data=data,
        frames=frames,
        bins=bins,
        win_size=win_size,
        hop_size=hop_size,
        sample_rate=sample_rate,
        duration_sec=n_samples / float(sample_rate),
        max_db=max_db,
        floor_db=floor_db,
    )
