"""
Time-frequency gain masks paired with a Spectrogram.

A mask is a plain float32 array of shape (frames, bins): row f holds the gain
applied to bins [0, bins) of frame f during resynthesis. Gains are expected in
[0, 1] (0 removes a cell, 1 keeps it). Editing helpers work in grid cells or in
seconds / Hz and never resize the grid.
"""

from __future__ import annotations


import logging
from typing import Any, Optional, Tuple


import numpy as np


from spectro_paint.dsp.spectrogram import Spectrogram
from spectro_paint.errors import MaskDimensionMismatchError, MaskValueError


logger = logging.getLogger(__name__)


def new_mask(spec: Spectrogram, fill: float = 0.0) -> np.ndarray:
    """Mask matching the spectrogram's geometry, every cell set to ``fill``."""
    return np.full((spec.frames, spec.bins), fill, dtype=np.float32)


def clear_mask(mask: np.ndarray) -> None:
    mask.fill(0.0)


def paint_cell(mask: np.ndarray, frame: int, bin_index: int, value: float = 1.0) -> None:
    """
    Set one cell. Coordinates outside the grid are clamped to the nearest edge cell.
    """
    frames, bins = mask.shape
    if frames == 0 or bins == 0:
        return
    f = min(max(int(frame), 0), frames - 1)
    b = min(max(int(bin_index), 0), bins - 1)
    mask[f, b] = value


def paint_line(
    mask: np.ndarray,
    frame0: int,
    bin0: int,
    frame1: int,
    bin1: int,
    value: float = 1.0,
) -> None:
    """
    Paint a one-cell-wide stroke between two cells (Bresenham), endpoints included.
    """
    x, y = int(frame0), int(bin0)
    x1, y1 = int(frame1), int(bin1)
    dx = abs(x1 - x)
    dy = abs(y1 - y)
    sx = 1 if x < x1 else -1
    sy = 1 if y < y1 else -1
    err = dx - dy

    while True:
        paint_cell(mask, x, y, value)
        if x == x1 and y == y1:
            break
        e2 = 2 * err
        if e2 > -dy:
            err -= dy
            x += sx
        if e2 < dx:
            err += dx
            y += sy


def band_mask(
    spec: Spectrogram,
    low_hz: float,
    high_hz: float,
    start_sec: Optional[float] = None,
    end_sec: Optional[float] = None,
    gain: float = 1.0,
    fill: float = 0.0,
) -> np.ndarray:
    """
    Rectangular mask: ``gain`` inside the band, ``fill`` elsewhere.

    A bin is inside when its center frequency lies in [low_hz, high_hz]; a frame
    is inside when its start time lies in [start_sec, end_sec]. Omitted time
    bounds extend to the start / end of the signal.
    """
    if high_hz < low_hz:
        raise ValueError(f"high_hz ({high_hz}) must be >= low_hz ({low_hz})")
    if start_sec is not None and end_sec is not None and end_sec < start_sec:
        raise ValueError(f"end_sec ({end_sec}) must be >= start_sec ({start_sec})")

    mask = new_mask(spec, fill=fill)
    if mask.size == 0:
        return mask

    freqs = spec.bin_freqs()
    times = spec.frame_times()

    in_band = (freqs >= low_hz) & (freqs <= high_hz)
    in_time = np.ones(spec.frames, dtype=bool)
    if start_sec is not None:
        in_time &= times >= start_sec
    if end_sec is not None:
        in_time &= times <= end_sec

    mask[np.ix_(in_time, in_band)] = gain
    return mask


def _row_lengths(mask: Any) -> Optional[Tuple[int, ...]]:
    try:
        return tuple(len(row) for row in mask)
    except TypeError:
        return None


def observed_shape(mask: Any) -> tuple:
    """
    Shape of an array-like mask without converting it.

    A list of rows with unequal lengths (an editor's per-frame rows, one of them
    short) reports ``(rows, "ragged")`` instead of failing inside numpy.
    """
    if isinstance(mask, np.ndarray):
        return tuple(mask.shape)
    lengths = _row_lengths(mask)
    if lengths is not None and len(set(lengths)) > 1:
        return (len(lengths), "ragged")
    return tuple(np.shape(mask))


def validate_mask(mask: np.ndarray, expected_shape: Tuple[int, int]) -> np.ndarray:
    """
    Check a mask against the (frames, bins) it must match and return it as float64.

    Raises
    ------
    MaskDimensionMismatchError
        If the mask is not 2D, has rows of unequal length, or its shape
        differs from ``expected_shape``.
    MaskValueError
        If any gain is NaN or infinite.

    Gains outside [0, 1] are passed through unchanged (they boost or invert a
    band), but are logged since they usually mean an editing bug upstream.
    """
    expected = (int(expected_shape[0]), int(expected_shape[1]))

    shape = observed_shape(mask)
    if "ragged" in shape:
        raise MaskDimensionMismatchError(expected, shape)

    m = np.asarray(mask, dtype=np.float64)
    if m.ndim == 1 and m.size == 0 and expected[0] * expected[1] == 0:
        # [] is an acceptable spelling of an empty grid
        m = m.reshape(expected)

    if m.ndim != 2 or m.shape != expected:
        raise MaskDimensionMismatchError(expected, tuple(m.shape))

    if m.size == 0:
        return m

    if not np.all(np.isfinite(m)):
        raise MaskValueError("Mask contains NaN or infinite gains")

    lo = float(m.min())
    hi = float(m.max())
    if lo < 0.0 or hi > 1.0:
        logger.warning(f"Mask gains outside [0, 1] (min={lo:.3f}, max={hi:.3f}); applying unclamped")

    return m
