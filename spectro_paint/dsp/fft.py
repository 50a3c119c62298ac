"""
In-place radix-2 Cooley-Tukey FFT on parallel real/imaginary buffers.

The transform works on caller-owned float64 arrays so analysis and resynthesis
can reuse one pair of scratch buffers across every frame. Index tables for the
bit-reversal permutation and the per-stage twiddle vectors depend only on the
transform size, so they are built once per size and cached.
"""

from __future__ import annotations


from functools import lru_cache
from typing import List, Tuple


import numpy as np


def is_power_of_two(n: int) -> bool:
    return n >= 1 and (n & (n - 1)) == 0


def _check_buffers(re: np.ndarray, im: np.ndarray) -> int:
    """
    Validate the FFT buffer pair and return its length.

    These are programming errors (the window size is fixed configuration),
    so they raise immediately instead of producing a partial result.
    """
    if re.ndim != 1 or im.ndim != 1:
        raise ValueError("fft_in_place expects 1D real and imaginary buffers")
    n = re.shape[0]
    if im.shape[0] != n:
        raise ValueError(f"Real/imaginary length mismatch: {n} != {im.shape[0]}")
    if not is_power_of_two(n):
        raise ValueError(f"FFT length must be a power of two, got {n}")
    if re.dtype != np.float64 or im.dtype != np.float64:
        raise ValueError("fft_in_place expects float64 buffers")
    # Stage views are built with reshape, which silently copies non-contiguous input
    if not (re.flags.c_contiguous and im.flags.c_contiguous):
        raise ValueError("fft_in_place expects contiguous buffers")
    if not (re.flags.writeable and im.flags.writeable):
        raise ValueError("fft_in_place expects writeable buffers")
    return n


@lru_cache(maxsize=None)
def _bit_reverse_pairs(n: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Index pairs (i, j), i < j, swapped by the bit-reversal permutation of size n.

    j is tracked incrementally: adding one to a bit-reversed counter clears
    leading set bits from the top and then sets the first clear one.
    """
    lo: List[int] = []
    hi: List[int] = []
    j = 0
    for i in range(1, n):
        bit = n >> 1
        while j & bit:
            j ^= bit
            bit >>= 1
        j ^= bit
        if i < j:
            lo.append(i)
            hi.append(j)

    lo_idx = np.array(lo, dtype=np.intp)
    hi_idx = np.array(hi, dtype=np.intp)
    lo_idx.flags.writeable = False
    hi_idx.flags.writeable = False
    return lo_idx, hi_idx


@lru_cache(maxsize=None)
def _stage_twiddles(length: int, inverse: bool) -> Tuple[np.ndarray, np.ndarray]:
    """
    Twiddle factors w^j, j in [0, length/2), for one butterfly stage.

    Built by repeated multiplication with the unit rotation exp(+-2*pi*i/length)
    rather than by evaluating cos/sin for every j.
    """
    half = length >> 1
    angle = (2.0 if inverse else -2.0) * np.pi / length
    step = complex(np.cos(angle), np.sin(angle))

    w = np.empty(half, dtype=np.complex128)
    w[0] = 1.0
    if half > 1:
        w[1:] = np.cumprod(np.full(half - 1, step, dtype=np.complex128))

    w_re = np.ascontiguousarray(w.real)
    w_im = np.ascontiguousarray(w.imag)
    w_re.flags.writeable = False
    w_im.flags.writeable = False
    return w_re, w_im


def bit_reverse_permute(re: np.ndarray, im: np.ndarray) -> None:
    """
    Reorder re/im in place into bit-reversed index order.

    Each unordered pair is swapped exactly once, so the permutation is its own
    inverse.
    """
    n = _check_buffers(re, im)
    lo, hi = _bit_reverse_pairs(n)
    if lo.size == 0:
        return
    re[lo], re[hi] = re[hi], re[lo]
    im[lo], im[hi] = im[hi], im[lo]


def fft_in_place(re: np.ndarray, im: np.ndarray, inverse: bool = False) -> None:
    """
    Iterative radix-2 FFT, overwriting ``re`` and ``im``.

    Parameters
    ----------
    re, im : np.ndarray
        Contiguous float64 buffers of equal power-of-two length N.
    inverse : bool
        If True, compute the inverse transform (positive twiddle angle) and
        scale the result by 1/N.

    Raises
    ------
    ValueError
        If the buffers are not a valid power-of-two float64 pair.
    """
    n = _check_buffers(re, im)
    bit_reverse_permute(re, im)

    length = 2
    while length <= n:
        half = length >> 1
        w_re, w_im = _stage_twiddles(length, inverse)

        # One row per block; columns [0, half) are the "u" inputs, [half, length) the "v" inputs
        blocks_re = re.reshape(-1, length)
        blocks_im = im.reshape(-1, length)
        u_re = blocks_re[:, :half]
        u_im = blocks_im[:, :half]
        b_re = blocks_re[:, half:]
        b_im = blocks_im[:, half:]

        v_re = b_re * w_re - b_im * w_im
        v_im = b_re * w_im + b_im * w_re

        np.subtract(u_re, v_re, out=b_re)
        np.subtract(u_im, v_im, out=b_im)
        u_re += v_re
        u_im += v_im

        length <<= 1

    if inverse:
        scale = 1.0 / n
        re *= scale
        im *= scale
