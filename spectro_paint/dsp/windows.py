from __future__ import annotations


from functools import lru_cache


import numpy as np
from scipy.signal import windows


@lru_cache(maxsize=16)
def hann(n: int, sym: bool = True) -> np.ndarray:
    """
    Hann window of length n, shared read-only across all frames.

    With sym=True this is w[i] = 0.5 - 0.5 * cos(2*pi*i / (n - 1)), the window used
    for both analysis and synthesis. sym=False gives the periodic variant.

    Parameters
    ----------
    n : int
        Window length, at least 2.
    sym : bool
        Symmetric (default) or periodic window.

    Returns
    -------
    w : np.ndarray
        float64 array of shape (n,), not writeable.
    """
    if n < 2:
        raise ValueError(f"Hann window needs n >= 2, got {n}")

    w = np.asarray(windows.hann(n, sym=sym), dtype=np.float64)
    w.flags.writeable = False
    return w
