"""
Convenience harness for running files through analysis and masked resynthesis.

This module provides a simple file-to-file interface around analyze and
resynthesize, making it easy to use in tests and scripts.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import numpy as np

from spectro_paint.config import (
    DEFAULT_DB_RANGE,
    DEFAULT_HOP_SIZE,
    DEFAULT_MAX_FREQ_HZ,
    DEFAULT_WIN_SIZE,
)
from spectro_paint.io.audio_io import load_audio, load_mask, save_audio
from spectro_paint.dsp.mask import band_mask, new_mask
from spectro_paint.dsp.resynth import resynthesize
from spectro_paint.dsp.spectrogram import Spectrogram, analyze


logger = logging.getLogger(__name__)


def resolve_params(
    sr: int,
    preset: Optional[str] = None,
    extra_params: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Build analyze() keyword arguments from defaults, an optional preset and overrides.

    The frequency ceiling is capped at the Nyquist frequency of ``sr`` so that a
    preset written for 44.1 kHz material still works on lower-rate files.
    """
    if preset is not None:
        from spectro_paint.presets import analysis_params

        params = analysis_params(preset)
    else:
        params = {
            "win_size": DEFAULT_WIN_SIZE,
            "hop_size": DEFAULT_HOP_SIZE,
            "max_freq_hz": DEFAULT_MAX_FREQ_HZ,
            "db_range_db": DEFAULT_DB_RANGE,
        }

    if extra_params is not None:
        extra_params = dict(extra_params)
        extra_params.pop("samples", None)
        extra_params.pop("sample_rate", None)
        params.update(extra_params)

    nyquist = sr / 2.0
    if params["max_freq_hz"] > nyquist:
        logger.info(f"Capping max_freq_hz {params['max_freq_hz']} to Nyquist {nyquist} for sr={sr}")
        params["max_freq_hz"] = nyquist

    return params


def process_file_to_file(
    infile: Path,
    outfile: Path,
    mask_path: Optional[Path] = None,
    band: Optional[Tuple[float, float]] = None,
    preset: Optional[str] = None,
    extra_params: Optional[Dict[str, Any]] = None,
) -> Spectrogram:
    """
    Load audio, analyze it, apply a mask, resynthesize and save the result.

    Args:
        infile: Path to input audio file (mixed down to mono on load)
        outfile: Path to output audio file (parent dirs created if needed)
        mask_path: Optional .npy file with a (frames, bins) gain grid
        band: Optional (low_hz, high_hz) band to keep; ignored if mask_path is given.
              With neither, a unit mask is used and the output is the input
              limited to the analysis frequency ceiling.
        preset: Optional analysis preset name from spectro_paint.presets
        extra_params: Optional overrides for win_size, hop_size, max_freq_hz, db_range_db

    Returns:
        The Spectrogram the mask was paired with.

    Raises:
        FileNotFoundError: If infile (or mask_path) doesn't exist
        KeyError: If preset name is not found
        MaskDimensionMismatchError: If the mask file does not fit the analysis geometry
    """
    infile = Path(infile)
    outfile = Path(outfile)
    if not infile.exists():
        raise FileNotFoundError(f"Input file not found: {infile}")

    x, sr = load_audio(infile)
    params = resolve_params(sr, preset=preset, extra_params=extra_params)

    spec = analyze(x, sr, **params)

    if mask_path is not None:
        mask_path = Path(mask_path)
        if not mask_path.exists():
            raise FileNotFoundError(f"Mask file not found: {mask_path}")
        mask = load_mask(mask_path)
    elif band is not None:
        low_hz, high_hz = band
        mask = band_mask(spec, float(low_hz), float(high_hz))
    else:
        mask = new_mask(spec, fill=1.0)

    y = resynthesize(
        x,
        sr,
        mask,
        spec.win_size,
        spec.hop_size,
        max_freq_hz=params["max_freq_hz"],
    )

    save_audio(outfile, np.asarray(y, dtype=np.float32), sr)
    logger.info(f"Wrote {outfile} ({y.shape[0]} samples @ {sr} Hz, {spec.frames}x{spec.bins} mask)")
    return spec
