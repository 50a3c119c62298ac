import logging

import numpy as np
import pytest

from spectro_paint.dsp.fft import fft_in_place
from spectro_paint.dsp.mask import band_mask, new_mask
from spectro_paint.dsp.resynth import apply_mirrored_gains, resynthesize, resynthesize_spectrogram
from spectro_paint.dsp.spectrogram import analyze
from spectro_paint.errors import InvalidMaxFreqError, MaskDimensionMismatchError, MaskValueError
from tests.utils.audio_test_utils import covered_length, make_tones, null_test


SR = 16000
WIN = 1024


def _signal(frames: int, hop: int) -> np.ndarray:
    return make_tones([440.0, 1234.0], [0.5, 0.2], SR, covered_length(frames, WIN, hop))


def test_full_mask_reconstructs_signal() -> None:
    hop = WIN // 8
    x = _signal(60, hop)
    spec = analyze(x, SR, win_size=WIN, hop_size=hop, max_freq_hz=SR / 2.0, db_range_db=80.0)

    y = resynthesize(x, SR, new_mask(spec, fill=1.0), WIN, hop)

    assert y.shape == x.shape
    assert y.dtype == np.float32
    assert np.mean(np.abs(y - x)) < 1e-3
    # The first and last few samples sit under near-zero window weight and come back silent
    interior = slice(WIN, x.shape[0] - WIN)
    assert null_test(x[interior], y[interior]) < -60.0


def test_reconstruction_does_not_need_cola_hop() -> None:
    hop = 300
    x = _signal(30, hop)
    spec = analyze(x, SR, win_size=WIN, hop_size=hop, max_freq_hz=SR / 2.0, db_range_db=80.0)

    y = resynthesize(x, SR, new_mask(spec, fill=1.0), WIN, hop, max_freq_hz=SR / 2.0)

    interior = slice(WIN, x.shape[0] - WIN)
    assert np.max(np.abs(y[interior] - x[interior])) < 1e-3


def test_zero_mask_gives_silence() -> None:
    hop = 256
    x = _signal(20, hop)
    spec = analyze(x, SR, win_size=WIN, hop_size=hop, max_freq_hz=4000.0, db_range_db=80.0)

    y = resynthesize(x, SR, new_mask(spec, fill=0.0), WIN, hop, max_freq_hz=4000.0)

    assert y.shape == x.shape
    assert np.all(y == 0.0)


def test_uncovered_tail_is_silent() -> None:
    sr = 44100
    x = make_tones([440.0], [0.5], sr, 10000)
    spec = analyze(x, sr, win_size=4096, hop_size=512, max_freq_hz=8000.0, db_range_db=80.0)

    y = resynthesize(x, sr, new_mask(spec, fill=1.0), 4096, 512, max_freq_hz=8000.0)

    assert y.shape == (10000,)
    # Last frame starts at 11 * 512 and ends at 9728
    assert np.all(y[9728:] == 0.0)
    assert np.any(y[:9728] != 0.0)


def test_band_mask_removes_high_tone() -> None:
    hop = 256
    n = covered_length(40, WIN, hop)
    low = make_tones([500.0], [0.5], SR, n)
    high = make_tones([3000.0], [0.3], SR, n)
    x = (low + high).astype(np.float32)
    spec = analyze(x, SR, win_size=WIN, hop_size=hop, max_freq_hz=6000.0, db_range_db=80.0)

    y = resynthesize_spectrogram(spec, x, band_mask(spec, 0.0, 1000.0))

    interior = slice(WIN, n - WIN)
    assert np.max(np.abs(y[interior] - low[interior])) < 1e-2


def test_bins_above_ceiling_are_removed() -> None:
    hop = 256
    n = covered_length(40, WIN, hop)
    low = make_tones([500.0], [0.5], SR, n)
    x = (low + make_tones([6000.0], [0.3], SR, n)).astype(np.float32)
    spec = analyze(x, SR, win_size=WIN, hop_size=hop, max_freq_hz=2000.0, db_range_db=80.0)

    y = resynthesize_spectrogram(spec, x, new_mask(spec, fill=1.0))

    interior = slice(WIN, n - WIN)
    assert np.max(np.abs(y[interior] - low[interior])) < 1e-2


def test_gain_above_one_is_applied_and_logged(caplog) -> None:
    hop = 256
    x = _signal(20, hop)
    spec = analyze(x, SR, win_size=WIN, hop_size=hop, max_freq_hz=SR / 2.0, db_range_db=80.0)

    with caplog.at_level(logging.WARNING, logger="spectro_paint.dsp.mask"):
        y = resynthesize(x, SR, new_mask(spec, fill=2.0), WIN, hop)

    interior = slice(WIN, x.shape[0] - WIN)
    assert np.allclose(y[interior], 2.0 * x[interior], atol=1e-3)
    assert any("outside [0, 1]" in rec.getMessage() for rec in caplog.records)


def test_short_signal_resynthesizes_to_silence() -> None:
    x = np.ones(500, dtype=np.float32)
    spec = analyze(x, SR, win_size=WIN, hop_size=256, max_freq_hz=4000.0, db_range_db=80.0)

    y = resynthesize(x, SR, new_mask(spec), WIN, 256, max_freq_hz=4000.0)
    assert y.shape == (500,)
    assert np.all(y == 0.0)

    y2 = resynthesize(x, SR, [], WIN, 256)
    assert np.all(y2 == 0.0)


def test_wrong_frame_count_is_rejected() -> None:
    hop = 256
    x = _signal(20, hop)
    x_before = x.copy()
    spec = analyze(x, SR, win_size=WIN, hop_size=hop, max_freq_hz=4000.0, db_range_db=80.0)
    mask = np.ones((spec.frames - 1, spec.bins), dtype=np.float32)

    with pytest.raises(MaskDimensionMismatchError) as excinfo:
        resynthesize(x, SR, mask, WIN, hop, max_freq_hz=4000.0)

    assert excinfo.value.expected == (spec.frames, spec.bins)
    assert excinfo.value.actual == (spec.frames - 1, spec.bins)
    assert np.array_equal(x, x_before)


def test_wrong_bin_count_is_rejected() -> None:
    hop = 256
    x = _signal(20, hop)
    spec = analyze(x, SR, win_size=WIN, hop_size=hop, max_freq_hz=4000.0, db_range_db=80.0)

    with pytest.raises(MaskDimensionMismatchError):
        resynthesize(x, SR, np.ones((spec.frames, spec.bins + 1)), WIN, hop, max_freq_hz=4000.0)
    with pytest.raises(MaskDimensionMismatchError):
        resynthesize(x, SR, np.ones((spec.frames, WIN // 2 + 1)), WIN, hop)
    with pytest.raises(MaskDimensionMismatchError):
        resynthesize(x, SR, np.ones(spec.frames), WIN, hop)
    with pytest.raises(MaskDimensionMismatchError):
        resynthesize_spectrogram(spec, x, np.ones((spec.frames, spec.bins - 1)))


def test_ragged_mask_is_rejected_as_dimension_mismatch() -> None:
    hop = 256
    x = _signal(20, hop)
    spec = analyze(x, SR, win_size=WIN, hop_size=hop, max_freq_hz=4000.0, db_range_db=80.0)
    rows = [[1.0] * spec.bins for _ in range(spec.frames)]
    rows[-1] = rows[-1][:-1]

    with pytest.raises(MaskDimensionMismatchError) as excinfo:
        resynthesize(x, SR, rows, WIN, hop, max_freq_hz=4000.0)
    assert excinfo.value.expected == (spec.frames, spec.bins)
    assert excinfo.value.actual == (spec.frames, "ragged")

    with pytest.raises(MaskDimensionMismatchError):
        resynthesize(x, SR, rows, WIN, hop)
    with pytest.raises(MaskDimensionMismatchError):
        resynthesize_spectrogram(spec, x, rows)


def test_non_finite_mask_is_rejected() -> None:
    hop = 256
    x = _signal(10, hop)
    spec = analyze(x, SR, win_size=WIN, hop_size=hop, max_freq_hz=4000.0, db_range_db=80.0)
    mask = new_mask(spec, fill=1.0)
    mask[2, 3] = np.nan

    with pytest.raises(MaskValueError):
        resynthesize_spectrogram(spec, x, mask)


def test_bad_ceiling_is_rejected() -> None:
    x = _signal(10, 256)

    with pytest.raises(InvalidMaxFreqError):
        resynthesize(x, SR, np.ones((10, 10)), WIN, 256, max_freq_hz=SR)


def test_spectrogram_signal_length_must_match() -> None:
    x = _signal(10, 256)
    spec = analyze(x, SR, win_size=WIN, hop_size=256, max_freq_hz=4000.0, db_range_db=80.0)

    with pytest.raises(ValueError):
        resynthesize_spectrogram(spec, x[:-1], new_mask(spec))


def test_mirrored_gains_keep_conjugate_symmetry() -> None:
    n = 256
    rng = np.random.default_rng(1)
    re = rng.standard_normal(n)
    im = np.zeros(n)
    fft_in_place(re, im)
    gains = rng.uniform(0.0, 1.0, n // 2 + 1)

    apply_mirrored_gains(re, im, gains)

    b = np.arange(1, n // 2)
    assert np.allclose(re[b], re[n - b], atol=1e-12)
    assert np.allclose(im[b], -im[n - b], atol=1e-12)

    fft_in_place(re, im, inverse=True)
    assert np.max(np.abs(im)) < 1e-12


def test_mirrored_gains_use_same_gain_for_both_halves() -> None:
    n = 16
    re = np.ones(n)
    im = np.full(n, 2.0)
    gains = np.arange(n // 2 + 1, dtype=np.float64) / 10.0

    apply_mirrored_gains(re, im, gains)

    assert np.array_equal(re[: n // 2 + 1], gains)
    for b in range(1, n // 2):
        assert re[n - b] == gains[b]
        assert im[n - b] == 2.0 * gains[b]
    assert re[0] == 0.0
    assert re[n // 2] == gains[n // 2]


def test_mirrored_gains_rejects_wrong_length() -> None:
    with pytest.raises(ValueError):
        apply_mirrored_gains(np.zeros(8), np.zeros(8), np.ones(8))
