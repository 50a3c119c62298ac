from __future__ import annotations


from pathlib import Path
import argparse
import time


from spectro_paint.dsp.mask import new_mask
from spectro_paint.dsp.resynth import resynthesize
from spectro_paint.dsp.spectrogram import analyze
from spectro_paint.io.audio_io import load_audio


def main() -> None:
    parser = argparse.ArgumentParser(description="Profile Spectro Paint analysis and resynthesis runtime.")
    parser.add_argument("--infile", "-i", required=True, help="Input audio file (wav/flac/aiff)")
    parser.add_argument("--win-size", type=int, default=4096)
    parser.add_argument("--hop-size", type=int, default=512)
    args = parser.parse_args()

    infile = Path(args.infile)
    if not infile.exists():
        raise SystemExit(f"Input file not found: {infile}")

    x, sr = load_audio(infile)

    dur_sec = x.shape[0] / float(sr)
    print(f"Loaded {infile} — {dur_sec:.2f} seconds @ {sr} Hz, shape={x.shape}")

    start = time.perf_counter()
    spec = analyze(x, sr, win_size=args.win_size, hop_size=args.hop_size, max_freq_hz=sr / 2.0)
    mid = time.perf_counter()
    y = resynthesize(x, sr, new_mask(spec, fill=1.0), spec.win_size, spec.hop_size)
    end = time.perf_counter()

    print(f"Analysis:     {mid - start:.3f} s ({spec.frames} frames x {spec.bins} bins)")
    print(f"Resynthesis:  {end - mid:.3f} s")
    if dur_sec > 0:
        print(f"Speed ratio: {dur_sec / (end - start):.2f} x real-time (if >1, faster than real-time)")

    assert y.shape == x.shape, f"Output has unexpected shape {y.shape}"

    print("Profile run completed successfully.")


if __name__ == "__main__":
    main()
