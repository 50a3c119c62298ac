from __future__ import annotations


from pathlib import Path
import argparse


from spectro_paint.config import configure_logging
from spectro_paint.dsp.harness import process_file_to_file, resolve_params
from spectro_paint.dsp.mask import band_mask
from spectro_paint.dsp.spectrogram import analyze
from spectro_paint.io.audio_io import load_audio, save_mask
from spectro_paint.presets import list_presets


def _add_analysis_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--infile", "-i", required=True, help="Input audio file (wav/flac/aiff)")
    parser.add_argument("--preset", "-p", help="Analysis preset name (see --list-presets)")
    parser.add_argument("--win-size", type=int, help="FFT window size (power of two)")
    parser.add_argument("--hop-size", type=int, help="Hop size in samples")
    parser.add_argument("--max-freq", type=float, help="Frequency ceiling in Hz")
    parser.add_argument("--db-range", type=float, help="Dynamic range in dB")


def _overrides(args: argparse.Namespace) -> dict:
    overrides = {}
    if args.win_size is not None:
        overrides["win_size"] = args.win_size
    if args.hop_size is not None:
        overrides["hop_size"] = args.hop_size
    if args.max_freq is not None:
        overrides["max_freq_hz"] = args.max_freq
    if args.db_range is not None:
        overrides["db_range_db"] = args.db_range
    return overrides


def main() -> None:
    """
    Spectro Paint - Offline Renderer

    ``analyze`` prints the spectrogram geometry (and can write a band mask as
    a starting point for editing); ``resynth`` applies a mask and writes audio.
    """
    parser = argparse.ArgumentParser(description="Spectro Paint - Offline Renderer")
    parser.add_argument("--list-presets", action="store_true", help="List available presets and exit")
    parser.add_argument("--log-level", default=None, help="Logging level (DEBUG, INFO, WARNING)")
    sub = parser.add_subparsers(dest="command")

    p_an = sub.add_parser("analyze", help="Analyze a file and print spectrogram geometry")
    _add_analysis_args(p_an)
    p_an.add_argument("--write-mask", help="Write a band mask (.npy) matching the spectrogram")
    p_an.add_argument("--band", nargs=2, type=float, metavar=("LOW_HZ", "HIGH_HZ"), help="Band kept by --write-mask")

    p_re = sub.add_parser("resynth", help="Apply a mask and resynthesize")
    _add_analysis_args(p_re)
    p_re.add_argument("--outfile", "-o", required=True, help="Output audio file (wav)")
    p_re.add_argument("--mask", "-m", help="Mask file (.npy) of shape (frames, bins)")
    p_re.add_argument("--band", nargs=2, type=float, metavar=("LOW_HZ", "HIGH_HZ"), help="Keep only this band")

    args = parser.parse_args()
    configure_logging(args.log_level)

    if args.list_presets:
        print("Available presets:")
        for name in list_presets():
            print(f"  - {name}")
        return

    if args.command is None:
        parser.error("a command (analyze or resynth) is required when not using --list-presets")

    infile = Path(args.infile)
    if not infile.exists():
        raise SystemExit(f"Input file not found: {infile}")

    if args.command == "analyze":
        audio, sr = load_audio(infile)
        params = resolve_params(sr, preset=args.preset, extra_params=_overrides(args))
        spec = analyze(audio, sr, **params)

        print(f"Loaded: {infile} (sr={sr}, {spec.duration_sec:.2f} s)")
        print(f"Frames: {spec.frames}  Bins: {spec.bins}  (win={spec.win_size}, hop={spec.hop_size})")
        print(f"Max dB: {spec.max_db:.2f}  Floor dB: {spec.floor_db:.2f}")

        if args.write_mask:
            if args.band:
                mask = band_mask(spec, args.band[0], args.band[1])
            else:
                mask = band_mask(spec, 0.0, params["max_freq_hz"])
            save_mask(args.write_mask, mask)
            print(f"Saved mask {mask.shape} → {args.write_mask}")
        return

    band = tuple(args.band) if args.band else None
    spec = process_file_to_file(
        infile,
        Path(args.outfile),
        mask_path=Path(args.mask) if args.mask else None,
        band=band,
        preset=args.preset,
        extra_params=_overrides(args),
    )

    print(f"Loaded: {infile} ({spec.frames} frames x {spec.bins} bins)")
    print(f"Saved resynthesized output → {args.outfile}")


if __name__ == "__main__":

    main()
