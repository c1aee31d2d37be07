"""CLI entry point for the analog TV signal simulator."""

import argparse
import logging
import multiprocessing
import os
import sys

import numpy as np
from tqdm import tqdm


def _read_image_rgb(path):
    """Load an image file as RGB, exiting with a message if unreadable."""
    import cv2
    frame_bgr = cv2.imread(path)
    if frame_bgr is None:
        print(f"Error: Cannot open image '{path}'")
        sys.exit(1)
    return cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)


def _write_image_rgba(path, rgba):
    import cv2
    cv2.imwrite(path, cv2.cvtColor(rgba, cv2.COLOR_RGBA2BGR))


def _to_working_grid(frame_rgb, profile, width):
    """Resample a picture to the standard's line count at the given width."""
    import cv2
    return cv2.resize(frame_rgb, (width, profile.video_scanlines),
                      interpolation=cv2.INTER_AREA)


def _from_working_grid(frame, width, height):
    import cv2
    return cv2.resize(frame, (width, height), interpolation=cv2.INTER_LINEAR)


def _profile_from_args(args):
    from analog_tv.formats import build_profile
    return build_profile(args.standard, interlaced=not args.progressive)


def _working_width(args):
    from analog_tv.settings import working_width
    return args.work_width or working_width(args.standard)


def _decode_settings(args):
    """Validated decoder keyword arguments from CLI flags."""
    from analog_tv.settings import DecodeSettings
    settings = DecodeSettings(
        bandwidth=args.bandwidth, crosstalk=args.crosstalk,
        resonance=args.resonance, phase_error=args.phase_error,
        phase_noise=args.phase_noise, jitter=args.jitter,
        channels=args.channels,
    )
    try:
        return settings.as_kwargs()
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(2)


def _build_effects_dict(args):
    """Build an effects dict from CLI args (plain data, picklable)."""
    effects = {}
    if getattr(args, 'noise', None):
        effects['noise'] = {'amplitude': args.noise}
    if getattr(args, 'distortion', None):
        effects['distortion'] = {'ramp': args.distortion}
    if getattr(args, 'ghost', None):
        effects['ghost'] = {'amplitude': args.ghost,
                            'delay_us': args.ghost_delay}
    return effects


def _pipeline_from_dict(effects, rng=None):
    """Build a SignalPipeline from an effects dict."""
    from analog_tv.pipeline import SignalPipeline
    from analog_tv.effects import add_noise, add_distortion, add_ghosting

    pipeline = SignalPipeline()
    if 'noise' in effects:
        pipeline.add(add_noise(rng=rng, **effects['noise']))
    if 'distortion' in effects:
        pipeline.add(add_distortion(**effects['distortion']))
    if 'ghost' in effects:
        pipeline.add(add_ghosting(**effects['ghost']))
    return pipeline


def _process_frame(frame_rgb, standard, interlaced, work_width, decode_kwargs,
                   effects, seed):
    """Encode, distort and decode one picture; returns RGB at input size.

    Module level so multiprocessing can pickle it.
    """
    from analog_tv.codec import roundtrip
    from analog_tv.formats import build_profile

    profile = build_profile(standard, interlaced)
    rng = np.random.default_rng(seed)
    pipeline = _pipeline_from_dict(effects, rng) if effects else None
    work = _to_working_grid(frame_rgb, profile, work_width)
    rgba = roundtrip(profile, work, pipeline=pipeline, rng=rng, **decode_kwargs)
    height, width = frame_rgb.shape[:2]
    return _from_working_grid(rgba[:, :, :3], width, height)


def _frame_worker(job):
    return _process_frame(*job)


def cmd_image(args):
    """Run a single image through the analog signal path."""
    from analog_tv.codec import encode, decode, sample_rate
    from analog_tv.signal_io import export_signal, export_wav

    frame_rgb = _read_image_rgb(args.input)
    profile = _profile_from_args(args)
    work_width = _working_width(args)
    decode_kwargs = _decode_settings(args)
    rng = np.random.default_rng(args.seed)
    print(f"Input: {args.input} ({frame_rgb.shape[1]}x{frame_rgb.shape[0]})")

    print(f"Encoding to {profile.standard} at {work_width}x{profile.video_scanlines}...")
    signal, bounds = encode(profile, _to_working_grid(frame_rgb, profile, work_width))

    if args.signal:
        export_signal(args.signal, signal, bounds, profile, work_width)
        print(f"Signal saved: {args.signal}")
    if args.wav:
        export_wav(signal, args.wav)
        print(f"WAV: {args.wav}")

    effects = _build_effects_dict(args)
    if effects:
        pipeline = _pipeline_from_dict(effects, rng)
        print(f"Applying {len(pipeline)} signal effect(s)...")
        signal = pipeline.process(signal, sample_rate(profile, work_width))

    print("Decoding...")
    rgba = decode(profile, signal, work_width, rng=rng, boundary_points=bounds,
                  **decode_kwargs)
    width = args.width or frame_rgb.shape[1]
    height = args.height or frame_rgb.shape[0]
    _write_image_rgba(args.output, _from_working_grid(rgba, width, height))
    print(f"Output: {args.output} ({width}x{height})")


def cmd_encode(args):
    """Encode an image to a composite signal file (.npz)."""
    from analog_tv.codec import encode
    from analog_tv.signal_io import export_signal, export_wav

    frame_rgb = _read_image_rgb(args.input)
    profile = _profile_from_args(args)
    work_width = _working_width(args)
    signal, bounds = encode(profile, _to_working_grid(frame_rgb, profile, work_width))
    export_signal(args.output, signal, bounds, profile, work_width)
    print(f"Encoded {args.input} as {profile.standard}: {len(signal)} samples")
    print(f"Done: {args.output}")
    if args.wav:
        export_wav(signal, args.wav)
        print(f"WAV: {args.wav}")


def cmd_decode(args):
    """Decode a composite signal file back to an image."""
    from analog_tv.codec import decode, sample_rate
    from analog_tv.signal_io import import_signal

    print(f"Importing signal from {args.input}...")
    signal, bounds, profile, width = import_signal(args.input)
    print(f"  {profile.standard}, {len(signal)} samples, {width} px wide")

    rng = np.random.default_rng(args.seed)
    effects = _build_effects_dict(args)
    if effects:
        pipeline = _pipeline_from_dict(effects, rng)
        print(f"  Applying {len(pipeline)} signal effect(s)")
        signal = pipeline.process(signal, sample_rate(profile, width))

    rgba = decode(profile, signal, width, rng=rng, boundary_points=bounds,
                  **_decode_settings(args))
    if args.width or args.height:
        rgba = _from_working_grid(rgba, args.width or width,
                                  args.height or profile.video_scanlines)
    _write_image_rgba(args.output, rgba)
    print(f"Done: {args.output}")


def _get_num_workers():
    """Get number of parallel workers (leave one core free for I/O)."""
    return max(1, (os.cpu_count() or 2) - 1)


def cmd_roundtrip(args):
    """Run every frame of a video through the analog signal path."""
    import cv2

    cap = cv2.VideoCapture(args.input)
    if not cap.isOpened():
        print(f"Error: Cannot open video file '{args.input}'")
        sys.exit(1)
    total_frames = int(cap.get(cv2.CAP_PROP_FRAME_COUNT))
    fps = cap.get(cv2.CAP_PROP_FPS) or 25.0
    width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))
    height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))

    profile = _profile_from_args(args)
    work_width = _working_width(args)
    decode_kwargs = _decode_settings(args)
    effects = _build_effects_dict(args)
    workers = _get_num_workers()
    seeds = np.random.SeedSequence(args.seed)

    out = cv2.VideoWriter(args.output, cv2.VideoWriter_fourcc(*'mp4v'), fps,
                          (width, height))
    print(f"Roundtrip ({profile.standard}): {args.input} -> {args.output}")
    print(f"  {width}x{height} @ {fps:.2f}fps, {workers} workers")
    if effects:
        print(f"  Signal effects: {', '.join(effects.keys())}")

    frame_num = 0
    batch_size = workers * 2
    pbar = tqdm(total=total_frames, unit='frame', desc='Processing')
    with multiprocessing.Pool(workers) as pool:
        while True:
            batch = []
            for child in seeds.spawn(batch_size):
                ret, frame_bgr = cap.read()
                if not ret:
                    break
                batch.append((cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB),
                              profile.standard, profile.interlaced, work_width,
                              decode_kwargs, effects, child))
            if not batch:
                break

            for result in pool.map(_frame_worker, batch):
                out.write(cv2.cvtColor(result, cv2.COLOR_RGB2BGR))
                frame_num += 1
            pbar.update(len(batch))

    pbar.close()
    cap.release()
    out.release()
    print(f"Done: {frame_num} frames")


def cmd_colorbars(args):
    """Generate colour bars for a standard and encode them."""
    from analog_tv.codec import encode
    from analog_tv.colorbars import bars_for
    from analog_tv.signal_io import export_signal, export_wav

    profile = _profile_from_args(args)
    work_width = _working_width(args)
    bars = bars_for(profile.standard, work_width, profile.video_scanlines)

    print(f"Encoding {profile.standard} colour bars...")
    signal, bounds = encode(profile, bars)
    export_signal(args.output, signal, bounds, profile, work_width)
    print(f"Done: {args.output} ({len(signal)} samples)")

    if args.wav:
        export_wav(signal, args.wav)
        print(f"WAV: {args.wav}")
    if args.save_png:
        import cv2
        cv2.imwrite(args.save_png, cv2.cvtColor(bars, cv2.COLOR_RGB2BGR))
        print(f"Saved source pattern: {args.save_png}")


def _add_format_args(parser):
    group = parser.add_argument_group('format')
    group.add_argument('--standard', default='PAL', type=str.upper,
                       choices=['NTSC', 'PAL', 'SECAM'],
                       help='Broadcast standard (default: PAL)')
    group.add_argument('--progressive', action='store_true',
                       help='Progressive scan instead of interlaced')
    group.add_argument('--work-width', type=int, default=None,
                       help='Working width (default: 1280 NTSC, 1536 PAL/SECAM)')


def _add_decode_args(parser):
    """Add receiver settings to an argparse subparser."""
    group = parser.add_argument_group('receiver')
    group.add_argument('--bandwidth', type=float, default=1.0,
                       help='Bandwidth multiplier 0.5-1 (default: 1.0)')
    group.add_argument('--crosstalk', type=float, default=0.0,
                       help='Luma/chroma crosstalk 0-1 (default: 0)')
    group.add_argument('--resonance', type=float, default=5.0,
                       help='Filter resonance 1-20 (default: 5)')
    group.add_argument('--phase-error', type=float, default=0.0,
                       help='Chroma phase error in degrees (NTSC/PAL)')
    group.add_argument('--phase-noise', type=float, default=0.0,
                       help='Per-line chroma phase noise in degrees (NTSC/PAL)')
    group.add_argument('--jitter', type=float, default=0.0,
                       help='Scanline jitter as a fraction of the width, 0-0.005')
    group.add_argument('--channels', default='YUV',
                       help='Channels to show: YUV, Y, U, V, UV, YU, YV')
    group.add_argument('--seed', type=int, default=None,
                       help='Random seed for noise, jitter and phase noise')


def _add_effect_args(parser):
    """Add signal degradation flags to an argparse subparser."""
    group = parser.add_argument_group('signal effects')
    group.add_argument('--noise', type=float, default=None,
                       help='Snow amplitude (e.g. 0.05=subtle, 0.3=heavy)')
    group.add_argument('--distortion', type=float, default=None,
                       help='Soft-clip ramp (e.g. 2=mild, 8=crushed)')
    group.add_argument('--ghost', type=float, default=None,
                       help='Ghost amplitude 0-1 (multipath echo)')
    group.add_argument('--ghost-delay', type=float, default=2.0,
                       help='Ghost delay in microseconds (default: 2.0)')


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Analog TV Signal Simulator (NTSC, PAL, SECAM)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Examples:
  python main.py image photo.png -o pal_photo.png
  python main.py image photo.png -o ntsc.png --standard ntsc --noise 0.1
  python main.py encode photo.png -o signal.npz --standard secam
  python main.py decode signal.npz -o decoded.png --crosstalk 0.3
  python main.py roundtrip input.mp4 -o output.mp4 --phase-noise 10
  python main.py colorbars -o bars.npz --save-png bars.png
        """)
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Print debug logging')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # image
    p_img = subparsers.add_parser('image', help='Roundtrip a single image')
    p_img.add_argument('input', help='Input image file (PNG, JPG, etc.)')
    p_img.add_argument('-o', '--output', default='output.png', help='Output image file')
    p_img.add_argument('--width', type=int, default=None, help='Output width (default: same as input)')
    p_img.add_argument('--height', type=int, default=None, help='Output height (default: same as input)')
    p_img.add_argument('--signal', default=None, help='Also export composite signal (.npz)')
    p_img.add_argument('--wav', default=None, help='Also export as WAV (for audio editors)')
    _add_format_args(p_img)
    _add_decode_args(p_img)
    _add_effect_args(p_img)

    # encode
    p_enc = subparsers.add_parser('encode', help='Encode an image to a composite signal')
    p_enc.add_argument('input', help='Input image file')
    p_enc.add_argument('-o', '--output', default='signal.npz', help='Output signal file (.npz)')
    p_enc.add_argument('--wav', default=None, help='Also export as WAV (for audio editors)')
    _add_format_args(p_enc)

    # decode
    p_dec = subparsers.add_parser('decode', help='Decode a composite signal to an image')
    p_dec.add_argument('input', help='Input signal file (.npz)')
    p_dec.add_argument('-o', '--output', default='output.png', help='Output image file')
    p_dec.add_argument('--width', type=int, default=None, help='Resize output to this width')
    p_dec.add_argument('--height', type=int, default=None, help='Resize output to this height')
    _add_decode_args(p_dec)
    _add_effect_args(p_dec)

    # roundtrip
    p_rt = subparsers.add_parser('roundtrip', help='Video -> composite -> video')
    p_rt.add_argument('input', help='Input video file')
    p_rt.add_argument('-o', '--output', default='output.mp4', help='Output video file')
    _add_format_args(p_rt)
    _add_decode_args(p_rt)
    _add_effect_args(p_rt)

    # colorbars
    p_cb = subparsers.add_parser('colorbars', help='Generate a colour bar test signal')
    p_cb.add_argument('-o', '--output', default='colorbars.npz', help='Output signal file (.npz)')
    p_cb.add_argument('--wav', default=None, help='Also export as WAV (for audio editors)')
    p_cb.add_argument('--save-png', default=None, help='Also save source pattern as PNG')
    _add_format_args(p_cb)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(name)s: %(message)s')

    commands = {
        'image': cmd_image,
        'encode': cmd_encode,
        'decode': cmd_decode,
        'roundtrip': cmd_roundtrip,
        'colorbars': cmd_colorbars,
    }
    commands[args.command](args)


if __name__ == '__main__':
    main()
