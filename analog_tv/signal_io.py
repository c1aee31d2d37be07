"""Saving and loading composite signals."""

import struct

import numpy as np

from .formats import build_profile, boundary_points as make_boundary_points


def export_signal(filepath, signal, boundary_points, profile, width):
    """Save a composite signal together with what is needed to decode it.

    Args:
        filepath: Output .npz path.
        signal: 1D composite signal.
        boundary_points: Scanline boundaries returned by encode().
        profile: FormatProfile the signal was encoded with.
        width: Width of the encoded picture.
    """
    np.savez(filepath,
             signal=np.asarray(signal, dtype=np.float64),
             boundary_points=np.asarray(boundary_points, dtype=np.int64),
             standard=np.array(profile.standard),
             interlaced=np.array(profile.interlaced),
             width=np.array(width))


def import_signal(filepath):
    """Load a signal written by export_signal.

    Returns:
        Tuple (signal, boundary_points, profile, width).
    """
    with np.load(filepath) as data:
        missing = {'signal', 'standard', 'interlaced', 'width'} - set(data.files)
        if missing:
            raise ValueError(f"{filepath}: missing {', '.join(sorted(missing))}")
        signal = data['signal'].astype(np.float64)
        profile = build_profile(str(data['standard']), bool(data['interlaced']))
        width = int(data['width'])
        if 'boundary_points' in data.files:
            bounds = data['boundary_points'].astype(np.int64)
        else:
            bounds = make_boundary_points(len(signal), profile.video_scanlines)
    return signal, bounds, profile, width


def export_wav(signal, filepath, sample_rate=48000):
    """Export the composite signal as a 32-bit float WAV for audio editors.

    Every sample is kept; the header just declares an audio rate so
    programs like Audacity can open it. Mid-grey maps to silence.

    Args:
        signal: 1D composite signal.
        filepath: Output WAV file path.
        sample_rate: Declared sample rate in the WAV header.
    """
    audio = np.clip(np.asarray(signal, dtype=np.float64) - 0.5, -1.0, 1.0)
    audio_bytes = audio.astype(np.float32).tobytes()

    num_channels = 1
    bits_per_sample = 32
    block_align = num_channels * (bits_per_sample // 8)
    byte_rate = sample_rate * block_align

    fmt_chunk = struct.pack('<4sIHHIIHH',
        b'fmt ', 16, 3, num_channels,
        sample_rate, byte_rate, block_align, bits_per_sample,
    )
    data_chunk_header = struct.pack('<4sI', b'data', len(audio_bytes))
    riff_size = 4 + len(fmt_chunk) + len(data_chunk_header) + len(audio_bytes)

    with open(filepath, 'wb') as f:
        f.write(struct.pack('<4sI4s', b'RIFF', riff_size, b'WAVE'))
        f.write(fmt_chunk)
        f.write(data_chunk_header)
        f.write(audio_bytes)
