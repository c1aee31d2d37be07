"""NTSC codec: YIQ quadrature modulation on a 3.58 MHz subcarrier."""

import numpy as np

from .filters import (
    make_fir_filter, fir_filter, fir_filter_crosstalk_shift, shift_kernel,
    make_notch_filter, fourier_transform, inverse_fourier_transform,
    band_pass_filter, notch_filter, shift_array_interp,
)
from .formats import (
    CHANNEL_ALL, as_generator, check_image, check_decode_args, signal_length,
    boundary_points as make_boundary_points, active_starts, field_order,
    line_positions, line_jitter, compose_rgb, to_rgba,
)

SOURCE_GAMMA = 2.2
MONITOR_GAMMA = 1.0

# Taps on each side of the centre for every decoder FIR
_HALF_WIDTH = 256

# Carrier offset the earlier frequency-domain decoder was tuned with (its
# transform convention left chroma 306820 Hz off baseband). decode_spectral
# shifts by the exact carrier, so carrier_offset_hz defaults to zero.
LEGACY_CARRIER_OFFSET_HZ = -306820.0


def _check_gamma(source_gamma, monitor_gamma):
    if source_gamma <= 0 or monitor_gamma <= 0:
        raise ValueError(f"Gamma must be positive, got {source_gamma}/{monitor_gamma}")


def encode(profile, image, source_gamma=SOURCE_GAMMA, monitor_gamma=MONITOR_GAMMA):
    """Encode a picture into an NTSC composite signal.

    Args:
        profile: NTSC FormatProfile.
        image: (video_scanlines, width, 3|4) uint8 RGB(A) picture.
        source_gamma: Gamma of the source material.
        monitor_gamma: Gamma the picture was mastered for.

    Returns:
        Tuple (signal, boundary_points): float64 samples and the
        video_scanlines + 1 scanline boundaries.
    """
    _check_gamma(source_gamma, monitor_gamma)
    rgb = check_image(profile, image)
    width = rgb.shape[1]
    length = signal_length(profile, width)
    bounds = make_boundary_points(length, profile.video_scanlines)
    pos = line_positions(active_starts(profile, length, width), width, length)

    lines = rgb[field_order(profile)] ** (source_gamma / monitor_gamma)
    yiq = lines @ profile.rgb_to_chroma.T
    phase = (profile.carrier_ang_freq * pos * (profile.real_active_time / width) +
             profile.chroma_phase)

    signal = np.zeros(length)
    signal[pos] = (yiq[..., 0] + yiq[..., 1] * np.sin(phase) +
                   yiq[..., 2] * np.cos(phase))
    return signal, bounds


def _line_phase_offsets(rng, count, phase_error, phase_noise):
    """Receiver phase error per scanline in radians."""
    noise = 2.0 * (rng.random(count) - 0.5) * phase_noise
    return np.radians(noise + phase_error)


def decode(profile, signal, active_width, bandwidth=1.0, crosstalk=0.0,
           resonance=1.0, phase_error=0.0, phase_noise=0.0, jitter=0.0,
           channels=CHANNEL_ALL, rng=None, boundary_points=None,
           source_gamma=SOURCE_GAMMA, monitor_gamma=MONITOR_GAMMA):
    """Decode an NTSC composite signal with FIR filters and product detection.

    Args:
        profile: NTSC FormatProfile used to encode the signal.
        signal: 1D composite signal from encode().
        active_width: Width of the decoded picture in pixels.
        bandwidth: Multiplier on every filter bandwidth (0.5-1 typical).
        crosstalk: Luma/chroma leakage, 0-1.
        resonance: Filter edge sharpness (1-20).
        phase_error: Static receiver phase error in degrees.
        phase_noise: Per-line random phase error amplitude in degrees.
        jitter: Horizontal sync jitter as a fraction of the width.
        channels: Bitmask of CHANNEL_LUMA/CHROMA1/CHROMA2 to keep.
        rng: numpy Generator or seed for phase noise and jitter.
        boundary_points: Scanline boundaries returned by encode(), if kept.

    Returns:
        RGBA picture (video_scanlines x active_width x 4, uint8).
    """
    _check_gamma(source_gamma, monitor_gamma)
    signal, sample_rate = check_decode_args(profile, signal, active_width,
                                            bandwidth, resonance, boundary_points)
    rng = as_generator(rng)
    n = len(signal)
    vlines = profile.video_scanlines
    sample_time = profile.real_active_time / active_width
    omega = profile.carrier_ang_freq

    main_fir = make_fir_filter(sample_rate, _HALF_WIDTH,
                               -profile.side_bandwidth * bandwidth,
                               profile.main_bandwidth * bandwidth, resonance)
    # I keeps the wide lower sideband, Q only the symmetric narrow band
    i_fir = make_fir_filter(sample_rate, _HALF_WIDTH,
                            -profile.chroma_bandwidth_lower * bandwidth,
                            profile.chroma_bandwidth_upper * bandwidth, resonance)
    q_fir = make_fir_filter(sample_rate, _HALF_WIDTH,
                            -profile.chroma_bandwidth_upper * bandwidth,
                            profile.chroma_bandwidth_upper * bandwidth, resonance)

    signal = fir_filter(signal, main_fir)
    chroma = fir_filter_crosstalk_shift(signal, i_fir, crosstalk, sample_time, omega)
    notch = make_notch_filter(shift_kernel(i_fir, sample_time, omega), 1.0 - crosstalk)
    luma = fir_filter(signal, notch)

    bounds = make_boundary_points(n, vlines)
    offsets = _line_phase_offsets(rng, vlines, phase_error, phase_noise)
    phase = (omega * np.arange(n) * sample_time + profile.chroma_phase +
             np.repeat(offsets, np.diff(bounds)))
    q = fir_filter(chroma * np.sin(phase) * 2.0, q_fir)
    i = fir_filter(chroma * np.cos(phase) * 2.0, i_fir)

    pos = line_positions(active_starts(profile, n, active_width), active_width, n,
                         line_jitter(rng, vlines, jitter, active_width))
    rgb = compose_rgb(profile, luma[pos], q[pos], i[pos], channels)
    return to_rgba(np.clip(rgb, 0.0, None) ** (monitor_gamma / source_gamma))


def decode_spectral(profile, signal, active_width, bandwidth=1.0, crosstalk=0.0,
                    resonance=1.0, phase_error=0.0, phase_noise=0.0, jitter=0.0,
                    channels=CHANNEL_ALL, rng=None, boundary_points=None,
                    source_gamma=SOURCE_GAMMA, monitor_gamma=MONITOR_GAMMA,
                    carrier_offset_hz=0.0):
    """Decode NTSC by masking the spectrum of the whole signal.

    Older alternative to decode(). Q and I are cut out of the positive
    half of the spectrum, slid down to baseband with shift_array_interp
    and read off the resulting analytic signal. Same arguments as
    decode(), plus carrier_offset_hz added to the baseband shift.
    """
    _check_gamma(source_gamma, monitor_gamma)
    signal, sample_rate = check_decode_args(profile, signal, active_width,
                                            bandwidth, resonance, boundary_points)
    rng = as_generator(rng)
    n = len(signal)
    vlines = profile.video_scanlines
    fc = profile.carrier_freq
    sample_time = profile.real_active_time / active_width
    lower = profile.chroma_bandwidth_lower * bandwidth
    upper = profile.chroma_bandwidth_upper * bandwidth
    strength = 1.0 - crosstalk

    spectrum = fourier_transform(signal)
    spectrum = band_pass_filter(
        spectrum, sample_rate,
        (profile.main_bandwidth - profile.side_bandwidth) / 2.0 * bandwidth,
        (profile.main_bandwidth + profile.side_bandwidth) * bandwidth, resonance)
    i_center = fc + (upper - lower) / 2.0
    q_band = band_pass_filter(spectrum, sample_rate, fc, 2.0 * upper, resonance,
                              strength, one_sided=True)
    i_band = band_pass_filter(spectrum, sample_rate, i_center, lower + upper,
                              resonance, strength, one_sided=True)

    # whole bins move in the spectrum, the leftover fraction of a bin is
    # taken out as a slow rotation after the inverse transform
    shift = (fc + carrier_offset_hz) * sample_time * n
    whole = round(shift)
    q_analytic = inverse_fourier_transform(shift_array_interp(q_band, whole))
    i_analytic = inverse_fourier_transform(shift_array_interp(i_band, whole))
    luma = inverse_fourier_transform(
        notch_filter(spectrum, sample_rate, i_center, lower + upper, resonance,
                     strength)).real

    bounds = make_boundary_points(n, vlines)
    offsets = _line_phase_offsets(rng, vlines, phase_error, phase_noise)
    residual = 2 * np.pi * (shift - whole) * np.arange(n) / n
    rotation = 2.0 * np.exp(-1j * (profile.chroma_phase + residual +
                                   np.repeat(offsets, np.diff(bounds))))
    q = -(q_analytic * rotation).imag
    i = (i_analytic * rotation).real

    pos = line_positions(active_starts(profile, n, active_width), active_width, n,
                         line_jitter(rng, vlines, jitter, active_width))
    rgb = compose_rgb(profile, luma[pos], q[pos], i[pos], channels)
    return to_rgba(np.clip(rgb, 0.0, None) ** (monitor_gamma / source_gamma))
