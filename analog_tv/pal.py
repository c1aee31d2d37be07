"""PAL codec: YUV quadrature modulation with V switched every other line."""

import numpy as np

from .filters import (
    make_fir_filter, fir_filter, fir_filter_crosstalk_shift, shift_kernel,
    make_notch_filter, srgb_to_linear, linear_to_srgb,
)
from .formats import (
    CHANNEL_ALL, as_generator, check_image, check_decode_args, signal_length,
    boundary_points as make_boundary_points, active_starts, field_order,
    line_positions, line_jitter, compose_rgb, to_rgba,
)

GAMMA = 2.8

_HALF_WIDTH = 256


def _line_alternation(count):
    """V sign on each transmitted line: +1 on even lines, -1 on odd ones."""
    return np.where(np.arange(count) % 2 == 1, -1.0, 1.0)


def encode(profile, image):
    """Encode a picture into a PAL composite signal.

    The picture is taken as sRGB, linearised and pre-corrected for a
    2.8 gamma display before conversion to YUV.

    Returns:
        Tuple (signal, boundary_points).
    """
    rgb = check_image(profile, image)
    width = rgb.shape[1]
    length = signal_length(profile, width)
    bounds = make_boundary_points(length, profile.video_scanlines)
    pos = line_positions(active_starts(profile, length, width), width, length)

    lines = srgb_to_linear(rgb[field_order(profile)]) ** (1.0 / GAMMA)
    yuv = lines @ profile.rgb_to_chroma.T
    phase = profile.carrier_ang_freq * pos * (profile.real_active_time / width)
    alt = _line_alternation(profile.video_scanlines)[:, None]

    signal = np.zeros(length)
    signal[pos] = (yuv[..., 0] + yuv[..., 1] * np.sin(phase) +
                   alt * yuv[..., 2] * np.cos(phase))
    return signal, bounds


def delay_line(u_raw, v_raw, field_starts=(0,)):
    """Average each line's demodulated chroma with the line before it.

    Adding consecutive lines cancels the V component out of U and
    subtracting them (with the line's switch sign) cancels U out of V, so
    a phase error only desaturates instead of shifting hue. The first line
    of each field has no predecessor and keeps half its raw value.

    Args:
        u_raw: Demodulated U, one row per transmitted line.
        v_raw: Demodulated V (still sign-switched), same shape.
        field_starts: Indices of the lines that open a field.

    Returns:
        Tuple (u, v) of arrays shaped like the inputs.
    """
    u_raw = np.asarray(u_raw, dtype=np.float64)
    v_raw = np.asarray(v_raw, dtype=np.float64)
    count = len(u_raw)
    shape = (count,) + (1,) * (u_raw.ndim - 1)
    alt = np.where(np.arange(count) % 2 == 0, -1.0, 1.0).reshape(shape)

    prev_u = np.roll(u_raw, 1, axis=0)
    prev_v = np.roll(v_raw, 1, axis=0)
    u = (prev_u + u_raw) / 2.0
    v = alt * (prev_v - v_raw) / 2.0

    first = [i for i in field_starts if 0 <= i < count]
    u[first] = u_raw[first] / 2.0
    v[first] = v_raw[first] / 2.0
    return u, v


def decode(profile, signal, active_width, bandwidth=1.0, crosstalk=0.0,
           resonance=1.0, phase_error=0.0, phase_noise=0.0, jitter=0.0,
           channels=CHANNEL_ALL, rng=None, boundary_points=None):
    """Decode a PAL composite signal through a delay-line receiver.

    Arguments match ntsc.decode() (without the gamma options).

    Returns:
        RGBA picture (video_scanlines x active_width x 4, uint8).
    """
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
    col_fir = make_fir_filter(sample_rate, _HALF_WIDTH,
                              -profile.chroma_bandwidth_lower * bandwidth,
                              profile.chroma_bandwidth_upper * bandwidth, resonance)

    signal = fir_filter(signal, main_fir)
    chroma = fir_filter_crosstalk_shift(signal, col_fir, crosstalk, sample_time, omega)
    notch = make_notch_filter(shift_kernel(col_fir, sample_time, omega), 1.0 - crosstalk)
    luma = fir_filter(signal, notch)

    bounds = make_boundary_points(n, vlines)
    offsets = np.radians(2.0 * (rng.random(vlines) - 0.5) * phase_noise + phase_error)
    phase = omega * np.arange(n) * sample_time + np.repeat(offsets, np.diff(bounds))
    u_pre = fir_filter(chroma * np.sin(phase) * 2.0, col_fir)
    v_pre = fir_filter(chroma * np.cos(phase) * 2.0, col_fir)

    # the delay line works on the undisturbed line windows; sync jitter
    # only moves where the display reads them back
    starts = active_starts(profile, n, active_width)
    window = line_positions(starts, active_width, n)
    field_starts = (0, vlines // 2) if profile.interlaced else (0,)
    u_lines, v_lines = delay_line(u_pre[window], v_pre[window], field_starts)
    u_sig = np.zeros(n)
    v_sig = np.zeros(n)
    u_sig[window] = u_lines
    v_sig[window] = v_lines

    pos = line_positions(starts, active_width, n,
                         line_jitter(rng, vlines, jitter, active_width))
    rgb = compose_rgb(profile, luma[pos], u_sig[pos], v_sig[pos], channels)
    return to_rgba(linear_to_srgb(np.clip(rgb, 0.0, None) ** GAMMA))
