"""SECAM codec: Db and Dr frequency-modulated on alternate lines."""

import math

import numpy as np

from .filters import (
    make_fir_filter, fir_filter, fir_filter_crosstalk_shift, shift_kernel,
    make_notch_filter,
)
from .formats import (
    CHANNEL_ALL, as_generator, check_image, check_decode_args, signal_length,
    boundary_points as make_boundary_points, active_starts, field_order,
    line_positions, line_jitter, compose_rgb, to_rgba,
)

GAMMA = 2.8

# Per-component (Db, Dr) subcarrier parameters in Hz
SUBCARRIERS = (4250000.0, 4406250.0)
DEVIATIONS = (230000.0, 280000.0)
_BAND_LOWER = (2.0 * 506000.0, 2.0 * 350000.0)
_BAND_UPPER = (2.0 * 350000.0, 2.0 * 506000.0)

# Subcarrier lead-in starts this long into each line
SUBCARRIER_START_TIME = 0.4e-6
AMPLITUDE = 0.115

# Phase-locked loop constants
PLL_LOOP_GAIN = 0.115
PLL_FREQ_GAIN = 35.0

_MAIN_HALF_WIDTH = 80
_CHROMA_HALF_WIDTH = 128


def encode(profile, image):
    """Encode a picture into a SECAM composite signal.

    Even lines carry Db, odd lines Dr, each as a frequency deviation of
    its own subcarrier. The subcarrier starts shortly after the line
    begins so a receiver's demodulator can settle before active video.

    Returns:
        Tuple (signal, boundary_points).
    """
    rgb = check_image(profile, image)
    width = rgb.shape[1]
    length = signal_length(profile, width)
    bounds = make_boundary_points(length, profile.video_scanlines)
    starts = active_starts(profile, length, width)
    sample_time = profile.real_active_time / width
    lead = int((SUBCARRIER_START_TIME / profile.real_active_time) * width)

    ydbdr = (rgb[field_order(profile)] ** GAMMA) @ profile.rgb_to_chroma.T

    signal = np.zeros(length)
    for i in range(profile.video_scanlines):
        component = i % 2
        omega = 2 * math.pi * SUBCARRIERS[component]
        deviation = 2 * math.pi * DEVIATIONS[component]
        active = starts[i]
        first = min(bounds[i] + lead, active)
        precharge = active - first

        steps = np.concatenate([
            np.full(precharge, omega),
            omega + deviation * ydbdr[i, :, 1 + component],
        ]) * sample_time
        phase = np.cumsum(steps)  # restarts from zero every line
        signal[first:active] = AMPLITUDE * np.cos(phase[:precharge])
        signal[active:active + width] = (ydbdr[i, :, 0] +
                                         AMPLITUDE * np.cos(phase[precharge:]))
    return signal, bounds


def pll_demodulate(chroma, sample_time, carrier_ang_freq, deviation):
    """Track the instantaneous frequency of an FM subcarrier.

    A digital phase-locked loop: the phase detector mixes the input and
    its first difference against the loop's own oscillator, and the
    oscillator frequency follows changes in that error.

    Args:
        chroma: Band-limited subcarrier samples.
        sample_time: Seconds per sample.
        carrier_ang_freq: Rest frequency of the subcarrier (rad/s).
        deviation: Angular frequency change for a unit chroma value.

    Returns:
        Normalised deviation (the chroma value) for every sample.
    """
    out = []
    ang_freq = carrier_ang_freq
    phase = 0.0
    last = 0.0
    last_shift = 0.0
    for x in np.asarray(chroma, dtype=np.float64).tolist():
        deriv = x - last
        last = x
        out.append((ang_freq - carrier_ang_freq) / deviation)
        shift = (-(PLL_LOOP_GAIN * math.cos(phase) * deriv) -
                 (PLL_LOOP_GAIN * ang_freq * math.sin(phase) * last))
        ang_freq += PLL_FREQ_GAIN * (shift - last_shift)
        phase = math.fmod(phase + sample_time * ang_freq, 2 * math.pi)
        last_shift = shift
    return np.array(out)


def component_lines(video_scanlines):
    """Line each scanline reads its Db and Dr from.

    A line only carries one component; the other comes from its
    neighbour in transmission order (the line after for even lines, the
    line before for odd ones).

    Returns:
        Tuple (db_lines, dr_lines) of int arrays.
    """
    i = np.arange(video_scanlines)
    even = i % 2 == 0
    db_lines = np.where(even, i, i - 1)
    dr_lines = np.where(even, i + 1, i)
    # an odd line count leaves the last (even) line without a successor
    dr_lines = np.where(dr_lines >= video_scanlines, i - 1, dr_lines)
    return db_lines, dr_lines


def decode(profile, signal, active_width, bandwidth=1.0, crosstalk=0.0,
           resonance=1.0, phase_error=0.0, phase_noise=0.0, jitter=0.0,
           channels=CHANNEL_ALL, rng=None, boundary_points=None):
    """Decode a SECAM composite signal with one PLL per chroma component.

    Arguments match ntsc.decode(). FM chroma has no phase reference, so
    phase_error and phase_noise are accepted for a uniform interface and
    have no effect.

    Returns:
        RGBA picture (video_scanlines x active_width x 4, uint8).
    """
    signal, sample_rate = check_decode_args(profile, signal, active_width,
                                            bandwidth, resonance, boundary_points)
    rng = as_generator(rng)
    n = len(signal)
    vlines = profile.video_scanlines
    sample_time = profile.real_active_time / active_width

    main_fir = make_fir_filter(sample_rate, _MAIN_HALF_WIDTH,
                               -profile.side_bandwidth * bandwidth,
                               profile.main_bandwidth * bandwidth, resonance)
    col_fir = make_fir_filter(sample_rate, _CHROMA_HALF_WIDTH,
                              -profile.chroma_bandwidth_lower * bandwidth,
                              profile.chroma_bandwidth_upper * bandwidth, resonance)

    signal = fir_filter(signal, main_fir)
    notch = make_notch_filter(
        shift_kernel(col_fir, sample_time, profile.carrier_ang_freq), 1.0 - crosstalk)
    luma = fir_filter(signal, notch)

    demodulated = []
    for component in (0, 1):
        omega = 2 * math.pi * SUBCARRIERS[component]
        fir = make_fir_filter(sample_rate, _CHROMA_HALF_WIDTH,
                              -_BAND_LOWER[component] * bandwidth,
                              _BAND_UPPER[component] * bandwidth, resonance)
        band = fir_filter_crosstalk_shift(signal, fir, crosstalk, sample_time, omega)
        values = pll_demodulate(band, sample_time, omega,
                                2 * math.pi * DEVIATIONS[component])
        demodulated.append(fir_filter(values, fir))
    db_sig, dr_sig = demodulated

    starts = active_starts(profile, n, active_width)
    offsets = line_jitter(rng, vlines, jitter, active_width)
    db_lines, dr_lines = component_lines(vlines)
    y = luma[line_positions(starts, active_width, n, offsets)]
    db = db_sig[line_positions(starts[db_lines], active_width, n, offsets)]
    dr = dr_sig[line_positions(starts[dr_lines], active_width, n, offsets)]

    rgb = compose_rgb(profile, y, db, dr, channels)
    return to_rgba(np.clip(rgb, 0.0, None) ** (1.0 / GAMMA))
