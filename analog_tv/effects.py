"""Transmission-path distortions applied between encode and decode."""

import numpy as np

from .formats import as_generator


def add_noise(amplitude, rng=None):
    """Uniform white noise (snow).

    Args:
        amplitude: Peak noise level in signal units (0.05 = subtle,
            0.3 = heavy snow).
        rng: numpy Generator or seed; a fresh one is made if omitted.

    Returns:
        Transform function: fn(signal, sample_rate) -> signal.
    """
    rng = as_generator(rng)

    def transform(signal, sample_rate):
        return signal + (2.0 * rng.random(len(signal)) - 1.0) * amplitude

    return transform


def add_distortion(ramp):
    """Soft clipping around mid level, like an overdriven amplifier.

    Maps x to 0.5 + tanh(ramp * (x - 0.5)) / (2 * tanh(ramp / 2)), which
    keeps 0, 0.5 and 1 in place and squashes everything beyond them.

    Args:
        ramp: Steepness; 0 leaves the signal untouched.

    Returns:
        Transform function: fn(signal, sample_rate) -> signal.
    """
    def transform(signal, sample_rate):
        if ramp == 0:
            return signal
        return 0.5 + np.tanh(ramp * (signal - 0.5)) / (2.0 * np.tanh(ramp / 2.0))

    return transform


def add_ghosting(amplitude, delay_us=2.0):
    """Multipath ghost, a delayed and attenuated copy of the signal.

    The delay is converted to samples with the rate handed to the
    transform, so the same setting lands at the same picture position for
    every standard and width: 2 us is about 49 samples at the NTSC working
    width and about 59 at the PAL/SECAM one.

    Args:
        amplitude: Ghost strength 0-1.
        delay_us: Echo delay in microseconds.

    Returns:
        Transform function: fn(signal, sample_rate) -> signal.
    """
    def transform(signal, sample_rate):
        lag = int(round(delay_us * 1e-6 * sample_rate))
        if not 0 < lag < len(signal):
            return signal
        echo = np.concatenate((np.zeros(lag), signal[:len(signal) - lag]))
        return signal + amplitude * echo

    return transform
