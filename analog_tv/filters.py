"""FIR and spectral filters shared by the analog TV codecs."""

import numpy as np
from scipy.signal import firwin
from scipy.fft import fft, ifft, fftfreq, rfft, irfft, next_fast_len


def _kaiser_beta(resonance):
    """Kaiser window shape for a given resonance (higher = sharper, more ringing)."""
    return 12.0 / resonance


def make_fir_filter(sample_rate, half_width, lower_hz, upper_hz, resonance):
    """Design a zero-phase windowed-sinc FIR filter for a frequency band.

    The kernel is symmetric with ``2 * half_width + 1`` taps, centred at
    index ``half_width``. A band whose lower edge is at or below zero
    straddles DC, which a real zero-phase kernel can only express as a
    low-pass reaching the farther of the two edges.

    Args:
        sample_rate: Sample rate in Hz.
        half_width: Taps on each side of the centre tap.
        lower_hz: Lower band edge in Hz (may be negative).
        upper_hz: Upper band edge in Hz.
        resonance: Sharpness of the band edges. Larger values give a
            steeper transition with stronger passband ringing.

    Returns:
        FIR kernel (1D float64 array).
    """
    if sample_rate <= 0:
        raise ValueError(f"Sample rate must be positive, got {sample_rate}")
    if half_width <= 0:
        raise ValueError(f"Filter half width must be positive, got {half_width}")
    if resonance <= 0:
        raise ValueError(f"Resonance must be positive, got {resonance}")
    if upper_hz <= lower_hz:
        raise ValueError(f"Empty band: {lower_hz} Hz to {upper_hz} Hz")

    num_taps = 2 * half_width + 1
    nyquist = sample_rate / 2
    window = ('kaiser', _kaiser_beta(resonance))

    if lower_hz <= 0:
        cutoff = max(-lower_hz, upper_hz)
        if cutoff >= nyquist:
            return _impulse(half_width)
        return firwin(num_taps, cutoff, window=window, fs=sample_rate)

    if lower_hz >= nyquist:
        return np.zeros(num_taps)
    if upper_hz >= nyquist:
        return firwin(num_taps, lower_hz, window=window, pass_zero=False,
                      fs=sample_rate)
    return firwin(num_taps, [lower_hz, upper_hz], window=window,
                  pass_zero=False, fs=sample_rate)


def _impulse(half_width):
    kernel = np.zeros(2 * half_width + 1)
    kernel[half_width] = 1.0
    return kernel


def fir_filter(signal, kernel):
    """Convolve a signal with a centred FIR kernel, keeping its length.

    Samples beyond either end of the buffer are treated as zero. For the
    symmetric kernels produced by make_fir_filter this is zero-phase, so
    filtering never shifts the picture horizontally.
    """
    n = len(signal)
    half = len(kernel) // 2
    fft_n = next_fast_len(n + len(kernel) - 1)
    X = rfft(signal, n=fft_n)
    H = rfft(kernel, n=fft_n)
    return irfft(X * H, n=fft_n)[half:half + n]


def shift_kernel(kernel, sample_time, carrier_ang_freq):
    """Translate a baseband prototype kernel up to a carrier frequency.

    Modulating by ``2cos(wnT)`` moves the passband to +/- the carrier with
    unity gain, turning a low-pass into a band-pass around the carrier.
    """
    half = len(kernel) // 2
    n = np.arange(-half, len(kernel) - half)
    return kernel * 2.0 * np.cos(carrier_ang_freq * sample_time * n)


def fir_filter_crosstalk_shift(signal, kernel, crosstalk, sample_time,
                               carrier_ang_freq):
    """Filter around a carrier, letting some baseband content leak through.

    Args:
        signal: 1D input signal.
        kernel: Baseband prototype kernel (see make_fir_filter).
        crosstalk: Share of the unshifted baseband response, 0-1.
        sample_time: Seconds per sample.
        carrier_ang_freq: Carrier angular frequency in rad/s.

    Returns:
        Filtered signal, same length as the input.
    """
    if not 0.0 <= crosstalk <= 1.0:
        raise ValueError(f"Crosstalk must be within [0, 1], got {crosstalk}")
    shifted = shift_kernel(kernel, sample_time, carrier_ang_freq)
    return fir_filter(signal, (1.0 - crosstalk) * shifted + crosstalk * kernel)


def make_notch_filter(kernel, strength=1.0):
    """Complement of a band-pass kernel: passes everything except its band."""
    notch = -strength * np.asarray(kernel, dtype=np.float64)
    notch[len(notch) // 2] += 1.0
    return notch


def fourier_transform(signal):
    """Complex DFT of a real or complex signal."""
    return fft(signal)


def inverse_fourier_transform(spectrum):
    """Inverse of fourier_transform (complex result)."""
    return ifft(spectrum)


def _band_mask(n, sample_rate, center_hz, width_hz, resonance, one_sided):
    if width_hz <= 0:
        raise ValueError(f"Bandwidth must be positive, got {width_hz}")
    if resonance <= 0:
        raise ValueError(f"Resonance must be positive, got {resonance}")
    freqs = fftfreq(n, d=1.0 / sample_rate)
    lower_hz = center_hz - width_hz / 2
    if one_sided:
        x = (freqs - center_hz) / (width_hz / 2)
    elif lower_hz <= 0:
        # band reaches through DC: low-pass out to the farther edge
        x = np.abs(freqs) / max(-lower_hz, center_hz + width_hz / 2)
    else:
        x = (np.abs(freqs) - center_hz) / (width_hz / 2)
    # Butterworth-shaped magnitude, resonance acts as the filter order
    mask = 1.0 / (1.0 + np.abs(x) ** (2.0 * resonance))
    if one_sided:
        mask[freqs < 0] = 0.0
    return mask


def band_pass_filter(spectrum, sample_rate, center_hz, width_hz, resonance,
                     strength=1.0, one_sided=False):
    """Keep a frequency band of a DFT spectrum.

    Args:
        spectrum: Output of fourier_transform.
        sample_rate: Sample rate of the transformed signal in Hz.
        center_hz: Band centre.
        width_hz: Band width between the half-gain points.
        resonance: Rolloff order of the band edges.
        strength: 1 keeps only the band, 0 leaves the spectrum untouched.
        one_sided: Drop negative frequencies, giving an analytic signal.

    Returns:
        Filtered spectrum (new array).
    """
    mask = _band_mask(len(spectrum), sample_rate, center_hz, width_hz,
                      resonance, one_sided)
    return spectrum * (strength * mask + (1.0 - strength))


def notch_filter(spectrum, sample_rate, center_hz, width_hz, resonance,
                 strength=1.0):
    """Remove a frequency band (both signs) from a DFT spectrum."""
    mask = _band_mask(len(spectrum), sample_rate, center_hz, width_hz,
                      resonance, one_sided=False)
    return spectrum * (1.0 - strength * mask)


def shift_array_interp(spectrum, shift_bins):
    """Shift a spectrum down by a fractional number of bins.

    Output bin k takes the (linearly interpolated) value at input position
    ``k + shift_bins``, wrapping around the DFT so that frequencies below
    the shift land in the negative-frequency bins.
    """
    spectrum = np.asarray(spectrum, dtype=np.complex128)
    n = len(spectrum)
    pos = np.arange(n) + shift_bins
    lo = np.floor(pos).astype(np.intp)
    frac = pos - lo
    return (spectrum[lo % n] * (1.0 - frac) +
            spectrum[(lo + 1) % n] * frac)


def srgb_to_linear(values):
    """sRGB-encoded values in [0, 1] to linear light."""
    values = np.asarray(values, dtype=np.float64)
    return np.where(values <= 0.04045, values / 12.92,
                    ((np.maximum(values, 0.04045) + 0.055) / 1.055) ** 2.4)


def linear_to_srgb(values):
    """Linear light in [0, 1] to sRGB encoding (inverse of srgb_to_linear)."""
    values = np.asarray(values, dtype=np.float64)
    return np.where(values <= 0.0031308, values * 12.92,
                    1.055 * np.maximum(values, 0.0031308) ** (1 / 2.4) - 0.055)
