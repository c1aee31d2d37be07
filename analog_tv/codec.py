"""Encode/decode entry points that dispatch on a profile's standard."""

import logging

from . import ntsc, pal, secam

logger = logging.getLogger(__name__)

CODECS = {
    'NTSC': ntsc,
    'PAL': pal,
    'SECAM': secam,
}


def _codec(profile):
    try:
        return CODECS[profile.standard]
    except KeyError:
        raise ValueError(f"No codec for standard {profile.standard!r}") from None


def encode(profile, image, **kwargs):
    """Encode a picture with the codec matching profile.standard.

    Args:
        profile: FormatProfile from build_profile().
        image: (video_scanlines, width, 3|4) uint8 RGB(A) picture.
        **kwargs: Codec-specific options (NTSC gamma settings).

    Returns:
        Tuple (signal, boundary_points).
    """
    codec = _codec(profile)
    signal, bounds = codec.encode(profile, image, **kwargs)
    logger.debug("%s encode: %d px wide -> %d samples",
                 profile.standard, len(image[0]), len(signal))
    return signal, bounds


def decode(profile, signal, active_width, **kwargs):
    """Decode a signal with the codec matching profile.standard.

    See ntsc.decode() for the keyword arguments shared by all codecs.

    Returns:
        RGBA picture (video_scanlines x active_width x 4, uint8).
    """
    codec = _codec(profile)
    logger.debug("%s decode: %d samples -> %d px wide",
                 profile.standard, len(signal), active_width)
    return codec.decode(profile, signal, active_width, **kwargs)


def sample_rate(profile, width):
    """Effective sample rate of a signal encoded at the given width."""
    return width / profile.real_active_time


def roundtrip(profile, image, pipeline=None, rng=None, **decode_kwargs):
    """Encode, optionally distort, and decode a picture at its own width.

    Args:
        profile: FormatProfile.
        image: Picture already resampled to the profile's line count.
        pipeline: Optional SignalPipeline applied between encode and decode.
        rng: numpy Generator or seed shared by the effects and the decoder.
        **decode_kwargs: Passed to decode().

    Returns:
        RGBA picture.
    """
    width = len(image[0])
    signal, bounds = encode(profile, image)
    if pipeline is not None and len(pipeline):
        signal = pipeline.process(signal, sample_rate(profile, width))
    return decode(profile, signal, width, rng=rng, boundary_points=bounds,
                  **decode_kwargs)
