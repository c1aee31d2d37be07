"""Working resolutions, channel presets and decoder parameter ranges."""

import dataclasses

from .formats import CHANNEL_LUMA, CHANNEL_CHROMA1, CHANNEL_CHROMA2

# Horizontal resolution pictures are resampled to before encoding
WORKING_WIDTHS = {
    'NTSC': 1280,
    'PAL': 1536,
    'SECAM': 1536,
}

CHANNEL_PRESETS = {
    'YUV': CHANNEL_LUMA | CHANNEL_CHROMA1 | CHANNEL_CHROMA2,
    'Y': CHANNEL_LUMA,
    'U': CHANNEL_CHROMA1,
    'V': CHANNEL_CHROMA2,
    'UV': CHANNEL_CHROMA1 | CHANNEL_CHROMA2,
    'YU': CHANNEL_LUMA | CHANNEL_CHROMA1,
    'YV': CHANNEL_LUMA | CHANNEL_CHROMA2,
}

# (min, max) accepted for each decoder parameter
RANGES = {
    'bandwidth': (0.5, 1.0),
    'crosstalk': (0.0, 1.0),
    'resonance': (1.0, 20.0),
    'phase_error': (-180.0, 180.0),
    'phase_noise': (0.0, 180.0),
    'jitter': (0.0, 0.005),
}


def working_width(standard):
    try:
        return WORKING_WIDTHS[standard.upper()]
    except KeyError:
        raise ValueError(f"Unknown standard: {standard}") from None


def channel_flags(preset):
    """Bitmask for a channel preset name such as 'YUV' or 'Y'."""
    try:
        return CHANNEL_PRESETS[preset.upper()]
    except KeyError:
        raise ValueError(f"Unknown channel preset: {preset} "
                         f"(expected one of {', '.join(CHANNEL_PRESETS)})") from None


@dataclasses.dataclass(frozen=True)
class DecodeSettings:
    """Receiver settings, validated against RANGES."""

    bandwidth: float = 1.0
    crosstalk: float = 0.0
    resonance: float = 5.0
    phase_error: float = 0.0
    phase_noise: float = 0.0
    jitter: float = 0.0
    channels: str = 'YUV'

    def validate(self):
        for name, (low, high) in RANGES.items():
            value = getattr(self, name)
            if not low <= value <= high:
                raise ValueError(f"{name} must be within [{low}, {high}], got {value}")
        channel_flags(self.channels)
        return self

    def as_kwargs(self):
        """Keyword arguments for codec.decode()."""
        self.validate()
        kwargs = {name: getattr(self, name) for name in RANGES}
        kwargs['channels'] = channel_flags(self.channels)
        return kwargs
