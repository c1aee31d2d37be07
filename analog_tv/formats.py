"""Broadcast standard profiles and the scanline timing shared by all codecs."""

import dataclasses
import math

import numpy as np

# Channel selection bits understood by every decoder
CHANNEL_LUMA = 0x1
CHANNEL_CHROMA1 = 0x2
CHANNEL_CHROMA2 = 0x4
CHANNEL_ALL = CHANNEL_LUMA | CHANNEL_CHROMA1 | CHANNEL_CHROMA2

STANDARDS = ('NTSC', 'PAL', 'SECAM')


@dataclasses.dataclass(frozen=True)
class FormatProfile:
    """Constants of one broadcast standard plus the timing derived from them.

    chroma1/chroma2 are Q/I for NTSC, U/V for PAL and Db/Dr for SECAM.
    All frequencies are in Hz, times in seconds, chroma_phase in radians.
    Instances are immutable; use with_interlace() to switch scan mode.
    """

    standard: str
    r_to_y: float
    g_to_y: float
    b_to_y: float
    chroma1_max: float
    chroma2_max: float
    chroma_phase: float
    main_bandwidth: float
    side_bandwidth: float
    chroma_bandwidth_lower: float
    chroma_bandwidth_upper: float
    carrier_freq: float
    scanlines: int
    video_scanlines: int
    nominal_framerate: float
    active_time: float
    interlaced: bool = True

    def __post_init__(self):
        for name in ('main_bandwidth', 'side_bandwidth',
                     'chroma_bandwidth_lower', 'chroma_bandwidth_upper',
                     'carrier_freq', 'nominal_framerate', 'active_time'):
            if getattr(self, name) <= 0:
                raise ValueError(f"{self.standard}: {name} must be positive, "
                                 f"got {getattr(self, name)}")
        if self.scanlines <= 0 or self.video_scanlines <= 0:
            raise ValueError(f"{self.standard}: scanline counts must be positive")
        if self.video_scanlines > self.scanlines:
            raise ValueError(f"{self.standard}: {self.video_scanlines} video "
                             f"scanlines exceed {self.scanlines} total")
        if self.chroma1_max == 0 or self.chroma2_max == 0:
            raise ValueError(f"{self.standard}: chroma maxima must be non-zero")
        if self.r_to_y >= 1 or self.b_to_y >= 1 or self.g_to_y == 0:
            raise ValueError(f"{self.standard}: invalid luma coefficients")

    def with_interlace(self, interlaced):
        """Copy of this profile with a different scan mode."""
        return dataclasses.replace(self, interlaced=bool(interlaced))

    @property
    def framerate(self):
        """Frames per second as reported to the viewer (fields pair up)."""
        if self.interlaced:
            return self.nominal_framerate / 2
        return self.nominal_framerate

    @property
    def frame_time(self):
        return (2 if self.interlaced else 1) / self.nominal_framerate

    @property
    def scanline_time(self):
        return (2 if self.interlaced else 1) / (self.scanlines * self.nominal_framerate)

    @property
    def real_active_time(self):
        return self.active_time / (1 if self.interlaced else 2)

    @property
    def carrier_ang_freq(self):
        return 2 * math.pi * self.carrier_freq

    @property
    def rgb_to_chroma(self):
        """3x3 matrix mapping gamma-corrected RGB to (Y, chroma1, chroma2).

        The chroma pair is the colour-difference pair (b-Y)/(1-B) and
        (r-Y)/(1-R), scaled by the chroma maxima and rotated by chroma_phase.
        """
        R, G, B = self.r_to_y, self.g_to_y, self.b_to_y
        U, V = self.chroma1_max, self.chroma2_max
        c, s = math.cos(self.chroma_phase), math.sin(self.chroma_phase)
        return np.array([
            [R, G, B],
            [-(U * c * R / (1 - B)) + s * V,
             -(U * c * G / (1 - B)) - (V * s * G / (1 - R)),
             U * c - (V * s * B / (1 - R))],
            [V * c + (U * s * R / (1 - B)),
             -(V * c * G / (1 - R)) + (U * s * G / (1 - B)),
             -(V * c * B / (1 - R)) - U * s],
        ])

    @property
    def chroma_to_rgb(self):
        """Closed-form inverse of rgb_to_chroma."""
        R, G, B = self.r_to_y, self.g_to_y, self.b_to_y
        U, V = self.chroma1_max, self.chroma2_max
        c, s = math.cos(self.chroma_phase), math.sin(self.chroma_phase)
        return np.array([
            [1.0, s * (1 - R) / V, c * (1 - R) / V],
            [1.0,
             -(B * c * (1 - B) / (U * G)) - (R * s * (1 - R) / (V * G)),
             -(R * c * (1 - R) / (V * G)) + (B * s * (1 - B) / (U * G))],
            [1.0, c * (1 - B) / U, -s * (1 - B) / U],
        ])


_PROFILES = {
    'NTSC': dict(
        r_to_y=0.299, g_to_y=0.587, b_to_y=0.114,
        chroma1_max=0.436, chroma2_max=0.615,
        chroma_phase=math.radians(33.0),
        main_bandwidth=4.2e6, side_bandwidth=1e6,
        chroma_bandwidth_lower=1.3e6, chroma_bandwidth_upper=0.62e6,
        carrier_freq=3579545.0,
        scanlines=525, video_scanlines=480,
        nominal_framerate=59.94005994, active_time=5.26555e-5,
    ),
    'PAL': dict(
        r_to_y=0.299, g_to_y=0.587, b_to_y=0.114,
        chroma1_max=0.436, chroma2_max=0.615,
        chroma_phase=0.0,
        main_bandwidth=5e6, side_bandwidth=0.75e6,
        chroma_bandwidth_lower=1.3e6, chroma_bandwidth_upper=0.57e6,
        carrier_freq=4433618.75,
        scanlines=625, video_scanlines=576,
        nominal_framerate=50.0, active_time=5.195e-5,
    ),
    'SECAM': dict(
        r_to_y=0.299, g_to_y=0.587, b_to_y=0.114,
        chroma1_max=1.333, chroma2_max=-1.333,
        chroma_phase=0.0,
        main_bandwidth=5e6, side_bandwidth=0.75e6,
        chroma_bandwidth_lower=1.3e6, chroma_bandwidth_upper=0.57e6,
        carrier_freq=4328125.0,
        scanlines=625, video_scanlines=576,
        nominal_framerate=50.0, active_time=5.195e-5,
    ),
}


def build_profile(standard, interlaced=True):
    """Build the profile of a broadcast standard.

    Args:
        standard: 'NTSC', 'PAL' or 'SECAM' (case-insensitive).
        interlaced: Interlaced (True) or progressive scan.

    Returns:
        FormatProfile.
    """
    key = str(standard).upper()
    if key not in _PROFILES:
        raise ValueError(f"Unknown standard: {standard} "
                         f"(expected one of {', '.join(STANDARDS)})")
    return FormatProfile(standard=key, interlaced=bool(interlaced),
                         **_PROFILES[key])


def signal_length(profile, width):
    """Number of samples Encode produces for an image of the given width."""
    if width <= 0:
        raise ValueError(f"Width must be positive, got {width}")
    return int(width * profile.video_scanlines *
               (profile.scanline_time / profile.real_active_time))


def boundary_points(length, video_scanlines):
    """Partition a signal into one segment per scanline.

    Returns:
        int64 array of video_scanlines + 1 points, 0 first and length last.
    """
    i = np.arange(video_scanlines + 1, dtype=np.int64)
    return (i * length) // video_scanlines


def active_starts(profile, length, width):
    """Absolute sample index where each scanline's active video begins."""
    porch = ((profile.scanline_time - profile.real_active_time) /
             (2 * profile.real_active_time)) * width
    i = np.arange(profile.video_scanlines, dtype=np.float64)
    return (i * length / profile.video_scanlines + porch).astype(np.int64)


def field_order(profile):
    """Image row carried by each transmitted scanline.

    Interlaced pictures send the even rows as the first field and the odd
    rows as the second.
    """
    i = np.arange(profile.video_scanlines)
    if not profile.interlaced:
        return i
    polarity = (i * 2 >= profile.video_scanlines).astype(np.int64)
    return (i * 2 + polarity) % profile.video_scanlines


def line_jitter(rng, count, jitter, width):
    """Per-line horizontal sync error in samples, uniform in +/- jitter*width."""
    offsets = jitter * 2.0 * (rng.random(count) - 0.5) * width
    return offsets.astype(np.int64)


def as_generator(rng):
    """Accept a Generator, a seed or None and return a Generator."""
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def check_image(profile, image):
    """Validate an input picture and return its RGB planes as floats in [0, 1]."""
    image = np.asarray(image)
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise ValueError(f"Expected an (H, W, 3|4) image, got shape {image.shape}")
    if image.shape[0] != profile.video_scanlines:
        raise ValueError(f"{profile.standard} needs {profile.video_scanlines} "
                         f"lines, image has {image.shape[0]}")
    if image.shape[1] == 0:
        raise ValueError("Image has zero width")
    return image[:, :, :3].astype(np.float64) / 255.0


def to_rgba(rgb):
    """Clamp float RGB in [0, 1] to an opaque 8-bit RGBA picture."""
    height, width = rgb.shape[:2]
    out = np.empty((height, width, 4), dtype=np.uint8)
    out[:, :, :3] = (np.clip(rgb, 0.0, 1.0) * 255.0).astype(np.uint8)
    out[:, :, 3] = 255
    return out


def line_positions(starts, width, length, offsets=None):
    """Sample index of every active pixel, one row per scanline.

    Indices pushed outside the signal by jitter are clamped to its ends.
    """
    starts = np.asarray(starts, dtype=np.int64)
    if offsets is not None:
        starts = starts + offsets
    pos = starts[:, None] + np.arange(width, dtype=np.int64)
    return np.clip(pos, 0, length - 1)


def check_decode_args(profile, signal, active_width, bandwidth, resonance,
                      bounds=None):
    """Validate shared decoder arguments.

    Returns:
        Tuple (signal as float64 array, sample rate in Hz).
    """
    if active_width <= 0:
        raise ValueError(f"Active width must be positive, got {active_width}")
    if bandwidth <= 0:
        raise ValueError(f"Bandwidth multiplier must be positive, got {bandwidth}")
    if resonance <= 0:
        raise ValueError(f"Resonance must be positive, got {resonance}")
    signal = np.asarray(signal, dtype=np.float64)
    if signal.ndim != 1 or len(signal) < profile.video_scanlines:
        raise ValueError(f"Signal too short for {profile.video_scanlines} scanlines")
    if bounds is not None:
        expected = boundary_points(len(signal), profile.video_scanlines)
        if not np.array_equal(np.asarray(bounds), expected):
            raise ValueError("Boundary points do not match this signal")
    expected_length = signal_length(profile, active_width)
    if len(signal) != expected_length:
        raise ValueError(
            f"Signal of {len(signal)} samples was not encoded at width "
            f"{active_width} (expected {expected_length} samples)")
    # the signal holds only the video lines, so scale up to the full frame
    sample_rate = (len(signal) * (profile.scanlines / profile.video_scanlines) /
                   profile.frame_time)
    return signal, sample_rate


def compose_rgb(profile, luma, chroma1, chroma2, channels=CHANNEL_ALL):
    """Rebuild gamma-encoded RGB rows from decoded components.

    Inputs are (video_scanlines, width) arrays in transmission order; the
    result is (video_scanlines, width, 3) in picture order. Components whose
    channel bit is unset are zeroed before the inverse matrix.
    """
    components = []
    for flag, values in ((CHANNEL_LUMA, luma), (CHANNEL_CHROMA1, chroma1),
                         (CHANNEL_CHROMA2, chroma2)):
        components.append(values if channels & flag else np.zeros_like(values))
    lines = np.stack(components, axis=-1) @ profile.chroma_to_rgb.T
    rgb = np.empty_like(lines)
    rgb[field_order(profile)] = lines
    return rgb
