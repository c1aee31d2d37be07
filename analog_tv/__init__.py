"""Analog TV signal simulator: NTSC, PAL and SECAM composite video."""

from .formats import (
    FormatProfile, build_profile, boundary_points,
    CHANNEL_LUMA, CHANNEL_CHROMA1, CHANNEL_CHROMA2, CHANNEL_ALL,
)
from .codec import encode, decode, roundtrip
from .pipeline import SignalPipeline
from .signal_io import export_signal, import_signal, export_wav
from .colorbars import generate_colorbars, generate_ebu_bars, bars_for
from .effects import add_noise, add_distortion, add_ghosting
from .settings import DecodeSettings, WORKING_WIDTHS, channel_flags
