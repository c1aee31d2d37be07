"""Shared fixtures for analog TV simulator tests."""

import numpy as np
import pytest

from analog_tv.formats import build_profile

# Narrower than the working widths to keep tests quick, but still wide
# enough for every subcarrier to sit below Nyquist. Too narrow for SECAM
# chroma though: its FM loop drifts on blue at this rate, so SECAM colour
# is checked at the working width.
TEST_WIDTH = 640


def flat_image(profile, color, width=TEST_WIDTH):
    """Solid-colour picture on a profile's line grid."""
    return np.full((profile.video_scanlines, width, 3), color, dtype=np.uint8)


def interior(image):
    """Centre of a picture, away from line starts and field edges."""
    h, w = image.shape[:2]
    return image[h // 4:3 * h // 4, w // 4:3 * w // 4]


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def ntsc():
    return build_profile('NTSC')


@pytest.fixture
def pal():
    return build_profile('PAL')


@pytest.fixture
def secam():
    return build_profile('SECAM')


@pytest.fixture(params=['NTSC', 'PAL', 'SECAM'])
def profile(request):
    return build_profile(request.param)


@pytest.fixture
def sample_frame(ntsc):
    """Random NTSC-height picture for shape and determinism checks."""
    gen = np.random.default_rng(42)
    return gen.integers(0, 256, (ntsc.video_scanlines, TEST_WIDTH, 3), dtype=np.uint8)
