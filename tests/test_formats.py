"""Tests for analog_tv.formats."""

import dataclasses

import numpy as np
import pytest

from analog_tv.formats import (
    FormatProfile, build_profile, signal_length, boundary_points,
    active_starts, field_order, line_jitter, as_generator, check_image,
    to_rgba, line_positions, check_decode_args, compose_rgb,
    CHANNEL_LUMA, CHANNEL_CHROMA1, CHANNEL_CHROMA2, CHANNEL_ALL,
)

from conftest import TEST_WIDTH


class TestBuildProfile:
    def test_standards(self):
        for name in ('NTSC', 'PAL', 'SECAM'):
            assert build_profile(name).standard == name
        assert isinstance(build_profile('NTSC'), FormatProfile)

    def test_case_insensitive(self):
        assert build_profile('pal') == build_profile('PAL')

    def test_unknown_standard(self):
        with pytest.raises(ValueError, match="Unknown standard"):
            build_profile('MAC')

    def test_line_counts(self, ntsc, pal, secam):
        assert (ntsc.scanlines, ntsc.video_scanlines) == (525, 480)
        assert (pal.scanlines, pal.video_scanlines) == (625, 576)
        assert (secam.scanlines, secam.video_scanlines) == (625, 576)

    def test_carriers(self, ntsc, pal, secam):
        assert ntsc.carrier_freq == pytest.approx(3579545.0)
        assert pal.carrier_freq == pytest.approx(4433618.75)
        assert secam.carrier_freq == pytest.approx(4328125.0)

    def test_ntsc_chroma_phase(self, ntsc):
        assert ntsc.chroma_phase == pytest.approx(np.radians(33.0))

    def test_secam_chroma_scale(self, secam):
        assert secam.chroma1_max == pytest.approx(1.333)
        assert secam.chroma2_max == pytest.approx(-1.333)

    def test_immutable(self, ntsc):
        with pytest.raises(dataclasses.FrozenInstanceError):
            ntsc.carrier_freq = 1.0

    def test_rejects_bad_constants(self, ntsc):
        with pytest.raises(ValueError):
            dataclasses.replace(ntsc, carrier_freq=0.0)
        with pytest.raises(ValueError):
            dataclasses.replace(ntsc, video_scanlines=600)


class TestTiming:
    def test_interlaced_framerate_halved(self, ntsc):
        assert ntsc.framerate == pytest.approx(59.94005994 / 2)
        assert ntsc.with_interlace(False).framerate == pytest.approx(59.94005994)

    def test_with_interlace_copies(self, pal):
        progressive = pal.with_interlace(False)
        assert pal.interlaced
        assert not progressive.interlaced
        assert progressive.carrier_freq == pal.carrier_freq

    def test_scanline_time(self, ntsc, pal):
        assert ntsc.scanline_time == pytest.approx(63.556e-6, rel=1e-4)
        assert pal.scanline_time == pytest.approx(64e-6)

    def test_scanlines_fill_frame(self, profile):
        assert (profile.scanline_time * profile.scanlines ==
                pytest.approx(profile.frame_time))

    def test_progressive_halves_active_time(self, pal):
        assert (pal.with_interlace(False).real_active_time ==
                pytest.approx(pal.real_active_time / 2))

    def test_carrier_ang_freq(self, pal):
        assert pal.carrier_ang_freq == pytest.approx(2 * np.pi * 4433618.75)


class TestMatrices:
    def test_inverse(self, profile):
        product = profile.chroma_to_rgb @ profile.rgb_to_chroma
        np.testing.assert_allclose(product, np.eye(3), atol=1e-9)

    def test_white_has_no_chroma(self, profile):
        np.testing.assert_allclose(profile.rgb_to_chroma @ [1.0, 1.0, 1.0],
                                   [1.0, 0.0, 0.0], atol=1e-9)

    def test_pal_blue_is_pure_u(self, pal):
        y, u, v = pal.rgb_to_chroma @ [0.0, 0.0, 1.0]
        assert y == pytest.approx(0.114)
        assert u == pytest.approx(0.436)
        assert v == pytest.approx(-0.615 * 0.114 / 0.701)

    def test_ntsc_rotation_keeps_magnitude(self, ntsc, pal):
        # NTSC I/Q are PAL's U/V rotated by 33 degrees
        red = [1.0, 0.0, 0.0]
        _, q, i = ntsc.rgb_to_chroma @ red
        _, u, v = pal.rgb_to_chroma @ red
        assert np.hypot(q, i) == pytest.approx(np.hypot(u, v))


class TestLineLayout:
    def test_signal_length(self, ntsc):
        length = signal_length(ntsc, TEST_WIDTH)
        per_line = length / ntsc.video_scanlines
        expected = TEST_WIDTH * ntsc.scanline_time / ntsc.real_active_time
        assert per_line == pytest.approx(expected, abs=1)

    def test_signal_length_bad_width(self, ntsc):
        with pytest.raises(ValueError):
            signal_length(ntsc, 0)

    def test_boundary_points(self):
        np.testing.assert_array_equal(boundary_points(10, 3), [0, 3, 6, 10])

    def test_boundary_points_increasing(self, profile):
        length = signal_length(profile, TEST_WIDTH)
        points = boundary_points(length, profile.video_scanlines)
        assert len(points) == profile.video_scanlines + 1
        assert points[0] == 0 and points[-1] == length
        assert np.all(np.diff(points) > 0)

    def test_active_starts_inside_lines(self, profile):
        length = signal_length(profile, TEST_WIDTH)
        points = boundary_points(length, profile.video_scanlines)
        starts = active_starts(profile, length, TEST_WIDTH)
        assert np.all(starts >= points[:-1])
        assert np.all(starts + TEST_WIDTH <= points[1:] + 1)

    def test_field_order_interlaced(self, ntsc):
        small = dataclasses.replace(ntsc, scanlines=7, video_scanlines=6)
        np.testing.assert_array_equal(field_order(small), [0, 2, 4, 1, 3, 5])

    def test_field_order_progressive(self, ntsc):
        small = dataclasses.replace(ntsc, scanlines=7, video_scanlines=6,
                                    interlaced=False)
        np.testing.assert_array_equal(field_order(small), np.arange(6))

    def test_field_order_is_permutation(self, profile):
        order = field_order(profile)
        np.testing.assert_array_equal(np.sort(order),
                                      np.arange(profile.video_scanlines))


class TestJitter:
    def test_zero_jitter(self, rng):
        assert not line_jitter(rng, 100, 0.0, 640).any()

    def test_bounded(self, rng):
        offsets = line_jitter(rng, 1000, 0.005, 640)
        assert np.all(np.abs(offsets) <= 0.005 * 640)
        assert offsets.any()

    def test_as_generator(self, rng):
        assert as_generator(rng) is rng
        a = as_generator(7).random(3)
        b = as_generator(7).random(3)
        np.testing.assert_array_equal(a, b)


class TestImageHelpers:
    def test_check_image_scales(self, ntsc):
        image = np.full((480, 4, 3), 255, dtype=np.uint8)
        np.testing.assert_allclose(check_image(ntsc, image), 1.0)

    def test_check_image_drops_alpha(self, ntsc):
        image = np.zeros((480, 4, 4), dtype=np.uint8)
        assert check_image(ntsc, image).shape == (480, 4, 3)

    def test_check_image_wrong_height(self, ntsc):
        with pytest.raises(ValueError, match="480"):
            check_image(ntsc, np.zeros((576, 4, 3), dtype=np.uint8))

    def test_check_image_wrong_shape(self, ntsc):
        with pytest.raises(ValueError):
            check_image(ntsc, np.zeros((480, 4), dtype=np.uint8))

    def test_to_rgba(self):
        rgba = to_rgba(np.array([[[1.5, 0.5, -0.2]]]))
        np.testing.assert_array_equal(rgba[0, 0], [255, 127, 0, 255])

    def test_line_positions_clamped(self):
        pos = line_positions([0, 8], 4, 10, offsets=np.array([-2, 0]))
        np.testing.assert_array_equal(pos, [[0, 0, 0, 1], [8, 9, 9, 9]])


class TestCheckDecodeArgs:
    def test_sample_rate_matches_width(self, pal):
        length = signal_length(pal, TEST_WIDTH)
        _, sample_rate = check_decode_args(pal, np.zeros(length), TEST_WIDTH, 1.0, 1.0)
        assert sample_rate == pytest.approx(TEST_WIDTH / pal.real_active_time,
                                            rel=1e-3)

    @pytest.mark.parametrize("width,bandwidth,resonance", [
        (0, 1.0, 1.0), (640, 0.0, 1.0), (640, 1.0, 0.0),
    ])
    def test_rejects_bad_arguments(self, pal, width, bandwidth, resonance):
        with pytest.raises(ValueError):
            check_decode_args(pal, np.zeros(10000), width, bandwidth, resonance)

    def test_rejects_short_signal(self, pal):
        with pytest.raises(ValueError, match="too short"):
            check_decode_args(pal, np.zeros(100), 640, 1.0, 1.0)

    def test_rejects_other_width(self, pal):
        signal = np.zeros(signal_length(pal, TEST_WIDTH))
        with pytest.raises(ValueError, match="not encoded at width"):
            check_decode_args(pal, signal, TEST_WIDTH // 2, 1.0, 1.0)

    def test_rejects_mismatched_bounds(self, pal):
        signal = np.zeros(10000)
        bounds = boundary_points(9999, pal.video_scanlines)
        with pytest.raises(ValueError, match="Boundary"):
            check_decode_args(pal, signal, 640, 1.0, 1.0, bounds)


class TestComposeRgb:
    def _components(self, profile, y, c1, c2):
        shape = (profile.video_scanlines, 2)
        return np.full(shape, y), np.full(shape, c1), np.full(shape, c2)

    def test_luma_only_is_grey(self, pal):
        rgb = compose_rgb(pal, *self._components(pal, 0.4, 0.2, -0.1), CHANNEL_LUMA)
        np.testing.assert_allclose(rgb, 0.4)

    def test_no_luma_zeroes_y(self, pal):
        rgb = compose_rgb(pal, *self._components(pal, 0.4, 0.0, 0.0),
                          CHANNEL_CHROMA1 | CHANNEL_CHROMA2)
        np.testing.assert_allclose(rgb, 0.0)

    def test_all_channels_inverts_matrix(self, pal):
        y, u, v = pal.rgb_to_chroma @ [0.8, 0.3, 0.1]
        rgb = compose_rgb(pal, *self._components(pal, y, u, v), CHANNEL_ALL)
        np.testing.assert_allclose(rgb[0, 0], [0.8, 0.3, 0.1], atol=1e-9)

    def test_rows_reordered_by_field(self, ntsc):
        small = dataclasses.replace(ntsc, scanlines=7, video_scanlines=6)
        luma = np.arange(6, dtype=np.float64)[:, None]
        rgb = compose_rgb(small, luma, np.zeros_like(luma), np.zeros_like(luma),
                          CHANNEL_LUMA)
        np.testing.assert_allclose(rgb[:, 0, 0], [0, 3, 1, 4, 2, 5])