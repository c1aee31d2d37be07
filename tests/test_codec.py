"""Tests for analog_tv.codec."""

import dataclasses
import logging

import numpy as np
import pytest

from analog_tv import codec
from analog_tv import ntsc as ntsc_codec, pal as pal_codec, secam as secam_codec
from analog_tv.pipeline import SignalPipeline

from conftest import TEST_WIDTH, flat_image


class TestDispatch:
    def test_codec_table(self):
        assert codec.CODECS == {'NTSC': ntsc_codec, 'PAL': pal_codec,
                                'SECAM': secam_codec}

    def test_encode_matches_codec(self, pal):
        image = flat_image(pal, (180, 100, 80))
        via_dispatch, bounds = codec.encode(pal, image)
        direct, direct_bounds = pal_codec.encode(pal, image)
        np.testing.assert_array_equal(via_dispatch, direct)
        np.testing.assert_array_equal(bounds, direct_bounds)

    def test_encode_forwards_options(self, ntsc):
        image = flat_image(ntsc, (180, 100, 80))
        plain, _ = codec.encode(ntsc, image)
        brighter, _ = codec.encode(ntsc, image, source_gamma=1.0)
        assert brighter.sum() > plain.sum()

    def test_unknown_standard(self, pal):
        bogus = dataclasses.replace(pal, standard='MAC')
        with pytest.raises(ValueError, match="No codec"):
            codec.encode(bogus, flat_image(pal, (0, 0, 0)))

    def test_logs_at_debug(self, pal, caplog):
        with caplog.at_level(logging.DEBUG, logger='analog_tv.codec'):
            codec.encode(pal, flat_image(pal, (0, 0, 0)))
        assert 'PAL encode' in caplog.text


class TestSampleRate:
    def test_matches_line_timing(self, pal):
        assert codec.sample_rate(pal, 640) == pytest.approx(640 / 51.95e-6)

    def test_scales_with_width(self, ntsc):
        assert codec.sample_rate(ntsc, 1280) == pytest.approx(
            2 * codec.sample_rate(ntsc, 640))


class TestRoundtrip:
    def test_pipeline_sees_sample_rate(self, pal):
        seen = []

        def capture(signal, sample_rate):
            seen.append(sample_rate)
            return signal

        codec.roundtrip(pal, flat_image(pal, (0, 0, 0)),
                        pipeline=SignalPipeline([capture]))
        assert seen == [pytest.approx(codec.sample_rate(pal, TEST_WIDTH))]

    def test_empty_pipeline_ignored(self, pal):
        image = flat_image(pal, (60, 120, 200))
        a = codec.roundtrip(pal, image)
        b = codec.roundtrip(pal, image, pipeline=SignalPipeline())
        np.testing.assert_array_equal(a, b)
