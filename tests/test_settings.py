"""Tests for analog_tv.settings."""

import pytest

from analog_tv.formats import CHANNEL_LUMA, CHANNEL_CHROMA1, CHANNEL_CHROMA2, CHANNEL_ALL
from analog_tv.settings import (
    DecodeSettings, RANGES, WORKING_WIDTHS, channel_flags, working_width,
)


class TestWorkingWidth:
    def test_defaults(self):
        assert WORKING_WIDTHS == {'NTSC': 1280, 'PAL': 1536, 'SECAM': 1536}

    def test_case_insensitive(self):
        assert working_width('secam') == 1536

    def test_unknown(self):
        with pytest.raises(ValueError):
            working_width('MAC')


class TestChannelFlags:
    def test_presets(self):
        assert channel_flags('YUV') == CHANNEL_ALL
        assert channel_flags('Y') == CHANNEL_LUMA
        assert channel_flags('uv') == CHANNEL_CHROMA1 | CHANNEL_CHROMA2
        assert channel_flags('YV') == CHANNEL_LUMA | CHANNEL_CHROMA2

    def test_unknown(self):
        with pytest.raises(ValueError, match="channel preset"):
            channel_flags('RGB')


class TestDecodeSettings:
    def test_defaults_are_valid(self):
        assert DecodeSettings().validate() is not None

    def test_as_kwargs(self):
        kwargs = DecodeSettings(crosstalk=0.25, channels='Y').as_kwargs()
        assert kwargs['crosstalk'] == 0.25
        assert kwargs['channels'] == CHANNEL_LUMA
        assert set(kwargs) == set(RANGES) | {'channels'}

    @pytest.mark.parametrize("field,value", [
        ('bandwidth', 0.2),
        ('crosstalk', 1.5),
        ('resonance', 25.0),
        ('phase_error', 200.0),
        ('phase_noise', -1.0),
        ('jitter', 0.01),
    ])
    def test_out_of_range(self, field, value):
        with pytest.raises(ValueError, match=field):
            DecodeSettings(**{field: value}).validate()

    def test_bad_channels(self):
        with pytest.raises(ValueError):
            DecodeSettings(channels='Q').as_kwargs()

    def test_range_edges_accepted(self):
        low = {name: bounds[0] for name, bounds in RANGES.items()}
        high = {name: bounds[1] for name, bounds in RANGES.items()}
        DecodeSettings(**low).validate()
        DecodeSettings(**high).validate()
