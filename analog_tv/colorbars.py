"""Colour bar test patterns for each broadcast standard."""

import numpy as np

# 75% bars, left to right: white, yellow, cyan, green, magenta, red, blue
_BARS_75 = np.array([
    [191, 191, 191],
    [191, 191, 0],
    [0, 191, 191],
    [0, 191, 0],
    [191, 0, 191],
    [191, 0, 0],
    [0, 0, 191],
], dtype=np.uint8)


def _fill_columns(frame, top, bottom, colors):
    width = frame.shape[1]
    bar_width = width // len(colors)
    for i, color in enumerate(colors):
        x_end = (i + 1) * bar_width if i < len(colors) - 1 else width
        frame[top:bottom, i * bar_width:x_end] = color


def generate_colorbars(width=640, height=480):
    """SMPTE colour bars, as used to line up NTSC monitors.

    Seven 75% bars over two thirds of the height, a reversed castellation
    strip, then a PLUGE strip along the bottom.

    Returns:
        RGB frame (height x width x 3, uint8).
    """
    frame = np.zeros((height, width, 3), dtype=np.uint8)
    bar_height = height * 2 // 3
    strip_height = height // 12
    _fill_columns(frame, 0, bar_height, _BARS_75)

    black = [0, 0, 0]
    castellations = [_BARS_75[6], black, _BARS_75[4], black,
                     _BARS_75[2], black, _BARS_75[0]]
    _fill_columns(frame, bar_height, bar_height + strip_height, castellations)

    # PLUGE: below black, black, just above black, white reference
    pluge = [[0, 0, 0], [16, 16, 16], [36, 36, 36], [255, 255, 255]]
    _fill_columns(frame, bar_height + strip_height, height, pluge)
    return frame


def generate_ebu_bars(width=768, height=576):
    """EBU 100/0/75/0 colour bars, the usual PAL and SECAM test card.

    White at full level, then the seven colours at 75%, then black.

    Returns:
        RGB frame (height x width x 3, uint8).
    """
    colors = np.vstack([[[255, 255, 255]], _BARS_75[1:], [[0, 0, 0]]])
    frame = np.zeros((height, width, 3), dtype=np.uint8)
    _fill_columns(frame, 0, height, colors)
    return frame


def bars_for(standard, width, height):
    """Colour bars customary for a standard."""
    if standard.upper() == 'NTSC':
        return generate_colorbars(width, height)
    return generate_ebu_bars(width, height)
