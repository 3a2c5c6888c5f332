"""Colors used by the fractal renderer.

Colors are stored as (R, G, B) tuples of 8-bit ints.
"""

from __future__ import annotations

import math

import numpy as np


def hex_to_rgb(h: str) -> tuple[int, int, int]:
    """Convert '#RRGGBB' to (r, g, b) ints in [0, 255]."""
    h = h.lstrip("#")
    return tuple(int(h[i : i + 2], 16) for i in (0, 2, 4))


# Points that never escape
BACKGROUND = hex_to_rgb("#0A0A19")

# Profile frame overlay colors
FRAME_FILL = hex_to_rgb("#0A0A19")
FRAME_RING = hex_to_rgb("#F0F0F0")


def color_for(count: int | None, rgb_consts: tuple[int, int, int]) -> tuple[int, int, int]:
    """Color of a single pixel given its escape time.

    A count of 0 is treated as 1 so the modulus is always defined; every
    channel then comes out as 0.
    """
    if count is None:
        return BACKGROUND
    n = max(count, 1)
    r, g, b = rgb_consts
    return (r % n, g % n, b % n)


def color_escape_counts(counts: np.ndarray, rgb_consts: tuple[int, int, int]) -> np.ndarray:
    """Vectorized ``color_for``.

    Args:
        counts: (...) int array of escape times, -1 where the point never escaped.
        rgb_consts: (R, G, B) seeds.

    Returns:
        (..., 3) uint8 array.
    """
    escaped = counts >= 0
    n = np.maximum(counts, 1).astype(np.int32)
    out = np.empty(counts.shape + (3,), dtype=np.uint8)
    for channel, const in enumerate(rgb_consts):
        out[..., channel] = np.where(escaped, np.int32(const) % n, BACKGROUND[channel])
    return out


def hue_rotation_matrix(degrees: float) -> tuple[float, ...]:
    """Luminance-preserving hue rotation, row-major 3x3."""
    cosv = math.cos(degrees * math.pi / 180.0)
    sinv = math.sin(degrees * math.pi / 180.0)
    return (
        # Reds
        0.213 + cosv * 0.787 - sinv * 0.213,
        0.715 - cosv * 0.715 - sinv * 0.715,
        0.072 - cosv * 0.072 + sinv * 0.928,
        # Greens
        0.213 - cosv * 0.213 + sinv * 0.143,
        0.715 + cosv * 0.285 + sinv * 0.140,
        0.072 - cosv * 0.072 - sinv * 0.283,
        # Blues
        0.213 - cosv * 0.213 - sinv * 0.787,
        0.715 - cosv * 0.715 + sinv * 0.715,
        0.072 + cosv * 0.928 + sinv * 0.072,
    )
