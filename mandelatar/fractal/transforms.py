"""Whole-image transforms selected by a descriptor's flags.

All functions take an (H, W, 3) uint8 raster and modify it in place.
"""

from __future__ import annotations

import numpy as np

from mandelatar.art.palettes import hue_rotation_matrix
from mandelatar.params.descriptor import TRANSFORM_ORDER, TransformFlags

HUE_ROTATION_DEGREES = 90


def rotate180(raster: np.ndarray) -> None:
    raster[...] = raster[::-1, ::-1].copy()


def huerotate(raster: np.ndarray, degrees: float) -> None:
    """Rotate the hue of every pixel by ``degrees``.

    Channels are mixed in float64, clamped to [0, 255] and truncated.
    """
    m = hue_rotation_matrix(degrees)
    r = raster[..., 0].astype(np.float64)
    g = raster[..., 1].astype(np.float64)
    b = raster[..., 2].astype(np.float64)

    new_r = m[0] * r + m[1] * g + m[2] * b
    new_g = m[3] * r + m[4] * g + m[5] * b
    new_b = m[6] * r + m[7] * g + m[8] * b

    for channel, values in enumerate((new_r, new_g, new_b)):
        raster[..., channel] = np.clip(values, 0.0, 255.0).astype(np.uint8)


def invert(raster: np.ndarray) -> None:
    np.subtract(255, raster, out=raster)


_TRANSFORMS = {
    TransformFlags.ROT180: rotate180,
    TransformFlags.HUEROT90: lambda raster: huerotate(raster, HUE_ROTATION_DEGREES),
    TransformFlags.INVERT: invert,
}


def apply_transforms(raster: np.ndarray, flags: TransformFlags) -> np.ndarray:
    """Apply every set flag, always in TRANSFORM_ORDER. Returns ``raster``."""
    for flag in TRANSFORM_ORDER:
        if flag in flags:
            _TRANSFORMS[flag](raster)
    return raster
