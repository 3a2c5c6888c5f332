"""Viewport descriptor: everything needed to reproduce one avatar.

A descriptor is created once by the sampler, serialized into the image URL,
and decoded again on every fetch. Nothing else about an image is stored.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

# Static image dimensions
OUTPUT_WIDTH = 300
OUTPUT_HEIGHT = 300
OUTPUT_BOUNDS = (OUTPUT_WIDTH, OUTPUT_HEIGHT)

# Interesting start rectangles on the set, as (upper_left, lower_right)
INTERESTING_SELECTIONS: tuple[tuple[complex, complex], ...] = (
    (complex(-1.20, 0.35), complex(-1.0, 0.20)),
)


class TransformFlags(enum.Flag):
    """Whole-image transforms, any combination of which may be set."""

    ROT180 = 0b0001
    HUEROT90 = 0b0010
    INVERT = 0b0100


NO_TRANSFORMS = TransformFlags(0)
ALL_TRANSFORMS = TransformFlags.ROT180 | TransformFlags.HUEROT90 | TransformFlags.INVERT

# Order in which set flags are applied to a raster
TRANSFORM_ORDER = (
    TransformFlags.ROT180,
    TransformFlags.HUEROT90,
    TransformFlags.INVERT,
)

# Flags the sampler may pick. INVERT is implemented but disabled for now.
ENABLED_RANDOM_TRANSFORMS = (
    TransformFlags.ROT180,
    TransformFlags.HUEROT90,
)


@dataclass(frozen=True)
class ViewportDescriptor:
    """Parameters that describe a single avatar render."""

    bounds: tuple[int, int]
    upper_left: complex
    lower_right: complex
    zoom_factor: float
    rgb_consts: tuple[int, int, int]
    transform_flags: TransformFlags = NO_TRANSFORMS

    def render_bounds(self) -> tuple[int, int]:
        # Output size is fixed process-wide; the stored bounds are ignored
        return OUTPUT_BOUNDS

    def ordered_transforms(self) -> list[TransformFlags]:
        return [flag for flag in TRANSFORM_ORDER if flag in self.transform_flags]
