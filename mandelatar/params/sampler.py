"""Random viewport selection.

Picks a zoomed-in window near one of the interesting rectangles, random
color constants and a random subset of the enabled transforms. The result
is only reproducible once it has been encoded into a token.
"""

from __future__ import annotations

import logging
import random

from mandelatar.params.descriptor import (
    ENABLED_RANDOM_TRANSFORMS,
    INTERESTING_SELECTIONS,
    NO_TRANSFORMS,
    OUTPUT_HEIGHT,
    OUTPUT_WIDTH,
    TransformFlags,
    ViewportDescriptor,
)

logger = logging.getLogger(__name__)

ZOOM_EXPONENT_RANGE = (1, 10)
ZOOM_MANTISSA_RANGE = (1.0, 9.0)
CENTER_JITTER_X = (-20.0, 50.0)
CENTER_JITTER_Y = (-30.0, 50.0)


def relative_point(pixel: float, length: float, span: tuple[float, float]) -> float:
    """Linearly interpolate ``pixel / length`` into ``span``."""
    start, end = span
    return start + (pixel / length) * (end - start)


def random_transforms(rng: random.Random) -> TransformFlags:
    flags = NO_TRANSFORMS
    for flag in ENABLED_RANDOM_TRANSFORMS:
        if rng.random() < 0.5:
            flags |= flag
    return flags


def sample(
    bounds: tuple[int, int],
    rng: random.Random | None = None,
) -> ViewportDescriptor:
    """Create a random descriptor for an image of ``bounds``.

    Args:
        bounds: (width, height) recorded in the descriptor.
        rng: Source of randomness. Defaults to a freshly seeded generator.

    Returns:
        A new ViewportDescriptor.
    """
    if rng is None:
        rng = random.Random()

    upper_left, lower_right = rng.choice(INTERESTING_SELECTIONS)
    ul_re, ul_im = upper_left.real, upper_left.imag
    lr_re, lr_im = lower_right.real, lower_right.imag

    exp = rng.randint(*ZOOM_EXPONENT_RANGE)
    zoom_factor = 1.0 / 10.0 ** exp * rng.uniform(*ZOOM_MANTISSA_RANGE)

    logger.debug("zoom factor %d - %s", exp, zoom_factor)

    zfw = OUTPUT_WIDTH * zoom_factor
    zfh = OUTPUT_HEIGHT * zoom_factor

    # Randomly choose a pixel to zoom from
    middle_px_x = OUTPUT_WIDTH / 2.0 + rng.uniform(*CENTER_JITTER_X)
    middle_px_y = OUTPUT_HEIGHT / 2.0 + rng.uniform(*CENTER_JITTER_Y)

    # Each lower-right coordinate interpolates from the already-moved
    # upper-left one. Keep these as separate statements.
    ul_re = relative_point(middle_px_x - zfw, OUTPUT_WIDTH, (ul_re, lr_re))
    lr_re = relative_point(middle_px_x + zfw, OUTPUT_WIDTH, (ul_re, lr_re))

    ul_im = relative_point(middle_px_y - zfh, OUTPUT_HEIGHT, (ul_im, lr_im))
    lr_im = relative_point(middle_px_y + zfh, OUTPUT_HEIGHT, (ul_im, lr_im))

    rgb_consts = (
        rng.randint(0, 255),
        rng.randint(0, 255),
        rng.randint(0, 255),
    )

    return ViewportDescriptor(
        bounds=(int(bounds[0]), int(bounds[1])),
        upper_left=complex(ul_re, ul_im),
        lower_right=complex(lr_re, lr_im),
        zoom_factor=zoom_factor,
        rgb_consts=rgb_consts,
        transform_flags=random_transforms(rng),
    )
