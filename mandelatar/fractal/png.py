"""PNG encoding of rendered rasters."""

from __future__ import annotations

import io

import numpy as np
from PIL import Image

from mandelatar.errors import EncodingError
from mandelatar.fractal.mandelbrot import render
from mandelatar.fractal.transforms import apply_transforms
from mandelatar.params.descriptor import OUTPUT_HEIGHT, OUTPUT_WIDTH, ViewportDescriptor


def encode_png(raster: np.ndarray) -> bytes:
    """Encode a fixed-size (H, W, 3) uint8 raster as an RGB PNG.

    A raster of the wrong shape or dtype means the renderer is broken, not
    that the request was bad, so it raises EncodingError.
    """
    expected = (OUTPUT_HEIGHT, OUTPUT_WIDTH, 3)
    if raster.shape != expected or raster.dtype != np.uint8:
        raise EncodingError(
            f"raster is {raster.shape} {raster.dtype}, expected {expected} uint8"
        )

    buf = io.BytesIO()
    try:
        Image.fromarray(raster).save(buf, format="PNG")
    except (OSError, ValueError) as e:
        raise EncodingError(str(e)) from e
    return buf.getvalue()


def render_image(descriptor: ViewportDescriptor) -> np.ndarray:
    """Render and transform a descriptor, without encoding."""
    return apply_transforms(render(descriptor), descriptor.transform_flags)


def create_png(descriptor: ViewportDescriptor) -> bytes:
    """Generate the PNG for a descriptor. Same descriptor, same bytes."""
    return encode_png(render_image(descriptor))
