"""Overlay compositing on finished avatar PNGs.

Post-processing works purely from PNG bytes: the base image is decoded from
the renderer's output rather than taken from the in-memory raster, so it can
run as a separate stage.
"""

from __future__ import annotations

import io
import logging
from collections.abc import Callable

from PIL import Image

from mandelatar.errors import PostProcessingError
from mandelatar.params.descriptor import OUTPUT_HEIGHT, OUTPUT_WIDTH
from mandelatar.params.post_process import PostProcessConfig, ProfileOverlay

logger = logging.getLogger(__name__)

OverlayFetcher = Callable[[str], bytes | None]


def apply(config: PostProcessConfig, base_png: bytes, fetch: OverlayFetcher) -> bytes:
    """Run the post-processing selected by ``config`` over ``base_png``.

    Args:
        config: Parsed query options. Must select an overlay.
        base_png: PNG produced by the renderer.
        fetch: Looks up overlay bytes by asset key; None when missing.

    Returns:
        RGBA PNG bytes.

    Raises:
        PostProcessingError: fetch miss, unreadable images, or encode failure.
    """
    base = load_image("base image", base_png)

    overlay = config.overlay
    if isinstance(overlay, ProfileOverlay):
        top = load_image("profile_overlay", fetch_overlay(fetch, overlay.asset_key))
        base = composite_overlay(base, top)
    else:
        raise PostProcessingError("no overlay selected")

    return encode_result_png(base)


def fetch_overlay(fetch: OverlayFetcher, key: str) -> bytes:
    try:
        buf = fetch(key)
    except OSError as e:
        raise PostProcessingError(f"failed to fetch {key} from overlay store: {e}") from e
    if not buf:
        raise PostProcessingError(f"{key} buffer was empty")
    return buf


def load_image(name: str, buf: bytes) -> Image.Image:
    """Decode PNG bytes into an RGBA image."""
    try:
        with Image.open(io.BytesIO(buf), formats=["PNG"]) as img:
            img.load()
            return img.convert("RGBA")
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        raise PostProcessingError(f"failed to load image {name} from buffer: {e}") from e


def composite_overlay(base: Image.Image, top: Image.Image) -> Image.Image:
    """Alpha-composite ``top`` over ``base`` at (0, 0).

    Overlays not matching the output size are resized first with
    nearest-neighbour sampling, the fastest filter.
    """
    size = (OUTPUT_WIDTH, OUTPUT_HEIGHT)
    if top.size != size:
        logger.debug("resizing overlay from %s to %s", top.size, size)
        top = top.resize(size, Image.NEAREST)
    if base.size != size:
        raise PostProcessingError(f"base image is {base.size}, expected {size}")

    out = base.copy()
    out.alpha_composite(top, (0, 0))
    return out


def encode_result_png(image: Image.Image) -> bytes:
    buf = io.BytesIO()
    try:
        image.convert("RGBA").save(buf, format="PNG")
    except (OSError, ValueError) as e:
        raise PostProcessingError(f"failed to write to result image buffer: {e}") from e
    return buf.getvalue()
