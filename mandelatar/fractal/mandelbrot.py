"""Escape-time rendering of a viewport descriptor.

The raster is cut into horizontal bands of rows. Each band is computed with
numpy and written into its own slice of the output array by a thread pool;
numpy releases the GIL inside the iteration so bands run concurrently, and
since the slices are disjoint no locking is needed.

Every row is mapped onto the complex plane through its own one-row band
rectangle, and the vectorized iteration performs the same float operations
in the same order as ``escape_time``. The result therefore matches the
scalar reference bit for bit, whatever the band size.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from mandelatar.art.palettes import color_escape_counts
from mandelatar.params.descriptor import ViewportDescriptor

logger = logging.getLogger(__name__)

ESCAPE_LIMIT = 255
ESCAPE_RADIUS_SQR = 4.0
DEFAULT_BAND_ROWS = 25


def escape_time(c: complex, limit: int = ESCAPE_LIMIT) -> int | None:
    """Try to determine if ``c`` is in the Mandelbrot set in ``limit`` steps.

    Returns the iteration at which the orbit of ``c`` left the circle of
    radius two (``|z|^2 > 4``, strictly), or None if it never did.
    """
    zr, zi = 0.0, 0.0
    cr, ci = c.real, c.imag
    for i in range(limit):
        if zr * zr + zi * zi > ESCAPE_RADIUS_SQR:
            return i
        zr, zi = zr * zr - zi * zi + cr, zr * zi + zi * zr + ci
    return None


def pixel_to_point(
    bounds: tuple[int, int],
    pixel: tuple[int, int],
    upper_left: complex,
    lower_right: complex,
) -> complex:
    """Map a (column, row) pixel onto the complex plane.

    Rows grow downward while the imaginary axis grows upward, so row 0 is
    the top (largest imaginary part).
    """
    width = lower_right.real - upper_left.real
    height = upper_left.imag - lower_right.imag
    return complex(
        upper_left.real + pixel[0] * width / bounds[0],
        upper_left.imag - pixel[1] * height / bounds[1],
    )


def point_for_pixel(
    bounds: tuple[int, int],
    pixel: tuple[int, int],
    upper_left: complex,
    lower_right: complex,
) -> complex:
    """Point sampled for ``pixel`` by ``render``, via its row's band rectangle."""
    column, row = pixel
    band_upper_left = pixel_to_point(bounds, (0, row), upper_left, lower_right)
    band_lower_right = pixel_to_point(bounds, (bounds[0], row + 1), upper_left, lower_right)
    return pixel_to_point((bounds[0], 1), (column, 0), band_upper_left, band_lower_right)


# ------------------------------------------------------------------
# Vectorized band rendering
# ------------------------------------------------------------------

def _band_grid(
    bounds: tuple[int, int],
    rows: np.ndarray,
    upper_left: complex,
    lower_right: complex,
) -> tuple[np.ndarray, np.ndarray]:
    """Real and imaginary parts of every pixel in ``rows``, shape (len(rows), W)."""
    w, h = bounds
    width = lower_right.real - upper_left.real
    height = upper_left.imag - lower_right.imag

    # Tokens may carry inf, nan or huge coordinates
    with np.errstate(over="ignore", invalid="ignore"):
        # Per-row band corners, as pixel_to_point((0, row)) and ((W, row + 1))
        band_ul_re = upper_left.real + 0 * width / w
        band_ul_im = upper_left.imag - rows * height / h
        band_lr_re = upper_left.real + w * width / w
        band_lr_im = upper_left.imag - (rows + 1.0) * height / h

        # Pixels inside each one-row band, bounds (W, 1)
        band_width = band_lr_re - band_ul_re
        band_height = band_ul_im - band_lr_im
        columns = np.arange(w, dtype=np.float64)
        re = band_ul_re + columns * band_width / w
        im = band_ul_im - 0.0 * band_height / 1

    cr = np.broadcast_to(re, (rows.size, w))
    ci = np.broadcast_to(im[:, np.newaxis], (rows.size, w))
    return cr, ci


def _escape_counts(cr: np.ndarray, ci: np.ndarray, limit: int) -> np.ndarray:
    """Vectorized ``escape_time``; -1 marks points that never escaped."""
    zr = np.zeros(cr.shape, dtype=np.float64)
    zi = np.zeros(cr.shape, dtype=np.float64)
    counts = np.full(cr.shape, -1, dtype=np.int32)
    active = np.ones(cr.shape, dtype=bool)

    # Escaped orbits keep iterating until the whole band is done; their
    # values overflow but are masked out.
    with np.errstate(over="ignore", invalid="ignore"):
        for i in range(limit):
            escaped = active & (zr * zr + zi * zi > ESCAPE_RADIUS_SQR)
            counts[escaped] = i
            active &= ~escaped
            if not active.any():
                break
            zr, zi = zr * zr - zi * zi + cr, zr * zi + zi * zr + ci
    return counts


def render_band(
    pixels: np.ndarray,
    bounds: tuple[int, int],
    rows: np.ndarray,
    upper_left: complex,
    lower_right: complex,
    rgb_consts: tuple[int, int, int],
) -> None:
    """Render ``rows`` of the image into ``pixels`` (that band's slice only)."""
    cr, ci = _band_grid(bounds, rows, upper_left, lower_right)
    counts = _escape_counts(cr, ci, ESCAPE_LIMIT)
    pixels[...] = color_escape_counts(counts, rgb_consts)


def partition_rows(height: int, band_rows: int) -> list[tuple[int, int]]:
    """Split ``range(height)`` into consecutive [start, stop) bands."""
    band_rows = max(1, int(band_rows))
    return [(start, min(start + band_rows, height)) for start in range(0, height, band_rows)]


def render(
    descriptor: ViewportDescriptor,
    band_rows: int = DEFAULT_BAND_ROWS,
    max_workers: int | None = None,
) -> np.ndarray:
    """Render a descriptor to an (H, W, 3) uint8 RGB array.

    Args:
        descriptor: Viewport to render. Its stored bounds are ignored in
            favour of the fixed output size.
        band_rows: Rows per band, the unit of parallel work.
        max_workers: Thread pool size. Defaults to the CPU count.

    Returns:
        (height, width, 3) uint8 array.
    """
    bounds = descriptor.render_bounds()
    w, h = bounds
    pixels = np.zeros((h, w, 3), dtype=np.uint8)
    bands = partition_rows(h, band_rows)
    workers = max(1, min(max_workers or os.cpu_count() or 1, len(bands)))

    def _render_slice(band: tuple[int, int]) -> None:
        start, stop = band
        render_band(
            pixels[start:stop],
            bounds,
            np.arange(start, stop, dtype=np.float64),
            descriptor.upper_left,
            descriptor.lower_right,
            descriptor.rgb_consts,
        )

    with ThreadPoolExecutor(max_workers=workers) as pool:
        for _ in pool.map(_render_slice, bands):
            pass

    logger.debug("rendered %dx%d in %d bands on %d workers", w, h, len(bands), workers)
    return pixels
