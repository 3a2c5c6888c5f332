"""Tests for escape-time rendering."""

from __future__ import annotations

import warnings

import numpy as np
import pytest

from mandelatar.art.palettes import BACKGROUND, color_escape_counts, color_for
from mandelatar.fractal.mandelbrot import (
    ESCAPE_LIMIT,
    escape_time,
    partition_rows,
    pixel_to_point,
    point_for_pixel,
    render,
    render_band,
)
from mandelatar.params.descriptor import ViewportDescriptor
from tests.conftest import FIXED_DESCRIPTOR


# ---------------------------------------------------------------------------
# escape_time
# ---------------------------------------------------------------------------

def test_origin_never_escapes():
    assert escape_time(0j) is None


def test_escape_is_strictly_outside_radius_two():
    # z: 0 -> 2 -> 6, and |2|^2 == 4 does not count as escaped
    assert escape_time(2 + 0j) == 2
    assert escape_time(2 + 0j, limit=2) is None
    assert escape_time(2 + 0j, limit=1) is None


def test_minus_two_stays_on_boundary():
    assert escape_time(-2 + 0j) is None


def test_far_point_escapes_after_one_step():
    assert escape_time(3 + 0j) == 1
    assert escape_time(10j) == 1


def test_limit_zero_is_none():
    assert escape_time(100 + 0j, limit=0) is None


# ---------------------------------------------------------------------------
# Pixel mapping
# ---------------------------------------------------------------------------

def test_pixel_to_point_corners():
    ul, lr = complex(-1.2, 0.35), complex(-1.0, 0.2)
    assert pixel_to_point((300, 300), (0, 0), ul, lr) == ul
    corner = pixel_to_point((300, 300), (300, 300), ul, lr)
    assert corner.real == pytest.approx(lr.real)
    assert corner.imag == pytest.approx(lr.imag)


def test_pixel_rows_go_down_the_imaginary_axis():
    ul, lr = complex(-1.0, 1.0), complex(1.0, -1.0)
    top = pixel_to_point((100, 100), (50, 0), ul, lr)
    bottom = pixel_to_point((100, 100), (50, 99), ul, lr)
    assert top.imag > bottom.imag


def test_point_for_pixel_row_start_is_band_corner():
    ul, lr = complex(-1.2, 0.35), complex(-1.0, 0.2)
    for row in (0, 17, 299):
        assert point_for_pixel((300, 300), (0, row), ul, lr) == pixel_to_point(
            (300, 300), (0, row), ul, lr
        )


# ---------------------------------------------------------------------------
# Coloring
# ---------------------------------------------------------------------------

def test_color_for_background():
    assert color_for(None, (10, 20, 30)) == BACKGROUND == (10, 10, 25)


def test_color_for_modulus():
    assert color_for(7, (10, 20, 30)) == (3, 6, 2)
    assert color_for(255, (254, 255, 0)) == (254, 0, 0)


def test_color_for_zero_count():
    assert color_for(0, (10, 20, 30)) == (0, 0, 0)


def test_color_escape_counts_matches_scalar():
    rgb = (201, 77, 13)
    counts = np.arange(-1, ESCAPE_LIMIT + 1, dtype=np.int32)
    colors = color_escape_counts(counts, rgb)
    assert colors.dtype == np.uint8
    for count, color in zip(counts.tolist(), colors.tolist()):
        expected = color_for(None if count < 0 else count, rgb)
        assert tuple(color) == expected


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def test_partition_rows():
    assert partition_rows(10, 3) == [(0, 3), (3, 6), (6, 9), (9, 10)]
    assert partition_rows(300, 25)[-1] == (275, 300)
    assert len(partition_rows(300, 25)) == 12
    assert partition_rows(3, 0) == [(0, 1), (1, 2), (2, 3)]


def test_band_matches_scalar_reference():
    d = FIXED_DESCRIPTOR
    bounds = (300, 300)
    rows = np.array([0, 1, 150, 299], dtype=np.float64)
    pixels = np.zeros((rows.size, 300, 3), dtype=np.uint8)
    render_band(pixels, bounds, rows, d.upper_left, d.lower_right, d.rgb_consts)

    for i, row in enumerate(rows.astype(int).tolist()):
        for column in range(300):
            c = point_for_pixel(bounds, (column, row), d.upper_left, d.lower_right)
            expected = color_for(escape_time(c), d.rgb_consts)
            assert tuple(pixels[i, column].tolist()) == expected, (column, row)


def test_render_shape_and_dtype():
    pixels = render(FIXED_DESCRIPTOR)
    assert pixels.shape == (300, 300, 3)
    assert pixels.dtype == np.uint8


def test_render_independent_of_band_layout():
    reference = render(FIXED_DESCRIPTOR, band_rows=25)
    assert np.array_equal(render(FIXED_DESCRIPTOR, band_rows=1), reference)
    assert np.array_equal(render(FIXED_DESCRIPTOR, band_rows=7, max_workers=3), reference)
    assert np.array_equal(render(FIXED_DESCRIPTOR, band_rows=300, max_workers=1), reference)


def test_render_ignores_stored_bounds():
    odd = ViewportDescriptor(
        bounds=(12, 7),
        upper_left=FIXED_DESCRIPTOR.upper_left,
        lower_right=FIXED_DESCRIPTOR.lower_right,
        zoom_factor=FIXED_DESCRIPTOR.zoom_factor,
        rgb_consts=FIXED_DESCRIPTOR.rgb_consts,
    )
    assert np.array_equal(render(odd), render(FIXED_DESCRIPTOR))


def test_view_inside_set_is_background():
    inside = ViewportDescriptor(
        bounds=(300, 300),
        upper_left=complex(-0.1, 0.1),
        lower_right=complex(0.1, -0.1),
        zoom_factor=1.0,
        rgb_consts=(1, 2, 3),
    )
    pixels = render(inside)
    assert (pixels == np.array(BACKGROUND, dtype=np.uint8)).all()


def test_render_has_escaped_and_background_pixels():
    pixels = render(FIXED_DESCRIPTOR).reshape(-1, 3)
    is_background = (pixels == np.array(BACKGROUND, dtype=np.uint8)).all(axis=1)
    assert is_background.any()
    assert not is_background.all()


@pytest.mark.parametrize(
    "upper_left, lower_right",
    [
        (complex(-1e308, 1e308), complex(1e308, -1e308)),
        (complex(float("inf"), float("nan")), complex(1e308, -1e308)),
        (complex(float("-inf"), float("inf")), complex(float("inf"), float("-inf"))),
    ],
)
def test_non_finite_view_renders_without_warnings(upper_left, lower_right):
    rows = np.arange(0, 4, dtype=np.float64)
    pixels = np.zeros((rows.size, 300, 3), dtype=np.uint8)
    with warnings.catch_warnings():
        warnings.simplefilter("error", RuntimeWarning)
        render_band(pixels, (300, 300), rows, upper_left, lower_right, (1, 2, 3))
