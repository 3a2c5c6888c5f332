"""Shared test fixtures."""

from __future__ import annotations

import io
import struct

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from mandelatar.art.store import MemoryOverlayStore
from mandelatar.params.descriptor import TransformFlags, ViewportDescriptor
from mandelatar.server import create_app


# Descriptor used for end-to-end rendering checks, and its exact wire bytes
FIXED_DESCRIPTOR = ViewportDescriptor(
    bounds=(300, 300),
    upper_left=complex(-1.2, 0.35),
    lower_right=complex(-1.0, 0.2),
    zoom_factor=0.01,
    rgb_consts=(10, 20, 30),
    transform_flags=TransformFlags.ROT180,
)

FIXED_BYTES = (
    struct.pack("<QQ", 300, 300)
    + struct.pack("<ddddd", -1.2, 0.35, -1.0, 0.2, 0.01)
    + bytes([10, 20, 30, 1])
)


def png_bytes(image: Image.Image) -> bytes:
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


def solid_png(size: tuple[int, int], color: tuple[int, ...], mode: str = "RGBA") -> bytes:
    return png_bytes(Image.new(mode, size, color))


@pytest.fixture
def descriptor() -> ViewportDescriptor:
    return FIXED_DESCRIPTOR


@pytest.fixture
def small_view() -> ViewportDescriptor:
    """A wide view where every pixel escapes within a few iterations."""
    return ViewportDescriptor(
        bounds=(300, 300),
        upper_left=complex(2.0, 3.0),
        lower_right=complex(3.0, 2.0),
        zoom_factor=1.0,
        rgb_consts=(200, 100, 50),
    )


@pytest.fixture
def overlay_png() -> bytes:
    """Opaque 300x300 overlay, so a composite shows only the overlay."""
    return solid_png((300, 300), (0, 128, 255, 255))


@pytest.fixture
def overlay_store(overlay_png) -> MemoryOverlayStore:
    return MemoryOverlayStore({"profile_overlay_300x300": overlay_png})


@pytest.fixture
def client(overlay_store) -> TestClient:
    return TestClient(create_app(overlay_store=overlay_store))


@pytest.fixture
def bare_client() -> TestClient:
    """Client whose overlay store is empty."""
    return TestClient(create_app(overlay_store=MemoryOverlayStore()))
