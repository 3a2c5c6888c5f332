"""Binary encoding of viewport descriptors, and the URL token around it.

Wire layout (little-endian, 60 bytes):

    u64  width
    u64  height
    f64  upper_left.re
    f64  upper_left.im
    f64  lower_right.re
    f64  lower_right.im
    f64  zoom_factor
    u8   r, g, b
    u8   transform flag bits

Tokens are the URL-safe base64 of those bytes, padded. ``decode`` is the only
code path that sees attacker-controlled bytes; any input either yields a
descriptor or raises DecodeError.
"""

from __future__ import annotations

import base64
import binascii
import re
import struct

from mandelatar.errors import DecodeError, EncodingError, ValidationError
from mandelatar.params.descriptor import ALL_TRANSFORMS, TransformFlags, ViewportDescriptor

WIRE_FORMAT = struct.Struct("<QQdddddBBBB")
WIRE_SIZE = WIRE_FORMAT.size

MAX_TOKEN_LEN = 500
TOKEN_SUFFIX = ".png"
_TOKEN_RE = re.compile(r"[A-Za-z0-9_-]*={0,2}")


def encode(descriptor: ViewportDescriptor) -> bytes:
    r, g, b = descriptor.rgb_consts
    try:
        return WIRE_FORMAT.pack(
            descriptor.bounds[0],
            descriptor.bounds[1],
            descriptor.upper_left.real,
            descriptor.upper_left.imag,
            descriptor.lower_right.real,
            descriptor.lower_right.imag,
            descriptor.zoom_factor,
            r,
            g,
            b,
            descriptor.transform_flags.value,
        )
    except struct.error as e:
        raise EncodingError(f"failed to serialize viewport params: {e}") from e


def decode(data: bytes) -> ViewportDescriptor:
    """Parse the wire layout back into a descriptor.

    Coordinates, zoom factor and bounds are taken as-is, including
    non-finite floats. Only the length and the flag bits are checked.
    """
    if len(data) != WIRE_SIZE:
        raise DecodeError(f"expected {WIRE_SIZE} bytes, got {len(data)}")

    (
        width, height,
        ul_re, ul_im,
        lr_re, lr_im,
        zoom_factor,
        r, g, b,
        flag_bits,
    ) = WIRE_FORMAT.unpack(data)

    if flag_bits & ~ALL_TRANSFORMS.value:
        raise DecodeError(f"unknown transform flag bits {flag_bits:#04x}")

    return ViewportDescriptor(
        bounds=(width, height),
        upper_left=complex(ul_re, ul_im),
        lower_right=complex(lr_re, lr_im),
        zoom_factor=zoom_factor,
        rgb_consts=(r, g, b),
        transform_flags=TransformFlags(flag_bits),
    )


# ------------------------------------------------------------------
# URL tokens
# ------------------------------------------------------------------

def encode_token(descriptor: ViewportDescriptor) -> str:
    return base64.urlsafe_b64encode(encode(descriptor)).decode("ascii")


def decode_token(token: str) -> ViewportDescriptor:
    """Turn a path segment from an image URL back into a descriptor.

    Raises:
        ValidationError: the token is empty, too long, not URL-safe base64,
            or does not decode to a descriptor (DecodeError).
    """
    if not token or not token.strip() or len(token) > MAX_TOKEN_LEN:
        raise ValidationError("invalid base64 provided")

    if token.endswith(TOKEN_SUFFIX):
        token = token[: -len(TOKEN_SUFFIX)]

    if not _TOKEN_RE.fullmatch(token):
        raise ValidationError("Invalid base64 provided")

    try:
        raw = base64.urlsafe_b64decode(token)
    except binascii.Error as e:
        raise ValidationError("Invalid base64 provided") from e

    return decode(raw)
