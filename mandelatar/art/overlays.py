"""Generate the overlay assets used by post-processing.

The profile overlay is an opaque frame with a transparent circular window,
so a composited avatar looks like a round profile picture even where the
client shows it square. Drawn at 2x then downscaled with LANCZOS for smooth
anti-aliased edges.
"""

from __future__ import annotations

from pathlib import Path

from PIL import Image, ImageDraw

from mandelatar.art.palettes import FRAME_FILL, FRAME_RING
from mandelatar.params.post_process import ProfileOverlay

SUPERSAMPLE = 2
RING_WIDTH_RATIO = 0.02
PROFILE_SIZES = ((300, 300), (600, 600))


def profile_overlay(width: int, height: int) -> Image.Image:
    """Render the profile frame as an RGBA image of ``width`` x ``height``."""
    ss_w, ss_h = width * SUPERSAMPLE, height * SUPERSAMPLE
    ring = max(1, round(min(ss_w, ss_h) * RING_WIDTH_RATIO))

    frame = Image.new("RGBA", (ss_w, ss_h), FRAME_FILL + (255,))
    draw = ImageDraw.Draw(frame)
    draw.ellipse([0, 0, ss_w - 1, ss_h - 1], fill=FRAME_RING + (255,))

    # Punch the transparent window out of the ring
    mask = Image.new("L", (ss_w, ss_h), 0)
    ImageDraw.Draw(mask).ellipse([ring, ring, ss_w - 1 - ring, ss_h - 1 - ring], fill=255)
    clear = Image.new("RGBA", (ss_w, ss_h), (0, 0, 0, 0))
    frame = Image.composite(clear, frame, mask)

    return frame.resize((width, height), Image.LANCZOS)


def write_profile_overlays(directory: str | Path, overwrite: bool = True) -> list[Path]:
    """Write the profile overlay sizes under their store keys.

    With ``overwrite=False`` files already present are left alone. Returns
    the paths that were written.
    """
    out_dir = Path(directory)
    out_dir.mkdir(parents=True, exist_ok=True)

    written = []
    for width, height in PROFILE_SIZES:
        key = ProfileOverlay(width=width, height=height).asset_key
        path = out_dir / f"{key}.png"
        if path.exists() and not overwrite:
            continue
        profile_overlay(width, height).save(path, format="PNG")
        written.append(path)
    return written
