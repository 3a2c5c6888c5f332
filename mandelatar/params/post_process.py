"""Per-request post-processing options, parsed from the query string.

Unlike the viewport descriptor these are not part of the token: the same
image URL can be fetched with or without an overlay.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Union

from mandelatar.errors import InvalidPostProcessConfig
from mandelatar.params.descriptor import OUTPUT_HEIGHT, OUTPUT_WIDTH

OVERLAY_PARAM = "overlay"


@dataclass(frozen=True)
class ProfileOverlay:
    """Circular profile-picture frame drawn over the avatar."""

    width: int
    height: int

    @property
    def asset_key(self) -> str:
        if (self.width, self.height) == (300, 300):
            return "profile_overlay_300x300"
        return "profile_overlay_600x600"


# Closed set of overlay kinds. Add new variants here.
OverlayKind = Union[ProfileOverlay]

_OVERLAY_CHOICES = {
    "profile": lambda: ProfileOverlay(width=OUTPUT_WIDTH, height=OUTPUT_HEIGHT),
}


@dataclass(frozen=True)
class PostProcessConfig:
    overlay: OverlayKind | None = None

    @classmethod
    def from_query_params(cls, pairs: Iterable[tuple[str, str]]) -> PostProcessConfig:
        """Build a config from (key, value) query pairs.

        Unknown keys are ignored; a known key with an unknown value raises
        InvalidPostProcessConfig. When a key repeats, the last value wins.
        """
        overlay: OverlayKind | None = None
        for key, value in pairs:
            if key != OVERLAY_PARAM:
                continue
            make = _OVERLAY_CHOICES.get(value)
            if make is None:
                raise InvalidPostProcessConfig("Invalid overlay type given.")
            overlay = make()
        return cls(overlay=overlay)

    def should_post_process(self) -> bool:
        return self.overlay is not None
