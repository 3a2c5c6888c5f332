"""Error kinds raised by the avatar pipeline.

The HTTP layer maps these onto status codes:

  - ValidationError (and subclasses)  -> 400, user input problem
  - PostProcessingError               -> 500, overlay step failed
  - EncodingError                     -> 500, internal defect
"""

from __future__ import annotations


class MandelatarError(Exception):
    """Base class for every error raised by the package."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ValidationError(MandelatarError):
    """Request input (token, query params) is unusable."""

    def __str__(self) -> str:
        return f"Validation Error: {self.message}"


class DecodeError(ValidationError):
    """Raw token bytes do not describe a viewport."""


class InvalidPostProcessConfig(ValidationError):
    """A recognized query parameter carried an unrecognized value."""


class PostProcessingError(MandelatarError):
    def __str__(self) -> str:
        return f"Failed to perform image post-processing: {self.message}"


class EncodingError(MandelatarError):
    """A raster built by the renderer could not be turned into a PNG."""

    def __str__(self) -> str:
        return f"Failed to encode image: {self.message}"
