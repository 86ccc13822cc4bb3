"""
Error types raised by the poster pipeline and its input layers.
"""


class PosterError(Exception):
    """Base class for poster generation failures."""


class ImageDecodeError(PosterError):
    """The subject (or accent) image could not be loaded or decoded."""

    def __init__(self, message: str = "Failed to load the image for editing"):
        super().__init__(message)


class SurfaceUnavailableError(PosterError):
    """A drawing surface could not be allocated."""

    def __init__(self, message: str = "Could not acquire a drawing surface"):
        super().__init__(message)


class PosterValidationError(PosterError):
    """Caller-supplied input was rejected before generation started."""
