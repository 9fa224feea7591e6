from __future__ import annotations


class SlideForgeError(Exception):
    """Base class for every error raised by slideforge."""


class ValidationError(SlideForgeError, ValueError):
    """The chosen content source is missing the input it needs."""


class GenerationFailure(SlideForgeError):
    """A content or image generator failed or returned unusable data."""


class PersistenceWriteFailure(SlideForgeError):
    """Writing to the key-value store raised."""


class NotFound(SlideForgeError, LookupError):
    """No presentation exists with the requested id."""

    def __init__(self, presentation_id: str):
        super().__init__(f"Presentation not found: {presentation_id}")
        self.presentation_id = presentation_id
