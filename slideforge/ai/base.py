from __future__ import annotations

from typing import Any, Protocol


class ContentGenerator(Protocol):
    """Turns text into an ordered list of ``{"title", "content"}`` pairs."""

    name: str

    async def generate_slides(
        self, text: str, slide_count: int, *, from_text: bool = False
    ) -> list[Any]: ...


class ImageGenerator(Protocol):
    """Turns a prompt into one image reference (URL or data URI)."""

    name: str

    async def generate_image(self, prompt: str) -> str: ...
