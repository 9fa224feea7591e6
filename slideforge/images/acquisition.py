from __future__ import annotations

import base64
import logging
from io import BytesIO

from PIL import Image, UnidentifiedImageError

from slideforge.ai.base import ImageGenerator
from slideforge.errors import GenerationFailure, ValidationError
from slideforge.files import SourceFile
from slideforge.images.search import ImageSearchChain, SearchOutcome
from slideforge.models import Background, ImageBackground, ImageMode, WHITE
from slideforge.style import DEFAULT_PLACEHOLDER_BASE, placeholder_image_url

logger = logging.getLogger(__name__)


def _image_mime(data: bytes, declared: str | None) -> str:
    try:
        with Image.open(BytesIO(data)) as img:
            fmt = img.format
    except (UnidentifiedImageError, OSError):
        fmt = None
    if fmt and Image.MIME.get(fmt):
        return Image.MIME[fmt]
    if declared and declared.startswith("image/"):
        return declared
    raise ValidationError("Uploaded file is not a readable image")


class ImageAcquisition:
    """Resolves slide backgrounds from AI generation, web search, or nothing."""

    def __init__(
        self,
        image_generator: ImageGenerator | None,
        search_chain: ImageSearchChain,
        *,
        placeholder_base: str = DEFAULT_PLACEHOLDER_BASE,
    ):
        self.image_generator = image_generator
        self.search_chain = search_chain
        self.placeholder_base = placeholder_base

    def placeholder(self, prompt: str) -> ImageBackground:
        return ImageBackground(
            value=placeholder_image_url(prompt, base=self.placeholder_base))

    async def search(self, query: str) -> SearchOutcome:
        return await self.search_chain.search(query)

    async def resolve_background(self, prompt: str, mode: ImageMode) -> Background:
        if mode == "none":
            return WHITE

        if mode == "ai":
            if self.image_generator is None:
                raise GenerationFailure("No image generator configured")
            try:
                ref = await self.image_generator.generate_image(prompt)
            except GenerationFailure:
                raise
            except Exception as e:
                raise GenerationFailure(f"Image generation failed: {e}") from e
            if not ref:
                raise GenerationFailure("Image generator returned nothing")
            return ImageBackground(value=ref, opacity=1.0, blur=0)

        if mode == "search":
            outcome = await self.search(prompt)
            if not outcome.found:
                raise GenerationFailure(f"No images found for {prompt!r}")
            return ImageBackground(value=outcome.images[0], opacity=1.0, blur=0)

        raise ValueError(f"Unknown image mode: {mode!r}")

    async def resolve_background_or_placeholder(self, prompt: str, mode: ImageMode) -> Background:
        """Bulk-generation variant: a failed image becomes a seeded placeholder."""
        try:
            return await self.resolve_background(prompt, mode)
        except GenerationFailure as e:
            logger.warning("Using placeholder image for %r: %s",
                           prompt[:80], e)
            return self.placeholder(prompt)


async def background_from_upload(file: SourceFile) -> ImageBackground:
    """Read an uploaded image and inline it as a data URI background."""
    data = await file.read_bytes()
    mime = _image_mime(data, file.content_type)
    encoded = base64.b64encode(data).decode("ascii")
    return ImageBackground(value=f"data:{mime};base64,{encoded}", opacity=1.0, blur=0)


def background_from_gallery(url: str) -> ImageBackground:
    return ImageBackground(value=url, opacity=1.0, blur=0)
