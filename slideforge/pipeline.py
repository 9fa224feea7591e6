from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from slideforge.ai.base import ContentGenerator
from slideforge.ai.prompt import fallback_slides
from slideforge.config import settings
from slideforge.errors import GenerationFailure, ValidationError
from slideforge.files import SourceFile
from slideforge.images.acquisition import ImageAcquisition
from slideforge.models import (DEFAULT_CONTENT_STYLE, DEFAULT_TITLE_STYLE,
                               ImageMode, Presentation, Slide, SourceKind,
                               new_id, stamped_id, utc_now_iso)
from slideforge.storage import PersistenceService
from slideforge.theme import get_theme

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContentSource:
    kind: SourceKind = "direct"
    payload: str | None = None
    title: str | None = None
    file: SourceFile | None = None


@dataclass(frozen=True)
class ResolvedContent:
    text: str
    title: str
    from_text: bool


def _file_placeholder_text(file: SourceFile) -> str:
    return f"This presentation is about the contents of the file named: {file.name}"


def validate_source(source: ContentSource, slide_count: int) -> None:
    """Reject insufficient input before anything touches the network."""
    if slide_count < 1:
        raise ValidationError("Slide count must be at least 1.")

    if source.kind == "direct":
        if not (source.title or source.payload or "").strip():
            raise ValidationError(
                "Presentation Title is required for AI generation.")
    elif source.kind == "pastedText":
        if not (source.payload or "").strip():
            raise ValidationError("Please provide content in the text area.")
    elif source.kind == "uploadedFile":
        if source.file is None:
            raise ValidationError("Please upload a file.")
        if source.file.data is None and not (
                source.file.path is not None and source.file.path.is_file()):
            raise ValidationError(
                f"Could not find the uploaded file {source.file.name!r}.")
    else:
        raise ValidationError(f"Unknown content source: {source.kind!r}")


async def resolve_content(source: ContentSource) -> ResolvedContent:
    title = (source.title or "").strip()

    if source.kind == "direct":
        topic = title or (source.payload or "").strip()
        return ResolvedContent(text=topic, title=topic, from_text=False)

    if source.kind == "pastedText":
        text = source.payload or ""
        return ResolvedContent(
            text=text, title=title or f"{text[:50]}...", from_text=True)

    file = source.file
    if file is None:
        raise ValidationError("Please upload a file.")
    if file.is_plain_text:
        try:
            text = await file.read_text()
        except OSError as e:
            raise ValidationError(
                f"Could not read the uploaded file {file.name!r}.") from e
    else:
        logger.warning(
            "File type %s not directly readable, using file name as content.",
            file.content_type)
        text = _file_placeholder_text(file)
    return ResolvedContent(text=text, title=title or file.stem, from_text=True)


def coerce_generated(raw: Any) -> list[dict] | None:
    """Return clean ``{"title", "content"}`` pairs, or None when unusable."""
    if not isinstance(raw, list) or not raw:
        return None

    pairs: list[dict] = []
    for item in raw:
        if not isinstance(item, Mapping):
            return None
        title = item.get("title")
        content = item.get("content")
        if title is not None and not isinstance(title, str):
            return None
        if content is not None and not isinstance(content, list):
            return None
        pairs.append({
            "title": title or "",
            "content": [c for c in (content or []) if isinstance(c, str)],
        })
    return pairs


async def generate_slide_contents(
    generator: ContentGenerator, resolved: ResolvedContent, slide_count: int
) -> list[dict]:
    try:
        raw = await generator.generate_slides(
            resolved.text, slide_count, from_text=resolved.from_text)
        pairs = coerce_generated(raw)
        if pairs is None:
            raise GenerationFailure("Generator returned malformed slides")
        return pairs
    except Exception as e:
        logger.warning("Slide generation via %s failed, using fallback: %s",
                       getattr(generator, "name", "generator"), e)
        return fallback_slides(resolved.text, slide_count, from_text=resolved.from_text)


async def generate_presentation(
    source: ContentSource,
    slide_count: int,
    image_mode: ImageMode,
    *,
    user_id: str,
    theme: str | None = None,
    content_generator: ContentGenerator | None = None,
    images: ImageAcquisition | None = None,
    persistence: PersistenceService | None = None,
) -> Presentation:
    validate_source(source, slide_count)

    if content_generator is None:
        from slideforge.ai.client import get_content_generator

        content_generator = get_content_generator()
    if images is None:
        images = default_image_acquisition()
    if persistence is None:
        from slideforge.storage import get_store

        persistence = PersistenceService(get_store())

    resolved = await resolve_content(source)
    pairs = await generate_slide_contents(content_generator, resolved, slide_count)

    backgrounds = await asyncio.gather(*[
        images.resolve_background_or_placeholder(
            pair["title"] or resolved.title, image_mode)
        for pair in pairs
    ])

    stamp = int(time.time() * 1000)
    slides = [
        Slide(
            id=stamped_id(index, stamp),
            title=pair["title"] or "Untitled Slide",
            content=pair["content"],
            background=background,
            title_style=DEFAULT_TITLE_STYLE,
            content_style=DEFAULT_CONTENT_STYLE,
        )
        for index, (pair, background) in enumerate(zip(pairs, backgrounds))
    ]

    presentation = Presentation(
        id=new_id(),
        user_id=user_id,
        title=resolved.title,
        slides=slides,
        theme=get_theme(theme or settings.default_theme).name,
        created_at=utc_now_iso(),
    )
    logger.info("Generated presentation %s with %d slides (images=%s)",
                presentation.id, len(slides), image_mode)
    return await asyncio.to_thread(persistence.save_presentation, presentation)


def default_image_acquisition() -> ImageAcquisition:
    from slideforge.ai.client import get_image_generator
    from slideforge.images.search import build_search_chain

    return ImageAcquisition(
        get_image_generator(),
        build_search_chain(),
        placeholder_base=settings.placeholder_image_url,
    )
