from __future__ import annotations

import logging
import math
import time
from collections.abc import Mapping
from typing import Any

from slideforge.models import (DEFAULT_CONTENT_STYLE, DEFAULT_TITLE_STYLE,
                               EPOCH_ISO, Background, ColorBackground,
                               GradientBackground, ImageBackground,
                               Presentation, Slide, TextStyle, stamped_id)
from slideforge.theme import DEFAULT_THEME, is_theme

logger = logging.getLogger(__name__)

_STYLE_STR_FIELDS = ("fontSize", "fontFamily", "color")
_STYLE_BOOL_FIELDS = ("bold", "italic", "underline")


def _text(value: Any) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None


def _number(value: Any) -> float | None:
    # bool is an int subclass; never treat True as 1.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    if not math.isfinite(number):
        return None
    return number


def _normalize_background(raw: Any) -> Background:
    if not isinstance(raw, Mapping):
        return ColorBackground(value="#ffffff")

    kind = raw.get("type")
    if kind == "color":
        return ColorBackground(value=_text(raw.get("value")) or "#ffffff")

    if kind == "gradient":
        angle = _number(raw.get("angle"))
        return GradientBackground(
            color1=_text(raw.get("color1")) or "#ffffff",
            color2=_text(raw.get("color2")) or "#bbbbbb",
            angle=90 if angle is None else int(min(max(angle, 0.0), 360.0)),
        )

    if kind == "image":
        value = _text(raw.get("value"))
        if value is None:
            return ColorBackground(value="#ffffff")
        opacity = _number(raw.get("opacity"))
        blur = _number(raw.get("blur"))
        return ImageBackground(
            value=value,
            opacity=1.0 if opacity is None else min(max(opacity, 0.0), 1.0),
            blur=0 if blur is None else int(max(blur, 0.0)),
        )

    return ColorBackground(value="#ffffff")


def _merge_style(raw: Any, default: TextStyle) -> TextStyle:
    """Shallow-merge stored style fields over a named default, field by field."""
    merged = default.to_document()
    if not isinstance(raw, Mapping):
        return default

    for key in _STYLE_STR_FIELDS:
        value = _text(raw.get(key))
        if value is not None:
            merged[key] = value
    for key in _STYLE_BOOL_FIELDS:
        value = raw.get(key)
        if isinstance(value, bool):
            merged[key] = value
    shadow = raw.get("textShadow")
    if isinstance(shadow, str):
        merged["textShadow"] = shadow

    return TextStyle.model_validate(merged)


def _normalize_id(value: Any) -> str | None:
    if isinstance(value, str) and value:
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return None


def normalize_slide(raw: Any, index: int, *, stamp: int | None = None) -> Slide:
    """Repair one stored slide; every missing or mistyped field gets its default."""
    if not isinstance(raw, Mapping):
        raw = {}

    content = raw.get("content")
    if isinstance(content, (list, tuple)):
        bullets = [item for item in content if isinstance(item, str)]
    else:
        bullets = []

    return Slide(
        id=_normalize_id(raw.get("id")) or stamped_id(index, stamp),
        title=_text(raw.get("title")) or "Untitled Slide",
        content=bullets,
        background=_normalize_background(raw.get("background")),
        title_style=_merge_style(raw.get("titleStyle"), DEFAULT_TITLE_STYLE),
        content_style=_merge_style(
            raw.get("contentStyle"), DEFAULT_CONTENT_STYLE),
    )


def normalize_presentation(raw: Any) -> Presentation:
    """Make a loaded document structurally valid no matter what was stored.

    - Never raises; `None`, non-mappings and empty objects yield a valid deck
    - Non-list `slides` is treated as an empty deck
    - Each slide is repaired by `normalize_slide`
    - Unknown theme names fall back to the default palette entry
    - Normalizing an already normalized deck returns an equal deck
    """
    if isinstance(raw, Presentation):
        raw = raw.to_document()
    if not isinstance(raw, Mapping):
        if raw is not None:
            logger.warning("Discarding non-object presentation document (%s)",
                           type(raw).__name__)
        raw = {}

    stamp = int(time.time() * 1000)

    raw_slides = raw.get("slides")
    if not isinstance(raw_slides, (list, tuple)):
        raw_slides = []

    slides = [normalize_slide(s, i, stamp=stamp)
              for i, s in enumerate(raw_slides)]

    theme = raw.get("theme")
    return Presentation(
        id=_normalize_id(raw.get("id")) or str(stamp),
        user_id=_normalize_id(raw.get("userId")) or "unknown_user",
        title=_text(raw.get("title")) or "Untitled Presentation",
        slides=slides,
        theme=theme.strip() if is_theme(theme) else DEFAULT_THEME,
        created_at=_text(raw.get("createdAt")) or EPOCH_ISO,
    )
