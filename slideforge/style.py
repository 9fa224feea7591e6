from __future__ import annotations

import re

from slideforge.models import (Background, BackgroundKind, ColorBackground,
                               GradientBackground, ImageBackground, TextStyle)

DEFAULT_PLACEHOLDER_BASE = "https://picsum.photos"
IMAGE_TEXT_SHADOW = "1px 1px 3px rgba(0,0,0,0.7)"


def _seed(text: str) -> str:
    return re.sub(r"\s", "", text or "")


def placeholder_image_url(seed: str, *, base: str = DEFAULT_PLACEHOLDER_BASE,
                          width: int = 1280, height: int = 720) -> str:
    """Deterministic stock-photo URL for a prompt, used when no image can be made."""
    return f"{base.rstrip('/')}/seed/{_seed(seed)}/{width}/{height}"


def default_background(kind: BackgroundKind, *, seed: str = "",
                       placeholder_base: str = DEFAULT_PLACEHOLDER_BASE) -> Background:
    """Fresh background of the given kind, as offered by the type switcher."""
    if kind == "color":
        return ColorBackground(value="#ffffff")
    if kind == "gradient":
        return GradientBackground(color1="#ffffff", color2="#a0aec0", angle=90)
    if kind == "image":
        return ImageBackground(
            value=placeholder_image_url(seed, base=placeholder_base),
            opacity=1.0,
            blur=0,
        )
    raise ValueError(f"Unknown background type: {kind!r}")


def background_css(bg: Background) -> dict[str, str]:
    if isinstance(bg, ColorBackground):
        return {"backgroundColor": bg.value}
    if isinstance(bg, GradientBackground):
        return {
            "backgroundImage": f"linear-gradient({bg.angle}deg, {bg.color1}, {bg.color2})"
        }
    if isinstance(bg, ImageBackground):
        # The image itself is layered on top with its own opacity/blur.
        return {"backgroundColor": "#000"}
    raise TypeError(f"Unsupported background: {bg!r}")


def image_layer_css(bg: ImageBackground) -> dict[str, str]:
    return {
        "backgroundImage": f"url({bg.value})",
        "opacity": str(bg.opacity),
        "filter": f"blur({bg.blur}px)",
    }


def computed_text_style(style: TextStyle, bg: Background) -> TextStyle:
    """Text drawn over a gradient or an image is forced white with a shadow."""
    if isinstance(bg, ColorBackground):
        return style
    if isinstance(bg, (GradientBackground, ImageBackground)):
        return style.model_copy(
            update={"color": "#FFFFFF", "text_shadow": IMAGE_TEXT_SHADOW})
    raise TypeError(f"Unsupported background: {bg!r}")
