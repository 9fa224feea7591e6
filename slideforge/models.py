from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Annotated, Literal, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

EPOCH_ISO = "1970-01-01T00:00:00.000Z"


def utc_now_iso() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_id() -> str:
    return uuid4().hex


def stamped_id(index: int, stamp: int | None = None) -> str:
    # "<epoch millis>-<index>": distinct within one generation or load pass.
    if stamp is None:
        stamp = int(time.time() * 1000)
    return f"{stamp}-{index}"


class _Document(BaseModel):
    """Camel-cased on the wire and in the store, snake_cased in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class _Value(_Document):
    model_config = ConfigDict(frozen=True)


# --- Text styling ---

class TextStyle(_Value):
    font_size: str
    font_family: str
    color: str
    bold: bool = False
    italic: bool = False
    underline: bool = False
    text_shadow: str | None = None


DEFAULT_TITLE_STYLE = TextStyle(
    font_size="48px", font_family="Arial", color="#000000", bold=True)
DEFAULT_CONTENT_STYLE = TextStyle(
    font_size="24px", font_family="Arial", color="#333333")


# --- Backgrounds ---

BackgroundKind = Literal["color", "gradient", "image"]


class ColorBackground(_Value):
    type: Literal["color"] = "color"
    value: str = "#ffffff"


class GradientBackground(_Value):
    type: Literal["gradient"] = "gradient"
    color1: str = "#ffffff"
    color2: str = "#bbbbbb"
    angle: int = Field(default=90, ge=0, le=360)


class ImageBackground(_Value):
    type: Literal["image"] = "image"
    value: str
    opacity: float = Field(default=1.0, ge=0.0, le=1.0)
    blur: int = Field(default=0, ge=0)


Background = Annotated[
    Union[ColorBackground, GradientBackground, ImageBackground],
    Field(discriminator="type"),
]

WHITE = ColorBackground(value="#ffffff")


# --- Records ---

class Slide(_Document):
    id: str
    title: str = "Untitled Slide"
    content: list[str] = Field(default_factory=list)
    background: Background = WHITE
    title_style: TextStyle = DEFAULT_TITLE_STYLE
    content_style: TextStyle = DEFAULT_CONTENT_STYLE


class PresentationMeta(_Document):
    id: str
    title: str
    slide_count: int
    created_at: str


class Presentation(_Document):
    id: str
    user_id: str
    title: str
    slides: list[Slide] = Field(default_factory=list)
    theme: str = "Default"
    created_at: str = EPOCH_ISO

    def meta(self) -> PresentationMeta:
        return PresentationMeta(
            id=self.id,
            title=self.title,
            slide_count=len(self.slides),
            created_at=self.created_at,
        )


class User(_Document):
    id: str
    name: str
    email: str


# --- HTTP request / response bodies ---

ImageMode = Literal["ai", "search", "none"]
SourceKind = Literal["direct", "pastedText", "uploadedFile"]


class UploadPayload(_Document):
    name: str
    content_type: str | None = None
    # Base64 of the file bytes.
    data: str


class GenerateRequest(_Document):
    user_id: str
    kind: SourceKind = "direct"
    title: str | None = None
    text: str | None = None
    file: UploadPayload | None = None
    slide_count: int = Field(default=7, ge=1, le=30)
    image_mode: ImageMode = "none"
    theme: str | None = Field(
        default=None, description="Optional theme preset name")


class SignupRequest(_Document):
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    password: str = Field(min_length=1)


class LoginRequest(_Document):
    email: str
    password: str


class ImageSearchRequest(_Document):
    query: str = Field(min_length=1)


class ImageSearchResponse(_Document):
    found: bool
    images: list[str]
    provider: str | None = None
    message: str | None = None
