from __future__ import annotations

import asyncio
import base64
import json
import logging
from typing import Any

from google import genai
from google.genai import types
from openai import OpenAI

from slideforge.ai.base import ContentGenerator, ImageGenerator
from slideforge.ai.prompt import (fallback_slides, image_prompt,
                                  system_prompt, text_prompt, topic_prompt)
from slideforge.config import Settings, settings
from slideforge.errors import GenerationFailure
from slideforge.style import placeholder_image_url

logger = logging.getLogger(__name__)

_JSON_ONLY = "Return ONLY valid JSON. Do not include markdown fences or commentary."


def _list_supported_models(client) -> list[str]:
    try:
        models = list(client.models.list())
    except Exception:
        logger.debug("Listing Gemini models failed", exc_info=True)
        return []

    supported: list[str] = []
    for m in models:
        name = getattr(m, "name", None)
        actions = getattr(m, "supported_actions", None) or []
        if not name:
            continue
        if any(a.lower() == "generatecontent" for a in actions):
            supported.append(name)
    return supported


def _pick_model_name(client, preferred: str) -> str:
    supported = _list_supported_models(client)
    if not supported:
        return preferred

    preferred_l = preferred.lower()
    for m in supported:
        if m.lower() in (preferred_l, f"models/{preferred_l}"):
            return m

    flash = [m for m in supported if "flash" in m.lower()]
    gemini = [m for m in supported if "gemini" in m.lower()]
    return (flash or gemini or supported)[0]


def _extract_json_text(text: str) -> str:
    text = text.strip()
    if text[:1] in "[{" and text[-1:] in "]}":
        return text

    starts = [i for i in (text.find("["), text.find("{")) if i != -1]
    end = max(text.rfind("]"), text.rfind("}"))
    if not starts or end == -1 or end <= min(starts):
        raise ValueError("No JSON found in model output")
    return text[min(starts): end + 1]


def parse_slides_text(text: str | None) -> list[Any]:
    """Pull the slide list out of model output (bare array or {"slides": [...]})."""
    if not text:
        raise GenerationFailure("Model returned no text")
    try:
        data: Any = json.loads(_extract_json_text(text))
    except ValueError as e:
        raise GenerationFailure(f"Model output is not JSON: {e}") from e

    if isinstance(data, dict):
        data = data.get("slides")
    if not isinstance(data, list):
        raise GenerationFailure("Model output has no slide list")
    return data


def _build_prompt(text: str, slide_count: int, from_text: bool) -> str:
    if from_text:
        return text_prompt(text, slide_count)
    return topic_prompt(text, slide_count)


def _data_uri(data: bytes | str, mime: str = "image/jpeg") -> str:
    if isinstance(data, bytes):
        data = base64.b64encode(data).decode("ascii")
    return f"data:{mime};base64,{data}"


# --- Gemini ---

_SLIDES_SCHEMA = types.Schema(
    type=types.Type.ARRAY,
    items=types.Schema(
        type=types.Type.OBJECT,
        properties={
            "title": types.Schema(type=types.Type.STRING),
            "content": types.Schema(
                type=types.Type.ARRAY, items=types.Schema(type=types.Type.STRING)),
        },
        required=["title", "content"],
    ),
)


class GeminiClient:
    name = "gemini"

    def __init__(self, api_key: str, *, model: str, image_model: str):
        self.client = genai.Client(api_key=api_key)
        self.model = model
        self.image_model = image_model
        self._resolved_model: str | None = None

    def _model_name(self) -> str:
        if self._resolved_model is None:
            self._resolved_model = _pick_model_name(self.client, self.model)
        return self._resolved_model

    def _generate_slides_sync(self, text: str, slide_count: int, from_text: bool) -> list[Any]:
        prompt = _build_prompt(text, slide_count, from_text)
        try:
            resp = self.client.models.generate_content(
                model=self._model_name(),
                contents=prompt,
                config=types.GenerateContentConfig(
                    system_instruction=system_prompt(),
                    response_mime_type="application/json",
                    response_schema=_SLIDES_SCHEMA,
                    temperature=0.2,
                ),
            )
        except Exception as e:
            raise GenerationFailure(f"Gemini content call failed: {e}") from e
        return parse_slides_text(getattr(resp, "text", None))

    async def generate_slides(self, text: str, slide_count: int, *, from_text: bool = False) -> list[Any]:
        return await asyncio.to_thread(self._generate_slides_sync, text, slide_count, from_text)

    def _generate_image_sync(self, prompt: str) -> str:
        try:
            resp = self.client.models.generate_images(
                model=self.image_model,
                prompt=image_prompt(prompt),
                config=types.GenerateImagesConfig(
                    number_of_images=1,
                    output_mime_type="image/jpeg",
                    aspect_ratio="16:9",
                ),
            )
            image_bytes = resp.generated_images[0].image.image_bytes
        except Exception as e:
            raise GenerationFailure(f"Gemini image call failed: {e}") from e
        if not image_bytes:
            raise GenerationFailure("Gemini returned an empty image")
        return _data_uri(image_bytes, "image/jpeg")

    async def generate_image(self, prompt: str) -> str:
        return await asyncio.to_thread(self._generate_image_sync, prompt)


# --- OpenAI ---

class OpenAIClient:
    name = "openai"

    def __init__(self, api_key: str, *, model: str, image_model: str):
        self.client = OpenAI(api_key=api_key)
        self.model = model
        self.image_model = image_model

    def _generate_slides_sync(self, text: str, slide_count: int, from_text: bool) -> list[Any]:
        messages = [
            {"role": "system", "content": system_prompt()},
            {"role": "user", "content": _build_prompt(text, slide_count, from_text)},
            {"role": "user", "content": _JSON_ONLY},
        ]
        # Prefer JSON mode when available; fall back to plain text + extraction.
        try:
            resp = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=0.2,
                response_format={"type": "json_object"},
            )
        except Exception:
            logger.info("OpenAI JSON mode unavailable, retrying as plain text")
            try:
                resp = self.client.chat.completions.create(
                    model=self.model,
                    messages=messages,
                    temperature=0.2,
                )
            except Exception as e:
                raise GenerationFailure(
                    f"OpenAI content call failed: {e}") from e
        return parse_slides_text(resp.choices[0].message.content)

    async def generate_slides(self, text: str, slide_count: int, *, from_text: bool = False) -> list[Any]:
        return await asyncio.to_thread(self._generate_slides_sync, text, slide_count, from_text)

    def _generate_image_sync(self, prompt: str) -> str:
        try:
            resp = self.client.images.generate(
                model=self.image_model,
                prompt=image_prompt(prompt),
                size="1536x1024",
                n=1,
            )
            item = resp.data[0]
        except Exception as e:
            raise GenerationFailure(f"OpenAI image call failed: {e}") from e
        if getattr(item, "b64_json", None):
            return _data_uri(item.b64_json, "image/png")
        if getattr(item, "url", None):
            return str(item.url)
        raise GenerationFailure("OpenAI returned an empty image")

    async def generate_image(self, prompt: str) -> str:
        return await asyncio.to_thread(self._generate_image_sync, prompt)


# --- Offline stand-ins ---

class MockContentGenerator:
    """Deterministic slides for local runs without any API key."""

    name = "mock"

    async def generate_slides(self, text: str, slide_count: int, *, from_text: bool = False) -> list[Any]:
        return fallback_slides(text, slide_count, from_text=from_text)


class PlaceholderImageGenerator:
    """Seeded stock-photo URLs for local runs without any API key."""

    name = "placeholder"

    def __init__(self, base_url: str):
        self.base_url = base_url

    async def generate_image(self, prompt: str) -> str:
        return placeholder_image_url(prompt, base=self.base_url)


# --- Factories ---

def _configured_clients(cfg: Settings) -> list[GeminiClient | OpenAIClient]:
    provider = (cfg.ai_provider or "auto").strip().lower()
    clients: list[GeminiClient | OpenAIClient] = []

    if provider in ("auto", "gemini") and cfg.gemini_api_key:
        clients.append(GeminiClient(
            cfg.gemini_api_key, model=cfg.gemini_model, image_model=cfg.gemini_image_model))
    if provider in ("auto", "openai") and cfg.openai_api_key:
        clients.append(OpenAIClient(
            cfg.openai_api_key, model=cfg.openai_model, image_model=cfg.openai_image_model))
    return clients


def get_content_generator(cfg: Settings | None = None) -> ContentGenerator:
    cfg = cfg or settings
    clients = _configured_clients(cfg)
    if clients:
        return clients[0]
    logger.warning(
        "No AI API key configured; using mock data for slide generation.")
    return MockContentGenerator()


def get_image_generator(cfg: Settings | None = None) -> ImageGenerator:
    cfg = cfg or settings
    clients = _configured_clients(cfg)
    if clients:
        return clients[0]
    logger.warning(
        "No AI API key configured; using placeholder images for generation.")
    return PlaceholderImageGenerator(cfg.placeholder_image_url)
