from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Protocol, Sequence

from slideforge.config import Settings, settings
from slideforge.images.serpapi import SerpApiImageSearch
from slideforge.images.unsplash import UnsplashImageSearch

logger = logging.getLogger(__name__)

NO_IMAGES_FOUND = "No images found"


class ImageSearchProvider(Protocol):
    name: str

    async def search(self, query: str) -> list[str]: ...


@dataclass(frozen=True)
class PlaceholderImageSearch:
    """Last-resort provider: twelve seeded stock-photo URLs for any query."""

    base_url: str = "https://picsum.photos"
    count: int = 12
    name: str = "placeholder"

    async def search(self, query: str) -> list[str]:
        seed = re.sub(r"\s", "", query)
        return [f"{self.base_url.rstrip('/')}/seed/{seed}{i}/400/300" for i in range(self.count)]


@dataclass(frozen=True)
class SearchOutcome:
    images: list[str] = field(default_factory=list)
    provider: str | None = None
    errors: list[str] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return bool(self.images)

    @property
    def message(self) -> str | None:
        return None if self.found else NO_IMAGES_FOUND


class ImageSearchChain:
    """Try providers in order; the first non-empty result wins."""

    def __init__(self, providers: Sequence[ImageSearchProvider]):
        self.providers = list(providers)

    async def search(self, query: str) -> SearchOutcome:
        errors: list[str] = []
        for provider in self.providers:
            try:
                images = await provider.search(query)
            except Exception as e:
                logger.warning("Image provider %s failed for %r: %s",
                               provider.name, query[:80], e)
                errors.append(f"{provider.name}: {type(e).__name__}: {e}")
                continue
            if images:
                return SearchOutcome(images=list(images), provider=provider.name, errors=errors)
            logger.info("Image provider %s had no results for %r",
                        provider.name, query[:80])
            errors.append(f"{provider.name}: no results")

        logger.error("All image providers failed for %r", query[:80])
        return SearchOutcome(errors=errors)


def build_search_chain(cfg: Settings | None = None) -> ImageSearchChain:
    cfg = cfg or settings
    providers: list[ImageSearchProvider] = []
    if cfg.serpapi_api_key:
        providers.append(SerpApiImageSearch(api_key=cfg.serpapi_api_key))
    if cfg.unsplash_access_key:
        providers.append(UnsplashImageSearch(
            access_key=cfg.unsplash_access_key))
    providers.append(PlaceholderImageSearch(base_url=cfg.placeholder_image_url))
    return ImageSearchChain(providers)
