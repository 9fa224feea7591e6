from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass

import requests
from requests import RequestException

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UnsplashImageSearch:
    access_key: str
    per_page: int = 12
    name: str = "unsplash"

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Client-ID {self.access_key}"}

    def search_sync(self, query: str) -> list[str]:
        url = "https://api.unsplash.com/search/photos"
        params = {
            "query": query,
            "per_page": self.per_page,
            "orientation": "landscape",
            "content_filter": "high",
        }
        headers = self._headers()

        last_err: Exception | None = None
        data = None
        for attempt in range(3):
            try:
                r = requests.get(url, params=params,
                                 headers=headers, timeout=20)
                r.raise_for_status()
                data = r.json()
                break
            except RequestException as e:
                last_err = e
                time.sleep(0.4 * (attempt + 1))
        if data is None:
            raise last_err or RuntimeError("Unsplash search failed")

        results = data.get("results") or [] if isinstance(data, dict) else []
        candidates: list[str] = []
        for item in results:
            urls = item.get("urls") or {} if isinstance(item, dict) else {}
            # Prefer reasonably sized images.
            cand = urls.get("regular") or urls.get("small")
            if cand:
                candidates.append(str(cand))
        logger.debug("unsplash q=%r results=%d", query[:80], len(candidates))
        return candidates

    async def search(self, query: str) -> list[str]:
        return await asyncio.to_thread(self.search_sync, query)
