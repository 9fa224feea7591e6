from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

import requests

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SerpApiImageSearch:
    """Google Images results through SerpApi; returns thumbnail URLs."""

    api_key: str
    endpoint: str = "https://serpapi.com/search.json"
    name: str = "serpapi"

    def search_sync(self, query: str) -> list[str]:
        params = {"q": query, "tbm": "isch", "api_key": self.api_key}
        r = requests.get(self.endpoint, params=params, timeout=20)
        r.raise_for_status()
        data = r.json()

        rows = data.get("images_results") or [] if isinstance(data, dict) else []
        urls = [
            str(row["thumbnail"])
            for row in rows
            if isinstance(row, dict) and row.get("thumbnail")
        ]
        logger.debug("serpapi q=%r results=%d", query[:80], len(urls))
        return urls

    async def search(self, query: str) -> list[str]:
        return await asyncio.to_thread(self.search_sync, query)
