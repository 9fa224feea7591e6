"""Tests for background image resolution and the search provider chain."""

import asyncio
import base64
from io import BytesIO

import pytest
from PIL import Image

from slideforge.config import Settings
from slideforge.errors import GenerationFailure, ValidationError
from slideforge.files import SourceFile
from slideforge.images.acquisition import (ImageAcquisition,
                                           background_from_gallery,
                                           background_from_upload)
from slideforge.images.search import (ImageSearchChain, PlaceholderImageSearch,
                                      build_search_chain)
from slideforge.images.serpapi import SerpApiImageSearch
from slideforge.models import ColorBackground, ImageBackground

from conftest import FakeImageGenerator, FakeSearchProvider


def run(coro):
    return asyncio.run(coro)


URLS = [f"https://img.test/u{i}.jpg" for i in range(1, 13)]


# ============================================================
# SEARCH CHAIN
# ============================================================

def test_failed_primary_falls_back_in_order():
    log = []
    chain = ImageSearchChain([
        FakeSearchProvider("primary", error=RuntimeError("503"), log=log),
        FakeSearchProvider("fallback", results=URLS, log=log),
    ])
    outcome = run(chain.search("office"))

    assert outcome.images == URLS
    assert outcome.provider == "fallback"
    assert log == ["primary", "fallback"]
    assert outcome.found


def test_first_non_empty_provider_wins():
    log = []
    chain = ImageSearchChain([
        FakeSearchProvider("empty", results=[], log=log),
        FakeSearchProvider("second", results=["a"], log=log),
        FakeSearchProvider("third", results=["b"], log=log),
    ])
    outcome = run(chain.search("q"))
    assert outcome.images == ["a"]
    assert log == ["empty", "second"]


def test_exhausted_search_reports_no_images_without_raising():
    chain = ImageSearchChain([
        FakeSearchProvider("a", error=RuntimeError("down")),
        FakeSearchProvider("b", results=[]),
    ])
    outcome = run(chain.search("q"))
    assert not outcome.found
    assert outcome.images == []
    assert outcome.message == "No images found"
    assert len(outcome.errors) == 2


def test_placeholder_provider_is_seeded_by_query():
    urls = run(PlaceholderImageSearch().search("modern office"))
    assert len(urls) == 12
    assert urls[0] == "https://picsum.photos/seed/modernoffice0/400/300"
    assert urls[11] == "https://picsum.photos/seed/modernoffice11/400/300"


def test_chain_without_keys_is_placeholder_only():
    chain = build_search_chain(Settings(serpapi_api_key=None, unsplash_access_key=None))
    assert [p.name for p in chain.providers] == ["placeholder"]


def test_chain_with_keys_keeps_placeholder_last():
    chain = build_search_chain(Settings(serpapi_api_key="k", unsplash_access_key="u"))
    assert [p.name for p in chain.providers] == ["serpapi", "unsplash", "placeholder"]


class _Response:
    def __init__(self, payload):
        self.payload = payload

    def raise_for_status(self):
        return None

    def json(self):
        return self.payload


def test_serpapi_returns_thumbnails(monkeypatch):
    seen = {}

    def fake_get(url, params=None, timeout=None):
        seen.update(params)
        return _Response({"images_results": [
            {"thumbnail": "https://t/1.jpg"}, {"title": "no thumb"}, {"thumbnail": "https://t/2.jpg"}]})

    monkeypatch.setattr("slideforge.images.serpapi.requests.get", fake_get)
    urls = run(SerpApiImageSearch(api_key="secret").search("cats"))

    assert urls == ["https://t/1.jpg", "https://t/2.jpg"]
    assert seen["tbm"] == "isch"
    assert seen["q"] == "cats"


# ============================================================
# RESOLVING BACKGROUNDS
# ============================================================

def test_none_mode_is_white(images):
    assert run(images.resolve_background("x", "none")) == ColorBackground(value="#ffffff")


def test_ai_mode_wraps_generated_image(images):
    bg = run(images.resolve_background("Mountains", "ai"))
    assert bg == ImageBackground(value="https://images.test/Mountains.jpg", opacity=1.0, blur=0)


def test_ai_failure_is_raised(failing_images):
    with pytest.raises(GenerationFailure):
        run(failing_images.resolve_background("x", "ai"))


def test_unexpected_ai_error_is_converted():
    images = ImageAcquisition(FakeImageGenerator(error=KeyError("bad payload")),
                              ImageSearchChain([]))
    with pytest.raises(GenerationFailure):
        run(images.resolve_background("x", "ai"))


def test_placeholder_downgrade_is_deterministic(failing_images):
    first = run(failing_images.resolve_background_or_placeholder("Deep Sea", "ai"))
    second = run(failing_images.resolve_background_or_placeholder("Deep Sea", "ai"))
    assert first == second
    assert first.value == "https://picsum.photos/seed/DeepSea/1280/720"


def test_search_mode_with_nothing_found_downgrades():
    images = ImageAcquisition(None, ImageSearchChain([FakeSearchProvider("a")]))
    bg = run(images.resolve_background_or_placeholder("Sky", "search"))
    assert bg.value == "https://picsum.photos/seed/Sky/1280/720"


# ============================================================
# UPLOAD AND GALLERY
# ============================================================

def _png_bytes():
    buf = BytesIO()
    Image.new("RGB", (4, 4), (255, 0, 0)).save(buf, format="PNG")
    return buf.getvalue()


def test_upload_is_inlined_as_data_uri():
    data = _png_bytes()
    bg = run(background_from_upload(SourceFile(name="red.png", data=data)))

    assert bg.value == "data:image/png;base64," + base64.b64encode(data).decode("ascii")
    assert bg.opacity == 1.0
    assert bg.blur == 0


def test_upload_from_disk(tmp_path):
    path = tmp_path / "red.png"
    path.write_bytes(_png_bytes())
    bg = run(background_from_upload(SourceFile.from_path(path)))
    assert bg.value.startswith("data:image/png;base64,")


def test_upload_of_non_image_is_rejected():
    with pytest.raises(ValidationError):
        run(background_from_upload(SourceFile(name="notes.txt", data=b"hello")))


def test_gallery_selection_wraps_url():
    assert background_from_gallery("https://g/1.jpg") == ImageBackground(
        value="https://g/1.jpg", opacity=1.0, blur=0)
