"""Shared fakes for the generation, image and persistence collaborators."""

import asyncio

import pytest

from slideforge.errors import GenerationFailure
from slideforge.images.acquisition import ImageAcquisition
from slideforge.images.search import ImageSearchChain, PlaceholderImageSearch
from slideforge.models import (ColorBackground, Presentation, Slide,
                               GradientBackground)
from slideforge.storage import MemoryStore, PersistenceService


class FakeContentGenerator:
    name = "fake"

    def __init__(self, slides=None, error=None):
        self.slides = slides
        self.error = error
        self.calls = []

    async def generate_slides(self, text, slide_count, *, from_text=False):
        self.calls.append((text, slide_count, from_text))
        if self.error is not None:
            raise self.error
        return self.slides


class FakeImageGenerator:
    name = "fake-images"

    def __init__(self, error=None, delays=None):
        self.error = error
        self.delays = delays or {}
        self.prompts = []

    async def generate_image(self, prompt):
        self.prompts.append(prompt)
        await asyncio.sleep(self.delays.get(prompt, 0))
        if self.error is not None:
            raise self.error
        return f"https://images.test/{prompt}.jpg"


class FakeSearchProvider:
    def __init__(self, name, results=None, error=None, log=None):
        self.name = name
        self.results = results or []
        self.error = error
        self.log = log if log is not None else []

    async def search(self, query):
        self.log.append(self.name)
        if self.error is not None:
            raise self.error
        return list(self.results)


class BrokenStore(MemoryStore):
    def set(self, key, value):
        raise OSError("disk full")


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def persistence(store):
    return PersistenceService(store)


@pytest.fixture
def image_generator():
    return FakeImageGenerator()


@pytest.fixture
def images(image_generator):
    chain = ImageSearchChain([PlaceholderImageSearch()])
    return ImageAcquisition(image_generator, chain)


@pytest.fixture
def failing_images():
    chain = ImageSearchChain([PlaceholderImageSearch()])
    return ImageAcquisition(FakeImageGenerator(error=GenerationFailure("quota")), chain)


def make_presentation(count=3, **overrides):
    slides = [
        Slide(id=f"s{i}", title=f"Slide {i}", content=[f"point {i}"])
        for i in range(count)
    ]
    if count > 1:
        slides[1] = slides[1].model_copy(update={
            "background": GradientBackground(color1="#111111", color2="#222222", angle=45)})
    fields = {
        "id": "p1",
        "user_id": "u1",
        "title": "Quarterly Review",
        "slides": slides,
        "theme": "Default",
        "created_at": "2024-05-01T10:00:00.000Z",
    }
    fields.update(overrides)
    return Presentation(**fields)


@pytest.fixture
def presentation():
    return make_presentation()


WHITE_BG = ColorBackground(value="#ffffff")
