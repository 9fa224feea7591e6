"""Tests for model-output parsing, offline generators and prompt fallbacks."""

import asyncio

import pytest

from slideforge.ai.client import (MockContentGenerator,
                                  PlaceholderImageGenerator,
                                  get_content_generator, get_image_generator,
                                  parse_slides_text)
from slideforge.ai.prompt import mock_slides, mock_slides_from_text, text_prompt, topic_prompt
from slideforge.config import Settings
from slideforge.errors import GenerationFailure


OFFLINE = Settings(ai_provider="auto", gemini_api_key=None, openai_api_key=None)


def test_parse_bare_array():
    assert parse_slides_text('[{"title": "A", "content": []}]') == [
        {"title": "A", "content": []}]


def test_parse_wrapped_object_with_chatter():
    text = 'Sure! ```json\n{"slides": [{"title": "A", "content": ["x"]}]}\n``` Enjoy.'
    assert parse_slides_text(text) == [{"title": "A", "content": ["x"]}]


@pytest.mark.parametrize("text", [None, "", "no json here", '{"title": "x"}'])
def test_unusable_output_raises(text):
    with pytest.raises(GenerationFailure):
        parse_slides_text(text)


def test_offline_factories_use_stand_ins():
    assert isinstance(get_content_generator(OFFLINE), MockContentGenerator)
    assert isinstance(get_image_generator(OFFLINE), PlaceholderImageGenerator)


def test_mock_generator_respects_source_kind():
    gen = MockContentGenerator()
    topic = asyncio.run(gen.generate_slides("Bees", 2))
    text = asyncio.run(gen.generate_slides("Bees are great", 2, from_text=True))
    assert topic[0]["title"] == "Introduction to Bees"
    assert text[0]["title"] == "Summary of Your Text"


def test_placeholder_image_generator():
    gen = PlaceholderImageGenerator("https://picsum.photos")
    assert asyncio.run(gen.generate_image("Tall Trees")) == (
        "https://picsum.photos/seed/TallTrees/1280/720")


@pytest.mark.parametrize("count", [1, 2, 7])
def test_mock_slides_have_exact_count(count):
    assert len(mock_slides("X", count)) == count
    assert len(mock_slides_from_text("X", count)) == count


def test_prompts_mention_slide_count_and_input():
    assert "4 slides" in topic_prompt("Jazz history", 4)
    assert "Historical" in topic_prompt("Jazz history", 4)
    assert '"""some text"""' in text_prompt("some text", 3)
