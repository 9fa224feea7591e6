"""Tests for repairing stored presentation documents."""

import json

import pytest

from slideforge.models import (DEFAULT_CONTENT_STYLE, DEFAULT_TITLE_STYLE,
                               EPOCH_ISO, ColorBackground, GradientBackground,
                               ImageBackground)
from slideforge.normalize import normalize_presentation, normalize_slide

from conftest import make_presentation


MALFORMED = [
    None,
    {},
    "not a presentation",
    42,
    [],
    {"slides": None},
    {"slides": "nope"},
    {"id": "x", "slides": [None, 7, "slide", {}]},
    {
        "id": "p9",
        "userId": "u9",
        "title": "",
        "theme": "Neon",
        "slides": [
            {"id": "a", "title": 5, "content": "bullet",
             "background": {"type": "video"}},
            {"background": {"type": "gradient"},
             "titleStyle": {"fontSize": 12, "bold": "yes", "color": "#ff0000"}},
            {"background": {"type": "image", "value": "https://x/y.png"},
             "contentStyle": None},
            {"background": {"type": "image"}},
            {"background": {"type": "color"}, "content": ["ok", 3, None, "fine"]},
        ],
    },
]


# ============================================================
# TOTALITY
# ============================================================

def test_none_yields_defaults():
    p = normalize_presentation(None)
    assert p.slides == []
    assert p.user_id == "unknown_user"
    assert p.title == "Untitled Presentation"
    assert p.theme == "Default"
    assert p.created_at == EPOCH_ISO
    assert p.id


def test_slide_with_no_fields_gets_every_default():
    slide = normalize_slide({}, 0, stamp=1000)
    assert slide.id == "1000-0"
    assert slide.title == "Untitled Slide"
    assert slide.content == []
    assert slide.background == ColorBackground(value="#ffffff")
    assert slide.title_style == DEFAULT_TITLE_STYLE
    assert slide.content_style == DEFAULT_CONTENT_STYLE


def test_synthesized_slide_ids_are_distinct():
    p = normalize_presentation({"slides": [{}, {}, {}]})
    ids = [s.id for s in p.slides]
    assert len(set(ids)) == 3


@pytest.mark.parametrize("raw", MALFORMED)
def test_never_raises(raw):
    p = normalize_presentation(raw)
    for slide in p.slides:
        assert isinstance(slide.content, list)


# ============================================================
# IDEMPOTENCE
# ============================================================

@pytest.mark.parametrize("raw", MALFORMED)
def test_idempotent(raw):
    once = normalize_presentation(raw)
    twice = normalize_presentation(once)
    assert twice.model_dump() == once.model_dump()


def test_idempotent_through_json_document():
    once = normalize_presentation(MALFORMED[-1])
    again = normalize_presentation(json.loads(json.dumps(once.to_document())))
    assert again == once


def test_valid_presentation_is_unchanged():
    p = make_presentation()
    assert normalize_presentation(p) == p


# ============================================================
# FIELD RULES
# ============================================================

def test_unknown_background_type_becomes_white():
    slide = normalize_slide({"background": {"type": "video", "value": "x"}}, 0)
    assert slide.background == ColorBackground(value="#ffffff")


def test_background_of_wrong_shape_becomes_white():
    slide = normalize_slide({"background": "blue"}, 0)
    assert slide.background == ColorBackground(value="#ffffff")


def test_gradient_missing_fields_get_defaults():
    slide = normalize_slide({"background": {"type": "gradient"}}, 0)
    assert slide.background == GradientBackground(
        color1="#ffffff", color2="#bbbbbb", angle=90)


def test_gradient_keeps_present_fields():
    slide = normalize_slide(
        {"background": {"type": "gradient", "color1": "#000000", "angle": 0}}, 0)
    assert slide.background.color1 == "#000000"
    assert slide.background.color2 == "#bbbbbb"
    assert slide.background.angle == 0


def test_image_missing_numbers_get_defaults():
    slide = normalize_slide(
        {"background": {"type": "image", "value": "https://x/y.png"}}, 0)
    assert slide.background == ImageBackground(
        value="https://x/y.png", opacity=1.0, blur=0)


def test_image_numbers_are_clamped():
    slide = normalize_slide(
        {"background": {"type": "image", "value": "u", "opacity": 4, "blur": -3}}, 0)
    assert slide.background.opacity == 1.0
    assert slide.background.blur == 0


def test_image_without_value_becomes_white():
    slide = normalize_slide({"background": {"type": "image"}}, 0)
    assert slide.background == ColorBackground(value="#ffffff")


def test_style_is_merged_over_default_field_by_field():
    slide = normalize_slide(
        {"titleStyle": {"color": "#ff0000", "fontSize": 12, "italic": True}}, 0)
    assert slide.title_style.color == "#ff0000"
    assert slide.title_style.italic is True
    # Wrong-typed fields keep the default.
    assert slide.title_style.font_size == DEFAULT_TITLE_STYLE.font_size
    assert slide.title_style.bold is True


def test_content_keeps_only_strings():
    slide = normalize_slide({"content": ["a", 1, None, "b"]}, 0)
    assert slide.content == ["a", "b"]


def test_non_list_content_is_replaced():
    slide = normalize_slide({"content": "a single string"}, 0)
    assert slide.content == []


def test_unknown_theme_falls_back_to_default():
    p = normalize_presentation({"id": "p", "theme": "Neon"})
    assert p.theme == "Default"


def test_palette_theme_is_kept():
    p = normalize_presentation({"id": "p", "theme": "Nature"})
    assert p.theme == "Nature"


HUGE = int("1" + "0" * 400)


def test_huge_integers_fall_back_to_defaults():
    raw = json.loads(json.dumps({"id": "p", "slides": [
        {"background": {"type": "gradient", "angle": HUGE}},
        {"background": {"type": "image", "value": "u", "opacity": HUGE, "blur": -HUGE}},
    ]}))
    p = normalize_presentation(raw)
    assert p.slides[0].background.angle == 90
    assert p.slides[1].background.opacity == 1.0
    assert p.slides[1].background.blur == 0
