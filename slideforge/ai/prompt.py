from __future__ import annotations


def system_prompt() -> str:
    return (
        "You are an expert presentation content creator. "
        "Return ONLY valid JSON. "
        "No markdown, no extra keys, no commentary."
    )


_SHAPE = """
Output MUST be valid JSON of this shape:
  {{
    "slides": [
      {{ "title": string, "content": string[] }},
      ...
    ]
  }}
- Use exactly {slide_count} slides.
""".strip()


def topic_prompt(topic: str, slide_count: int) -> str:
    domain_hints = _detect_domain_hints(topic)

    return f"""
Based on the following description, create a professional-level presentation with {slide_count} slides. Each slide must include:

1. A clear, concise title.
2. 3–5 key bullet points summarizing the main ideas.
3. Logical flow across slides (Introduction → Problem → Solution → Use Cases → Benefits → Conclusion).

Analyze the description and:
- Understand the core topic, purpose, and audience.
- Identify usage, use cases, and benefits.
- Organize content into a structured presentation format.

{domain_hints}

{_SHAPE.format(slide_count=slide_count)}

DESCRIPTION: \"\"\"{topic}\"\"\"
""".strip()


def text_prompt(text: str, slide_count: int) -> str:
    return f"""
Based on the following text, create a presentation with {slide_count} slides. Each slide must have:

1. A concise, professional title.
2. 3–5 key bullet points summarizing the information clearly.
3. Logical flow across slides (Introduction → Problem → Solution → Use Cases → Benefits → Conclusion).

Analyze the text and:
- Identify its core topic and purpose.
- Extract usage, use cases, and benefits.
- Organize content into a structured presentation format.

{_SHAPE.format(slide_count=slide_count)}

TEXT: \"\"\"{text}\"\"\"
""".strip()


def image_prompt(subject: str) -> str:
    return (
        "A professional, minimalist, and visually appealing presentation "
        f'background image for a slide about: "{subject}"'
    )


def _detect_domain_hints(topic: str) -> str:
    """Tone hints for the topic prompt, keyed on words in the topic."""
    topic_lower = topic.lower()

    if any(word in topic_lower for word in ["history", "war", "independence", "revolution", "invention", "discovery"]):
        return (
            "Domain: Historical/Documentary\n"
            "- Include specific dates and key figures in content\n"
            "- Order slides chronologically"
        )

    elif any(word in topic_lower for word in ["business", "strategy", "management", "corporate", "onboarding", "process"]):
        return (
            "Domain: Business/Corporate\n"
            "- Content should be action-oriented with clear steps"
        )

    elif any(word in topic_lower for word in ["technology", "science", "innovation", "ai", "software", "programming", "data"]):
        return (
            "Domain: Technology/Science\n"
            "- Content should be technical yet accessible"
        )

    elif any(word in topic_lower for word in ["education", "learning", "teaching", "training", "course", "study"]):
        return (
            "Domain: Education/Learning\n"
            "- Content should be pedagogical with clear explanations"
        )

    else:
        return (
            "Domain: General\n"
            "- Content should be clear and well-structured"
        )


def mock_slides(topic: str, slide_count: int) -> list[dict]:
    # Deterministic fallback for topic decks when no model is reachable.
    slides = [
        {
            "title": f"Introduction to {topic}",
            "content": ["By SlideForge AI", "An AI-powered presentation"],
        }
    ]
    for i in range(2, slide_count + 1):
        slides.append(
            {
                "title": f"Topic {i - 1} of {topic}",
                "content": [
                    f"This is bullet point 1 for slide {i}.",
                    "This is bullet point 2 discussing a key aspect.",
                    "And a final concluding point for this slide.",
                ],
            }
        )
    return slides[:max(slide_count, 1)]


def mock_slides_from_text(text: str, slide_count: int) -> list[dict]:
    # Deterministic fallback for decks built from pasted or uploaded text.
    slides = [
        {
            "title": "Summary of Your Text",
            "content": [
                "Based on the content you provided.",
                f'First few words: "{text[:30]}..."',
            ],
        }
    ]
    for i in range(2, slide_count + 1):
        slides.append(
            {
                "title": f"Key Point {i - 1}",
                "content": [
                    "This slide discusses a key point from the text.",
                    "Further details and analysis would go here.",
                ],
            }
        )
    return slides[:max(slide_count, 1)]


def fallback_slides(text: str, slide_count: int, *, from_text: bool) -> list[dict]:
    if from_text:
        return mock_slides_from_text(text, slide_count)
    return mock_slides(topic=text, slide_count=slide_count)
