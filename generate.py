from __future__ import annotations

import argparse
import asyncio
import sys

from slideforge.config import settings
from slideforge.errors import SlideForgeError
from slideforge.files import SourceFile
from slideforge.logging_setup import configure_logging
from slideforge.pipeline import ContentSource, generate_presentation


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Generate a slide deck and store it")
    parser.add_argument("topic", nargs="?", default=None,
                        help="Topic / title for the deck")
    parser.add_argument("--text-file", default=None,
                        help="Build the deck from this file instead of a topic")
    parser.add_argument("--slides", type=int, default=settings.default_slide_count,
                        help="Number of slides")
    parser.add_argument("--image-mode", choices=["ai", "search", "none"], default="none",
                        help="Where slide background images come from")
    parser.add_argument("--theme", type=str, default=None,
                        help="Theme preset name (e.g., 'Default', 'Corporate Blue')")
    parser.add_argument("--user", default="cli_user",
                        help="Owner id stored on the deck")
    args = parser.parse_args()

    configure_logging(settings.log_level)

    if args.text_file:
        source = ContentSource(
            kind="uploadedFile", title=args.topic, file=SourceFile.from_path(args.text_file))
    else:
        source = ContentSource(kind="direct", title=args.topic)

    try:
        presentation = asyncio.run(generate_presentation(
            source,
            args.slides,
            args.image_mode,
            user_id=args.user,
            theme=args.theme,
        ))
    except SlideForgeError as e:
        print(f"error: {e}", file=sys.stderr)
        raise SystemExit(1)

    meta = presentation.meta()
    print(f"{meta.id}\t{meta.title}\t{meta.slide_count} slides")


if __name__ == "__main__":
    main()
