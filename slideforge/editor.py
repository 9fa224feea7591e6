from __future__ import annotations

import logging
from typing import Any, Literal

from pydantic import ValidationError as PydanticValidationError

from slideforge.files import SourceFile
from slideforge.images.acquisition import (ImageAcquisition,
                                           background_from_gallery,
                                           background_from_upload)
from slideforge.images.search import SearchOutcome
from slideforge.models import (DEFAULT_CONTENT_STYLE, DEFAULT_TITLE_STYLE,
                               WHITE, Background, BackgroundKind,
                               Presentation, Slide, TextStyle, new_id)
from slideforge.storage import PersistenceService
from slideforge.style import DEFAULT_PLACEHOLDER_BASE, default_background

logger = logging.getLogger(__name__)

EditTab = Literal["content", "background"]

_SLIDE_FIELDS = frozenset(Slide.model_fields) - {"id"}
_STYLE_FIELDS = frozenset(TextStyle.model_fields)


class SlideEditor:
    """Editing session over one in-memory presentation.

    Every mutation is synchronous and total: indices outside the deck are
    ignored rather than raised on. Network-backed helpers are async and drop
    their result if the session was closed while they were in flight.
    """

    def __init__(
        self,
        presentation: Presentation,
        *,
        persistence: PersistenceService | None = None,
        images: ImageAcquisition | None = None,
    ):
        self.presentation = presentation.model_copy(deep=True)
        self.persistence = persistence
        self.images = images
        self.current_index = 0
        self.active_tab: EditTab = "content"
        self.gallery: list[str] = []
        self.gallery_message: str | None = None
        self.closed = False
        self._image_prompt: str | None = None

    @classmethod
    def open(
        cls,
        persistence: PersistenceService,
        presentation_id: str,
        *,
        images: ImageAcquisition | None = None,
    ) -> "SlideEditor":
        presentation = persistence.require_presentation(presentation_id)
        return cls(presentation, persistence=persistence, images=images)

    # --- cursor ---

    @property
    def slides(self) -> list[Slide]:
        return self.presentation.slides

    @property
    def is_empty(self) -> bool:
        return not self.slides

    @property
    def current_slide(self) -> Slide | None:
        if 0 <= self.current_index < len(self.slides):
            return self.slides[self.current_index]
        return None

    def _in_range(self, index: int) -> bool:
        return 0 <= index < len(self.slides)

    def navigate(self, delta: int) -> int:
        if self.slides:
            target = self.current_index + delta
            self.current_index = min(max(target, 0), len(self.slides) - 1)
        return self.current_index

    def next_slide(self) -> int:
        return self.navigate(1)

    def previous_slide(self) -> int:
        return self.navigate(-1)

    def go_to(self, index: int) -> int:
        if self._in_range(index):
            self.current_index = index
        return self.current_index

    def set_tab(self, tab: EditTab) -> None:
        self.active_tab = tab

    # --- structure ---

    def add_slide(self) -> Slide:
        first = self.slides[0] if self.slides else None
        slide = Slide(
            id=new_id(),
            title="New Slide Title",
            content=["New slide content."],
            background=WHITE,
            title_style=first.title_style if first else DEFAULT_TITLE_STYLE,
            content_style=first.content_style if first else DEFAULT_CONTENT_STYLE,
        )
        self.slides.append(slide)
        self.current_index = len(self.slides) - 1
        return slide

    def delete_slide(self, index: int | None = None) -> bool:
        """Remove a slide (the current one by default); a lone slide is kept."""
        if len(self.slides) <= 1:
            return False
        if index is None:
            index = self.current_index
        if not self._in_range(index):
            return False
        del self.slides[index]
        self.current_index = min(self.current_index, len(self.slides) - 1)
        return True

    def reorder(self, from_index: int, to_index: int) -> bool:
        # The cursor keeps its index; it does not follow the moved slide.
        if not (self._in_range(from_index) and self._in_range(to_index)):
            return False
        moved = self.slides.pop(from_index)
        self.slides.insert(to_index, moved)
        return True

    # --- slide fields ---

    def update_slide(self, index: int, **fields: Any) -> bool:
        if not self._in_range(index):
            return False
        updates = {k: v for k, v in fields.items() if k in _SLIDE_FIELDS}
        self.slides[index] = self.slides[index].model_copy(update=updates)
        return True

    def set_title(self, title: str) -> bool:
        return self.update_slide(self.current_index, title=title)

    def set_content_text(self, text: str) -> bool:
        content = [] if text == "" else text.split("\n")
        return self.update_slide(self.current_index, content=content)

    def _update_style(self, attr: str, fields: dict[str, Any]) -> bool:
        slide = self.current_slide
        if slide is None:
            return False
        updates = {k: v for k, v in fields.items() if k in _STYLE_FIELDS}
        style = getattr(slide, attr).model_copy(update=updates)
        return self.update_slide(self.current_index, **{attr: style})

    def update_title_style(self, **fields: Any) -> bool:
        return self._update_style("title_style", fields)

    def update_content_style(self, **fields: Any) -> bool:
        return self._update_style("content_style", fields)

    # --- backgrounds ---

    def change_background(self, background: Background) -> bool:
        return self.update_slide(self.current_index, background=background)

    def switch_background_type(self, kind: BackgroundKind) -> bool:
        """Replace the background with a fresh default of another kind."""
        slide = self.current_slide
        if slide is None:
            return False
        base = self.images.placeholder_base if self.images else DEFAULT_PLACEHOLDER_BASE
        return self.change_background(
            default_background(kind, seed=slide.id, placeholder_base=base))

    def adjust_background(self, **fields: Any) -> bool:
        """Edit fields of the current background variant; other keys are ignored."""
        slide = self.current_slide
        if slide is None:
            return False
        bg = slide.background
        allowed = frozenset(type(bg).model_fields) - {"type"}
        updates = {k: v for k, v in fields.items() if k in allowed}
        if not updates:
            return False
        try:
            adjusted = type(bg).model_validate({**bg.model_dump(), **updates})
        except PydanticValidationError:
            logger.info("Ignoring out-of-range background edit %r", updates)
            return False
        return self.change_background(adjusted)

    # --- images ---

    @property
    def image_prompt(self) -> str:
        if self._image_prompt is not None:
            return self._image_prompt
        slide = self.current_slide
        return slide.title if slide else ""

    @image_prompt.setter
    def image_prompt(self, value: str | None) -> None:
        self._image_prompt = value

    def _apply_to(self, slide_id: str, background: Background) -> bool:
        if self.closed:
            logger.debug("Editor closed; discarding background for %s", slide_id)
            return False
        for i, slide in enumerate(self.slides):
            if slide.id == slide_id:
                return self.update_slide(i, background=background)
        return False

    async def regenerate_image(self, prompt: str | None = None) -> bool:
        """Generate an AI background for the current slide.

        Raises GenerationFailure so the caller can tell the user to retry.
        """
        slide = self.current_slide
        prompt = prompt if prompt is not None else self.image_prompt
        if slide is None or not prompt or self.images is None:
            return False
        background = await self.images.resolve_background(prompt, "ai")
        return self._apply_to(slide.id, background)

    async def search_gallery(self, query: str) -> SearchOutcome:
        if not query.strip() or self.images is None:
            return SearchOutcome()
        self.gallery = []
        outcome = await self.images.search(query)
        if not self.closed:
            self.gallery = outcome.images
            self.gallery_message = outcome.message
        return outcome

    def select_gallery_image(self, url: str) -> bool:
        return self.change_background(background_from_gallery(url))

    async def upload_background(self, file: SourceFile) -> bool:
        slide = self.current_slide
        if slide is None:
            return False
        background = await background_from_upload(file)
        return self._apply_to(slide.id, background)

    # --- lifecycle ---

    def save(self) -> Presentation:
        if self.persistence is None:
            raise RuntimeError("Editor has no persistence service")
        return self.persistence.save_presentation(self.presentation)

    def close(self) -> None:
        self.closed = True
