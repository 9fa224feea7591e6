from __future__ import annotations

import asyncio
import mimetypes
from dataclasses import dataclass
from pathlib import Path, PurePath

TEXT_EXTENSIONS = (".txt", ".md")


@dataclass(frozen=True)
class SourceFile:
    """A user-supplied file, held in memory or on disk."""

    name: str
    content_type: str | None = None
    data: bytes | None = None
    path: Path | None = None

    @classmethod
    def from_path(cls, path: str | Path, content_type: str | None = None) -> "SourceFile":
        path = Path(path)
        guessed, _ = mimetypes.guess_type(path.name)
        return cls(name=path.name, content_type=content_type or guessed, path=path)

    @property
    def stem(self) -> str:
        return PurePath(self.name).stem

    @property
    def is_plain_text(self) -> bool:
        if self.content_type:
            return self.content_type.split(";")[0].strip() == "text/plain"
        return self.name.lower().endswith(TEXT_EXTENSIONS)

    async def read_bytes(self) -> bytes:
        if self.data is not None:
            return self.data
        if self.path is None:
            raise ValueError(f"File {self.name!r} has neither data nor path")
        return await asyncio.to_thread(self.path.read_bytes)

    async def read_text(self) -> str:
        raw = await self.read_bytes()
        return raw.decode("utf-8", errors="replace")
