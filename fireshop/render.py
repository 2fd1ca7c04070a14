from pathlib import Path
from typing import Protocol

from fireshop.errors import RenderError


class PageRenderer(Protocol):
    def render(self, url: str) -> str:
        ...


class IndexRenderer:
    """Serves the pre-rendered storefront index document."""

    def __init__(self, index_path: Path):
        self.index_path = Path(index_path)

    def render(self, url: str) -> str:
        try:
            return self.index_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise RenderError(f"Cannot render {url}: {exc}") from exc
