import json
from pathlib import Path
from typing import Iterable, Iterator, Optional

from fastapi import Request
from loguru import logger

from .schemas import CategoryDef, CategoryStyle

FALLBACK_CATEGORY_ID = "other"

DEFAULT_CATEGORIES = (
    CategoryDef(id="food", name="Food", icon="🍽️", color="#60a5fa"),
    CategoryDef(id="transport", name="Transport", icon="🚌", color="#a78bfa"),
    CategoryDef(id="entertainment", name="Entertainment", icon="🎮", color="#f472b6"),
    CategoryDef(id="utilities", name="Utilities", icon="💡", color="#fbbf24"),
    CategoryDef(id="housing", name="Housing", icon="🏠", color="#818cf8"),
    CategoryDef(id="gifts", name="Gifts", icon="🎁", color="#fb7185"),
    CategoryDef(id="other", name="Other", icon="📦", color="#94a3b8"),
)

_DEFAULT_STYLE = CategoryStyle(icon="📦", color="#94a3b8")


class CategoryCatalog:
    """Read-only list of known categories, used for styling and form choices."""

    def __init__(self, categories: Iterable[CategoryDef]):
        self._categories = tuple(categories)
        self._by_id = {c.id.lower(): c for c in self._categories}

    def __iter__(self) -> Iterator[CategoryDef]:
        return iter(self._categories)

    def __len__(self) -> int:
        return len(self._categories)

    def get(self, category: Optional[str]) -> Optional[CategoryDef]:
        return self._by_id.get((category or "").strip().lower())

    def style_for(self, category: Optional[str]) -> CategoryStyle:
        match = self.get(category) or self._by_id.get(FALLBACK_CATEGORY_ID)
        if match is None:
            return _DEFAULT_STYLE
        return CategoryStyle(icon=match.icon, color=match.color)


def load_catalog(path: Optional[str] = None) -> CategoryCatalog:
    """Build the catalog from a JSON list of category objects, or the defaults."""
    if not path:
        return CategoryCatalog(DEFAULT_CATEGORIES)

    with open(Path(path), "r", encoding="utf-8") as f:
        raw = json.load(f)

    catalog = CategoryCatalog(CategoryDef(**item) for item in raw)
    logger.info(f"Loaded {len(catalog)} categories from {path}")
    return catalog


def get_categories(request: Request) -> CategoryCatalog:
    return request.app.state.categories
