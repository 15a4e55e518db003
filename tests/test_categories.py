import json

import pytest

from app.categories.service import DEFAULT_CATEGORIES, CategoryCatalog, load_catalog
from app.categories.schemas import CategoryDef
from app.main import app


def test_style_lookup_is_case_insensitive():
    catalog = load_catalog()
    assert catalog.style_for("Transport").icon == "🚌"
    assert catalog.style_for(" FOOD ").color == "#60a5fa"


def test_unknown_category_falls_back_to_other():
    catalog = load_catalog()
    style = catalog.style_for("eating out")
    assert style.icon == "📦"
    assert style.color == "#94a3b8"
    assert catalog.style_for(None).icon == "📦"


def test_catalog_without_other_still_styles_unknowns():
    catalog = CategoryCatalog([CategoryDef(id="rent", name="Rent", icon="🏠", color="#000000")])
    assert catalog.style_for("whatever").color == "#94a3b8"


def test_catalog_is_immutable():
    catalog = load_catalog()
    with pytest.raises(Exception):
        next(iter(catalog)).color = "#ffffff"
    assert len(catalog) == len(DEFAULT_CATEGORIES)


def test_catalog_loaded_from_json(tmp_path):
    path = tmp_path / "categories.json"
    path.write_text(json.dumps([
        {"id": "pets", "name": "Pets", "icon": "🐶", "color": "#123456"},
        {"id": "other", "name": "Other", "icon": "❓", "color": "#654321"},
    ]), encoding="utf-8")

    catalog = load_catalog(str(path))
    assert [c.id for c in catalog] == ["pets", "other"]
    assert catalog.style_for("PETS").icon == "🐶"
    assert catalog.style_for("food").icon == "❓"


def test_app_has_catalog_installed():
    assert isinstance(app.state.categories, CategoryCatalog)


def test_create_form_lists_categories(auth_client):
    body = auth_client.get("/expenses/create").text
    for category in DEFAULT_CATEGORIES:
        assert f'value="{category.id}"' in body
