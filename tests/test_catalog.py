import json

import pytest

from voronoi_grid.catalog import (DEMO_ITEMS, Item, load_catalog,
                                  validate_catalog)
from voronoi_grid.errors import ConfigError


class TestCatalog:

    def test_demo_items(self):
        assert len(DEMO_ITEMS) == 12
        assert len({item.id for item in DEMO_ITEMS}) == 12
        assert all(item.image.startswith("https://") for item in DEMO_ITEMS)

    def test_item_from_dict(self):
        item = Item.from_dict({"id": 7, "title": "Lake", "tags": ["water"]})
        assert item.id == "7"
        assert item.category == ""
        assert item.tags == ("water",)
        assert Item.from_dict(item.to_dict()) == item

    def test_item_missing_title(self):
        with pytest.raises(ConfigError):
            Item.from_dict({"id": "1"})

    def test_item_tags_must_be_a_list(self):
        with pytest.raises(ConfigError, match="tags"):
            Item.from_dict({"id": "1", "title": "Lake", "tags": "water"})

    def test_duplicate_ids(self):
        with pytest.raises(ConfigError):
            validate_catalog([Item("x", "A", "c"), Item("x", "B", "c")])

    def test_load_catalog(self, tmp_path):
        path = tmp_path / "items.json"
        path.write_text(json.dumps([item.to_dict() for item in DEMO_ITEMS[:3]]))
        assert load_catalog(str(path)) == list(DEMO_ITEMS[:3])

    def test_load_catalog_rejects_object(self, tmp_path):
        path = tmp_path / "items.json"
        path.write_text(json.dumps({"id": "1"}))
        with pytest.raises(ConfigError):
            load_catalog(str(path))
