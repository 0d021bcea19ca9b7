"""
Item Catalog
============

Items are owned by an external catalog; the engine only reads them. A demo
catalog of twelve image items is bundled for the command line tool.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple

from .errors import ConfigError


@dataclass(frozen=True)
class Item:
    id: str
    title: str
    category: str
    tags: Tuple[str, ...] = field(default_factory=tuple)
    image: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Item":
        tags = data.get("tags", ()) if isinstance(data, dict) else ()
        if not isinstance(tags, (list, tuple)):
            raise ConfigError(f"malformed item {data!r}: tags must be a list")
        try:
            return cls(
                id=str(data["id"]),
                title=str(data["title"]),
                category=str(data.get("category", "")),
                tags=tuple(str(t) for t in tags),
                image=str(data.get("image", "")),
            )
        except (KeyError, TypeError) as exc:
            raise ConfigError(f"malformed item {data!r}: {exc}") from exc

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "title": self.title, "category": self.category,
                "tags": list(self.tags), "image": self.image}


def validate_catalog(items: Sequence[Item]) -> List[Item]:
    """Return the catalog as a list, rejecting duplicate identifiers."""
    seen = set()
    for item in items:
        if item.id in seen:
            raise ConfigError(f"duplicate item id {item.id!r} in catalog")
        seen.add(item.id)
    return list(items)


def load_catalog(filepath: str) -> List[Item]:
    """Load a JSON list of item objects."""
    try:
        with open(filepath) as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"{filepath}: invalid JSON ({exc})") from exc
    if not isinstance(data, list):
        raise ConfigError(f"{filepath}: expected a list of items")
    return validate_catalog([Item.from_dict(d) for d in data])


_UNSPLASH = "https://images.unsplash.com/photo-{}?q=80&w=1000&auto=format&fit=crop"

DEMO_ITEMS: Tuple[Item, ...] = (
    Item("1", "Neon Tokyo", "Cyberpunk", ("city", "night", "lights", "neon"),
         _UNSPLASH.format("1540979388789-6cee28a1cdc9")),
    Item("2", "Alpine Solitude", "Nature", ("mountain", "snow", "winter", "peace"),
         _UNSPLASH.format("1519681393784-d120267933ba")),
    Item("3", "Desert Mirage", "Nature", ("sand", "heat", "dry", "orange"),
         _UNSPLASH.format("1473580044384-7ba9967e16a0")),
    Item("4", "Deep Ocean", "Abstract", ("blue", "water", "dark", "mystery"),
         _UNSPLASH.format("1551244072-5d12893278ab")),
    Item("5", "Urban Jungle", "Architecture", ("building", "green", "city", "modern"),
         _UNSPLASH.format("1449824913935-59a10b8d2000")),
    Item("6", "Cosmic Dust", "Space", ("stars", "galaxy", "purple", "dust"),
         _UNSPLASH.format("1534796636912-3b95b3ab5986")),
    Item("7", "Glass Prism", "Abstract", ("light", "refraction", "color", "shape"),
         _UNSPLASH.format("1504198458649-3128b932f49e")),
    Item("8", "Forest Mist", "Nature", ("trees", "fog", "green", "morning"),
         _UNSPLASH.format("1441974231531-c6227db76b6e")),
    Item("9", "Cyber Circuit", "Tech", ("computer", "chip", "data", "future"),
         _UNSPLASH.format("1518770660439-4636190af475")),
    Item("10", "Volcanic Ash", "Nature", ("fire", "dark", "smoke", "power"),
         _UNSPLASH.format("1462331940025-496dfbfc7564")),
    Item("11", "Geometric Wall", "Architecture", ("pattern", "white", "shadow", "minimal"),
         _UNSPLASH.format("1486325212027-8081e485255e")),
    Item("12", "Liquid Gold", "Abstract", ("yellow", "fluid", "shiny", "metal"),
         _UNSPLASH.format("1500462918059-b1a0cb512f1d")),
)
