"""
Frame Files
===========

JSON dump of a published frame, for inspection and post-processing:

    {
        "tick": 120,
        "query": "nature",
        "bounds": [1200.0, 800.0],
        "params": {...},
        "cells": [{"item_id": "1", "title": "...", "category": "...",
                   "polygon": [[x, y], ...], "relevance": 0.8,
                   "center": [x, y]}, ...]
    }
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import List

import numpy as np

from .config import LayoutParams
from .errors import ConfigError
from .orchestrator import Frame


@dataclass
class FrameData:
    """A frame read back from disk."""
    tick: int
    query: str
    width: float
    height: float
    item_ids: List[str]
    titles: List[str]
    polygons: List[np.ndarray]      # each [k, 2]
    relevance: np.ndarray           # [n]
    centers: np.ndarray             # [n, 2]

    @property
    def n_cells(self) -> int:
        return len(self.item_ids)

    @property
    def total_area(self) -> float:
        area = 0.0
        for poly in self.polygons:
            x, y = poly[:, 0], poly[:, 1]
            area += 0.5 * abs(np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y))
        return float(area)


def frame_to_dict(frame: Frame, params: LayoutParams) -> dict:
    cells = []
    for cell in frame.cells:
        data = cell.to_dict()
        data["title"] = cell.item.title
        data["category"] = cell.item.category
        cells.append(data)
    return {
        "tick": frame.tick,
        "query": frame.query,
        "bounds": [params.width, params.height],
        "params": params.to_dict(),
        "cells": cells,
    }


def save_frame(frame: Frame, filepath, params: LayoutParams) -> Path:
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    with open(filepath, 'w') as f:
        json.dump(frame_to_dict(frame, params), f)
    return filepath


def load_frame(filepath) -> FrameData:
    try:
        with open(filepath) as f:
            data = json.load(f)
        width, height = data["bounds"]
        cells = data["cells"]
        return FrameData(
            tick=int(data.get("tick", 0)),
            query=data.get("query", ""),
            width=float(width),
            height=float(height),
            item_ids=[c["item_id"] for c in cells],
            titles=[c.get("title", c["item_id"]) for c in cells],
            polygons=[np.asarray(c["polygon"], dtype=np.float64).reshape(-1, 2)
                      for c in cells],
            relevance=np.array([c["relevance"] for c in cells], dtype=np.float64),
            centers=np.array([c["center"] for c in cells],
                             dtype=np.float64).reshape(-1, 2),
        )
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
        raise ConfigError(f"{filepath}: not a frame file ({exc})") from exc
