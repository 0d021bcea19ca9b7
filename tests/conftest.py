import matplotlib

matplotlib.use("Agg")

import pytest

from voronoi_grid.catalog import Item
from voronoi_grid.config import LayoutParams
from voronoi_grid.orchestrator import FrameOrchestrator
from voronoi_grid.scheduler import ManualTickScheduler


@pytest.fixture
def params():
    return LayoutParams(seed=7)


@pytest.fixture
def items():
    return [
        Item("a", "Neon Tokyo", "Cyberpunk", ("city", "night", "neon")),
        Item("b", "Forest Mist", "Nature", ("trees", "fog", "green")),
        Item("c", "Green Valley", "Nature", ("green", "grass")),
        Item("d", "Deep Ocean", "Abstract", ("blue", "water")),
        Item("e", "Urban Jungle", "Architecture", ("city", "modern")),
    ]


@pytest.fixture
def scheduler():
    return ManualTickScheduler()


@pytest.fixture
def orchestrator(params, scheduler):
    return FrameOrchestrator(params, scheduler=scheduler)
