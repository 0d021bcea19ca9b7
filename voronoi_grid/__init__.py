"""Relevance-weighted Voronoi layout: force simulation plus clipped tessellation."""

from .catalog import DEMO_ITEMS, Item, load_catalog
from .config import LayoutParams, load_config
from .errors import ConfigError, LayoutError, SchedulerUnavailableError, TickError
from .orchestrator import Frame, FrameOrchestrator, OrchestratorState
from .relevance import score, target_radius
from .scheduler import AsyncioTickScheduler, ManualTickScheduler, TickScheduler
from .state import SimulationState
from .tessellation import Cell, build_cells

__version__ = "0.1.0"

__all__ = [
    "AsyncioTickScheduler", "Cell", "ConfigError", "DEMO_ITEMS", "Frame",
    "FrameOrchestrator", "Item", "LayoutError", "LayoutParams",
    "ManualTickScheduler", "OrchestratorState", "SchedulerUnavailableError",
    "SimulationState", "TickError", "TickScheduler", "build_cells",
    "load_catalog", "load_config", "score", "target_radius",
]
