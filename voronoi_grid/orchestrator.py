"""
Frame Orchestrator
==================

Owns one simulation and drives it tick by tick through an injected
scheduler:

    STOPPED --start(catalog)--> RUNNING --stop()--> STOPPED

Every tick runs on a working copy of the state:

    step_kinematics -> resolve_collisions -> clamp_to_bounds -> build_cells

and the copy replaces the live state only when all stages succeed. The
resulting Frame is then published to subscribers and the next tick is
requested. A subscriber that raises stops the orchestrator and the error
propagates to the scheduler. A query change rewrites target radii between
ticks, so it takes effect on the following tick.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from .catalog import Item, validate_catalog
from .config import LayoutParams
from .errors import ConfigError, TickError
from .physics import clamp_to_bounds, resolve_collisions, step_kinematics
from .relevance import Scorer, apply_query, score
from .scheduler import AsyncioTickScheduler, TickScheduler
from .state import SimulationState
from .tessellation import Cell, build_cells

log = logging.getLogger(__name__)


class OrchestratorState(Enum):
    STOPPED = 0
    RUNNING = 1


@dataclass(frozen=True)
class Frame:
    """Immutable snapshot published after every tick."""
    tick: int
    query: str
    cells: Tuple[Cell, ...]

    def cell_for(self, item_id: str) -> Optional[Cell]:
        for cell in self.cells:
            if cell.item_id == item_id:
                return cell
        return None


FrameListener = Callable[[Frame], None]


class FrameOrchestrator:
    def __init__(self, params: Optional[LayoutParams] = None,
                 scheduler: Optional[TickScheduler] = None,
                 scorer: Scorer = score,
                 rng: Optional[np.random.Generator] = None):
        self.params = (params if params is not None else LayoutParams()).validate()
        if scheduler is None:
            scheduler = AsyncioTickScheduler(self.params.tick_interval)
        self.scheduler = scheduler
        self.scorer = scorer
        self.rng = rng if rng is not None else np.random.default_rng(self.params.seed)

        self._status = OrchestratorState.STOPPED
        self._items: List[Item] = []
        self._state: Optional[SimulationState] = None
        self._query = ""
        self._tick = 0
        self._generation = 0
        self._listeners: List[FrameListener] = []
        self.latest_frame: Optional[Frame] = None

    # ── Read-only views ──

    @property
    def status(self) -> OrchestratorState:
        return self._status

    @property
    def running(self) -> bool:
        return self._status is OrchestratorState.RUNNING

    @property
    def query(self) -> str:
        return self._query

    @property
    def items(self) -> Tuple[Item, ...]:
        return tuple(self._items)

    @property
    def tick_count(self) -> int:
        return self._tick

    def state(self) -> Optional[SimulationState]:
        """Copy of the current simulation state (None before the first start)."""
        return None if self._state is None else self._state.copy()

    # ── Subscribers ──

    def subscribe(self, listener: FrameListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    # ── Lifecycle ──

    def start(self, catalog: Sequence[Item], initial_positions=None) -> None:
        """Initialize a fresh simulation for ``catalog`` and begin ticking."""
        items = validate_catalog(catalog)
        self.params.validate()
        if initial_positions is not None:
            initial_positions = np.asarray(initial_positions, dtype=np.float64)
            if initial_positions.shape != (len(items), 2):
                raise ConfigError(
                    f"initial_positions must have shape ({len(items)}, 2), "
                    f"got {initial_positions.shape}")

        if self.running:
            log.info("Restarting simulation")
            self.stop()

        state = SimulationState.initial(
            [item.id for item in items], self.params, self.rng, initial_positions)
        apply_query(state, items, self._query, self.params, self.scorer)

        self._items = items
        self._state = state
        self._tick = 0
        self.latest_frame = None
        self._generation += 1
        self._status = OrchestratorState.RUNNING
        try:
            self._schedule()
        except Exception:
            self._status = OrchestratorState.STOPPED
            raise
        log.info("Started simulation: %d items in %.0f x %.0f",
                 len(items), self.params.width, self.params.height)

    def stop(self) -> None:
        if not self.running:
            return
        self._status = OrchestratorState.STOPPED
        self._generation += 1
        self.scheduler.cancel()
        log.info("Stopped simulation after %d ticks", self._tick)

    def set_query(self, query: str) -> None:
        query = query or ""
        if query == self._query:
            return
        if self._state is not None:
            apply_query(self._state, self._items, query, self.params, self.scorer)
        self._query = query
        log.info("Query set to %r", query)

    # ── Ticking ──

    def _schedule(self) -> None:
        generation = self._generation
        self.scheduler.request_tick(lambda: self._on_tick(generation))

    def _on_tick(self, generation: int) -> None:
        if generation != self._generation or not self.running:
            return
        self._run_tick()
        if generation == self._generation and self.running:
            try:
                self._schedule()
            except Exception:
                self._status = OrchestratorState.STOPPED
                raise

    def _run_tick(self) -> Frame:
        p = self.params
        work = self._state.copy()
        try:
            step_kinematics(work, p)
            resolve_collisions(work, p)
            clamp_to_bounds(work, p)
            cells = build_cells(work, self._items, p)
        except Exception as exc:
            log.error("Tick %d abandoned: %s", self._tick + 1, exc)
            self.stop()
            raise TickError(f"tick {self._tick + 1} abandoned: {exc}") from exc

        self._state = work
        self._tick += 1
        frame = Frame(tick=self._tick, query=self._query, cells=tuple(cells))
        self.latest_frame = frame
        log.debug("Tick %d: %d/%d cells", self._tick, len(cells), work.N)

        for listener in list(self._listeners):
            try:
                listener(frame)
            except Exception:
                log.exception("Frame listener failed on tick %d", self._tick)
                self.stop()
                raise
        return frame
