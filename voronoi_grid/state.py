"""Per-item kinematic state, stored column-wise."""

from __future__ import annotations

from typing import List, Optional, Sequence

import numpy as np

from .config import LayoutParams


class SimulationState:
    """Tracks position, velocity and radius of every tracked item.

    Row ``i`` of each array belongs to ``ids[i]``. The row count is fixed
    for the lifetime of the state.
    """

    def __init__(self, ids: Sequence[str], x, y, r, target_r, vx=None, vy=None):
        self.ids: List[str] = list(ids)
        self.N = len(self.ids)
        self.x = np.array(x, dtype=np.float64)
        self.y = np.array(y, dtype=np.float64)
        self.vx = np.zeros(self.N) if vx is None else np.array(vx, dtype=np.float64)
        self.vy = np.zeros(self.N) if vy is None else np.array(vy, dtype=np.float64)
        self.r = np.array(r, dtype=np.float64)
        self.target_r = np.array(target_r, dtype=np.float64)

    @classmethod
    def initial(cls, ids: Sequence[str], params: LayoutParams,
                rng: np.random.Generator,
                positions: Optional[np.ndarray] = None) -> "SimulationState":
        """Fresh state: random positions in the rectangle, at rest, base radius."""
        n = len(ids)
        if positions is None:
            x = rng.uniform(0.0, params.width, size=n)
            y = rng.uniform(0.0, params.height, size=n)
        else:
            positions = np.asarray(positions, dtype=np.float64).reshape(n, 2)
            x = np.clip(positions[:, 0], 0.0, params.width)
            y = np.clip(positions[:, 1], 0.0, params.height)
        radii = np.full(n, params.base_radius)
        return cls(ids, x, y, radii, radii.copy())

    def positions(self) -> np.ndarray:
        return np.column_stack([self.x, self.y])

    def copy(self) -> "SimulationState":
        return SimulationState(self.ids, self.x, self.y, self.r, self.target_r,
                               vx=self.vx, vy=self.vy)

    def __len__(self) -> int:
        return self.N
