"""
Item Dynamics: Integration, Soft Collisions, Wall Clamp
=======================================================

Each tick runs three stages on a SimulationState, in this order.

(1) Kinematics, per item (semi-implicit Euler, unit time step):
    r  <- r + (r* - r) · α                        radius smoothing
    v  <- v + (c - x) · k_center                  homing toward midpoint c
    v  <- v · friction
    x  <- x + v

(2) Collision relaxation, per unordered pair (i < j), applied in place:
    d        = |x_j - x_i|
    d_min    = (r_i + r_j) · overlap_allow
    if d < d_min:
        F    = (d_min - d) · stiffness
        x_i -= F n̂_ij ;  x_j += F n̂_ij            n̂_ij points from i to j
    Pushes are symmetric and ignore radius. One sweep per tick does not
    converge a dense cluster; overlap shrinks over successive ticks.

(3) Clamp to [0, W] x [0, H]. Velocity is left alone, so an item driven
    into a wall keeps pressing against it until forces turn it around.

The time step is one tick, so motion depends on the tick rate.
"""

from __future__ import annotations

import math

import numpy as np

from .config import LayoutParams
from .state import SimulationState

# Direction used for coincident pairs, rotated per pair so that different
# pairs separate along different axes.
GOLDEN_ANGLE = math.pi * (3.0 - math.sqrt(5.0))


# ══════════════════════════════════════════════════════════════════════
# Kinematics
# ══════════════════════════════════════════════════════════════════════

def step_kinematics(state: SimulationState, p: LayoutParams) -> None:
    state.r += (state.target_r - state.r) * p.radius_smoothing

    cx, cy = p.center
    state.vx += (cx - state.x) * p.centering_gain
    state.vy += (cy - state.y) * p.centering_gain

    state.vx *= p.friction
    state.vy *= p.friction

    state.x += state.vx
    state.y += state.vy


# ══════════════════════════════════════════════════════════════════════
# Collision relaxation
# ══════════════════════════════════════════════════════════════════════

def coincident_direction(i: int, j: int, n: int):
    """Unit vector for a pair sitting on the same spot."""
    angle = GOLDEN_ANGLE * (i * n + j)
    return math.cos(angle), math.sin(angle)


def resolve_collisions(state: SimulationState, p: LayoutParams) -> int:
    """Relax pairwise overlap in place. Returns the number of pushes applied."""
    N = state.N
    # Plain lists: the sweep is sequential, each push sees the previous ones.
    xs = state.x.tolist()
    ys = state.y.tolist()
    rs = state.r.tolist()
    pushes = 0

    for _ in range(p.collision_passes):
        for i in range(N):
            for j in range(i + 1, N):
                dx = xs[j] - xs[i]
                dy = ys[j] - ys[i]
                d = math.sqrt(dx*dx + dy*dy)
                d_min = (rs[i] + rs[j]) * p.overlap_allow
                if d >= d_min:
                    continue

                if d > 0:
                    nx, ny = dx/d, dy/d
                else:
                    nx, ny = coincident_direction(i, j, N)
                F = (d_min - d) * p.stiffness
                xs[i] -= F * nx; ys[i] -= F * ny
                xs[j] += F * nx; ys[j] += F * ny
                pushes += 1

    state.x[:] = xs
    state.y[:] = ys
    return pushes


# ══════════════════════════════════════════════════════════════════════
# Bounds
# ══════════════════════════════════════════════════════════════════════

def clamp_to_bounds(state: SimulationState, p: LayoutParams) -> None:
    np.clip(state.x, 0.0, p.width, out=state.x)
    np.clip(state.y, 0.0, p.height, out=state.y)


def max_overlap(state: SimulationState, p: LayoutParams) -> float:
    """Largest remaining violation of d_min over all pairs (0 when none)."""
    if state.N < 2:
        return 0.0
    pos = state.positions()
    diff = pos[:, None, :] - pos[None, :, :]
    dist = np.sqrt(np.sum(diff * diff, axis=-1))
    d_min = (state.r[:, None] + state.r[None, :]) * p.overlap_allow
    violation = d_min - dist
    iu = np.triu_indices(state.N, k=1)
    return float(max(0.0, np.max(violation[iu])))
