from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence

import numpy as np

from shot_planner.capability import DEFAULT_GRAVITY, SLICE_RATE_HZ
from shot_planner.types import TargetSlice

BALL_RADIUS = 92.75
COLLISION_MARGIN = 1.9


@dataclass
class TargetPrediction:
    """Future target states, one slice per 1/SLICE_RATE_HZ seconds."""

    slices: List[TargetSlice] = field(default_factory=list)
    rate_hz: float = SLICE_RATE_HZ

    @property
    def num_slices(self) -> int:
        return len(self.slices)

    def __len__(self) -> int:
        return len(self.slices)

    def __getitem__(self, i: int) -> TargetSlice:
        return self.slices[i]

    def slice_index(self, slice_time: float, game_time: float) -> int:
        n = round((float(slice_time) - float(game_time)) * self.rate_hz)
        return int(np.clip(n, 1, max(self.num_slices, 1))) - 1

    def get_slice(self, slice_time: float, game_time: float) -> TargetSlice:
        if not self.slices:
            raise LookupError("Target prediction is empty")
        return self.slices[self.slice_index(slice_time, game_time)]


def predict_ballistic(
    location: Sequence[float],
    velocity: Sequence[float],
    game_time: float,
    duration_s: float = 6.0,
    gravity: float = DEFAULT_GRAVITY,
    radius: float = BALL_RADIUS,
    restitution: float = 0.6,
    floor_friction: float = 0.0,
    rate_hz: float = SLICE_RATE_HZ,
) -> TargetPrediction:
    """
    Semi-implicit Euler roll-out of a sphere under gravity with an inelastic floor bounce.
    Walls and spin are not modelled.
    """
    dt = 1.0 / float(rate_hz)
    p = np.asarray(location, dtype=float).reshape(3).copy()
    v = np.asarray(velocity, dtype=float).reshape(3).copy()
    n = max(int(round(float(duration_s) * rate_hz)), 0)
    slices: List[TargetSlice] = []
    for i in range(n):
        v[2] -= gravity * dt
        p += v * dt
        if p[2] < radius:
            p[2] = radius
            if v[2] < 0.0:
                v[2] = -v[2] * restitution
                v[:2] *= 1.0 - floor_friction
        slices.append(
            TargetSlice(
                location=p.copy(),
                time=float(game_time + (i + 1) * dt),
                radius=float(radius),
                collision_radius=float(radius + COLLISION_MARGIN),
                velocity=v.copy(),
            )
        )
    return TargetPrediction(slices=slices, rate_hz=float(rate_hz))
