from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, Union

import numpy as np

from shot_planner.dubins import DubinsPath, all_paths
from shot_planner.field import FieldBoundary
from shot_planner.geometry import cross_2d, heading_vector
from shot_planner.types import INFEASIBLE, Infeasible, Pose2D


class PathPrimitives(Protocol):
    def turn_exit_offset(
        self,
        pose: Pose2D,
        target: np.ndarray,
        center: np.ndarray,
        radius: float,
        forwards: bool = True,
    ) -> Optional[np.ndarray]:  # noqa: D102
        ...

    def shortest_valid_path(
        self,
        q0: Pose2D,
        q1: Pose2D,
        rho: float,
        field: FieldBoundary,
        max_length: float,
    ) -> Union[DubinsPath, Infeasible]:  # noqa: D102
        ...


@dataclass(frozen=True)
class DubinsPrimitives:
    # Spacing of the containment samples taken along candidate paths.
    validation_step: float = 50.0

    def turn_exit_offset(
        self,
        pose: Pose2D,
        target: np.ndarray,
        center: np.ndarray,
        radius: float,
        forwards: bool = True,
    ) -> Optional[np.ndarray]:
        """
        Offset from the pose to the point on the turn circle where the travel direction points
        straight at `target`. The turn direction follows from which side of the pose the circle
        centre lies on. Returns None when the target is inside the circle.
        """
        pos = np.array([pose.x, pose.y], dtype=float)
        c = np.asarray(center, dtype=float)[:2]
        t = np.asarray(target, dtype=float)[:2]
        v = t - c
        dist = float(np.hypot(v[0], v[1]))
        if dist < radius or dist < 1e-9:
            return None

        turn_left = cross_2d(heading_vector(pose.heading), c - pos) > 0.0
        base = float(np.arctan2(v[1], v[0]))
        spread = float(np.arccos(np.clip(radius / dist, -1.0, 1.0)))
        for angle in (base + spread, base - spread):
            r = radius * np.array([np.cos(angle), np.sin(angle)], dtype=float)
            p = c + r
            vel = np.array([-r[1], r[0]]) if turn_left else np.array([r[1], -r[0]])
            if not forwards:
                vel = -vel
            if float(np.dot(vel, t - p)) >= 0.0:
                offset = p - pos
                return np.array([offset[0], offset[1], 0.0], dtype=float)
        return None

    def _stays_in_field(self, path: DubinsPath, field: FieldBoundary) -> bool:
        length = path.length()
        ts = np.append(np.arange(0.0, length, self.validation_step), length)
        for t in ts:
            if not field.is_point_in(path.sample(float(t))):
                return False
        return True

    def shortest_valid_path(
        self,
        q0: Pose2D,
        q1: Pose2D,
        rho: float,
        field: FieldBoundary,
        max_length: float,
    ) -> Union[DubinsPath, Infeasible]:
        if rho <= 0.0:
            return INFEASIBLE
        for path in all_paths(q0, q1, rho):
            if path.length() > max_length:
                break
            if self._stays_in_field(path, field):
                return path
        return INFEASIBLE
