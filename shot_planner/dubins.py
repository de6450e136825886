"""
Dubins paths: shortest bounded-curvature curves between two oriented poses.

A path is three segments, each a left arc (L), right arc (R) or straight run (S), with a single
turning radius `rho`. Segment parameters are stored normalised by `rho`, so the length of
segment i is `param[i] * rho`. Left turns are counter-clockwise (x forward, y left).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np

from shot_planner.geometry import TAU, mod2pi
from shot_planner.types import Pose2D


class SegmentType(Enum):
    L = "L"
    S = "S"
    R = "R"


class PathType(Enum):
    LSL = "LSL"
    LSR = "LSR"
    RSL = "RSL"
    RSR = "RSR"
    RLR = "RLR"
    LRL = "LRL"

    @property
    def segments(self) -> Tuple[SegmentType, SegmentType, SegmentType]:
        return tuple(SegmentType(c) for c in self.value)  # type: ignore[return-value]


def _segment(t: float, qi: Tuple[float, float, float], seg: SegmentType) -> Tuple[float, float, float]:
    x, y, th = qi
    if seg is SegmentType.L:
        return (x + np.sin(th + t) - np.sin(th), y - np.cos(th + t) + np.cos(th), th + t)
    if seg is SegmentType.R:
        return (x - np.sin(th - t) + np.sin(th), y + np.cos(th - t) - np.cos(th), th - t)
    return (x + np.cos(th) * t, y + np.sin(th) * t, th)


@dataclass(frozen=True)
class DubinsPath:
    qi: Pose2D
    rho: float
    path_type: PathType
    param: Tuple[float, float, float]

    def __post_init__(self) -> None:
        if self.rho <= 0.0:
            raise ValueError("DubinsPath requires a positive turning radius")
        object.__setattr__(self, "param", tuple(float(p) for p in self.param))

    def segment_length(self, i: int) -> float:
        return float(self.param[i] * self.rho)

    def length(self) -> float:
        return float(sum(self.param) * self.rho)

    def sample(self, t: float) -> np.ndarray:
        """Pose (x, y, heading) after travelling `t` along the path."""
        tprime = float(np.clip(t, 0.0, self.length())) / self.rho
        types = self.path_type.segments
        p1, p2 = self.param[0], self.param[1]

        q0 = (0.0, 0.0, self.qi.heading)
        q1 = _segment(p1, q0, types[0])
        q2 = _segment(p2, q1, types[1])

        if tprime < p1:
            q = _segment(tprime, q0, types[0])
        elif tprime < p1 + p2:
            q = _segment(tprime - p1, q1, types[1])
        else:
            q = _segment(tprime - p1 - p2, q2, types[2])

        return np.array(
            [q[0] * self.rho + self.qi.x, q[1] * self.rho + self.qi.y, mod2pi(q[2])],
            dtype=float,
        )

    def sample_many(self, ts: np.ndarray) -> np.ndarray:
        ts = np.asarray(ts, dtype=float).reshape(-1)
        if ts.size == 0:
            return np.zeros((0, 3), dtype=float)
        return np.stack([self.sample(float(t)) for t in ts], axis=0)

    def endpoint(self) -> np.ndarray:
        return self.sample(self.length())


def _intermediate(q0: Pose2D, q1: Pose2D, rho: float) -> Tuple[float, float, float]:
    dx = q1.x - q0.x
    dy = q1.y - q0.y
    d = float(np.hypot(dx, dy)) / rho
    theta = 0.0 if d <= 0.0 else mod2pi(np.arctan2(dy, dx))
    alpha = mod2pi(q0.heading - theta)
    beta = mod2pi(q1.heading - theta)
    return alpha, beta, d


def _word(path_type: PathType, alpha: float, beta: float, d: float) -> Optional[Tuple[float, float, float]]:
    sa, sb = np.sin(alpha), np.sin(beta)
    ca, cb = np.cos(alpha), np.cos(beta)
    c_ab = np.cos(alpha - beta)
    d_sq = d * d

    if path_type is PathType.LSL:
        p_sq = 2.0 + d_sq - 2.0 * c_ab + 2.0 * d * (sa - sb)
        if p_sq < 0.0:
            return None
        tmp1 = np.arctan2(cb - ca, d + sa - sb)
        return (mod2pi(tmp1 - alpha), float(np.sqrt(p_sq)), mod2pi(beta - tmp1))

    if path_type is PathType.RSR:
        p_sq = 2.0 + d_sq - 2.0 * c_ab + 2.0 * d * (sb - sa)
        if p_sq < 0.0:
            return None
        tmp1 = np.arctan2(ca - cb, d - sa + sb)
        return (mod2pi(alpha - tmp1), float(np.sqrt(p_sq)), mod2pi(tmp1 - beta))

    if path_type is PathType.LSR:
        p_sq = -2.0 + d_sq + 2.0 * c_ab + 2.0 * d * (sa + sb)
        if p_sq < 0.0:
            return None
        p = float(np.sqrt(p_sq))
        tmp0 = np.arctan2(-ca - cb, d + sa + sb) - np.arctan2(-2.0, p)
        return (mod2pi(tmp0 - alpha), p, mod2pi(tmp0 - beta))

    if path_type is PathType.RSL:
        p_sq = -2.0 + d_sq + 2.0 * c_ab - 2.0 * d * (sa + sb)
        if p_sq < 0.0:
            return None
        p = float(np.sqrt(p_sq))
        tmp0 = np.arctan2(ca + cb, d - sa - sb) - np.arctan2(2.0, p)
        return (mod2pi(alpha - tmp0), p, mod2pi(beta - tmp0))

    if path_type is PathType.RLR:
        tmp0 = (6.0 - d_sq + 2.0 * c_ab + 2.0 * d * (sa - sb)) / 8.0
        if abs(tmp0) > 1.0:
            return None
        phi = np.arctan2(ca - cb, d - sa + sb)
        p = mod2pi(TAU - np.arccos(tmp0))
        t = mod2pi(alpha - phi + mod2pi(p / 2.0))
        return (t, p, mod2pi(alpha - beta - t + mod2pi(p)))

    # LRL
    tmp0 = (6.0 - d_sq + 2.0 * c_ab + 2.0 * d * (sb - sa)) / 8.0
    if abs(tmp0) > 1.0:
        return None
    phi = np.arctan2(ca - cb, d + sa - sb)
    p = mod2pi(TAU - np.arccos(tmp0))
    t = mod2pi(-alpha - phi + p / 2.0)
    return (t, p, mod2pi(mod2pi(beta) - alpha - t + mod2pi(p)))


def path_of_type(q0: Pose2D, q1: Pose2D, rho: float, path_type: PathType) -> Optional[DubinsPath]:
    alpha, beta, d = _intermediate(q0, q1, rho)
    param = _word(path_type, alpha, beta, d)
    if param is None:
        return None
    return DubinsPath(qi=q0, rho=float(rho), path_type=path_type, param=param)


def all_paths(q0: Pose2D, q1: Pose2D, rho: float) -> List[DubinsPath]:
    """Every constructible path between the poses, shortest first."""
    paths = []
    for path_type in PathType:
        path = path_of_type(q0, q1, rho, path_type)
        if path is not None:
            paths.append(path)
    paths.sort(key=lambda p: p.length())
    return paths


def shortest_path(q0: Pose2D, q1: Pose2D, rho: float) -> Optional[DubinsPath]:
    paths = all_paths(q0, q1, rho)
    return paths[0] if paths else None
