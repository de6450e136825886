from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple, Union

import numpy as np

if TYPE_CHECKING:
    from shot_planner.dubins import DubinsPath


class ShotType(Enum):
    """Vertical-clearance maneuver required before contact."""

    GROUND = 0
    JUMP = 1
    DOUBLE_JUMP = 2


@dataclass(frozen=True)
class Pose2D:
    x: float
    y: float
    heading: float

    @staticmethod
    def from_location(location: np.ndarray, heading: float) -> "Pose2D":
        return Pose2D(x=float(location[0]), y=float(location[1]), heading=float(heading))

    @property
    def position(self) -> np.ndarray:
        return np.array([self.x, self.y, 0.0], dtype=float)


@dataclass(frozen=True)
class Hitbox:
    length: float = 118.0
    width: float = 84.2
    height: float = 36.2


@dataclass(frozen=True)
class TargetSlice:
    """Predicted target state at one future time sample."""

    location: np.ndarray  # (3,)
    time: float
    radius: float = 92.75
    collision_radius: float = 94.65
    velocity: Optional[np.ndarray] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "location", np.asarray(self.location, dtype=float).reshape(3))
        if self.velocity is not None:
            object.__setattr__(self, "velocity", np.asarray(self.velocity, dtype=float).reshape(3))


@dataclass(frozen=True)
class Infeasible:
    """Uniform rejection marker; carries no reason on purpose."""

    def __bool__(self) -> bool:
        return False


INFEASIBLE = Infeasible()


@dataclass(frozen=True)
class TargetInfo:
    distances: Tuple[float, float, float, float]
    shot_type: ShotType
    path: "DubinsPath"
    jump_time: Optional[float]
    is_forwards: bool
    shot_vector: np.ndarray  # (3,), planar unit vector along which contact occurs

    def __post_init__(self) -> None:
        object.__setattr__(self, "distances", tuple(float(d) for d in self.distances))
        object.__setattr__(self, "shot_vector", np.asarray(self.shot_vector, dtype=float).reshape(3))

    @property
    def total_distance(self) -> float:
        return float(sum(self.distances))


AnalyzeResult = Union[TargetInfo, Infeasible]


@dataclass(frozen=True)
class BasicShotInfo:
    found: bool
    time: Optional[float] = None

    @staticmethod
    def not_found() -> "BasicShotInfo":
        return BasicShotInfo(found=False)

    @staticmethod
    def found_at(time: float) -> "BasicShotInfo":
        return BasicShotInfo(found=True, time=float(time))


@dataclass
class ShotData:
    contact_point: np.ndarray
    shot_vector: np.ndarray
    distance_remaining: float
    path_index: int
    current_path_point: np.ndarray
    next_path_point: np.ndarray
    path_samples: List[Tuple[float, float]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "contact_point": self.contact_point.tolist(),
            "shot_vector": self.shot_vector.tolist(),
            "distance_remaining": float(self.distance_remaining),
            "path_index": int(self.path_index),
            "current_path_point": self.current_path_point.tolist(),
            "next_path_point": self.next_path_point.tolist(),
            "path_samples": [list(p) for p in self.path_samples],
        }
