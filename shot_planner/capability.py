from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional, Sequence

import numpy as np
from scipy.optimize import brentq

from shot_planner.field import FieldBoundary, soccar_field
from shot_planner.geometry import heading_vector, right_vector
from shot_planner.types import Hitbox

SLICE_RATE_HZ = 120.0
MAX_SPEED = 2300.0
BOOST_ACCEL = 991.667
BOOST_USE_PER_S = 33.3
DEFAULT_GRAVITY = 650.0
REST_HEIGHT = 17.01

JUMP_SPEED = 291.667
JUMP_HOLD_ACCEL = 1458.333
JUMP_HOLD_S = 0.2


@dataclass(frozen=True)
class SpeedCurve:
    """Piecewise-linear function of speed, clamped at both ends."""

    speeds: np.ndarray
    values: np.ndarray

    @staticmethod
    def from_points(speeds: Sequence[float], values: Sequence[float]) -> "SpeedCurve":
        xs = np.asarray(speeds, dtype=float).reshape(-1)
        ys = np.asarray(values, dtype=float).reshape(-1)
        if xs.shape != ys.shape:
            raise ValueError("speeds and values must have same length")
        if xs.size < 2:
            raise ValueError("need at least 2 points")
        if np.any(np.diff(xs) <= 0):
            raise ValueError("speeds must be strictly increasing")
        return SpeedCurve(speeds=xs, values=ys)

    def eval(self, speed: float) -> float:
        return float(np.interp(float(speed), self.speeds, self.values))


THROTTLE_ACCEL = SpeedCurve.from_points([0.0, 1400.0, 1410.0, 2300.0], [1600.0, 160.0, 0.0, 0.0])
CURVATURE = SpeedCurve.from_points(
    [0.0, 500.0, 1000.0, 1500.0, 1750.0, 2300.0],
    [0.0069, 0.00398, 0.00235, 0.001375, 0.0011, 0.00088],
)


def curvature(speed: float) -> float:
    return CURVATURE.eval(abs(float(speed)))


def turn_radius(speed: float) -> float:
    return float(1.0 / curvature(speed))


@dataclass(frozen=True)
class JumpProfile:
    """
    Height above the take-off point during a jump:
      - impulse JUMP_SPEED, then JUMP_HOLD_ACCEL against gravity for JUMP_HOLD_S
      - ballistic afterwards; a double jump adds a second impulse at the end of the hold
    """

    gravity: float
    double: bool = False

    def __post_init__(self) -> None:
        if self.gravity <= 0.0:
            raise ValueError("JumpProfile requires a positive gravity magnitude")

    @property
    def _hold(self) -> tuple[float, float]:
        a = JUMP_HOLD_ACCEL - self.gravity
        z1 = JUMP_SPEED * JUMP_HOLD_S + 0.5 * a * JUMP_HOLD_S**2
        v1 = JUMP_SPEED + a * JUMP_HOLD_S
        if self.double:
            v1 += JUMP_SPEED
        return z1, v1

    def height(self, t: float) -> float:
        t = max(float(t), 0.0)
        if t <= JUMP_HOLD_S:
            return float(JUMP_SPEED * t + 0.5 * (JUMP_HOLD_ACCEL - self.gravity) * t * t)
        z1, v1 = self._hold
        dt = t - JUMP_HOLD_S
        return float(z1 + v1 * dt - 0.5 * self.gravity * dt * dt)

    @property
    def apex_time(self) -> float:
        _, v1 = self._hold
        return float(JUMP_HOLD_S + max(v1, 0.0) / self.gravity)

    @property
    def apex_height(self) -> float:
        return self.height(self.apex_time)

    def time_to_height(self, height: float) -> float:
        """Earliest time at which `height` is reached; heights above the apex map to the apex."""
        if height <= 0.0:
            return 0.0
        t_apex = self.apex_time
        if height >= self.apex_height:
            return t_apex
        return float(brentq(lambda t: self.height(t) - height, 0.0, t_apex))


@lru_cache(maxsize=32)
def jump_profile(gravity: float, double: bool = False) -> JumpProfile:
    return JumpProfile(gravity=float(gravity), double=bool(double))


@dataclass
class Car:
    """
    Agent capability snapshot. Call `update()` after changing the kinematic fields to refresh the
    landing prediction and the per-slice speed / turn-radius ceilings.
    """

    location: np.ndarray = field(default_factory=lambda: np.array([0.0, 0.0, REST_HEIGHT]))
    velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))
    yaw: float = 0.0
    hitbox: Hitbox = field(default_factory=Hitbox)
    hitbox_offset: np.ndarray = field(default_factory=lambda: np.array([13.88, 0.0, 20.75]))
    boost: float = 0.0
    demolished: bool = False
    airborne: bool = False
    arena: FieldBoundary = field(default_factory=soccar_field)

    gravity: float = DEFAULT_GRAVITY
    num_slices: int = 720

    def __post_init__(self) -> None:
        self.location = np.asarray(self.location, dtype=float).reshape(3)
        self.velocity = np.asarray(self.velocity, dtype=float).reshape(3)
        self.hitbox_offset = np.asarray(self.hitbox_offset, dtype=float).reshape(3)
        self.update()

    def update(self, gravity: Optional[float] = None, num_slices: Optional[int] = None) -> None:
        if gravity is not None:
            self.gravity = float(gravity)
        if num_slices is not None:
            self.num_slices = int(num_slices)

        self._predict_landing()

        self.max_speed = self._speed_ceilings(self.num_slices)
        self.ctrms = np.array([turn_radius(v) for v in self.max_speed], dtype=float)

        half_height = self.hitbox.height / 2.0
        single = jump_profile(self.gravity, False)
        double = jump_profile(self.gravity, True)
        self.max_jump_height = float(single.apex_height + half_height)
        self.max_double_jump_height = float(double.apex_height + half_height)
        self.max_jump_time = float(single.apex_time)

    # Orientation basis

    @property
    def forward(self) -> np.ndarray:
        return heading_vector(self.yaw)

    @property
    def right(self) -> np.ndarray:
        return right_vector(self.yaw)

    @property
    def landing_right(self) -> np.ndarray:
        return right_vector(self.landing_yaw)

    @property
    def front_length(self) -> float:
        return float((self.hitbox_offset[0] + self.hitbox.length) / 2.0)

    @property
    def forward_speed(self) -> float:
        return float(np.dot(self.velocity, self.forward))

    # Ceilings per future slice

    def speed_ceiling(self, slice_num: int) -> float:
        if self.max_speed.size == 0:
            return MAX_SPEED
        return float(self.max_speed[int(np.clip(slice_num, 0, self.max_speed.size - 1))])

    def turn_radius_ceiling(self, slice_num: int) -> float:
        if self.ctrms.size == 0:
            return turn_radius(MAX_SPEED)
        return float(self.ctrms[int(np.clip(slice_num, 0, self.ctrms.size - 1))])

    def _speed_ceilings(self, num_slices: int) -> np.ndarray:
        dt = 1.0 / SLICE_RATE_HZ
        v = max(self.forward_speed, 0.0)
        boost = float(self.boost)
        out = np.empty(max(int(num_slices), 0), dtype=float)
        for i in range(out.size):
            accel = THROTTLE_ACCEL.eval(v) + (BOOST_ACCEL if boost > 0.0 else 0.0)
            v = min(v + accel * dt, MAX_SPEED)
            boost = max(boost - BOOST_USE_PER_S * dt, 0.0)
            out[i] = v
        return out

    def _predict_landing(self) -> None:
        if not self.airborne:
            self.landing_time = 0.0
            self.landing_location = self.location.copy()
            self.landing_yaw = float(self.yaw)
            return

        g = max(self.gravity, 1e-6)
        drop = max(float(self.location[2]) - REST_HEIGHT, 0.0)
        vz = float(self.velocity[2])
        t = (vz + np.sqrt(vz * vz + 2.0 * g * drop)) / g
        self.landing_time = float(t)
        self.landing_location = np.array(
            [self.location[0] + self.velocity[0] * t, self.location[1] + self.velocity[1] * t, REST_HEIGHT],
            dtype=float,
        )
        self.landing_yaw = float(self.yaw)

    # Vertical maneuver timing

    def jump_time_to_height(self, gravity: float, height: float) -> float:
        return jump_profile(gravity, False).time_to_height(height)

    def double_jump_time_to_height(self, gravity: float, height: float) -> float:
        return jump_profile(gravity, True).time_to_height(height)

    # Travel time

    def time_to_travel(
        self,
        distance: float,
        max_speed: float,
        max_time: float,
        is_forwards: bool = True,
    ) -> Optional[float]:
        """Time to cover `distance` under full throttle (and boost when driving forwards), or None."""
        dt = 1.0 / SLICE_RATE_HZ
        v = abs(self.forward_speed) if is_forwards else 0.0
        boost = float(self.boost) if is_forwards else 0.0
        cap = float(max_speed)
        t = 0.0
        s = 0.0
        while s < distance:
            if t >= max_time:
                return None
            accel = THROTTLE_ACCEL.eval(v) + (BOOST_ACCEL if boost > 0.0 else 0.0)
            v = min(v + accel * dt, cap)
            boost = max(boost - BOOST_USE_PER_S * dt, 0.0)
            s += v * dt
            t += dt
        return float(t)


def can_reach_target(
    car: Car,
    max_speed: float,
    max_time: float,
    distance: float,
    is_forwards: bool = True,
) -> Optional[float]:
    """Time left over after covering `distance`, or None when the budget is not enough."""
    travel = car.time_to_travel(distance, max_speed, max_time, is_forwards)
    if travel is None or travel > max_time:
        return None
    return float(max_time - travel)
