"""
Feasibility analyzer: can the agent reach a target slice in time, and along which path?

Every rejection returns the same `INFEASIBLE` marker. Checks run cheapest first because the search
loop evaluates one call per candidate slice, often hundreds per tick.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

import numpy as np

from shot_planner.capability import DEFAULT_GRAVITY, Car
from shot_planner.dubins import DubinsPath, PathType
from shot_planner.geometry import (
    TAU,
    angle_2d,
    distance_2d,
    flatten,
    heading_of,
    heading_vector,
    mod2pi,
    normalize,
)
from shot_planner.primitives import DubinsPrimitives, PathPrimitives
from shot_planner.types import INFEASIBLE, AnalyzeResult, Infeasible, Pose2D, ShotType, TargetInfo, TargetSlice

GROUND_CLEARANCE = 17.0
GROUND_RUNUP_DISTANCE = 320.0
ALIGNED_ANGLE_RAD = 0.02
JUMP_APPROACH_PAD = 128.0
REVERSE_TIME_WINDOW_S = 4.0
REVERSE_ANGLE_RAD = np.pi * (2.0 / 3.0)

ManeuverInfo = Tuple[Optional[float], float]


@dataclass(frozen=True)
class AnalyzerConfig:
    # Overrides for the agent's per-slice ceilings (None uses the agent's own values).
    max_speed: Optional[float] = None
    max_turn_radius: Optional[float] = None
    gravity: float = DEFAULT_GRAVITY
    may_ground_shot: bool = True
    may_jump_shot: bool = True
    may_double_jump_shot: bool = True

    def allows(self, shot_type: ShotType) -> bool:
        if shot_type is ShotType.GROUND:
            return self.may_ground_shot
        if shot_type is ShotType.JUMP:
            return self.may_jump_shot
        return self.may_double_jump_shot


def _sweep_angle(start: np.ndarray, end: np.ndarray, counter_clockwise: bool) -> float:
    """Angle travelled around a circle from `start` to `end` (both relative to the centre)."""
    delta = heading_of(end) - heading_of(start)
    sweep = mod2pi(delta if counter_clockwise else -delta)
    if sweep > TAU - 1e-6:
        return 0.0
    return sweep


class Analyzer:
    def __init__(self, config: Optional[AnalyzerConfig] = None, primitives: Optional[PathPrimitives] = None) -> None:
        self.config = config or AnalyzerConfig()
        self.primitives = primitives or DubinsPrimitives()

    def max_speed(self, car: Car, slice_num: int) -> float:
        if self.config.max_speed is not None:
            return float(self.config.max_speed)
        return car.speed_ceiling(slice_num)

    def max_turn_radius(self, car: Car, slice_num: int) -> float:
        if self.config.max_turn_radius is not None:
            return float(self.config.max_turn_radius)
        return car.turn_radius_ceiling(slice_num)

    def classify(self, car: Car, target: np.ndarray) -> Union[ShotType, Infeasible]:
        """Maneuver needed to reach the height of `target`, if that maneuver is enabled."""
        z = float(target[2])
        if z < car.hitbox.height / 2.0 + GROUND_CLEARANCE:
            shot_type = ShotType.GROUND
        elif z < car.max_jump_height:
            shot_type = ShotType.JUMP
        elif z < car.max_double_jump_height:
            shot_type = ShotType.DOUBLE_JUMP
        else:
            return INFEASIBLE

        if not self.config.allows(shot_type):
            return INFEASIBLE
        return shot_type

    def maneuver_info(
        self,
        car: Car,
        target: np.ndarray,
        shot_vector: np.ndarray,
        max_speed: float,
        time_remaining: float,
        shot_type: ShotType,
    ) -> Union[ManeuverInfo, Infeasible]:
        """(lead time or None, approach clearance distance) for the maneuver."""
        if shot_type is ShotType.GROUND:
            rel = flatten(target) - flatten(car.location)
            aligned = (
                0.0 <= float(np.dot(car.forward, rel)) < GROUND_RUNUP_DISTANCE
                and abs(float(np.dot(car.right, rel))) < car.hitbox.width / 2.0
                and angle_2d(car.forward, shot_vector) < ALIGNED_ANGLE_RAD
            )
            return (None, 0.0 if aligned else GROUND_RUNUP_DISTANCE)

        height = float(target[2]) - car.hitbox.height / 2.0
        if shot_type is ShotType.JUMP:
            lead = car.jump_time_to_height(self.config.gravity, height)
        else:
            # TODO: this gates on the single-jump duration, not on the double jump's own lead time;
            # confirm which budget is intended before changing it.
            if time_remaining > car.max_jump_time:
                return INFEASIBLE
            lead = car.double_jump_time_to_height(self.config.gravity, height)

        return (lead, lead * max_speed + JUMP_APPROACH_PAD)

    def analyze(
        self,
        ball: TargetSlice,
        car: Car,
        shot_vector: Optional[np.ndarray],
        time_remaining: float,
        slice_num: int,
    ) -> AnalyzeResult:
        if shot_vector is None:
            return self.no_target(ball, car, time_remaining, slice_num)
        return self.target(ball, car, shot_vector, time_remaining, slice_num)

    def no_target(self, ball: TargetSlice, car: Car, time_remaining: float, slice_num: int) -> AnalyzeResult:
        """Hit the target from any direction: one turn, then straight at it."""
        car_front_length = car.front_length

        # Ground and jump shots both start from the ground.
        if car.landing_time >= time_remaining:
            return INFEASIBLE

        max_speed = self.max_speed(car, slice_num)

        time_remaining = time_remaining - car.landing_time
        car_location = flatten(car.landing_location)
        ball_location = flatten(ball.location)
        max_distance = time_remaining * max_speed + car_front_length + ball.radius

        if distance_2d(car_location, ball_location) > max_distance:
            return INFEASIBLE

        shot_type = self.classify(car, ball.location)
        if shot_type is INFEASIBLE:
            return INFEASIBLE

        jump_time: Optional[float] = None
        end_distance = 0.0
        if shot_type is not ShotType.GROUND:
            info = self.maneuver_info(
                car,
                ball.location,
                normalize(flatten(ball.location - car.location)),
                max_speed,
                time_remaining,
                shot_type,
            )
            if info is INFEASIBLE:
                return INFEASIBLE
            jump_time, end_distance = info

        offset_distance = end_distance - car_front_length - ball.radius

        if jump_time is not None and jump_time > time_remaining:
            return INFEASIBLE

        rho = self.max_turn_radius(car, slice_num)
        if rho <= 0.0:
            return INFEASIBLE

        rel = ball_location - car_location
        should_turn_left = float(np.dot(car.landing_right, rel)) < 0.0
        side = -car.landing_right if should_turn_left else car.landing_right
        center_of_turn = car_location + flatten(side) * rho
        pose = Pose2D.from_location(car_location, car.landing_yaw)

        offset = self.primitives.turn_exit_offset(pose, ball_location, center_of_turn, rho, True)
        if offset is None:
            return INFEASIBLE
        turn_target = car_location + offset

        turn_final_distance = distance_2d(turn_target, ball_location) - ball.radius - car_front_length
        straight_distance = max(turn_final_distance, 0.0)

        if (
            turn_final_distance < offset_distance
            or straight_distance + distance_2d(turn_target, car_location) > max_distance
        ):
            return INFEASIBLE

        turn_angle = _sweep_angle(car_location - center_of_turn, turn_target - center_of_turn, should_turn_left)
        turn_arc_distance = turn_angle * rho

        if straight_distance + turn_arc_distance > max_distance:
            return INFEASIBLE

        if not car.arena.is_point_in(turn_target):
            return INFEASIBLE

        path = DubinsPath(
            qi=pose,
            rho=rho,
            path_type=PathType.LSR if should_turn_left else PathType.RSL,
            param=(turn_angle, 0.0, 0.0),
        )
        shot_vector = normalize(ball_location - turn_target)
        distances = (turn_arc_distance, 0.0, 0.0, straight_distance)

        return TargetInfo(
            distances=distances,
            shot_type=shot_type,
            path=path,
            jump_time=jump_time,
            is_forwards=True,
            shot_vector=shot_vector,
        )

    def target(
        self,
        ball: TargetSlice,
        car: Car,
        shot_vector: np.ndarray,
        time_remaining: float,
        slice_num: int,
    ) -> AnalyzeResult:
        """Hit the target along `shot_vector`."""
        shot_vector = np.asarray(shot_vector, dtype=float).reshape(3)
        offset_target = ball.location - shot_vector * ball.radius
        car_front_length = car.front_length

        if car.landing_time >= time_remaining:
            return INFEASIBLE

        max_speed = self.max_speed(car, slice_num)

        time_remaining = time_remaining - car.landing_time
        car_location = flatten(car.landing_location)
        max_distance = time_remaining * max_speed + car_front_length

        if distance_2d(car_location, offset_target) > max_distance:
            return INFEASIBLE

        shot_type = self.classify(car, ball.location)
        if shot_type is INFEASIBLE:
            return INFEASIBLE

        info = self.maneuver_info(car, offset_target, shot_vector, max_speed, time_remaining, shot_type)
        if info is INFEASIBLE:
            return INFEASIBLE
        jump_time, end_distance = info

        if jump_time is not None and jump_time > time_remaining:
            return INFEASIBLE

        shot_direction = normalize(flatten(shot_vector))
        exit_turn_target = flatten(offset_target) - shot_direction * end_distance

        if (
            not car.arena.is_point_in(exit_turn_target)
            or distance_2d(car_location, exit_turn_target) + end_distance > max_distance
        ):
            return INFEASIBLE

        target_angle = heading_of(shot_vector)
        starting_yaw = car.landing_yaw

        is_backwards = (
            time_remaining < REVERSE_TIME_WINDOW_S
            and angle_2d(shot_vector, heading_vector(car.landing_yaw)) > REVERSE_ANGLE_RAD
        )
        is_forwards = not is_backwards
        if is_backwards:
            starting_yaw += np.pi

        q0 = Pose2D.from_location(car_location, starting_yaw)
        q1 = Pose2D.from_location(exit_turn_target, target_angle)

        rho = self.max_turn_radius(car, slice_num)
        path = self.primitives.shortest_valid_path(q0, q1, rho, car.arena, max_distance - end_distance)
        if path is INFEASIBLE:
            return INFEASIBLE

        distances = (path.segment_length(0), path.segment_length(1), path.segment_length(2), end_distance)

        return TargetInfo(
            distances=distances,
            shot_type=shot_type,
            path=path,
            jump_time=jump_time,
            is_forwards=is_forwards,
            shot_vector=shot_vector,
        )
