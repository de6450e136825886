from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, Tuple

import numpy as np

from shot_planner.aiming import correct_for_posts, get_shot_vector_2d
from shot_planner.analyzer import GROUND_CLEARANCE, Analyzer
from shot_planner.capability import MAX_SPEED, Car, can_reach_target, turn_radius
from shot_planner.config import PlannerSettings
from shot_planner.geometry import flatten, normalize
from shot_planner.logging.search_logger import SearchLogger
from shot_planner.prediction import TargetPrediction
from shot_planner.primitives import DubinsPrimitives, PathPrimitives
from shot_planner.shot import AimRequest, SearchOptions, Shot, materialize
from shot_planner.types import BasicShotInfo, ShotData, TargetInfo, TargetSlice

NO_SHOT_ERR = "Specified target has no found shot."

Candidate = Tuple[TargetInfo, TargetSlice, float]


class ShotSearch:
    """
    Per-tick search over the target prediction.

    For each candidate slice the analyzer is asked whether the agent can make contact; the earliest
    success wins. Exhaustive mode still evaluates every slice in the range.
    """

    def __init__(
        self,
        settings: Optional[PlannerSettings] = None,
        primitives: Optional[PathPrimitives] = None,
        logger: Optional[logging.Logger] = None,
        search_logger: Optional[SearchLogger] = None,
    ) -> None:
        self.settings = settings or PlannerSettings()
        self.primitives = primitives or DubinsPrimitives(validation_step=float(self.settings.validation_step))
        self.logger = logger or logging.getLogger(__name__)
        self.search_logger = search_logger

        self.analyzer = Analyzer(self.settings.analyzer, self.primitives)
        absolute = replace(
            self.settings.analyzer,
            max_speed=MAX_SPEED,
            max_turn_radius=turn_radius(MAX_SPEED),
        )
        self.absolute_analyzer = Analyzer(absolute, self.primitives)

    def analyzer_for(self, options: SearchOptions) -> Analyzer:
        return self.absolute_analyzer if options.use_absolute_max_values else self.analyzer

    def height_ceiling(self, car: Car) -> float:
        """Highest target centre any enabled maneuver can reach."""
        cfg = self.settings.analyzer
        if cfg.may_double_jump_shot:
            return car.max_double_jump_height
        if cfg.may_jump_shot:
            return car.max_jump_height
        if cfg.may_ground_shot:
            return car.hitbox.height / 2.0 + GROUND_CLEARANCE
        return float("-inf")

    def _can_search(self, car: Car, prediction: TargetPrediction) -> bool:
        return prediction.num_slices > 0 and not car.demolished and not car.airborne

    def _search(
        self,
        car: Car,
        prediction: TargetPrediction,
        game_time: float,
        options: SearchOptions,
        request: Optional[AimRequest],
    ) -> Tuple[Optional[Candidate], int]:
        analyzer = self.analyzer_for(options)
        ceiling = self.height_ceiling(car)
        best: Optional[Candidate] = None
        evaluated = 0

        for slice_num in options.slice_range(prediction.num_slices):
            ball = prediction[slice_num]

            if car.arena.is_past_goal_line(ball.location, ball.collision_radius):
                break

            if ball.location[2] >= ceiling:
                continue

            shot_vector = None
            if request is not None:
                post_info = correct_for_posts(
                    ball.location, ball.collision_radius, request.target_left, request.target_right
                )
                if not post_info.fits:
                    continue
                shot_vector = get_shot_vector_2d(
                    normalize(flatten(ball.location - car.location)),
                    ball.location,
                    post_info.target_left,
                    post_info.target_right,
                )

            max_time_remaining = float(ball.time - game_time)
            evaluated += 1
            result = analyzer.analyze(ball, car, shot_vector, max_time_remaining, slice_num)
            if not result:
                continue

            time_slack = can_reach_target(
                car,
                analyzer.max_speed(car, slice_num),
                max_time_remaining,
                result.total_distance,
                result.is_forwards,
            )
            if time_slack is None:
                continue

            # earliest success wins; exhaustive mode only keeps scanning
            if best is None:
                best = (result, ball, time_slack)

            if not options.all:
                break

        return best, evaluated

    def find_shot(
        self,
        request: AimRequest,
        car: Car,
        prediction: TargetPrediction,
        game_time: float,
        temporary: bool = False,
        handle: Optional[int] = None,
    ) -> BasicShotInfo:
        """
        Search for a shot through the request's aim window.

        Unless `temporary`, the request's shot is replaced by the new one (or cleared when nothing
        is found). A temporary search leaves it as it was.
        """
        if not self._can_search(car, prediction):
            self.logger.debug("skipping search for target %s: no prediction or agent unavailable", handle)
            return BasicShotInfo.not_found()

        best, evaluated = self._search(car, prediction, game_time, request.options, request)

        shot: Optional[Shot] = None
        if best is not None and not temporary:
            result, ball, _ = best
            shot = materialize(result, ball.time)
        if not temporary:
            request.shot = shot

        if self.search_logger is not None:
            self.search_logger.log_search(
                timestamp=game_time,
                handle=handle,
                found=best is not None,
                slices_evaluated=evaluated,
                shot_time=None if best is None else best[1].time,
                distances=None if best is None else best[0].distances,
                shot_type=None if best is None else best[0].shot_type.name,
            )

        if best is None:
            self.logger.debug("no shot for target %s after %d slices", handle, evaluated)
            return BasicShotInfo.not_found()

        result, ball, slack = best
        self.logger.debug(
            "shot for target %s at t=%.3f (%s, %.0f uu, %.2f s spare)",
            handle,
            ball.time,
            result.shot_type.name,
            result.total_distance,
            slack,
        )
        return BasicShotInfo.found_at(ball.time)

    def find_any_shot(
        self,
        car: Car,
        prediction: TargetPrediction,
        game_time: float,
        options: Optional[SearchOptions] = None,
    ) -> Tuple[BasicShotInfo, Optional[Shot]]:
        """Search for a shot from any direction (no aim window)."""
        if not self._can_search(car, prediction):
            return BasicShotInfo.not_found(), None

        best, _ = self._search(car, prediction, game_time, options or SearchOptions(), None)
        if best is None:
            return BasicShotInfo.not_found(), None
        result, ball, _ = best
        return BasicShotInfo.found_at(ball.time), materialize(result, ball.time)

    def shot_data(
        self,
        request: AimRequest,
        car: Car,
        prediction: TargetPrediction,
        game_time: float,
    ) -> ShotData:
        """Contact point, contact direction and progress of the agent along the request's shot."""
        shot = request.shot
        if shot is None:
            raise LookupError(NO_SHOT_ERR)

        ball = prediction.get_slice(shot.time, game_time)
        post_info = correct_for_posts(ball.location, ball.collision_radius, request.target_left, request.target_right)
        shot_vector = get_shot_vector_2d(
            normalize(flatten(ball.location - car.location)),
            ball.location,
            post_info.target_left,
            post_info.target_right,
        )
        contact_point = ball.location - shot_vector * ball.radius

        distance_along, index = shot.locate(car.location)
        distance_remaining = max(float(sum(shot.distances)) - distance_along, 0.0)

        if shot.all_samples:
            current = np.array(shot.all_samples[index], dtype=float)
            following = np.array(shot.all_samples[min(index + 1, len(shot.all_samples) - 1)], dtype=float)
        else:
            current = contact_point[:2].copy()
            following = contact_point[:2].copy()

        return ShotData(
            contact_point=contact_point,
            shot_vector=shot_vector,
            distance_remaining=distance_remaining,
            path_index=int(index),
            current_path_point=current,
            next_path_point=following,
            path_samples=list(shot.all_samples),
        )
