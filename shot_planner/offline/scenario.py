from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import yaml

from shot_planner.capability import Car
from shot_planner.config import PlannerSettings
from shot_planner.logging.search_logger import SearchLogger
from shot_planner.prediction import TargetPrediction, predict_ballistic
from shot_planner.registry import AimRequestRegistry
from shot_planner.search import ShotSearch
from shot_planner.shot import SearchOptions


@dataclass(frozen=True)
class Scenario:
    car_location: Tuple[float, float, float] = (0.0, 0.0, 17.01)
    car_velocity: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    car_yaw_deg: float = 0.0
    boost: float = 0.0
    target_location: Tuple[float, float, float] = (0.0, 2000.0, 92.75)
    target_velocity: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    # Aim window; None searches for a shot from any direction.
    post_left: Optional[Tuple[float, float, float]] = (893.0, 5120.0, 0.0)
    post_right: Optional[Tuple[float, float, float]] = (-893.0, 5120.0, 0.0)
    game_time: float = 0.0
    all_slices: bool = False
    use_absolute_max_values: bool = False
    min_slice: int = 0
    max_slice: Optional[int] = None
    settings: Dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Scenario":
        known = set(Scenario.__dataclass_fields__)
        unknown = sorted(set(d) - known)
        if unknown:
            raise ValueError(f"Unknown scenario keys: {unknown}")
        kwargs: Dict[str, Any] = {}
        for key, value in d.items():
            if isinstance(value, list):
                value = tuple(float(v) for v in value)
            kwargs[key] = value
        return Scenario(**kwargs)

    @staticmethod
    def from_yaml(path: str | Path) -> "Scenario":
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(str(path))
        data = yaml.safe_load(path.read_text()) or {}
        if "scenario" in data:
            data = data["scenario"] or {}
        return Scenario.from_dict(data)


def build_car(s: Scenario, settings: PlannerSettings) -> Car:
    return Car(
        location=np.asarray(s.car_location, dtype=float),
        velocity=np.asarray(s.car_velocity, dtype=float),
        yaw=float(np.deg2rad(s.car_yaw_deg)),
        boost=float(s.boost),
        arena=settings.build_field(),
        gravity=float(settings.analyzer.gravity),
        num_slices=int(round(settings.prediction_time_s * 120.0)),
    )


def build_prediction(s: Scenario, settings: PlannerSettings) -> TargetPrediction:
    return predict_ballistic(
        location=s.target_location,
        velocity=s.target_velocity,
        game_time=float(s.game_time),
        duration_s=float(settings.prediction_time_s),
        gravity=float(settings.analyzer.gravity),
    )


def run_scenario(s: Scenario, search_logger: Optional[SearchLogger] = None) -> Dict[str, Any]:
    """Run one search for `s` and return a JSON-friendly summary."""
    settings = PlannerSettings.from_dict(s.settings) if s.settings else PlannerSettings()
    car = build_car(s, settings)
    prediction = build_prediction(s, settings)
    search = ShotSearch(settings=settings, search_logger=search_logger)
    options = SearchOptions(
        min_slice=int(s.min_slice),
        max_slice=s.max_slice,
        all=bool(s.all_slices),
        use_absolute_max_values=bool(s.use_absolute_max_values),
    )

    if search_logger is not None:
        search_logger.log_config(settings=settings.to_dict(), scenario=asdict(s))

    out: Dict[str, Any] = {"scenario": asdict(s), "found": False, "time": None}

    if s.post_left is None or s.post_right is None:
        info, shot = search.find_any_shot(car, prediction, s.game_time, options)
        out["found"] = info.found
        out["time"] = info.time
        if shot is not None:
            out["distances"] = list(shot.distances)
            out["path_type"] = shot.path.path_type.value
            out["num_samples"] = len(shot.all_samples)
        return out

    registry = AimRequestRegistry()
    handle = registry.new(np.asarray(s.post_left), np.asarray(s.post_right), car_index=0, options=options)
    request = registry.get(handle)
    info = search.find_shot(request, car, prediction, s.game_time, handle=handle)
    out["found"] = info.found
    out["time"] = info.time

    if request.shot is not None:
        data = search.shot_data(request, car, prediction, s.game_time)
        out["distances"] = list(request.shot.distances)
        out["path_type"] = request.shot.path.path_type.value
        out["num_samples"] = len(request.shot.all_samples)
        out["shot_data"] = data.to_dict()
        if search_logger is not None:
            search_logger.log_event(s.game_time, "shot_found", {"handle": handle, "time": info.time})
    return out


def run_batch(scenarios: List[Scenario], search_logger: Optional[SearchLogger] = None) -> Dict[str, Any]:
    results = [run_scenario(s, search_logger=search_logger) for s in scenarios]
    found = [r for r in results if r["found"]]
    lead = [float(r["time"]) - float(r["scenario"]["game_time"]) for r in found]
    summary = {
        "n_runs": int(len(results)),
        "hit_rate": float(len(found) / len(results)) if results else 0.0,
        "time_to_contact_s": {
            "mean": float(np.mean(lead)) if lead else None,
            "p50": float(np.percentile(lead, 50)) if lead else None,
        },
    }
    return {"summary": summary, "runs": results}
