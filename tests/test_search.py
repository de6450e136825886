import logging

import numpy as np
import pytest

from shot_planner.analyzer import AnalyzerConfig
from shot_planner.capability import MAX_SPEED, REST_HEIGHT, Car, turn_radius
from shot_planner.config import PlannerSettings
from shot_planner.logging.search_logger import SearchLogger
from shot_planner.prediction import TargetPrediction, predict_ballistic
from shot_planner.search import ShotSearch
from shot_planner.shot import AimRequest, SearchOptions

LEFT = np.array([893.0, 5120.0, 0.0])
RIGHT = np.array([-893.0, 5120.0, 0.0])


def _make_car(**kwargs) -> Car:
    # Behind the target, facing the far goal.
    return Car(location=np.array([0.0, -2000.0, REST_HEIGHT]), yaw=np.pi / 2.0, **kwargs)


def _make_prediction(location=(0.0, 0.0, 92.75), duration_s: float = 6.0) -> TargetPrediction:
    return predict_ballistic(location=location, velocity=[0.0, 0.0, 0.0], game_time=0.0, duration_s=duration_s)


def _make_request(max_slice=400, all_slices=False) -> AimRequest:
    return AimRequest(target_left=LEFT, target_right=RIGHT, car_index=0, options=SearchOptions(max_slice=max_slice, all=all_slices))


def test_finds_straight_shot_through_window():
    search = ShotSearch()
    request = _make_request()
    info = search.find_shot(request, _make_car(), _make_prediction(), 0.0)

    assert info.found
    assert 1.5 < info.time < 400.0 / 120.0
    shot = request.shot
    assert shot is not None
    assert shot.time == info.time
    assert shot.distances[0] == pytest.approx(0.0, abs=1e-6)
    assert sum(shot.distances) == pytest.approx(2000.0 - 92.75, abs=1.0)


def test_temporary_search_leaves_request_untouched():
    search = ShotSearch()
    request = _make_request()
    info = search.find_shot(request, _make_car(), _make_prediction(), 0.0, temporary=True)
    assert info.found
    assert request.shot is None


def test_failed_search_clears_previous_shot():
    search = ShotSearch()
    request = _make_request()
    assert search.find_shot(request, _make_car(), _make_prediction(), 0.0).found
    assert request.shot is not None

    request.options = SearchOptions(max_slice=10)
    assert not search.find_shot(request, _make_car(), _make_prediction(), 0.0).found
    assert request.shot is None


def test_temporary_search_keeps_existing_shot():
    search = ShotSearch()
    request = _make_request()
    assert search.find_shot(request, _make_car(), _make_prediction(), 0.0).found
    stored = request.shot

    info = search.find_shot(request, _make_car(), _make_prediction(), 0.0, temporary=True)
    assert info.found
    assert request.shot is stored


def test_exhaustive_search_keeps_earliest_shot(tmp_path):
    search_logger = SearchLogger(output_dir=tmp_path)
    search = ShotSearch(search_logger=search_logger)
    first = search.find_shot(_make_request(), _make_car(), _make_prediction(), 0.0)
    exhaustive = search.find_shot(_make_request(all_slices=True), _make_car(), _make_prediction(), 0.0)

    assert first.found and exhaustive.found
    assert exhaustive.time == first.time
    first_count, exhaustive_count = (r["slices_evaluated"] for r in search_logger.searches)
    assert exhaustive_count > first_count


def test_unavailable_agent_or_empty_prediction():
    search = ShotSearch()
    request = _make_request()
    assert not search.find_shot(request, _make_car(demolished=True), _make_prediction(), 0.0).found
    assert not search.find_shot(request, _make_car(), TargetPrediction(), 0.0).found
    airborne = Car(location=np.array([0.0, -2000.0, 300.0]), yaw=np.pi / 2.0, airborne=True)
    assert not search.find_shot(request, airborne, _make_prediction(), 0.0).found


def test_stops_at_goal_line(tmp_path):
    search_logger = SearchLogger(output_dir=tmp_path)
    search = ShotSearch(search_logger=search_logger)
    info = search.find_shot(_make_request(), _make_car(), _make_prediction(location=(0.0, 5300.0, 92.75)), 0.0)
    assert not info.found
    assert search_logger.searches[-1]["slices_evaluated"] == 0


def test_window_too_narrow():
    search = ShotSearch()
    request = AimRequest(target_left=[50.0, 5120.0, 0.0], target_right=[-50.0, 5120.0, 0.0], car_index=0)
    assert not search.find_shot(request, _make_car(), _make_prediction(), 0.0).found


def test_no_maneuver_enabled_finds_nothing():
    cfg = AnalyzerConfig(may_ground_shot=False, may_jump_shot=False, may_double_jump_shot=False)
    search = ShotSearch(settings=PlannerSettings(analyzer=cfg))
    assert search.height_ceiling(_make_car()) == float("-inf")
    assert not search.find_shot(_make_request(), _make_car(), _make_prediction(), 0.0).found


def test_absolute_envelope_analyzer():
    search = ShotSearch()
    assert search.absolute_analyzer.config.max_speed == MAX_SPEED
    assert search.absolute_analyzer.config.max_turn_radius == pytest.approx(turn_radius(MAX_SPEED))
    assert search.analyzer_for(SearchOptions(use_absolute_max_values=True)) is search.absolute_analyzer
    assert search.analyzer_for(SearchOptions()) is search.analyzer


def test_find_any_shot():
    search = ShotSearch()
    info, shot = search.find_any_shot(_make_car(), _make_prediction(), 0.0, SearchOptions(max_slice=400))
    assert info.found
    assert shot is not None
    assert shot.time == info.time
    assert shot.distances[1] == 0.0 and shot.distances[2] == 0.0


def test_shot_data_from_start_of_path():
    search = ShotSearch()
    request = _make_request()
    car = _make_car()
    prediction = _make_prediction()
    search.find_shot(request, car, prediction, 0.0)

    data = search.shot_data(request, car, prediction, 0.0)
    ball = prediction.get_slice(request.shot.time, 0.0)
    assert np.allclose(data.shot_vector, [0.0, 1.0, 0.0], atol=1e-9)
    assert np.allclose(data.contact_point, ball.location - data.shot_vector * ball.radius)
    assert data.path_index == 0
    assert data.distance_remaining == pytest.approx(sum(request.shot.distances))
    assert np.allclose(data.current_path_point, [0.0, -2000.0])
    assert np.allclose(data.next_path_point, [0.0, -1990.0])
    assert len(data.path_samples) == len(request.shot.all_samples)
    assert data.to_dict()["path_index"] == 0


def test_shot_data_without_shot():
    search = ShotSearch()
    with pytest.raises(LookupError):
        search.shot_data(_make_request(), _make_car(), _make_prediction(), 0.0)


def test_debug_log_on_found_shot(caplog):
    caplog.set_level(logging.DEBUG, logger="shot_planner.search")
    ShotSearch().find_shot(_make_request(), _make_car(), _make_prediction(), 0.0, handle=3)
    assert "shot for target 3" in caplog.text
