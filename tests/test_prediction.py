import numpy as np
import pytest

from shot_planner.prediction import BALL_RADIUS, TargetPrediction, predict_ballistic


def test_ballistic_prediction_timing_and_floor():
    pred = predict_ballistic(location=[0.0, 0.0, 800.0], velocity=[500.0, 0.0, 0.0], game_time=10.0, duration_s=3.0)
    assert pred.num_slices == 360
    assert pred[0].time == pytest.approx(10.0 + 1.0 / 120.0)
    assert pred[-1].time == pytest.approx(13.0)
    zs = np.array([s.location[2] for s in pred.slices])
    assert np.all(zs >= BALL_RADIUS - 1e-9)
    assert zs[30] < 800.0
    assert pred[-1].location[0] == pytest.approx(1500.0, rel=1e-6)


def test_bounce_loses_energy():
    pred = predict_ballistic(location=[0.0, 0.0, 500.0], velocity=[0.0, 0.0, 0.0], game_time=0.0, duration_s=4.0, restitution=0.5)
    zs = np.array([s.location[2] for s in pred.slices])
    first_floor = int(np.argmax(zs <= BALL_RADIUS + 1e-9))
    assert first_floor > 0
    assert zs[first_floor:].max() < 500.0 * 0.5


def test_get_slice_index_is_clamped():
    pred = predict_ballistic(location=[0.0, 0.0, 92.75], velocity=[0.0, 0.0, 0.0], game_time=0.0, duration_s=1.0)
    assert pred.slice_index(0.0, 0.0) == 0
    assert pred.slice_index(0.5, 0.0) == 59
    assert pred.slice_index(100.0, 0.0) == pred.num_slices - 1
    assert pred.get_slice(0.5, 0.0) is pred[59]


def test_get_slice_on_empty_prediction():
    with pytest.raises(LookupError):
        TargetPrediction().get_slice(1.0, 0.0)
