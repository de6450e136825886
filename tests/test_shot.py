import numpy as np
import pytest

from shot_planner.dubins import DubinsPath, PathType
from shot_planner.shot import STEP_DISTANCE, AimRequest, SearchOptions, Shot, get_samples_from_path
from shot_planner.types import Pose2D


def _make_shot(path_type=PathType.LSR, param=(0.8, 3.0, 1.2), rho=500.0, heading=0.0) -> Shot:
    path = DubinsPath(qi=Pose2D(100.0, -200.0, heading), rho=rho, path_type=path_type, param=param)
    distances = (path.segment_length(0), path.segment_length(1), path.segment_length(2), 0.0)
    return Shot.from_path(2.5, path, distances)


def test_get_samples_from_path_spacing():
    path = DubinsPath(qi=Pose2D(0.0, 0.0, 0.0), rho=100.0, path_type=PathType.LSL, param=(0.0, 1.0, 0.0))
    pts = get_samples_from_path(path, 0.0, 100.0)
    assert pts.shape == (10, 2)
    assert np.allclose(pts[:, 0], np.arange(0.0, 100.0, 10.0))
    assert get_samples_from_path(path, 50.0, 50.0).shape == (0, 2)
    with pytest.raises(ValueError):
        get_samples_from_path(path, 0.0, 100.0, step=0.0)


def test_sample_counts_cover_segment_lengths():
    shot = _make_shot()
    for i, count in enumerate(shot.segment_counts):
        d = shot.distances[i]
        assert d - 1e-6 <= count * STEP_DISTANCE <= d + STEP_DISTANCE + 1e-6
    assert len(shot.all_samples) == sum(shot.segment_counts)


def test_empty_segment_is_skipped():
    shot = _make_shot(path_type=PathType.LSL, param=(0.0, 2.0, 0.0))
    assert shot.segment_counts == (0, 100, 0)
    distance, index = shot.locate(np.array(shot.all_samples[42]))
    assert index == 42
    assert distance == pytest.approx(420.0)


@pytest.mark.parametrize("linear_scan", [False, True])
def test_locate_on_samples_is_exact(linear_scan):
    shot = _make_shot()
    counts = shot.segment_counts
    for k in range(0, len(shot.all_samples), 7):
        distance, index = shot.locate(np.array(shot.all_samples[k]), linear_scan=linear_scan)
        assert index == k
        segment = 0 if k < counts[0] else (1 if k < counts[0] + counts[1] else 2)
        within = k - sum(counts[:segment])
        assert distance == pytest.approx(sum(shot.distances[:segment]) + within * STEP_DISTANCE)

        again = shot.locate(np.array(shot.all_samples[index]), linear_scan=linear_scan)
        assert again == (distance, index)


def test_locate_near_path_within_one_step():
    shot = _make_shot(path_type=PathType.LSL, param=(0.0, 4.0, 0.0))
    # Straight run along +x from (100, -200); query just beside it.
    distance, _ = shot.locate(np.array([100.0 + 1234.0, -197.0, 0.0]))
    assert abs(distance - 1234.0) <= STEP_DISTANCE


def test_binary_search_matches_linear_scan():
    rng = np.random.default_rng(3)
    types = [PathType.LSL, PathType.LSR, PathType.RSL, PathType.RSR]
    for _ in range(20):
        param = (float(rng.uniform(0.0, 3.0)), float(rng.uniform(0.0, 6.0)), float(rng.uniform(0.0, 3.0)))
        shot = _make_shot(
            path_type=types[int(rng.integers(len(types)))],
            param=param,
            rho=float(rng.uniform(150.0, 1200.0)),
            heading=float(rng.uniform(-np.pi, np.pi)),
        )
        if not shot.all_samples:
            continue
        for _ in range(5):
            point = np.array(shot.all_samples[int(rng.integers(len(shot.all_samples)))])
            fast = shot.locate(point)
            slow = shot.locate(point, linear_scan=True)
            assert fast[0] == pytest.approx(slow[0])

            # Off the samples, beside the path.
            near = point + rng.normal(scale=3.0, size=2)
            assert shot.nearest_sample(near)[2] == pytest.approx(shot.nearest_sample(near, linear_scan=True)[2])
            assert shot.locate(near) == shot.locate(near, linear_scan=True)


def test_search_options_slice_range():
    assert SearchOptions().slice_range(10) == range(0, 10)
    assert SearchOptions(min_slice=3, max_slice=7).slice_range(10) == range(3, 7)
    assert SearchOptions(max_slice=50).slice_range(10) == range(0, 10)
    assert len(SearchOptions(min_slice=8, max_slice=2).slice_range(10)) == 0

    opts = SearchOptions.from_optional(min_slice=None, max_slice=None, use_absolute_max_values=True, all=None, max_slices=30)
    assert opts.max_slice == 30
    assert opts.use_absolute_max_values
    assert not opts.all


def test_aim_request_confirm_and_planar_posts():
    request = AimRequest(target_left=[800.0, 5120.0], target_right=[-800.0, 5120.0], car_index=1)
    assert request.target_left.shape == (3,)
    assert not request.is_confirmed
    request.confirm()
    assert request.is_confirmed
    assert request.shot is None
