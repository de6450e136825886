import numpy as np
import pytest

from shot_planner.geometry import angle_2d, clamp_2d, heading_of, mod2pi, normalize, right_vector, vec3, wrap_pi


def test_vec3_pads_planar_input_and_rejects_other_shapes():
    assert np.allclose(vec3([1.0, 2.0]), [1.0, 2.0, 0.0])
    assert np.allclose(vec3((1.0, 2.0, 3.0)), [1.0, 2.0, 3.0])
    with pytest.raises(ValueError):
        vec3([1.0, 2.0, 3.0, 4.0])


def test_normalize_zero_vector():
    assert np.allclose(normalize(np.zeros(3)), np.zeros(3))
    assert np.isclose(np.linalg.norm(normalize(np.array([3.0, 4.0, 0.0]))), 1.0)


def test_right_vector_is_clockwise_of_heading():
    assert np.allclose(right_vector(0.0), [0.0, -1.0, 0.0])
    assert np.allclose(right_vector(np.pi / 2.0), [1.0, 0.0, 0.0])


def test_angle_2d_unsigned():
    a = np.array([1.0, 0.0, 0.0])
    b = np.array([0.0, 1.0, 5.0])
    assert np.isclose(angle_2d(a, b), np.pi / 2.0)
    assert np.isclose(angle_2d(b, a), np.pi / 2.0)
    assert np.isclose(angle_2d(a, -a), np.pi)


def test_angle_wrapping():
    assert np.isclose(mod2pi(-np.pi / 2.0), 1.5 * np.pi)
    assert np.isclose(wrap_pi(1.5 * np.pi), -np.pi / 2.0)
    assert np.isclose(heading_of(np.array([0.0, -2.0, 0.0])), -np.pi / 2.0)


def test_clamp_2d_inside_wedge_passes_through():
    d = normalize(np.array([1.0, 1.0, 0.0]))
    out = clamp_2d(d, np.array([1.0, 0.0, 0.0]), np.array([0.0, 1.0, 0.0]))
    assert np.allclose(out, d)


def test_clamp_2d_outside_wedge_snaps_to_nearest_bound():
    start = np.array([1.0, 0.0, 0.0])
    end = np.array([0.0, 1.0, 0.0])
    assert np.allclose(clamp_2d(np.array([-1.0, 0.1, 0.0]), start, end), end)
    assert np.allclose(clamp_2d(np.array([0.5, -1.0, 0.0]), start, end), start)
