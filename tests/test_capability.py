import numpy as np
import pytest

from shot_planner.capability import (
    MAX_SPEED,
    REST_HEIGHT,
    Car,
    JumpProfile,
    can_reach_target,
    jump_profile,
    turn_radius,
)


def test_grounded_car_lands_immediately():
    car = Car(location=np.array([100.0, -50.0, REST_HEIGHT]), yaw=0.3)
    assert car.landing_time == 0.0
    assert np.allclose(car.landing_location, car.location)
    assert car.landing_yaw == pytest.approx(0.3)


def test_airborne_car_landing_prediction():
    car = Car(location=np.array([0.0, 0.0, REST_HEIGHT + 500.0]), velocity=np.array([100.0, 0.0, 0.0]), airborne=True)
    expected_t = np.sqrt(2.0 * 500.0 / car.gravity)
    assert car.landing_time == pytest.approx(expected_t)
    assert car.landing_location[0] == pytest.approx(100.0 * expected_t)
    assert car.landing_location[2] == pytest.approx(REST_HEIGHT)


def test_speed_ceilings_are_monotone_and_capped():
    slow = Car()
    boosted = Car(boost=100.0)
    assert slow.max_speed.shape == (720,)
    assert np.all(np.diff(slow.max_speed) >= 0.0)
    assert np.all(boosted.max_speed <= MAX_SPEED)
    assert boosted.max_speed[119] > slow.max_speed[119]
    assert np.allclose(slow.ctrms, [turn_radius(v) for v in slow.max_speed])


def test_turn_radius_grows_with_speed():
    assert turn_radius(0.0) == pytest.approx(1.0 / 0.0069)
    assert turn_radius(2300.0) == pytest.approx(1.0 / 0.00088)
    assert turn_radius(500.0) < turn_radius(1500.0)


def test_jump_ceilings():
    car = Car()
    half = car.hitbox.height / 2.0
    assert car.max_jump_height == pytest.approx(232.59 + half, abs=0.1)
    assert car.max_double_jump_height == pytest.approx(501.4 + half, abs=0.2)
    assert car.max_jump_time == pytest.approx(jump_profile(car.gravity).apex_time)


def test_time_to_height_inverts_height_profile():
    profile = JumpProfile(gravity=650.0)
    for t in (0.05, 0.2, 0.5, 0.8):
        assert profile.time_to_height(profile.height(t)) == pytest.approx(t, abs=1e-6)
    assert profile.time_to_height(1e6) == pytest.approx(profile.apex_time)
    assert profile.time_to_height(-5.0) == 0.0


def test_double_jump_reaches_height_sooner():
    single = jump_profile(650.0, False)
    double = jump_profile(650.0, True)
    assert double.time_to_height(200.0) < single.time_to_height(200.0)


def test_jump_profile_rejects_non_positive_gravity():
    with pytest.raises(ValueError):
        JumpProfile(gravity=0.0)


def test_can_reach_target_slack():
    car = Car()
    slack = can_reach_target(car, 1400.0, 3.0, 1000.0)
    assert slack is not None
    assert 0.0 < slack < 3.0
    assert can_reach_target(car, 1400.0, 1.0, 5000.0) is None


def test_reverse_travel_is_slower_without_boost():
    car = Car(boost=100.0)
    forwards = car.time_to_travel(1500.0, MAX_SPEED, 10.0, True)
    backwards = car.time_to_travel(1500.0, MAX_SPEED, 10.0, False)
    assert forwards is not None and backwards is not None
    assert backwards > forwards
