import numpy as np
import pytest

from shot_planner.registry import AimRequestRegistry
from shot_planner.shot import SearchOptions

LEFT = np.array([893.0, 5120.0, 0.0])
RIGHT = np.array([-893.0, 5120.0, 0.0])


def test_new_assigns_sequential_handles_and_reuses_lowest_free():
    registry = AimRequestRegistry()
    handles = [registry.new(LEFT, RIGHT, car_index=i) for i in range(4)]
    assert handles == [0, 1, 2, 3]

    registry.remove(2)
    registry.remove(1)
    assert registry.new(LEFT, RIGHT, car_index=9) == 1
    assert registry.new(LEFT, RIGHT, car_index=9) == 2
    assert registry.new(LEFT, RIGHT, car_index=9) == 4
    assert registry.get(1).car_index == 9


def test_unknown_handles_raise():
    registry = AimRequestRegistry()
    handle = registry.new(LEFT, RIGHT, car_index=0)
    registry.remove(handle)
    with pytest.raises(IndexError, match="Target no longer exists."):
        registry.get(handle)
    with pytest.raises(IndexError):
        registry.confirm(handle)
    with pytest.raises(IndexError):
        registry.remove(handle)
    with pytest.raises(IndexError):
        registry.get(17)


def test_retain_confirmed_drops_unconfirmed_requests():
    registry = AimRequestRegistry()
    keep = registry.new(LEFT, RIGHT, car_index=0, options=SearchOptions(all=True))
    drop = registry.new(LEFT, RIGHT, car_index=1)
    registry.confirm(keep)

    freed = registry.retain_confirmed()
    assert freed == [drop]
    assert len(registry) == 1
    assert keep in registry
    assert drop not in registry
    assert list(registry) == [keep]
    assert registry.get(keep).options.all
    assert registry.new(LEFT, RIGHT, car_index=2) == drop
