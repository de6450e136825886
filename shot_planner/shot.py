from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from shot_planner.dubins import DubinsPath
from shot_planner.geometry import vec3
from shot_planner.types import TargetInfo

STEP_DISTANCE = 10.0


def get_samples_from_path(path: DubinsPath, start: float, end: float, step: float = STEP_DISTANCE) -> np.ndarray:
    """Planar points every `step` along the path in [start, end); shape (n, 2)."""
    if step <= 0.0:
        raise ValueError("step must be positive")
    if end <= start:
        return np.zeros((0, 2), dtype=float)
    ts = np.arange(float(start), float(end), float(step))
    return path.sample_many(ts)[:, :2]


@dataclass(frozen=True)
class Shot:
    """
    A found path, sampled for progress tracking.

    `samples[i]` holds the points of segment i (every STEP_DISTANCE from the segment start);
    `all_samples` is their concatenation as (x, y) tuples.
    """

    time: float
    distances: Tuple[float, float, float, float]
    path: DubinsPath
    samples: Tuple[np.ndarray, np.ndarray, np.ndarray]
    all_samples: List[Tuple[float, float]] = field(default_factory=list)

    @staticmethod
    def from_path(time: float, path: DubinsPath, distances) -> "Shot":
        bounds = [
            path.segment_length(0),
            path.segment_length(0) + path.segment_length(1),
            path.length(),
        ]
        samples = (
            get_samples_from_path(path, 0.0, bounds[0]),
            get_samples_from_path(path, bounds[0], bounds[1]),
            get_samples_from_path(path, bounds[1], bounds[2]),
        )
        all_samples = [(float(p[0]), float(p[1])) for seg in samples for p in seg]
        return Shot(
            time=float(time),
            distances=tuple(float(d) for d in distances),
            path=path,
            samples=samples,
            all_samples=all_samples,
        )

    @property
    def segment_counts(self) -> Tuple[int, int, int]:
        return tuple(int(seg.shape[0]) for seg in self.samples)  # type: ignore[return-value]

    def _segment_nearest(self, segment: int, target: np.ndarray) -> Tuple[int, float]:
        """
        Binary search for the sample closest to `target`, assuming the distance is unimodal
        along the segment. Empty segments return (0, inf).
        """
        points = self.samples[segment]
        n = points.shape[0]
        if n == 0:
            return 0, float("inf")

        lo = 0
        hi = n - 1
        while lo < hi:
            mid = (lo + hi) // 2
            d_mid = float(np.hypot(*(points[mid] - target)))
            d_next = float(np.hypot(*(points[mid + 1] - target)))
            if d_mid < d_next:
                hi = mid
            else:
                lo = mid + 1
        return lo, float(np.hypot(*(points[lo] - target)))

    def _segment_nearest_linear(self, segment: int, target: np.ndarray) -> Tuple[int, float]:
        points = self.samples[segment]
        if points.shape[0] == 0:
            return 0, float("inf")
        d = np.hypot(points[:, 0] - target[0], points[:, 1] - target[1])
        i = int(np.argmin(d))
        return i, float(d[i])

    def nearest_sample(self, point: np.ndarray, linear_scan: bool = False) -> Tuple[int, int, float]:
        """(segment, index within segment, distance) of the sample nearest `point`."""
        target = vec3(point)[:2]
        search = self._segment_nearest_linear if linear_scan else self._segment_nearest

        best_segment = 0
        best_index = 0
        best_distance = float("inf")
        for segment in range(3):
            index, distance = search(segment, target)
            if distance < best_distance:
                best_segment = segment
                best_index = index
                best_distance = distance
        return best_segment, best_index, best_distance

    def locate(self, point: np.ndarray, linear_scan: bool = False) -> Tuple[float, int]:
        """
        Distance travelled along the path to the sample nearest `point`, and that sample's index
        in `all_samples`.

        The default binary search assumes the distance to `point` is unimodal along each segment,
        which fails for segments that loop back towards the point; `linear_scan=True` checks every
        sample instead.
        """
        segment, index, _ = self.nearest_sample(point, linear_scan=linear_scan)
        counts = self.segment_counts
        pre_distance = float(sum(self.distances[:segment]))
        pre_index = int(sum(counts[:segment]))
        return pre_distance + index * STEP_DISTANCE, pre_index + index


def materialize(info: TargetInfo, time: float) -> Shot:
    return Shot.from_path(time, info.path, info.distances)


@dataclass(frozen=True)
class SearchOptions:
    min_slice: int = 0
    max_slice: Optional[int] = None
    all: bool = False
    use_absolute_max_values: bool = False

    @staticmethod
    def from_optional(
        min_slice: Optional[int] = None,
        max_slice: Optional[int] = None,
        use_absolute_max_values: Optional[bool] = None,
        all: Optional[bool] = None,  # noqa: A002
        max_slices: Optional[int] = None,
    ) -> "SearchOptions":
        return SearchOptions(
            min_slice=int(min_slice) if min_slice is not None else 0,
            max_slice=int(max_slice) if max_slice is not None else max_slices,
            all=bool(all) if all is not None else False,
            use_absolute_max_values=bool(use_absolute_max_values) if use_absolute_max_values is not None else False,
        )

    def slice_range(self, num_slices: int) -> range:
        hi = num_slices if self.max_slice is None else min(int(self.max_slice), num_slices)
        lo = max(int(self.min_slice), 0)
        return range(lo, max(hi, lo))


@dataclass
class AimRequest:
    """An aiming window for one agent plus the shot last found for it."""

    target_left: np.ndarray
    target_right: np.ndarray
    car_index: int
    options: SearchOptions = field(default_factory=SearchOptions)
    shot: Optional[Shot] = None
    _confirmed: bool = False

    def __post_init__(self) -> None:
        self.target_left = vec3(self.target_left)
        self.target_right = vec3(self.target_right)

    def confirm(self) -> None:
        self._confirmed = True

    @property
    def is_confirmed(self) -> bool:
        return self._confirmed
