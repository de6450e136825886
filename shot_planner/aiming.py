from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from shot_planner.geometry import clamp_2d, flatten, normalize, vec3


@dataclass(frozen=True)
class PostCorrection:
    target_left: np.ndarray
    target_right: np.ndarray
    fits: bool


def correct_for_posts(
    location: np.ndarray,
    radius: float,
    target_left: np.ndarray,
    target_right: np.ndarray,
) -> PostCorrection:
    """
    Shrink the aim window so a target of `radius` passes between the posts.

    Each post moves towards the other by `radius`. The window fits when its width, seen from
    `location`, is larger than the target's diameter.
    """
    left = flatten(target_left)
    right = flatten(target_right)
    line = right - left
    width = float(np.linalg.norm(line))
    if width <= 2.0 * radius:
        return PostCorrection(target_left=left, target_right=right, fits=False)

    line_hat = line / width
    left_corrected = left + line_hat * radius
    right_corrected = right - line_hat * radius

    perp = np.array([-line_hat[1], line_hat[0], 0.0], dtype=float)
    center = left + line * 0.5
    to_center = normalize(center - flatten(location))
    corrected_width = width - 2.0 * radius
    fits = corrected_width * abs(float(np.dot(perp, to_center))) > 2.0 * radius

    # Posts keep their input heights.
    left_corrected[2] = vec3(target_left)[2]
    right_corrected[2] = vec3(target_right)[2]
    return PostCorrection(target_left=left_corrected, target_right=right_corrected, fits=bool(fits))


def get_shot_vector_2d(
    direction: np.ndarray,
    location: np.ndarray,
    target_left: np.ndarray,
    target_right: np.ndarray,
) -> np.ndarray:
    """Contact direction: `direction` clamped between the directions to the two posts."""
    loc = flatten(location)
    left_vector = normalize(flatten(target_left) - loc)
    right_vector = normalize(flatten(target_right) - loc)
    return clamp_2d(direction, left_vector, right_vector)
