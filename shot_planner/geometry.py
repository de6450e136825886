from __future__ import annotations

from typing import Sequence

import numpy as np

TAU = 2.0 * np.pi


def vec3(v: Sequence[float]) -> np.ndarray:
    arr = np.asarray(v, dtype=float).reshape(-1)
    if arr.shape[0] == 2:
        return np.array([arr[0], arr[1], 0.0], dtype=float)
    if arr.shape[0] != 3:
        raise ValueError(f"Expected a 2D or 3D vector, got {arr.shape[0]} components")
    return arr


def flatten(v: np.ndarray) -> np.ndarray:
    """Project onto the ground plane (z = 0)."""
    v = np.asarray(v, dtype=float)
    return np.array([v[0], v[1], 0.0], dtype=float)


def normalize(v: np.ndarray) -> np.ndarray:
    """Unit vector, or zeros for a (near) zero-length input."""
    v = np.asarray(v, dtype=float)
    n = float(np.linalg.norm(v))
    if n < 1e-9:
        return np.zeros_like(v)
    return v / n


def distance_2d(a: np.ndarray, b: np.ndarray) -> float:
    return float(np.hypot(float(a[0]) - float(b[0]), float(a[1]) - float(b[1])))


def cross_2d(a: np.ndarray, b: np.ndarray) -> float:
    return float(a[0] * b[1] - a[1] * b[0])


def angle_2d(a: np.ndarray, b: np.ndarray) -> float:
    """Unsigned planar angle in [0, pi] between two vectors; order independent."""
    ax, ay = float(a[0]), float(a[1])
    bx, by = float(b[0]), float(b[1])
    na = np.hypot(ax, ay)
    nb = np.hypot(bx, by)
    if na < 1e-9 or nb < 1e-9:
        return 0.0
    c = (ax * bx + ay * by) / (na * nb)
    return float(np.arccos(np.clip(c, -1.0, 1.0)))


def heading_vector(yaw: float) -> np.ndarray:
    return np.array([np.cos(yaw), np.sin(yaw), 0.0], dtype=float)


def right_vector(yaw: float) -> np.ndarray:
    # Clockwise perpendicular of the heading (x forward, y left, z up).
    return np.array([np.sin(yaw), -np.cos(yaw), 0.0], dtype=float)


def heading_of(v: np.ndarray) -> float:
    return float(np.arctan2(float(v[1]), float(v[0])))


def mod2pi(angle_rad: float) -> float:
    return float(angle_rad % TAU)


def wrap_pi(angle_rad: float) -> float:
    return float((angle_rad + np.pi) % TAU - np.pi)


def clamp_2d(direction: np.ndarray, start: np.ndarray, end: np.ndarray) -> np.ndarray:
    """
    Clamp a planar direction into the (smaller) wedge spanned by two directions.

    Returns `direction` unchanged when it already lies inside the wedge, otherwise whichever
    bound is angularly closer to it.
    """
    d = normalize(flatten(direction))
    s = normalize(flatten(start))
    e = normalize(flatten(end))
    span = cross_2d(s, e)
    if abs(span) < 1e-9:
        # Degenerate wedge: both bounds coincide (or are opposite).
        return s if float(np.dot(s, d)) >= float(np.dot(e, d)) else e
    if cross_2d(s, d) * span >= 0.0 and cross_2d(d, e) * span >= 0.0:
        return d
    return s if float(np.dot(s, d)) >= float(np.dot(e, d)) else e
