from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

import numpy as np


class FieldBoundary(Protocol):
    def is_point_in(self, point: np.ndarray) -> bool:  # noqa: D102
        ...

    def is_past_goal_line(self, location: np.ndarray, margin: float = 0.0) -> bool:  # noqa: D102
        ...


@dataclass(frozen=True)
class UnboundedField:
    """Accepts every point; useful for tests and open-plane scenarios."""

    def is_point_in(self, point: np.ndarray) -> bool:  # noqa: ARG002
        return True

    def is_past_goal_line(self, location: np.ndarray, margin: float = 0.0) -> bool:  # noqa: ARG002
        return False


@dataclass(frozen=True)
class PolygonField:
    """
    Drivable area as a simple polygon in the ground plane.

    `goal_line_y` (optional) marks the |y| beyond which a target counts as scored.
    """

    vertices: np.ndarray
    goal_line_y: Optional[float] = None
    name: str = ""

    def __post_init__(self) -> None:
        verts = np.asarray(self.vertices, dtype=float).reshape(-1, 2)
        if verts.shape[0] < 3:
            raise ValueError("PolygonField requires at least 3 vertices")
        object.__setattr__(self, "vertices", verts)

    def is_point_in(self, point: np.ndarray) -> bool:
        x, y = float(point[0]), float(point[1])
        verts = self.vertices
        inside = False
        n = verts.shape[0]
        j = n - 1
        for i in range(n):
            xi, yi = float(verts[i, 0]), float(verts[i, 1])
            xj, yj = float(verts[j, 0]), float(verts[j, 1])
            if (yi > y) != (yj > y):
                dy = yj - yi
                if abs(dy) < 1e-12:
                    dy = 1e-12
                if x < (xj - xi) * (y - yi) / dy + xi:
                    inside = not inside
            j = i
        return inside

    def is_past_goal_line(self, location: np.ndarray, margin: float = 0.0) -> bool:
        if self.goal_line_y is None:
            return False
        return abs(float(location[1])) > float(self.goal_line_y) + float(margin)

    @staticmethod
    def from_dict(payload: dict) -> "PolygonField":
        verts = payload.get("vertices") or payload.get("points") or payload.get("polygon")
        if verts is None:
            if "half_width" in payload and "half_length" in payload:
                return arena_field(
                    half_width=float(payload["half_width"]),
                    half_length=float(payload["half_length"]),
                    corner_cut=float(payload.get("corner_cut", 0.0)),
                    name=str(payload.get("name", "")),
                )
            raise ValueError("Field dict missing vertices")
        goal = payload.get("goal_line_y")
        return PolygonField(
            vertices=np.asarray(verts, dtype=float),
            goal_line_y=None if goal is None else float(goal),
            name=str(payload.get("name", "")),
        )


def arena_field(half_width: float, half_length: float, corner_cut: float = 0.0, name: str = "") -> PolygonField:
    """Axis-aligned rectangle with 45 degree chamfered corners; goal lines at y = +-half_length."""
    w = float(half_width)
    h = float(half_length)
    c = float(np.clip(corner_cut, 0.0, min(w, h)))
    if c <= 0.0:
        verts = [[-w, -h], [w, -h], [w, h], [-w, h]]
    else:
        verts = [
            [-w + c, -h],
            [w - c, -h],
            [w, -h + c],
            [w, h - c],
            [w - c, h],
            [-w + c, h],
            [-w, h - c],
            [-w, -h + c],
        ]
    return PolygonField(vertices=np.asarray(verts, dtype=float), goal_line_y=h, name=name)


def soccar_field() -> PolygonField:
    return arena_field(half_width=4096.0, half_length=5120.0, corner_cut=1152.0, name="soccar")


def load_field(path: str | Path) -> PolygonField:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(str(path))
    ext = path.suffix.lower()
    if ext in {".yaml", ".yml"}:
        import yaml

        payload = yaml.safe_load(path.read_text()) or {}
    elif ext == ".json":
        import json

        payload = json.loads(path.read_text())
    else:
        raise ValueError(f"Unsupported field file format: {ext}")

    if isinstance(payload, dict) and "field" in payload:
        payload = payload["field"]
    if isinstance(payload, list):
        return PolygonField(vertices=np.asarray(payload, dtype=float))
    if isinstance(payload, dict):
        if payload.get("preset") == "soccar":
            return soccar_field()
        return PolygonField.from_dict(payload)
    raise ValueError("Invalid field file format")
