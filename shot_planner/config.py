"""
Planner settings: analyzer flags, search loop knobs and the field, loadable from YAML.

Layout (all keys optional):

    shot_planner:
      analyzer:
        max_speed: null
        max_turn_radius: null
        gravity: 650.0
        may_ground_shot: true
        may_jump_shot: true
        may_double_jump_shot: true
      search:
        prediction_time_s: 6.0
        validation_step: 50.0
      field:
        preset: soccar   # soccar | unbounded, or vertices / half_width + half_length
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from shot_planner.analyzer import AnalyzerConfig
from shot_planner.field import FieldBoundary, PolygonField, UnboundedField, soccar_field


def _opt_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


@dataclass
class PlannerSettings:
    analyzer: AnalyzerConfig = field(default_factory=AnalyzerConfig)

    # Search loop
    prediction_time_s: float = 6.0
    validation_step: float = 50.0

    field_spec: Dict[str, Any] = field(default_factory=lambda: {"preset": "soccar"})

    def build_field(self) -> FieldBoundary:
        preset = (self.field_spec or {}).get("preset", "soccar" if not self.field_spec else None)
        if preset == "soccar":
            return soccar_field()
        if preset == "unbounded":
            return UnboundedField()
        return PolygonField.from_dict(self.field_spec)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PlannerSettings":
        settings = cls()

        a = d.get("analyzer") or {}
        base = settings.analyzer
        settings.analyzer = AnalyzerConfig(
            max_speed=_opt_float(a.get("max_speed", base.max_speed)),
            max_turn_radius=_opt_float(a.get("max_turn_radius", base.max_turn_radius)),
            gravity=abs(float(a.get("gravity", base.gravity))),
            may_ground_shot=bool(a.get("may_ground_shot", base.may_ground_shot)),
            may_jump_shot=bool(a.get("may_jump_shot", base.may_jump_shot)),
            may_double_jump_shot=bool(a.get("may_double_jump_shot", base.may_double_jump_shot)),
        )

        s = d.get("search") or {}
        if "prediction_time_s" in s:
            settings.prediction_time_s = float(s["prediction_time_s"])
        if "validation_step" in s:
            settings.validation_step = float(s["validation_step"])

        if "field" in d and d["field"] is not None:
            settings.field_spec = dict(d["field"])

        return settings

    @classmethod
    def from_yaml(cls, filepath: str | Path) -> "PlannerSettings":
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(str(path))
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}

        if "shot_planner" in data:
            data = data["shot_planner"] or {}

        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "analyzer": asdict(self.analyzer),
            "search": {
                "prediction_time_s": self.prediction_time_s,
                "validation_step": self.validation_step,
            },
            "field": dict(self.field_spec),
        }
