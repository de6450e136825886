from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import numpy as np

SCHEMA_VERSION = "shot-search/1"


class NumpyEncoder(json.JSONEncoder):
    def default(self, o):  # noqa: D102
        if isinstance(o, np.ndarray):
            return o.tolist()
        if isinstance(o, np.generic):
            return o.item()
        return super().default(o)


class SearchLogger:
    """
    Session recorder for shot searches.

    One record per `find_shot` call plus free-form events; `save` adds aggregate metrics and
    writes everything as a single JSON document named after the run id.
    """

    def __init__(
        self,
        output_dir: str | Path,
        run_id: str = "",
        mode: str = "offline",
        tags: Optional[Iterable[str]] = None,
    ) -> None:
        self.output_dir = Path(output_dir)
        self.run_id = run_id or uuid.uuid4().hex[:8]
        self.session: Dict[str, Any] = {
            "metadata": {
                "run_id": self.run_id,
                "mode": str(mode),
                "created": datetime.now(timezone.utc).isoformat(timespec="seconds"),
                "tags": list(tags or []),
                "schema": SCHEMA_VERSION,
            },
            "config": {},
            "searches": [],
            "events": [],
            "metrics": {},
        }

    @property
    def searches(self) -> List[Dict[str, Any]]:
        return self.session["searches"]

    def log_config(self, settings: dict | None = None, scenario: dict | None = None, extra: dict | None = None) -> None:
        sections = {"settings": settings, "scenario": scenario, "extra": extra}
        self.session["config"] = {k: v for k, v in sections.items() if v is not None}

    def log_search(
        self,
        timestamp: float,
        handle: int | None,
        found: bool,
        slices_evaluated: int,
        shot_time: float | None = None,
        distances: tuple | list | None = None,
        shot_type: str | None = None,
    ) -> None:
        record: Dict[str, Any] = {
            "t": float(timestamp),
            "handle": handle,
            "found": bool(found),
            "slices_evaluated": int(slices_evaluated),
        }
        if found:
            record["shot_time"] = None if shot_time is None else float(shot_time)
            record["distances"] = None if distances is None else [float(d) for d in distances]
            record["shot_type"] = shot_type
        self.searches.append(record)

    def log_event(self, timestamp: float, kind: str, details: dict | None = None) -> None:
        self.session["events"].append({"t": float(timestamp), "kind": str(kind), **(details or {})})

    def summary(self) -> Dict[str, Any]:
        """Hit rate, mean slices evaluated and mean lead time of the found shots."""
        if not self.searches:
            return {"count": 0}
        hits = [r for r in self.searches if r["found"]]
        leads = np.array([r["shot_time"] - r["t"] for r in hits if r.get("shot_time") is not None], dtype=float)
        evaluated = np.array([r["slices_evaluated"] for r in self.searches], dtype=float)
        return {
            "count": len(self.searches),
            "hit_rate": len(hits) / len(self.searches),
            "avg_slices_evaluated": float(evaluated.mean()),
            "avg_time_to_contact": float(leads.mean()) if leads.size else None,
        }

    def save(self, filename: str | None = None) -> Path:
        self.session["metrics"]["search"] = self.summary()
        self.output_dir.mkdir(parents=True, exist_ok=True)
        out = self.output_dir / (filename or f"{self.run_id}.json")
        with open(out, "w") as f:
            json.dump(self.session, f, indent=2, cls=NumpyEncoder)
        return out
