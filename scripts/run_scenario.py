#!/usr/bin/env python3

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import replace
from pathlib import Path

import numpy as np

from shot_planner.logging.search_logger import SearchLogger
from shot_planner.offline.scenario import Scenario, run_batch, run_scenario


def _random_scenarios(n: int, seed: int, settings: dict) -> list[Scenario]:
    rng = np.random.default_rng(seed)
    out = []
    for _ in range(int(n)):
        speed = float(rng.uniform(0.0, 1500.0))
        yaw_deg = float(rng.uniform(-180.0, 180.0))
        yaw = np.deg2rad(yaw_deg)
        out.append(
            Scenario(
                car_location=(float(rng.uniform(-3000.0, 3000.0)), float(rng.uniform(-4000.0, 2000.0)), 17.01),
                car_velocity=(speed * float(np.cos(yaw)), speed * float(np.sin(yaw)), 0.0),
                car_yaw_deg=yaw_deg,
                boost=float(rng.uniform(0.0, 100.0)),
                target_location=(float(rng.uniform(-2500.0, 2500.0)), float(rng.uniform(-2500.0, 3500.0)), 92.75),
                target_velocity=(float(rng.uniform(-800.0, 800.0)), float(rng.uniform(-800.0, 800.0)), float(rng.uniform(0.0, 800.0))),
                settings=settings,
            )
        )
    return out


def main() -> None:
    parser = argparse.ArgumentParser(description="Run offline shot searches and print a JSON summary.")
    parser.add_argument("--scenario", type=str, default="", help="Scenario YAML (single run).")
    parser.add_argument("--config", type=str, default="", help="Planner settings YAML.")
    parser.add_argument("--runs", type=int, default=0, help="Random scenarios to run instead of --scenario.")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--all", action="store_true", help="Evaluate every slice (keeps the earliest shot).")
    parser.add_argument("--output", type=str, default="", help="Write the result JSON here.")
    parser.add_argument("--log-dir", type=str, default="", help="Save a search log session to this directory.")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="[%(name)s] %(message)s")

    settings: dict = {}
    if args.config:
        import yaml

        data = yaml.safe_load(Path(args.config).read_text()) or {}
        settings = data.get("shot_planner", data) or {}

    search_logger = SearchLogger(output_dir=Path(args.log_dir), mode="offline") if args.log_dir else None

    if args.runs > 0:
        scenarios = _random_scenarios(args.runs, args.seed, settings)
        if args.all:
            scenarios = [replace(s, all_slices=True) for s in scenarios]
        result = run_batch(scenarios, search_logger=search_logger)
        print(f"[run_scenario] hit_rate={result['summary']['hit_rate']:.2f} over {result['summary']['n_runs']} runs")
    else:
        scenario = Scenario.from_yaml(args.scenario) if args.scenario else Scenario()
        if settings and not scenario.settings:
            scenario = replace(scenario, settings=settings)
        if args.all:
            scenario = replace(scenario, all_slices=True)
        result = run_scenario(scenario, search_logger=search_logger)
        print(f"[run_scenario] found={result['found']} time={result['time']}")

    if search_logger is not None:
        path = search_logger.save()
        print(f"Wrote search log {path}")

    if args.output:
        out = Path(args.output)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(json.dumps(result, indent=2))
        print(f"Wrote {out}")


if __name__ == "__main__":
    main()
