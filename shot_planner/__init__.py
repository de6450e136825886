"""Shot planner: bounded-curvature intercept feasibility + shot path sampling for ground agents."""

from .analyzer import Analyzer, AnalyzerConfig
from .capability import Car
from .prediction import TargetPrediction
from .search import ShotSearch
from .shot import AimRequest, SearchOptions, Shot
from .types import INFEASIBLE, ShotType, TargetInfo, TargetSlice

__all__ = [
    'Analyzer',
    'AnalyzerConfig',
    'Car',
    'TargetPrediction',
    'ShotSearch',
    'AimRequest',
    'SearchOptions',
    'Shot',
    'INFEASIBLE',
    'ShotType',
    'TargetInfo',
    'TargetSlice',
]
