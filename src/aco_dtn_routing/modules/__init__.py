from .ant_tracker import AntPathTracker
from .heuristic import ConstantContactStatistics, HeuristicEstimator, create_statistics
from .pheromone import PheromoneEvaporator, PheromoneStore, PheromoneUpdater

__all__ = [
    "AntPathTracker",
    "ConstantContactStatistics",
    "HeuristicEstimator",
    "create_statistics",
    "PheromoneStore",
    "PheromoneUpdater",
    "PheromoneEvaporator",
]
