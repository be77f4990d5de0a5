"""
ACO DTN Routing Package

遅延耐性ネットワーク（DTN）向けのアリコロニー型確率ルーティングパッケージ
"""

__version__ = "1.0.0"

from .algorithms.dtn_simulator import DTNSimulator, SimulationResult
from .algorithms.routing_engine import RoutingEngine
from .config import DEFAULT_CONFIG, load_config, merge_config
from .core.ant import AntOutcome, ForwardAnt
from .core.contact_graph import Connection, ContactGraph
from .core.message import Message
from .core.node import ContactStatistics
from .modules.ant_tracker import AntPathTracker
from .modules.heuristic import ConstantContactStatistics, HeuristicEstimator
from .modules.pheromone import PheromoneEvaporator, PheromoneStore, PheromoneUpdater
from .utils.metrics import MetricsCalculator

__all__ = [
    "DTNSimulator",
    "SimulationResult",
    "RoutingEngine",
    "DEFAULT_CONFIG",
    "load_config",
    "merge_config",
    "AntOutcome",
    "ForwardAnt",
    "Connection",
    "ContactGraph",
    "Message",
    "ContactStatistics",
    "AntPathTracker",
    "ConstantContactStatistics",
    "HeuristicEstimator",
    "PheromoneStore",
    "PheromoneUpdater",
    "PheromoneEvaporator",
    "MetricsCalculator",
]
