from .dtn_simulator import DTNSimulator, SimulationResult
from .routing_engine import RoutingEngine

__all__ = [
    "DTNSimulator",
    "SimulationResult",
    "RoutingEngine",
]
