"""Public layout generation interface."""

from .config import GenerationConfig
from .errors import LayoutError, PhaseError, SettleTimeoutError, TriangulationError
from .graph import NetworkxMST, SpanningEdge, spanning_tree
from .physics import PymunkWorld
from .pipeline import Orchestrator, generate
from .rooms import Room
from .state import GenerationState, Phase, next_phase, snapshot
from .triangulation import ScipyTriangulator, Triangulation

__all__ = [
    "GenerationConfig",
    "GenerationState",
    "LayoutError",
    "NetworkxMST",
    "Orchestrator",
    "Phase",
    "PhaseError",
    "PymunkWorld",
    "Room",
    "ScipyTriangulator",
    "SettleTimeoutError",
    "SpanningEdge",
    "Triangulation",
    "TriangulationError",
    "generate",
    "next_phase",
    "snapshot",
    "spanning_tree",
]
