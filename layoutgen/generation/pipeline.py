"""Pipeline orchestration for room layout generation.

``Orchestrator`` owns one ``GenerationState`` and advances it exactly one
phase action per ``tick()``:

    scattering -> [confirm] -> settling -> selecting -> [confirm]
        -> triangulating -> [confirm] -> building_graph -> done

The bracketed confirmation gates only exist for interactive runs; they wait
for ``confirm()`` (a keypress, an HTTP call, a socket event) and never block
the caller. Physics, triangulation and MST are injected so tests can swap in
deterministic fakes.
"""
from __future__ import annotations

import random
import time
from typing import Callable, Optional

from ..logging_utils import get_logger
from .config import GenerationConfig
from .errors import PhaseError, SettleTimeoutError
from .graph import NetworkxMST, spanning_tree, total_weight
from .metrics import init_metrics
from .physics import PymunkWorld
from .scatter import scatter_complete, scatter_room
from .selection import select_all, select_one, selected_subsequence
from .separation import advance, all_settled, check_ceiling
from .state import GenerationState, Phase, next_phase
from .triangulation import ScipyTriangulator, triangulate_rooms, triangulation_edges

log = get_logger("layoutgen.pipeline")


class Orchestrator:
    def __init__(self, config: Optional[GenerationConfig] = None, physics=None, triangulator=None,
                 mst_factory: Optional[Callable] = None):
        self.config = (config or GenerationConfig()).with_seed()
        self.rng = random.Random(self.config.seed)
        self.physics = physics if physics is not None else PymunkWorld.from_config(self.config)
        self.triangulator = triangulator if triangulator is not None else ScipyTriangulator()
        self.mst_factory = mst_factory or NetworkxMST
        self.state = GenerationState(seed=self.config.seed)
        self.log = log.bind(seed=self.config.seed)
        if self.config.enable_metrics:
            self.state.metrics = init_metrics()
        self._confirm_pending = False
        self._started = None
        self._handlers = {
            Phase.SCATTERING: self._scatter,
            Phase.AWAIT_CONFIRM_1: self._await_confirmation,
            Phase.SETTLING: self._settle,
            Phase.SELECTING: self._select,
            Phase.AWAIT_CONFIRM_2: self._await_confirmation,
            Phase.TRIANGULATING: self._triangulate,
            Phase.AWAIT_CONFIRM_3: self._await_confirmation,
            Phase.BUILDING_GRAPH: self._build_graph,
            Phase.DONE: lambda: False,
        }

    @property
    def phase(self) -> Phase:
        return self.state.phase

    @property
    def confirm_pending(self) -> bool:
        return self._confirm_pending

    # -- external signals -------------------------------------------------
    def tick(self) -> Phase:
        """Run one phase action and apply the transition if its exit condition holds."""
        state = self.state
        phase = state.phase
        if phase is Phase.DONE:
            return phase
        if self._started is None:
            self._started = time.perf_counter()
            self.log.info(event="run_start", threshold=self.config.room_threshold,
                     interactive=self.config.interactive)
        state.tick += 1
        state.phase_ticks[phase.value] = state.phase_ticks.get(phase.value, 0) + 1
        ps = time.perf_counter()
        try:
            finished = self._handlers[phase]()
        finally:
            self._record_phase_time(phase, time.perf_counter() - ps)
        if finished:
            self._transition(phase)
        return state.phase

    def confirm(self, require_await: bool = False) -> bool:
        """Deliver the confirmation signal.

        Outside an await phase the signal is remembered and consumed by the next
        gate, unless ``require_await`` is set, in which case PhaseError is raised.
        Returns True when the current phase is a gate that will consume it.
        """
        if require_await and not self.state.phase.awaiting:
            raise PhaseError(f"not awaiting confirmation (phase={self.state.phase.value})")
        self._confirm_pending = True
        return self.state.phase.awaiting

    def run(self, max_ticks: Optional[int] = None, on_await: Optional[Callable[[Phase], None]] = None) -> GenerationState:
        """Tick until done (or ``max_ticks`` ticks have run).

        Await phases call ``on_await(phase)`` first when given (e.g. to block on
        stdin), then confirm.
        """
        ticks = 0
        while not self.state.done:
            if max_ticks is not None and ticks >= max_ticks:
                break
            if self.state.phase.awaiting and not self._confirm_pending:
                if on_await is not None:
                    on_await(self.state.phase)
                self.confirm()
            self.tick()
            ticks += 1
        return self.state

    # -- phase actions ----------------------------------------------------
    def _scatter(self) -> bool:
        scatter_room(self.state, self.config, self.rng, self.physics)
        self._metric('rooms_scattered', len(self.state.rooms))
        return scatter_complete(self.state, self.config)

    def _await_confirmation(self) -> bool:
        if not self._confirm_pending:
            return False
        self._confirm_pending = False
        return True

    def _settle(self) -> bool:
        state = self.state
        advance(state, self.physics, self.config.timestep)
        settle_ticks = state.phase_ticks.get(Phase.SETTLING.value, 0)
        self._metric('settle_ticks', settle_ticks)
        if all_settled(state, self.physics):
            return True
        try:
            check_ceiling(state, self.physics, settle_ticks, self.config.max_settle_ticks)
        except SettleTimeoutError as exc:
            self._metric('settle_timeout', True)
            self.log.error(event="settle_timeout", ticks=exc.ticks, moving=exc.moving)
            raise
        return False

    def _select(self) -> bool:
        rooms = self.state.rooms
        if not self.config.incremental_selection:
            select_all(rooms, self.config.min_area)
            return True
        return select_one(rooms, self.config.min_area) is None

    def _triangulate(self) -> bool:
        state = self.state
        tri = triangulate_rooms(state.selected_rooms, self.triangulator, strict=self.config.strict_triangulation)
        state.triangulation = tri
        self._metric('triangles', tri.triangle_count)
        self._metric('triangulation_edges', sum(1 for _ in triangulation_edges(tri)))
        self._metric('triangulation_failed', tri.failed)
        return True

    def _build_graph(self) -> bool:
        state = self.state
        edges = spanning_tree(state.selected_rooms, state.triangulation, self.mst_factory())
        state.spanning_tree = edges
        self._metric('mst_edges', len(edges))
        self._metric('mst_weight', total_weight(edges))
        return True

    # -- bookkeeping ------------------------------------------------------
    def _transition(self, leaving: Phase) -> None:
        state = self.state
        if leaving is Phase.SELECTING:
            state.selected_rooms = tuple(selected_subsequence(state.rooms))
            self._metric('rooms_selected', len(state.selected_rooms))
        state.phase = next_phase(leaving, self.config.interactive)
        self.log.info(event="phase", phase=state.phase.value, tick=state.tick, rooms=len(state.rooms))
        if state.phase is Phase.DONE:
            runtime_ms = int((time.perf_counter() - self._started) * 1000)
            self._metric('runtime_ms', runtime_ms)
            self.log.info(event="run_done", ticks=state.tick, runtime_ms=runtime_ms,
                     selected=len(state.selected_rooms), corridors=len(state.spanning_tree))

    def _metric(self, key, value) -> None:
        if self.config.enable_metrics:
            self.state.metrics[key] = value

    def _record_phase_time(self, phase: Phase, seconds: float) -> None:
        if not self.config.enable_metrics:
            return
        phase_ms = self.state.metrics['phase_ms']
        phase_ms[phase.value] = phase_ms.get(phase.value, 0.0) + seconds * 1000.0


def generate(config: Optional[GenerationConfig] = None, physics=None, triangulator=None, mst_factory=None,
             max_ticks: Optional[int] = None) -> GenerationState:
    """Run a non-interactive layout to completion and return its state."""
    config = config or GenerationConfig()
    if config.interactive:
        raise ValueError("generate() runs non-interactively; drive an Orchestrator for confirmation gates")
    orch = Orchestrator(config, physics=physics, triangulator=triangulator, mst_factory=mst_factory)
    return orch.run(max_ticks=max_ticks)


__all__ = ["Orchestrator", "generate"]
