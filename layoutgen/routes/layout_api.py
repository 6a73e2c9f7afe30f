"""
project: layoutgen
module: layout_api.py
License: MIT

Layout generation HTTP API.

A client creates a run, then drives it with tick / confirm calls (or asks the
server to run it to completion) and polls snapshots for drawing. Runs live in
a small in-process cache; each run has its own lock because ticks mutate the
generation state.
"""

import hashlib
import random
import threading
import uuid

from flask import Blueprint, current_app, jsonify, request

from layoutgen.generation import GenerationConfig, Orchestrator, PhaseError, SettleTimeoutError, TriangulationError, snapshot
from layoutgen.logging_utils import get_logger
from layoutgen.validation import CREATE_LAYOUT, TICK, validate

log = get_logger("layoutgen.api")

SEED_MAX_INT = 9223372036854775807


class LayoutRun:
    """One generation run plus the lock serialising access to it."""

    def __init__(self, run_id: str, orchestrator: Orchestrator):
        self.id = run_id
        self.orchestrator = orchestrator
        self.lock = threading.Lock()
        self.playing = False

    @property
    def seed(self):
        return self.orchestrator.state.seed

    def snapshot(self):
        return snapshot(self.orchestrator.state, self.orchestrator.config.grid)

    def advance(self, ticks: int = 1):
        with self.lock:
            orch = self.orchestrator
            for _ in range(ticks):
                # A confirmation gate ends the batch; the client must confirm.
                if orch.state.done or (orch.state.phase.awaiting and not orch.confirm_pending):
                    break
                orch.tick()
            return self.snapshot()

    def confirm(self):
        with self.lock:
            self.orchestrator.confirm(require_await=True)
            self.orchestrator.tick()
            return self.snapshot()

    def claim_player(self) -> bool:
        """Mark the run as playing; False when a player already owns it."""
        with self.lock:
            if self.playing:
                return False
            self.playing = True
            return True

    def release_player(self):
        with self.lock:
            self.playing = False


_runs = {}
_runs_lock = threading.Lock()


def coerce_seed(payload_seed):
    """Convert provided seed (int or str) into bounded 64-bit signed int."""
    if payload_seed is None:
        return random.randint(1, 1_000_000)
    if isinstance(payload_seed, int):
        return payload_seed % SEED_MAX_INT
    s = str(payload_seed).strip()
    if not s:
        return random.randint(1, 1_000_000)
    if s.isdigit():
        return int(s) % SEED_MAX_INT
    h = hashlib.sha256(s.encode("utf-8")).digest()
    return int.from_bytes(h[:8], "big") % SEED_MAX_INT


def create_run(config: GenerationConfig, physics=None, triangulator=None) -> LayoutRun:
    run = LayoutRun(uuid.uuid4().hex[:12], Orchestrator(config, physics=physics, triangulator=triangulator))
    cap = current_app.config.get("LAYOUT_CACHE_MAX", 16)
    with _runs_lock:
        _runs[run.id] = run
        while len(_runs) > cap:
            oldest = next(iter(_runs))
            _runs.pop(oldest, None)
    log.info(event="layout_created", layout_id=run.id, seed=run.seed)
    return run


def get_run(run_id: str):
    with _runs_lock:
        return _runs.get(run_id)


def clear_runs():
    with _runs_lock:
        _runs.clear()


def _error(message: str, code: str, status: int, **extra):
    body = {"error": message, "code": code}
    body.update(extra)
    return jsonify(body), status


bp_layout = Blueprint("layout", __name__)


@bp_layout.route("/api/layouts", methods=["POST"])
def create_layout():
    """Create a generation run.

    Body JSON (all optional):
      { "seed": <int|str|null>, "room_threshold": <int>, "min_area": <number>,
        "interactive": <bool>, "incremental_selection": <bool>,
        "strict_triangulation": <bool>, "max_settle_ticks": <int> }

    Response (201): { "id", "seed", "state" }
    """
    ok, data = validate(request.get_json(silent=True) or {}, CREATE_LAYOUT)
    if not ok:
        return _error(f"invalid {data['field']}: {data['error']}", data["code"], 400, field=data["field"])
    data["seed"] = coerce_seed(data.get("seed"))
    if "min_area" in data:
        data["min_area"] = float(data["min_area"])
    config = GenerationConfig.from_env(**data)
    run = create_run(config)
    return jsonify({"id": run.id, "seed": run.seed, "state": run.snapshot()}), 201


@bp_layout.route("/api/layouts/<run_id>")
def layout_state(run_id):
    run = get_run(run_id)
    if run is None:
        return _error("unknown layout", "not_found", 404)
    return jsonify(run.snapshot())


@bp_layout.route("/api/layouts/<run_id>/tick", methods=["POST"])
def layout_tick(run_id):
    run = get_run(run_id)
    if run is None:
        return _error("unknown layout", "not_found", 404)
    ok, data = validate(request.get_json(silent=True) or {}, TICK)
    if not ok:
        return _error(f"invalid {data['field']}: {data['error']}", data["code"], 400, field=data["field"])
    try:
        return jsonify(run.advance(data.get("ticks", 1)))
    except SettleTimeoutError as exc:
        return _error(str(exc), "settle_timeout", 409, ticks=exc.ticks)
    except TriangulationError as exc:
        return _error(str(exc), "triangulation_failed", 409)


@bp_layout.route("/api/layouts/<run_id>/confirm", methods=["POST"])
def layout_confirm(run_id):
    run = get_run(run_id)
    if run is None:
        return _error("unknown layout", "not_found", 404)
    try:
        return jsonify(run.confirm())
    except PhaseError as exc:
        return _error(str(exc), "not_awaiting", 409)


@bp_layout.route("/api/layouts/<run_id>/run", methods=["POST"])
def layout_run(run_id):
    """Drive the run to completion, passing every confirmation gate."""
    run = get_run(run_id)
    if run is None:
        return _error("unknown layout", "not_found", 404)
    max_ticks = current_app.config.get("LAYOUT_RUN_MAX_TICKS")
    try:
        with run.lock:
            run.orchestrator.run(max_ticks=max_ticks)
    except SettleTimeoutError as exc:
        return _error(str(exc), "settle_timeout", 409, ticks=exc.ticks)
    except TriangulationError as exc:
        return _error(str(exc), "triangulation_failed", 409)
    snap = run.snapshot()
    if not snap["done"]:
        return _error(f"run stopped after {max_ticks} ticks without finishing", "max_ticks", 409,
                      ticks=snap["tick"], phase=snap["phase"])
    return jsonify(snap)


@bp_layout.route("/api/layouts/<run_id>/metrics")
def layout_metrics(run_id):
    run = get_run(run_id)
    if run is None:
        return _error("unknown layout", "not_found", 404)
    return jsonify({"id": run.id, "seed": run.seed, "metrics": dict(run.orchestrator.state.metrics)})
