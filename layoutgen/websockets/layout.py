"""Socket.IO layout handlers.

Events:
    - join_layout: Subscribe to a run's updates; payload { layout_id }
    - layout_tick: Advance a run; payload { layout_id, ticks? }
    - layout_confirm: Pass the current confirmation gate; payload { layout_id }
    - layout_play: Tick at a fixed rate until done or a gate; payload { layout_id, interval? }

Emits:
    - layout_state: Snapshot of the run, to every subscriber of the run
    - error: Validation / lookup failures, to the sender only
"""

from flask import current_app
from flask_socketio import emit, join_room

from layoutgen import socketio
from layoutgen.generation import LayoutError, PhaseError, SettleTimeoutError
from layoutgen.logging_utils import get_logger
from layoutgen.routes.layout_api import get_run
from layoutgen.validation import LAYOUT_PLAY, LAYOUT_REF, LAYOUT_TICK, validate

_log = get_logger("layoutgen.ws")


def _room(layout_id: str) -> str:
    return f"layout:{layout_id}"


def _failure(exc: LayoutError) -> dict:
    code = 'settle_timeout' if isinstance(exc, SettleTimeoutError) else 'triangulation_failed'
    return {'message': str(exc), 'field': 'layout_id', 'code': code}


def _resolve(data, schema, event):
    ok, result = validate(data or {}, schema)
    if not ok:
        emit('error', {'message': f"Invalid {event}: {result['error']}", 'field': result['field'], 'code': result['code']})
        return None, None
    run = get_run(result['layout_id'])
    if run is None:
        emit('error', {'message': 'unknown layout', 'field': 'layout_id', 'code': 'not_found'})
        return None, None
    join_room(_room(run.id))
    return run, result


@socketio.on('join_layout')
def handle_join_layout(data):
    run, _ = _resolve(data, LAYOUT_REF, 'join_layout')
    if run is None:
        return
    emit('layout_state', run.snapshot())
    _log.info(event="join_layout", layout_id=run.id)


@socketio.on('layout_tick')
def handle_layout_tick(data):
    run, result = _resolve(data, LAYOUT_TICK, 'layout_tick')
    if run is None:
        return
    try:
        snap = run.advance(result.get('ticks', 1))
    except LayoutError as exc:
        emit('error', _failure(exc))
        return
    emit('layout_state', snap, to=_room(run.id))


@socketio.on('layout_confirm')
def handle_layout_confirm(data):
    run, _ = _resolve(data, LAYOUT_REF, 'layout_confirm')
    if run is None:
        return
    try:
        snap = run.confirm()
    except PhaseError as exc:
        emit('error', {'message': str(exc), 'field': 'layout_id', 'code': 'not_awaiting'})
        return
    emit('layout_state', snap, to=_room(run.id))
    _log.info(event="layout_confirm", layout_id=run.id, phase=snap['phase'])


@socketio.on('layout_play')
def handle_layout_play(data):
    run, result = _resolve(data, LAYOUT_PLAY, 'layout_play')
    if run is None:
        return
    interval = result.get('interval', current_app.config.get('LAYOUT_PLAY_INTERVAL', 1.0 / 30.0))
    if not run.claim_player():
        emit('error', {'message': 'already playing', 'field': 'layout_id', 'code': 'busy'})
        return
    socketio.start_background_task(play_layout, run, interval)
    _log.info(event="layout_play", layout_id=run.id, interval=interval)


def play_layout(run, interval: float) -> None:
    """Tick ``run`` once per ``interval`` seconds, pushing a snapshot after each tick."""
    room = _room(run.id)
    try:
        while True:
            with run.lock:
                orch = run.orchestrator
                if orch.state.done or (orch.state.phase.awaiting and not orch.confirm_pending):
                    break
                try:
                    orch.tick()
                except LayoutError as exc:
                    socketio.emit('error', _failure(exc), to=room)
                    break
                snap = run.snapshot()
            socketio.emit('layout_state', snap, to=room)
            socketio.sleep(interval)
    finally:
        run.release_player()
