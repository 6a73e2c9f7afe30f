"""
project: layoutgen
module: server.py
License: MIT

Server bootstrap and headless generation helpers.

Exposes helpers to start the Socket.IO server and to run a layout from the
command line, optionally pausing on stdin at each confirmation gate.
"""

import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler

from layoutgen import app, socketio
from layoutgen.generation import GenerationConfig, Orchestrator, snapshot
from layoutgen.logging_utils import quiet


def start_server(host="0.0.0.0", port=5000, debug: bool = False):  # pragma: no cover (integration / runtime only)
    """Start the Socket.IO server with file + console logging configured."""
    with app.app_context():
        _configure_logging()
    try:
        print(f"[INFO] Starting Socket.IO server on {host}:{port} (async_mode={socketio.async_mode})")
        socketio.run(app, host=host, port=port, debug=debug)
    except KeyboardInterrupt:
        print("\n[INFO] Server stopped by user (Ctrl+C)")
        sys.exit(0)


def _configure_logging():
    """Configure logging to both console and a rotating file in instance/.

    The file path will be instance/layoutgen.log. Retains a few backups to avoid growth.
    """
    log_dir = app.instance_path
    try:
        os.makedirs(log_dir, exist_ok=True)
    except OSError:
        pass
    log_path = os.path.join(log_dir, "layoutgen.log")

    root = logging.getLogger()
    root.setLevel(logging.INFO)

    file_handler = RotatingFileHandler(log_path, maxBytes=1_000_000, backupCount=3)
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))

    console = logging.StreamHandler()
    console.setLevel(logging.INFO)
    console.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))

    # Avoid duplicate handlers if reconfigured
    for h in list(root.handlers):
        root.removeHandler(h)

    root.addHandler(file_handler)
    root.addHandler(console)


def _stdin_gate(stream):
    def wait(phase):
        # stderr keeps stdout free for the JSON snapshot
        print(f"[{phase.value}] press Enter to continue", file=sys.stderr, flush=True)
        stream.readline()
    return wait


def run_generation(config: GenerationConfig, out=None, as_json: bool = False, stdin=None,
                   physics=None, triangulator=None):
    """Run one layout to completion and return its final state.

    Interactive configs block on ``stdin`` (default sys.stdin) at every gate.
    With ``as_json`` the snapshot is written to ``out`` (a path, or stdout when
    None); event logs below error level are held back while stdout carries JSON.
    """
    orch = Orchestrator(config, physics=physics, triangulator=triangulator)
    on_await = _stdin_gate(stdin or sys.stdin) if config.interactive else None
    if as_json and not out:
        with quiet("error"):
            state = orch.run(on_await=on_await)
    else:
        state = orch.run(on_await=on_await)
    if as_json or out:
        payload = json.dumps(snapshot(state, orch.config.grid), indent=2)
        if out:
            with open(out, "w", encoding="utf-8") as f:
                f.write(payload)
        else:
            print(payload)
    return state
