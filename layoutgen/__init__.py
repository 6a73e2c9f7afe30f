"""
project: layoutgen
module: __init__.py
License: MIT

Flask application factory and core extensions setup.

Wires together the Flask app and Flask-SocketIO that expose layout generation
runs to presentation clients. Configuration is sourced from environment
variables with reasonable defaults for development. A local `instance/`
directory holds runtime data such as the rotating log file.
"""

import logging
import os
import uuid

from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_socketio import SocketIO

__version__ = "0.1.0"

# Load .env if present so LAYOUT_* defaults can be supplied without exporting
# shell variables during development.
load_dotenv()

app = Flask(__name__, instance_relative_config=True)

try:
    os.makedirs(app.instance_path, exist_ok=True)
except OSError:
    # Read-only checkouts still work; only file logging needs the folder.
    pass

app.config.update(
    SECRET_KEY=os.getenv("SECRET_KEY", "dev-secret-change-me"),
    # Layout run cache / pacing
    LAYOUT_CACHE_MAX=int(os.getenv("LAYOUT_CACHE_MAX", "16")),
    LAYOUT_PLAY_INTERVAL=float(os.getenv("LAYOUT_PLAY_INTERVAL", str(1.0 / 30.0))),
    LAYOUT_RUN_MAX_TICKS=int(os.getenv("LAYOUT_RUN_MAX_TICKS", "100000")),
)

# Let Flask-SocketIO select best async_mode based on installed deps (eventlet/gevent/threading)
socketio = SocketIO(
    app,
    async_mode=os.getenv("SOCKETIO_ASYNC_MODE") or None,
    cors_allowed_origins=os.getenv("CORS_ALLOWED_ORIGINS", "*"),
    ping_interval=20,
    ping_timeout=10,
)

from layoutgen.routes.layout_api import bp_layout  # noqa: E402

app.register_blueprint(bp_layout)

# Import websocket handlers so their event decorators register with Socket.IO (side-effect)
from layoutgen.websockets import layout as _ws_layout  # noqa: F401,E402


def create_app():
    """Return the configured Flask app instance."""
    return app


@app.errorhandler(500)
def internal_error(e):
    error_id = uuid.uuid4().hex[:8]
    logging.exception("Unhandled exception (id=%s)", error_id)
    return jsonify({"error": "internal error", "code": "internal", "error_id": error_id}), 500
