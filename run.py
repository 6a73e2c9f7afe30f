"""layoutgen CLI entry point.

Provides subcommands for generating a room layout headless (optionally pausing
for confirmation between phases) and for running the Socket.IO server that
streams runs to a viewer. Accepts configuration via flags and environment
variables, with optional .env loading.

Run `python run.py --help` for details.
"""

import argparse
import os
import signal
import sys
from dataclasses import replace
from textwrap import dedent

from colorama import Fore, Style
from colorama import init as _color_init
from dotenv import load_dotenv

_color_init()
# Disable colors if output is not a real terminal (e.g., during pytest capture)
_COLOR_ENABLED = sys.stdout.isatty()


def _load_version() -> str:
    try:
        with open("VERSION", "r", encoding="utf-8") as f:
            return f.read().strip()
    except OSError:
        return "0.1.0"


__version__ = _load_version()


def parse_args(argv: list[str]) -> argparse.Namespace:
    description = """
    layoutgen room layout generator

    Scatter rooms, separate them with a physics pass, keep the large ones and
    connect them with a minimum spanning corridor graph. Configuration can be
    provided via CLI flags or LAYOUT_* environment variables. If both are
    present, CLI flags take precedence.
    """

    epilog = dedent(
        """
        Environment variables:
          LAYOUT_SEED               Seed for the run (default: random)
          LAYOUT_ROOM_THRESHOLD     Scatter until more than this many rooms (default: 50)
          LAYOUT_MIN_AREA           Minimum area of a selected room (default: 3500)
          LAYOUT_MAX_SETTLE_TICKS   Settle ceiling in ticks, 0 disables (default: 36000)
          HOST / PORT               Bind address for the server (default: 0.0.0.0:5000)

        Examples:
          # Generate a layout and print a summary
          python run.py generate --seed 42

          # Pause for Enter between phases, write the final snapshot to a file
          python run.py generate --interactive --out layout.json

          # Run the Socket.IO server on a custom port
          python run.py server --port 8080
        """
    )

    parser = argparse.ArgumentParser(
        prog="layoutgen",
        description=dedent(description),
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )

    parser.add_argument(
        "--env-file",
        dest="env_file",
        help="Path to a .env file to load before processing flags",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"layoutgen {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command")

    gen_parser = subparsers.add_parser(
        "generate",
        help="Generate one layout headless",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Run the generation pipeline to completion and report the result",
    )
    gen_parser.add_argument("--seed", type=int, default=None, help="Seed (default: env LAYOUT_SEED or random)")
    gen_parser.add_argument("--rooms", dest="room_threshold", type=int, default=None,
                            help="Scatter until more than this many rooms exist")
    gen_parser.add_argument("--min-area", dest="min_area", type=float, default=None,
                            help="Rooms larger than this area are selected")
    gen_parser.add_argument("--max-settle-ticks", dest="max_settle_ticks", type=int, default=None,
                            help="Fail if rooms have not settled after this many ticks (0 = never)")
    gen_parser.add_argument("--interactive", action="store_true",
                            help="Wait for Enter on stdin between phases")
    gen_parser.add_argument("--strict", dest="strict_triangulation", action="store_true",
                            help="Abort when triangulation fails instead of continuing without corridors")
    gen_parser.add_argument("--json", dest="as_json", action="store_true", help="Print the final snapshot as JSON")
    gen_parser.add_argument("--out", default=None, help="Write the final snapshot JSON to this path")
    gen_parser.set_defaults(command="generate")

    server_parser = subparsers.add_parser(
        "server",
        help="Run the Socket.IO web server",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Run the Flask/Socket.IO server exposing the layout API",
    )
    server_parser.add_argument(
        "--host",
        default=None,
        help="Host interface to bind (default: env HOST or 0.0.0.0)",
    )
    server_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to listen on (default: env PORT or 5000)",
    )
    server_parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable Flask debug mode with verbose error pages",
    )
    server_parser.set_defaults(command="server")

    # If no subcommand provided, default to generate
    if len(argv) == 0:
        argv = ["generate"]

    return parser.parse_args(argv)


def _label(text: str) -> str:
    return f"{Fore.YELLOW}{text}{Style.RESET_ALL}" if _COLOR_ENABLED else text


def _value(val) -> str:
    return f"{Fore.GREEN}{val}{Style.RESET_ALL}" if _COLOR_ENABLED else str(val)


def _banner(title: str, rows) -> str:
    divider = (Fore.MAGENTA + "=" * 40 + Style.RESET_ALL) if _COLOR_ENABLED else "=" * 40
    head = f"{Fore.CYAN}{Style.BRIGHT}{title}{Style.RESET_ALL}" if _COLOR_ENABLED else title
    lines = [divider, f"  {head}", divider]
    lines += [f"  {_label(k + ':'):12} {_value(v)}" for k, v in rows]
    lines += [divider, ""]
    return "\n".join(lines)


def _generate(args) -> int:
    from layoutgen.generation import GenerationConfig, SettleTimeoutError, TriangulationError
    from layoutgen.server import run_generation

    config = GenerationConfig.from_env(
        seed=args.seed,
        room_threshold=args.room_threshold,
        min_area=args.min_area,
        interactive=True if args.interactive else None,
        strict_triangulation=True if args.strict_triangulation else None,
    )
    if args.max_settle_ticks is not None:
        config = replace(config, max_settle_ticks=args.max_settle_ticks if args.max_settle_ticks > 0 else None)
    config = config.with_seed()
    try:
        state = run_generation(config, out=args.out, as_json=args.as_json)
    except SettleTimeoutError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 2
    except TriangulationError as exc:
        print(f"[ERROR] triangulation failed: {exc}", file=sys.stderr)
        return 3
    if not args.as_json:
        print(_banner("Layout Generated", [
            ("Seed", state.seed),
            ("Ticks", state.tick),
            ("Rooms", len(state.rooms)),
            ("Selected", len(state.selected_rooms)),
            ("Triangles", state.triangulation.triangle_count),
            ("Corridors", len(state.spanning_tree)),
        ]))
    return 0


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    if getattr(args, "env_file", None):
        load_dotenv(args.env_file)
    else:
        # Load default .env if present (no error if missing)
        load_dotenv()

    mode = (getattr(args, "command", None) or "generate").lower()
    if mode == "generate":
        return _generate(args)

    host = getattr(args, "host", None) or os.getenv("HOST", "0.0.0.0")
    port = int(getattr(args, "port", None) or os.getenv("PORT", "5000"))
    debug = bool(getattr(args, "debug", False) or os.getenv("FLASK_DEBUG") == "1")

    def handle_sigint(sig, frame):
        print("\n[INFO] Shutting down server...")
        sys.exit(0)

    signal.signal(signal.SIGINT, handle_sigint)

    # Import server entrypoints only after environment is ready
    from layoutgen.logging_utils import log
    from layoutgen.server import start_server

    print(_banner("Layout Server Bootup", [
        ("Mode", mode.upper()),
        ("Host", host),
        ("Port", port),
        ("WebSockets", "enabled"),
    ]))
    log.info(event="startup", mode=mode, host=host, port=port, debug=debug)
    start_server(host=host, port=port, debug=debug)
    return 0


def _console_main() -> int:
    return main(sys.argv[1:])


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
