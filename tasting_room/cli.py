"""
Tasting Room CLI - Command-line interface for the engine.

Usage:
    tasting-room serve [--host HOST] [--port PORT]   Run the HTTP API
    tasting-room inspect <snapshot_file>             Summarize a saved snapshot
"""

import argparse
import logging
import os
import sys


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Tasting Room - Blind wine tasting party game engine",
        prog="tasting-room",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("TASTING_LOG_LEVEL", "INFO"),
        help="Logging level (default: $TASTING_LOG_LEVEL or INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Bind port")

    # Inspect command
    inspect_parser = subparsers.add_parser("inspect", help="Summarize a saved snapshot")
    inspect_parser.add_argument("snapshot_file", help="Path to snapshot JSON")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        cmd_serve(args)
    elif args.command == "inspect":
        cmd_inspect(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_serve(args):
    """Run the API under uvicorn."""
    import uvicorn

    uvicorn.run("tasting_room.api.app:app", host=args.host, port=args.port)


def cmd_inspect(args):
    """Print phase, round and players of a snapshot."""
    from .engine_core import GamePhase, ValidationError, loads_state

    try:
        with open(args.snapshot_file, "r", encoding="utf-8") as f:
            text = f.read()
    except FileNotFoundError:
        print(f"Error: File not found: {args.snapshot_file}")
        sys.exit(1)

    try:
        state = loads_state(text)
    except ValidationError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print(f"Phase: {state.phase.value}")
    if state.phase == GamePhase.TASTING and state.current_bottle is not None:
        print(f"Round: {state.current_round + 1} of {state.num_rounds}")
    if state.is_discussion_phase:
        print("Discussion open")

    if state.players:
        print("\nPlayers:")
        for player in state.players:
            print(f"  - {player.name}: {len(player.guesses)} guesses, score {player.score}")

    if state.bottles:
        print("\nBottles:")
        for bottle in state.bottles:
            print(
                f"  {bottle.bottle_id}. {bottle.varietal} - {bottle.producer} "
                f"{bottle.year} ({bottle.country})"
            )


if __name__ == "__main__":
    main()
