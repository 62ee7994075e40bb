"""Command-line interface for the UI Assembly Engine.

WHY: Rule tables are easiest to audit by feeding them intents and
looking at what comes out. The CLI maps a single intent, replays a
whole conversation through a local engine, or starts the HTTP service.

HOW: argparse subcommands:
  map INTENT.json        - print the instruction the rules produce
  replay INTENTS.jsonl   - map + apply each intent in order, print a
                           snapshot after each turn (one JSON per line)
  serve                  - run the FastAPI app under uvicorn
Intent files are decoded and validated by the protocol codec. Async
work runs via asyncio.run().

RULES:
- JSON output goes to stdout; status and diagnostics go to stderr
- replay uses the immediate executor unless --executor says otherwise
- Invalid input exits with status 1 and a one-line error
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from ui_assembly.animation import EXECUTORS, create_executor
from ui_assembly.config import HOST, LOG_LEVEL, PORT
from ui_assembly.core.engine import AnimationFailedError, AssemblyEngine
from ui_assembly.core.registry import ComponentRegistry
from ui_assembly.mapping.catalog import DEFAULT_RULES, register_defaults
from ui_assembly.mapping.mapper import IntentMapper
from ui_assembly.protocol.codec import (
    ProtocolError,
    decode_intent,
    dumps,
    encode_instruction,
    encode_state,
)


def _status(msg: str) -> None:
    """Print a status message to stderr."""
    print(msg, file=sys.stderr, flush=True)


def _read_text(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    file_path = Path(path)
    if not file_path.is_file():
        _status("Error: file not found: {}".format(path))
        sys.exit(1)
    return file_path.read_text(encoding="utf-8")


def _build_mapper() -> IntentMapper:
    registry = register_defaults(ComponentRegistry())
    return IntentMapper(DEFAULT_RULES, registry=registry)


def _cmd_map(args: argparse.Namespace) -> None:
    try:
        intent = decode_intent(_read_text(args.intent_file))
    except ProtocolError as exc:
        _status("Error: {}".format(exc))
        sys.exit(1)

    instruction = _build_mapper().map_to_instruction(intent)
    print(dumps(encode_instruction(instruction), indent=args.indent))


async def _replay(args: argparse.Namespace) -> None:
    lines = [line for line in _read_text(args.intents_file).splitlines() if line.strip()]

    mapper = _build_mapper()
    engine = AssemblyEngine(
        registry=register_defaults(ComponentRegistry()),
        executor=create_executor(args.executor),
    )

    for line_no, line in enumerate(lines, start=1):
        try:
            intent = decode_intent(line)
        except ProtocolError as exc:
            _status("Error on line {}: {}".format(line_no, exc))
            sys.exit(1)

        instruction = mapper.map_to_instruction(intent)
        _status("Turn {}: {} ({:.2f}) -> {} components, layout {}".format(
            line_no, intent.type, intent.confidence,
            len(instruction.components or []), instruction.layout,
        ))
        if args.reset:
            await engine.clear()
        try:
            state = await engine.assemble(instruction)
        except AnimationFailedError as exc:
            _status("Error on line {}: {}".format(line_no, exc))
            sys.exit(1)

        print(dumps(encode_state(state)), flush=True)

    for diagnostic in engine.diagnostics:
        _status("  [{}] {}".format(diagnostic.kind, diagnostic.message))


def _cmd_serve(args: argparse.Namespace) -> None:
    from ui_assembly.server.app import run_api
    run_api(host=args.host, port=args.port)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="ui_assembly",
        description="Map conversational intents to UI assembly instructions "
                    "and apply them to a live component set.",
    )
    parser.add_argument(
        "--log-level",
        default=LOG_LEVEL,
        help="Logging level (default: %(default)s).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    map_parser = subparsers.add_parser("map", help="Map one intent to an instruction.")
    map_parser.add_argument("intent_file", help="Path to an intent JSON file ('-' for stdin).")
    map_parser.add_argument(
        "--indent", type=int, default=2, help="JSON indent (default: %(default)s).",
    )
    map_parser.set_defaults(handler=_cmd_map)

    replay_parser = subparsers.add_parser(
        "replay", help="Replay a conversation of intents through a local engine.",
    )
    replay_parser.add_argument(
        "intents_file", help="Path to a JSON Lines file, one intent per line ('-' for stdin).",
    )
    replay_parser.add_argument(
        "--executor",
        default="immediate",
        choices=sorted(EXECUTORS),
        help="Animation executor (default: %(default)s).",
    )
    replay_parser.add_argument(
        "--reset",
        action="store_true",
        help="Clear the surface before each turn instead of accumulating components.",
    )
    replay_parser.set_defaults(handler=lambda args: asyncio.run(_replay(args)))

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP/WebSocket service.")
    serve_parser.add_argument("--host", default=HOST, help="Bind host (default: %(default)s).")
    serve_parser.add_argument("--port", type=int, default=PORT, help="Bind port (default: %(default)s).")
    serve_parser.set_defaults(handler=_cmd_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    args.handler(args)


if __name__ == "__main__":
    main()
