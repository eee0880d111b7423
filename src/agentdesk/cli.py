"""Command-line interface for browsing, matching and dispatching agents."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Optional, Sequence, Union

from common import Settings, configure_logging
from .agents.base import AgentDefinition, MatchResult
from .agents.errors import (
    BackendUnavailableError,
    DuplicateNameError,
    NotFoundError,
    ParseError,
)
from .agents.registry import AgentRegistry
from .bootstrap import build_registry
from .dispatcher import Dispatcher
from .matcher import Matcher
from .transcript import write_transcript


def create_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(description="agentdesk agent registry and dispatcher")
    parser.add_argument(
        "--env-file",
        action="append",
        default=None,
        help="Path to a .env file to read before executing commands. Can be provided multiple times.",
    )
    parser.add_argument("--agents-dir", help="Directory of agent definition documents")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List registered agents")
    list_parser.set_defaults(handler=_handle_list)

    show_parser = subparsers.add_parser("show", help="Show one agent's metadata and instructions")
    show_parser.add_argument("name", help="Agent name")
    show_parser.set_defaults(handler=_handle_show)

    match_parser = subparsers.add_parser("match", help="Rank agents against a task description")
    match_parser.add_argument("query", nargs="+", help="Free-text task description")
    match_parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum number of matches to print (default: AGENTDESK_MATCH_LIMIT)",
    )
    match_parser.set_defaults(handler=_handle_match)

    dispatch_parser = subparsers.add_parser("dispatch", help="Send a task to an agent's backend")
    dispatch_parser.add_argument("task", nargs="+", help="Task text for the agent")
    dispatch_parser.add_argument("--agent", help="Agent name (default: best match for the task)")
    dispatch_parser.add_argument(
        "--context-file",
        help="JSON file with an object of structured context passed to the backend",
    )
    dispatch_parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Overall time budget in seconds, retries included",
    )
    dispatch_parser.add_argument(
        "--transcript",
        nargs="?",
        const="",
        default=None,
        help="Write a JSON transcript; optionally give the output path",
    )
    dispatch_parser.set_defaults(handler=_handle_dispatch)

    validate_parser = subparsers.add_parser("validate", help="Parse the agents directory and report problems")
    validate_parser.set_defaults(handler=_handle_validate)

    return parser


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Entry point for handling CLI execution."""
    parser = create_parser()
    args = parser.parse_args(argv)

    configure_logging(logging.DEBUG if args.verbose else logging.INFO)
    try:
        settings = Settings.from_env(env_files=args.env_file)
    except ValueError as exc:
        print(f"Configuration error: {exc}")
        return 1
    if args.agents_dir:
        settings.agents_dir = Path(args.agents_dir)

    handler = getattr(args, "handler", None)
    if handler is None:
        parser.error("No handler configured for the provided command")
    return handler(args, settings)


def _load_registry(settings: Settings) -> Optional[AgentRegistry]:
    try:
        return build_registry(settings)
    except (ParseError, DuplicateNameError, FileNotFoundError) as exc:
        print(f"Load error: {exc}")
    return None


def _handle_list(args: argparse.Namespace, settings: Settings) -> int:
    registry = _load_registry(settings)
    if registry is None:
        return 1
    if not len(registry):
        print(f"No agents found in {settings.agents_dir}.")
        return 0
    for agent in registry.all():
        print(f"{agent.name} | {agent.model_hint or '-'} | {_truncate(agent.summary, 80)}")
    return 0


def _handle_show(args: argparse.Namespace, settings: Settings) -> int:
    registry = _load_registry(settings)
    if registry is None:
        return 1
    try:
        agent = registry.get(args.name)
    except NotFoundError as exc:
        print(exc)
        return 1

    print(f"Name: {agent.name}")
    print(f"Model: {agent.model_hint or '-'}")
    print(f"Color: {agent.color_hint or '-'}")
    if agent.source:
        print(f"Source: {agent.source}")
    for key, value in agent.metadata.items():
        print(f"{key.capitalize()}: {value}")
    print("-" * 40)
    print(agent.description)
    print("-" * 40)
    print(agent.instructions)
    return 0


def _handle_match(args: argparse.Namespace, settings: Settings) -> int:
    query = " ".join(args.query).strip()
    if not query:
        print("Query must not be empty.")
        return 2
    registry = _load_registry(settings)
    if registry is None:
        return 1

    limit = args.limit if args.limit is not None else settings.match_limit
    results = Matcher().match(query, registry, limit=limit)
    if not results:
        print("No matching agents.")
        return 0
    for result in results:
        print(f"{result.score:8.3f}  {result.name}")
    return 0


def _handle_dispatch(args: argparse.Namespace, settings: Settings) -> int:
    task = " ".join(args.task).strip()
    if not task:
        print("Task must not be empty.")
        return 2
    try:
        context = _read_context(args.context_file)
    except (OSError, ValueError) as exc:
        print(f"Context error: {exc}")
        return 2

    registry = _load_registry(settings)
    if registry is None:
        return 1

    target: Union[AgentDefinition, MatchResult]
    if args.agent:
        try:
            target = registry.get(args.agent)
        except NotFoundError as exc:
            print(exc)
            return 1
    else:
        matches = Matcher().match(task, registry, limit=1)
        if not matches:
            print("No matching agents; pass --agent to choose one explicitly.")
            return 1
        target = matches[0]
        print(f"Selected agent: {target.name} (score {target.score:.3f})")

    dispatcher = Dispatcher.from_settings(registry, settings)
    try:
        record = dispatcher.dispatch_record(target, task, context, timeout=args.timeout)
    except BackendUnavailableError as exc:
        print(f"Backend error: {exc}")
        return 1

    print(record.response)
    if args.transcript is not None:
        path = write_transcript([record], settings, output_path=args.transcript or None)
        print(f"Transcript written to {path}")
    return 0


def _handle_validate(args: argparse.Namespace, settings: Settings) -> int:
    registry = _load_registry(settings)
    if registry is None:
        return 1
    print(f"OK: {len(registry)} agents in {settings.agents_dir}")
    return 0


def _read_context(path: str | None) -> dict[str, Any]:
    if not path:
        return {}
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("context file must contain a JSON object")
    return data


def _truncate(text: str, width: int) -> str:
    return text if len(text) <= width else text[: width - 3] + "..."
