"""CLI entrypoints for paramflow commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Mapping

from .config import ConfigError, ParamflowConfig, load_config
from .engine import EngineResult, HydrationResult, ParameterEngine
from .logging import configure_logging
from .models import EntitySnapshot
from .substitution import render_template, unresolved_parameters


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    kwargs["default"] = argparse.SUPPRESS if suppress_default else False
    parser.add_argument("-v", "--verbose", **kwargs)


def _add_entity_arguments(parser: argparse.ArgumentParser) -> None:
    _add_verbose_option(parser, suppress_default=True)
    parser.add_argument(
        "file",
        help="Entity JSON file (use '-' to read from stdin).",
    )
    parser.add_argument(
        "--config",
        default=".",
        help="Directory or file holding .paramflow.yml (defaults to current directory).",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print machine-readable JSON instead of text.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="paramflow",
        description="Detect ${name} placeholders in API test cases and track their configuration.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    detect_parser = subparsers.add_parser(
        "detect",
        help="List the parameters an entity requires and how many are configured.",
    )
    _add_entity_arguments(detect_parser)
    detect_parser.add_argument(
        "--configured",
        action="append",
        default=[],
        metavar="NAME",
        help="Treat NAME as configured (repeatable).",
    )

    hydrate_parser = subparsers.add_parser(
        "hydrate",
        help="Reconcile an entity's stored variables against its current templates.",
    )
    _add_entity_arguments(hydrate_parser)

    render_parser = subparsers.add_parser(
        "render",
        help="Substitute values into the entity URL.",
    )
    _add_entity_arguments(render_parser)
    render_parser.add_argument(
        "--set",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        dest="values",
        help="Value for one placeholder (repeatable).",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default=None, help="Bind address.")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port.")
    serve_parser.add_argument(
        "--config",
        default=".",
        help="Directory or file holding .paramflow.yml (defaults to current directory).",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for paramflow commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(Path(args.config))
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    configure_logging(
        verbose=bool(args.verbose) or config.logging.verbose,
        log_file=config.logging.file,
    )
    engine = ParameterEngine(config=config)

    if args.command == "serve":
        _serve(args, config)
        return

    try:
        payload = _read_entity(args.file)
    except (OSError, ValueError) as exc:
        parser.exit(1, f"Could not read entity from {args.file}: {exc}\n")
    snapshot = EntitySnapshot.from_payload(payload, template_fields=config.scan.template_fields)

    if args.command == "detect":
        result = engine.recompute(
            snapshot.url,
            snapshot.request,
            snapshot.templates,
            args.configured,
        )
        _emit(_result_payload(result), args.json, _format_result(result))
    elif args.command == "hydrate":
        hydrated = engine.hydrate(snapshot)
        _emit(_hydration_payload(hydrated), args.json, _format_hydration(hydrated))
    elif args.command == "render":
        try:
            values = _parse_assignments(args.values)
        except ValueError as exc:
            parser.exit(1, f"{exc}\n")
        rendered = render_template(snapshot.url, values)
        missing = unresolved_parameters(snapshot.url, values)
        text = rendered
        if missing:
            text += "\nUnresolved: " + ", ".join(missing)
        _emit({"rendered": rendered, "unresolved": missing}, args.json, text)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _serve(args: argparse.Namespace, config: ParamflowConfig) -> None:  # pragma: no cover
    from .service import run_service

    host = args.host or config.service.host
    port = args.port or config.service.port
    run_service(host=host, port=port, engine_factory=lambda: ParameterEngine(config=config))


def _read_entity(source: str) -> Mapping[str, Any]:
    text = sys.stdin.read() if source == "-" else Path(source).read_text(encoding="utf-8")
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("entity JSON must be an object")
    return data


def _parse_assignments(items: List[str]) -> Dict[str, str]:
    values: Dict[str, str] = {}
    for item in items:
        name, sep, value = item.partition("=")
        if not sep or not name:
            raise ValueError(f"Expected NAME=VALUE, got '{item}'")
        values[name] = value
    return values


def _result_payload(result: EngineResult) -> Dict[str, Any]:
    return {
        "parameters": list(result.parameters),
        "configured": list(result.configured),
        "pending": list(result.pending),
        "state": result.state.value,
        "completion": {
            "total": result.completion.total,
            "configured": result.completion.configured,
            "rate": result.completion.rate,
            "isComplete": result.completion.is_complete,
        },
    }


def _hydration_payload(result: HydrationResult) -> Dict[str, Any]:
    payload = _result_payload(result)
    payload["dropped"] = list(result.dropped)
    payload["variables"] = [{"name": v.name, "value": v.value} for v in result.variables]
    return payload


def _format_result(result: EngineResult) -> str:
    if not result.parameters:
        return "No parameters detected"
    lines = [f"Parameters ({result.completion.total}):"]
    configured = set(result.configured)
    for name in result.parameters:
        marker = "x" if name in configured else " "
        lines.append(f"  [{marker}] ${{{name}}}")
    lines.append(
        f"State: {result.state.value} "
        f"({result.completion.configured}/{result.completion.total}, {result.completion.rate}%)"
    )
    return "\n".join(lines)


def _format_hydration(result: HydrationResult) -> str:
    text = _format_result(result)
    if result.dropped:
        text += "\nDropped obsolete: " + ", ".join(result.dropped)
    return text


def _emit(payload: Dict[str, Any], as_json: bool, text: str) -> None:
    if as_json:
        print(json.dumps(payload, indent=2))
    else:
        print(text)


if __name__ == "__main__":  # pragma: no cover
    main()
