"""CLI entrypoints for readyscan commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError, load_config
from .engine import ReadinessEngine
from .errors import LocatorInvalid, SourceUnavailable
from .logging import configure_logging
from .report import RENDERERS, render


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="readyscan",
        description="Audit a project's dependence on centralized infrastructure.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyze a GitHub repository or a local directory.",
    )
    _add_verbose_option(analyze_parser, suppress_default=True)
    analyze_parser.add_argument(
        "target",
        nargs="?",
        default=".",
        help="GitHub URL, owner/name[@branch], or local path (defaults to current directory).",
    )
    analyze_parser.add_argument(
        "--format",
        choices=sorted(RENDERERS),
        default="text",
        help="Report output format.",
    )
    analyze_parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to .readyscan.yml or the directory containing it.",
    )
    analyze_parser.add_argument(
        "--token",
        default=None,
        help="GitHub token for higher API rate limits (overrides config and environment).",
    )
    analyze_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the report to this file instead of stdout.",
    )
    analyze_parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write logs to this file.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service exposing the analyzer.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for readyscan commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose),
        log_file=getattr(args, "log_file", None),
    )

    if args.command == "analyze":
        try:
            config = load_config(args.config)
            if args.token:
                config.remote.token = args.token
            report = ReadinessEngine(config).analyze_target(args.target)
        except (LocatorInvalid, SourceUnavailable, ConfigError) as exc:
            parser.exit(1, f"{exc}\n")
        output = render(report, args.format)
        if args.output is not None:
            args.output.write_text(output, encoding="utf-8")
            print(f"Report written to {_relativize(args.output)}")
        else:
            sys.stdout.write(output)
    elif args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
