"""CLI entrypoints for appsvcgen commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError, load_config
from .converter import Converter
from .logging import configure_logging, get_logger


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
        prog="appsvcgen",
        description="Convert standalone Node.js functions into an Atlas App Services app.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    convert_parser = subparsers.add_parser(
        "convert",
        help="Generate function files and manifests from a folder of source files.",
    )
    _add_verbose_option(convert_parser, suppress_default=True)
    convert_parser.add_argument(
        "source_dir",
        nargs="?",
        default=None,
        help="Folder of source files (defaults to SRC_FOLDER_NAME or source_dir in .appsvcgen.yml).",
    )
    convert_parser.add_argument(
        "--app-dir",
        default=None,
        help="Output folder for the generated app (defaults to ./app).",
    )
    convert_parser.add_argument(
        "--template-dir",
        default=None,
        help="Template app project to copy into the output folder before converting.",
    )
    convert_parser.add_argument("--app-name", default=None, help="Value for __APP_NAME__ tokens.")
    convert_parser.add_argument(
        "--cluster-name", default=None, help="Value for __CLUSTER_NAME__ tokens."
    )
    convert_parser.add_argument(
        "--config",
        default=".",
        help="Path to .appsvcgen.yml or the folder containing it (defaults to current directory).",
    )
    convert_parser.add_argument(
        "--log-file",
        default=None,
        help="Also write log output to this file.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the conversion HTTP service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")
    serve_parser.add_argument(
        "--output-root",
        default=".",
        help="Folder that /convert may write app folders into (defaults to current directory).",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for appsvcgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = getattr(args, "log_file", None)
    configure_logging(
        verbose=bool(args.verbose),
        log_file=Path(log_file) if log_file else None,
    )

    if args.command == "convert":
        try:
            config = load_config(Path(args.config)).with_overrides(
                source_dir=_absolute(args.source_dir),
                app_dir=_absolute(args.app_dir),
                template_dir=_absolute(args.template_dir),
                app_name=args.app_name,
                cluster_name=args.cluster_name,
            )
            result = Converter().run(config)
        except (FileNotFoundError, NotADirectoryError, ConfigError) as exc:
            parser.exit(1, f"{exc}\n")
        except Exception as exc:
            get_logger("cli").debug("Conversion aborted", exc_info=True)
            parser.exit(
                1,
                f"appsvcgen convert failed: {exc}\n"
                "Generated files may be incomplete; re-running replaces the app folder.\n"
                "Run with --verbose for more details.\n",
            )
        rel_path = _relativize(result.app_dir)
        print(
            f"Converted {result.functions_emitted} functions and {result.endpoints_emitted} "
            f"HTTPS endpoints into App Services app project in folder: {rel_path}"
        )
    elif args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port, output_root=_absolute(args.output_root))
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _absolute(value: str | None) -> Path | None:
    return Path(value).expanduser().resolve() if value else None


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
