"""Writes per-handler function sources and their manifest entries."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from types import TracebackType
from typing import IO, Optional, Set, Type

from jinja2 import Environment, FileSystemLoader

from .logging import get_logger
from .models import Handler
from .platform import AppServicesPlatform, Platform

DEFAULT_SECRET_NAME = "HTTPS_TMP_PWD_SECRET"
ARTIFACT_SUFFIX = ".js"

logger = get_logger("emitter")


class ManifestWriter:
    """Append-only writer for a JSON array document.

    The closing bracket is only written when the run completes, so an aborted
    run leaves the document unterminated on disk.
    """

    OPEN = "["
    CLOSE = "\n]"

    def __init__(self, path: Path) -> None:
        self.path = path
        self.count = 0
        self._handle: Optional[IO[str]] = None

    def open(self) -> "ManifestWriter":
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._handle = self.path.open("w", encoding="utf-8")
        self._write(self.OPEN)
        return self

    def append(self, entry: str) -> None:
        if self.count:
            self._write(",")
        self._write("\n")
        self._write(entry)
        self.count += 1

    def close(self, *, complete: bool = True) -> None:
        if self._handle is None:
            return
        try:
            if complete:
                self._write(self.CLOSE)
        finally:
            self._handle.close()
            self._handle = None

    def _write(self, text: str) -> None:
        if self._handle is None:
            raise RuntimeError(f"Manifest {self.path} is not open")
        self._handle.write(text)
        self._handle.flush()

    def __enter__(self) -> "ManifestWriter":
        return self.open()

    def __exit__(
        self,
        exc_type: Type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close(complete=exc_type is None)


@dataclass
class EmitOutcome:
    """What a single ``ArtifactEmitter.emit`` call produced."""

    artifact: Optional[Path] = None
    function_entry: bool = False
    endpoint_entry: bool = False


class ArtifactEmitter:
    """Renders handlers into function files plus registry and endpoint entries."""

    def __init__(
        self,
        functions_dir: Path,
        functions_manifest: ManifestWriter,
        endpoints_manifest: ManifestWriter,
        *,
        templates_dir: Path | None = None,
        secret_name: str = DEFAULT_SECRET_NAME,
        platform: Platform | None = None,
    ) -> None:
        self.functions_dir = functions_dir
        self.functions_manifest = functions_manifest
        self.endpoints_manifest = endpoints_manifest
        self.secret_name = secret_name
        self.platform = platform or AppServicesPlatform()
        self._env = _create_env(templates_dir)
        self._written: Set[str] = set()

    def emit(self, handler: Handler) -> EmitOutcome:
        """Write the artifact and manifest entries for one transformed handler."""
        outcome = EmitOutcome()
        if not handler.category.transferable:
            logger.debug("Skipping %s: no transferable prefix", handler.name)
            return outcome

        outcome.artifact = self.write_artifact(handler)

        self.functions_manifest.append(
            self._render(
                "function_config.json.j2",
                name=handler.name,
                private=handler.is_private,
            )
        )
        outcome.function_entry = True

        route = handler.http_route
        if route is not None:
            verb, resource = route
            self.endpoints_manifest.append(
                self._render(
                    "endpoint_config.json.j2",
                    route=f"/{resource}",
                    http_method=verb,
                    function_name=handler.name,
                    secret_name=self.secret_name,
                )
            )
            outcome.endpoint_entry = True
            logger.debug("Registered endpoint %s /%s -> %s", verb, resource, handler.name)

        return outcome

    def write_artifact(self, handler: Handler) -> Path:
        declaration = self.platform.export_declaration(handler.is_async, handler.param_signature)
        target = self.functions_dir / f"{handler.name}{ARTIFACT_SUFFIX}"
        if handler.name in self._written:
            logger.warning("Handler %s emitted more than once; overwriting %s", handler.name, target)
        content = self._render("function.js.j2", declaration=declaration, body=handler.body_lines)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        self._written.add(handler.name)
        return target

    def _render(self, template_name: str, **context: object) -> str:
        return self._env.get_template(template_name).render(**context)


def _create_env(templates_dir: Path | None) -> Environment:
    directories = []
    if templates_dir:
        directories.append(str(templates_dir))
    directories.append(str(Path(__file__).with_name("templates")))
    loader = FileSystemLoader(directories)
    return Environment(loader=loader, autoescape=False, trim_blocks=True, lstrip_blocks=True)


__all__ = ["ArtifactEmitter", "DEFAULT_SECRET_NAME", "EmitOutcome", "ManifestWriter"]
