"""Pipeline driver: converts a folder of source files into an App Services app."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator, Optional

from .config import AppSvcGenConfig, ConfigError
from .directives import DirectiveProcessor
from .emitter import ArtifactEmitter, ManifestWriter
from .extractor import iter_handlers
from .logging import get_logger
from .models import ConversionResult, Handler
from .platform import AppServicesPlatform, Platform
from .rewriter import InvocationRewriter
from .skeleton import (
    ENDPOINTS_DIRNAME,
    FUNCTIONS_DIRNAME,
    MANIFEST_FILENAME,
    create_skeleton,
)


def iter_source_files(source_dir: Path, extensions: Iterable[str]) -> Iterator[Path]:
    """Yield regular files in ``source_dir`` with a recognised extension, sorted by name."""
    suffixes = {ext.lower() for ext in extensions}
    for path in sorted(source_dir.iterdir(), key=lambda item: item.name):
        if path.is_symlink() or not path.is_file():
            continue
        if path.suffix.lower() in suffixes:
            yield path


class Converter:
    """Runs extraction, directive handling, call rewriting and emission per file."""

    def __init__(
        self,
        platform: Platform | None = None,
        directive_processor: DirectiveProcessor | None = None,
        rewriter: InvocationRewriter | None = None,
    ) -> None:
        self.platform = platform or AppServicesPlatform()
        self.directive_processor = directive_processor or DirectiveProcessor(platform=self.platform)
        self.rewriter = rewriter or InvocationRewriter(platform=self.platform)
        self.logger = get_logger("converter")

    def run(self, config: AppSvcGenConfig) -> ConversionResult:
        """Convert every source file named by ``config`` and return a run summary."""
        source_dir = self._resolve_source_dir(config.source_dir)
        app_dir = config.resolved_app_dir.expanduser().resolve()
        self.logger.info("Converting handlers in %s into %s", source_dir, app_dir)

        create_skeleton(
            app_dir,
            template_dir=config.template_dir,
            app_name=config.app_name,
            cluster_name=config.cluster_name,
        )
        functions_dir = app_dir / FUNCTIONS_DIRNAME
        result = ConversionResult(app_dir=app_dir)

        with ManifestWriter(functions_dir / MANIFEST_FILENAME) as functions_manifest, ManifestWriter(
            app_dir / ENDPOINTS_DIRNAME / MANIFEST_FILENAME
        ) as endpoints_manifest:
            emitter = ArtifactEmitter(
                functions_dir,
                functions_manifest,
                endpoints_manifest,
                templates_dir=config.templates_dir,
                secret_name=config.endpoint_secret_name,
                platform=self.platform,
            )
            for path in iter_source_files(source_dir, config.source_extensions):
                self.convert_file(path, emitter, result)

        self.logger.info(
            "Scanned %d files: %d handlers, %d functions, %d endpoints",
            result.files_scanned,
            result.handlers_found,
            result.functions_emitted,
            result.endpoints_emitted,
        )
        return result

    def convert_file(self, path: Path, emitter: ArtifactEmitter, result: ConversionResult) -> None:
        self.logger.debug("Scanning %s", path)
        result.files_scanned += 1
        with path.open("r", encoding="utf-8") as handle:
            for handler in iter_handlers(handle):
                result.handlers_found += 1
                if not handler.category.transferable:
                    self.logger.debug("Ignoring %s in %s", handler.name, path.name)
                    continue
                outcome = emitter.emit(self.transform(handler))
                if outcome.artifact is not None:
                    result.artifacts.append(outcome.artifact)
                if outcome.function_entry:
                    result.functions_emitted += 1
                if outcome.endpoint_entry:
                    result.endpoints_emitted += 1

    def transform(self, handler: Handler) -> Handler:
        """Apply directives, then rewrite cross-handler calls, in a single pass over the body."""
        effective = self.directive_processor.process(handler.body_lines)
        return handler.with_body(tuple(self.rewriter.rewrite(effective)))

    @staticmethod
    def _resolve_source_dir(source_dir: Optional[Path]) -> Path:
        if source_dir is None:
            raise ConfigError("No source directory configured; pass SOURCE_DIR or set SRC_FOLDER_NAME")
        resolved = source_dir.expanduser().resolve()
        if not resolved.exists():
            raise FileNotFoundError(f"Source directory not found: {source_dir}")
        if not resolved.is_dir():
            raise NotADirectoryError(f"Source path is not a directory: {source_dir}")
        return resolved
