"""Helper utilities for constructing temporary source folders in tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Mapping

from appsvcgen.config import AppSvcGenConfig


class SourceTreeBuilder:
    """Writes source files into a throwaway folder and builds a matching config."""

    def __init__(self, tmp_path: Path) -> None:
        self.base = tmp_path
        self.source_dir = tmp_path / "back-end"
        self.source_dir.mkdir()
        self.app_dir = tmp_path / "app"

    def write(self, files: Mapping[str, str]) -> None:
        """Write `name -> contents` entries into the source folder."""
        for relative, content in files.items():
            path = self.source_dir / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def config(self, **overrides: object) -> AppSvcGenConfig:
        """Return a config that converts this folder into ``app_dir``."""
        config = AppSvcGenConfig(root=self.base, source_dir=self.source_dir, app_dir=self.app_dir)
        for key, value in overrides.items():
            setattr(config, key, value)
        return config

    def functions(self) -> Path:
        return self.app_dir / "functions"

    def endpoints_manifest(self) -> Path:
        return self.app_dir / "http_endpoints" / "config.json"


__all__ = ["SourceTreeBuilder"]
