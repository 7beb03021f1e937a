"""Configuration loading for appsvcgen (.appsvcgen.yml, .env and environment)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml
from dotenv import dotenv_values

from .emitter import DEFAULT_SECRET_NAME

CONFIG_FILENAME = ".appsvcgen.yml"
DEFAULT_APP_DIR = "app"
DEFAULT_SOURCE_EXTENSIONS = (".js",)

ENV_APP_NAME = "APP_NAME"
ENV_CLUSTER_NAME = "DB_CLUSTER_NAME"
ENV_SOURCE_DIR = "SRC_FOLDER_NAME"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class AppSvcGenConfig:
    """Effective settings for a conversion run."""

    root: Path
    app_name: Optional[str] = None
    cluster_name: Optional[str] = None
    source_dir: Optional[Path] = None
    app_dir: Optional[Path] = None
    template_dir: Optional[Path] = None
    templates_dir: Optional[Path] = None
    source_extensions: List[str] = field(default_factory=lambda: list(DEFAULT_SOURCE_EXTENSIONS))
    endpoint_secret_name: str = DEFAULT_SECRET_NAME

    @property
    def resolved_app_dir(self) -> Path:
        return self.app_dir or (self.root / DEFAULT_APP_DIR)

    def with_overrides(self, **overrides: Any) -> "AppSvcGenConfig":
        """Return a copy with every non-None override applied."""
        values = {key: value for key, value in overrides.items() if value is not None}
        for key in ("source_dir", "app_dir", "template_dir", "templates_dir"):
            if key in values:
                values[key] = _resolve(self.root, str(values[key]))
        return replace(self, **values)


def load_config(
    config_path: Path,
    *,
    environ: Mapping[str, str] | None = None,
) -> AppSvcGenConfig:
    """Load configuration from disk, then layer ``.env`` and environment values on top."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    data: Dict[str, Any] = {}
    if config_file.exists():
        data = _read_config(config_file)

    config = AppSvcGenConfig(root=root)
    config.app_name = _as_str(data.get("app_name"))
    config.cluster_name = _as_str(data.get("cluster_name"))
    config.source_dir = _as_path(root, data.get("source_dir"))
    config.app_dir = _as_path(root, data.get("app_dir"))
    config.template_dir = _as_path(root, data.get("template_dir"))
    config.templates_dir = _as_path(root, data.get("templates_dir"))

    extensions = _as_str_list(data.get("source_extensions"))
    if extensions:
        config.source_extensions = [_normalise_extension(ext) for ext in extensions]

    secret_name = _as_str(data.get("endpoint_secret_name"))
    if secret_name:
        config.endpoint_secret_name = secret_name

    return _apply_environment(config, _environment(root, environ))


def _environment(root: Path, environ: Mapping[str, str] | None) -> Dict[str, str]:
    """Merge ``root/.env`` (the config file's folder) under the process environment."""
    merged: Dict[str, str] = {}
    env_file = root / ".env"
    if env_file.is_file():
        merged.update({key: value for key, value in dotenv_values(env_file).items() if value is not None})
    merged.update(os.environ if environ is None else environ)
    return merged


def _apply_environment(config: AppSvcGenConfig, env: Mapping[str, str]) -> AppSvcGenConfig:
    app_name = _non_blank(env.get(ENV_APP_NAME))
    cluster_name = _non_blank(env.get(ENV_CLUSTER_NAME))
    source_dir = _non_blank(env.get(ENV_SOURCE_DIR))
    if app_name:
        config.app_name = app_name
    if cluster_name:
        config.cluster_name = cluster_name
    if source_dir:
        config.source_dir = _resolve(config.root, source_dir)
    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return loaded


def _resolve(root: Path, value: str) -> Path:
    path = Path(value).expanduser()
    return path if path.is_absolute() else (root / path)


def _normalise_extension(value: str) -> str:
    value = value.strip().lower()
    return value if value.startswith(".") else f".{value}"


def _non_blank(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value.strip()


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_path(root: Path, value: Any) -> Optional[Path]:
    text = _as_str(value)
    return _resolve(root, text) if text else None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []
