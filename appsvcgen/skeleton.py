"""Builds the output app directory from a template project."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Optional

from .logging import get_logger

APP_NAME_TOKEN = "__APP_NAME__"
CLUSTER_NAME_TOKEN = "__CLUSTER_NAME__"

FUNCTIONS_DIRNAME = "functions"
ENDPOINTS_DIRNAME = "http_endpoints"
MANIFEST_FILENAME = "config.json"

_APP_CONFIG = Path("realm_config.json")
_CLUSTER_CONFIG = Path("data_sources") / "mongodb-atlas" / "config.json"

logger = get_logger("skeleton")


def create_skeleton(
    app_dir: Path,
    *,
    template_dir: Optional[Path] = None,
    app_name: Optional[str] = None,
    cluster_name: Optional[str] = None,
) -> Path:
    """Prepare an empty ``app_dir`` and return it.

    Any previous output is removed first so stale function files never outlive
    their manifest entries. With a template the directory becomes a fresh copy
    of it and the name tokens are substituted.
    """
    if template_dir is not None and not template_dir.is_dir():
        raise FileNotFoundError(f"Template directory not found: {template_dir}")

    if app_dir.exists():
        logger.info("Removing previous app output in %s", app_dir)
        shutil.rmtree(app_dir)

    if template_dir is not None:
        logger.info("Copying app template %s to %s", template_dir, app_dir)
        shutil.copytree(template_dir, app_dir)
        if app_name is not None:
            replace_tokens_in_file(app_dir / _APP_CONFIG, APP_NAME_TOKEN, app_name)
        if cluster_name is not None:
            replace_tokens_in_file(app_dir / _CLUSTER_CONFIG, CLUSTER_NAME_TOKEN, cluster_name)

    (app_dir / FUNCTIONS_DIRNAME).mkdir(parents=True, exist_ok=True)
    (app_dir / ENDPOINTS_DIRNAME).mkdir(parents=True, exist_ok=True)
    return app_dir


def replace_tokens_in_file(path: Path, token: str, replacement: str) -> bool:
    """Replace every occurrence of ``token`` in ``path``; return False when the file is absent."""
    if not path.is_file():
        logger.debug("Token file %s not present in template", path)
        return False
    content = path.read_text(encoding="utf-8")
    path.write_text(content.replace(token, replacement), encoding="utf-8")
    return True
