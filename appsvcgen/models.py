"""Core data models shared across appsvcgen components."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

HTTP_VERBS: Tuple[str, ...] = ("GET", "POST", "PUT", "DELETE", "PATCH")

# Order matters: the invocation rewriter tries prefixes in this sequence.
TRANSFERABLE_PREFIXES: Tuple[str, ...] = tuple(f"{verb}_" for verb in HTTP_VERBS) + (
    "PUB_",
    "PRIV_",
)

_PREFIX_PATTERN = re.compile(r"^([^\s_]+_)\S+")


class HandlerCategory(str, Enum):
    """Behaviour class derived from a handler's name prefix."""

    HTTP = "http"
    PUBLIC = "public"
    PRIVATE = "private"
    NONE = "none"

    @property
    def transferable(self) -> bool:
        return self is not HandlerCategory.NONE


class Directive(str, Enum):
    """One-shot editing instruction applied to the next body line."""

    COMMENT = "COMMENT"
    UNCOMMENT = "UNCOMMENT"
    REMOVE = "REMOVE"

    @classmethod
    def parse(cls, token: str) -> Optional["Directive"]:
        try:
            return cls(token.strip())
        except ValueError:
            return None


def name_prefix(name: str) -> Optional[str]:
    """Return the text up to and including the first underscore, if followed by more text."""
    match = _PREFIX_PATTERN.match(name)
    return match.group(1) if match else None


def categorize(name: str) -> HandlerCategory:
    prefix = name_prefix(name)
    if prefix is None or prefix not in TRANSFERABLE_PREFIXES:
        return HandlerCategory.NONE
    if prefix == "PUB_":
        return HandlerCategory.PUBLIC
    if prefix == "PRIV_":
        return HandlerCategory.PRIVATE
    return HandlerCategory.HTTP


@dataclass(frozen=True)
class Handler:
    """A named block recovered from a source file."""

    name: str
    is_async: bool
    param_signature: str
    body_lines: Tuple[str, ...] = ()

    @property
    def category(self) -> HandlerCategory:
        return categorize(self.name)

    @property
    def is_private(self) -> bool:
        return self.category is not HandlerCategory.PUBLIC

    @property
    def http_route(self) -> Optional[Tuple[str, str]]:
        """Return ``(verb, resource)`` when the name follows ``<VERB>_<Resource>``."""
        if self.category is not HandlerCategory.HTTP:
            return None
        verb, _, resource = self.name.partition("_")
        if verb not in HTTP_VERBS or not resource:
            return None
        return verb, resource

    def with_body(self, body_lines: Tuple[str, ...]) -> "Handler":
        return Handler(
            name=self.name,
            is_async=self.is_async,
            param_signature=self.param_signature,
            body_lines=tuple(body_lines),
        )


@dataclass
class ConversionResult:
    """Summary of a conversion run."""

    app_dir: Path
    files_scanned: int = 0
    handlers_found: int = 0
    functions_emitted: int = 0
    endpoints_emitted: int = 0
    artifacts: List[Path] = field(default_factory=list)
