"""Applies ``// ACTION: <TOKEN>`` editing directives embedded in handler bodies."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional

from .models import Directive
from .platform import AppServicesPlatform, Platform

_DIRECTIVE_PATTERN = re.compile(r".*ACTION:\s*(\S+)")

COMMENT_MARKER = "//"


def parse_directive_line(line: str) -> tuple[bool, Optional[Directive]]:
    """Return whether ``line`` is a directive line and the directive it names.

    Unknown tokens still mark a directive line but carry no directive.
    """
    match = _DIRECTIVE_PATTERN.match(line)
    if not match:
        return False, None
    return True, Directive.parse(match.group(1))


@dataclass
class DirectiveProcessor:
    """Two-state machine: either no directive is pending or exactly one is."""

    platform: Platform = field(default_factory=AppServicesPlatform)

    def process(self, lines: Iterable[str]) -> Iterator[str]:
        pending: Optional[Directive] = None
        for line in lines:
            is_directive, directive = parse_directive_line(line)
            if is_directive:
                # A second directive before any content line replaces the first.
                pending = directive
                continue
            if pending is None:
                yield self.platform.translate_env_access(line)
                continue
            applied = _apply(pending, line)
            pending = None
            if applied is not None:
                yield applied


def _apply(directive: Directive, line: str) -> Optional[str]:
    if directive is Directive.REMOVE:
        return None
    if directive is Directive.COMMENT:
        return f"  {COMMENT_MARKER}{line}"
    return line.replace(COMMENT_MARKER, "", 1)
