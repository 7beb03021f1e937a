"""Rewrites direct cross-handler calls into platform dispatch calls."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional, Sequence

from .models import TRANSFERABLE_PREFIXES
from .platform import AppServicesPlatform, Platform

_QUOTES = {"'", '"', "`"}


@dataclass(frozen=True)
class CallSite:
    """A call to a transferable handler located within one line."""

    start: int
    end: int
    handler_name: str
    args: str


def _call_pattern(prefix: str) -> re.Pattern[str]:
    return re.compile(rf"\b({re.escape(prefix)}\w+)\s*\(")


def _closing_paren(text: str, open_index: int) -> Optional[int]:
    depth = 0
    quote: Optional[str] = None
    index = open_index
    while index < len(text):
        char = text[index]
        if quote:
            if char == "\\":
                index += 2
                continue
            if char == quote:
                quote = None
        elif char in _QUOTES:
            quote = char
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return index
        index += 1
    return None


def find_call(line: str, prefix: str) -> Optional[CallSite]:
    """Return the first complete call on ``line`` to a handler named ``prefix...``."""
    for match in _call_pattern(prefix).finditer(line):
        if line[: match.start()].rstrip().endswith("function"):
            continue
        open_index = match.end() - 1
        close_index = _closing_paren(line, open_index)
        if close_index is None:
            continue
        return CallSite(
            start=match.start(),
            end=close_index + 1,
            handler_name=match.group(1),
            args=line[open_index + 1 : close_index],
        )
    return None


@dataclass
class InvocationRewriter:
    """Routes calls between handlers through the platform's name-based dispatch.

    Prefixes are tried in order and at most one call per line is rewritten.
    """

    platform: Platform = field(default_factory=AppServicesPlatform)
    prefixes: Sequence[str] = TRANSFERABLE_PREFIXES

    def rewrite_line(self, line: str) -> str:
        for prefix in self.prefixes:
            call = find_call(line, prefix)
            if call is None:
                continue
            dispatch = self.platform.dispatch(call.handler_name, call.args)
            return f"{line[: call.start]}{dispatch}{line[call.end :]}"
        return line

    def rewrite(self, lines: Iterable[str]) -> Iterator[str]:
        for line in lines:
            yield self.rewrite_line(line)
