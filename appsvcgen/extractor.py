"""Line-oriented scanner that recovers top-level handlers from source text."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional

from .logging import get_logger
from .models import Handler

_DECLARATION_PATTERN = re.compile(r"(?P<lead>.*)\bfunction\s+(?P<name>\w+)\((?P<params>.*)")
_ASYNC_PATTERN = re.compile(r"\basync\b")

TERMINATOR = "}"
END_OF_BLOCK = "};"

logger = get_logger("extractor")


@dataclass
class _OpenHandler:
    name: str
    is_async: bool
    param_signature: str
    body: List[str] = field(default_factory=list)

    def finalize(self) -> Handler:
        return Handler(
            name=self.name,
            is_async=self.is_async,
            param_signature=self.param_signature,
            body_lines=tuple(self.body) + (END_OF_BLOCK,),
        )


def match_declaration(line: str) -> Optional[_OpenHandler]:
    """Return a new open handler when ``line`` declares one."""
    match = _DECLARATION_PATTERN.match(line)
    if not match:
        return None
    return _OpenHandler(
        name=match.group("name"),
        is_async=bool(_ASYNC_PATTERN.search(match.group("lead"))),
        param_signature=match.group("params"),
    )


def is_terminator(line: str) -> bool:
    """Only an unindented closing brace ends a handler; nested blocks are indented."""
    return line.rstrip() == TERMINATOR


def iter_handlers(lines: Iterable[str]) -> Iterator[Handler]:
    """Yield completed handlers from ``lines`` in file order.

    Only one handler is open at a time. A declaration seen while a handler is
    open is kept as body text, and a handler still open when the input ends is
    dropped.
    """
    current: Optional[_OpenHandler] = None
    for raw in lines:
        line = raw.rstrip("\r\n")
        if current is None:
            current = match_declaration(line)
            continue
        if is_terminator(line):
            yield current.finalize()
            current = None
        else:
            current.body.append(line)

    if current is not None:
        logger.debug("Dropping unterminated handler %s", current.name)
