"""Tests for the line-oriented handler extractor."""

from __future__ import annotations

import textwrap
from typing import Iterator, List

from appsvcgen.extractor import END_OF_BLOCK, iter_handlers
from appsvcgen.models import HandlerCategory


def _lines(source: str) -> List[str]:
    return textwrap.dedent(source).lstrip("\n").splitlines(keepends=True)


def test_extracts_handlers_in_file_order() -> None:
    source = """
    require("dotenv").config();

    async function GET_status(request, response) {
      if (request) {
        return {ok: true};
      }
      return {};
    }

    function PUB_ping() {
      return "pong";
    }

    function helper(a) {
      return a;
    }
    """

    handlers = list(iter_handlers(_lines(source)))

    assert [handler.name for handler in handlers] == ["GET_status", "PUB_ping", "helper"]
    status, ping, helper = handlers
    assert status.is_async is True
    assert status.param_signature == "request, response) {"
    assert status.body_lines == (
        "  if (request) {",
        "    return {ok: true};",
        "  }",
        "  return {};",
        END_OF_BLOCK,
    )
    assert ping.is_async is False
    assert ping.param_signature == ") {"
    assert ping.body_lines == ('  return "pong";', END_OF_BLOCK)
    assert helper.category is HandlerCategory.NONE


def test_unterminated_handler_is_dropped() -> None:
    source = """
    function PRIV_done() {
      return 1;
    }

    function PRIV_open() {
      return 2;
    """

    handlers = list(iter_handlers(_lines(source)))

    assert [handler.name for handler in handlers] == ["PRIV_done"]


def test_second_declaration_inside_handler_is_body_text() -> None:
    source = """
    function PRIV_outer() {
      function PRIV_inner(x) {
        return x;
      }
      return PRIV_inner(1);
    }
    """

    handlers = list(iter_handlers(_lines(source)))

    assert len(handlers) == 1
    assert handlers[0].name == "PRIV_outer"
    assert "  function PRIV_inner(x) {" in handlers[0].body_lines


def test_declaration_detected_regardless_of_leading_text() -> None:
    lines = [
        "  const handler = async function PRIV_indented(a, b) {\n",
        "  return a + b;\n",
        "}\n",
    ]

    (handler,) = list(iter_handlers(lines))

    assert handler.name == "PRIV_indented"
    assert handler.is_async is True
    assert handler.param_signature == "a, b) {"


def test_strips_crlf_line_endings() -> None:
    lines = ["function PUB_win() {\r\n", "  return 1;\r\n", "}\r\n"]

    (handler,) = list(iter_handlers(lines))

    assert handler.param_signature == ") {"
    assert handler.body_lines == ("  return 1;", END_OF_BLOCK)


def test_extraction_is_lazy() -> None:
    consumed: List[str] = []

    def feed() -> Iterator[str]:
        for line in _lines(
            """
            function PUB_first() {
            }
            function PUB_second() {
            }
            """
        ):
            consumed.append(line)
            yield line

    handlers = iter_handlers(feed())
    first = next(handlers)

    assert first.name == "PUB_first"
    assert len(consumed) == 2


def test_only_a_bare_closing_brace_ends_a_handler() -> None:
    source = """
    function GET_status() {
      return 1;
    };
    } // end
    function PRIV_after() {
      return 2;
    }
    """

    handlers = list(iter_handlers(_lines(source)))

    assert [handler.name for handler in handlers] == ["GET_status"]
    assert handlers[0].body_lines == (
        "  return 1;",
        "};",
        "} // end",
        "function PRIV_after() {",
        "  return 2;",
        END_OF_BLOCK,
    )
