"""Tests for artifact and manifest emission."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from appsvcgen.emitter import ArtifactEmitter, ManifestWriter
from appsvcgen.models import Handler, HandlerCategory, categorize


class _Outputs:
    def __init__(self, root: Path) -> None:
        self.functions_dir = root / "functions"
        self.functions = ManifestWriter(self.functions_dir / "config.json").open()
        self.endpoints = ManifestWriter(root / "http_endpoints" / "config.json").open()

    def emitter(self, **kwargs: object) -> ArtifactEmitter:
        return ArtifactEmitter(self.functions_dir, self.functions, self.endpoints, **kwargs)  # type: ignore[arg-type]

    def close(self) -> tuple[list[dict], list[dict]]:
        self.functions.close()
        self.endpoints.close()
        return (
            json.loads(self.functions.path.read_text(encoding="utf-8")),
            json.loads(self.endpoints.path.read_text(encoding="utf-8")),
        )


def _handler(name: str, *, is_async: bool = False, params: str = ") {") -> Handler:
    return Handler(name=name, is_async=is_async, param_signature=params, body_lines=("  return 1;", "};"))


def test_http_handler_gets_function_and_endpoint_entries(tmp_path: Path) -> None:
    outputs = _Outputs(tmp_path)

    outcome = outputs.emitter().emit(_handler("GET_Orders", params="request, response) {"))
    functions, endpoints = outputs.close()

    assert outcome.function_entry is True
    assert outcome.endpoint_entry is True
    assert functions == [
        {
            "name": "GET_Orders",
            "private": True,
            "run_as_system": True,
            "disable_arg_logs": True,
        }
    ]
    assert endpoints == [
        {
            "route": "/Orders",
            "http_method": "GET",
            "function_name": "GET_Orders",
            "validation_method": "SECRET_AS_QUERY_PARAM",
            "secret_name": "HTTPS_TMP_PWD_SECRET",
            "respond_result": True,
            "fetch_custom_user_data": False,
            "create_user_on_auth": False,
            "disabled": False,
            "return_type": "JSON",
        }
    ]


def test_private_handler_has_no_endpoint(tmp_path: Path) -> None:
    outputs = _Outputs(tmp_path)

    outcome = outputs.emitter().emit(_handler("PRIV_helper"))
    functions, endpoints = outputs.close()

    assert outcome.endpoint_entry is False
    assert [(entry["name"], entry["private"]) for entry in functions] == [("PRIV_helper", True)]
    assert endpoints == []


def test_public_handler_is_not_private(tmp_path: Path) -> None:
    outputs = _Outputs(tmp_path)

    outputs.emitter().emit(_handler("PUB_ping"))
    functions, _ = outputs.close()

    assert functions[0]["private"] is False


def test_untransferable_handler_produces_nothing(tmp_path: Path) -> None:
    outputs = _Outputs(tmp_path)

    outcome = outputs.emitter().emit(_handler("localHelper"))
    functions, endpoints = outputs.close()

    assert outcome.artifact is None
    assert functions == []
    assert endpoints == []
    assert not (outputs.functions_dir / "localHelper.js").exists()


def test_artifact_uses_export_declaration(tmp_path: Path) -> None:
    outputs = _Outputs(tmp_path)
    emitter = outputs.emitter()

    async_artifact = emitter.write_artifact(
        _handler("POST_Orders", is_async=True, params="request, response) {")
    )
    sync_artifact = emitter.write_artifact(_handler("PUB_ping"))

    assert async_artifact == outputs.functions_dir / "POST_Orders.js"
    assert async_artifact.read_text(encoding="utf-8") == (
        "exports = async function(request, response) {\n  return 1;\n};\n"
    )
    assert sync_artifact.read_text(encoding="utf-8") == "exports = function() {\n  return 1;\n};\n"


def test_custom_secret_name(tmp_path: Path) -> None:
    outputs = _Outputs(tmp_path)

    outputs.emitter(secret_name="OTHER_SECRET").emit(_handler("DELETE_Order"))
    _, endpoints = outputs.close()

    assert endpoints[0]["secret_name"] == "OTHER_SECRET"
    assert endpoints[0]["http_method"] == "DELETE"


def test_manifest_layout(tmp_path: Path) -> None:
    path = tmp_path / "config.json"

    with ManifestWriter(path) as writer:
        writer.append("  {}")
        writer.append("  {}")

    assert path.read_text(encoding="utf-8") == "[\n  {},\n  {}\n]"


def test_empty_manifest_is_valid_json(tmp_path: Path) -> None:
    path = tmp_path / "config.json"

    with ManifestWriter(path):
        pass

    assert json.loads(path.read_text(encoding="utf-8")) == []


def test_aborted_manifest_is_left_unterminated(tmp_path: Path) -> None:
    path = tmp_path / "config.json"

    with pytest.raises(OSError):
        with ManifestWriter(path) as writer:
            writer.append("  {}")
            raise OSError("disk full")

    assert path.read_text(encoding="utf-8") == "[\n  {}"


@pytest.mark.parametrize(
    ("name", "category"),
    [
        ("GET_Orders", HandlerCategory.HTTP),
        ("PATCH_user_profile", HandlerCategory.HTTP),
        ("PUB_ping", HandlerCategory.PUBLIC),
        ("PRIV_helper", HandlerCategory.PRIVATE),
        ("GET_", HandlerCategory.NONE),
        ("FETCH_Orders", HandlerCategory.NONE),
        ("helper", HandlerCategory.NONE),
    ],
)
def test_categorize(name: str, category: HandlerCategory) -> None:
    assert categorize(name) is category


def test_http_route_splits_on_first_underscore() -> None:
    assert _handler("PATCH_user_profile").http_route == ("PATCH", "user_profile")
    assert _handler("PRIV_helper").http_route is None
