"""Target platform capabilities used when rewriting handler source."""

from __future__ import annotations

from typing import Protocol


class Platform(Protocol):
    """What the deployment platform provides to converted handlers."""

    def dispatch(self, handler_name: str, args: str) -> str:
        """Return source text invoking ``handler_name`` by name with ``args``."""
        ...

    def translate_env_access(self, line: str) -> str:
        ...

    def export_declaration(self, is_async: bool, param_signature: str) -> str:
        ...


class AppServicesPlatform:
    """Atlas App Services: functions call each other through ``context.functions``."""

    LOCAL_ENV_ACCESSOR = "context_values_get"
    ENV_ACCESSOR = "context.values.get"
    DISPATCH_CALL = "context.functions.execute"

    def dispatch(self, handler_name: str, args: str) -> str:
        if args.strip():
            return f"{self.DISPATCH_CALL}('{handler_name}', {args})"
        return f"{self.DISPATCH_CALL}('{handler_name}')"

    def translate_env_access(self, line: str) -> str:
        return line.replace(self.LOCAL_ENV_ACCESSOR, self.ENV_ACCESSOR)

    def export_declaration(self, is_async: bool, param_signature: str) -> str:
        modifier = "async " if is_async else ""
        return f"exports = {modifier}function({param_signature}"


__all__ = ["AppServicesPlatform", "Platform"]
