from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Protocol

# Written into every generated file; files without it are treated as user-owned.
DDEV_FILE_SIGNATURE = "#ddev-generated"


class TemplateBundle(Protocol):
    def render(self, name: str, context: Mapping[str, Any]) -> bytes: ...


def render_neos_flow_settings(context: Mapping[str, Any]) -> str:
    driver = str(context.get("DBDriver") or "mysqli")
    host = str(context.get("DBHostname") or "db")
    port = str(context.get("DBPort") or "")
    return (
        f"{DDEV_FILE_SIGNATURE}\n"
        "# This file is managed by the development environment and is regenerated\n"
        "# on every start. Remove the line above to take ownership of it.\n"
        "Neos:\n"
        "  Flow:\n"
        "    persistence:\n"
        "      backendOptions:\n"
        f"        driver: '{driver}'\n"
        f"        host: '{host}'\n"
        f"        port: '{port}'\n"
        "        dbname: 'db'\n"
        "        user: 'db'\n"
        "        password: 'db'\n"
    )


def render_gitignore(context: Mapping[str, Any]) -> str:
    entries = [str(e) for e in (context.get("entries") or ()) if str(e).strip()]
    return (
        f"{DDEV_FILE_SIGNATURE}: Automatically generated file.\n"
        "# Remove the line above to manage this file yourself.\n"
        + "".join(f"/{e}\n" for e in entries)
    )


_BUILTIN_TEMPLATES: dict[str, Callable[[Mapping[str, Any]], str]] = {
    "neos-flow/Settings.ddev.yaml": render_neos_flow_settings,
    "gitignore": render_gitignore,
}


class BuiltinTemplateBundle:
    """Templates shipped with the tool, rendered by plain Python functions."""

    def __init__(
        self, templates: Mapping[str, Callable[[Mapping[str, Any]], str]] | None = None
    ) -> None:
        self._templates = dict(templates if templates is not None else _BUILTIN_TEMPLATES)

    def names(self) -> tuple[str, ...]:
        return tuple(sorted(self._templates))

    def render(self, name: str, context: Mapping[str, Any]) -> bytes:
        fn = self._templates.get(name)
        if fn is None:
            raise KeyError(f"unknown template: {name!r}")
        return fn(context).encode("utf-8")


class InMemoryTemplateBundle:
    """`str.format` templates keyed by name; handy for substituting in tests."""

    def __init__(self, templates: Mapping[str, str]) -> None:
        self._templates = dict(templates)

    def render(self, name: str, context: Mapping[str, Any]) -> bytes:
        if name not in self._templates:
            raise KeyError(f"unknown template: {name!r}")
        return self._templates[name].format(**context).encode("utf-8")


def default_bundle() -> BuiltinTemplateBundle:
    return BuiltinTemplateBundle()
