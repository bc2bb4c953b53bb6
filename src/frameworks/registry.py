from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

FrameworkId = Literal["neos-flow"]


@dataclass(frozen=True)
class FrameworkSpec:
    framework_id: FrameworkId
    label: str
    # Relative to app_root/composer_root; any directory entry counts as detected.
    marker: str
    settings_subdir: tuple[str, ...]
    settings_filename: str
    template_name: str
    default_docroot: str
    upload_dir: str
    web_environment: tuple[str, ...]

    @property
    def settings_extension(self) -> str:
        return self.settings_filename.rsplit(".", 1)[-1]


_DEFAULT_SPECS: dict[FrameworkId, FrameworkSpec] = {
    "neos-flow": FrameworkSpec(
        framework_id="neos-flow",
        label="Neos Flow",
        marker="flow",
        settings_subdir=("Configuration", "Development", "Ddev"),
        settings_filename="Settings.ddev.yaml",
        template_name="neos-flow/Settings.ddev.yaml",
        default_docroot="Web",
        upload_dir="../Data/Persistent",
        web_environment=(
            "FLOW_CONTEXT=Development/Ddev",
            "FLOW_PATH_TEMPORARY_BASE=/tmp/Flow",
            "FLOW_REWRITEURLS=1",
        ),
    ),
}


def parse_framework_id(raw: Any) -> FrameworkId | None:
    v = str(raw or "").strip().lower()
    # Accept the common spellings used in project configs.
    v = {"neosflow": "neos-flow", "neos_flow": "neos-flow", "flow": "neos-flow"}.get(v, v)
    if v in _DEFAULT_SPECS:
        return v  # type: ignore[return-value]
    return None


def framework_spec(framework_id: str | None) -> FrameworkSpec:
    fid = parse_framework_id(framework_id)
    if fid is None:
        raise KeyError(f"unknown framework: {framework_id!r}")
    return _DEFAULT_SPECS[fid]


def known_framework_ids() -> tuple[FrameworkId, ...]:
    return tuple(_DEFAULT_SPECS)
