"""Neos Flow entry points used by the project lifecycle driver."""

from __future__ import annotations

from src.frameworks.adapter import FrameworkAdapter, adapter_for
from src.projects.descriptor import ProjectDescriptor

NEOS_FLOW = "neos-flow"


def neos_flow_adapter(**kwargs) -> FrameworkAdapter:
    return adapter_for(NEOS_FLOW, **kwargs)


def is_neos_flow_app(descriptor: ProjectDescriptor) -> bool:
    return neos_flow_adapter().detect(descriptor)


def set_neos_flow_settings_path(descriptor: ProjectDescriptor) -> ProjectDescriptor:
    return neos_flow_adapter().resolve_settings_path(descriptor)


def create_neos_flow_settings_file(descriptor: ProjectDescriptor) -> str:
    return neos_flow_adapter().provision(descriptor)


def neos_flow_config_override(descriptor: ProjectDescriptor) -> ProjectDescriptor:
    return neos_flow_adapter().normalize_docroot(descriptor)


def neos_flow_import_files(
    descriptor: ProjectDescriptor,
    upload_dir: str,
    import_path: str,
    extract_path: str = "",
) -> str:
    return neos_flow_adapter().import_files(
        descriptor, upload_dir, import_path, extract_path
    )
