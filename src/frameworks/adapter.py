from __future__ import annotations

import dataclasses
import logging
import os
from collections.abc import Callable
from dataclasses import dataclass

from src.containers.ports import DefaultPortResolver, PortResolver
from src.errors import ProvisionPermissionError
from src.files_import.importer import import_files
from src.frameworks.config import AdapterPolicy
from src.frameworks.registry import FrameworkSpec, framework_spec
from src.frameworks.settings_file import (
    ensure_gitignore,
    file_has_signature,
    write_rendered,
)
from src.projects.descriptor import ProjectDescriptor
from src.templates.bundle import TemplateBundle, default_bundle

logger = logging.getLogger(__name__)

WarningSink = Callable[[str], None]


@dataclass(frozen=True)
class ProvisionResult:
    descriptor: ProjectDescriptor
    settings_file: str


def _append_missing(existing: tuple[str, ...], extra: tuple[str, ...]) -> tuple[str, ...]:
    out = list(existing)
    for item in extra:
        if item not in out:
            out.append(item)
    return tuple(out)


class FrameworkAdapter:
    """Per-framework settings provisioning and files import.

    Behaviour is driven by a FrameworkSpec row, so supporting another
    framework means adding a row rather than another adapter.
    """

    def __init__(
        self,
        spec: FrameworkSpec,
        *,
        bundle: TemplateBundle | None = None,
        port_resolver: PortResolver | None = None,
        warn: WarningSink | None = None,
        policy: AdapterPolicy | None = None,
    ) -> None:
        self.spec = spec
        self.bundle = bundle or default_bundle()
        self.port_resolver = port_resolver or DefaultPortResolver()
        self.warn: WarningSink = warn or logger.warning
        self.policy = policy or AdapterPolicy.from_env()

    @property
    def framework_id(self) -> str:
        return self.spec.framework_id

    def marker_path(self, descriptor: ProjectDescriptor) -> str:
        return descriptor.composer_path(self.spec.marker)

    def detect(self, descriptor: ProjectDescriptor) -> bool:
        marker = self.marker_path(descriptor)
        try:
            if self.policy.strict_detection:
                return os.path.exists(marker)
            # A dangling symlink still counts as the framework being laid out.
            return os.path.lexists(marker)
        except (OSError, ValueError):
            return False

    def resolve_settings_path(self, descriptor: ProjectDescriptor) -> ProjectDescriptor:
        if self.detect(descriptor):
            path = descriptor.composer_path(
                *self.spec.settings_subdir, self.spec.settings_filename
            )
        else:
            # Until the framework is installed, point at the composer root so
            # generated ignore entries don't land in the wrong place.
            path = descriptor.composer_path(self.spec.settings_filename)
        return dataclasses.replace(descriptor, site_settings_file=path)

    def db_driver(self, descriptor: ProjectDescriptor) -> str:
        return "pdo_pgsql" if descriptor.database_type.is_postgres else "mysqli"

    def settings_context(self, descriptor: ProjectDescriptor) -> dict[str, object]:
        return {
            "DBHostname": "db",
            "DBDriver": self.db_driver(descriptor),
            "DBPort": self.port_resolver.exposed_port(descriptor, "db"),
        }

    def provision(self, descriptor: ProjectDescriptor) -> str:
        path = descriptor.site_settings_file
        if os.path.dirname(path) == descriptor.app_root:
            # Settings folder not known yet.
            return path

        if not self.detect(descriptor):
            self.warn(
                f"{self.spec.label} does not seem to have been set up yet, "
                f"missing {self.spec.marker}"
            )

        name = os.path.basename(path)
        if os.path.lexists(path) and not file_has_signature(path):
            self.warn(f"{name} already exists and is managed by the user.")
            return path

        context = self.settings_context(descriptor)
        logger.info("Generating %s file for database connection.", name)
        write_rendered(path, self.bundle, self.spec.template_name, context)
        settings_dir = os.path.dirname(path)
        # The transitional path must not leave ignore entries behind.
        if settings_dir == descriptor.composer_path(*self.spec.settings_subdir):
            ensure_gitignore(settings_dir, [name], self.bundle)
        return path

    def normalize_docroot(self, descriptor: ProjectDescriptor) -> ProjectDescriptor:
        docroot = descriptor.docroot
        if not docroot:
            docroot = self.spec.default_docroot
            if self.policy.create_docroot:
                target = descriptor.composer_path(docroot)
                try:
                    os.makedirs(target, mode=0o755, exist_ok=True)
                except OSError as exc:
                    raise ProvisionPermissionError(
                        f"failed to create docroot {target}: {exc}", path=target
                    ) from exc

        return dataclasses.replace(
            descriptor,
            docroot=docroot,
            upload_dirs=_append_missing(descriptor.upload_dirs, (self.spec.upload_dir,)),
            web_environment=_append_missing(
                descriptor.web_environment, self.spec.web_environment
            ),
            app_type=descriptor.app_type or self.spec.framework_id,
        )

    def import_files(
        self,
        descriptor: ProjectDescriptor,
        upload_dir: str,
        source_path: str,
        extract_sub_path: str = "",
    ) -> str:
        return import_files(descriptor, upload_dir, source_path, extract_sub_path)

    def configure(self, descriptor: ProjectDescriptor) -> ProvisionResult:
        descriptor = self.resolve_settings_path(descriptor)
        descriptor = self.normalize_docroot(descriptor)
        settings_file = self.provision(descriptor)
        return ProvisionResult(descriptor=descriptor, settings_file=settings_file)


def adapter_for(framework_id: str, **kwargs) -> FrameworkAdapter:
    return FrameworkAdapter(framework_spec(framework_id), **kwargs)

