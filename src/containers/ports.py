from __future__ import annotations

import logging
import re
import subprocess
from dataclasses import dataclass, field
from typing import Protocol

from src.errors import PortResolutionError
from src.frameworks.config import db_port_override
from src.projects.descriptor import DatabaseType, ProjectDescriptor

logger = logging.getLogger(__name__)

_HOST_PORT_RE = re.compile(r":(\d+)\s*$")


class PortResolver(Protocol):
    def exposed_port(self, descriptor: ProjectDescriptor, service: str) -> int: ...


class CommandRunner(Protocol):
    def run(self, args: list[str], *, check: bool = True) -> subprocess.CompletedProcess[str]: ...


@dataclass
class SubprocessRunner:
    def run(self, args: list[str], *, check: bool = True) -> subprocess.CompletedProcess[str]:
        return subprocess.run(
            args,
            text=True,
            capture_output=True,
            check=check,
        )


def internal_db_port(database_type: DatabaseType) -> int:
    return 5432 if database_type.is_postgres else 3306


@dataclass(frozen=True)
class DefaultPortResolver:
    """Port the db service listens on inside the project network."""

    def exposed_port(self, descriptor: ProjectDescriptor, service: str) -> int:
        if service != "db":
            raise PortResolutionError(f"no default port known for service {service!r}")
        override = db_port_override()
        if override is not None:
            return override
        return internal_db_port(descriptor.database_type)


def container_name(descriptor: ProjectDescriptor, service: str) -> str:
    name = descriptor.name or "project"
    return f"ddev-{name}-{service}"


@dataclass
class DockerPortResolver:
    """Ask docker which host port is published for a service container."""

    runner: CommandRunner = field(default_factory=SubprocessRunner)
    docker_bin: str = "docker"

    def exposed_port(self, descriptor: ProjectDescriptor, service: str) -> int:
        if service != "db":
            raise PortResolutionError(f"no container port known for service {service!r}")
        cname = container_name(descriptor, service)
        internal = internal_db_port(descriptor.database_type)
        try:
            cp = self.runner.run(
                [self.docker_bin, "port", cname, str(internal)], check=False
            )
        except OSError as exc:
            raise PortResolutionError(f"failed to run {self.docker_bin}: {exc}") from exc
        if cp.returncode != 0:
            raise PortResolutionError(
                f"docker port {cname} {internal} failed: {(cp.stderr or '').strip()}"
            )
        for line in (cp.stdout or "").splitlines():
            m = _HOST_PORT_RE.search(line.strip())
            if m:
                return int(m.group(1))
        raise PortResolutionError(f"no published port for {cname}:{internal}")
