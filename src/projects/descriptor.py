from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


class DatabaseType(str, Enum):
    MYSQL = "mysql"
    MARIADB = "mariadb"
    POSTGRES = "postgres"

    @classmethod
    def parse(cls, raw: Any) -> "DatabaseType":
        v = str(raw or "").strip().lower()
        for member in cls:
            if member.value == v:
                return member
        # MariaDB is the managed default; anything unknown is treated as MySQL-compatible.
        return cls.MYSQL

    @property
    def is_postgres(self) -> bool:
        return self is DatabaseType.POSTGRES


@dataclass(frozen=True)
class ProjectDescriptor:
    app_root: str
    composer_root: str = ""
    site_settings_file: str = ""
    database_type: DatabaseType = DatabaseType.MARIADB
    docroot: str = ""
    upload_dirs: tuple[str, ...] = field(default_factory=tuple)
    web_environment: tuple[str, ...] = field(default_factory=tuple)
    app_type: str = ""
    name: str = ""

    def composer_path(self, *parts: str) -> str:
        return os.path.join(self.app_root, self.composer_root, *parts)


def host_upload_dir_full_path(descriptor: ProjectDescriptor, upload_dir: str) -> str:
    """Map a logical upload dir (relative to the docroot) to an absolute host path."""
    return os.path.normpath(
        os.path.join(descriptor.app_root, descriptor.docroot, upload_dir)
    )


def _str_tuple(raw: Any) -> tuple[str, ...]:
    if raw is None:
        return ()
    if isinstance(raw, str):
        return (raw,) if raw.strip() else ()
    return tuple(str(x) for x in raw if str(x).strip())


def descriptor_from_mapping(data: Mapping[str, Any]) -> ProjectDescriptor:
    app_root = str(data.get("app_root") or "").strip()
    if not app_root:
        raise ValueError("app_root is required")
    return ProjectDescriptor(
        app_root=os.path.abspath(app_root),
        composer_root=str(data.get("composer_root") or "").strip(),
        site_settings_file=str(data.get("site_settings_file") or "").strip(),
        database_type=DatabaseType.parse(data.get("database_type") or "mariadb"),
        docroot=str(data.get("docroot") or "").strip(),
        upload_dirs=_str_tuple(data.get("upload_dirs")),
        web_environment=_str_tuple(data.get("web_environment")),
        app_type=str(data.get("app_type") or "").strip(),
        name=str(data.get("name") or "").strip(),
    )
