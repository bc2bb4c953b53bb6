from __future__ import annotations

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)


def _env_bool(name: str, *, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    v = raw.strip().lower()
    if v in ("1", "true", "yes", "on"):
        return True
    if v in ("0", "false", "no", "off"):
        return False
    return default


def _env_str(name: str) -> str:
    return str(os.environ.get(name) or "").strip()


def create_docroot_enabled() -> bool:
    return _env_bool("DEVENV_FLOW_CREATE_DOCROOT", default=False)


def strict_detection_enabled() -> bool:
    return _env_bool("DEVENV_FLOW_STRICT_DETECTION", default=False)


def db_port_override() -> int | None:
    raw = _env_str("DEVENV_DB_PORT")
    if not raw:
        return None
    try:
        port = int(raw)
    except ValueError:
        logger.warning("Invalid integer for DEVENV_DB_PORT=%r, ignoring", raw)
        return None
    if not 0 < port < 65536:
        logger.warning("DEVENV_DB_PORT=%d is out of range, ignoring", port)
        return None
    return port


def log_level() -> str:
    return (_env_str("DEVENV_LOG_LEVEL") or "INFO").upper()


@dataclass(frozen=True)
class AdapterPolicy:
    # Also create the default docroot directory when assigning it.
    create_docroot: bool = False
    # Follow symlinks when checking the framework marker.
    strict_detection: bool = False

    @classmethod
    def from_env(cls) -> "AdapterPolicy":
        return cls(
            create_docroot=create_docroot_enabled(),
            strict_detection=strict_detection_enabled(),
        )
