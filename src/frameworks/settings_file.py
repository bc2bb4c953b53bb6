from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from typing import Any

from src.errors import ProvisionIOError, ProvisionPermissionError, SignatureCheckError
from src.templates.bundle import DDEV_FILE_SIGNATURE, TemplateBundle

logger = logging.getLogger(__name__)


def file_has_signature(path: str, signature: str = DDEV_FILE_SIGNATURE) -> bool:
    try:
        with open(path, "rb") as f:
            return signature.encode("utf-8") in f.read()
    except OSError as exc:
        raise SignatureCheckError(
            f"failed to read {path} while checking for {signature}: {exc}", path=path
        ) from exc


def is_user_owned(path: str) -> bool:
    """True when a file exists at `path` and lacks the managed signature."""
    if not os.path.isfile(path):
        return False
    return not file_has_signature(path)


def ensure_writable_dir(path: str, mode: int = 0o755) -> None:
    try:
        os.chmod(path, mode)
        return
    except FileNotFoundError:
        pass
    except OSError as exc:
        raise ProvisionPermissionError(
            f"failed to chmod {path} to {mode:o}: {exc}", path=path
        ) from exc

    try:
        os.makedirs(path, mode=mode, exist_ok=True)
        # makedirs honours the umask, so set the leaf explicitly.
        os.chmod(path, mode)
    except OSError as exc:
        raise ProvisionPermissionError(
            f"failed to create directory {path}: {exc}", path=path
        ) from exc


def write_rendered(
    path: str,
    bundle: TemplateBundle,
    template_name: str,
    context: Mapping[str, Any],
) -> None:
    """Render `template_name` and truncate-write it to `path`."""
    ensure_writable_dir(os.path.dirname(path))
    try:
        payload = bundle.render(template_name, context)
    except KeyError as exc:
        raise ProvisionIOError(
            f"failed to render {template_name} for {path}: {exc}", path=path
        ) from exc
    try:
        with open(path, "wb") as f:
            f.write(payload)
    except OSError as exc:
        raise ProvisionIOError(f"failed to write {path}: {exc}", path=path) from exc


def ensure_gitignore(
    directory: str, entries: Iterable[str], bundle: TemplateBundle
) -> str | None:
    """Write a managed .gitignore listing `entries` into `directory`.

    A .gitignore without the signature belongs to the user and is left alone.
    """
    path = os.path.join(directory, ".gitignore")
    if is_user_owned(path):
        logger.debug("%s is managed by the user, not updating it", path)
        return None
    write_rendered(path, bundle, "gitignore", {"entries": list(entries)})
    return path
