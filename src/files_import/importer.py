from __future__ import annotations

import logging
import os
import shutil

from src.errors import CleanupError, PreconditionError, ProvisionPermissionError
from src.files_import.archive import archive_kind, copy_dir, untar, unzip
from src.projects.descriptor import ProjectDescriptor, host_upload_dir_full_path

logger = logging.getLogger(__name__)


def _remove_existing(dest: str) -> None:
    try:
        if os.path.isdir(dest) and not os.path.islink(dest):
            shutil.rmtree(dest)
        else:
            os.unlink(dest)
    except OSError as exc:
        raise CleanupError(f"failed to cleanup {dest} before import: {exc}", path=dest) from exc


def import_files_to(dest: str, source_path: str, extract_sub_path: str = "") -> str:
    """Replace `dest` with the contents of `source_path` (directory, tar or zip).

    The previous contents of `dest` are deleted without a backup. On failure
    `dest` may be missing or partially populated.
    """
    parent = os.path.dirname(dest)
    if not os.path.isdir(parent):
        raise PreconditionError(
            f"unable to import to {dest}: parent directory {parent} does not exist",
            path=parent,
        )

    try:
        os.chmod(parent, 0o755)
    except OSError as exc:
        raise ProvisionPermissionError(
            f"failed to make {parent} writable: {exc}", path=parent
        ) from exc

    if os.path.lexists(dest):
        logger.info("Removing existing %s before import", dest)
        _remove_existing(dest)

    kind = archive_kind(source_path)
    logger.info("Importing %s (%s) to %s", source_path, kind, dest)
    if kind == "tar":
        untar(source_path, dest, extract_sub_path)
    elif kind == "zip":
        unzip(source_path, dest, extract_sub_path)
    else:
        copy_dir(source_path, dest)
    return dest


def import_files(
    descriptor: ProjectDescriptor,
    upload_dir: str,
    source_path: str,
    extract_sub_path: str = "",
) -> str:
    dest = host_upload_dir_full_path(descriptor, upload_dir)
    return import_files_to(dest, source_path, extract_sub_path)
