from __future__ import annotations

import logging
import os
import posixpath
import shutil
import tarfile
import zipfile

from src.errors import ExtractionError

logger = logging.getLogger(__name__)


def is_tar(path: str) -> bool:
    if not os.path.isfile(path):
        return False
    try:
        return tarfile.is_tarfile(path)
    except OSError:
        return False


def is_zip(path: str) -> bool:
    if not os.path.isfile(path):
        return False
    return zipfile.is_zipfile(path)


def _normalize_sub_path(sub_path: str) -> str:
    s = (sub_path or "").strip().replace("\\", "/").strip("/")
    while s.startswith("./"):
        s = s[2:]
    return "" if s == "." else s


def _relative_member_path(name: str, *, prefix: str) -> str | None:
    """Return the member path relative to `prefix`, or None when outside it.

    Raises on absolute names and parent traversal.
    """
    raw = name.replace("\\", "/")
    if raw.startswith("/"):
        raise ExtractionError(f"archive contains absolute path: {name}")
    parts = [p for p in raw.split("/") if p not in ("", ".")]
    if ".." in parts:
        raise ExtractionError(f"archive contains parent traversal: {name}")
    norm = "/".join(parts)
    if not prefix:
        return norm
    if norm == prefix:
        return ""
    if norm.startswith(prefix + "/"):
        return norm[len(prefix) + 1 :]
    return None


def _link_stays_inside(rel: str, linkname: str) -> bool:
    link = linkname.replace("\\", "/")
    if not link or link.startswith("/"):
        return False
    resolved = posixpath.normpath(posixpath.join(posixpath.dirname(rel), link))
    return resolved != ".." and not resolved.startswith("../")


def untar(src: str, dest: str, sub_path: str = "") -> None:
    """Extract `sub_path` of the tar archive at `src` as the root of `dest`."""
    prefix = _normalize_sub_path(sub_path)
    matched = False
    try:
        with tarfile.open(src, mode="r:*") as tf:
            os.makedirs(dest, exist_ok=True)
            for m in tf.getmembers():
                rel = _relative_member_path(m.name, prefix=prefix)
                if rel is None:
                    continue
                matched = True
                if not rel:
                    continue
                target = os.path.join(dest, *rel.split("/"))
                if m.isdir():
                    os.makedirs(target, exist_ok=True)
                    continue
                os.makedirs(os.path.dirname(target), exist_ok=True)
                if m.issym():
                    if _link_stays_inside(rel, m.linkname):
                        if os.path.lexists(target):
                            os.unlink(target)
                        os.symlink(m.linkname, target)
                    else:
                        logger.warning(
                            "Skipping tar symlink %s -> %s pointing outside %s",
                            m.name,
                            m.linkname,
                            dest,
                        )
                    continue
                if not (m.isfile() or m.islnk()):
                    logger.warning("Skipping unsupported tar member %s", m.name)
                    continue
                # Hardlinks resolve to the linked member's data.
                fobj = tf.extractfile(m)
                if fobj is None:
                    continue
                with fobj, open(target, "wb") as out:
                    shutil.copyfileobj(fobj, out)
                os.chmod(target, m.mode & 0o777 or 0o644)
    except (tarfile.TarError, OSError) as exc:
        raise ExtractionError(
            f"failed to extract {src} to {dest}: {exc}", path=src
        ) from exc
    if prefix and not matched:
        raise ExtractionError(f"{sub_path} not found in archive {src}", path=src)


def unzip(src: str, dest: str, sub_path: str = "") -> None:
    """Extract `sub_path` of the zip archive at `src` as the root of `dest`."""
    prefix = _normalize_sub_path(sub_path)
    matched = False
    try:
        with zipfile.ZipFile(src) as zf:
            os.makedirs(dest, exist_ok=True)
            for info in zf.infolist():
                rel = _relative_member_path(info.filename, prefix=prefix)
                if rel is None:
                    continue
                matched = True
                if not rel:
                    continue
                target = os.path.join(dest, *rel.split("/"))
                if info.is_dir():
                    os.makedirs(target, exist_ok=True)
                    continue
                os.makedirs(os.path.dirname(target), exist_ok=True)
                with zf.open(info) as fobj, open(target, "wb") as out:
                    shutil.copyfileobj(fobj, out)
                mode = (info.external_attr >> 16) & 0o777
                if mode:
                    os.chmod(target, mode)
    except (zipfile.BadZipFile, OSError) as exc:
        raise ExtractionError(
            f"failed to extract {src} to {dest}: {exc}", path=src
        ) from exc
    if prefix and not matched:
        raise ExtractionError(f"{sub_path} not found in archive {src}", path=src)


def copy_dir(src: str, dest: str) -> None:
    if not os.path.isdir(src):
        raise ExtractionError(
            f"{src} is neither a directory nor a supported archive", path=src
        )
    try:
        shutil.copytree(src, dest, symlinks=True)
    except (shutil.Error, OSError) as exc:
        raise ExtractionError(f"failed to copy {src} to {dest}: {exc}", path=src) from exc


def archive_kind(path: str) -> str:
    if is_tar(path):
        return "tar"
    if is_zip(path):
        return "zip"
    return "dir"
