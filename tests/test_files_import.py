import io
import os
import tarfile
import zipfile
from pathlib import Path

import pytest

from src.errors import ExtractionError, PreconditionError
from src.files_import.archive import archive_kind, is_tar, is_zip, untar, unzip
from src.frameworks.neos_flow import neos_flow_import_files
from src.projects.descriptor import ProjectDescriptor, host_upload_dir_full_path


def _tree(root: Path) -> dict[str, bytes]:
    out: dict[str, bytes] = {}
    for p in sorted(root.rglob("*")):
        if p.is_file():
            out[p.relative_to(root).as_posix()] = p.read_bytes()
    return out


def _write_zip(path: Path, files: dict[str, bytes]) -> None:
    with zipfile.ZipFile(path, "w") as zf:
        for name, data in files.items():
            zf.writestr(name, data)


def _write_tgz(path: Path, files: dict[str, bytes]) -> None:
    with tarfile.open(path, "w:gz") as tf:
        for name, data in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o644
            tf.addfile(info, io.BytesIO(data))


def _project(tmp_path: Path) -> ProjectDescriptor:
    (tmp_path / "Data").mkdir()
    return ProjectDescriptor(app_root=str(tmp_path), docroot="Web")


def test_upload_dir_resolves_relative_to_docroot(tmp_path):
    d = ProjectDescriptor(app_root=str(tmp_path), docroot="Web")
    assert host_upload_dir_full_path(d, "../Data/Persistent") == str(
        tmp_path / "Data" / "Persistent"
    )


def test_import_zip_extracts_only_sub_path(tmp_path):
    d = _project(tmp_path)
    archive = tmp_path / "files.zip"
    _write_zip(
        archive,
        {
            "uploads/a.txt": b"a",
            "uploads/nested/b.txt": b"b",
            "other/c.txt": b"c",
        },
    )

    dest = neos_flow_import_files(d, "../Data/Persistent", str(archive), "uploads")

    assert dest == str(tmp_path / "Data" / "Persistent")
    assert _tree(Path(dest)) == {"a.txt": b"a", "nested/b.txt": b"b"}


def test_import_tar_replaces_existing_destination(tmp_path):
    d = _project(tmp_path)
    dest = tmp_path / "Data" / "Persistent"
    dest.mkdir()
    (dest / "stale.txt").write_bytes(b"old")
    archive = tmp_path / "files.tar.gz"
    _write_tgz(archive, {"./resources/x.jpg": b"jpg", "./resources/y/z.png": b"png"})

    neos_flow_import_files(d, "../Data/Persistent", str(archive))

    assert _tree(dest) == {"resources/x.jpg": b"jpg", "resources/y/z.png": b"png"}


def test_import_directory_copies_exact_contents(tmp_path):
    d = _project(tmp_path)
    src = tmp_path / "src-files"
    (src / "sub").mkdir(parents=True)
    (src / "one.txt").write_bytes(b"1")
    (src / "sub" / "two.txt").write_bytes(b"2")
    dest = tmp_path / "Data" / "Persistent"
    dest.mkdir()
    (dest / "leftover.txt").write_bytes(b"x")

    neos_flow_import_files(d, "../Data/Persistent", str(src))

    assert _tree(dest) == _tree(src)


def test_import_requires_existing_parent(tmp_path):
    d = ProjectDescriptor(app_root=str(tmp_path), docroot="Web")
    src = tmp_path / "src-files"
    src.mkdir()
    (src / "one.txt").write_bytes(b"1")
    before = _tree(tmp_path)

    with pytest.raises(PreconditionError) as ei:
        neos_flow_import_files(d, "../Data/Persistent", str(src))

    assert ei.value.path == str(tmp_path / "Data")
    assert not (tmp_path / "Data").exists()
    assert _tree(tmp_path) == before


def test_import_rejects_unknown_source(tmp_path):
    d = _project(tmp_path)
    junk = tmp_path / "notes.txt"
    junk.write_text("not an archive", encoding="utf-8")
    with pytest.raises(ExtractionError):
        neos_flow_import_files(d, "../Data/Persistent", str(junk))


def test_archive_kind_uses_content_not_extension(tmp_path):
    zipped = tmp_path / "really-a-zip.tar"
    _write_zip(zipped, {"a.txt": b"a"})
    tarred = tmp_path / "really-a-tar.zip"
    _write_tgz(tarred, {"a.txt": b"a"})

    assert archive_kind(str(zipped)) == "zip"
    assert archive_kind(str(tarred)) == "tar"
    assert archive_kind(str(tmp_path)) == "dir"
    assert is_tar(str(tmp_path / "missing")) is False
    assert is_zip(str(tmp_path)) is False


def test_untar_rejects_parent_traversal(tmp_path):
    archive = tmp_path / "evil.tar"
    with tarfile.open(archive, "w") as tf:
        info = tarfile.TarInfo("../escape.txt")
        info.size = 1
        tf.addfile(info, io.BytesIO(b"x"))

    with pytest.raises(ExtractionError):
        untar(str(archive), str(tmp_path / "out"))
    assert not (tmp_path / "escape.txt").exists()


def test_unzip_missing_sub_path_fails(tmp_path):
    archive = tmp_path / "files.zip"
    _write_zip(archive, {"a.txt": b"a"})
    with pytest.raises(ExtractionError):
        unzip(str(archive), str(tmp_path / "out"), "uploads")


def test_untar_skips_symlinks(tmp_path):
    archive = tmp_path / "links.tar"
    with tarfile.open(archive, "w") as tf:
        info = tarfile.TarInfo("a.txt")
        info.size = 1
        tf.addfile(info, io.BytesIO(b"a"))
        link = tarfile.TarInfo("link")
        link.type = tarfile.SYMTYPE
        link.linkname = "/etc/passwd"
        tf.addfile(link)

    out = tmp_path / "out"
    untar(str(archive), str(out))
    assert sorted(os.listdir(out)) == ["a.txt"]


def test_import_tar_keeps_hardlinked_files(tmp_path):
    d = _project(tmp_path)
    archive = tmp_path / "links.tar"
    with tarfile.open(archive, "w") as tf:
        info = tarfile.TarInfo("res/a.jpg")
        info.size = 3
        tf.addfile(info, io.BytesIO(b"jpg"))
        link = tarfile.TarInfo("res/b.jpg")
        link.type = tarfile.LNKTYPE
        link.linkname = "res/a.jpg"
        tf.addfile(link)

    dest = Path(neos_flow_import_files(d, "../Data/Persistent", str(archive)))

    assert _tree(dest) == {"res/a.jpg": b"jpg", "res/b.jpg": b"jpg"}


def test_untar_recreates_symlinks_inside_destination(tmp_path):
    archive = tmp_path / "links.tar"
    with tarfile.open(archive, "w") as tf:
        info = tarfile.TarInfo("res/a.jpg")
        info.size = 3
        tf.addfile(info, io.BytesIO(b"jpg"))
        link = tarfile.TarInfo("res/latest.jpg")
        link.type = tarfile.SYMTYPE
        link.linkname = "a.jpg"
        tf.addfile(link)

    out = tmp_path / "out"
    untar(str(archive), str(out))

    assert os.readlink(out / "res" / "latest.jpg") == "a.jpg"
    assert (out / "res" / "latest.jpg").read_bytes() == b"jpg"


def test_import_cleanup_failure_is_fatal(tmp_path, monkeypatch):
    from src.errors import CleanupError
    from src.files_import import importer

    def _fail_rmtree(path, *args, **kwargs):
        raise OSError("Device or resource busy")

    d = _project(tmp_path)
    dest = tmp_path / "Data" / "Persistent"
    dest.mkdir()
    (dest / "old.txt").write_bytes(b"old")
    src = tmp_path / "src-files"
    src.mkdir()
    monkeypatch.setattr(importer.shutil, "rmtree", _fail_rmtree)

    with pytest.raises(CleanupError) as ei:
        neos_flow_import_files(d, "../Data/Persistent", str(src))

    assert ei.value.path == str(dest)
