"""Tests for backing up and restoring the application directory."""

import tarfile

import pytest

from aipman.backup import create_backup, restore_backup
from aipman.errors import BackupError


@pytest.fixture
def populated_app_dir(app_dir):
    app_dir.mkdir()
    (app_dir / "foo-1.0.AppImage").write_text("foo")
    (app_dir / "aip_man_pkg_list.json").write_text("[]")
    return app_dir


def test_backup_contains_whole_directory(populated_app_dir, tmp_path, console):
    archive = create_backup(populated_app_dir, tmp_path / "backup.tar.gz", console=console)
    with tarfile.open(archive, "r:gz") as tf:
        names = sorted(tf.getnames())
    assert names == ["Applications", "Applications/aip_man_pkg_list.json", "Applications/foo-1.0.AppImage"]


def test_backup_without_app_dir(app_dir, tmp_path, console):
    with pytest.raises(BackupError):
        create_backup(app_dir, tmp_path / "backup.tar.gz", console=console)


def test_restore_replaces_directory(populated_app_dir, tmp_path, console):
    archive = create_backup(populated_app_dir, tmp_path / "backup.tar.gz", console=console)
    (populated_app_dir / "foo-1.0.AppImage").unlink()
    (populated_app_dir / "bar-2.0.AppImage").write_text("bar")

    assert restore_backup(populated_app_dir, archive, lambda question: True, console=console) is True
    assert sorted(p.name for p in populated_app_dir.iterdir()) == ["aip_man_pkg_list.json", "foo-1.0.AppImage"]
    # no scratch directories left behind
    assert sorted(p.name for p in tmp_path.iterdir()) == ["Applications", "backup.tar.gz"]


def test_restore_declined(populated_app_dir, tmp_path, console):
    archive = create_backup(populated_app_dir, tmp_path / "backup.tar.gz", console=console)
    (populated_app_dir / "bar-2.0.AppImage").write_text("bar")
    questions = []

    def decline(question):
        questions.append(question)
        return False

    assert restore_backup(populated_app_dir, archive, decline, console=console) is False
    assert len(questions) == 1
    assert (populated_app_dir / "bar-2.0.AppImage").exists()


def test_restore_missing_archive(app_dir, tmp_path, console):
    with pytest.raises(BackupError, match="No backup"):
        restore_backup(app_dir, tmp_path / "missing.tar.gz", lambda question: True, console=console)


def test_broken_archive_leaves_directory_alone(populated_app_dir, tmp_path, console):
    archive = tmp_path / "backup.tar.gz"
    archive.write_bytes(b"not a tarball")
    with pytest.raises(BackupError):
        restore_backup(populated_app_dir, archive, lambda question: True, console=console)
    assert (populated_app_dir / "foo-1.0.AppImage").read_text() == "foo"
