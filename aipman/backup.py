"""Snapshot the application directory to a gzip tarball, and restore it again."""

import shutil
import tarfile
import tempfile
from pathlib import Path

from .console import get_console
from .errors import BackupError


def create_backup(app_dir, archive_path, console=None) -> Path:
    """Create a backup of the application directory that can be restored from."""
    console = get_console(console)
    app_dir = Path(app_dir)
    archive_path = Path(archive_path)
    if not app_dir.is_dir():
        raise BackupError(f"Nothing to back up: {app_dir} does not exist")

    console.info(f"Backing up {app_dir} to {archive_path}...")
    try:
        archive_path.parent.mkdir(parents=True, exist_ok=True)
        with tarfile.open(archive_path, "w:gz") as tf:
            tf.add(app_dir, arcname=app_dir.name)
    except (OSError, tarfile.TarError) as e:
        raise BackupError(f"Failed to create backup {archive_path}: {e}")
    console.success(f"> Backup saved to {archive_path}")
    return archive_path


def restore_backup(app_dir, archive_path, confirm, console=None) -> bool:
    """Replace the application directory with the contents of a backup.

    The archive is unpacked next to the application directory first, so a broken archive leaves the current
    directory alone. Returns False when the user declines."""
    console = get_console(console)
    app_dir = Path(app_dir)
    archive_path = Path(archive_path)
    if not archive_path.is_file():
        raise BackupError(f"No backup found at {archive_path}")

    if not confirm(f"This will delete {app_dir} and replace it with {archive_path}. Continue?"):
        console.info("Restore cancelled.")
        return False

    app_dir.parent.mkdir(parents=True, exist_ok=True)
    scratch = Path(tempfile.mkdtemp(prefix=".aip-man-restore-", dir=app_dir.parent))
    try:
        try:
            with tarfile.open(archive_path, "r:gz") as tf:
                if hasattr(tarfile, "data_filter"):
                    tf.extractall(scratch, filter="data")
                else:
                    tf.extractall(scratch)
        except (OSError, tarfile.TarError, EOFError) as e:
            raise BackupError(f"Failed to unpack backup {archive_path}: {e}")

        entries = list(scratch.iterdir())
        if len(entries) != 1 or not entries[0].is_dir():
            raise BackupError(f"Backup {archive_path} does not contain a single application directory")

        try:
            if app_dir.exists():
                console.verbose(f"Deleting {app_dir}")
                shutil.rmtree(app_dir)
            shutil.move(str(entries[0]), str(app_dir))
        except OSError as e:
            raise BackupError(f"Failed to restore {app_dir}: {e}")
    finally:
        try:
            shutil.rmtree(scratch)
        except OSError as e:
            console.warn(f"Failed to remove temporary directory {scratch}: {e}")

    console.success(f"> Restored {app_dir} from {archive_path}")
    return True
