"""Directory creation and destructive reset helpers.

These functions own every recursive create and delete stratum performs on
spool and storage directories.
"""

import os
import shutil
from pathlib import Path

from stratum.utils import CommandRunner, run_command

# Two hex digits per bucket: 00 .. ff
BUCKET_COUNT: int = 256

SELINUX_CONTENT_TYPE = "httpd_sys_content_t"


def bucket_names() -> list[str]:
    """Return the names of the content-addressed storage buckets."""
    return [f"{index:02x}" for index in range(BUCKET_COUNT)]


def ensure_directory(path: Path, *, owner: str | None = None) -> Path:
    """Create ``path`` with parents if missing and optionally chown it.

    Args:
        path: Directory to create.
        owner: User name to own the directory, or None to keep the default.

    Returns:
        The directory path.
    """
    path.mkdir(parents=True, exist_ok=True)
    if owner is not None:
        shutil.chown(path, user=owner)
    return path


def chown_tree(root: Path, owner: str) -> None:
    """Recursively hand a directory tree to ``owner``."""
    shutil.chown(root, user=owner)
    for dirpath, dirnames, filenames in os.walk(root):
        for name in (*dirnames, *filenames):
            shutil.chown(Path(dirpath) / name, user=owner)


def selinux_enabled(runner: CommandRunner = run_command) -> bool:
    """Return True if the host enforces or audits SELinux labels."""
    result = runner(["selinuxenabled"])
    return result.ok


def apply_content_label(
    directory: Path,
    *,
    runner: CommandRunner = run_command,
) -> bool:
    """Label ``directory`` so the web server may serve it.

    Only acts on hosts with SELinux enabled.

    Returns:
        True if the label was applied.
    """
    if not selinux_enabled(runner):
        return False
    result = runner(["chcon", "-R", f"--type={SELINUX_CONTENT_TYPE}", str(directory)])
    return result.ok


def create_skeleton(
    directory: Path,
    owner: str | None = None,
    *,
    runner: CommandRunner = run_command,
) -> None:
    """Create the content-addressed storage skeleton.

    Layout::

        <directory>/data/00 .. data/ff
        <directory>/data/txn

    Existing content is kept, so the call is safe to repeat.

    Args:
        directory: Storage root.
        owner: User to own the tree, or None to leave ownership unchanged.
        runner: Command runner used for the SELinux label.
    """
    data = directory / "data"
    for bucket in bucket_names():
        (data / bucket).mkdir(parents=True, exist_ok=True)
    (data / "txn").mkdir(exist_ok=True)

    if owner is not None:
        chown_tree(directory, owner)

    _ = apply_content_label(directory, runner=runner)


def clear_directory(directory: Path) -> None:
    """Remove everything below ``directory`` but keep the directory itself."""
    if not directory.is_dir():
        directory.mkdir(parents=True, exist_ok=True)
        return
    for entry in directory.iterdir():
        if entry.is_dir() and not entry.is_symlink():
            shutil.rmtree(entry)
        else:
            entry.unlink()


def clear_and_recreate(directory: Path, owner: str | None = None) -> None:
    """Destroy ``directory`` and recreate it empty.

    Readers may see the directory missing while this runs; there is no
    atomic swap.

    Args:
        directory: Directory to reset.
        owner: User to own the new directory, or None.
    """
    if directory.exists():
        shutil.rmtree(directory)
    _ = ensure_directory(directory, owner=owner)


def remove_tree(directory: Path) -> bool:
    """Delete ``directory`` recursively if it exists.

    Returns:
        True if something was removed.
    """
    if not directory.exists():
        return False
    shutil.rmtree(directory)
    return True
