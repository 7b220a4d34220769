"""File writes that never leave a half-written destination behind."""

from pathlib import Path


def write_atomic(path: Path, content: bytes | str) -> None:
    """Write content to a file atomically.

    Writes to a staging file in the same directory, then renames it over the
    target path. Readers see either the old content or the new content.

    Args:
        path: Destination file path.
        content: Content to write (bytes or string).

    Raises:
        OSError: If the write fails; the staging file is removed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    staging = path.with_name(f".{path.name}.tmp")

    mode = "wb" if isinstance(content, bytes) else "w"
    encoding = None if isinstance(content, bytes) else "utf-8"
    try:
        with staging.open(mode, encoding=encoding) as f:
            _ = f.write(content)
        _ = staging.replace(path)
    except OSError:
        staging.unlink(missing_ok=True)
        raise
