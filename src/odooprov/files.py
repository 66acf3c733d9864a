"""Small filesystem helpers shared by actions, providers and templates."""
from __future__ import annotations

import hashlib
import os
import shutil
import tempfile
from pathlib import Path


def sha256_text(content: str) -> str:
    """Return the hex sha256 digest of *content* encoded as UTF-8."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def sha256_file(path: Path) -> str:
    """Return the hex sha256 digest of the file at *path*."""
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()


def write_text_atomic(path: Path, content: str, *, mode: int = 0o644) -> bool:
    """Atomically write *content* to *path*.

    Returns ``True`` when the file changed (content or mode), ``False`` when it
    already matched.
    """
    if path.exists():
        current_mode = path.stat().st_mode & 0o777
        if current_mode == mode and path.read_text(encoding="utf-8") == content:
            return False

    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.")
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(tmp_fd, "w", encoding="utf-8") as handle:
            handle.write(content)
        os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
    finally:
        tmp_path.unlink(missing_ok=True)
    return True


def chown(path: Path, owner: str | None, group: str | None) -> None:
    """Change ownership of *path* when an owner or group is given."""
    if owner is None and group is None:
        return
    shutil.chown(path, user=owner, group=group)


__all__ = ["chown", "sha256_file", "sha256_text", "write_text_atomic"]
