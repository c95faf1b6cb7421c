"""
File access for the read/write handlers

Paths are built as `directory + "/" + filename` with no sanitisation, so
`..` segments and absolute filenames are honoured as given. When a file
root is configured the joined path is canonicalised and must stay inside
that root.
"""

import logging
from pathlib import Path
from typing import Optional

from napi.core.errors import FileAccessError, PathNotAllowed

logger = logging.getLogger(__name__)


def join_path(directory: str, filename: str) -> str:
    """Join directory and filename with a single separator"""
    return f"{directory}/{filename}"


def resolve_path(directory: str, filename: str, root: Optional[Path] = None) -> Path:
    """Build the target path, confining it to root when one is given.

    Raises:
        PathNotAllowed: root is set and the path resolves outside it
    """
    path = Path(join_path(directory, filename))
    if root is None:
        return path

    root = root.resolve()
    resolved = path.resolve()
    if resolved != root and root not in resolved.parents:
        logger.warning(f"Rejected path outside file root: {resolved} (root={root})")
        raise PathNotAllowed(f"Path {directory}/{filename} is outside the allowed root", str(resolved))
    return resolved


def write_file(directory: str, filename: str, content: str, root: Optional[Path] = None) -> Path:
    """Write content to directory/filename, replacing any existing file.

    Raises:
        PathNotAllowed: see resolve_path
        FileAccessError: the path is unusable (e.g. embedded NUL) or the write failed
    """
    target = join_path(directory, filename)
    try:
        path = resolve_path(directory, filename, root)
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(content)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to write {target!r}: {e}")
        raise FileAccessError(f"Error saving file {filename} at {directory}", target) from e

    logger.info(f"Wrote {len(content)} chars to {path}")
    return path


def read_file(directory: str, filename: str, root: Optional[Path] = None) -> str:
    """Read the whole of directory/filename as text.

    Bytes that are not valid UTF-8 come back as U+FFFD.

    Raises:
        PathNotAllowed: see resolve_path
        FileAccessError: unusable path, missing or unreadable file
    """
    target = join_path(directory, filename)
    try:
        path = resolve_path(directory, filename, root)
        with open(path, "r", encoding="utf-8", errors="replace", newline="") as f:
            return f.read()
    except (OSError, ValueError) as e:
        logger.error(f"Failed to read {target!r}: {e}")
        raise FileAccessError(f"Error reading file {filename} at {directory}", target) from e
