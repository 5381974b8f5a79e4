"""Detection of hidden files."""

from __future__ import annotations

import os
import stat


def is_hidden(path: str | os.PathLike[str]) -> bool:
    """Return True if the file at ``path`` is hidden.

    A name starting with a dot is hidden everywhere; on Windows the hidden
    file attribute is honoured as well.
    """
    full_path = os.fspath(path)
    name = os.path.basename(full_path)
    if name in ("", ".", ".."):
        return False
    if name.startswith("."):
        return True
    if os.name != "nt":
        return False
    try:
        info = os.lstat(full_path)
    except OSError:
        return False
    attributes = getattr(info, "st_file_attributes", 0)
    return bool(attributes & stat.FILE_ATTRIBUTE_HIDDEN)