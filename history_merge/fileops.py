"""File identity and verbatim copy helpers."""

from __future__ import annotations

import logging
import os
import shutil

from history_merge.errors import LogIOError

logger = logging.getLogger(__name__)


def same_file(a: str, b: str) -> bool:
    """True if both paths exist and name the same device and inode.

    Symlinks are followed, so a link and its target count as the same file.
    """
    try:
        st_a = os.stat(a)
        st_b = os.stat(b)
    except OSError:
        return False
    return (st_a.st_dev, st_a.st_ino) == (st_b.st_dev, st_b.st_ino)


def copy_file(src: str, dst: str) -> bool:
    """Copy *src* to *dst* byte for byte.

    Returns False when nothing had to be done because *dst* already is *src*,
    True when bytes were copied.

    Raises:
        LogIOError: naming whichever path failed.
    """
    if same_file(src, dst):
        logger.debug("Skipping copy, %s and %s are the same file", src, dst)
        return False

    logger.info("Copying: %s -> %s", src, dst)
    try:
        with open(src, "rb") as f_in, open(dst, "wb") as f_out:
            shutil.copyfileobj(f_in, f_out)
    except OSError as e:
        raise LogIOError(e.strerror or str(e), path=e.filename or src) from e
    return True
