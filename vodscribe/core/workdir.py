"""
workdir.py

Temporary directories for a run: one working directory per video
and one collection directory per batch.
"""

import os
import shutil
import tempfile
from contextlib import contextmanager
from typing import Iterator

from .errors import DirectoryError

TEMP_PREFIX = "tmp."


def make_temp_dir(parent: str) -> str:
    """
    Create a uniquely named directory (tmp.XXXXXXXX) under parent.
    """
    os.makedirs(parent, exist_ok=True)
    return tempfile.mkdtemp(prefix=TEMP_PREFIX, dir=parent)


def cleanup(path: str) -> None:
    """
    Remove a directory tree.

    Args:
        path: Directory to remove

    Raises:
        DirectoryError: If path is not an existing directory
    """
    if not os.path.isdir(path):
        raise DirectoryError(f"'{path}' does not appear to be a directory!")

    print(f"Cleaning up... {path}")
    shutil.rmtree(path)


@contextmanager
def working_directory(parent: str, keep: bool = False) -> Iterator[str]:
    """
    Scoped working directory for a single video.

    The directory is removed when the block exits, whether it finished
    or raised, unless keep is True.

    Args:
        parent: Directory to create the working directory in
        keep: Leave the directory on disk after the block exits

    Yields:
        str: Path of the new directory
    """
    path = make_temp_dir(parent)
    try:
        yield path
    finally:
        if keep:
            print(f"Keeping working directory: {path}")
        elif os.path.isdir(path):
            cleanup(path)


def unique_child(parent: str, name: str) -> str:
    """
    Return a path under parent named after name that does not exist yet.
    A numeric suffix is appended on collision (name-2, name-3, ...).
    """
    candidate = os.path.join(parent, name)
    counter = 2
    while os.path.exists(candidate):
        candidate = os.path.join(parent, f"{name}-{counter}")
        counter += 1
    return candidate
