"""
archiver.py

Packs the collection directory into a single zip archive.
"""

import os
import zipfile


def create_archive(collection_dir: str, archive_path: str) -> str:
    """
    Zip the full tree of collection_dir, with entries relative to its root.

    An existing archive at archive_path is replaced.

    Args:
        collection_dir: Directory holding one subdirectory per video
        archive_path: Path of the zip file to write

    Returns:
        str: Path of the written archive
    """
    print(f"Creating archive: {archive_path}")

    count = 0
    with zipfile.ZipFile(archive_path, 'w', compression=zipfile.ZIP_DEFLATED) as zf:
        for root, dirs, files in os.walk(collection_dir):
            dirs.sort()
            rel_root = os.path.relpath(root, collection_dir)
            if rel_root == os.curdir:
                rel_root = ""
            else:
                # Directory entry keeps empty per-video folders in the archive
                zf.write(root, rel_root)

            for name in sorted(files):
                zf.write(os.path.join(root, name), os.path.join(rel_root, name))
                count += 1

    print(f"✓ Archived {count} file(s) into: {archive_path}")
    return archive_path
