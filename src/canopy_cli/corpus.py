from __future__ import annotations
import logging
import pathlib
import random
import string
from typing import List

from canopy_core.content import FileContent

log = logging.getLogger("canopy.cli")


def load_directory(path) -> List[FileContent]:
    """Read every regular file directly under ``path``, sorted by name."""
    root = pathlib.Path(path)
    if not root.is_dir():
        raise FileNotFoundError(f"no such directory: {root}")
    items = [FileContent.from_path(p) for p in sorted(root.iterdir()) if p.is_file()]
    log.debug("loaded %d files from %s", len(items), root)
    return items


def generate_files(path, count: int, size: int, seed=None) -> List[pathlib.Path]:
    """Write ``count`` files of ``size`` random printable characters."""
    root = pathlib.Path(path)
    root.mkdir(parents=True, exist_ok=True)
    rng = random.Random(seed)
    alphabet = string.ascii_letters + string.digits
    written = []
    width = len(str(max(count - 1, 0)))
    for i in range(count):
        p = root / f"file_{i:0{width}d}.txt"
        p.write_text("".join(rng.choice(alphabet) for _ in range(size)))
        written.append(p)
    return written
