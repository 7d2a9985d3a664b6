# hfget/core/paths.py
"""
Where files land on disk.

  flat      -> <base>
  organized -> <base>/<owner>/<model>
"""
from __future__ import annotations
import logging
from pathlib import Path
from typing import Union

from .errors import FilesystemError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

def resolve_target_dir(base: PathLike, strategy: str, repo_name: str) -> Path:
    base = Path(base)
    if strategy != "organized":
        return base
    owner, _, model = repo_name.partition("/")
    if not model:
        return base / owner
    return base / owner / model

def make_target_dir(target: Path) -> Path:
    try:
        target.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(f"Failed to create directory: {target}", e) from e
    return target

def remove_if_empty(d: Path) -> bool:
    """rmdir when empty; missing or non-empty directories are left alone."""
    try:
        d.rmdir()
    except OSError:
        return False
    logger.debug("Removed empty directory: %s", d)
    return True

def prune_empty_dirs(target: Path, base: PathLike) -> list:
    """
    Remove the target directory if empty, then its parent (the owner dir)
    if that is also empty and is not the base directory itself.
    Returns the removed directories. Never raises.
    """
    base = Path(base)
    removed = []
    if target == base:
        return removed
    if not remove_if_empty(target):
        return removed
    removed.append(target)
    parent = target.parent
    if parent != base and remove_if_empty(parent):
        removed.append(parent)
    return removed
