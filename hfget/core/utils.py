from __future__ import annotations
import re
import urllib.parse
from typing import Iterable, List, Optional

from .models import FileEntry

WEIGHT_SUFFIXES = (".gguf", ".safetensors", ".bin")
_QUANT_RE = re.compile(r"[qf][0-9]+[_a-z0-9]*", re.IGNORECASE)

def format_bytes(n: Optional[int]) -> str:
    if not n or n <= 0:
        return "unknown"
    units = ["B", "KB", "MB", "GB", "TB"]
    i = 0
    v = float(n)
    while v >= 1024 and i < len(units) - 1:
        v /= 1024
        i += 1
    return f"{v:.1f} {units[i]}"

def is_weight_file(path: str) -> bool:
    return path.lower().endswith(WEIGHT_SUFFIXES)

def weight_files(entries: Iterable[FileEntry]) -> List[FileEntry]:
    return [f for f in entries if is_weight_file(f.path)]

def quant_label(path: str) -> str:
    m = _QUANT_RE.search(path)
    return m.group(0) if m else "unknown"

def quote_path(path: str) -> str:
    """Percent-encode each segment of a repository path, keeping the slashes."""
    return urllib.parse.quote(path, safe="/")
