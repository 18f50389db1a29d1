"""Path string helpers working on '/'-separated paths, and a breadth-first walk."""

from __future__ import annotations

import os
from collections import deque
from dataclasses import dataclass

MAX_PATH_LEN = 4096


@dataclass(frozen=True, order=True)
class DirEntry:
    """One entry found by :func:`walk_bfs`."""

    path: str
    is_dir: bool = False


def normalize(path: str) -> str:
    """Turn backslashes into forward slashes."""
    return path.replace("\\", "/")


def suffix(name: str) -> str:
    """Text after the last '.', or '' when there is none."""
    pos = name.rfind(".")
    return name[pos + 1:] if pos >= 0 else ""


def strip_suffix(name: str) -> str:
    """Text before the last '.', or '' when there is none."""
    pos = name.rfind(".")
    return name[:pos] if pos >= 0 else ""


def parent_dir(path: str) -> str:
    """Parent directory with its trailing '/', ignoring the path's last character."""
    if not path:
        return ""
    trimmed = path[:-1]
    pos = trimmed.rfind("/")
    return trimmed[:pos + 1] if pos >= 0 else ""


def base_name(path: str) -> str:
    """Text after the last '/', or '' when the path has no '/'."""
    if not path:
        return ""
    pos = path.rfind("/")
    return path[pos + 1:] if pos >= 0 else ""


def walk_bfs(path: str | os.PathLike[str]) -> list[DirEntry]:
    """Every file and directory below ``path``, level by level, names sorted."""
    root = normalize(os.fspath(path))
    if not root or len(root) > MAX_PATH_LEN:
        return []
    if not root.endswith("/"):
        root += "/"
    result: list[DirEntry] = []
    queue = deque([root])
    while queue:
        current = queue.popleft()
        try:
            with os.scandir(current) as listing:
                entries = sorted(listing, key=lambda e: e.name)
        except OSError:
            continue
        for entry in entries:
            full = current + normalize(entry.name)
            is_dir = entry.is_dir()
            if is_dir:
                queue.append(full + "/")
            result.append(DirEntry(full, is_dir))
    return result