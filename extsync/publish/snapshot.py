"""Read repository subtrees into flat snapshots."""

from __future__ import annotations

import logging
import posixpath
from typing import Iterator

from ..errors import EmptySourceTreeError, HostAPIError, NotFoundError
from ..gitea.interfaces import HostAPI
from ..models import ContentEntry, SourceFile

logger = logging.getLogger(__name__)


def _relative(path: str, root: str) -> str:
    if not root:
        return path
    if path.startswith(root + "/"):
        return path[len(root) + 1:]
    return posixpath.relpath(path, root)


def walk_files(
    api: HostAPI, owner: str, repo: str, directory: str, ref: str
) -> Iterator[tuple[str, ContentEntry]]:
    """Yield ``(relative_path, entry)`` for every file below ``directory``.

    Uses an explicit stack so deep trees do not grow the call stack.
    Entries are yielded in listing order, depth first.

    Raises:
        NotFoundError: If ``directory`` itself does not exist at ``ref``.
        HostAPIError: If a subdirectory vanishes while walking.
    """
    root = directory.strip("/")
    stack = [root]
    while stack:
        current = stack.pop()
        try:
            entries = api.list_contents(owner, repo, current, ref)
        except NotFoundError as e:
            if current == root:
                raise
            raise HostAPIError(
                f"{owner}/{repo}/{current}@{ref} disappeared while reading",
                status_code=e.status_code,
            ) from e

        subdirs = []
        for entry in entries:
            path = entry.path.strip("/") or posixpath.join(current, entry.name)
            if entry.is_dir:
                subdirs.append(path)
            elif entry.is_file:
                yield _relative(path, root), entry
        # reversed so the first subdirectory is walked first
        stack.extend(reversed(subdirs))


def read_source_tree(
    api: HostAPI, owner: str, repo: str, directory: str, ref: str
) -> list[SourceFile]:
    """Read every file below ``directory`` with its content.

    Raises:
        EmptySourceTreeError: If the directory is missing or holds no files.
    """
    try:
        listing = list(walk_files(api, owner, repo, directory, ref))
    except NotFoundError as e:
        raise EmptySourceTreeError(directory) from e

    if not listing:
        raise EmptySourceTreeError(directory)

    files = [
        SourceFile(rel_path, api.get_file_content(owner, repo, entry.path, ref))
        for rel_path, entry in listing
    ]
    logger.debug(f"Read {len(files)} source file(s) from {owner}/{repo}/{directory}@{ref}")
    return files


def read_target_map(
    api: HostAPI, owner: str, repo: str, directory: str, ref: str
) -> dict[str, str]:
    """Map every file below ``directory`` to its revision marker.

    A missing directory is a fresh install and yields an empty map.

    Raises:
        HostAPIError: If a listed file carries no revision marker.
    """
    markers: dict[str, str] = {}
    try:
        for rel_path, entry in walk_files(api, owner, repo, directory, ref):
            if not entry.sha:
                raise HostAPIError(
                    f"{owner}/{repo}/{entry.path}@{ref} was listed without a sha"
                )
            markers[rel_path] = entry.sha
    except NotFoundError:
        logger.debug(f"{owner}/{repo}/{directory}@{ref} does not exist yet")
        return {}

    logger.debug(f"Found {len(markers)} file(s) in {owner}/{repo}/{directory}@{ref}")
    return markers
