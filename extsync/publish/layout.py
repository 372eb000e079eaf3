"""Detect the project name and extension directories of a repository."""

from __future__ import annotations

import logging
from typing import Sequence

from ..errors import ProjectLayoutError
from ..gitea.interfaces import HostAPI

logger = logging.getLogger(__name__)


def analyze_directories(directories: Sequence[str]) -> list[str]:
    """Analyze root directory names.

    The project directory is the first name without a dot. Extensions are
    directories named ``<project>.<extension>``.

    Returns:
        ``[project, *extensions]``, or ``[]`` if no project directory exists.

    Raises:
        ProjectLayoutError: If there are several dot-less directories and no
            extension directory to tell which one is the project.
    """
    plain = [d for d in directories if "." not in d]
    if not plain:
        return []

    project = plain[0]
    prefix = project + "."
    extensions = [d[len(prefix):] for d in directories if d.startswith(prefix) and d != prefix]

    if not extensions and len(plain) > 1:
        raise ProjectLayoutError(
            f"no extension directories found and several project candidates: {plain}"
        )

    return [project, *extensions]


def analyze_project(api: HostAPI, owner: str, repo: str, ref: str) -> list[str]:
    """Analyze the root of ``owner/repo`` at ``ref``.

    Hidden directories are ignored. Host errors propagate unchanged.
    """
    entries = api.list_contents(owner, repo, "", ref)
    directories = [e.name for e in entries if e.is_dir and not e.name.startswith(".")]
    result = analyze_directories(directories)
    logger.debug(f"Layout of {owner}/{repo}@{ref}: {result}")
    return result
