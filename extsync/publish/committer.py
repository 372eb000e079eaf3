"""Commit a change plan to a new branch in one atomic request."""

from __future__ import annotations

import logging
from typing import Sequence

from ..config.models import CommitIdentity
from ..errors import CommitError, HostAPIError
from ..gitea.interfaces import HostAPI
from ..models import ChangeOperation

logger = logging.getLogger(__name__)

SAMPLE_SIZE = 5


def branch_name(extension_name: str, version: str) -> str:
    """Branch used for an extension update, e.g. ``update-myext-1.0.0``."""
    name = extension_name.lower().replace(" ", "-")
    return f"update-{name}-{version.removeprefix('v')}"


def commit_message(extension_name: str, version: str) -> str:
    return f"chore(ext): update {extension_name} to {version}"


def commit_changes(
    api: HostAPI,
    owner: str,
    repo: str,
    operations: Sequence[ChangeOperation],
    base_branch: str,
    new_branch: str,
    message: str,
    author: CommitIdentity | None = None,
) -> str:
    """Create ``new_branch`` from ``base_branch`` with every operation applied.

    The host applies all operations or none: a stale revision marker rejects
    the whole commit.

    Returns:
        SHA of the new commit.

    Raises:
        CommitError: If the operations are invalid or the host rejects them.
    """
    if not operations:
        raise CommitError("nothing to commit: operation list is empty")

    for index, op in enumerate(operations):
        if not op.path:
            raise CommitError(f"operation {index} ({op.kind.value}) has an empty path")

    logger.debug(
        f"Committing to {owner}/{repo}: {base_branch} -> {new_branch}, "
        f"sample paths {[f'{op.kind.value}:{op.path}' for op in operations[:SAMPLE_SIZE]]}"
    )

    try:
        sha = api.change_files(
            owner,
            repo,
            operations,
            branch=base_branch,
            new_branch=new_branch,
            message=message,
            author=author or CommitIdentity(),
        )
    except HostAPIError as e:
        raise CommitError(f"commit to {owner}/{repo}@{new_branch} failed: {e}") from e

    logger.info(f"Committed {len(operations)} operation(s) to {owner}/{repo}@{new_branch}: {sha}")
    return sha
