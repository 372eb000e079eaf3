"""Reconcile a source snapshot against a target snapshot."""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass, field
from typing import Mapping, Sequence

from ..models import ChangeOperation, OperationKind, SourceFile

logger = logging.getLogger(__name__)


@dataclass
class ChangePlan:
    """Operations that make the target directory match the source tree."""

    operations: list[ChangeOperation] = field(default_factory=list)

    def count(self, kind: OperationKind) -> int:
        return sum(1 for op in self.operations if op.kind is kind)

    @property
    def creates(self) -> int:
        return self.count(OperationKind.CREATE)

    @property
    def updates(self) -> int:
        return self.count(OperationKind.UPDATE)

    @property
    def deletes(self) -> int:
        return self.count(OperationKind.DELETE)

    def __len__(self) -> int:
        return len(self.operations)


def plan_changes(
    source_files: Sequence[SourceFile],
    target_markers: Mapping[str, str],
    target_dir: str,
) -> ChangePlan:
    """Diff the source files against the target's revision markers.

    Every source file becomes an update when the target has the same relative
    path and a create otherwise. Content is never compared, so unchanged
    files are still rewritten. Target files missing from the source become
    deletes. Empty paths are dropped with a warning.

    Args:
        source_files: Files of the source extension, relative paths
        target_markers: Relative path -> blob sha of the target directory
        target_dir: Destination directory in the target repository

    Returns:
        ChangePlan with absolute destination paths.
    """
    plan = ChangePlan()
    source_paths: set[str] = set()

    for source in source_files:
        if not source.path:
            logger.warning("Skipping source file with an empty path")
            continue

        source_paths.add(source.path)
        dest = posixpath.join(target_dir, source.path)
        sha = target_markers.get(source.path)
        if sha is not None:
            plan.operations.append(ChangeOperation.update(dest, source.content, sha))
        else:
            plan.operations.append(ChangeOperation.create(dest, source.content))

    for rel_path, sha in target_markers.items():
        if not rel_path:
            logger.warning("Skipping target file with an empty path")
            continue
        if rel_path not in source_paths:
            plan.operations.append(
                ChangeOperation.delete(posixpath.join(target_dir, rel_path), sha)
            )

    logger.debug(
        f"Planned {len(plan)} operation(s) for {target_dir}: "
        f"{plan.creates} create, {plan.updates} update, {plan.deletes} delete"
    )
    return plan
