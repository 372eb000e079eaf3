"""Synchronize an extension directory into one subscriber repository."""

from __future__ import annotations

import logging

from ..config.models import CommitIdentity
from ..errors import ExtSyncError
from ..gitea.interfaces import HostAPI
from ..models import SubscribedRepository
from .committer import branch_name, commit_changes, commit_message
from .planner import plan_changes
from .report import SyncResult
from .snapshot import read_source_tree, read_target_map

logger = logging.getLogger(__name__)


def sync_extension(
    api: HostAPI,
    subscriber: SubscribedRepository,
    source_owner: str,
    source_repo: str,
    source_dir: str,
    source_ref: str,
    target_dir: str,
    extension_name: str,
    version: str,
    author: CommitIdentity | None = None,
) -> SyncResult:
    """Copy ``source_dir`` over ``target_dir`` of the subscriber on a new branch.

    Errors are recorded on the returned SyncResult instead of being raised,
    so the caller can continue with the next subscriber.
    """
    result = SyncResult(subscriber=subscriber)
    result.new_branch = branch_name(extension_name, version)
    target = subscriber.full_name

    try:
        source_files = read_source_tree(api, source_owner, source_repo, source_dir, source_ref)
        target_markers = read_target_map(
            api,
            subscriber.organization,
            subscriber.repository,
            target_dir,
            subscriber.target_branch,
        )
        logger.debug(
            f"{target}: {len(source_files)} source file(s), "
            f"{len(target_markers)} existing file(s) in {target_dir}"
        )

        plan = plan_changes(source_files, target_markers, target_dir)
        result.files_created = plan.creates + plan.updates
        result.files_deleted = plan.deletes

        result.commit_sha = commit_changes(
            api,
            subscriber.organization,
            subscriber.repository,
            plan.operations,
            base_branch=subscriber.target_branch,
            new_branch=result.new_branch,
            message=commit_message(extension_name, version),
            author=author,
        )
    except ExtSyncError as e:
        logger.error(f"Sync to {target} failed: {e}")
        result.error = e

    return result
