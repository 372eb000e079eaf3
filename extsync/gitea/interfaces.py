"""Narrow view of the hosting API the publish engine depends on."""

from __future__ import annotations

from typing import Protocol, Sequence

from ..config.models import CommitIdentity
from ..models import (
    ChangeOperation,
    ContentEntry,
    Organization,
    PullRequest,
    Release,
    Repository,
)


class HostAPI(Protocol):
    """Operations used by discovery, tree reading, commits and proposals."""

    def with_timeout(self, timeout: float) -> HostAPI:
        """Return a view of this client whose requests use ``timeout`` seconds."""
        ...

    def list_user_organizations(self) -> list[Organization]: ...

    def list_org_repositories(self, org: str) -> list[Repository]: ...

    def get_file_content(self, owner: str, repo: str, path: str, ref: str) -> bytes: ...

    def list_contents(
        self, owner: str, repo: str, path: str, ref: str
    ) -> list[ContentEntry]: ...

    def change_files(
        self,
        owner: str,
        repo: str,
        operations: Sequence[ChangeOperation],
        branch: str,
        new_branch: str,
        message: str,
        author: CommitIdentity,
    ) -> str:
        """Apply every operation in one commit and return its sha.

        The commit is rejected as a whole if any revision marker is stale.
        """
        ...

    def create_pull_request(
        self, owner: str, repo: str, title: str, body: str, head: str, base: str
    ) -> PullRequest: ...

    def get_release_by_tag(self, owner: str, repo: str, tag: str) -> Release: ...
