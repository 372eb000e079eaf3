"""Shared fixtures: an in-memory hosting API."""

from __future__ import annotations

import hashlib
import posixpath

import pytest

from extsync.config.models import CommitIdentity, PublishConfig
from extsync.errors import ConflictError, HostAPIError, NotFoundError
from extsync.models import (
    ContentEntry,
    OperationKind,
    Organization,
    PullRequest,
    Release,
    Repository,
)


def blob_sha(content: bytes) -> str:
    return hashlib.sha1(content).hexdigest()


class FakeHost:
    """In-memory HostAPI that records every call."""

    def __init__(self):
        self.calls: list[tuple] = []
        self.orgs: list[Organization] = []
        self.repos: dict[str, list[Repository]] = {}
        self.trees: dict[tuple[str, str, str], dict[str, bytes]] = {}
        self.releases: dict[tuple[str, str, str], Release] = {}
        self.pull_requests: list[dict] = []
        self.commits: list[dict] = []
        self.timeouts: list[float] = []

        self.fail_list_orgs = False
        self.fail_list_repos: set[str] = set()
        self.fail_reads: set[tuple[str, str]] = set()
        self.fail_listing: set[tuple[str, str]] = set()
        self.fail_pull_requests: set[tuple[str, str]] = set()
        self.blank_shas: set[tuple[str, str]] = set()

    # setup helpers

    def add_repo(self, org: str, name: str, default_branch: str = "main") -> None:
        if org not in self.repos:
            self.orgs.append(Organization(username=org))
            self.repos[org] = []
        self.repos[org].append(Repository(name=name, default_branch=default_branch))

    def put_file(self, owner: str, repo: str, ref: str, path: str, content: bytes | str) -> None:
        if isinstance(content, str):
            content = content.encode("utf-8")
        self.trees.setdefault((owner, repo, ref), {})[path] = content

    def add_release(self, owner: str, repo: str, tag: str, **fields) -> Release:
        release = Release(tag_name=tag, name=fields.pop("name", tag), **fields)
        self.releases[(owner, repo, tag)] = release
        return release

    def sha_of(self, owner: str, repo: str, ref: str, path: str) -> str:
        return blob_sha(self.trees[(owner, repo, ref)][path])

    def count(self, method: str) -> int:
        return sum(1 for call in self.calls if call[0] == method)

    # HostAPI

    def with_timeout(self, timeout: float) -> FakeHost:
        self.timeouts.append(timeout)
        return self

    def list_user_organizations(self) -> list[Organization]:
        self.calls.append(("list_user_organizations",))
        if self.fail_list_orgs:
            raise HostAPIError("listing organizations: HTTP 500", status_code=500)
        return list(self.orgs)

    def list_org_repositories(self, org: str) -> list[Repository]:
        self.calls.append(("list_org_repositories", org))
        if org in self.fail_list_repos:
            raise HostAPIError(f"listing repositories of {org}: HTTP 500", status_code=500)
        return list(self.repos.get(org, []))

    def get_file_content(self, owner: str, repo: str, path: str, ref: str) -> bytes:
        self.calls.append(("get_file_content", owner, repo, path, ref))
        if (owner, repo) in self.fail_reads:
            raise HostAPIError(f"reading {owner}/{repo}/{path}: HTTP 500", status_code=500)
        tree = self.trees.get((owner, repo, ref), {})
        if path not in tree:
            raise NotFoundError(f"reading {owner}/{repo}/{path}: HTTP 404", status_code=404)
        return tree[path]

    def list_contents(self, owner: str, repo: str, path: str, ref: str) -> list[ContentEntry]:
        self.calls.append(("list_contents", owner, repo, path, ref))
        if (owner, repo) in self.fail_listing:
            raise HostAPIError(f"listing {owner}/{repo}/{path}: HTTP 500", status_code=500)
        tree = self.trees.get((owner, repo, ref), {})
        path = path.strip("/")
        if path in tree:
            return [self._file_entry(owner, repo, path, tree[path])]

        prefix = path + "/" if path else ""
        entries: dict[str, ContentEntry] = {}
        for file_path in sorted(tree):
            if not file_path.startswith(prefix):
                continue
            head, _, rest = file_path[len(prefix):].partition("/")
            if rest:
                dir_path = prefix + head
                entries.setdefault(
                    head, ContentEntry(name=head, path=dir_path, sha="", type="dir")
                )
            else:
                entries[head] = self._file_entry(owner, repo, file_path, tree[file_path])

        if not entries and path:
            raise NotFoundError(f"listing {owner}/{repo}/{path}: HTTP 404", status_code=404)
        return list(entries.values())

    def _file_entry(self, owner: str, repo: str, path: str, content: bytes) -> ContentEntry:
        sha = "" if (owner, repo) in self.blank_shas else blob_sha(content)
        return ContentEntry(
            name=posixpath.basename(path),
            path=path,
            sha=sha,
            type="file",
            size=len(content),
        )

    def change_files(self, owner, repo, operations, branch, new_branch, message, author):
        self.calls.append(("change_files", owner, repo, branch, new_branch))
        base = self.trees.get((owner, repo, branch), {})
        if (owner, repo, new_branch) in self.trees:
            raise ConflictError(f"branch {new_branch} already exists", status_code=409)

        updated = dict(base)
        for op in operations:
            current = base.get(op.path)
            if op.kind is OperationKind.CREATE:
                if current is not None:
                    raise ConflictError(f"{op.path} already exists", status_code=422)
                updated[op.path] = op.content
            elif current is None or blob_sha(current) != op.sha:
                raise ConflictError(f"sha mismatch for {op.path}", status_code=409)
            elif op.kind is OperationKind.UPDATE:
                updated[op.path] = op.content
            else:
                del updated[op.path]

        self.trees[(owner, repo, new_branch)] = updated
        sha = f"commit{len(self.commits) + 1}"
        self.commits.append(
            {
                "owner": owner,
                "repo": repo,
                "branch": branch,
                "new_branch": new_branch,
                "message": message,
                "author": author,
                "operations": list(operations),
                "sha": sha,
            }
        )
        return sha

    def create_pull_request(self, owner, repo, title, body, head, base) -> PullRequest:
        self.calls.append(("create_pull_request", owner, repo, head, base))
        if (owner, repo) in self.fail_pull_requests:
            raise HostAPIError("creating pull request: HTTP 500", status_code=500)
        number = len(self.pull_requests) + 1
        self.pull_requests.append(
            {"owner": owner, "repo": repo, "title": title, "body": body, "head": head, "base": base}
        )
        return PullRequest(
            number=number, html_url=f"https://git.example.com/{owner}/{repo}/pulls/{number}"
        )

    def get_release_by_tag(self, owner: str, repo: str, tag: str) -> Release:
        self.calls.append(("get_release_by_tag", owner, repo, tag))
        try:
            return self.releases[(owner, repo, tag)]
        except KeyError:
            raise NotFoundError(f"release {tag} not found", status_code=404) from None


@pytest.fixture
def host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def config() -> PublishConfig:
    cfg = PublishConfig()
    cfg.gitea.url = "https://git.example.com"
    cfg.gitea.token = "secret"
    cfg.source.owner = "lib"
    cfg.source.repo = "ssl"
    cfg.release_tag = "v1.2.0"
    cfg.extensions = ["utils"]
    cfg.commit_author = CommitIdentity(name="bot", email="bot@example.com")
    return cfg
