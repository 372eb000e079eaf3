"""Gitea REST API client built on httpx."""

from __future__ import annotations

import base64
import copy
import logging
from typing import Any, Sequence, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from ..config.models import CommitIdentity, GiteaSettings
from ..errors import ConflictError, HostAPIError, NotFoundError
from ..models import (
    ChangeOperation,
    ContentEntry,
    OperationKind,
    Organization,
    PullRequest,
    Release,
    Repository,
)

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"
PAGE_LIMIT = 50
MAX_PAGES = 100

ModelT = TypeVar("ModelT", bound=BaseModel)


def _raise_for_status(response: httpx.Response, what: str) -> None:
    """Map a non-2xx response to the extsync error hierarchy."""
    if response.is_success:
        return

    status = response.status_code
    message = f"{what}: HTTP {status}"
    if status == 404:
        raise NotFoundError(message, status_code=status, response=response.text)
    if status in (409, 422):
        raise ConflictError(message, status_code=status, response=response.text)
    raise HostAPIError(f"{message}: {response.text}", status_code=status, response=response.text)


def _json(response: httpx.Response, what: str) -> Any:
    """Decode a successful response body, which must be JSON."""
    try:
        return response.json()
    except ValueError as e:
        raise HostAPIError(
            f"{what}: response is not JSON",
            status_code=response.status_code,
            response=response.text,
        ) from e


def _parse(model: type[ModelT], data: Any, what: str) -> ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise HostAPIError(f"{what}: unexpected {model.__name__} payload: {e}") from e


class GiteaClient:
    """Talks to a Gitea instance with a personal access token."""

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = 30.0,
        verify: bool = True,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: Gitea URL, e.g. https://git.example.com
            token: Access token
            timeout: Default per-request timeout in seconds
            verify: Verify TLS certificates
            transport: Custom httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http = httpx.Client(
            base_url=self.base_url + API_PREFIX,
            headers={
                "Authorization": f"token {token}",
                "Accept": "application/json",
            },
            timeout=timeout,
            verify=verify,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: GiteaSettings) -> GiteaClient:
        return cls(
            settings.url,
            settings.token,
            timeout=settings.request_timeout,
            verify=settings.verify_ssl,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> GiteaClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def with_timeout(self, timeout: float) -> GiteaClient:
        """Return a client sharing this connection pool with another timeout."""
        scoped = copy.copy(self)
        scoped.timeout = timeout
        return scoped

    def _request(
        self,
        method: str,
        path: str,
        what: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> httpx.Response:
        try:
            response = self._http.request(
                method, path, params=params, json=json, timeout=self.timeout
            )
        except httpx.HTTPError as e:
            raise HostAPIError(f"{what}: {e}") from e
        _raise_for_status(response, what)
        return response

    def _paginate(
        self, path: str, what: str, params: dict[str, Any] | None = None
    ) -> list[dict]:
        items: list[dict] = []
        for page in range(1, MAX_PAGES + 1):
            page_params = {**(params or {}), "page": page, "limit": PAGE_LIMIT}
            response = self._request("GET", path, what, params=page_params)
            batch = _json(response, what)
            if not batch:
                break
            if not isinstance(batch, list):
                raise HostAPIError(f"{what}: expected a list, got {type(batch).__name__}")
            items.extend(batch)
            if len(batch) < PAGE_LIMIT:
                break
        return items

    @staticmethod
    def _contents_path(owner: str, repo: str, path: str) -> str:
        path = path.strip("/")
        base = f"/repos/{quote(owner)}/{quote(repo)}/contents"
        return f"{base}/{quote(path)}" if path else base

    def list_user_organizations(self) -> list[Organization]:
        """List organizations the authenticated user belongs to."""
        what = "listing organizations"
        data = self._paginate("/user/orgs", what)
        return [_parse(Organization, o, what) for o in data]

    def list_org_repositories(self, org: str) -> list[Repository]:
        """List repositories of an organization. Unknown organizations yield []."""
        what = f"listing repositories of {org}"
        try:
            data = self._paginate(f"/orgs/{quote(org)}/repos", what)
        except NotFoundError:
            return []
        return [_parse(Repository, r, what) for r in data]

    def get_file_content(self, owner: str, repo: str, path: str, ref: str) -> bytes:
        """Fetch and decode a file.

        Raises:
            NotFoundError: If the file does not exist at ``ref``.
        """
        what = f"reading {owner}/{repo}/{path}@{ref}"
        response = self._request(
            "GET", self._contents_path(owner, repo, path), what, params={"ref": ref}
        )
        data = _json(response, what)
        if not isinstance(data, dict) or data.get("type") != "file":
            raise HostAPIError(f"{what}: not a file")

        if data.get("encoding") != "base64":
            raise HostAPIError(f"{what}: unsupported encoding {data.get('encoding')!r}")

        # Gitea returns base64 with newlines
        content_b64 = (data.get("content") or "").replace("\n", "")
        try:
            return base64.b64decode(content_b64)
        except ValueError as e:
            raise HostAPIError(f"{what}: invalid base64 content") from e

    def list_contents(self, owner: str, repo: str, path: str, ref: str) -> list[ContentEntry]:
        """List a directory. A file path yields a single-entry list."""
        what = f"listing {owner}/{repo}/{path}@{ref}"
        response = self._request(
            "GET", self._contents_path(owner, repo, path), what, params={"ref": ref}
        )
        data = _json(response, what)
        if isinstance(data, dict):
            data = [data]
        if not isinstance(data, list):
            raise HostAPIError(f"{what}: expected a listing, got {type(data).__name__}")
        return [_parse(ContentEntry, item, what) for item in data]

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
        """Create ``new_branch`` from ``branch`` with all operations in one commit.

        Returns:
            SHA of the created commit.

        Raises:
            ConflictError: If a revision marker is stale or the branch exists.
        """
        identity = {"name": author.name, "email": author.email}
        files = []
        for op in operations:
            entry: dict[str, Any] = {"operation": op.kind.value, "path": op.path}
            if op.kind is not OperationKind.DELETE:
                entry["content"] = base64.b64encode(op.content or b"").decode("ascii")
            if op.sha:
                entry["sha"] = op.sha
            files.append(entry)

        payload = {
            "branch": branch,
            "new_branch": new_branch,
            "message": message,
            "author": identity,
            "committer": identity,
            "files": files,
        }

        logger.debug(
            f"Committing {len(files)} operation(s) to {owner}/{repo} "
            f"({branch} -> {new_branch})"
        )
        what = f"committing to {owner}/{repo}@{new_branch}"
        response = self._request(
            "POST", f"/repos/{quote(owner)}/{quote(repo)}/contents", what, json=payload
        )
        data = _json(response, what)
        try:
            sha = data["commit"]["sha"]
        except (KeyError, TypeError) as e:
            raise HostAPIError(
                f"commit to {owner}/{repo}@{new_branch} returned no sha",
                status_code=response.status_code,
                response=response.text,
            ) from e
        return sha

    def create_pull_request(
        self, owner: str, repo: str, title: str, body: str, head: str, base: str
    ) -> PullRequest:
        """Open a pull request, or return the open one for the same head/base."""
        what = f"creating pull request {head} -> {base} in {owner}/{repo}"
        try:
            response = self._request(
                "POST",
                f"/repos/{quote(owner)}/{quote(repo)}/pulls",
                what,
                json={"title": title, "body": body, "head": head, "base": base},
            )
        except ConflictError as e:
            existing = self.find_open_pull_request(owner, repo, head, base)
            if existing is None:
                raise HostAPIError(
                    f"{what}: pull request already exists but was not found",
                    status_code=e.status_code,
                    response=e.response,
                ) from e
            logger.info(f"Reusing existing pull request #{existing.number}")
            return existing
        return _parse(PullRequest, _json(response, what), what)

    def find_open_pull_request(
        self, owner: str, repo: str, head: str, base: str
    ) -> PullRequest | None:
        """Find an open pull request with the given head and base branches."""
        what = f"listing pull requests of {owner}/{repo}"
        data = self._paginate(
            f"/repos/{quote(owner)}/{quote(repo)}/pulls", what, params={"state": "open"}
        )
        for pr in data:
            if not isinstance(pr, dict):
                continue
            if (pr.get("head") or {}).get("ref") == head and (pr.get("base") or {}).get(
                "ref"
            ) == base:
                return _parse(PullRequest, pr, what)
        return None

    def get_release_by_tag(self, owner: str, repo: str, tag: str) -> Release:
        """Fetch release metadata for a tag."""
        what = f"fetching release {tag} of {owner}/{repo}"
        response = self._request(
            "GET",
            f"/repos/{quote(owner)}/{quote(repo)}/releases/tags/{quote(tag, safe='')}",
            what,
        )
        return _parse(Release, _json(response, what), what)
