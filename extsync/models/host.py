"""Models for objects returned by the hosting API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class Organization(BaseModel):
    """Organization visible to the authenticated user."""

    id: int = 0
    username: str
    full_name: str | None = None


class Repository(BaseModel):
    """Repository inside an organization."""

    id: int = 0
    name: str
    full_name: str | None = None
    default_branch: str = "main"
    private: bool = False
    fork: bool = False
    archived: bool = False


class ContentEntry(BaseModel):
    """Single entry of a directory listing."""

    name: str
    path: str
    sha: str = ""
    type: str  # "file", "dir", "symlink", "submodule"
    size: int = 0

    @property
    def is_file(self) -> bool:
        return self.type == "file"

    @property
    def is_dir(self) -> bool:
        return self.type == "dir"


class ReleaseAsset(BaseModel):
    """File attached to a release."""

    id: int = 0
    name: str
    size: int = 0
    browser_download_url: str | None = None


class Release(BaseModel):
    """Release metadata for a tag."""

    id: int = 0
    tag_name: str = ""
    name: str = ""
    body: str = ""
    html_url: str | None = None
    assets: list[ReleaseAsset] = Field(default_factory=list)
    created_at: str | None = None
    published_at: str | None = None


class PullRequest(BaseModel):
    """Pull request (merge proposal) created on the host."""

    id: int = 0
    number: int
    html_url: str = ""
    state: str = "open"
    title: str = ""
    body: str | None = None
