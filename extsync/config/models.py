"""Configuration models for extsync."""

from __future__ import annotations

from typing import Literal, get_args

from pydantic import BaseModel, Field

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LOG_LEVELS = get_args(LogLevel)


class GiteaSettings(BaseModel):
    """Connection settings for the hosting API."""

    url: str = Field(default="", description="Base URL of the Gitea instance")
    token: str = Field(default="", description="Access token used for every request")
    request_timeout: float = Field(default=30.0, description="Per-request timeout in seconds")
    verify_ssl: bool = Field(default=True)


class SourceSettings(BaseModel):
    """Repository the extension is published from."""

    owner: str = Field(default="", description="Source organization")
    repo: str = Field(default="", description="Source repository name")
    project_name: str | None = Field(
        default=None,
        description="Project directory prefix; detected from the repository root if unset",
    )
    ref: str | None = Field(
        default=None, description="Ref to read extension files from (defaults to the release tag)"
    )


class CommitIdentity(BaseModel):
    """Author and committer of generated commits."""

    name: str = Field(default="extsync bot")
    email: str = Field(default="extsync@localhost")


class PublishConfig(BaseModel):
    """Root configuration model."""

    version: int = Field(default=1)
    gitea: GiteaSettings = Field(default_factory=GiteaSettings)
    source: SourceSettings = Field(default_factory=SourceSettings)
    release_tag: str = Field(default="", description="Release tag being published")
    extensions: list[str] = Field(
        default_factory=list, description="Extension directories to publish"
    )
    dry_run: bool = Field(default=False)
    output_json: bool = Field(default=False, description="Render the report as JSON")
    run_timeout: float | None = Field(
        default=None, description="Overall deadline for the run in seconds"
    )
    commit_author: CommitIdentity = Field(default_factory=CommitIdentity)
    log_level: LogLevel = Field(default="INFO")
