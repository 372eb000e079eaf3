"""Open a pull request for an extension update."""

from __future__ import annotations

import logging

from ..gitea.interfaces import HostAPI
from ..models import PullRequest, Release

logger = logging.getLogger(__name__)

NO_NOTES = "_No release notes provided._"


def resolve_version(release: Release | None, branch: str) -> str:
    """Version from the release tag, else the branch suffix, else ``unknown``."""
    if release is not None and release.tag_name:
        return release.tag_name
    parts = branch.split("-")
    if len(parts) >= 3:
        return parts[-1]
    return "unknown"


def proposal_title(extension_name: str, version: str) -> str:
    return f"Update {extension_name} to {version}"


def proposal_body(
    release: Release | None,
    source_repo: str,
    extension_name: str,
    version: str,
    release_url: str | None,
) -> str:
    """Markdown description of the update."""
    lines = [
        "## Extension Update",
        "",
        f"**Extension:** {extension_name}",
        f"**Version:** {version}",
    ]
    if release_url:
        lines.append(f"**Source:** [{source_repo}]({release_url})")
    elif source_repo:
        lines.append(f"**Source:** {source_repo}")

    lines += ["", "### Release Notes", ""]
    lines.append(release.body if release is not None and release.body else NO_NOTES)
    lines += ["", "---", "*This pull request was opened automatically by extsync publish*", ""]
    return "\n".join(lines)


def open_proposal(
    api: HostAPI,
    owner: str,
    repo: str,
    head: str,
    base: str,
    extension_name: str,
    release: Release | None,
    source_repo: str,
    release_url: str | None = None,
) -> PullRequest:
    """Open a pull request from ``head`` into ``base``.

    Raises:
        HostAPIError: If the host refuses the pull request.
    """
    version = resolve_version(release, head)
    title = proposal_title(extension_name, version)
    body = proposal_body(release, source_repo, extension_name, version, release_url)

    logger.info(f"Opening pull request in {owner}/{repo}: {head} -> {base} ({title})")
    pr = api.create_pull_request(owner, repo, title=title, body=body, head=head, base=base)
    logger.info(f"Pull request #{pr.number} ready: {pr.html_url}")
    return pr
