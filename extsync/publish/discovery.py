"""Find repositories subscribed to extensions of a source repository."""

from __future__ import annotations

import logging
from typing import Sequence

import yaml
from pydantic import ValidationError

from ..errors import HostAPIError, ManifestError, NotFoundError
from ..gitea.interfaces import HostAPI
from ..models import Repository, SubscribedRepository, SubscriptionManifest
from . import identifier

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "project.yaml"


def parse_manifest(content: bytes | str, repository: str = "") -> SubscriptionManifest:
    """Parse manifest content.

    Empty documents and documents without ``subscriptions`` yield an empty
    manifest.

    Raises:
        ManifestError: If the content is not valid YAML or has the wrong shape.
    """
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ManifestError(repository, f"invalid YAML: {e}") from e

    if data is None:
        return SubscriptionManifest()
    if not isinstance(data, dict):
        raise ManifestError(repository, "top level must be a mapping")
    if data.get("subscriptions") is None:
        return SubscriptionManifest()

    try:
        return SubscriptionManifest.model_validate(
            {"subscriptions": data["subscriptions"]}
        )
    except ValidationError as e:
        raise ManifestError(repository, f"subscriptions must be a list of strings: {e}") from e


def read_subscriptions(api: HostAPI, org: str, repo: Repository) -> list[str]:
    """Read the subscriptions declared by ``org/repo`` at its default branch.

    A missing manifest means no subscriptions. A failed read is logged and
    also means no subscriptions. A malformed manifest raises ManifestError.
    """
    full_name = f"{org}/{repo.name}"
    try:
        content = api.get_file_content(org, repo.name, MANIFEST_FILENAME, repo.default_branch)
    except NotFoundError:
        return []
    except HostAPIError as e:
        logger.warning(f"Failed to read {MANIFEST_FILENAME} of {full_name}: {e}")
        return []

    return parse_manifest(content, full_name).subscriptions


def find_subscribers(
    api: HostAPI,
    source_org: str,
    source_repo: str,
    extension_paths: Sequence[str],
) -> list[SubscribedRepository]:
    """Find every repository whose manifest subscribes to one of the extensions.

    Args:
        api: Hosting API client
        source_org: Organization of the source repository
        source_repo: Source repository name
        extension_paths: Extension directories published by the source

    Returns:
        Subscribers in organization, repository and manifest order.

    Raises:
        HostAPIError: If organizations cannot be listed.
        ManifestError: If any manifest is malformed.
    """
    if not extension_paths:
        logger.info("No extensions given, nothing to discover")
        return []

    wanted = {
        identifier.encode(source_org, source_repo, path): path for path in extension_paths
    }
    logger.info(f"Looking for subscriptions: {sorted(wanted)}")

    orgs = api.list_user_organizations()
    logger.info(f"Scanning {len(orgs)} organization(s)")

    subscribers: list[SubscribedRepository] = []
    for org in orgs:
        try:
            repos = api.list_org_repositories(org.username)
        except HostAPIError as e:
            logger.warning(f"Failed to list repositories of {org.username}: {e}")
            continue

        for repo in repos:
            for subscription in read_subscriptions(api, org.username, repo):
                extension_path = wanted.get(subscription)
                if extension_path is None:
                    continue

                subscribers.append(
                    SubscribedRepository(
                        organization=org.username,
                        repository=repo.name,
                        target_branch=repo.default_branch,
                        target_directory=extension_path,
                        subscription_id=subscription,
                    )
                )
                logger.info(
                    f"Found subscriber {org.username}/{repo.name} "
                    f"({subscription} -> {extension_path})"
                )

    return subscribers
