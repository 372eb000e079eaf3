"""Publish an extension release to every subscribed repository."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from ..config.models import PublishConfig
from ..errors import (
    ConfigurationError,
    HostAPIError,
    ProjectLayoutError,
    PublishFailedError,
)
from ..gitea.interfaces import HostAPI
from ..models import Release, SubscribedRepository
from .discovery import find_subscribers
from .layout import analyze_project
from .proposal import open_proposal
from .report import PublishReport, PublishResult, PublishStatus, render_report
from .sync import sync_extension

logger = logging.getLogger(__name__)


def validate_config(config: PublishConfig) -> None:
    """Check the settings every run needs.

    Raises:
        ConfigurationError: If any required value is missing.
    """
    missing = []
    if not config.source.owner:
        missing.append("source owner (GITHUB_REPOSITORY)")
    if not config.source.repo:
        missing.append("source repository (GITHUB_REPOSITORY)")
    if not config.release_tag:
        missing.append("release tag (GITHUB_REF_NAME)")
    if not config.gitea.url:
        missing.append("Gitea URL")
    if not config.gitea.token:
        missing.append("access token")
    if missing:
        raise ConfigurationError(f"missing configuration: {', '.join(missing)}")


class ExtensionPublisher:
    """Drives a publish run: release, discovery, per-subscriber sync, report.

    Subscribers are processed one at a time in discovery order. A failure of
    one subscriber is recorded and the run continues, except for a failed
    project layout analysis, which aborts the run.
    """

    def __init__(
        self,
        config: PublishConfig,
        api: HostAPI,
        output: Callable[[str], None] | None = None,
        cancel_event: threading.Event | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the publisher.

        Args:
            config: Validated configuration
            api: Hosting API client
            output: Receives the rendered report (defaults to print)
            cancel_event: When set, no further subscriber is started
            clock: Monotonic clock in seconds
        """
        self.config = config
        self.api = api
        self.output = output or print
        self.cancel_event = cancel_event
        self.clock = clock
        self._deadline: float | None = None

    def validate(self) -> None:
        validate_config(self.config)

    def run(self) -> PublishReport:
        """Run the whole pipeline.

        Returns:
            The finalized report when no subscriber failed.

        Raises:
            ConfigurationError: On missing settings or unknown source layout.
            HostAPIError: If the release or organizations cannot be fetched.
            ManifestError: If a subscriber manifest is malformed.
            ProjectLayoutError: If a subscriber layout cannot be analyzed.
            PublishFailedError: If at least one subscriber failed.
        """
        self.validate()
        cfg = self.config
        owner, repo, tag = cfg.source.owner, cfg.source.repo, cfg.release_tag
        source_repo = f"{owner}/{repo}"

        logger.info(
            f"Publishing {source_repo}@{tag} extensions={cfg.extensions} dry_run={cfg.dry_run}"
        )
        if cfg.run_timeout is not None:
            self._deadline = self.clock() + cfg.run_timeout

        release = self.api.get_release_by_tag(owner, repo, tag)
        logger.info(f"Found release {release.tag_name} ({release.name})")

        source_project = self._source_project(tag)

        subscribers = find_subscribers(self.api, owner, repo, cfg.extensions)
        report = PublishReport(
            extension_name=repo,
            version=release.tag_name or tag,
            source_repo=source_repo,
        )

        if not subscribers:
            logger.info("No subscribers found")
        else:
            logger.info(f"Found {len(subscribers)} subscriber(s)")

        for index, subscriber in enumerate(subscribers):
            reason = self._stop_reason()
            if reason:
                self._mark_not_attempted(report, subscribers[index:], reason)
                break
            report.add(self._publish_one(subscriber, release, source_project))

        report.finalize()
        self.output(render_report(report, as_json=cfg.output_json))

        if report.has_errors:
            raise PublishFailedError(report)
        return report

    def release_url(self, release: Release) -> str:
        if release.html_url:
            return release.html_url
        cfg = self.config
        return (
            f"{cfg.gitea.url.rstrip('/')}/{cfg.source.owner}/{cfg.source.repo}"
            f"/releases/tag/{cfg.release_tag}"
        )

    def _source_project(self, tag: str) -> str:
        cfg = self.config
        if cfg.source.project_name:
            return cfg.source.project_name

        analysis = analyze_project(self.api, cfg.source.owner, cfg.source.repo, tag)
        if not analysis:
            raise ConfigurationError(
                f"cannot detect the project name of {cfg.source.owner}/{cfg.source.repo}; "
                "set source.project_name"
            )
        return analysis[0]

    def _stop_reason(self) -> str | None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            return "run cancelled"
        if self._deadline is not None and self.clock() >= self._deadline:
            return "run deadline exceeded"
        return None

    def _mark_not_attempted(
        self,
        report: PublishReport,
        subscribers: list[SubscribedRepository],
        reason: str,
    ) -> None:
        logger.warning(f"Stopping: {reason}; {len(subscribers)} subscriber(s) not attempted")
        for subscriber in subscribers:
            report.add(
                PublishResult(
                    subscriber=subscriber,
                    status=PublishStatus.SKIPPED,
                    error_message=f"not attempted: {reason}",
                )
            )

    def _target_api(self) -> HostAPI:
        if self._deadline is None:
            return self.api
        remaining = max(self._deadline - self.clock(), 0.0)
        return self.api.with_timeout(min(self.config.gitea.request_timeout, remaining))

    def _publish_one(
        self,
        subscriber: SubscribedRepository,
        release: Release,
        source_project: str,
    ) -> PublishResult:
        cfg = self.config
        target = subscriber.full_name
        started = self.clock()

        def result(status: PublishStatus, **kwargs) -> PublishResult:
            elapsed_ms = int((self.clock() - started) * 1000)
            return PublishResult(subscriber, status, duration_ms=elapsed_ms, **kwargs)

        logger.info(f"Processing {target} (directory {subscriber.target_directory})")

        if cfg.dry_run:
            logger.info(f"DRY-RUN: would sync {subscriber.target_directory} into {target}")
            return result(PublishStatus.SKIPPED, error_message="dry-run mode")

        api = self._target_api()

        # A failed analysis stops the whole run, unlike every other step below.
        try:
            analysis = analyze_project(
                api, subscriber.organization, subscriber.repository, subscriber.target_branch
            )
        except HostAPIError as e:
            raise ProjectLayoutError(f"layout analysis of {target} failed: {e}") from e

        if not analysis:
            logger.error(f"{target}: project layout not recognized, skipping")
            return result(
                PublishStatus.SKIPPED, error_message="project layout not recognized"
            )

        target_project = analysis[0]
        extension_name = subscriber.target_directory
        version = release.tag_name or cfg.release_tag

        sync = sync_extension(
            api,
            subscriber,
            source_owner=cfg.source.owner,
            source_repo=cfg.source.repo,
            source_dir=f"{source_project}.{subscriber.target_directory}",
            source_ref=cfg.source.ref or cfg.release_tag,
            target_dir=f"{target_project}.{subscriber.target_directory}",
            extension_name=extension_name,
            version=version,
            author=cfg.commit_author,
        )
        if sync.error is not None:
            return result(PublishStatus.FAILED, sync_result=sync, error_message=str(sync.error))

        logger.info(
            f"{target}: branch {sync.new_branch}, {sync.files_created} written, "
            f"{sync.files_deleted} deleted"
        )

        try:
            pr = open_proposal(
                api,
                subscriber.organization,
                subscriber.repository,
                head=sync.new_branch,
                base=subscriber.target_branch,
                extension_name=extension_name,
                release=release,
                source_repo=f"{cfg.source.owner}/{cfg.source.repo}",
                release_url=self.release_url(release),
            )
        except HostAPIError as e:
            logger.error(f"{target}: pull request failed: {e}")
            return result(
                PublishStatus.FAILED,
                sync_result=sync,
                error_message=f"pull request failed: {e}",
            )

        return result(
            PublishStatus.SUCCESS,
            sync_result=sync,
            pr_number=pr.number,
            pr_url=pr.html_url,
        )
