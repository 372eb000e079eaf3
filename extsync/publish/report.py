"""Per-subscriber outcomes of a publish run and their rendering."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from ..errors import InvalidStateError
from ..models import SubscribedRepository

HEAVY_RULE = "═" * 63
LIGHT_RULE = "─" * 61


class PublishStatus(str, Enum):
    """Outcome of publishing to one subscriber."""

    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class SyncResult:
    """Result of synchronizing files into one subscriber."""

    subscriber: SubscribedRepository
    files_created: int = 0  # files written from the source, creates and updates
    files_deleted: int = 0
    new_branch: str = ""
    commit_sha: str = ""
    error: Exception | None = None


@dataclass
class PublishResult:
    """Final outcome for one subscriber."""

    subscriber: SubscribedRepository
    status: PublishStatus
    sync_result: SyncResult | None = None
    pr_number: int | None = None
    pr_url: str | None = None
    error_message: str = ""
    duration_ms: int = 0

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "subscriber": self.subscriber.to_dict(),
            "status": self.status.value,
        }
        if self.sync_result is not None and self.sync_result.new_branch:
            data["branch"] = self.sync_result.new_branch
            if self.sync_result.commit_sha:
                data["commit_sha"] = self.sync_result.commit_sha
            data["files_created"] = self.sync_result.files_created
            data["files_deleted"] = self.sync_result.files_deleted
        if self.pr_number is not None:
            data["pr_number"] = self.pr_number
        if self.pr_url:
            data["pr_url"] = self.pr_url
        if self.error_message:
            data["error"] = self.error_message
        data["duration_ms"] = self.duration_ms
        return data


@dataclass
class PublishReport:
    """Ordered results of a publish run.

    Every counter is derived from ``results``. Once finalized the report
    rejects new results.
    """

    extension_name: str
    version: str
    source_repo: str
    start_time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    end_time: datetime | None = None
    results: list[PublishResult] = field(default_factory=list)

    @property
    def finalized(self) -> bool:
        return self.end_time is not None

    def add(self, result: PublishResult) -> None:
        if self.finalized:
            raise InvalidStateError("report is finalized")
        self.results.append(result)

    def finalize(self, end_time: datetime | None = None) -> None:
        if self.finalized:
            raise InvalidStateError("report is already finalized")
        self.end_time = end_time or datetime.now(timezone.utc)

    def _count(self, status: PublishStatus) -> int:
        return sum(1 for r in self.results if r.status is status)

    @property
    def success_count(self) -> int:
        return self._count(PublishStatus.SUCCESS)

    @property
    def failed_count(self) -> int:
        return self._count(PublishStatus.FAILED)

    @property
    def skipped_count(self) -> int:
        return self._count(PublishStatus.SKIPPED)

    @property
    def has_errors(self) -> bool:
        return self.failed_count > 0

    @property
    def total_duration(self) -> timedelta:
        end = self.end_time or datetime.now(timezone.utc)
        return end - self.start_time

    def with_status(self, status: PublishStatus) -> list[PublishResult]:
        return [r for r in self.results if r.status is status]

    def to_dict(self) -> dict[str, Any]:
        return {
            "extension_name": self.extension_name,
            "version": self.version,
            "source_repo": self.source_repo,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "results": [r.to_dict() for r in self.results],
            "summary": {
                "total": len(self.results),
                "success": self.success_count,
                "failed": self.failed_count,
                "skipped": self.skipped_count,
            },
        }


def render_json(report: PublishReport) -> str:
    return json.dumps(report.to_dict(), indent=2, ensure_ascii=False)


def render_text(report: PublishReport) -> str:
    """Human-readable report grouped by status."""
    lines = [
        HEAVY_RULE,
        "               EXTENSION PUBLISH REPORT",
        HEAVY_RULE,
        f"Extension: {report.extension_name}",
        f"Version:   {report.version}",
        f"Source:    {report.source_repo}",
        f"Duration:  {report.total_duration.total_seconds():.1f}s",
        "",
    ]

    sections = [
        (PublishStatus.SUCCESS, "✓ SUCCESS"),
        (PublishStatus.FAILED, "✗ FAILED"),
        (PublishStatus.SKIPPED, "○ SKIPPED"),
    ]
    for status, heading in sections:
        results = report.with_status(status)
        if not results:
            continue
        lines += [LIGHT_RULE, f"{heading} ({len(results)})", LIGHT_RULE]
        for r in results:
            target = r.subscriber.full_name
            if status is PublishStatus.SUCCESS:
                lines.append(f"  • {target} → PR #{r.pr_number} ({r.pr_url})")
            elif status is PublishStatus.FAILED:
                lines.append(f"  • {target}: {r.error_message or 'unknown error'}")
            else:
                lines.append(f"  • {target}: {r.error_message or 'dry-run mode'}")
        lines.append("")

    lines += [
        HEAVY_RULE,
        f"SUMMARY: {report.success_count} success, {report.failed_count} failed, "
        f"{report.skipped_count} skipped",
        HEAVY_RULE,
    ]
    return "\n".join(lines)


def render_report(report: PublishReport, as_json: bool = False) -> str:
    """Render the report as JSON or as grouped text."""
    if as_json:
        return render_json(report)
    return render_text(report)
