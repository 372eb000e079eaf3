"""Tests for publish reports."""

import json
from datetime import datetime, timedelta, timezone

import pytest

from extsync.errors import InvalidStateError, PublishFailedError
from extsync.models import SubscribedRepository
from extsync.publish.report import (
    PublishReport,
    PublishResult,
    PublishStatus,
    SyncResult,
    render_report,
)


def _sub(name):
    return SubscribedRepository("acme", name, "main", "utils")


def _report():
    report = PublishReport(extension_name="ssl", version="v1.2.0", source_repo="lib/ssl")
    ok = _sub("ok")
    sync = SyncResult(ok, files_created=3, files_deleted=1, new_branch="update-utils-1.2.0",
                      commit_sha="abc")
    report.add(PublishResult(ok, PublishStatus.SUCCESS, sync_result=sync, pr_number=7,
                             pr_url="https://git/acme/ok/pulls/7"))
    report.add(PublishResult(_sub("bad"), PublishStatus.FAILED, error_message="boom"))
    report.add(PublishResult(_sub("dry"), PublishStatus.SKIPPED, error_message="dry-run mode"))
    return report


def test_counts_are_derived_from_results():
    report = _report()
    assert (report.success_count, report.failed_count, report.skipped_count) == (1, 1, 1)
    assert report.has_errors


def test_no_errors_without_failures():
    report = PublishReport(extension_name="ssl", version="v1", source_repo="lib/ssl")
    report.add(PublishResult(_sub("a"), PublishStatus.SKIPPED))
    assert not report.has_errors


def test_finalized_report_rejects_results():
    report = _report()
    report.finalize()
    with pytest.raises(InvalidStateError):
        report.add(PublishResult(_sub("late"), PublishStatus.SUCCESS))
    with pytest.raises(InvalidStateError):
        report.finalize()


def test_total_duration():
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    report = PublishReport(extension_name="ssl", version="v1", source_repo="lib/ssl",
                           start_time=start)
    report.finalize(start + timedelta(seconds=5))
    assert report.total_duration == timedelta(seconds=5)


def test_json_rendering():
    report = _report()
    report.finalize()

    data = json.loads(render_report(report, as_json=True))

    assert data["summary"] == {"total": 3, "success": 1, "failed": 1, "skipped": 1}
    first = data["results"][0]
    assert first["status"] == "success"
    assert first["pr_number"] == 7
    assert first["files_created"] == 3
    assert first["subscriber"]["repository"] == "ok"
    assert data["results"][1]["error"] == "boom"


def test_text_rendering():
    report = _report()
    report.finalize()

    text = render_report(report)

    assert "EXTENSION PUBLISH REPORT" in text
    assert "✓ SUCCESS (1)" in text
    assert "acme/ok → PR #7 (https://git/acme/ok/pulls/7)" in text
    assert "✗ FAILED (1)" in text
    assert "acme/bad: boom" in text
    assert "○ SKIPPED (1)" in text
    assert "SUMMARY: 1 success, 1 failed, 1 skipped" in text


def test_text_rendering_omits_empty_sections():
    report = PublishReport(extension_name="ssl", version="v1", source_repo="lib/ssl")
    report.finalize()
    text = render_report(report)
    assert "SUCCESS (" not in text
    assert "SUMMARY: 0 success, 0 failed, 0 skipped" in text


def test_publish_failed_error_message():
    report = _report()
    error = PublishFailedError(report)
    assert str(error) == "publish finished with 1 failure(s) out of 3 subscriber(s)"
    assert error.report is report
