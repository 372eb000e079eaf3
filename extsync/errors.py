"""Exception hierarchy for extsync."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .publish.report import PublishReport


class ExtSyncError(Exception):
    """Base class for all extsync errors."""


class ConfigurationError(ExtSyncError):
    """Required configuration is missing or malformed."""


class InvalidIdentifierError(ExtSyncError):
    """Subscription identifier cannot be decoded."""

    def __init__(self, identifier: str, reason: str):
        super().__init__(f"invalid subscription identifier {identifier!r}: {reason}")
        self.identifier = identifier


class HostAPIError(ExtSyncError):
    """Request to the hosting API failed."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class NotFoundError(HostAPIError):
    """Requested object does not exist on the host (HTTP 404)."""


class ConflictError(HostAPIError):
    """Host rejected a write because of a conflicting state (HTTP 409/422)."""


class ManifestError(ExtSyncError):
    """Subscription manifest exists but cannot be parsed."""

    def __init__(self, repository: str, reason: str):
        super().__init__(f"malformed manifest in {repository}: {reason}")
        self.repository = repository


class EmptySourceTreeError(ExtSyncError):
    """Source directory is empty or missing, so there is nothing to publish."""

    def __init__(self, directory: str):
        super().__init__(f"source directory {directory!r} is empty or does not exist")
        self.directory = directory


class ProjectLayoutError(ExtSyncError):
    """Repository root does not describe a recognizable project layout."""


class InvalidOperationError(ExtSyncError):
    """Change operation violates its own invariants, e.g. an update without a sha."""


class CommitError(ExtSyncError):
    """Change set could not be committed."""


class InvalidStateError(ExtSyncError):
    """Operation is not allowed in the current state."""


class PublishFailedError(ExtSyncError):
    """At least one subscriber failed during a publish run."""

    def __init__(self, report: PublishReport):
        super().__init__(
            f"publish finished with {report.failed_count} failure(s) "
            f"out of {len(report.results)} subscriber(s)"
        )
        self.report = report
