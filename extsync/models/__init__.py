"""Data models for extsync."""

from .host import (
    ContentEntry,
    Organization,
    PullRequest,
    Release,
    ReleaseAsset,
    Repository,
)
from .operation import ChangeOperation, OperationKind, SourceFile
from .subscription import SubscribedRepository, SubscriptionManifest

__all__ = [
    "ChangeOperation",
    "ContentEntry",
    "OperationKind",
    "Organization",
    "PullRequest",
    "Release",
    "ReleaseAsset",
    "Repository",
    "SourceFile",
    "SubscribedRepository",
    "SubscriptionManifest",
]
