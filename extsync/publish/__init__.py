"""Extension publishing: discovery, reconciliation, commit and pull request."""

from .committer import branch_name, commit_changes, commit_message
from .discovery import find_subscribers, parse_manifest
from .identifier import SubscriptionIdentifier, decode, encode
from .layout import analyze_directories, analyze_project
from .orchestrator import ExtensionPublisher, validate_config
from .planner import ChangePlan, plan_changes
from .proposal import open_proposal
from .report import (
    PublishReport,
    PublishResult,
    PublishStatus,
    SyncResult,
    render_report,
)
from .snapshot import read_source_tree, read_target_map
from .sync import sync_extension

__all__ = [
    "ChangePlan",
    "ExtensionPublisher",
    "PublishReport",
    "PublishResult",
    "PublishStatus",
    "SubscriptionIdentifier",
    "SyncResult",
    "analyze_directories",
    "analyze_project",
    "branch_name",
    "commit_changes",
    "commit_message",
    "decode",
    "encode",
    "find_subscribers",
    "open_proposal",
    "parse_manifest",
    "plan_changes",
    "read_source_tree",
    "read_target_map",
    "render_report",
    "sync_extension",
    "validate_config",
]
