"""Configuration module for extsync."""

from .loader import ConfigLoader, load_config
from .models import CommitIdentity, GiteaSettings, PublishConfig, SourceSettings

__all__ = [
    "CommitIdentity",
    "ConfigLoader",
    "GiteaSettings",
    "PublishConfig",
    "SourceSettings",
    "load_config",
]
