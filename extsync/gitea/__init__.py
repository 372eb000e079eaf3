"""Hosting API integration (Gitea REST API)."""

from .client import GiteaClient
from .interfaces import HostAPI

__all__ = [
    "GiteaClient",
    "HostAPI",
]
