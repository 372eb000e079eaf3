"""Subscription manifest and subscriber models."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, Field


class SubscriptionManifest(BaseModel):
    """Contents of ``project.yaml`` in a subscribing repository."""

    subscriptions: list[str] = Field(default_factory=list)


@dataclass(frozen=True)
class SubscribedRepository:
    """Repository that subscribed to an extension of the source repository."""

    organization: str
    repository: str
    target_branch: str
    target_directory: str  # unescaped extension path, e.g. "cfe/utils"
    subscription_id: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.organization}/{self.repository}"

    def to_dict(self) -> dict:
        return {
            "organization": self.organization,
            "repository": self.repository,
            "target_branch": self.target_branch,
            "target_directory": self.target_directory,
        }
