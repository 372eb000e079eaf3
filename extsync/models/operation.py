"""File-level change operations applied in a single commit."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..errors import InvalidOperationError


class OperationKind(str, Enum):
    """Kind of change applied to one file."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class SourceFile:
    """File read from the source tree, path relative to the extension root."""

    path: str
    content: bytes


@dataclass(frozen=True)
class ChangeOperation:
    """One create/update/delete of a file at an absolute repository path.

    Update and delete carry the revision marker (blob sha) the target had when
    it was read, so the host can reject the commit if the file moved on.
    """

    kind: OperationKind
    path: str
    content: bytes | None = None
    sha: str | None = None

    def __post_init__(self) -> None:
        if self.kind is OperationKind.CREATE:
            if self.sha:
                raise InvalidOperationError(
                    f"create operation for {self.path} must not carry a sha"
                )
        elif not self.sha:
            raise InvalidOperationError(
                f"{self.kind.value} operation for {self.path} requires a sha"
            )
        if self.kind is not OperationKind.DELETE and self.content is None:
            raise InvalidOperationError(
                f"{self.kind.value} operation for {self.path} requires content"
            )

    @classmethod
    def create(cls, path: str, content: bytes) -> ChangeOperation:
        return cls(OperationKind.CREATE, path, content=content)

    @classmethod
    def update(cls, path: str, content: bytes, sha: str) -> ChangeOperation:
        return cls(OperationKind.UPDATE, path, content=content, sha=sha)

    @classmethod
    def delete(cls, path: str, sha: str) -> ChangeOperation:
        return cls(OperationKind.DELETE, path, sha=sha)
