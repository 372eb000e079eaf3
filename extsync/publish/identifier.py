"""Encode and decode subscription identifiers.

An identifier has the form ``{org}_{repo}_{extension_path}`` where every ``/``
of the extension path is written as ``_``. Decoding turns every ``_`` after
the repository back into ``/``, so a path segment that itself contains ``_``
does not survive a round trip.
"""

from __future__ import annotations

from typing import NamedTuple

from ..errors import InvalidIdentifierError

SEPARATOR = "_"


class SubscriptionIdentifier(NamedTuple):
    """Decoded subscription identifier."""

    org: str
    repo: str
    extension_path: str

    def __str__(self) -> str:
        return encode(self.org, self.repo, self.extension_path)


def encode(org: str, repo: str, extension_path: str) -> str:
    """Build the identifier a subscriber lists in its manifest."""
    escaped = extension_path.replace("/", SEPARATOR)
    return SEPARATOR.join((org, repo, escaped))


def decode(identifier: str) -> SubscriptionIdentifier:
    """Split an identifier into organization, repository and extension path.

    Raises:
        InvalidIdentifierError: If fewer than three non-empty parts are found.
    """
    parts = identifier.split(SEPARATOR, 2)
    if len(parts) < 3:
        raise InvalidIdentifierError(identifier, "expected {org}_{repo}_{path}")

    org, repo, rest = parts
    extension_path = rest.replace(SEPARATOR, "/")
    if not org or not repo or not extension_path:
        raise InvalidIdentifierError(identifier, "empty component")

    return SubscriptionIdentifier(org, repo, extension_path)
