# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .._identity import AWSCredentialIdentity


@runtime_checkable
class Identity(Protocol):
    """An entity available to the client representing who the user is."""

    expiration: datetime | None = None
    """The expiration time of the identity.

    If time zone is provided, it is updated to UTC. The value must always be in UTC.
    """

    @property
    def is_expired(self) -> bool:
        """Whether the identity is expired."""
        if self.expiration is None:
            return False
        return datetime.now(tz=UTC) >= self.expiration


@runtime_checkable
class AWSCredentialsIdentity(Identity, Protocol):
    """AWS Credentials Identity."""

    access_key_id: str
    """A unique identifier for an AWS user or role."""

    secret_access_key: str
    """A secret key used in conjunction with the access key ID to authenticate
    programmatic access to AWS services."""

    session_token: str | None = None
    """A temporary token used to specify the current session for the supplied
    credentials."""

    region: str | None = None
    """The default region associated with the credentials, if the source had one."""


@runtime_checkable
class IdentityResolver(Protocol):
    """Used to load a user's `AWSCredentialIdentity` from a given source.

    Each source raises :py:class:`aws_signature.exceptions.IdentityError` when it
    cannot produce credentials so that a chain can move on to the next source.
    """

    def get_identity(self, *, properties: Mapping[str, Any]) -> AWSCredentialIdentity:
        """Load the user's identity from this resolver.

        :param properties: Properties used to help determine the identity to return.
        :returns: An identity resolved from the resolver's source.
        """
        ...


@runtime_checkable
class InstanceMetadataProvider(Protocol):
    """Opaque access to credentials served by a compute instance's metadata service.

    Implementations perform their own I/O; returning ``None`` signals that no
    credentials are available.
    """

    def fetch_current_credentials(self) -> AWSCredentialIdentity | None: ...
