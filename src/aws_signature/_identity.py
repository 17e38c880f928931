# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

from dataclasses import dataclass
from datetime import datetime
from typing import TypedDict

from .interfaces.identity import AWSCredentialsIdentity


@dataclass(kw_only=True, frozen=True)
class AWSCredentialIdentity(AWSCredentialsIdentity):
    access_key_id: str
    secret_access_key: str
    session_token: str | None = None
    region: str | None = None
    expiration: datetime | None = None

    def __repr__(self) -> str:
        # Never render the secret or token.
        return (
            f"AWSCredentialIdentity(access_key_id={self.access_key_id!r}, "
            f"region={self.region!r}, expiration={self.expiration!r})"
        )


class AWSIdentityProperties(TypedDict, total=False):
    """Explicitly supplied credential values, the highest precedence source."""

    access_key_id: str | None
    secret_access_key: str | None
    session_token: str | None
    region: str | None
