# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
from collections.abc import Mapping
from typing import Any

from .._identity import AWSCredentialIdentity
from ..exceptions import IdentityError


class StaticCredentialsResolver:
    """Resolve credentials supplied directly by the caller.

    Credentials passed to the constructor take the place of the ``access_key_id``
    and ``secret_access_key`` properties of the request. Either way both must be
    present.
    """

    def __init__(self, *, credentials: AWSCredentialIdentity | None = None) -> None:
        self._credentials = credentials

    def get_identity(self, *, properties: Mapping[str, Any]) -> AWSCredentialIdentity:
        credentials = self._credentials
        if credentials is None and properties.get("access_key_id"):
            credentials = AWSCredentialIdentity(
                access_key_id=properties["access_key_id"],
                secret_access_key=properties.get("secret_access_key") or "",
                session_token=properties.get("session_token") or None,
                region=properties.get("region") or None,
            )

        if (
            credentials is None
            or not credentials.access_key_id
            or not credentials.secret_access_key
        ):
            raise IdentityError(
                "Attempted to resolve AWS credentials from explicit arguments, but "
                "an access key and secret key weren't both supplied."
            )
        return credentials
