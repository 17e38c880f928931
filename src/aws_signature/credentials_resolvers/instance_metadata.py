# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any, Final

from .._identity import AWSCredentialIdentity
from ..exceptions import IdentityError
from ..interfaces.identity import InstanceMetadataProvider

logger: Final = logging.getLogger(__name__)


def credentials_from_metadata(
    document: Mapping[str, Any], *, region: str | None = None
) -> AWSCredentialIdentity:
    """Map an instance metadata credentials document to credentials.

    The document is the JSON object served under
    ``/latest/meta-data/iam/security-credentials/<role>``.
    """
    code = document.get("Code")
    if code is not None and code != "Success":
        raise IdentityError(f"Instance metadata reported credentials status {code!r}.")

    access_key_id = document.get("AccessKeyId")
    secret_access_key = document.get("SecretAccessKey")
    if not access_key_id or not secret_access_key:
        raise IdentityError("AccessKeyId and SecretAccessKey are required")

    expiration = document.get("Expiration")
    if isinstance(expiration, str):
        try:
            expiration = datetime.fromisoformat(expiration)
        except ValueError as e:
            raise IdentityError(
                f"Instance metadata returned an invalid Expiration: {expiration!r}"
            ) from e
        if expiration.tzinfo is None:
            expiration = expiration.replace(tzinfo=UTC)
        else:
            expiration = expiration.astimezone(UTC)

    return AWSCredentialIdentity(
        access_key_id=access_key_id,
        secret_access_key=secret_access_key,
        session_token=document.get("Token"),
        region=region,
        expiration=expiration,
    )


class InstanceMetadataCredentialsResolver:
    """Resolves AWS Credentials from an instance metadata provider.

    The provider owns all network access. A provider that reports no credentials,
    or credentials lacking a key, makes this source unavailable.
    """

    def __init__(self, provider: InstanceMetadataProvider):
        self._provider = provider

    def get_identity(self, *, properties: Mapping[str, Any]) -> AWSCredentialIdentity:
        credentials = self._provider.fetch_current_credentials()
        if credentials is None:
            raise IdentityError("Instance metadata credentials are unavailable.")
        if not credentials.access_key_id or not credentials.secret_access_key:
            raise IdentityError(
                "Instance metadata returned credentials without an access key and "
                "secret key."
            )
        logger.info("Found credentials from instance metadata.")
        return credentials
