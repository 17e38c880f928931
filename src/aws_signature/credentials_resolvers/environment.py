# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
import logging
import os
from collections.abc import Mapping, MutableMapping
from typing import Any, Final

from .._identity import AWSCredentialIdentity
from ..config import (
    ACCESS_KEY_ID,
    DEFAULT_ENV_PREFIX,
    DEFAULT_REGION,
    SECRET_ACCESS_KEY,
    SESSION_TOKEN,
    CredentialsConfig,
)
from ..exceptions import IdentityError
from ..interfaces.identity import AWSCredentialsIdentity

logger: Final = logging.getLogger(__name__)


class EnvironmentCredentialsResolver:
    """Resolves AWS Credentials from system environment variables.

    The variables are only consulted when the access key variable is non-empty, and
    a secret key must accompany it. Nothing is cached; every call reads the
    environment again.
    """

    def __init__(self, *, config: CredentialsConfig | None = None):
        self._config = config or CredentialsConfig()

    def get_identity(self, *, properties: Mapping[str, Any]) -> AWSCredentialIdentity:
        config = self._config
        access_key_id = config.getenv(ACCESS_KEY_ID)
        secret_access_key = config.getenv(SECRET_ACCESS_KEY)

        if access_key_id is None or secret_access_key is None:
            raise IdentityError(
                f"{config.env_var(ACCESS_KEY_ID)} and "
                f"{config.env_var(SECRET_ACCESS_KEY)} are required"
            )

        logger.info("Found credentials in environment variables.")
        return AWSCredentialIdentity(
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            session_token=config.getenv(SESSION_TOKEN),
            region=config.getenv(DEFAULT_REGION),
        )


def export(
    credentials: AWSCredentialsIdentity, *, prefix: str = DEFAULT_ENV_PREFIX
) -> dict[str, str]:
    """Snapshot credentials as environment variables.

    Nothing is written anywhere; the caller decides whether to install the result,
    for example with :py:func:`apply_to_environment`. Absent optional values are
    left out.
    """
    snapshot = {
        f"{prefix}{ACCESS_KEY_ID}": credentials.access_key_id,
        f"{prefix}{SECRET_ACCESS_KEY}": credentials.secret_access_key,
    }
    if credentials.session_token:
        snapshot[f"{prefix}{SESSION_TOKEN}"] = credentials.session_token
    if credentials.region:
        snapshot[f"{prefix}{DEFAULT_REGION}"] = credentials.region
    return snapshot


def apply_to_environment(
    credentials: AWSCredentialsIdentity,
    environ: MutableMapping[str, str] | None = None,
    *,
    prefix: str = DEFAULT_ENV_PREFIX,
) -> dict[str, str]:
    """Install credentials into an environment mapping, ``os.environ`` by default.

    ``os.environ`` is shared by the whole process and is not locked; concurrent
    callers signing with different credentials should pass credentials explicitly
    instead. A session token left over from earlier credentials is removed so it
    never pairs with new keys.

    :returns: The variables that were written.
    """
    if environ is None:
        environ = os.environ
    snapshot = export(credentials, prefix=prefix)
    if f"{prefix}{SESSION_TOKEN}" not in snapshot:
        environ.pop(f"{prefix}{SESSION_TOKEN}", None)
    environ.update(snapshot)
    logger.debug("Applied credentials to environment: %s", sorted(snapshot))
    return snapshot
