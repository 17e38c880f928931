# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
import logging
import os
from collections.abc import Mapping, MutableMapping
from pathlib import Path
from typing import Any, Final

from .._identity import AWSCredentialIdentity
from ..config import (
    ACCESS_KEY_ID,
    DEFAULT_REGION,
    SECRET_ACCESS_KEY,
    SESSION_TOKEN,
    SOURCE_DEFAULT,
    CredentialsConfig,
)
from ..credentials_file import CredentialStore, read_credentials
from ..exceptions import (
    CredentialsFileNotFoundError,
    CredentialsNotFoundError,
    IdentityError,
)
from .environment import apply_to_environment

logger: Final = logging.getLogger(__name__)


def _lookup(values: Mapping[str, str], prefix: str, *names: str) -> str | None:
    # Profiles may spell keys with or without the variable prefix.
    for name in names:
        for key in (f"{prefix}{name}", name):
            if values.get(key):
                return values[key]
    return None


def credentials_from_profile(
    values: Mapping[str, str], *, prefix: str = "AWS_"
) -> AWSCredentialIdentity | None:
    """Build credentials from the keys of one profile.

    Returns ``None`` when the profile lacks an access key or a secret key.
    """
    access_key_id = _lookup(values, prefix, ACCESS_KEY_ID)
    secret_access_key = _lookup(values, prefix, SECRET_ACCESS_KEY)
    if access_key_id is None or secret_access_key is None:
        return None
    return AWSCredentialIdentity(
        access_key_id=access_key_id,
        secret_access_key=secret_access_key,
        session_token=_lookup(values, prefix, SESSION_TOKEN, "SECURITY_TOKEN"),
        region=_lookup(values, prefix, DEFAULT_REGION, "REGION"),
    )


class ProfileCredentialsResolver:
    """Resolves AWS Credentials from a profile in the shared credentials file.

    A missing file at the default location makes this source unavailable so
    resolution can move on; a missing file at a location the caller chose is an
    error. Malformed files always raise :py:class:`ParseError`.

    :param profile: Name of the profile, the configured profile by default.
    :param path: Location of the credentials file, the configured one by default.
    :param config: Settings used for anything not passed explicitly.
    """

    def __init__(
        self,
        *,
        profile: str | None = None,
        path: str | os.PathLike[str] | None = None,
        config: CredentialsConfig | None = None,
    ):
        self._config = config or CredentialsConfig()
        self._profile = profile
        self._path = Path(path).expanduser() if path is not None else None

    @property
    def profile(self) -> str:
        return self._profile or self._config.profile

    @property
    def path(self) -> Path:
        return self._path or self._config.shared_credentials_file

    def _path_is_explicit(self) -> bool:
        if self._path is not None:
            return True
        source = self._config.get_config_value_object("shared_credentials_file").source
        return source != SOURCE_DEFAULT

    def get_identity(self, *, properties: Mapping[str, Any]) -> AWSCredentialIdentity:
        try:
            store = read_credentials(self.path)
        except CredentialsFileNotFoundError as e:
            if self._path_is_explicit():
                raise
            raise IdentityError(f"No credentials file at {self.path}.") from e

        if self.profile not in store:
            raise IdentityError(
                f"Profile {self.profile!r} was not found in credentials file "
                f"{self.path}."
            )

        credentials = credentials_from_profile(
            store[self.profile], prefix=self._config.env_prefix
        )
        if credentials is None:
            raise IdentityError(
                f"Profile {self.profile!r} in {self.path} does not contain both an "
                "access key and a secret key."
            )
        logger.info("Found credentials in shared credentials file: %s", self.path)
        return credentials


def use_credentials(
    profile: str | None = None,
    store: CredentialStore | str | os.PathLike[str] | None = None,
    *,
    config: CredentialsConfig | None = None,
    environ: MutableMapping[str, str] | None = None,
) -> CredentialStore:
    """Install the credentials of one profile into the environment.

    :param profile: Profile to use, the configured profile by default.
    :param store: An already parsed store, or the path of a credentials file. The
        configured file is read by default.
    :param config: Settings for the profile name, file location and prefix.
    :param environ: Mapping to write to, ``os.environ`` by default.
    :returns: The credential store the profile was taken from.
    :raises CredentialsNotFoundError: If the profile has no access and secret key.
    """
    config = config or CredentialsConfig()
    profile = profile or config.profile
    if not isinstance(store, CredentialStore):
        store = read_credentials(store, config=config)

    credentials = None
    if profile in store:
        credentials = credentials_from_profile(store[profile], prefix=config.env_prefix)
    if credentials is None:
        raise CredentialsNotFoundError(
            f"Profile {profile!r} does not contain an access key and a secret key."
        )
    apply_to_environment(credentials, environ, prefix=config.env_prefix)
    return store
