# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
import dataclasses
import logging
import os
from collections.abc import Mapping, Sequence
from typing import Any, Final

from .._identity import AWSCredentialIdentity, AWSIdentityProperties
from ..config import SOURCE_ENVIRONMENT, CredentialsConfig
from ..exceptions import CredentialsNotFoundError, IdentityError
from ..interfaces.identity import IdentityResolver, InstanceMetadataProvider
from .environment import EnvironmentCredentialsResolver
from .instance_metadata import InstanceMetadataCredentialsResolver
from .profile import ProfileCredentialsResolver
from .static import StaticCredentialsResolver

logger: Final = logging.getLogger(__name__)


class CredentialsResolverChain:
    """Attempts to resolve credentials by checking a sequence of sub-resolvers.

    If a nested resolver raises an :py:class:`IdentityError`, the next resolver in
    the chain will be attempted. Any other exception ends resolution.
    """

    def __init__(self, resolvers: Sequence[IdentityResolver]) -> None:
        """Construct a CredentialsResolverChain.

        :param resolvers: The sequence of resolvers to resolve credentials from,
            highest precedence first.
        """
        self._resolvers = tuple(resolvers)

    @property
    def resolvers(self) -> tuple[IdentityResolver, ...]:
        return self._resolvers

    def get_identity(self, *, properties: Mapping[str, Any]) -> AWSCredentialIdentity:
        logger.debug("Attempting to resolve credentials from resolver chain.")
        for resolver in self._resolvers:
            name = type(resolver).__name__
            try:
                logger.debug("Attempting to resolve credentials from %s.", name)
                return resolver.get_identity(properties=properties)
            except IdentityError as e:
                logger.debug("Failed to resolve credentials from %s: %s", name, e)

        raise CredentialsNotFoundError(
            "None of the configured credentials sources were able to resolve "
            "credentials."
        )


def create_default_chain(
    *,
    credentials: AWSCredentialIdentity | None = None,
    profile: str | None = None,
    store_path: str | os.PathLike[str] | None = None,
    metadata_provider: InstanceMetadataProvider | None = None,
    config: CredentialsConfig | None = None,
) -> CredentialsResolverChain:
    """Creates the default credential resolver chain.

    Precedence is explicit arguments, then environment variables, then the shared
    credentials file, then instance metadata when a provider is given.
    """
    config = config or CredentialsConfig()
    resolvers: list[IdentityResolver] = [
        StaticCredentialsResolver(credentials=credentials),
        EnvironmentCredentialsResolver(config=config),
        ProfileCredentialsResolver(profile=profile, path=store_path, config=config),
    ]
    if metadata_provider is not None:
        resolvers.append(InstanceMetadataCredentialsResolver(metadata_provider))
    return CredentialsResolverChain(resolvers)


def resolve_credentials(
    explicit: AWSIdentityProperties | AWSCredentialIdentity | None = None,
    profile: str | None = None,
    store_path: str | os.PathLike[str] | None = None,
    *,
    metadata_provider: InstanceMetadataProvider | None = None,
    region: str | None = None,
    config: CredentialsConfig | None = None,
    environ: Mapping[str, str] | None = None,
) -> AWSCredentialIdentity:
    """Resolve the credentials to sign with.

    Sources are tried in a fixed order: ``explicit`` when it holds both an access
    key and a secret key, the environment, ``profile`` in the credentials file at
    ``store_path``, and finally ``metadata_provider``. Resolution never writes to
    the environment; see :py:func:`apply_to_environment` for that.

    :param explicit: Credential values supplied by the caller.
    :param profile: Profile to read from the credentials file.
    :param store_path: Location of the credentials file.
    :param metadata_provider: Source of instance metadata credentials.
    :param region: Region that overrides whatever the winning source provides. When
        neither it nor the source names a region, a ``default_region`` passed to
        ``config`` is used.
    :param config: Settings for the profile, file location and variable prefix.
    :param environ: Environment to read from when no ``config`` is given.
    :raises CredentialsNotFoundError: If no source yields an access and secret key.
    :raises CredentialsFileNotFoundError: If an explicitly chosen credentials file
        does not exist.
    :raises ParseError: If the credentials file is malformed.
    """
    if config is None:
        config = CredentialsConfig(environ=environ)

    explicit_credentials = None
    properties = AWSIdentityProperties()
    if isinstance(explicit, AWSCredentialIdentity):
        explicit_credentials = explicit
    elif explicit is not None:
        properties = AWSIdentityProperties(**explicit)

    chain = create_default_chain(
        credentials=explicit_credentials,
        profile=profile,
        store_path=store_path,
        metadata_provider=metadata_provider,
        config=config,
    )
    credentials = chain.get_identity(properties=properties)

    # The environment region only applies to environment credentials, which
    # already carry it.
    default_region = None
    if config.get_config_value_object("default_region").source != SOURCE_ENVIRONMENT:
        default_region = config.default_region
    resolved_region = region or credentials.region or default_region
    if resolved_region != credentials.region:
        credentials = dataclasses.replace(credentials, region=resolved_region)
    return credentials
