# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
from .chain import CredentialsResolverChain, create_default_chain, resolve_credentials
from .environment import EnvironmentCredentialsResolver, apply_to_environment, export
from .instance_metadata import (
    InstanceMetadataCredentialsResolver,
    credentials_from_metadata,
)
from .profile import (
    ProfileCredentialsResolver,
    credentials_from_profile,
    use_credentials,
)
from .static import StaticCredentialsResolver

__all__ = (
    "CredentialsResolverChain",
    "EnvironmentCredentialsResolver",
    "InstanceMetadataCredentialsResolver",
    "ProfileCredentialsResolver",
    "StaticCredentialsResolver",
    "apply_to_environment",
    "create_default_chain",
    "credentials_from_metadata",
    "credentials_from_profile",
    "export",
    "resolve_credentials",
    "use_credentials",
)
