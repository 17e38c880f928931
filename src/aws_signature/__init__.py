# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""AWS Signature provides stand-alone SigV4 and SigV2 request signing together with
resolution of the credentials to sign with, for use with any HTTP tool."""

from __future__ import annotations

from ._http import URI, AWSRequest
from ._identity import AWSCredentialIdentity, AWSIdentityProperties
from .config import CredentialsConfig
from .credentials_file import (
    CredentialStore,
    parse_credentials,
    read_credentials,
    serialize_credentials,
)
from .credentials_resolvers import (
    apply_to_environment,
    credentials_from_metadata,
    export,
    resolve_credentials,
    use_credentials,
)
from .signers import (
    SigV2Result,
    SigV2Signer,
    SigV4Result,
    SigV4Signer,
    SigV4SigningProperties,
    sign_v2,
    sign_v4,
)

__license__ = "Apache-2.0"
__version__ = "0.1.0"

__all__ = (
    "URI",
    "AWSCredentialIdentity",
    "AWSIdentityProperties",
    "AWSRequest",
    "CredentialStore",
    "CredentialsConfig",
    "SigV2Result",
    "SigV2Signer",
    "SigV4Result",
    "SigV4Signer",
    "SigV4SigningProperties",
    "apply_to_environment",
    "credentials_from_metadata",
    "export",
    "parse_credentials",
    "read_credentials",
    "resolve_credentials",
    "serialize_credentials",
    "sign_v2",
    "sign_v4",
    "use_credentials",
)
