# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
# ruff: noqa: S101
import base64
import datetime
import hmac
import logging
import re
import warnings
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, replace
from hashlib import sha256
from typing import Final, Required, TypeAlias, TypedDict
from urllib.parse import parse_qsl

from . import canonical
from ._http import AWSRequest, FieldValue
from .canonical import CanonicalRequest
from .exceptions import AWSSignatureWarning, SigningError
from .interfaces.identity import AWSCredentialsIdentity as _AWSCredentialsIdentity
from .interfaces.identity import IdentityResolver
from .interfaces.io import Seekable

logger: Final = logging.getLogger(__name__)

SIGV4_TIMESTAMP_FORMAT: str = "%Y%m%dT%H%M%SZ"
SIGV4_TIMESTAMP_RE: Final = re.compile(r"\d{8}T\d{6}Z")
SIGV4_ALGORITHM: str = "AWS4-HMAC-SHA256"
SIGV4_TERMINATOR: str = "aws4_request"
SIGV2_TIMESTAMP_FORMAT: str = "%Y-%m-%dT%H:%M:%SZ"
SIGV2_SIGNATURE_METHOD: str = "HmacSHA256"

Credentials: TypeAlias = _AWSCredentialsIdentity | IdentityResolver
"""Either resolved credentials or a resolver that produces them on demand."""


class SigV4SigningProperties(TypedDict, total=False):
    region: Required[str]
    service: Required[str]
    date: str
    payload_signing_enabled: bool
    content_checksum_enabled: bool
    uri_encode_path: bool
    signed_headers: Sequence[str]


@dataclass(frozen=True)
class SigV4Result:
    """Everything produced while computing a SigV4 signature.

    ``headers`` holds the fields that must be added to the request for the
    signature to verify, including ``Authorization``.
    """

    signature: str
    authorization_header: str
    credential_scope: str
    signed_headers: tuple[str, ...]
    canonical_request: CanonicalRequest
    string_to_sign: str
    headers: dict[str, str]


@dataclass(frozen=True)
class SigV2Result:
    """Everything produced while computing a SigV2 signature.

    ``query_params`` holds the request's parameters with the authentication
    parameters and ``Signature`` added; ``query_string`` is their encoded form.
    """

    signature: str
    string_to_sign: str
    query_params: dict[str, str]
    query_string: str


def resolve_identity(credentials: Credentials) -> _AWSCredentialsIdentity:
    """Return credentials as-is, or ask a resolver for them."""
    if isinstance(credentials, _AWSCredentialsIdentity):  # pyright: ignore
        return credentials
    if isinstance(credentials, IdentityResolver):  # pyright: ignore
        return credentials.get_identity(properties={})
    raise SigningError(
        "Received unexpected value for credentials. Expected AWSCredentialIdentity "
        f"or an IdentityResolver but received {type(credentials)}."
    )


def _validate_identity(identity: _AWSCredentialsIdentity) -> None:
    """Perform runtime and expiration checks before attempting signing."""
    if not identity.secret_access_key:
        raise SigningError("Cannot sign a request with an empty secret access key.")
    if identity.is_expired:
        raise SigningError(
            f"Provided identity expired at {identity.expiration}. Please "
            "refresh the credentials or update the expiration parameter."
        )


def _utc(date: datetime.datetime) -> datetime.datetime:
    if date.tzinfo is None or date.utcoffset() is None:
        raise SigningError(
            f"Signing date {date!r} has no time zone. Pass a UTC datetime; local "
            "times produce signatures the service rejects."
        )
    return date.astimezone(datetime.UTC)


def _hmac(key: bytes, value: str) -> bytes:
    return hmac.new(key=key, msg=value.encode("utf-8"), digestmod=sha256).digest()


def _buffer_one_shot_body(request: AWSRequest) -> AWSRequest:
    body = request.body
    if isinstance(body, Iterator) and not isinstance(body, Seekable):
        warnings.warn(
            "Payload signing consumed a non-seekable body; it has been buffered in "
            "memory. This may result in decreased performance for large request "
            "bodies.",
            AWSSignatureWarning,
        )
        request.body = b"".join(body)
    return request


class SigV4Signer:
    """Request signer for applying the AWS Signature Version 4 algorithm.

    The signer holds no state between calls; the signing key is derived again for
    every request from the date, region, service and secret in use.
    """

    def sign(
        self,
        *,
        signing_properties: SigV4SigningProperties,
        http_request: AWSRequest,
        identity: Credentials,
    ) -> AWSRequest:
        """Generate and apply a SigV4 Signature to a copy of the supplied request.

        :param signing_properties: SigV4SigningProperties to define signing primitives
            such as the target service, region, and date.
        :param http_request: An AWSRequest to sign prior to sending to the service.
        :param identity: A set of credentials representing an AWS Identity or role
            capacity, or a resolver that provides them.
        """
        result, new_request = self._sign(
            signing_properties=signing_properties,
            http_request=http_request,
            identity=identity,
        )
        return new_request.with_headers(
            {"Authorization": result.authorization_header}
        )

    def signature(
        self,
        *,
        signing_properties: SigV4SigningProperties,
        http_request: AWSRequest,
        identity: Credentials,
    ) -> SigV4Result:
        """Compute the SigV4 signature for a request without modifying it.

        :returns: The signature, the ``Authorization`` header value, and the
            intermediate canonical request and string to sign.
        """
        result, _ = self._sign(
            signing_properties=signing_properties,
            http_request=http_request,
            identity=identity,
        )
        return result

    def _sign(
        self,
        *,
        signing_properties: SigV4SigningProperties,
        http_request: AWSRequest,
        identity: Credentials,
    ) -> tuple[SigV4Result, AWSRequest]:
        # Copy and prepopulate any missing values in the
        # supplied request and signing properties.
        resolved_identity = resolve_identity(identity)
        _validate_identity(resolved_identity)
        new_signing_properties = self._normalize_signing_properties(
            signing_properties=signing_properties
        )
        assert "date" in new_signing_properties

        required_fields = self._required_fields(
            request=http_request,
            signing_properties=new_signing_properties,
            identity=resolved_identity,
        )
        new_request = _buffer_one_shot_body(
            http_request.with_headers(required_fields)
        )
        if new_signing_properties.get("content_checksum_enabled", False):
            payload_hash = canonical.format_canonical_payload(
                new_request,
                payload_signing_enabled=new_signing_properties.get(
                    "payload_signing_enabled", True
                ),
            )
            required_fields["X-Amz-Content-SHA256"] = payload_hash
            new_request = new_request.with_headers(
                {"X-Amz-Content-SHA256": payload_hash}
            )

        # Construct core signing components
        canonical_request = self.canonical_request(
            signing_properties=new_signing_properties,
            request=new_request,
        )
        string_to_sign = self.string_to_sign(
            canonical_request=canonical_request,
            signing_properties=new_signing_properties,
        )
        signature = self._signature(
            string_to_sign=string_to_sign,
            secret_key=resolved_identity.secret_access_key,
            signing_properties=new_signing_properties,
        )

        credential_scope = self._scope(signing_properties=new_signing_properties)
        credential = f"{resolved_identity.access_key_id}/{credential_scope}"
        authorization = self.generate_authorization_field(
            credential=credential,
            signed_headers=list(canonical_request.signed_headers),
            signature=signature,
        )
        result = SigV4Result(
            signature=signature,
            authorization_header=authorization,
            credential_scope=credential_scope,
            signed_headers=canonical_request.signed_headers,
            canonical_request=canonical_request,
            string_to_sign=string_to_sign,
            headers={**required_fields, "Authorization": authorization},
        )
        return result, new_request

    def generate_authorization_field(
        self, *, credential: str, signed_headers: list[str], signature: str
    ) -> str:
        """Generate the value of the `Authorization` field.

        :param credential:
            Credential scope string for generating the Authorization header.
            Defined as:
                <access_key>/<date>/<region>/<service>/<request_type>
        :param signed_headers:
            A list of the field names used in signing.
        :param signature:
            Final hash of the SigV4 signing algorithm generated from the
            canonical request and string to sign.
        """
        signed_headers_str = ";".join(signed_headers)
        return (
            f"{SIGV4_ALGORITHM} Credential={credential}, "
            f"SignedHeaders={signed_headers_str}, Signature={signature}"
        )

    def signing_key(
        self, *, secret_key: str, signing_properties: SigV4SigningProperties
    ) -> bytes:
        """Derive the key scoped to the date, region and service being signed for.

        DateKey              = HMAC-SHA256("AWS4"+"<SecretAccessKey>", "<YYYYMMDD>")
        DateRegionKey        = HMAC-SHA256(<DateKey>, "<aws-region>")
        DateRegionServiceKey = HMAC-SHA256(<DateRegionKey>, "<aws-service>")
        SigningKey           = HMAC-SHA256(<DateRegionServiceKey>, "aws4_request")
        """
        if not secret_key:
            raise SigningError("Cannot derive a signing key from an empty secret.")
        assert "date" in signing_properties
        k_date = _hmac(
            key=f"AWS4{secret_key}".encode(), value=signing_properties["date"][0:8]
        )
        k_region = _hmac(key=k_date, value=signing_properties["region"])
        k_service = _hmac(key=k_region, value=signing_properties["service"])
        return _hmac(key=k_service, value=SIGV4_TERMINATOR)

    def _signature(
        self,
        *,
        string_to_sign: str,
        secret_key: str,
        signing_properties: SigV4SigningProperties,
    ) -> str:
        """Sign the string to sign.

        In SigV4, a signing key is created that is scoped to a specific region and
        service. The date, region, service and resulting signing key are individually
        hashed, then the composite hash is used to sign the string to sign.
        """
        k_signing = self.signing_key(
            secret_key=secret_key, signing_properties=signing_properties
        )
        return _hmac(key=k_signing, value=string_to_sign).hex()

    def _normalize_signing_properties(
        self, *, signing_properties: SigV4SigningProperties
    ) -> SigV4SigningProperties:
        # Create copy of signing properties to avoid mutating the original
        new_signing_properties = SigV4SigningProperties(**signing_properties)
        for name in ("region", "service"):
            if not new_signing_properties.get(name):
                raise SigningError(f"A {name} is required to sign a request.")
        if "date" not in new_signing_properties:
            date_obj = datetime.datetime.now(datetime.UTC)
            new_signing_properties["date"] = date_obj.strftime(SIGV4_TIMESTAMP_FORMAT)
        else:
            self._validate_date(new_signing_properties["date"])
        return new_signing_properties

    def _validate_date(self, date: str) -> None:
        message = (
            f"Signing date {date!r} is not a UTC timestamp of the form "
            "YYYYMMDDTHHMMSSZ."
        )
        # strptime alone accepts single-digit fields.
        if not isinstance(date, str) or not SIGV4_TIMESTAMP_RE.fullmatch(date):
            raise SigningError(message)
        try:
            datetime.datetime.strptime(date, SIGV4_TIMESTAMP_FORMAT)
        except ValueError as e:
            raise SigningError(message) from e

    def _required_fields(
        self,
        *,
        request: AWSRequest,
        signing_properties: SigV4SigningProperties,
        identity: _AWSCredentialsIdentity,
    ) -> dict[str, str]:
        fields: dict[str, str] = {}
        # Apply required X-Amz-Date if neither X-Amz-Date nor Date are present.
        if (
            request.get_header("Date") is None
            and request.get_header("X-Amz-Date") is None
        ):
            assert "date" in signing_properties
            fields["X-Amz-Date"] = signing_properties["date"]
        # Apply required X-Amz-Security-Token if token present on identity
        if (
            request.get_header("X-Amz-Security-Token") is None
            and identity.session_token is not None
        ):
            fields["X-Amz-Security-Token"] = identity.session_token
        return fields

    def canonical_request(
        self, *, signing_properties: SigV4SigningProperties, request: AWSRequest
    ) -> CanonicalRequest:
        """The canonical request is a standardized string laying out the components
        used in the SigV4 signing algorithm.

        :param signing_properties:
            SigV4SigningProperties to define signing primitives such as
            the target service, region, and date.
        :param request:
            An AWSRequest to use for generating a SigV4 signature.
        """
        canonical_request = canonical.canonical_request(
            request,
            signed_headers=signing_properties.get("signed_headers"),
            payload_signing_enabled=signing_properties.get(
                "payload_signing_enabled", True
            ),
            uri_encode_path=signing_properties.get("uri_encode_path", True),
        )
        logger.debug("Canonical request:\n%s", canonical_request)
        return canonical_request

    def string_to_sign(
        self,
        *,
        canonical_request: CanonicalRequest | str,
        signing_properties: SigV4SigningProperties,
    ) -> str:
        """The string to sign is the second step of our signing algorithm which
        concatenates the formal identifier of our signing algorithm, the signing
        DateTime, the scope of our credentials, and a hash of our previously generated
        canonical request. This is another checkpoint that can be used to ensure we're
        constructing our signature as intended.

        SigV4 defines the string to sign as:
            Algorithm \\n
            RequestDateTime \\n
            CredentialScope  \\n
            HashedCanonicalRequest

        :param canonical_request:
            Value generated from the `canonical_request` method.
        :param signing_properties:
            SigV4SigningProperties to define signing primitives such as
            the target service, region, and date.
        """
        date = signing_properties.get("date")
        if date is None:
            raise SigningError(
                "Cannot generate string_to_sign without a valid date "
                f"in your signing_properties. Current value: {date}"
            )
        self._validate_date(date)
        string_to_sign = (
            f"{SIGV4_ALGORITHM}\n"
            f"{date}\n"
            f"{self._scope(signing_properties=signing_properties)}\n"
            f"{sha256(str(canonical_request).encode()).hexdigest()}"
        )
        logger.debug("String to sign:\n%s", string_to_sign)
        return string_to_sign

    def _scope(self, signing_properties: SigV4SigningProperties) -> str:
        assert "date" in signing_properties
        formatted_date = signing_properties["date"][0:8]
        region = signing_properties["region"]
        service = signing_properties["service"]
        # Scope format: <YYYYMMDD>/<AWS Region>/<AWS Service>/aws4_request
        return f"{formatted_date}/{region}/{service}/{SIGV4_TERMINATOR}"


class SigV2Signer:
    """Request signer for the legacy AWS Signature Version 2 algorithm.

    Only services that never migrated to SigV4 need this; prefer
    :py:class:`SigV4Signer` for everything else.
    """

    SIGNATURE_PARAM = "Signature"

    def sign(
        self,
        *,
        http_request: AWSRequest,
        identity: Credentials,
        timestamp: datetime.datetime | None = None,
    ) -> AWSRequest:
        """Return a copy of the request with the authentication parameters and
        signature added to its query parameters."""
        result = self.signature(
            http_request=http_request, identity=identity, timestamp=timestamp
        )
        new_request = http_request.with_headers({})
        new_request.destination = replace(http_request.destination, query=None)
        new_request.query_params = dict(result.query_params)
        return new_request

    def signature(
        self,
        *,
        http_request: AWSRequest,
        identity: Credentials,
        timestamp: datetime.datetime | None = None,
    ) -> SigV2Result:
        resolved_identity = resolve_identity(identity)
        _validate_identity(resolved_identity)
        logger.debug("Calculating signature using v2 auth.")

        params = self._request_params(http_request)
        params["AWSAccessKeyId"] = resolved_identity.access_key_id
        params["SignatureVersion"] = "2"
        params["SignatureMethod"] = SIGV2_SIGNATURE_METHOD
        if "Timestamp" not in params and "Expires" not in params:
            date_obj = _utc(timestamp or datetime.datetime.now(datetime.UTC))
            params["Timestamp"] = date_obj.strftime(SIGV2_TIMESTAMP_FORMAT)
        if resolved_identity.session_token:
            params["SecurityToken"] = resolved_identity.session_token

        string_to_sign = self.string_to_sign(request=http_request, params=params)
        signature = self._signature(
            string_to_sign=string_to_sign,
            secret_key=resolved_identity.secret_access_key,
        )
        params[self.SIGNATURE_PARAM] = signature
        return SigV2Result(
            signature=signature,
            string_to_sign=string_to_sign,
            query_params=params,
            query_string=canonical.format_canonical_query(params=params),
        )

    def string_to_sign(self, *, request: AWSRequest, params: Mapping[str, str]) -> str:
        """``<METHOD>\\n<host>\\n<path>\\n<canonical query string>``"""
        host = canonical.normalize_host_field(request.destination).lower()
        path = canonical.encode_path(request.destination.path or "/")
        canonical_query = canonical.format_canonical_query(
            params={
                key: value
                for key, value in params.items()
                # Any previous signature should not be a part of this one.
                if key != self.SIGNATURE_PARAM
            }
        )
        string_to_sign = (
            f"{request.method.upper()}\n{host}\n{path}\n{canonical_query}"
        )
        logger.debug("String to sign: %s", string_to_sign)
        return string_to_sign

    def _signature(self, *, string_to_sign: str, secret_key: str) -> str:
        digest = _hmac(key=secret_key.encode("utf-8"), value=string_to_sign)
        return base64.b64encode(digest).decode("utf-8")

    def _request_params(self, request: AWSRequest) -> dict[str, str]:
        pairs: list[tuple[str, FieldValue]] = []
        if request.destination.query:
            pairs.extend(
                parse_qsl(qs=request.destination.query, keep_blank_values=True)
            )
        pairs.extend(request.query_params.items())

        params: dict[str, str] = {}
        for key, value in pairs:
            if not isinstance(value, str) or key in params:
                raise SigningError(
                    f"Query parameter {key!r} is repeated; SigV2 only signs "
                    "single-valued parameters."
                )
            if key != self.SIGNATURE_PARAM:
                params[key] = value
        return params


def sign_v4(
    request: AWSRequest,
    credentials: Credentials,
    date: datetime.datetime | str | None = None,
    region: str | None = None,
    service: str | None = None,
    *,
    signed_headers: Iterable[str] | None = None,
    payload_signing_enabled: bool = True,
    uri_encode_path: bool = True,
) -> SigV4Result:
    """Compute a SigV4 signature and ``Authorization`` header for ``request``.

    :param request: The request to sign. It is not modified, except that a one-shot
        iterator body is consumed; the buffered bytes are hashed instead.
    :param credentials: Credentials, or a resolver providing them.
    :param date: Signing time as a time-zone aware datetime or a ``YYYYMMDDTHHMMSSZ``
        timestamp. Defaults to the current UTC time.
    :param region: Region to scope the signature to. Defaults to the region of the
        credentials.
    :param service: Service to scope the signature to, for example ``s3``.
    :param signed_headers: Optional allow-list of header names to sign.
    :param payload_signing_enabled: Whether HTTPS payloads are hashed.
    :param uri_encode_path: Whether to normalize and percent-encode the path.
    :raises SigningError: If the secret is empty, the date is malformed or naive, or
        no region or service is available.
    """
    identity = resolve_identity(credentials)
    region = region or identity.region
    if not region:
        raise SigningError(
            "No region was given and the credentials do not carry a default region."
        )
    if not service:
        raise SigningError("A service is required to sign a request.")

    if isinstance(date, datetime.datetime):
        date = _utc(date).strftime(SIGV4_TIMESTAMP_FORMAT)

    signing_properties = SigV4SigningProperties(region=region, service=service)
    if date is not None:
        signing_properties["date"] = date
    signing_properties["payload_signing_enabled"] = payload_signing_enabled
    signing_properties["uri_encode_path"] = uri_encode_path
    if signed_headers is not None:
        signing_properties["signed_headers"] = tuple(signed_headers)

    return SigV4Signer().signature(
        signing_properties=signing_properties,
        http_request=request,
        identity=identity,
    )


def sign_v2(
    request: AWSRequest,
    credentials: Credentials,
    timestamp: datetime.datetime | None = None,
) -> SigV2Result:
    """Compute a legacy SigV2 signature for ``request``.

    :param request: The request to sign. Neither it nor its body is modified.
    :param credentials: Credentials, or a resolver providing them.
    :param timestamp: Value of the ``Timestamp`` parameter. Defaults to the current
        UTC time; ignored when the request already carries ``Timestamp`` or
        ``Expires``.
    """
    return SigV2Signer().signature(
        http_request=request, identity=credentials, timestamp=timestamp
    )
