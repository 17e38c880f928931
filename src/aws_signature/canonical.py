# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""Canonical forms of HTTP requests shared by the signature versions.

Every function here is pure: the output only depends on the names and values
handed in, never on the order headers or query parameters were supplied in.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from hashlib import sha256
from urllib.parse import parse_qsl, quote, unquote

from ._http import URI, AWSRequest, FieldValue, field_values, join_field_value
from .interfaces.io import Seekable

HEADERS_EXCLUDED_FROM_SIGNING: tuple[str, ...] = (
    "accept",
    "accept-encoding",
    "authorization",
    "connection",
    "expect",
    "user-agent",
    "x-amzn-trace-id",
)
DEFAULT_PORTS: dict[str, int] = {"http": 80, "https": 443}

UNSIGNED_PAYLOAD: str = "UNSIGNED-PAYLOAD"
EMPTY_SHA256_HASH = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
CONTENT_SHA256_HEADER = "x-amz-content-sha256"


@dataclass(frozen=True)
class CanonicalRequest:
    """A standardized string laying out the components used in the SigV4 signing
    algorithm. Comparing it against a verifier's copy is the quickest way to find
    signature mismatches.

    The canonical request is defined as::

        <HTTPMethod>\\n
        <CanonicalURI>\\n
        <CanonicalQueryString>\\n
        <CanonicalHeaders>\\n
        <SignedHeaders>\\n
        <HashedPayload>
    """

    method: str
    canonical_uri: str
    canonical_query_string: str
    canonical_headers: str
    signed_headers: tuple[str, ...]
    payload_hash: str

    def __str__(self) -> str:
        return (
            f"{self.method}\n"
            f"{self.canonical_uri}\n"
            f"{self.canonical_query_string}\n"
            f"{self.canonical_headers}\n"
            f"{';'.join(self.signed_headers)}\n"
            f"{self.payload_hash}"
        )

    def to_bytes(self) -> bytes:
        return str(self).encode("utf-8")

    def hexdigest(self) -> str:
        return sha256(self.to_bytes()).hexdigest()


def uri_encode(value: str) -> str:
    """Percent-encode everything except the RFC 3986 unreserved characters."""
    return quote(value, safe="-_.~")


def encode_path(path: str) -> str:
    """Percent-encode each segment of ``path``, keeping ``/`` as the separator.

    Each segment is decoded before it is encoded, so a path that already carries
    escapes such as ``%20`` is encoded exactly once. An encoded ``%2F`` stays inside
    its segment.
    """
    return "/".join(uri_encode(unquote(segment)) for segment in path.split("/"))


def format_canonical_path(path: str | None, *, uri_encode_path: bool = True) -> str:
    if not path:
        path = "/"

    if uri_encode_path:
        return encode_path(remove_dot_segments(path))
    else:
        return remove_dot_segments(path, remove_consecutive_slashes=False)


def canonical_query_pairs(
    query: str | None = None, params: Mapping[str, FieldValue] | None = None
) -> list[tuple[str, str]]:
    """Collect query parameters from a query string and a mapping, encoded and
    sorted by encoded key, then encoded value."""
    pairs: list[tuple[str, str]] = []
    if query:
        pairs.extend(parse_qsl(qs=query, keep_blank_values=True))
    for key, value in (params or {}).items():
        pairs.extend((key, item) for item in field_values(value))
    # key-value pairs must be in sorted order for their encoded forms.
    return sorted((uri_encode(key), uri_encode(value)) for key, value in pairs)


def format_canonical_query(
    query: str | None = None, params: Mapping[str, FieldValue] | None = None
) -> str:
    return "&".join(
        f"{key}={value}" for key, value in canonical_query_pairs(query, params)
    )


def normalize_host_field(uri: URI) -> str:
    if uri.port is not None and DEFAULT_PORTS.get(uri.scheme) == uri.port:
        return uri.host
    return uri.netloc


def is_signable_header(field_name: str, signed_headers: frozenset[str] | None) -> bool:
    if signed_headers is not None:
        return field_name in signed_headers
    return field_name not in HEADERS_EXCLUDED_FROM_SIGNING


def normalize_signing_fields(
    request: AWSRequest, signed_headers: Iterable[str] | None = None
) -> dict[str, str]:
    """Lower-cased header names mapped to their joined values, sorted by name.

    :param request: The request whose headers are signed.
    :param signed_headers: An allow-list of header names to sign. When omitted every
        header except those in ``HEADERS_EXCLUDED_FROM_SIGNING`` is signed. The
        ``host`` header is always signed.
    """
    allowed = None
    if signed_headers is not None:
        allowed = frozenset(name.lower() for name in signed_headers) | {"host"}

    normalized_fields: dict[str, list[str]] = {}
    for name, value in request.headers.items():
        field_name = name.lower()
        if is_signable_header(field_name, allowed):
            normalized_fields.setdefault(field_name, []).extend(field_values(value))

    fields = {
        name: join_field_value(values) for name, values in normalized_fields.items()
    }
    if "host" not in fields:
        fields["host"] = normalize_host_field(request.destination)

    return dict(sorted(fields.items()))


def format_canonical_fields(fields: Mapping[str, str]) -> str:
    return "".join(
        f"{key}:{' '.join(value.split())}\n" for key, value in sorted(fields.items())
    )


def compute_payload_hash(body: bytes | Iterable[bytes] | None) -> str:
    """Lower-case hex SHA-256 of the payload.

    Seekable bodies are returned to their original position afterwards. Any other
    iterable is consumed, so one-shot streams must be buffered by the caller first.
    """
    if body is None:
        return EMPTY_SHA256_HASH

    if isinstance(body, bytes | bytearray | memoryview):
        return sha256(body).hexdigest()

    checksum = sha256()
    if isinstance(body, Seekable):
        position = body.tell()
        for chunk in body:
            checksum.update(chunk)
        body.seek(position)
    else:
        for chunk in body:
            checksum.update(chunk)
    return checksum.hexdigest()


def should_sha256_sign_payload(
    request: AWSRequest, *, payload_signing_enabled: bool = True
) -> bool:
    # All insecure connections should be signed
    if request.destination.scheme != "https":
        return True

    return payload_signing_enabled


def format_canonical_payload(
    request: AWSRequest, *, payload_signing_enabled: bool = True
) -> str:
    precomputed = request.get_header(CONTENT_SHA256_HEADER)
    if precomputed is not None and "," not in precomputed:
        return precomputed

    if not should_sha256_sign_payload(
        request, payload_signing_enabled=payload_signing_enabled
    ):
        return UNSIGNED_PAYLOAD

    return compute_payload_hash(request.body)


def canonical_request(
    request: AWSRequest,
    *,
    signed_headers: Iterable[str] | None = None,
    payload_signing_enabled: bool = True,
    uri_encode_path: bool = True,
) -> CanonicalRequest:
    """Build the canonical form of ``request``.

    :param request: The request to canonicalize.
    :param signed_headers: Optional allow-list of header names to include.
    :param payload_signing_enabled: Whether HTTPS payloads are hashed. When
        disabled the payload is represented as ``UNSIGNED-PAYLOAD``.
    :param uri_encode_path: Whether to normalize and percent-encode the path. Set to
        ``False`` for paths that are already encoded.
    """
    # We generate the payload first so a body with a bad type fails before any
    # other work is done.
    payload_hash = format_canonical_payload(
        request, payload_signing_enabled=payload_signing_enabled
    )
    normalized_fields = normalize_signing_fields(request, signed_headers)
    return CanonicalRequest(
        method=request.method.upper(),
        canonical_uri=format_canonical_path(
            request.destination.path, uri_encode_path=uri_encode_path
        ),
        canonical_query_string=format_canonical_query(
            request.destination.query, request.query_params
        ),
        canonical_headers=format_canonical_fields(normalized_fields),
        signed_headers=tuple(normalized_fields),
        payload_hash=payload_hash,
    )


def remove_dot_segments(path: str, remove_consecutive_slashes: bool = True) -> str:
    """Removes dot segments from a path per :rfc:`3986#section-5.2.4`.

    Optionally removes consecutive slashes, true by default.
    :param path: The path to modify.
    :param remove_consecutive_slashes: Whether to remove consecutive slashes.
    :returns: The path with dot segments removed.
    """
    output: list[str] = []
    for segment in path.split("/"):
        if segment == ".":
            continue
        elif segment != "..":
            output.append(segment)
        elif output:
            output.pop()
    if path.startswith("/") and (not output or output[0]):
        output.insert(0, "")
    if output and path.endswith(("/.", "/..")):
        output.append("")
    result = "/".join(output)
    if remove_consecutive_slashes:
        result = result.replace("//", "/")
    return result
