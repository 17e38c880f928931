# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from copy import copy
from dataclasses import dataclass, field
from functools import cached_property
from typing import TypeAlias
from urllib.parse import urlsplit, urlunsplit

FieldValue: TypeAlias = str | Sequence[str]
"""A header or query value. Sequences represent repeated entries."""


@dataclass(kw_only=True, frozen=True)
class URI:
    """Universal Resource Identifier, target location for an :py:class:`AWSRequest`."""

    scheme: str = "https"
    """For example ``http`` or ``https``."""

    host: str
    """The hostname, for example ``amazonaws.com``."""

    port: int | None = None
    """An explicit port number."""

    path: str | None = None
    """Path component of the URI."""

    query: str | None = None
    """Query component of the URI as string."""

    @classmethod
    def from_string(cls, url: str) -> URI:
        """Split a URL string such as ``https://host:8443/a/b?x=1`` into a URI."""
        parts = urlsplit(url)
        if not parts.hostname:
            raise ValueError(f"URL {url!r} does not contain a host.")
        return cls(
            scheme=parts.scheme or "https",
            host=parts.hostname,
            port=parts.port,
            path=parts.path or None,
            query=parts.query or None,
        )

    @property
    def netloc(self) -> str:
        """Construct netloc string in format ``{host}:{port}``.

        ``port`` is only included if set.
        """
        return self._netloc

    # cached_property does NOT behave like property, it actually allows for setting.
    # Therefore we need a layer of indirection.
    @cached_property
    def _netloc(self) -> str:
        port = f":{self.port}" if self.port is not None else ""
        return f"{self.host}{port}"

    def build(self) -> str:
        """Construct URI string representation.

        Returns a string of the form ``{scheme}://{host}:{port}{path}?{query}``
        """
        return urlunsplit(
            (self.scheme, self.netloc, self.path or "", self.query or "", "")
        )


@dataclass(kw_only=True)
class AWSRequest:
    """The parts of an HTTP request that take part in signing.

    :param method: The HTTP method, for example ``GET``.
    :param destination: Where the request is sent. The path and query string of the
        destination are signed.
    :param headers: Request headers. Names are case-insensitive; a sequence value
        represents a repeated header.
    :param query_params: Query parameters in addition to those already in the
        destination's query string.
    :param body: The payload, either as bytes or an iterable of byte chunks.
    """

    method: str
    destination: URI
    headers: Mapping[str, FieldValue] = field(default_factory=dict)
    query_params: Mapping[str, FieldValue] = field(default_factory=dict)
    body: bytes | Iterable[bytes] | None = None

    @classmethod
    def from_url(
        cls,
        method: str,
        url: str,
        *,
        headers: Mapping[str, FieldValue] | None = None,
        query_params: Mapping[str, FieldValue] | None = None,
        body: bytes | Iterable[bytes] | None = None,
    ) -> AWSRequest:
        return cls(
            method=method,
            destination=URI.from_string(url),
            headers=dict(headers or {}),
            query_params=dict(query_params or {}),
            body=body,
        )

    def get_header(self, name: str) -> str | None:
        """Case-insensitive header lookup, joining repeated values with commas."""
        name = name.lower()
        for key, value in self.headers.items():
            if key.lower() == name:
                return join_field_value(value)
        return None

    def with_headers(self, new_headers: Mapping[str, str]) -> AWSRequest:
        """A copy of this request with ``new_headers`` set, replacing any header of
        the same name regardless of case."""
        replaced = {name.lower() for name in new_headers}
        headers: dict[str, FieldValue] = {
            name: value
            for name, value in self.headers.items()
            if name.lower() not in replaced
        }
        headers.update(new_headers)
        new_request = copy(self)
        # the destination doesn't need to be copied because it's immutable
        # the body can't be copied because it may be an iterator
        new_request.headers = headers
        new_request.query_params = dict(self.query_params)
        return new_request


def field_values(value: FieldValue) -> list[str]:
    if isinstance(value, str):
        return [value]
    return list(value)


def join_field_value(value: FieldValue, delimiter: str = ",") -> str:
    """Get delimited string of all values.

    If there is exactly one value, the value is returned unmodified.
    """
    return delimiter.join(field_values(value))
