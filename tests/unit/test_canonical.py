#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
from io import BytesIO

import pytest
from aws_signature import URI, AWSRequest
from aws_signature.canonical import (
    EMPTY_SHA256_HASH,
    UNSIGNED_PAYLOAD,
    canonical_request,
    compute_payload_hash,
    format_canonical_fields,
    format_canonical_path,
    format_canonical_payload,
    format_canonical_query,
    normalize_host_field,
    normalize_signing_fields,
    remove_dot_segments,
)


def _request(
    url: str = "https://example.amazonaws.com/",
    *,
    headers: dict[str, str | list[str]] | None = None,
    query_params: dict[str, str | list[str]] | None = None,
    body: bytes | None = None,
) -> AWSRequest:
    return AWSRequest.from_url(
        "GET", url, headers=headers, query_params=query_params, body=body
    )


@pytest.mark.parametrize(
    "path,expected",
    [
        (None, "/"),
        ("", "/"),
        ("/", "/"),
        ("/a/./b/../c", "/a/c"),
        ("/a/b/..", "/a/"),
        ("/foo bar", "/foo%20bar"),
        ("/ünicode", "/%C3%BCnicode"),
        ("/a//b", "/a/b"),
        ("/keep-_.~", "/keep-_.~"),
        ("/a%20b", "/a%20b"),
        ("/a%2Fb/c", "/a%2Fb/c"),
        ("/100%25", "/100%25"),
        ("/%7Euser", "/~user"),
    ],
)
def test_format_canonical_path(path: str | None, expected: str):
    assert format_canonical_path(path) == expected


def test_format_canonical_path_without_encoding():
    assert format_canonical_path("/a%20b//c", uri_encode_path=False) == "/a%20b//c"


@pytest.mark.parametrize(
    "path,expected",
    [
        ("/a/b/c/./../../g", "/a/g"),
        ("mid/content=5/../6", "mid/6"),
        ("/..", "/"),
        ("/a/.", "/a/"),
    ],
)
def test_remove_dot_segments(path: str, expected: str):
    assert remove_dot_segments(path) == expected


def test_query_sorted_by_key():
    assert format_canonical_query("b=2&a=1") == "a=1&b=2"


def test_query_sorted_by_value_for_equal_keys():
    assert format_canonical_query("a=2&a=1&a=10") == "a=1&a=10&a=2"


def test_query_combines_string_and_mapping():
    result = format_canonical_query("z=last", {"a": "first", "m": ["2", "1"]})
    assert result == "a=first&m=1&m=2&z=last"


def test_query_encoding():
    result = format_canonical_query(params={"k y": "a/b", "tilde~": "x+y=z"})
    assert result == "k%20y=a%2Fb&tilde~=x%2By%3Dz"


def test_query_blank_values_kept():
    assert format_canonical_query("flag&b=") == "b=&flag="


def test_empty_query():
    assert format_canonical_query() == ""


@pytest.mark.parametrize(
    "uri,expected",
    [
        (URI(host="example.com"), "example.com"),
        (URI(host="example.com", port=443), "example.com"),
        (URI(scheme="http", host="example.com", port=80), "example.com"),
        (URI(host="example.com", port=8443), "example.com:8443"),
        (URI(scheme="http", host="example.com", port=443), "example.com:443"),
    ],
)
def test_normalize_host_field(uri: URI, expected: str):
    assert normalize_host_field(uri) == expected


def test_signing_fields_lower_cased_sorted_and_host_added():
    request = _request(headers={"X-Amz-Date": "20150830T123600Z", "Content-Type": "x"})
    fields = normalize_signing_fields(request)
    assert list(fields) == ["content-type", "host", "x-amz-date"]
    assert fields["host"] == "example.amazonaws.com"


def test_signing_fields_excluded_headers():
    request = _request(
        headers={
            "User-Agent": "agent",
            "Authorization": "old",
            "Expect": "100-continue",
            "X-Custom": "1",
        }
    )
    assert list(normalize_signing_fields(request)) == ["host", "x-custom"]


def test_signing_fields_allow_list_always_includes_host():
    request = _request(headers={"X-Custom": "1", "X-Other": "2", "User-Agent": "a"})
    fields = normalize_signing_fields(request, ["x-other", "User-Agent"])
    assert list(fields) == ["host", "user-agent", "x-other"]


def test_signing_fields_explicit_host_kept():
    request = _request(headers={"Host": "override.example.com"})
    assert normalize_signing_fields(request)["host"] == "override.example.com"


def test_multi_valued_headers_joined():
    request = _request(headers={"X-Multi": ["a", "b"], "x-multi": "c"})
    assert normalize_signing_fields(request)["x-multi"] == "a,b,c"


def test_canonical_fields_whitespace_collapsed():
    fields = {"x-b": "  two   spaces  ", "x-a": "one"}
    assert format_canonical_fields(fields) == "x-a:one\nx-b:two spaces\n"


@pytest.mark.parametrize("body", [None, b"", BytesIO(b""), []])
def test_empty_payload_hash(body: bytes | BytesIO | list[bytes] | None):
    assert compute_payload_hash(body) == EMPTY_SHA256_HASH


def test_payload_hash_seekable_body_rewound():
    body = BytesIO(b"prefix-payload")
    body.seek(7)
    assert compute_payload_hash(body) == (
        "239f59ed55e737c77147cf55ad0c1b030b6d7ee748a7426952f9b852d5a935e5"
    )
    assert body.tell() == 7


def test_payload_hash_chunked_iterable():
    assert compute_payload_hash([b"pay", b"load"]) == compute_payload_hash(b"payload")


def test_unsigned_payload_over_https():
    request = _request(body=b"data")
    assert (
        format_canonical_payload(request, payload_signing_enabled=False)
        == UNSIGNED_PAYLOAD
    )


def test_payload_always_signed_over_http():
    request = _request("http://example.amazonaws.com/", body=b"")
    assert (
        format_canonical_payload(request, payload_signing_enabled=False)
        == EMPTY_SHA256_HASH
    )


def test_precomputed_content_sha256_honoured():
    request = _request(headers={"X-Amz-Content-SHA256": "STREAMING-PAYLOAD"})
    assert format_canonical_payload(request) == "STREAMING-PAYLOAD"


def test_canonical_request_rendering():
    request = _request(
        "https://example.amazonaws.com/?Param2=value2&Param1=value1",
        headers={"X-Amz-Date": "20150830T123600Z"},
    )
    result = canonical_request(request)
    assert str(result) == (
        "GET\n"
        "/\n"
        "Param1=value1&Param2=value2\n"
        "host:example.amazonaws.com\n"
        "x-amz-date:20150830T123600Z\n"
        "\n"
        "host;x-amz-date\n"
        f"{EMPTY_SHA256_HASH}"
    )
    assert result.signed_headers == ("host", "x-amz-date")


def test_canonical_request_method_upper_cased():
    request = AWSRequest.from_url("post", "https://example.amazonaws.com/")
    assert canonical_request(request).method == "POST"


def test_canonical_request_ordering_invariance():
    first = _request(
        "https://example.amazonaws.com/path?b=2&a=1",
        headers={"X-A": "1", "X-B": "2", "X-Amz-Date": "20150830T123600Z"},
        query_params={"d": "4", "c": "3"},
    )
    second = _request(
        "https://example.amazonaws.com/path?a=1&b=2",
        headers={"X-Amz-Date": "20150830T123600Z", "x-b": "2", "x-a": "1"},
        query_params={"c": "3", "d": "4"},
    )
    assert canonical_request(first).to_bytes() == canonical_request(second).to_bytes()
    assert canonical_request(first).hexdigest() == canonical_request(second).hexdigest()


def test_canonical_uri_from_encoded_url():
    request = AWSRequest.from_url("GET", "https://example.amazonaws.com/a%20b")
    assert canonical_request(request).canonical_uri == "/a%20b"


def test_encoded_and_decoded_paths_canonicalize_alike():
    encoded = AWSRequest.from_url("GET", "https://example.amazonaws.com/a%20b")
    decoded = AWSRequest.from_url("GET", "https://example.amazonaws.com/a b")
    assert canonical_request(encoded).to_bytes() == canonical_request(decoded).to_bytes()
