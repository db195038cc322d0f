r"""Unit tests for RequestDescriptor."""

from __future__ import annotations

import json

import httpx
import pytest

from arebound import RequestDescriptor

TEST_URL = "https://api.example.com/v1/checkouts"

#######################################
#     Tests for RequestDescriptor     #
#######################################


def test_request_descriptor_defaults() -> None:
    descriptor = RequestDescriptor(url=TEST_URL)
    assert descriptor.url == TEST_URL
    assert descriptor.method == "GET"
    assert descriptor.headers == httpx.Headers()
    assert descriptor.body is None


def test_request_descriptor_normalizes_method() -> None:
    assert RequestDescriptor(url=TEST_URL, method=" post ").method == "POST"


def test_request_descriptor_headers_are_case_insensitive() -> None:
    descriptor = RequestDescriptor(url=TEST_URL, headers={"X-Request-Id": "abc"})
    assert isinstance(descriptor.headers, httpx.Headers)
    assert descriptor.headers["x-request-id"] == "abc"


@pytest.mark.parametrize(
    "url", ["", "/v1/checkouts", "api.example.com/v1", "ftp://example.com/file", "https://"]
)
def test_request_descriptor_invalid_url(url: str) -> None:
    with pytest.raises(ValueError, match=r"url must be an absolute http\(s\) URL"):
        RequestDescriptor(url=url)


def test_request_descriptor_empty_method() -> None:
    with pytest.raises(ValueError, match=r"method must be a non-empty HTTP method name"):
        RequestDescriptor(url=TEST_URL, method="  ")


def test_request_descriptor_json() -> None:
    descriptor = RequestDescriptor.json(
        TEST_URL, {"amount": 1800, "currency": "USD"}, headers={"Authorization": "Bearer t"}
    )
    assert descriptor.method == "POST"
    assert descriptor.headers["content-type"] == "application/json"
    assert descriptor.headers["authorization"] == "Bearer t"
    assert json.loads(descriptor.body) == {"amount": 1800, "currency": "USD"}


def test_request_descriptor_json_custom_content_type() -> None:
    descriptor = RequestDescriptor.json(
        TEST_URL, [1, 2], method="put", headers={"content-type": "application/vnd.api+json"}
    )
    assert descriptor.method == "PUT"
    assert descriptor.headers.get_list("content-type") == ["application/vnd.api+json"]


def test_request_descriptor_build_request() -> None:
    descriptor = RequestDescriptor(
        url=TEST_URL, method="PATCH", headers={"X-Token": "t"}, body=b"raw"
    )
    with httpx.Client() as client:
        request = descriptor.build_request(client)
    assert request.method == "PATCH"
    assert request.url == httpx.URL(TEST_URL)
    assert request.headers["x-token"] == "t"
    assert request.content == b"raw"


def test_request_descriptor_build_request_is_fresh() -> None:
    descriptor = RequestDescriptor(url=TEST_URL)
    with httpx.Client() as client:
        assert descriptor.build_request(client) is not descriptor.build_request(client)
