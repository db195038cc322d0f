r"""Immutable description of the HTTP request the executor performs."""

from __future__ import annotations

__all__ = ["RequestDescriptor"]

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import httpx

from arebound.utils.validation import validate_url

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(frozen=True)
class RequestDescriptor:
    r"""Target, method, headers and body of one outbound request.

    The descriptor is built once by the caller and re-sent unchanged on
    every attempt. Header names are case-insensitive. The body is opaque
    to the executor; use ``RequestDescriptor.json`` to send a JSON payload.

    Args:
        url: Absolute http(s) URL of the endpoint.
        method: HTTP method, normalized to upper case.
        headers: Request headers.
        body: Serialized request body, or ``None`` for no body.

    Raises:
        ValueError: If ``url`` is not an absolute http(s) URL or ``method``
            is empty.

    Example:
        ```pycon
        >>> from arebound import RequestDescriptor
        >>> descriptor = RequestDescriptor.json(
        ...     "https://api.example.com/v1/checkouts",
        ...     {"amount": 1800, "currency": "USD"},
        ...     headers={"Authorization": "Bearer token"},
        ... )
        >>> descriptor.method
        'POST'
        >>> descriptor.headers["content-type"]
        'application/json'
        >>> descriptor.body
        '{"amount": 1800, "currency": "USD"}'

        ```
    """

    url: str
    method: str = "GET"
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    body: str | bytes | None = None

    def __post_init__(self) -> None:
        validate_url(self.url)
        method = self.method.strip().upper()
        if not method:
            msg = "method must be a non-empty HTTP method name"
            raise ValueError(msg)
        # Frozen dataclass: normalized values are written through object.__setattr__
        object.__setattr__(self, "method", method)
        object.__setattr__(self, "headers", httpx.Headers(self.headers))

    @classmethod
    def json(
        cls,
        url: str,
        payload: Any,
        *,
        method: str = "POST",
        headers: Mapping[str, str] | None = None,
    ) -> RequestDescriptor:
        """Build a descriptor whose body is ``payload`` encoded as JSON.

        Args:
            url: Absolute http(s) URL of the endpoint.
            payload: A JSON-serializable value.
            method: HTTP method, ``POST`` by default.
            headers: Extra request headers. ``Content-Type`` defaults to
                ``application/json`` unless given here.

        Returns:
            The request descriptor.
        """
        merged = httpx.Headers({"Content-Type": "application/json"})
        if headers is not None:
            merged.update(headers)
        return cls(url=url, method=method, headers=merged, body=json.dumps(payload))

    def build_request(self, client: httpx.Client | httpx.AsyncClient) -> httpx.Request:
        """Build the ``httpx.Request`` of one attempt on ``client``.

        Args:
            client: The client that will send the request.

        Returns:
            A fresh request object.
        """
        return client.build_request(
            self.method,
            self.url,
            headers=self.headers,
            content=self.body,
        )
