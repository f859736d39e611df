"""Asynchronous HTTP client for the swap API."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, TypeVar

import httpx

from jupswap.quote import QuoteRequest, QuoteResponse
from jupswap.swap import SwapInstructionsResponse, SwapRequest, SwapResponse

T = TypeVar("T")


class ClientError(Exception):
    """Base class of errors raised by the API client."""


class RequestFailedError(ClientError):
    """The API answered with a non-success status."""

    def __init__(self, status: int, body: str) -> None:
        super().__init__(f"Request failed with status {status}: {body}")
        self.status = status
        self.body = body


class DeserializationError(ClientError):
    """The request could not be completed or its response could not be decoded."""

    def __init__(self, cause: object) -> None:
        super().__init__(f"Failed to deserialize response: {cause}")
        self.cause = cause


def _is_success(status: int) -> bool:
    return 200 <= status < 300


def _response_text(response: httpx.Response) -> str:
    try:
        return response.text
    except (httpx.HTTPError, UnicodeDecodeError):
        return ""


def _decode(response: httpx.Response, parse: Callable[[Any], T]) -> T:
    if not _is_success(response.status_code):
        raise RequestFailedError(response.status_code, _response_text(response))
    try:
        payload = response.json()
    except ValueError as exc:
        raise DeserializationError(exc) from exc
    try:
        return parse(payload)
    except (ValueError, TypeError) as exc:
        raise DeserializationError(exc) from exc


class JupiterSwapApiClient:
    """Client for the quote, swap and swap-instructions endpoints."""

    def __init__(self, base_path: str, client: httpx.AsyncClient | None = None) -> None:
        self.base_path = base_path
        self._owns_client = client is None
        self.client = httpx.AsyncClient() if client is None else client

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: list[tuple[str, str]] | None = None,
        json: Any = None,
    ) -> httpx.Response:
        try:
            return await self.client.request(
                method, f"{self.base_path}{path}", params=params, json=json
            )
        except httpx.HTTPError as exc:
            raise DeserializationError(exc) from exc

    async def quote(self, quote_request: QuoteRequest) -> QuoteResponse:
        """Request a quote with GET /quote."""
        params = list(quote_request.to_query_params().items())
        params.extend(quote_request.extra_query_params().items())
        response = await self._send("GET", "/quote", params=params)
        return _decode(response, QuoteResponse.from_dict)

    async def swap(
        self,
        swap_request: SwapRequest,
        extra_args: Mapping[str, str] | None = None,
    ) -> SwapResponse:
        """Build a serialized swap transaction with POST /swap."""
        params = list(extra_args.items()) if extra_args else None
        response = await self._send("POST", "/swap", params=params, json=swap_request.to_dict())
        return _decode(response, SwapResponse.from_dict)

    async def swap_instructions(self, swap_request: SwapRequest) -> SwapInstructionsResponse:
        """Fetch the instructions of a swap with POST /swap-instructions."""
        response = await self._send(
            "POST", "/swap-instructions", json=swap_request.to_dict()
        )
        return _decode(response, SwapInstructionsResponse.from_dict)

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> JupiterSwapApiClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()