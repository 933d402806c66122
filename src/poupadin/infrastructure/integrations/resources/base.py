"""Base class for the per-resource API clients."""

from typing import Any

import httpx

from poupadin.domain.exceptions import (
    ApiError,
    ServerError,
    SessionExpiredError,
    error_from_response,
    extract_message,
)
from poupadin.infrastructure.integrations.auth_client import decode_json_body
from poupadin.infrastructure.integrations.gateway import (
    AuthenticatedGateway,
    RequestDescriptor,
)


class ResourceClient:
    """Thin JSON wrapper over the gateway.

    Hey future me - resource clients hold NO session state. They build a
    RequestDescriptor, hand it to the gateway and decode what comes back. The
    gateway already did the 401 dance, so a 401 that reaches us here means the
    session is gone for good -> SessionExpiredError, not InvalidCredentials.
    """

    def __init__(self, gateway: AuthenticatedGateway) -> None:
        """Initialize client.

        Args:
            gateway: Authenticated request gateway
        """
        self._gateway = gateway

    async def _request(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        response = await self._gateway.execute(
            RequestDescriptor(method=method, path=path, json=json, params=params)
        )
        return self._decode(response)

    def _decode(self, response: httpx.Response) -> dict[str, Any]:
        body = decode_json_body(response)

        # A 401 is the end of the session even when a proxy answered it with HTML.
        if response.status_code == httpx.codes.UNAUTHORIZED:
            raise self._error(response.status_code, body)

        if body is None:
            raise ServerError(
                "Invalid response from server", status_code=response.status_code
            )

        if not response.is_success:
            raise self._error(response.status_code, body)
        return body

    @staticmethod
    def _error(status_code: int, body: dict[str, Any] | None) -> ApiError:
        if status_code == httpx.codes.UNAUTHORIZED:
            return SessionExpiredError(
                extract_message(body, "Session expired. Please log in again."),
                body=body,
            )
        return error_from_response(status_code, body)

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        return await self._request("GET", path, params=params)

    async def _post(self, path: str, json: Any = None) -> dict[str, Any]:
        return await self._request("POST", path, json=json if json is not None else {})

    async def _put(self, path: str, json: Any = None) -> dict[str, Any]:
        return await self._request("PUT", path, json=json if json is not None else {})

    async def _delete(self, path: str) -> dict[str, Any]:
        return await self._request("DELETE", path)
