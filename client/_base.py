"""Base classes for the compose API sub-clients.

This is an internal module and should not be imported directly by users.
"""

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from models.message import EmailAddress

if TYPE_CHECKING:
    from client._http import AsyncHTTPClient, HTTPClient


AddressLike = str | EmailAddress | dict[str, Any]


def address_payload(address: AddressLike) -> dict[str, Any]:
    """Normalize an address argument to the JSON shape the API expects.

    Args:
        address: A bare email string, an EmailAddress, or a dict.

    Returns:
        A dict with "email" and optionally "name".
    """
    if isinstance(address, str):
        return {"email": address}
    if isinstance(address, BaseModel):
        return address.model_dump(exclude_none=True)
    return dict(address)


class BaseClient:
    """Base class for synchronous sub-clients.

    Attributes:
        _http: The shared HTTP client for making requests.
    """

    def __init__(self, http_client: "HTTPClient") -> None:
        self._http = http_client

    def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return self._http.get(path, params=params)

    def _post(self, path: str, json: Any = None, params: dict[str, Any] | None = None) -> Any:
        return self._http.post(path, json=json, params=params)

    def _patch(self, path: str, json: Any = None, params: dict[str, Any] | None = None) -> Any:
        return self._http.patch(path, json=json, params=params)

    def _delete(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return self._http.delete(path, params=params)


class AsyncBaseClient:
    """Base class for asynchronous sub-clients.

    Attributes:
        _http: The shared async HTTP client for making requests.
    """

    def __init__(self, http_client: "AsyncHTTPClient") -> None:
        self._http = http_client

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self._http.get(path, params=params)

    async def _post(
        self, path: str, json: Any = None, params: dict[str, Any] | None = None
    ) -> Any:
        return await self._http.post(path, json=json, params=params)

    async def _patch(
        self, path: str, json: Any = None, params: dict[str, Any] | None = None
    ) -> Any:
        return await self._http.patch(path, json=json, params=params)

    async def _delete(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self._http.delete(path, params=params)
