"""
Async HTTP transport to the portal's remote data API.

Non-2xx responses carry ``{"error": "<message>"}``; they are mapped to the
`campus_portal.client.errors` taxonomy (400 → ValidationError, 404 →
NotFoundError, 409 → ConflictError, anything else → NetworkError). Transport
failures (connection refused, timeouts, bad JSON) become `NetworkError` with
``status=None``. A 2xx body that does not match its record model
(`parse_one` / `parse_many`) is a `NetworkError` as well.
"""

import logging
from typing import Any, Type, TypeVar

import httpx
import pydantic

from campus_portal.client.errors import NetworkError, error_for_status
from campus_portal.database.config.config import settings

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)


def parse_one(model: Type[ModelT], body: Any) -> ModelT:
    """Validate a 2xx body against a record model; a mismatch is a `NetworkError`."""
    try:
        return model.model_validate(body)
    except pydantic.ValidationError as e:
        logger.info("Response does not match %s: %s", model.__name__, e)
        raise NetworkError(f"invalid response for {model.__name__}: {e.error_count()} field error(s)") from e


def parse_many(model: Type[ModelT], rows: Any) -> list[ModelT]:
    if rows is None:
        return []
    if not isinstance(rows, list):
        raise NetworkError(f"invalid response for {model.__name__}: expected a list")
    return [parse_one(model, row) for row in rows]


class RemoteApi:
    """
    Thin JSON client for the ``/api`` resources.

    Parameters
    ----------
    base_url : str | None
        API origin (defaults to ``settings.PORTAL_API_URL``).
    timeout : float | None
        Per-request timeout in seconds (defaults to ``settings.PORTAL_API_TIMEOUT``).
    transport : httpx.AsyncBaseTransport | None
        Custom transport (e.g. ``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.PORTAL_API_URL).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else settings.PORTAL_API_TIMEOUT,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> "RemoteApi":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(self, method: str, path: str, params: dict | None = None, json: Any = None) -> Any:
        """
        Send one request and return the decoded JSON body.

        Raises
        ------
        PortalError
            Subclass chosen from the response status, or `NetworkError` for
            transport failures.
        """
        query = {key: value for key, value in (params or {}).items() if value is not None}
        try:
            response = await self._client.request(method, f"/api{path}", params=query, json=json)
        except httpx.HTTPError as e:
            logger.info("%s %s failed: %s", method, path, e)
            raise NetworkError(f"{method} {path} failed: {e}") from e

        if response.is_error:
            raise error_for_status(response.status_code, self._error_message(response))
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise NetworkError(f"{method} {path}: invalid JSON response", status=response.status_code) from e

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text[:200] or response.reason_phrase
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return response.reason_phrase

    async def get(self, path: str, **params) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None, **params) -> Any:
        return await self.request("POST", path, params=params, json=json)

    async def put(self, path: str, json: Any = None, **params) -> Any:
        return await self.request("PUT", path, params=params, json=json)

    async def patch(self, path: str, json: Any = None, **params) -> Any:
        return await self.request("PATCH", path, params=params, json=json)

    async def delete(self, path: str, **params) -> Any:
        return await self.request("DELETE", path, params=params)
