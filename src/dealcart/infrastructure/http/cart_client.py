"""httpx-backed implementation of CartService."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import httpx

from dealcart.domain.exceptions import CartServiceError
from dealcart.domain.repository.cart_service import CartService

logger = logging.getLogger(__name__)

NETWORK_MESSAGE = "Network error. Please check your internet connection."

TokenProvider = Callable[[], "str | None"]


class HttpCartService(CartService):
    """Talks to the REST cart endpoints.

    The access token comes from ``token_provider`` on every request;
    obtaining and refreshing it is somebody else's job.
    """

    def __init__(
        self,
        base_url: str,
        cart_path: str = "/jomfood-deals/cart",
        timeout: float = 10.0,
        token_provider: TokenProvider | None = None,
        language: str = "en",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._cart_path = "/" + cart_path.strip("/")
        self._token_provider = token_provider
        self._language = language
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout),
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> HttpCartService:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # --- CartService interface ------------------------------------------------

    async def get_cart(self, customer_id: str | None) -> dict[str, Any]:
        params = {"customer_id": customer_id} if customer_id else None
        return await self._request("GET", "", params=params)

    async def add(self, customer_id: str, deal_id: str) -> dict[str, Any]:
        return await self._request(
            "POST", "/add", json={"customer_id": customer_id, "deal_id": deal_id}
        )

    async def remove(self, customer_id: str, deal_id: str) -> dict[str, Any]:
        return await self._request(
            "POST", "/remove", json={"customer_id": customer_id, "deal_id": deal_id}
        )

    async def update_quantity(
        self, customer_id: str, deal_id: str, quantity: int
    ) -> dict[str, Any]:
        return await self._request(
            "POST",
            "/update-quantity",
            json={"customer_id": customer_id, "deal_id": deal_id, "quantity": quantity},
        )

    async def clear(self, customer_id: str) -> dict[str, Any]:
        return await self._request("POST", "/clear", json={"customer_id": customer_id})

    async def checkout(
        self,
        customer_id: str,
        service_type: str | None,
        preferred_datetime: str | None,
    ) -> dict[str, Any]:
        return await self._request(
            "POST",
            "/checkout",
            json={
                "customer_id": customer_id,
                "preferred_service_type": service_type,
                "preferred_datetime": preferred_datetime,
            },
        )

    async def payment_status(self, payment_id: str | None) -> dict[str, Any]:
        params = {"payment_id": payment_id} if payment_id else None
        return await self._request("GET", "/payment-status", params=params)

    # --- Transport ------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        query = dict(params or {})
        if self._language and self._language != "en":
            query["lang"] = self._language

        headers: dict[str, str] = {}
        token = self._token_provider() if self._token_provider else None
        if token:
            headers["Authorization"] = f"Bearer {token}"

        url = self._cart_path + path
        logger.debug("%s %s", method, url)
        try:
            response = await self._client.request(
                method, url, params=query or None, json=json, headers=headers
            )
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise CartServiceError(NETWORK_MESSAGE, code="NETWORK_ERROR") from exc

        data = self._parse(response)
        if response.is_error:
            raise self._error_from(data, response)

        if "_text" in data:
            return {"data": data["_text"]}
        return data

    # --- Response helpers -----------------------------------------------------

    @staticmethod
    def _parse(response: httpx.Response) -> dict[str, Any]:
        """Decode the body once: JSON when declared, otherwise raw text."""
        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            return {"_text": response.text}
        try:
            data = response.json()
        except ValueError as exc:
            raise CartServiceError(
                "Invalid JSON response from server",
                code="JSON_PARSE_ERROR",
                status=response.status_code,
            ) from exc
        return data if isinstance(data, dict) else {"data": data}

    @staticmethod
    def _error_from(data: dict[str, Any], response: httpx.Response) -> CartServiceError:
        status = response.status_code
        if "_text" in data:
            return CartServiceError(
                f"Server returned HTML/text instead of JSON. Status: {status}",
                code="INVALID_RESPONSE",
                status=status,
            )

        message = data.get("message")
        error = data.get("error")
        if message or error:
            return CartServiceError(
                str(message or "An error occurred"),
                code=error if isinstance(error, str) else "UNKNOWN_ERROR",
                status=status,
                server_message=bool(message),
            )

        return CartServiceError(
            f"Error {status}: {response.reason_phrase}",
            code="HTTP_ERROR",
            status=status,
        )
