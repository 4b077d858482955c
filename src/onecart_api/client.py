"""
HTTP client for the 1cart REST API.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Iterator

import httpx

from .exceptions import ApiError, ApiException
from .orders import Order, Product, ProductStock

logger = logging.getLogger(__name__)

# Current API version root
DEFAULT_API_URL = "https://api.1cart.eu/v1"

USER_AGENT = "1cart API Client"


class Client:
    """
    Client for the 1cart REST API.

    Listing methods are generators yielding `(key, model)` pairs, so
    `dict(client.all_stocks())` maps seller ids to stock levels. The request
    is sent when iteration starts.

    Args:
        client_id: API client id, sent as X-Client-Id
        api_key: API key, sent as X-API-Key
        base_url: API root URL. Default: https://api.1cart.eu/v1
        timeout_s: Request timeout in seconds. Default: 10.0

    Example:
        >>> client = Client("client id", "api key")
        >>> for number, order in client.all_orders():
        ...     print(number, order.total)
    """

    def __init__(
        self,
        client_id: str,
        api_key: str,
        base_url: str = DEFAULT_API_URL,
        timeout_s: float = 10.0,
    ):
        self.client_id = client_id
        self.api_key = api_key
        self.base_url = base_url
        self.timeout_s = timeout_s

    def all_stocks(self) -> Iterator[tuple[str, ProductStock]]:
        for data in self._send_request("GET", "stocks/all"):
            stock = ProductStock.from_data(data)
            yield stock.seller_id, stock

    def all_orders(
        self,
        created_at_from: datetime | None = None,
        created_at_to: datetime | None = None,
    ) -> Iterator[tuple[str, Order]]:
        """
        Iterate over orders, optionally limited to a creation time range.

        Args:
            created_at_from: Only orders created at or after this moment
            created_at_to: Only orders created at or before this moment
        """
        query: dict[str, str] = {}
        if created_at_from is not None:
            query["created_at_from"] = created_at_from.isoformat(timespec="seconds")
        if created_at_to is not None:
            query["created_at_to"] = created_at_to.isoformat(timespec="seconds")

        for data in self._send_request("GET", "orders/all", query=query):
            order = Order.from_data(data)
            yield order.number, order

    def all_products(self) -> Iterator[tuple[str, Product]]:
        for data in self._send_request("GET", "products/all"):
            product = Product.from_data(data)
            yield product.seller_id, product

    def products(self, identities: list[str]) -> Iterator[tuple[str, Product]]:
        """Fetch products by seller id."""
        for data in self._send_request("POST", "products", body=identities):
            product = Product.from_data(data)
            yield product.seller_id, product

    def build_url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}/{path.strip('/')}"

    def _send_request(
        self,
        method: str,
        path: str,
        body: Any = None,
        query: dict[str, str] | None = None,
    ) -> list[Any]:
        headers = {
            "User-Agent": USER_AGENT,
            "Accept": "application/json",
            "X-Client-Id": self.client_id,
            "X-API-Key": self.api_key,
        }
        url = self.build_url(path)
        logger.debug("%s %s", method, url)

        with httpx.Client(timeout=self.timeout_s) as client:
            response = client.request(
                method,
                url,
                headers=headers,
                params=query or None,
                json=body,
            )

        return self._parse_response(path, response)

    def _parse_response(self, path: str, response: httpx.Response) -> list[Any]:
        """Decode a response body, raising ApiException for anything but 200."""
        try:
            data = response.json()
        except ValueError:
            data = None

        if response.status_code != 200:
            logger.warning("%s returned %s", path, response.status_code)
            errors: list[ApiError] = []
            if isinstance(data, dict):
                errors = [
                    ApiError.from_data(error)
                    for error in data.get("errors", [])
                    if isinstance(error, dict)
                ]
            raise ApiException(
                f'The request to "{path}" has returned an unexpected response code "{response.status_code}"',
                errors=errors,
                status_code=response.status_code,
            )

        if isinstance(data, dict):
            return list(data.values())
        if not isinstance(data, list):
            raise ApiException(
                f'Expected the decoded response body to be an array, got "{type(data).__name__}"',
                status_code=response.status_code,
            )
        return data
