from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import httpx


@dataclass(slots=True)
class ApiResponse:
    status_code: int
    body: Any

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def message(self) -> str | None:
        if isinstance(self.body, dict):
            msg = self.body.get("msg")
            return msg if isinstance(msg, str) else None
        return None


class StocksApiClient:
    def __init__(
        self,
        *,
        base_url: str,
        timeout_seconds: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(base_url=base_url.rstrip("/"), timeout=timeout_seconds, transport=transport)

    def list_stocks(self) -> ApiResponse:
        return self._send("GET", "/stocks")

    def add_stock(self, name: str) -> ApiResponse:
        return self._send("POST", "/stocks", json={"name": name})

    def remove_stock(self, name: str) -> ApiResponse:
        return self._send("DELETE", f"/stocks/{quote(name, safe='')}")

    def close(self) -> None:
        self._client.close()

    def _send(self, method: str, path: str, **kwargs: Any) -> ApiResponse:
        response = self._client.request(method, path, **kwargs)
        try:
            body = response.json()
        except ValueError:
            body = response.text
        return ApiResponse(status_code=response.status_code, body=body)
