"""
Blocking HTTP and WebSocket transports for the Litego service.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import requests
from websockets.sync.client import ClientConnection, connect

__all__ = [
    "HttpTransport",
    "TransportResult",
    "WebSocketTransport",
    "bearer",
]

logger = logging.getLogger(__name__)

_DEFAULT_HEADERS = {"Content-Type": "application/json"}


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _query_value(value: Any) -> Any:
    if isinstance(value, bool):
        return "1" if value else "0"
    return value


@dataclass(frozen=True)
class TransportResult:
    """
    Outcome of a single HTTP exchange.

    ``status_code`` is ``None`` when no HTTP status was obtained (connection,
    TLS or timeout failure); ``error`` then holds the reason.
    """

    status_code: Optional[int]
    body: str = ""
    error: Optional[str] = None


class HttpTransport:
    """
    Performs one synchronous request per call against ``base_url``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()

    def url_for(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def request(
        self,
        method: str,
        path: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        data: Optional[Mapping[str, Any]] = None,
        timeout: float,
    ) -> TransportResult:
        method = method.upper()
        url = self.url_for(path)
        merged_headers = dict(_DEFAULT_HEADERS)
        merged_headers.update(headers or {})

        kwargs: Dict[str, Any] = {"headers": merged_headers, "timeout": timeout}
        if method == "GET":
            if data:
                kwargs["params"] = {
                    key: _query_value(value) for key, value in data.items()
                }
        elif method in ("POST", "PUT"):
            if data is not None:
                kwargs["json"] = dict(data)
        else:
            raise ValueError(f"Unsupported HTTP method: {method}")

        logger.info("%s %s", method, url)
        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as exc:
            logger.warning("%s %s failed before a response arrived: %s", method, url, exc)
            return TransportResult(status_code=None, error=str(exc) or type(exc).__name__)

        logger.debug("%s %s -> %s", method, url, response.status_code)
        return TransportResult(status_code=response.status_code, body=response.text or "")

    def close(self) -> None:
        self.session.close()


class WebSocketTransport:
    """
    Opens blocking WebSocket connections below ``base_url``.

    The returned connection offers ``send(text)``, ``recv(timeout=...)`` and
    ``close()``.
    """

    def __init__(self, base_url: str) -> None:
        self.base_url = base_url.rstrip("/")

    def url_for(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def connect(
        self,
        path: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        timeout: float,
    ) -> ClientConnection:
        url = self.url_for(path)
        logger.info("Opening websocket %s", url)
        return connect(
            url,
            additional_headers=dict(headers or {}),
            open_timeout=timeout,
            close_timeout=timeout,
        )
