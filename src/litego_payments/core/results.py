"""
Uniform result shape for every call made against the Litego API.

A call either succeeds (HTTP 200) and yields the endpoint's declared fields,
or fails and yields the ``name``/``detail`` pair the service reported.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Sequence, Union

from .transport import TransportResult

__all__ = [
    "ApiResult",
    "CODE_CLIENT_ERROR",
    "CODE_OK",
    "FORBIDDEN",
    "Failure",
    "Success",
    "TRANSPORT_ERROR",
    "normalize",
    "parse_body",
]

logger = logging.getLogger(__name__)

CODE_OK = 200
CODE_CLIENT_ERROR = 400

FORBIDDEN = "Forbidden"
TRANSPORT_ERROR = "TransportError"


@dataclass(frozen=True)
class Success:
    value: Dict[str, Any] = field(default_factory=dict)
    code: int = CODE_OK

    ok = True

    def __getitem__(self, key: str) -> Any:
        return self.value[key]

    def get(self, key: str, default: Any = None) -> Any:
        value = self.value.get(key)
        return default if value is None else value


@dataclass(frozen=True)
class Failure:
    code: int
    error_name: Any = None
    error_message: Any = None

    ok = False

    @property
    def is_forbidden(self) -> bool:
        return self.error_name == FORBIDDEN


ApiResult = Union[Success, Failure]


def parse_body(raw: str) -> Dict[str, Any]:
    """
    Decode a response body, treating anything but a JSON object as empty.
    """
    if not raw or not raw.strip():
        return {}
    try:
        payload = json.loads(raw)
    except ValueError:
        logger.warning("Discarding malformed JSON response body (%d bytes)", len(raw))
        return {}
    if not isinstance(payload, dict):
        logger.warning("Discarding non-object JSON response body: %s", type(payload).__name__)
        return {}
    return payload


def normalize(result: TransportResult, fields: Sequence[str]) -> ApiResult:
    payload = parse_body(result.body)

    if result.status_code == CODE_OK:
        return Success(value={name: payload.get(name) for name in fields})

    error_name = payload.get("name")
    error_message = payload.get("detail")
    if result.status_code is None:
        error_name = error_name or TRANSPORT_ERROR
        error_message = error_message or result.error

    return Failure(
        code=result.status_code or CODE_CLIENT_ERROR,
        error_name=error_name,
        error_message=error_message,
    )
