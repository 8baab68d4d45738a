"""
Shared fixtures: recording stand-ins for the HTTP and WebSocket transports.
"""
from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from typing import Any, List, Optional

import pytest

from litego_payments.core.config import LitegoConfig
from litego_payments.core.transport import TransportResult


def reply(status_code: Optional[int], payload: Any = None, *, error: Optional[str] = None) -> TransportResult:
    body = "" if payload is None else (payload if isinstance(payload, str) else json.dumps(payload))
    return TransportResult(status_code=status_code, body=body, error=error)


@dataclass
class RecordedRequest:
    method: str
    path: str
    headers: dict
    data: Any
    timeout: float


class StubHttpTransport:
    """Answers requests from a queue and records what was sent."""

    def __init__(self, *responses: TransportResult) -> None:
        self.responses: List[TransportResult] = list(responses)
        self.requests: List[RecordedRequest] = []
        self.closed = False

    def queue(self, *responses: TransportResult) -> None:
        self.responses.extend(responses)

    def request(self, method, path, *, headers=None, data=None, timeout):
        self.requests.append(
            RecordedRequest(method, path, dict(headers or {}), data, timeout)
        )
        if not self.responses:
            raise AssertionError(f"Unexpected request {method} {path}")
        return self.responses.pop(0)

    def paths(self) -> List[str]:
        return [request.path for request in self.requests]

    def close(self) -> None:
        self.closed = True


@dataclass
class StubConnection:
    """Plays back frames; items that are exceptions are raised instead."""

    frames: List[Any] = field(default_factory=list)
    sent: List[str] = field(default_factory=list)
    closed: bool = False
    recv_timeouts: List[float] = field(default_factory=list)

    def send(self, message: str) -> None:
        self.sent.append(message)

    def recv(self, timeout: Optional[float] = None):
        self.recv_timeouts.append(timeout)
        if not self.frames:
            time.sleep(min(timeout or 0, 0.01))
            raise TimeoutError()
        frame = self.frames.pop(0)
        if isinstance(frame, BaseException):
            raise frame
        return frame

    def close(self) -> None:
        self.closed = True


class StubWebSocketTransport:
    def __init__(self, connection: Optional[StubConnection] = None, *, error: Optional[BaseException] = None) -> None:
        self.connection = connection or StubConnection()
        self.error = error
        self.connects: List[dict] = []

    def connect(self, path, *, headers=None, timeout):
        self.connects.append({"path": path, "headers": dict(headers or {}), "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.connection


@pytest.fixture
def config() -> LitegoConfig:
    return LitegoConfig.for_mode("m1", "s1", mode="test", timeout=5)


@pytest.fixture
def http() -> StubHttpTransport:
    return StubHttpTransport()
