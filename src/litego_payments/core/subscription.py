"""
Blocking subscription to payment events over WebSocket.

A :class:`PaymentSubscription` is single-use: it connects, sends an empty
handshake frame, waits for the first non-empty frame and closes the
connection again. Callers that want the next event open a new subscription.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Optional

from websockets.exceptions import ConnectionClosed, InvalidStatus, WebSocketException

from .config import DEFAULT_TIMEOUT, LitegoError
from .endpoints import SUBSCRIBE_PAYMENTS_PATH, Endpoint
from .transport import WebSocketTransport, bearer

__all__ = [
    "PaymentSubscription",
    "SubscriptionCancelled",
    "SubscriptionError",
    "SubscriptionTimeout",
    "Topic",
    "subscribe",
]

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 1.0


class SubscriptionError(LitegoError):
    """Waiting for a payment event failed; the subscription is finished."""

    def __init__(self, message: str, code: Optional[int] = None) -> None:
        super().__init__(message)
        self.code = code


class SubscriptionTimeout(SubscriptionError):
    pass


class SubscriptionCancelled(SubscriptionError):
    pass


@dataclass(frozen=True)
class Topic:
    """Payments of every charge, or of a single charge when ``charge_id`` is set."""

    charge_id: Optional[str] = None

    @classmethod
    def all_payments(cls) -> "Topic":
        return cls()

    @classmethod
    def charge(cls, charge_id: str) -> "Topic":
        if not charge_id:
            raise ValueError("charge_id must not be empty")
        return cls(charge_id=charge_id)

    @property
    def path(self) -> str:
        if self.charge_id is None:
            return SUBSCRIBE_PAYMENTS_PATH
        return Endpoint("WS", SUBSCRIBE_PAYMENTS_PATH + "/{charge_id}").format(
            charge_id=self.charge_id
        )

    def __str__(self) -> str:
        return "all-payments" if self.charge_id is None else f"payment:{self.charge_id}"


def _close_code(exc: ConnectionClosed) -> Optional[int]:
    if exc.rcvd is not None:
        return exc.rcvd.code
    if exc.sent is not None:
        return exc.sent.code
    return None


class PaymentSubscription:
    """
    One WebSocket wait for a payment event, bound to a topic and a token.

    ``timeout`` bounds both the connection handshake and the silence between
    two frames. :meth:`cancel` (or setting ``cancel_event``) stops the wait
    within ``poll_interval`` seconds.
    """

    def __init__(
        self,
        transport: WebSocketTransport,
        topic: Topic,
        auth_token: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        if timeout <= 0:
            raise ValueError("timeout must be greater than zero")
        self.transport = transport
        self.topic = topic
        self.timeout = timeout
        self.poll_interval = poll_interval
        self._auth_token = auth_token
        self._cancel_event = cancel_event or threading.Event()
        self._used = False

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def cancel(self) -> None:
        self._cancel_event.set()

    def wait(self) -> str:
        """
        Block until the first non-empty frame arrives and return it stripped.
        """
        if self._used:
            raise SubscriptionError(f"Subscription to {self.topic} was already consumed")
        self._used = True

        if self.cancelled:
            raise SubscriptionCancelled(f"Subscription to {self.topic} was cancelled")

        try:
            connection = self.transport.connect(
                self.topic.path,
                headers=bearer(self._auth_token),
                timeout=self.timeout,
            )
        except InvalidStatus as exc:
            raise SubscriptionError(
                f"Subscription to {self.topic} was refused: {exc}",
                code=exc.response.status_code,
            ) from exc
        except TimeoutError as exc:
            raise SubscriptionTimeout(
                f"Connecting to {self.topic} timed out after {self.timeout}s"
            ) from exc
        except (WebSocketException, OSError) as exc:
            raise SubscriptionError(f"Could not subscribe to {self.topic}: {exc}") from exc

        try:
            connection.send("")
            message = self._receive(connection)
        except ConnectionClosed as exc:
            logger.error("Subscription to %s closed: %s", self.topic, exc)
            raise SubscriptionError(
                f"Subscription to {self.topic} closed: {exc}", code=_close_code(exc)
            ) from exc
        except (WebSocketException, OSError) as exc:
            logger.error("Subscription to %s failed: %s", self.topic, exc)
            raise SubscriptionError(f"Subscription to {self.topic} failed: {exc}") from exc
        finally:
            connection.close()

        logger.info("Received payment event on %s", self.topic)
        return message

    def _receive(self, connection) -> str:
        deadline = time.monotonic() + self.timeout
        while True:
            if self.cancelled:
                raise SubscriptionCancelled(f"Subscription to {self.topic} was cancelled")
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise SubscriptionTimeout(
                    f"No payment event on {self.topic} within {self.timeout}s"
                )
            try:
                frame = connection.recv(timeout=min(self.poll_interval, remaining))
            except TimeoutError:
                continue

            deadline = time.monotonic() + self.timeout
            if isinstance(frame, bytes):
                frame = frame.decode("utf-8", errors="replace")
            message = frame.strip()
            if message:
                return message
            logger.debug("Ignoring empty frame on %s", self.topic)


def subscribe(
    transport: WebSocketTransport,
    topic: Topic,
    auth_token: str,
    timeout: float = DEFAULT_TIMEOUT,
    *,
    cancel_event: Optional[threading.Event] = None,
) -> str:
    """
    Wait for one payment event on ``topic`` and return its JSON text.
    """
    subscription = PaymentSubscription(
        transport,
        topic,
        auth_token,
        timeout=timeout,
        cancel_event=cancel_event,
    )
    return subscription.wait()
