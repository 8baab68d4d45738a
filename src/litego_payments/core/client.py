"""
Merchant-facing client for the Litego REST and WebSocket API.
"""

from __future__ import annotations

import threading
from typing import Any, Mapping, Optional

import requests

from . import endpoints
from .config import LitegoConfig
from .endpoints import Endpoint
from .results import ApiResult, normalize
from .session import SessionManager, TokenPair
from .subscription import PaymentSubscription, Topic
from .transport import HttpTransport, WebSocketTransport, bearer

__all__ = ["LitegoClient", "WITHDRAWAL_ADDRESS_TYPES"]

WITHDRAWAL_ADDRESS_TYPES = ("regular", "extended")


class LitegoClient:
    """
    Thin wrapper around the Litego endpoints.

    Every operation returns an :class:`~litego_payments.core.results.ApiResult`;
    failures reported by the service are values, not exceptions. The auth
    token is taken from :attr:`session` unless one is passed explicitly.
    """

    def __init__(
        self,
        config: LitegoConfig,
        *,
        session: Optional[requests.Session] = None,
        http: Optional[HttpTransport] = None,
        websocket: Optional[WebSocketTransport] = None,
    ) -> None:
        self.config = config
        self.http = http or HttpTransport(config.service_url, session=session)
        self.websocket = websocket or WebSocketTransport(config.ws_service_url)
        self.session = SessionManager(
            self.http, config.credentials, timeout=config.timeout
        )

    def __enter__(self) -> "LitegoClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self.http.close()

    # Session

    def authenticate(self, timeout: Optional[float] = None) -> ApiResult:
        return self.session.authenticate(timeout=timeout)

    def refresh_auth_token(self, timeout: Optional[float] = None) -> ApiResult:
        return self.session.refresh_auth_token(timeout=timeout)

    def reauthenticate(self, timeout: Optional[float] = None) -> TokenPair:
        return self.session.reauthenticate(timeout=timeout)

    # Plumbing

    def _call(
        self,
        endpoint: Endpoint,
        *,
        data: Optional[Mapping[str, Any]] = None,
        auth_token: Optional[str] = None,
        timeout: Optional[float] = None,
        **path_params: str,
    ) -> ApiResult:
        if timeout is None:
            timeout = self.config.timeout
        token = auth_token or self.session.ensure_auth_token(timeout)
        raw = self.http.request(
            endpoint.method,
            endpoint.format(**path_params),
            headers=bearer(token),
            data=data,
            timeout=timeout,
        )
        return normalize(raw, endpoint.fields)

    # Merchant

    def get_merchant(self, *, auth_token: Optional[str] = None, timeout: Optional[float] = None) -> ApiResult:
        return self._call(endpoints.MERCHANT, auth_token=auth_token, timeout=timeout)

    # Charges

    def create_charge(
        self,
        description: str = "",
        amount_satoshi: int = 0,
        *,
        auth_token: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> ApiResult:
        data = {"description": description, "amount_satoshi": amount_satoshi}
        return self._call(
            endpoints.CREATE_CHARGE, data=data, auth_token=auth_token, timeout=timeout
        )

    def list_charges(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        *,
        auth_token: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> ApiResult:
        """
        List charges; ``filters`` accepts ``page``, ``pageSize`` and ``paidOnly``.
        """
        return self._call(
            endpoints.LIST_CHARGES, data=filters, auth_token=auth_token, timeout=timeout
        )

    def get_charge(
        self,
        charge_id: str,
        *,
        auth_token: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> ApiResult:
        if not charge_id:
            raise ValueError("charge_id must not be empty")
        return self._call(
            endpoints.GET_CHARGE,
            auth_token=auth_token,
            timeout=timeout,
            charge_id=charge_id,
        )

    # Withdrawals

    def set_withdrawal_address(
        self,
        address_type: str = "regular",
        value: str = "",
        *,
        auth_token: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> ApiResult:
        """
        Set the withdrawal destination.

        ``address_type`` is ``"regular"`` for a plain address or ``"extended"``
        for an extended public key, from which the service derives a fresh
        address after every withdrawal.
        """
        if address_type not in WITHDRAWAL_ADDRESS_TYPES:
            raise ValueError(
                f"address_type must be one of {', '.join(WITHDRAWAL_ADDRESS_TYPES)}"
            )
        data = {"type": address_type, "value": value}
        return self._call(
            endpoints.SET_WITHDRAWAL_ADDRESS,
            data=data,
            auth_token=auth_token,
            timeout=timeout,
        )

    def trigger_withdrawal(self, *, auth_token: Optional[str] = None, timeout: Optional[float] = None) -> ApiResult:
        return self._call(
            endpoints.TRIGGER_WITHDRAWAL, auth_token=auth_token, timeout=timeout
        )

    def list_withdrawals(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        *,
        auth_token: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> ApiResult:
        """
        List withdrawals; ``filters`` accepts ``page``, ``pageSize`` and
        ``status`` (``created``, ``performed`` or ``confirmed``).
        """
        return self._call(
            endpoints.LIST_WITHDRAWALS, data=filters, auth_token=auth_token, timeout=timeout
        )

    def get_withdrawal_settings(self, *, auth_token: Optional[str] = None, timeout: Optional[float] = None) -> ApiResult:
        return self._call(
            endpoints.WITHDRAWAL_SETTINGS, auth_token=auth_token, timeout=timeout
        )

    # Webhooks

    def set_notification_url(
        self,
        url: str,
        *,
        auth_token: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> ApiResult:
        return self._call(
            endpoints.SET_NOTIFICATION_URL,
            data={"url": url},
            auth_token=auth_token,
            timeout=timeout,
        )

    def list_webhook_responses(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        *,
        auth_token: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> ApiResult:
        return self._call(
            endpoints.WEBHOOK_RESPONSES, data=filters, auth_token=auth_token, timeout=timeout
        )

    def list_referral_payments(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        *,
        auth_token: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> ApiResult:
        return self._call(
            endpoints.REFERRAL_PAYMENTS, data=filters, auth_token=auth_token, timeout=timeout
        )

    # Subscriptions

    def open_subscription(
        self,
        topic: Topic,
        *,
        auth_token: Optional[str] = None,
        timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> PaymentSubscription:
        if timeout is None:
            timeout = self.config.timeout
        if timeout <= 0:
            raise ValueError("timeout must be greater than zero")
        token = auth_token or self.session.ensure_auth_token(timeout)
        return PaymentSubscription(
            self.websocket,
            topic,
            token,
            timeout=timeout,
            cancel_event=cancel_event,
        )

    def subscribe_payments(
        self,
        *,
        auth_token: Optional[str] = None,
        timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> str:
        """
        Block until a payment arrives for any charge and return the event JSON.
        """
        return self.open_subscription(
            Topic.all_payments(),
            auth_token=auth_token,
            timeout=timeout,
            cancel_event=cancel_event,
        ).wait()

    def subscribe_charge_payment(
        self,
        charge_id: str,
        *,
        auth_token: Optional[str] = None,
        timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> str:
        """
        Block until ``charge_id`` is paid and return the event JSON.
        """
        return self.open_subscription(
            Topic.charge(charge_id),
            auth_token=auth_token,
            timeout=timeout,
            cancel_event=cancel_event,
        ).wait()
