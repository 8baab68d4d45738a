"""
Public, high-level helpers for talking to the Litego service.
"""

from __future__ import annotations

import json
import threading
from typing import Any, Dict, Mapping, Optional

import requests

from .core.client import LitegoClient
from .core.config import LitegoConfig, load_config
from .core.subscription import SubscriptionError

__all__ = [
    "create_client",
    "wait_for_payment",
]


def create_client(
    *,
    config: Optional[LitegoConfig] = None,
    session: Optional[requests.Session] = None,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    mode: Optional[str] = None,
    merchant_id: Optional[str] = None,
    secret_key: Optional[str] = None,
    timeout: Optional[int | str] = None,
    service_url: Optional[str] = None,
    ws_service_url: Optional[str] = None,
) -> LitegoClient:
    """
    Construct a :class:`LitegoClient`.

    Callers either supply a ready-made :class:`LitegoConfig` or let the helper
    assemble one from environment data and keyword arguments.
    """
    if config is not None:
        extras = (
            overrides,
            base,
            mode,
            merchant_id,
            secret_key,
            timeout,
            service_url,
            ws_service_url,
        )
        if any(item is not None and item != {} for item in extras):
            raise ValueError(
                "Provide either a pre-built LitegoConfig or individual parameters, not both."
            )
        cfg = config
    else:
        cfg = load_config(
            env_file=env_file,
            overrides=overrides,
            base=base,
            mode=mode,
            merchant_id=merchant_id,
            secret_key=secret_key,
            timeout=timeout,
            service_url=service_url,
            ws_service_url=ws_service_url,
        )
    return LitegoClient(cfg, session=session)


def wait_for_payment(
    charge_id: Optional[str] = None,
    *,
    client: Optional[LitegoClient] = None,
    timeout: Optional[float] = None,
    cancel_event: Optional[threading.Event] = None,
    **client_options: Any,
) -> Dict[str, Any]:
    """
    Block until a payment event arrives and return it decoded.

    Waits on a single charge when ``charge_id`` is given, otherwise on all
    charges of the merchant. Without ``client`` one is created from
    ``client_options`` (see :func:`create_client`).
    """
    if client is None:
        with create_client(**client_options) as owned:
            return wait_for_payment(
                charge_id, client=owned, timeout=timeout, cancel_event=cancel_event
            )
    if client_options:
        raise ValueError("Provide either a client or client options, not both.")

    if charge_id:
        message = client.subscribe_charge_payment(
            charge_id, timeout=timeout, cancel_event=cancel_event
        )
    else:
        message = client.subscribe_payments(timeout=timeout, cancel_event=cancel_event)
    try:
        return json.loads(message)
    except ValueError as exc:
        raise SubscriptionError(f"Payment event is not valid JSON: {message!r}") from exc
