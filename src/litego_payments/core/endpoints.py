"""
Catalogue of the remote Litego endpoints and the fields each one returns.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple
from urllib.parse import quote

__all__ = [
    "AUTHENTICATE",
    "CHARGE_FIELDS",
    "CREATE_CHARGE",
    "Endpoint",
    "GET_CHARGE",
    "LIST_CHARGES",
    "LIST_WITHDRAWALS",
    "MERCHANT",
    "PAGE_FIELDS",
    "REFERRAL_PAYMENTS",
    "REFRESH_AUTH",
    "SET_NOTIFICATION_URL",
    "SET_WITHDRAWAL_ADDRESS",
    "SUBSCRIBE_PAYMENTS_PATH",
    "TRIGGER_WITHDRAWAL",
    "WEBHOOK_RESPONSES",
    "WITHDRAWAL_SETTINGS",
]


@dataclass(frozen=True)
class Endpoint:
    method: str
    path: str
    fields: Tuple[str, ...] = ()

    def format(self, **params: str) -> str:
        """Fill ``{name}`` placeholders in the path with URL-quoted values."""
        if not params:
            return self.path
        return self.path.format(
            **{name: quote(str(value), safe="") for name, value in params.items()}
        )


CHARGE_FIELDS = (
    "id",
    "merchant_id",
    "description",
    "amount",
    "amount_satoshi",
    "payment_request",
    "paid",
    "created",
    "expiry_seconds",
    "object",
)

PAGE_FIELDS = ("data", "page", "page_size", "object", "count")

AUTHENTICATE = Endpoint(
    "POST", "/api/v1/merchant/authenticate", ("auth_token", "refresh_token")
)
REFRESH_AUTH = Endpoint("PUT", "/api/v1/merchant/me/refresh-auth", ("auth_token",))

MERCHANT = Endpoint(
    "GET",
    "/api/v1/merchant/me",
    (
        "id",
        "name",
        "available_balance_satoshi",
        "pending_withdrawal_satoshi",
        "withdrawn_total_satoshi",
        "withdrawal_address",
        "notification_url",
        "object",
    ),
)

CREATE_CHARGE = Endpoint("POST", "/api/v1/charges", CHARGE_FIELDS)
LIST_CHARGES = Endpoint("GET", "/api/v1/charges", PAGE_FIELDS)
GET_CHARGE = Endpoint("GET", "/api/v1/charges/{charge_id}", CHARGE_FIELDS)

SET_WITHDRAWAL_ADDRESS = Endpoint(
    "POST",
    "/api/v1/merchant/me/withdrawal/address",
    ("type", "value", "xpub_key", "object"),
)
TRIGGER_WITHDRAWAL = Endpoint(
    "PUT",
    "/api/v1/merchant/me/withdrawal/manual",
    (
        "transaction_id",
        "merchantId",
        "status",
        "total_amount",
        "relative_fee",
        "manual_fee",
        "created_at",
        "status_changed_at",
        "type",
        "object",
    ),
)
LIST_WITHDRAWALS = Endpoint("GET", "/api/v1/merchant/me/withdrawals", PAGE_FIELDS)
WITHDRAWAL_SETTINGS = Endpoint(
    "GET",
    "/api/v1/merchant/withdrawal/settings",
    ("withdrawal_fee", "withdrawal_manual_fee", "withdrawal_min_amount"),
)

SET_NOTIFICATION_URL = Endpoint(
    "POST", "/api/v1/merchant/me/notification-url", ("url", "object")
)
WEBHOOK_RESPONSES = Endpoint(
    "GET", "/api/v1/merchant/me/notification-responses", PAGE_FIELDS
)
REFERRAL_PAYMENTS = Endpoint(
    "GET", "/api/v1/merchant/me/referral-payments", PAGE_FIELDS
)

SUBSCRIBE_PAYMENTS_PATH = "/api/v1/payments/subscribe"
