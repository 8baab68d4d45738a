"""
Public facade for the Litego payment client.

The most useful pieces are re-exported here so integrators can
``from litego_payments import ...`` without navigating the package.
"""

from .api import create_client, wait_for_payment
from .core import (
    ApiResult,
    AuthenticationError,
    ConfigError,
    Credentials,
    Failure,
    LitegoClient,
    LitegoConfig,
    LitegoError,
    PaymentSubscription,
    SessionManager,
    SessionState,
    SubscriptionCancelled,
    SubscriptionError,
    SubscriptionTimeout,
    Success,
    TokenPair,
    Topic,
    build_environment,
    load_config,
    load_env_file,
)

__all__ = (
    "ApiResult",
    "AuthenticationError",
    "ConfigError",
    "Credentials",
    "Failure",
    "LitegoClient",
    "LitegoConfig",
    "LitegoError",
    "PaymentSubscription",
    "SessionManager",
    "SessionState",
    "SubscriptionCancelled",
    "SubscriptionError",
    "SubscriptionTimeout",
    "Success",
    "TokenPair",
    "Topic",
    "build_environment",
    "create_client",
    "load_config",
    "load_env_file",
    "wait_for_payment",
)
