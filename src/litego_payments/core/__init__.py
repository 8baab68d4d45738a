"""
Core primitives: configuration, transports, sessions and subscriptions.
"""

from .client import LitegoClient
from .config import (
    ConfigError,
    Credentials,
    LitegoConfig,
    LitegoError,
    load_config,
)
from .environment import LitegoEnvironment, build_environment, load_env_file
from .results import ApiResult, Failure, Success, normalize
from .session import AuthenticationError, SessionManager, SessionState, TokenPair
from .subscription import (
    PaymentSubscription,
    SubscriptionCancelled,
    SubscriptionError,
    SubscriptionTimeout,
    Topic,
    subscribe,
)
from .transport import HttpTransport, TransportResult, WebSocketTransport

__all__ = [
    "ApiResult",
    "AuthenticationError",
    "ConfigError",
    "Credentials",
    "Failure",
    "HttpTransport",
    "LitegoClient",
    "LitegoConfig",
    "LitegoEnvironment",
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
    "TransportResult",
    "WebSocketTransport",
    "build_environment",
    "load_config",
    "load_env_file",
    "normalize",
    "subscribe",
]
