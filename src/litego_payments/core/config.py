"""
Configuration objects and helpers for the Litego client.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlsplit

from .environment import build_environment

__all__ = [
    "ConfigError",
    "Credentials",
    "DEFAULT_TIMEOUT",
    "LIVE_MODE",
    "LitegoConfig",
    "LitegoError",
    "TEST_MODE",
    "load_config",
]

LIVE_MODE = "live"
TEST_MODE = "test"

DEFAULT_TIMEOUT = 10

_SERVICE_URLS = {
    LIVE_MODE: ("https://api.litego.io:9000", "wss://api.litego.io:9000"),
    TEST_MODE: ("https://sandbox.litego.io:9000", "wss://sandbox.litego.io:9000"),
}

_PARAMETER_TO_ENV_KEY = {
    "mode": "LITEGO_MODE",
    "merchant_id": "LITEGO_MERCHANT_ID",
    "secret_key": "LITEGO_SECRET_KEY",
    "timeout": "LITEGO_TIMEOUT",
    "service_url": "LITEGO_SERVICE_URL",
    "ws_service_url": "LITEGO_WS_SERVICE_URL",
}


class LitegoError(Exception):
    """Base class for errors raised by this package."""


class ConfigError(LitegoError):
    """Raised when the supplied configuration is invalid."""


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _required(values: Mapping[str, str], key: str) -> str:
    value = (values.get(key) or "").strip()
    if not value:
        raise ConfigError(f"{key} must be provided")
    return value


def _normalize_mode(raw_mode: str) -> str:
    mode = raw_mode.strip().lower()
    if mode not in _SERVICE_URLS:
        raise ConfigError(
            f"LITEGO_MODE must be '{LIVE_MODE}' or '{TEST_MODE}', got '{raw_mode}'"
        )
    return mode


def _normalize_timeout(raw_timeout: str) -> int:
    try:
        timeout = int(raw_timeout)
    except (TypeError, ValueError) as exc:
        raise ConfigError(
            f"LITEGO_TIMEOUT must be a whole number of seconds, got '{raw_timeout}'"
        ) from exc
    if timeout <= 0:
        raise ConfigError("LITEGO_TIMEOUT must be greater than zero")
    return timeout


def _normalize_url(raw_url: str, schemes: tuple, field_name: str) -> str:
    url = raw_url.strip().rstrip("/")
    parts = urlsplit(url)
    if parts.scheme not in schemes or not parts.netloc:
        raise ConfigError(
            f"{field_name} must be an absolute {'/'.join(schemes)} URL, got '{raw_url}'"
        )
    return url


@dataclass(frozen=True)
class Credentials:
    """
    Merchant credentials used to obtain a token pair.

    Only sent to the authentication endpoint. The secret key is kept out of
    ``repr`` so it does not leak into logs or tracebacks.
    """

    merchant_id: str
    secret_key: str = field(repr=False)


@dataclass(frozen=True)
class LitegoConfig:
    credentials: Credentials
    mode: str = LIVE_MODE
    timeout: int = DEFAULT_TIMEOUT
    service_url: str = _SERVICE_URLS[LIVE_MODE][0]
    ws_service_url: str = _SERVICE_URLS[LIVE_MODE][1]

    @property
    def merchant_id(self) -> str:
        return self.credentials.merchant_id

    @property
    def is_sandbox(self) -> bool:
        return self.mode == TEST_MODE

    @classmethod
    def for_mode(
        cls,
        merchant_id: str,
        secret_key: str,
        *,
        mode: str = LIVE_MODE,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> "LitegoConfig":
        """
        Build a configuration pointing at the production or sandbox service.
        """
        return cls.from_mapping(
            {
                "LITEGO_MODE": mode,
                "LITEGO_MERCHANT_ID": merchant_id,
                "LITEGO_SECRET_KEY": secret_key,
                "LITEGO_TIMEOUT": str(timeout),
            }
        )

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> "LitegoConfig":
        mode = _normalize_mode(values.get("LITEGO_MODE") or LIVE_MODE)
        default_url, default_ws_url = _SERVICE_URLS[mode]

        credentials = Credentials(
            merchant_id=_required(values, "LITEGO_MERCHANT_ID"),
            secret_key=_required(values, "LITEGO_SECRET_KEY"),
        )
        timeout = _normalize_timeout(
            values.get("LITEGO_TIMEOUT") or str(DEFAULT_TIMEOUT)
        )
        service_url = _normalize_url(
            values.get("LITEGO_SERVICE_URL") or default_url,
            ("http", "https"),
            "LITEGO_SERVICE_URL",
        )
        ws_service_url = _normalize_url(
            values.get("LITEGO_WS_SERVICE_URL") or default_ws_url,
            ("ws", "wss"),
            "LITEGO_WS_SERVICE_URL",
        )

        return cls(
            credentials=credentials,
            mode=mode,
            timeout=timeout,
            service_url=service_url,
            ws_service_url=ws_service_url,
        )

    @classmethod
    def from_env(
        cls,
        *,
        env_file: Optional[str] = ".env",
        overrides: Optional[Mapping[str, str]] = None,
        base: Optional[Mapping[str, str]] = None,
        mode: Optional[str] = None,
        merchant_id: Optional[str] = None,
        secret_key: Optional[str] = None,
        timeout: Optional[int | str] = None,
        service_url: Optional[str] = None,
        ws_service_url: Optional[str] = None,
    ) -> "LitegoConfig":
        explicit = {
            "mode": mode,
            "merchant_id": merchant_id,
            "secret_key": secret_key,
            "timeout": timeout,
            "service_url": service_url,
            "ws_service_url": ws_service_url,
        }
        merged_overrides: Dict[str, str] = dict(overrides or {})
        for name, value in explicit.items():
            if value is None:
                continue
            merged_overrides[_PARAMETER_TO_ENV_KEY[name]] = _stringify(value)

        environment = build_environment(
            env_file=env_file,
            base=base,
            overrides=merged_overrides,
        )
        return cls.from_mapping(environment.variables)


def load_config(
    *,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    mode: Optional[str] = None,
    merchant_id: Optional[str] = None,
    secret_key: Optional[str] = None,
    timeout: Optional[int | str] = None,
    service_url: Optional[str] = None,
    ws_service_url: Optional[str] = None,
) -> LitegoConfig:
    """
    Convenience wrapper that mirrors :meth:`LitegoConfig.from_env`.

    Settings may come from environment variables, a ``.env`` file, direct
    keyword arguments, or any combination of the three.
    """
    return LitegoConfig.from_env(
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
