"""
Authentication session handling.

The service hands out a short-lived auth token together with a longer-lived
refresh token. :class:`SessionManager` owns both, renews the auth token with
the refresh token and, when the refresh token itself has expired, falls back
to one full authentication with the merchant credentials.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from .config import DEFAULT_TIMEOUT, Credentials, LitegoError
from .endpoints import AUTHENTICATE, REFRESH_AUTH
from .results import CODE_CLIENT_ERROR, ApiResult, Failure, Success, normalize
from .transport import HttpTransport, bearer

__all__ = [
    "AuthenticationError",
    "MISSING_TOKEN",
    "SessionManager",
    "SessionState",
    "TokenPair",
]

logger = logging.getLogger(__name__)

MISSING_TOKEN = "MissingToken"


class AuthenticationError(LitegoError):
    """
    The session could not obtain a usable auth token.

    Raised once the refresh and the single authentication fallback are
    exhausted; there is nothing left to try locally.
    """

    def __init__(self, message: str, result: Optional[Failure] = None) -> None:
        super().__init__(message)
        self.result = result

    @property
    def code(self) -> Optional[int]:
        return self.result.code if self.result is not None else None


@dataclass(frozen=True)
class SessionState:
    auth_token: Optional[str] = None
    refresh_token: Optional[str] = None

    @property
    def authenticated(self) -> bool:
        return bool(self.auth_token)


@dataclass(frozen=True)
class TokenPair:
    auth_token: str
    refresh_token: str


def _describe(result: Failure) -> str:
    return f"{result.code} {result.error_name}: {result.error_message}"


def _require_tokens(result: ApiResult, *names: str) -> ApiResult:
    # A 200 without the issued tokens cannot be used as a session.
    if not isinstance(result, Success):
        return result
    missing = [name for name in names if not result.value.get(name)]
    if not missing:
        return result
    logger.warning("Token response is missing %s", ", ".join(missing))
    return Failure(
        code=result.code,
        error_name=MISSING_TOKEN,
        error_message=f"Response did not include {', '.join(missing)}",
    )


class SessionManager:
    """
    Owns the credentials and the current token pair.

    The state object is replaced as a whole after every successful token
    issue. Renewals run under a re-entrant lock so concurrent callers never
    refresh or re-authenticate twice for the same expired token.
    """

    def __init__(
        self,
        transport: HttpTransport,
        credentials: Credentials,
        *,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.transport = transport
        self.credentials = credentials
        self.timeout = timeout
        self._state = SessionState()
        self._lock = threading.RLock()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def auth_token(self) -> Optional[str]:
        return self._state.auth_token

    @property
    def refresh_token(self) -> Optional[str]:
        return self._state.refresh_token

    def reset(self) -> None:
        with self._lock:
            self._state = SessionState()

    def authenticate(
        self,
        merchant_id: Optional[str] = None,
        secret_key: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> ApiResult:
        """
        Exchange merchant credentials for a fresh auth/refresh token pair.
        """
        data = {
            "merchant_id": merchant_id if merchant_id is not None else self.credentials.merchant_id,
            "secret_key": secret_key if secret_key is not None else self.credentials.secret_key,
        }
        with self._lock:
            raw = self.transport.request(
                AUTHENTICATE.method,
                AUTHENTICATE.path,
                data=data,
                timeout=self.timeout if timeout is None else timeout,
            )
            result = _require_tokens(
                normalize(raw, AUTHENTICATE.fields), "auth_token", "refresh_token"
            )
            if result.ok:
                self._state = SessionState(
                    auth_token=result.value["auth_token"],
                    refresh_token=result.value["refresh_token"],
                )
                logger.info("Authenticated merchant %s", data["merchant_id"])
        return result

    def refresh_auth_token(
        self,
        refresh_token: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> ApiResult:
        """
        Obtain a new auth token using ``refresh_token`` as bearer credential.

        The refresh token is not rotated by this endpoint. A :class:`Failure`
        named ``Forbidden`` means the refresh token has expired.
        Without any refresh token the service is not contacted.
        """
        token = refresh_token if refresh_token is not None else self._state.refresh_token
        if not token:
            return Failure(
                code=CODE_CLIENT_ERROR,
                error_name=MISSING_TOKEN,
                error_message="No refresh token available",
            )
        with self._lock:
            raw = self.transport.request(
                REFRESH_AUTH.method,
                REFRESH_AUTH.path,
                headers=bearer(token),
                timeout=self.timeout if timeout is None else timeout,
            )
            result = _require_tokens(normalize(raw, REFRESH_AUTH.fields), "auth_token")
            if result.ok:
                self._state = SessionState(
                    auth_token=result.value["auth_token"],
                    refresh_token=token,
                )
                logger.debug("Auth token refreshed")
        return result

    def reauthenticate(
        self,
        refresh_token: Optional[str] = None,
        merchant_id: Optional[str] = None,
        secret_key: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> TokenPair:
        """
        Renew the auth token, falling back to full authentication once.

        ``refresh_token`` defaults to the token held by the session; pass an
        empty string to skip the refresh step. A refresh rejected as
        ``Forbidden`` leads to exactly one :meth:`authenticate` call; any
        other refresh failure, or a failing authentication, raises
        :class:`AuthenticationError`.
        """
        with self._lock:
            token = refresh_token if refresh_token is not None else self._state.refresh_token

            if token:
                result = self.refresh_auth_token(token, timeout)
                if isinstance(result, Success):
                    return TokenPair(result.value["auth_token"], token)
                if not result.is_forbidden:
                    logger.error("Refreshing the auth token failed: %s", _describe(result))
                    raise AuthenticationError(
                        f"Refreshing the auth token failed: {_describe(result)}", result
                    )
                logger.warning("Refresh token expired, authenticating with credentials")

            result = self.authenticate(merchant_id, secret_key, timeout)
            if isinstance(result, Failure):
                logger.error("Authentication failed: %s", _describe(result))
                raise AuthenticationError(
                    f"Authentication failed: {_describe(result)}", result
                )
            return TokenPair(result.value["auth_token"], result.value["refresh_token"])

    def ensure_auth_token(self, timeout: Optional[float] = None) -> str:
        """Return the held auth token, obtaining one first if necessary."""
        with self._lock:
            if self._state.auth_token:
                return self._state.auth_token
            return self.reauthenticate(timeout=timeout).auth_token

    def renew(self, stale_auth_token: Optional[str], timeout: Optional[float] = None) -> str:
        """
        Replace ``stale_auth_token`` after the service rejected it.

        If another caller already renewed the session, the newer token is
        returned without contacting the service.
        """
        with self._lock:
            current = self._state.auth_token
            if current and current != stale_auth_token:
                return current
            return self.reauthenticate(timeout=timeout).auth_token
