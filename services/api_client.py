"""
Shared HTTP plumbing for the storefront REST clients.

ApiClient owns one lazily created aiohttp.ClientSession and turns every HTTP
outcome into either a parsed body or a typed exception:

    missing token      -> AuthenticationRequiredException (no request sent)
    401 (with token)   -> AuthenticationRequiredException + auth:logout
    403 on /admin/...  -> ForbiddenException + auth:forbidden
    404 (if allowed)   -> None
    other non-2xx      -> OperationFailedException with the backend message
    no response        -> TransportException

No retries. A timeout is only set when HTTP_TIMEOUT_SECONDS is configured.
"""
import asyncio
import json
import logging
from typing import Any

import aiohttp

import config
from enums.auth_event import AuthEvent
from enums.message_entity import MessageEntity
from exceptions.api import (
    AuthenticationRequiredException,
    ForbiddenException,
    OperationFailedException,
    TransportException,
)
from services.auth_events import AuthEventBus
from services.session_store import SessionStore
from utils.localizator import Localizator

logger = logging.getLogger(__name__)

ADMIN_PATH_PREFIX = "/admin/"


class ApiClient:
    def __init__(self, session_store: SessionStore, event_bus: AuthEventBus,
                 base_url: str | None = None, timeout: float | None = None):
        self.session_store = session_store
        self.event_bus = event_bus
        self.base_url = (base_url or config.API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else config.HTTP_TIMEOUT_SECONDS
        self._http: aiohttp.ClientSession | None = None

    def _get_http(self) -> aiohttp.ClientSession:
        # created inside the running loop on first use
        if self._http is None or self._http.closed:
            if self.timeout:
                self._http = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout))
            else:
                self._http = aiohttp.ClientSession()
        return self._http

    async def close(self) -> None:
        if self._http is not None and not self._http.closed:
            await self._http.close()
        self._http = None

    def _require_token(self, operation: str) -> str:
        token = self.session_store.get_token()
        if not token:
            logger.warning(f"[API] {operation}: no token available, request not sent")
            raise AuthenticationRequiredException(operation)
        return token

    async def _request(self, method: str, path: str, operation: str, *,
                       params: dict | None = None,
                       json_body: Any = None,
                       authenticated: bool = True,
                       not_found_as_none: bool = False,
                       forbidden_signal: bool | None = None) -> Any:
        """
        Send one request and return the parsed body.

        Args:
            method: HTTP method
            path: Path below base_url, starting with "/"
            operation: Operation name used in logs, exceptions and the
                generic "<operation>_failed" l10n message
            params: Query parameters (values are stringified)
            json_body: JSON request body
            authenticated: Attach the bearer token (and fail before sending if absent)
            not_found_as_none: Return None on HTTP 404 instead of raising
            forbidden_signal: Treat HTTP 403 as a role mismatch (ForbiddenException
                and auth:forbidden). Defaults to True for admin-scoped paths only;
                elsewhere a 403 is an ordinary failure carrying the backend message

        Returns:
            Decoded JSON, the raw text for non-JSON bodies, or None for an empty body
        """
        headers = {"Accept": "application/json"}
        if authenticated:
            headers["Authorization"] = f"Bearer {self._require_token(operation)}"
        if params:
            params = {key: str(value) for key, value in params.items()}

        url = f"{self.base_url}{path}"
        logger.debug(f"[API] {method} {path} ({operation})")
        try:
            async with self._get_http().request(method, url, params=params, json=json_body,
                                                headers=headers) as response:
                status = response.status
                body = await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"[API] {operation}: no response from {method} {path}: {type(e).__name__} {e}")
            raise TransportException(
                operation,
                Localizator.get_text(MessageEntity.COMMON, "error_transport"),
                reason=type(e).__name__
            )

        if 200 <= status < 300:
            return self._parse_body(body)

        if status == 404 and not_found_as_none:
            logger.debug(f"[API] {operation}: 404 treated as empty")
            return None

        if status == 401 and authenticated:
            logger.warning(f"[API] {operation}: 401 from {path}, session invalid")
            self.event_bus.publish(AuthEvent.LOGOUT, reason="token_expired")
            raise AuthenticationRequiredException(operation, AuthenticationRequiredException.UNAUTHORIZED)

        if forbidden_signal is None:
            forbidden_signal = path.startswith(ADMIN_PATH_PREFIX)
        if status == 403 and forbidden_signal:
            message = self._error_message(body)
            logger.warning(f"[API] {operation}: 403 from {path}")
            self.event_bus.publish(AuthEvent.FORBIDDEN, path=path, message=message or "")
            raise ForbiddenException(operation, path)

        message = self._error_message(body) or self._generic_message(operation)
        logger.error(f"[API] {operation}: HTTP {status} from {method} {path}: {message}")
        raise OperationFailedException(operation, status, message)

    @staticmethod
    def _parse_body(body: str) -> Any:
        if not body or not body.strip():
            return None
        try:
            return json.loads(body)
        except ValueError:
            # plain-text confirmations, e.g. "Cart cleared successfully"
            return body

    @staticmethod
    def _error_message(body: str) -> str | None:
        """Backend message from a plain-text body or a JSON message/error field."""
        if not body or not body.strip():
            return None
        try:
            payload = json.loads(body)
        except ValueError:
            return body.strip()
        if isinstance(payload, str):
            return payload.strip() or None
        if isinstance(payload, dict):
            for field in ("message", "error"):
                value = payload.get(field)
                if isinstance(value, str) and value.strip():
                    return value.strip()
        return None

    @staticmethod
    def _generic_message(operation: str) -> str:
        try:
            return Localizator.get_text(MessageEntity.USER, f"{operation}_failed")
        except KeyError:
            return Localizator.get_text(MessageEntity.COMMON, "error_unexpected")
