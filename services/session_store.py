"""
Persistent session store.

Keeps the bearer token and user profile under fixed keys of a KeyValueStorage
backend. Regular users live in one keyspace, admins in a parallel one; an admin
save writes both so every authenticated call can read the regular token.

Contract: load_* never raise and return None when nothing usable is stored;
save_* return a success flag instead of raising, so callers can fall back to
an in-memory session when persistence is unavailable.
"""
import logging

from pydantic import ValidationError

from enums.auth_event import AuthEvent
from enums.user_role import UserRole
from exceptions.session import StorageUnavailableException
from models.session import AuthUser, Session
from services.auth_events import AuthEventBus
from services.storage import KeyValueStorage
from utils import jwt_utils

logger = logging.getLogger(__name__)

TOKEN_KEY = "storefront_token"
USER_KEY = "storefront_user"
ADMIN_TOKEN_KEY = "storefront_admin_token"
ADMIN_USER_KEY = "storefront_admin"


class SessionStore:
    def __init__(self, storage: KeyValueStorage):
        self.storage = storage
        # session kept for the process lifetime when the backend refused to persist it
        self._memory_session: Session | None = None

    # ========================================================================
    # Regular keyspace
    # ========================================================================

    def save_auth(self, session: Session) -> bool:
        """
        Persist a session in the regular keyspace.

        Returns:
            True if both entries were written and read back intact
        """
        if not self._is_saveable(session):
            return False
        return self._write(session, [(TOKEN_KEY, USER_KEY)])

    def load_auth(self) -> Session | None:
        session = self._read(TOKEN_KEY, USER_KEY)
        if session is None:
            return None
        if jwt_utils.is_token_expired(session.token):
            logger.info("[SessionStore] Stored token expired, clearing session")
            self.clear_auth()
            return None
        return session

    def clear_auth(self) -> bool:
        self._memory_session = None
        return self._remove(TOKEN_KEY, USER_KEY)

    def hold_in_memory(self, session: Session) -> None:
        """Keep a session that could not be persisted usable until logout."""
        logger.warning("[SessionStore] Persistence unavailable, keeping session in memory only")
        self._memory_session = session

    @property
    def memory_session(self) -> Session | None:
        return self._memory_session

    # ========================================================================
    # Admin keyspace
    # ========================================================================

    def save_admin_auth(self, session: Session) -> bool:
        """
        Persist an admin session in both keyspaces.

        Refused (False) unless the profile carries the ADMIN role. A token whose
        claims name another role is logged but the profile role wins.
        """
        if not self._is_saveable(session):
            return False
        if session.user.role != UserRole.ADMIN:
            logger.error(f"[SessionStore] Refusing admin save for role {session.user.role.value}")
            return False
        token_role = jwt_utils.get_role_from_token(session.token)
        if token_role is not None and token_role != UserRole.ADMIN:
            logger.warning(f"[SessionStore] Token role mismatch: expected ADMIN, got {token_role.value}")
        return self._write(session, [(ADMIN_TOKEN_KEY, ADMIN_USER_KEY), (TOKEN_KEY, USER_KEY)])

    def load_admin_auth(self) -> Session | None:
        session = self._read(ADMIN_TOKEN_KEY, ADMIN_USER_KEY)
        if session is None:
            return None
        if jwt_utils.is_token_expired(session.token):
            logger.info("[SessionStore] Stored admin token expired, clearing admin session")
            self.clear_admin_auth()
            return None
        role = jwt_utils.get_role_from_token(session.token) or session.user.role
        if role != UserRole.ADMIN:
            logger.warning("[SessionStore] Stored admin session lacks ADMIN role, clearing it")
            self.clear_admin_auth()
            return None
        return session

    def clear_admin_auth(self, include_user: bool = True) -> bool:
        keys = [ADMIN_TOKEN_KEY, ADMIN_USER_KEY]
        if include_user:
            self._memory_session = None
            keys += [TOKEN_KEY, USER_KEY]
        elif self._memory_session is not None and self._memory_session.is_admin:
            self._memory_session = None
        return self._remove(*keys)

    # ========================================================================
    # Token helpers
    # ========================================================================

    def get_token(self) -> str | None:
        token = self._get(TOKEN_KEY)
        if token is None and self._memory_session is not None:
            return self._memory_session.token
        return token

    def get_admin_token(self) -> str | None:
        return self._get(ADMIN_TOKEN_KEY)

    def is_authenticated(self) -> bool:
        token = self.get_token()
        return bool(token) and not jwt_utils.is_token_expired(token)

    def is_admin_authenticated(self) -> bool:
        """
        Admin check falling back from the admin keyspace to the regular one,
        then from stored profiles to the token's role claim.
        """
        token = self.get_admin_token() or self.get_token()
        if not token or jwt_utils.is_token_expired(token):
            return False
        for user_key in (ADMIN_USER_KEY, USER_KEY):
            user = self._parse_user(self._get(user_key))
            if user is not None and user.role == UserRole.ADMIN:
                return True
        return jwt_utils.get_role_from_token(token) == UserRole.ADMIN

    def get_user_role(self) -> UserRole | None:
        return jwt_utils.get_role_from_token(self.get_token())

    def decode_token(self, token: str | None = None) -> dict | None:
        return jwt_utils.decode_token(token or self.get_token())

    def is_token_expired(self, token: str | None = None) -> bool:
        return jwt_utils.is_token_expired(token or self.get_token())

    # ========================================================================
    # Auth signals
    # ========================================================================

    def bind(self, event_bus: AuthEventBus) -> None:
        """Clear stored state on auth:logout (everything) and auth:forbidden (admin keyspace)."""
        event_bus.subscribe(AuthEvent.LOGOUT, self._on_logout)
        event_bus.subscribe(AuthEvent.FORBIDDEN, self._on_forbidden)

    def _on_logout(self, reason: str = "", **_) -> None:
        logger.info(f"[SessionStore] Logout ({reason or 'unspecified'}), clearing stored session")
        self.clear_admin_auth(include_user=True)

    def _on_forbidden(self, path: str = "", **_) -> None:
        logger.warning(f"[SessionStore] Forbidden on {path or 'unknown path'}, clearing admin session")
        self.clear_admin_auth(include_user=False)

    # ========================================================================
    # Storage plumbing
    # ========================================================================

    @staticmethod
    def _is_saveable(session: Session) -> bool:
        if not session.token:
            logger.error("[SessionStore] Invalid token provided")
            return False
        if not session.user.email:
            logger.error("[SessionStore] Invalid user data: missing email")
            return False
        return True

    def _write(self, session: Session, keyspaces: list[tuple[str, str]]) -> bool:
        user_json = session.user.model_dump_json(by_alias=True, exclude_none=True)
        written: list[str] = []
        try:
            for token_key, user_key in keyspaces:
                self.storage.set_item(token_key, session.token)
                written.append(token_key)
                self.storage.set_item(user_key, user_json)
                written.append(user_key)
            for token_key, user_key in keyspaces:
                if self.storage.get_item(token_key) != session.token or self.storage.get_item(user_key) != user_json:
                    logger.error("[SessionStore] Failed to verify saved auth data")
                    self._remove(*written)
                    return False
        except StorageUnavailableException as e:
            logger.error(f"[SessionStore] Error saving auth data: {e}")
            self._remove(*written)
            return False
        logger.info(f"[SessionStore] Auth data saved for user {session.user.id} ({session.user.role.value})")
        return True

    def _read(self, token_key: str, user_key: str) -> Session | None:
        try:
            token = self.storage.get_item(token_key)
            user_json = self.storage.get_item(user_key)
        except StorageUnavailableException as e:
            logger.error(f"[SessionStore] Error loading auth data: {e}")
            return None
        if not token or not user_json:
            return None
        user = self._parse_user(user_json)
        if user is None:
            return None
        return Session(token=token, user=user)

    @staticmethod
    def _parse_user(user_json: str | None) -> AuthUser | None:
        if not user_json:
            return None
        try:
            return AuthUser.model_validate_json(user_json)
        except ValidationError as e:
            logger.error(f"[SessionStore] Stored user profile is unreadable: {e.error_count()} error(s)")
            return None

    def _get(self, key: str) -> str | None:
        try:
            return self.storage.get_item(key)
        except StorageUnavailableException as e:
            logger.error(f"[SessionStore] Error reading '{key}': {e}")
            return None

    def _remove(self, *keys: str) -> bool:
        success = True
        for key in keys:
            try:
                self.storage.remove_item(key)
            except StorageUnavailableException as e:
                logger.error(f"[SessionStore] Error clearing '{key}': {e}")
                success = False
        return success
