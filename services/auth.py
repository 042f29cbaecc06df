import logging

from pydantic import ValidationError

from enums.auth_event import AuthEvent
from enums.user_role import UserRole
from exceptions.session import InvalidSessionException
from models.session import AuthUser, Session
from services.api_client import ApiClient
from utils import jwt_utils

logger = logging.getLogger(__name__)


class AuthService(ApiClient):
    """
    Session lifecycle: login, signup, token login, logout and restore.

    Every new session is persisted through the SessionStore (admin sessions in
    both keyspaces) and announced with auth:login, which makes the cart
    reconciler load the remote cart. If persistence fails the session is kept
    in memory for the lifetime of the process.
    """

    _session: Session | None = None

    @property
    def current_session(self) -> Session | None:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    def bind(self) -> None:
        # a 401 anywhere ends the session held here as well
        self.event_bus.subscribe(AuthEvent.LOGOUT, self._forget_session)

    async def login(self, email: str, password: str) -> Session:
        """
        Authenticate with e-mail and password.

        Raises:
            OperationFailedException: Bad credentials or backend error
            TransportException: Backend unreachable
            InvalidSessionException: Response carried no usable token
        """
        payload = await self._request("POST", "/auth/login", "auth_login",
                                      json_body={"email": email, "password": password},
                                      authenticated=False)
        session = self._session_from_response(payload)
        logger.info(f"[Auth] Login succeeded for user {session.user.id} ({session.user.role.value})")
        return await self._establish(session)

    async def signup(self, email: str, password: str, first_name: str, last_name: str,
                     phone_number: str = "", role: UserRole = UserRole.USER) -> Session | None:
        """
        Register a new account.

        Returns:
            The new session when the backend issues a token on signup, else None
        """
        payload = await self._request("POST", "/auth/signup", "auth_signup",
                                      json_body={
                                          "email": email,
                                          "password": password,
                                          "firstName": first_name,
                                          "lastName": last_name,
                                          "phoneNumber": phone_number,
                                          "role": role.value,
                                      },
                                      authenticated=False)
        if not isinstance(payload, dict) or not payload.get("token"):
            logger.info("[Auth] Signup succeeded without a token, login required")
            return None
        session = self._session_from_response(payload)
        logger.info(f"[Auth] Signup succeeded for user {session.user.id}")
        return await self._establish(session)

    async def login_with_token(self, token: str) -> Session:
        """
        Create a session from a bearer token obtained out of band (OAuth callback).
        The profile is read from the token's claims without verifying the signature.

        Raises:
            InvalidSessionException: Token is not a JWT or has expired
        """
        claims = jwt_utils.decode_token(token)
        if not claims:
            raise InvalidSessionException("token is not a decodable JWT")
        if jwt_utils.is_token_expired(token):
            raise InvalidSessionException("token has expired")
        user = self._user_from_claims(claims)
        return await self._establish(Session(token=token, user=user))

    async def logout(self, reason: str = "user_logout") -> None:
        logger.info(f"[Auth] Logout ({reason})")
        self._session = None
        self.session_store.clear_admin_auth(include_user=True)
        self.event_bus.publish(AuthEvent.LOGOUT, reason=reason)

    async def restore_session(self) -> Session | None:
        """Re-establish the persisted session on startup (admin keyspace first)."""
        session = self.session_store.load_admin_auth() or self.session_store.load_auth()
        if session is None:
            logger.info("[Auth] No stored session to restore")
            return None
        logger.info(f"[Auth] Restored session for user {session.user.id}")
        self._session = session
        await self.event_bus.emit(AuthEvent.LOGIN, session=session)
        return session

    async def _establish(self, session: Session) -> Session:
        if session.is_admin:
            persisted = self.session_store.save_admin_auth(session)
        else:
            persisted = self.session_store.save_auth(session)
        if not persisted:
            self.session_store.hold_in_memory(session)
        self._session = session
        await self.event_bus.emit(AuthEvent.LOGIN, session=session)
        return session

    def _forget_session(self, **_) -> None:
        self._session = None

    @staticmethod
    def _session_from_response(payload) -> Session:
        if not isinstance(payload, dict):
            raise InvalidSessionException("unexpected login response")
        token = payload.get("token")
        if not token or not isinstance(token, str):
            raise InvalidSessionException("response carries no token")
        try:
            user = AuthUser.model_validate(payload)
        except ValidationError as e:
            raise InvalidSessionException(f"unreadable user profile ({e.error_count()} error(s))")
        return Session(token=token, user=user)

    @staticmethod
    def _user_from_claims(claims: dict) -> AuthUser:
        subject = claims.get("sub")
        email = claims.get("email") or (subject if isinstance(subject, str) and "@" in subject else None)
        return AuthUser(
            id=claims.get("userId", claims.get("id")),
            email=email,
            name=claims.get("name"),
            first_name=claims.get("firstName", claims.get("given_name")),
            last_name=claims.get("lastName", claims.get("family_name")),
            role=jwt_utils.get_role_from_claims(claims) or UserRole.USER,
        )
