from enum import Enum


class AuthEvent(str, Enum):
    """
    Cross-component authentication signals.

    Values keep the event names used by the storefront UI layer.
    """

    LOGIN = "auth:login"
    """
    A session was created (login, signup, token decode or restore).
    Payload: session
    """

    LOGOUT = "auth:logout"
    """
    The session ended (explicit logout or HTTP 401 from any API call).
    Subscribers must clear session and cart state synchronously.
    Payload: reason
    """

    FORBIDDEN = "auth:forbidden"
    """
    A protected resource answered HTTP 403 (role mismatch).
    Subscribers clear admin session state.
    Payload: path, message
    """
