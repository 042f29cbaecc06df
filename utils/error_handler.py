"""
Turns client exceptions into localized notification text.

The cart reconciler catches StorefrontException around every remote call and
pushes handle_service_error(e) as an ERROR notification; anything else goes
through handle_unexpected_error.
"""

import logging

from enums.message_entity import MessageEntity
from exceptions import (
    StorefrontException,
    AuthenticationRequiredException,
    ForbiddenException,
    OperationFailedException,
    TransportException,
    InvalidCartStateException,
    InvalidSessionException,
    StorageUnavailableException,
    WishlistItemExistsException,
    EmptyCartCheckoutException,
)
from utils.localizator import Localizator

logger = logging.getLogger(__name__)

ERROR_MESSAGE_KEYS: dict[type[StorefrontException], str] = {
    ForbiddenException: "error_forbidden",
    TransportException: "error_transport",
    WishlistItemExistsException: "wishlist_item_exists",
    EmptyCartCheckoutException: "order_cart_empty",
    OperationFailedException: "error_operation_failed",
    InvalidCartStateException: "error_invalid_cart_state",
    InvalidSessionException: "error_invalid_session",
    StorageUnavailableException: "error_storage_unavailable",
}

# Exception attributes available as placeholders in l10n templates
TEMPLATE_FIELDS = ("message", "operation", "status_code", "path")


def _message_key(exception: StorefrontException) -> str | None:
    if isinstance(exception, AuthenticationRequiredException):
        return "error_session_expired" if exception.session_invalid else "error_authentication_required"
    return ERROR_MESSAGE_KEYS.get(type(exception))


def handle_service_error(exception: StorefrontException, entity: MessageEntity = MessageEntity.USER) -> str:
    """
    Localized message for a client exception.

    Templates may reference {message}, {operation}, {status_code} or {path}.
    A template asking for a field the exception does not carry is returned
    as is. Unmapped exception types fall back to the generic error text.
    """
    logger.warning(f"[Error] {type(exception).__name__}: {exception}")

    key = _message_key(exception)
    if key is None:
        logger.error(f"[Error] No message mapped for {type(exception).__name__}")
        return Localizator.get_text(entity, "error_unexpected")

    template = Localizator.get_text(entity, key)
    fields = {name: getattr(exception, name) for name in TEMPLATE_FIELDS if hasattr(exception, name)}
    try:
        return template.format(**fields)
    except KeyError as e:
        logger.error(f"[Error] Template '{key}' needs unknown field {e}")
        return template


def handle_unexpected_error(exception: Exception, entity: MessageEntity = MessageEntity.USER) -> str:
    logger.error(f"[Error] Unexpected {type(exception).__name__}: {exception}", exc_info=True)
    return Localizator.get_text(entity, "error_unexpected")
