"""
Custom exceptions for the storefront client.

This module provides a hierarchy of custom exceptions for consistent error handling
throughout the application.

Exception Hierarchy:
--------------------
StorefrontException (base)
├── ApiException
│   ├── AuthenticationRequiredException
│   ├── ForbiddenException
│   ├── OperationFailedException
│   │   ├── WishlistItemExistsException
│   │   └── EmptyCartCheckoutException
│   └── TransportException
├── CartException
│   └── InvalidCartStateException
└── SessionException
    ├── InvalidSessionException
    └── StorageUnavailableException

Usage:
------
Clients raise specific exceptions:
    raise AuthenticationRequiredException(operation="cart_add")

The cart reconciler turns them into transient notifications:
    try:
        await cart_client.add_to_cart(42, 2)
    except StorefrontException as e:
        notifications.push(handle_service_error(e, MessageEntity.USER))
"""

from .base import StorefrontException
from .api import (
    ApiException,
    AuthenticationRequiredException,
    ForbiddenException,
    OperationFailedException,
    TransportException,
)
from .cart import CartException, InvalidCartStateException
from .session import SessionException, InvalidSessionException, StorageUnavailableException
from .wishlist import WishlistItemExistsException
from .order import EmptyCartCheckoutException

__all__ = [
    # Base
    'StorefrontException',

    # API
    'ApiException',
    'AuthenticationRequiredException',
    'ForbiddenException',
    'OperationFailedException',
    'TransportException',

    # Cart
    'CartException',
    'InvalidCartStateException',

    # Session
    'SessionException',
    'InvalidSessionException',
    'StorageUnavailableException',

    # Wishlist
    'WishlistItemExistsException',

    # Orders
    'EmptyCartCheckoutException',
]
