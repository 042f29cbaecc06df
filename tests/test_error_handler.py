"""
Tests for Error Handler Utility

Tests the centralized error handling system that converts
client exceptions to localized user-friendly messages.
"""

import pytest
from unittest.mock import patch

from enums.message_entity import MessageEntity
from exceptions import (
    AuthenticationRequiredException,
    ForbiddenException,
    InvalidCartStateException,
    InvalidSessionException,
    OperationFailedException,
    StorageUnavailableException,
    StorefrontException,
    TransportException,
    WishlistItemExistsException,
)
from utils.error_handler import handle_service_error, handle_unexpected_error


class TestErrorHandler:
    """Test error handling utility"""

    @patch('utils.error_handler.Localizator')
    def test_missing_token(self, mock_localizator):
        """Missing token asks the user to log in"""
        mock_localizator.get_text.return_value = "Please log in to continue."

        exc = AuthenticationRequiredException(operation="cart_add")
        result = handle_service_error(exc, MessageEntity.USER)

        mock_localizator.get_text.assert_called_with(MessageEntity.USER, "error_authentication_required")
        assert result == "Please log in to continue."

    @patch('utils.error_handler.Localizator')
    def test_unauthorized_means_session_expired(self, mock_localizator):
        """HTTP 401 tells the user the session expired"""
        mock_localizator.get_text.return_value = "Your session has expired."

        exc = AuthenticationRequiredException("cart_fetch", AuthenticationRequiredException.UNAUTHORIZED)
        handle_service_error(exc, MessageEntity.USER)

        mock_localizator.get_text.assert_called_with(MessageEntity.USER, "error_session_expired")

    @patch('utils.error_handler.Localizator')
    def test_operation_failed_carries_backend_message(self, mock_localizator):
        """Backend message is passed through the template"""
        mock_localizator.get_text.return_value = "{message}"

        exc = OperationFailedException("cart_add", 400, "Insufficient stock")
        result = handle_service_error(exc, MessageEntity.USER)

        mock_localizator.get_text.assert_called_with(MessageEntity.USER, "error_operation_failed")
        assert result == "Insufficient stock"

    @patch('utils.error_handler.Localizator')
    def test_template_with_status_code(self, mock_localizator):
        """status_code and operation are available to templates"""
        mock_localizator.get_text.return_value = "{operation} failed with HTTP {status_code}"

        exc = OperationFailedException("cart_clear", 500, "boom")

        assert handle_service_error(exc) == "cart_clear failed with HTTP 500"

    @patch('utils.error_handler.Localizator')
    def test_wishlist_duplicate_is_not_generic_failure(self, mock_localizator):
        """Subclass maps to its own key (exact type lookup)"""
        mock_localizator.get_text.return_value = "Item already in wishlist"

        handle_service_error(WishlistItemExistsException(product_id=42), MessageEntity.USER)

        mock_localizator.get_text.assert_called_with(MessageEntity.USER, "wishlist_item_exists")

    @patch('utils.error_handler.Localizator')
    def test_forbidden_for_admin(self, mock_localizator):
        """Admin consumers get the admin wording"""
        mock_localizator.get_text.return_value = "Admin session expired"

        handle_service_error(ForbiddenException("admin_products", "/admin/products"), MessageEntity.ADMIN)

        mock_localizator.get_text.assert_called_with(MessageEntity.ADMIN, "error_forbidden")

    @patch('utils.error_handler.Localizator')
    def test_missing_format_parameter(self, mock_localizator):
        """Template with an unknown placeholder is returned unformatted"""
        mock_localizator.get_text.return_value = "Failed: {unknown_field}"

        result = handle_service_error(TransportException("cart_fetch", "offline"), MessageEntity.USER)

        assert result == "Failed: {unknown_field}"

    @patch('utils.error_handler.Localizator')
    def test_unmapped_exception(self, mock_localizator):
        """Unknown StorefrontException subclasses get the generic message"""
        mock_localizator.get_text.return_value = "Something went wrong"

        class CustomException(StorefrontException):
            pass

        handle_service_error(CustomException("custom error"), MessageEntity.USER)

        mock_localizator.get_text.assert_called_with(MessageEntity.USER, "error_unexpected")

    @patch('utils.error_handler.Localizator')
    def test_unexpected_error(self, mock_localizator):
        """Non-client exceptions get the generic message"""
        mock_localizator.get_text.return_value = "Something went wrong"

        result = handle_unexpected_error(ValueError("boom"), MessageEntity.USER)

        mock_localizator.get_text.assert_called_with(MessageEntity.USER, "error_unexpected")
        assert result == "Something went wrong"


class TestErrorHandlerWithRealLocalization:
    """End-to-end against l10n/en.json"""

    @pytest.mark.parametrize("exc,expected", [
        (AuthenticationRequiredException("cart_add"), "Please log in to continue."),
        (AuthenticationRequiredException("cart_add", AuthenticationRequiredException.UNAUTHORIZED),
         "Your session has expired. Please log in again."),
        (OperationFailedException("cart_update_quantity", 500, "Failed to update item quantity"),
         "Failed to update item quantity"),
        (WishlistItemExistsException(42), "Item already in wishlist"),
        (InvalidCartStateException("UNAUTHENTICATED", "READY"), "Your cart is busy, please try again."),
        (InvalidSessionException("token has expired"), "Could not start your session. Please log in again."),
        (StorageUnavailableException("storefront_token", "locked"),
         "Your session could not be saved on this device."),
    ])
    def test_user_messages(self, exc, expected):
        assert handle_service_error(exc, MessageEntity.USER) == expected

    def test_admin_forbidden_wording(self):
        exc = ForbiddenException("admin_products", "/admin/products")

        assert handle_service_error(exc, MessageEntity.ADMIN).startswith("Admin session expired")
        assert handle_service_error(exc, MessageEntity.USER) == "You do not have permission to perform this action."
