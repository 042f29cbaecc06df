"""
Unit tests for unverified JWT helpers (role and expiry of bearer tokens).
"""

import time

import pytest
from jose import jwt

from enums.user_role import UserRole
from utils import jwt_utils


def encode(claims: dict) -> str:
    return jwt.encode(claims, "any-key", algorithm="HS256")


class TestDecode:

    def test_claims_without_verification(self):
        token = encode({"sub": "jane@example.com", "role": "USER"})

        assert jwt_utils.decode_token(token) == {"sub": "jane@example.com", "role": "USER"}

    @pytest.mark.parametrize("token", [None, "", "opaque-session-id", "a.b.c"])
    def test_not_a_jwt(self, token):
        assert jwt_utils.decode_token(token) is None


class TestExpiry:

    def test_missing_token_is_expired(self):
        assert jwt_utils.is_token_expired(None) is True
        assert jwt_utils.is_token_expired("") is True

    def test_past_and_future_exp(self):
        now = time.time()

        assert jwt_utils.is_token_expired(encode({"exp": int(now) - 1})) is True
        assert jwt_utils.is_token_expired(encode({"exp": int(now) + 600})) is False

    def test_exp_equal_to_now_is_expired(self):
        assert jwt_utils.is_token_expired(encode({"exp": 1000}), now=1000) is True

    def test_no_exp_claim(self):
        assert jwt_utils.is_token_expired(encode({"sub": "jane@example.com"})) is False

    def test_opaque_token_never_expires(self):
        assert jwt_utils.is_token_expired("opaque-session-id") is False


class TestRoles:

    @pytest.mark.parametrize("claims,expected", [
        ({"role": "ADMIN"}, UserRole.ADMIN),
        ({"role": "ROLE_ADMIN"}, UserRole.ADMIN),
        ({"role": "user"}, UserRole.USER),
        ({"roles": ["ROLE_USER", "ROLE_ADMIN"]}, UserRole.ADMIN),
        ({"authorities": [{"authority": "ROLE_USER"}]}, UserRole.USER),
        ({"authority": "ROLE_ADMIN"}, UserRole.ADMIN),
        ({"role": "MANAGER", "roles": ["USER"]}, UserRole.USER),
        ({"sub": {"role": "ADMIN"}}, UserRole.ADMIN),
        ({"sub": "jane@example.com"}, None),
        ({}, None),
    ])
    def test_role_from_claims(self, claims, expected):
        assert jwt_utils.get_role_from_claims(claims) == expected

    def test_role_from_token(self):
        assert jwt_utils.get_role_from_token(encode({"role": "ROLE_ADMIN"})) == UserRole.ADMIN
        assert jwt_utils.get_role_from_token("opaque-session-id") is None
