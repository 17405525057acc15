"""
Tests for request authentication helpers.

Tests: check_webhook_basic_auth, decode_access_token, require_authenticated_user, require_admin
"""
import time

import jwt
import pytest

from config import settings
from deps import require_admin
from domain.errors import PermissionDeniedError, UnauthorizedError, WebhookUnauthorizedError
from middleware.auth import check_webhook_basic_auth, decode_access_token, require_authenticated_user
from tests.helpers import basic_header, bearer_headers


class TestWebhookBasicGate:
    """Tests for check_webhook_basic_auth()."""

    @pytest.mark.unit
    @pytest.mark.parametrize("header", [None, "", "Basic", "Basic ", "Basic   ", "Bearer abc", "Digest abc"])
    def test_missing_basic_credentials_rejected(self, header):
        with pytest.raises(WebhookUnauthorizedError) as exc_info:
            check_webhook_basic_auth(header)
        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Unauthorized"

    @pytest.mark.unit
    def test_presence_is_enough_when_unconfigured(self):
        check_webhook_basic_auth(basic_header("anyone", "anything"))
        check_webhook_basic_auth("Basic not-even-base64")

    @pytest.mark.unit
    def test_configured_credentials_match(self, monkeypatch):
        monkeypatch.setattr(settings, "webhook_basic_username", "paymongo")
        monkeypatch.setattr(settings, "webhook_basic_password", "s3cret")
        check_webhook_basic_auth(basic_header("paymongo", "s3cret"))

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "header",
        [
            basic_header("paymongo", "wrong"),
            basic_header("other", "s3cret"),
            "Basic not-even-base64",
            "Basic " + "bm9jb2xvbg==",  # "nocolon"
        ],
    )
    def test_configured_credentials_mismatch(self, monkeypatch, header):
        monkeypatch.setattr(settings, "webhook_basic_username", "paymongo")
        monkeypatch.setattr(settings, "webhook_basic_password", "s3cret")
        with pytest.raises(WebhookUnauthorizedError):
            check_webhook_basic_auth(header)


class TestBearerTokens:
    """Tests for decode_access_token() and require_authenticated_user()."""

    @pytest.mark.unit
    def test_valid_token(self):
        token = bearer_headers("buyer_001", role="customer")["Authorization"].split(" ", 1)[1]
        payload = decode_access_token(token)
        assert payload["sub"] == "buyer_001"
        assert payload["role"] == "customer"

    @pytest.mark.unit
    def test_wrong_issuer_rejected(self):
        now = int(time.time())
        token = jwt.encode(
            {"iss": "someone-else", "sub": "x", "iat": now, "exp": now + 60},
            settings.jwt_secret,
            algorithm="HS256",
        )
        with pytest.raises(UnauthorizedError) as exc_info:
            decode_access_token(token)
        assert exc_info.value.message == "Invalid access token."

    @pytest.mark.unit
    def test_missing_secret_rejects(self, monkeypatch):
        monkeypatch.setattr(settings, "jwt_secret", "")
        with pytest.raises(UnauthorizedError):
            decode_access_token("a.b.c")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_require_authenticated_user_returns_claims(self):
        claims = await require_authenticated_user(
            authorization=bearer_headers("admin_1", role="admin")["Authorization"]
        )
        assert claims == {"sub": "admin_1", "role": "admin"}

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_require_authenticated_user_without_header(self):
        with pytest.raises(UnauthorizedError):
            await require_authenticated_user(authorization=None)


class TestRequireAdmin:
    """Tests for deps.require_admin()."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_admin_passes(self):
        claims = {"sub": "admin_1", "role": "admin"}
        assert await require_admin(claims=claims) == claims

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_customer_rejected(self):
        with pytest.raises(PermissionDeniedError):
            await require_admin(claims={"sub": "buyer_001", "role": "customer"})
