"""
Request builders shared by the webhook and order tests.
"""
import base64
import hashlib
import hmac
import json
import time

import jwt

from config import settings

TEST_WEBHOOK_SECRET = "whsk_test_secret_for_pytest_only"


def sign_body(body: bytes, secret: str = TEST_WEBHOOK_SECRET) -> str:
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def event_body(event_type: str, data_id: str, attributes: dict | None = None) -> bytes:
    payload = {"type": event_type, "data": {"id": data_id, "attributes": attributes or {}}}
    return json.dumps(payload).encode("utf-8")


def basic_header(username: str = "paymongo", password: str = "") -> str:
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


def webhook_headers(body: bytes, signature: str | None = None) -> dict:
    return {
        "Authorization": basic_header(),
        "Content-Type": "application/json",
        "Paymongo-Signature": signature if signature is not None else sign_body(body),
    }


def bearer_headers(sub: str, role: str = "customer", ttl_seconds: int = 900) -> dict:
    now = int(time.time())
    token = jwt.encode(
        {"iss": settings.jwt_issuer, "sub": sub, "role": role, "iat": now, "exp": now + ttl_seconds},
        settings.jwt_secret,
        algorithm="HS256",
    )
    return {"Authorization": f"Bearer {token}"}
