"""Verification of identity-provider access tokens (ES256 JWTs).

The identity provider signs; this service only verifies.  The verifying
key comes from IDP_PUBLIC_KEY.  When it is not configured (dev, test),
an ephemeral EC key pair is generated on import and
``create_access_token`` can mint tokens with it for tests and the demo
script.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

import jwt
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import load_pem_public_key

from lms.core.config import SETTINGS

ALGORITHM = "ES256"
ISSUER = "identity-provider"
AUDIENCE = "lms-service"
ACCESS_TOKEN_TTL_MIN = 15

if SETTINGS.idp_public_key:
    _private_key: ec.EllipticCurvePrivateKey | None = None
    _public_key = load_pem_public_key(SETTINGS.idp_public_key.encode())
else:
    _private_key = ec.generate_private_key(ec.SECP256R1())
    _public_key = _private_key.public_key()


def create_access_token(*, sub: str, roles: list[str] | None = None) -> str:
    """Sign a token with the local dev key.

    Raises RuntimeError when a real identity provider key is configured:
    this service never issues production tokens.
    """
    if _private_key is None:
        raise RuntimeError("token minting is disabled when IDP_PUBLIC_KEY is set")
    now = datetime.now(UTC)
    payload = {
        "sub": sub,
        "iss": ISSUER,
        "aud": AUDIENCE,
        "exp": now + timedelta(minutes=ACCESS_TOKEN_TTL_MIN),
        "iat": now,
        "jti": str(uuid.uuid4()),
        "roles": roles or ["user"],
    }
    return jwt.encode(payload, _private_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Verify signature and claims, return the payload.

    Pins the algorithm to ES256 and validates exp, iss and aud.
    Raises jwt.ExpiredSignatureError, jwt.InvalidTokenError on failure.
    """
    return jwt.decode(
        token,
        _public_key,
        algorithms=[ALGORITHM],
        issuer=ISSUER,
        audience=AUDIENCE,
        options={"require": ["sub", "exp", "iat"]},
    )
