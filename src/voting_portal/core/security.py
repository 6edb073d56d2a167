"""Bearer token minting and verification (PyJWT).

The portal trusts tokens signed with ``jwt_secret_key``: the subject is the
account username and, for voters, ``voter_id`` echoes the roster identifier.
Only ``type == "access"`` tokens with ``sub`` and ``exp`` are accepted.
Minting is exposed for operator tooling (``voting-portal user token``) and
tests; there is no login route.
"""

from datetime import UTC, datetime, timedelta

import jwt

_REQUIRED_CLAIMS = ["exp", "sub"]


def create_access_token(
    subject: str,
    role: str,
    secret_key: str,
    algorithm: str = "HS256",
    expires_minutes: int = 30,
    voter_id: str | None = None,
) -> str:
    """Sign an access token for ``subject``.

    Args:
        subject: Account username.
        role: "admin" or "voter".
        secret_key: Signing key.
        algorithm: JWT signing algorithm.
        expires_minutes: Lifetime in minutes.
        voter_id: Roster identifier, included for voter accounts.

    Returns:
        The encoded JWT string.
    """
    issued_at = datetime.now(UTC)
    payload: dict[str, object] = {
        "sub": subject,
        "role": role,
        "type": "access",
        "iat": issued_at,
        "exp": issued_at + timedelta(minutes=expires_minutes),
    }
    if voter_id is not None:
        payload["voter_id"] = voter_id
    return jwt.encode(payload, secret_key, algorithm=algorithm)


def decode_token(token: str, secret_key: str, algorithm: str = "HS256") -> dict:
    """Verify a token's signature and claims and return its payload.

    Raises:
        jwt.ExpiredSignatureError: If the token has expired.
        jwt.InvalidTokenError: If the token is malformed, lacks a required
            claim, or is not an access token.
    """
    payload = jwt.decode(token, secret_key, algorithms=[algorithm], options={"require": _REQUIRED_CLAIMS})
    if payload.get("type") != "access":
        msg = "Token is not an access token"
        raise jwt.InvalidTokenError(msg)
    return payload
