"""Unit tests for bearer token minting and verification."""

from datetime import UTC, datetime, timedelta

import jwt
import pytest

from voting_portal.core.security import create_access_token, decode_token


class TestJWT:
    """Tests for JWT token creation and decoding."""

    SECRET = "test-secret-key-not-for-production"

    def test_create_and_decode_access_token(self) -> None:
        token = create_access_token("alice", "voter", self.SECRET, voter_id="VOT100001")
        payload = decode_token(token, self.SECRET)
        assert payload["sub"] == "alice"
        assert payload["role"] == "voter"
        assert payload["type"] == "access"
        assert payload["voter_id"] == "VOT100001"
        assert payload["exp"] > payload["iat"]

    def test_admin_token_has_no_voter_id(self) -> None:
        payload = decode_token(create_access_token("root", "admin", self.SECRET), self.SECRET)
        assert "voter_id" not in payload

    def test_wrong_secret_rejected(self) -> None:
        token = create_access_token("alice", "voter", self.SECRET)
        with pytest.raises(jwt.InvalidTokenError):
            decode_token(token, "another-secret-key-not-for-production")

    def test_expired_token_rejected(self) -> None:
        token = create_access_token("alice", "voter", self.SECRET, expires_minutes=-1)
        with pytest.raises(jwt.ExpiredSignatureError):
            decode_token(token, self.SECRET)

    def test_non_access_token_rejected(self) -> None:
        exp = datetime.now(UTC) + timedelta(minutes=5)
        token = jwt.encode({"sub": "alice", "type": "refresh", "exp": exp}, self.SECRET, algorithm="HS256")
        with pytest.raises(jwt.InvalidTokenError, match="not an access token"):
            decode_token(token, self.SECRET)

    @pytest.mark.parametrize("missing", ["sub", "exp"])
    def test_required_claims(self, missing: str) -> None:
        claims = {"sub": "alice", "type": "access", "exp": datetime.now(UTC) + timedelta(minutes=5)}
        del claims[missing]
        token = jwt.encode(claims, self.SECRET, algorithm="HS256")
        with pytest.raises(jwt.MissingRequiredClaimError):
            decode_token(token, self.SECRET)
