import json

import jwt
import pytest

from app.core.security import InvalidToken, TokenCodec

SECRET = "test-secret-key-for-the-scene-api-suite"
OWNER = "507f1f77bcf86cd799439011"


@pytest.fixture
def codec():
    return TokenCodec(SECRET)


def test_round_trip_returns_owner(codec):
    token = codec.issue(OWNER)
    assert codec.verify(token) == OWNER


def test_issued_token_has_only_sub_without_expiry(codec):
    claims = jwt.decode(codec.issue(OWNER), SECRET, algorithms=["HS256"])
    assert claims == {"sub": OWNER}


def test_wrong_secret_is_rejected(codec):
    token = TokenCodec("some-other-secret-of-reasonable-length").issue(OWNER)
    with pytest.raises(InvalidToken):
        codec.verify(token)


@pytest.mark.parametrize("token", ["garbage", "", "a.b.c", "a.b"])
def test_malformed_token_is_rejected(codec, token):
    with pytest.raises(InvalidToken):
        codec.verify(token)


def test_missing_sub_is_rejected(codec):
    token = jwt.encode({"user": OWNER}, SECRET, algorithm="HS256")
    with pytest.raises(InvalidToken) as exc_info:
        codec.verify(token)
    assert exc_info.value.reason == "invalid_claims"


def test_unsigned_token_is_rejected(codec):
    token = jwt.encode({"sub": OWNER}, None, algorithm="none")
    with pytest.raises(InvalidToken):
        codec.verify(token)


def test_expiry_is_added_when_configured():
    codec = TokenCodec(SECRET, expire_minutes=5)
    claims = jwt.decode(codec.issue(OWNER), SECRET, algorithms=["HS256"])
    assert "exp" in claims
    assert codec.verify(codec.issue(OWNER)) == OWNER


def test_expired_token_is_rejected():
    codec = TokenCodec(SECRET, expire_minutes=-1)
    with pytest.raises(InvalidToken):
        codec.verify(codec.issue(OWNER))


def test_token_without_exp_rejected_once_expiry_is_configured():
    token = TokenCodec(SECRET).issue(OWNER)
    with pytest.raises(InvalidToken):
        TokenCodec(SECRET, expire_minutes=5).verify(token)


def test_empty_secret_not_allowed():
    with pytest.raises(ValueError):
        TokenCodec("")


def _token_with_raw_claims(claims: dict) -> str:
    # sign arbitrary JSON so no client-side claim checks get in the way
    return jwt.PyJWS().encode(json.dumps(claims).encode(), SECRET, algorithm="HS256")


@pytest.mark.parametrize("sub", [123, None, ["507f1f77bcf86cd799439011"], {"id": OWNER}])
def test_non_string_sub_is_rejected(codec, sub):
    with pytest.raises(InvalidToken) as exc_info:
        codec.verify(_token_with_raw_claims({"sub": sub}))
    assert exc_info.value.reason == "invalid_claims"


def test_bad_signature_reason(codec):
    header, payload, _ = codec.issue(OWNER).split(".")
    with pytest.raises(InvalidToken) as exc_info:
        codec.verify(f"{header}.{payload}.AAAA")
    assert exc_info.value.reason == "invalid_token"
