# app/core/security.py
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt


class InvalidToken(Exception):
    """
    Raised by TokenCodec.verify. ``reason`` is a short machine-friendly tag
    ("invalid_token" or "invalid_claims") used for logging.
    """

    def __init__(self, message: str, reason: str = "invalid_token"):
        super().__init__(message)
        self.reason = reason


class TokenCodec:
    """
    Issues and verifies signed identity tokens carrying the owner id as ``sub``.

    Stateless apart from the secret it is built with. Whether an owner id
    refers to an existing user is not checked here.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expire_minutes: Optional[int] = None,
    ):
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expire_minutes = expire_minutes

    def issue(self, owner_id: str) -> str:
        payload = {"sub": owner_id}
        if self._expire_minutes is not None:
            payload["exp"] = datetime.now(timezone.utc) + timedelta(minutes=self._expire_minutes)
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: str) -> str:
        required = ["exp"] if self._expire_minutes is not None else []
        try:
            claims = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                # the sub shape is checked below so it reports as a claims problem
                options={"require": required, "verify_sub": False},
            )
        except jwt.PyJWTError as exc:
            raise InvalidToken(f"invalid token: {exc}") from exc

        sub = claims.get("sub")
        if not isinstance(sub, str):
            raise InvalidToken("invalid user id in token", reason="invalid_claims")
        return sub
