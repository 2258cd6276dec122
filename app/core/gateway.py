# app/core/gateway.py
import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status

from app.core.security import InvalidToken, TokenCodec

logger = logging.getLogger(__name__)


class Unauthorized(HTTPException):
    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_token_codec(request: Request) -> TokenCodec:
    return request.app.state.token_codec


def _reject(reason: str, detail: str) -> Unauthorized:
    logger.info("rejected request: %s", detail, extra={"auth_reason": reason})
    return Unauthorized(detail)


def get_current_owner(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    codec: TokenCodec = Depends(get_token_codec),
) -> str:
    """
    Resolve the caller's owner id from ``Authorization: Bearer <token>``.

    The owner id is also stored on ``request.state.owner_id``. Any failure
    raises Unauthorized before the route handler runs.
    """
    if not authorization:
        raise _reject("missing_header", "Missing Authorization header")

    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        raise _reject(
            "malformed_header",
            "Invalid Authorization header format. Expected: `Bearer <token>`",
        )

    try:
        owner_id = codec.verify(parts[1])
    except InvalidToken as exc:
        if exc.reason == "invalid_claims":
            raise _reject(exc.reason, "Invalid user ID in token") from exc
        raise _reject(exc.reason, "Invalid token") from exc

    request.state.owner_id = owner_id
    return owner_id
