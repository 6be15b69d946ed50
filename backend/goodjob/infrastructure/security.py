"""Auth Security — password digests and signed bearer tokens.

Invariants:
    - hash_password is deterministic: hex sha256 of the UTF-8 password, no salt
    - decode_access_token never raises; an absent, malformed, forged or
      expired token yields None (anonymous caller)
    - Token lifetime is issued_at + token_ttl_days, no refresh

Design Decisions:
    - Unsalted sha256 is kept so hashes already stored stay valid; it is a
      known weakness, not a recommendation
    - Claims keep the camelCase names (userId, isAdmin) existing clients read
"""

import hashlib
import hmac
import logging
import time
from datetime import datetime, timezone

import jwt

from goodjob.config import get_settings
from goodjob.core.domain_types import TokenPayload, UserId

logger = logging.getLogger(__name__)

_SECONDS_PER_DAY = 60 * 60 * 24


def hash_password(plain_password: str) -> str:
    return hashlib.sha256((plain_password or "").encode("utf-8")).hexdigest()


def verify_password(plain_password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    return hmac.compare_digest(hash_password(plain_password), password_hash)


def now_epoch_s() -> int:
    return int(time.time())


def build_access_token(
    *, user_id: int, name: str, is_admin: bool, issued_at: int | None = None,
) -> str:
    settings = get_settings()
    iat = now_epoch_s() if issued_at is None else issued_at
    payload = {
        "userId": user_id,
        "name": name,
        "isAdmin": is_admin,
        "iat": iat,
        "exp": iat + settings.token_ttl_days * _SECONDS_PER_DAY,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str | None) -> TokenPayload | None:
    """Verify signature and expiry. Returns None instead of raising."""
    raw = (token or "").strip()
    if not raw:
        return None

    settings = get_settings()
    try:
        claims = jwt.decode(
            raw, settings.jwt_secret, algorithms=[settings.jwt_algorithm],
            options={"require": ["exp", "iat"]},
        )
    except jwt.InvalidTokenError as exc:
        logger.debug(f"Rejected bearer token: {exc}")
        return None

    user_id = claims.get("userId")
    name = claims.get("name")
    if not isinstance(user_id, int) or isinstance(user_id, bool) or not isinstance(name, str):
        logger.debug("Rejected bearer token: missing identity claims")
        return None

    return TokenPayload(
        user_id=UserId(user_id),
        name=name,
        is_admin=bool(claims.get("isAdmin", False)),
        issued_at=datetime.fromtimestamp(int(claims["iat"]), tz=timezone.utc),
        expires_at=datetime.fromtimestamp(int(claims["exp"]), tz=timezone.utc),
    )
