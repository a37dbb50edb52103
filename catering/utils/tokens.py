import hmac
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from catering import config


def create_token(username: str) -> str:
    exp = datetime.now(timezone.utc) + timedelta(minutes=config.JWT_EXPIRE_MIN)
    payload = {"sub": username, "iat": datetime.now(timezone.utc), "exp": exp}
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALG)


def decode_token(token: Optional[str]) -> Optional[str]:
    """Username from a valid token, None for missing/expired/forged ones."""
    if not token:
        return None
    try:
        data = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALG])
    except JWTError:
        return None
    return data.get("sub") or None


def check_credentials(username: str, password: str) -> bool:
    # constant-time compare of the fixed env credentials
    user_ok = hmac.compare_digest((username or "").encode(), config.ADMIN_USER.encode())
    pass_ok = hmac.compare_digest((password or "").encode(), config.ADMIN_PASS.encode())
    return user_ok and pass_ok
