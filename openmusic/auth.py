from typing import Optional

from jose import JWTError, jwt

from openmusic.config import get_settings
from openmusic.schemas import TokenPayload


def verify_token(token: str) -> Optional[TokenPayload]:
    """Verify and decode an access token. Token issuance lives outside this service."""
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm]
        )
        return TokenPayload(**payload)
    except (JWTError, ValueError):
        return None
