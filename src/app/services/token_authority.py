"""
Token Authority

Issues and verifies HS256 bearer tokens. Signature and expiry checks are
stateless; explicitly invalidated tokens are additionally rejected through
the injected denylist until they would have expired anyway.
"""

import logging
from datetime import UTC, datetime, timedelta
from typing import Optional

from jose import JWTError, jwt

from src.app.services.token_denylist import ITokenDenylist
from src.domain.entities import User

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


class TokenAuthority:
    def __init__(self, secret: str, denylist: ITokenDenylist):
        if not secret:
            raise RuntimeError("Token signing secret is not configured")
        self._secret = secret
        self.denylist = denylist

    def _encode(self, claims: dict, expires_in: timedelta) -> str:
        now = datetime.now(UTC)
        payload = {**claims, "iat": now, "exp": now + expires_in}
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def issue_access_token(
        self, user: User, expires_in: timedelta, session_id: Optional[str] = None
    ) -> str:
        """
        Issue a final bearer token.

        Args:
            user: Authenticated user
            expires_in: Token lifetime
            session_id: AdminSession id for administrator tokens

        Returns:
            Signed token carrying id, email, role and optional sessionId
        """
        claims = {"id": str(user.id), "email": user.email, "role": user.role.value}
        if session_id:
            claims["sessionId"] = session_id
        return self._encode(claims, expires_in)

    def issue_two_factor_token(
        self, user: User, expires_in: timedelta, remember_me: bool = False
    ) -> str:
        """Issue the short-lived intermediate token used between password and TOTP steps."""
        claims = {"id": str(user.id), "email": user.email, "role": user.role.value, "temp": True}
        if remember_me:
            claims["rememberMe"] = True
        return self._encode(claims, expires_in)

    def decode(self, token: str) -> Optional[dict]:
        """Verify signature and expiry only. Returns claims or None."""
        try:
            return jwt.decode(token, self._secret, algorithms=[ALGORITHM])
        except JWTError:
            return None

    async def verify(self, token: str) -> Optional[dict]:
        """Verify signature, expiry and denylist membership."""
        payload = self.decode(token)
        if payload is None:
            return None
        if await self.denylist.contains(token):
            logger.info("Rejected denylisted token for subject %s", payload.get("id"))
            return None
        return payload

    async def invalidate(self, token: str) -> None:
        """Deny token for the rest of its natural lifetime."""
        payload = self.decode(token)
        if payload is None:
            # Already unusable
            return
        remaining = int(payload["exp"] - datetime.now(UTC).timestamp())
        await self.denylist.add(token, max(remaining, 1))
