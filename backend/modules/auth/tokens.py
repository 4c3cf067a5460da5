"""
Token issuance and verification.

Access tokens embed the identity ID and its role at issuance time. Refresh
tokens are signed with a separate secret and only carry the identity ID.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
import jwt

from shared.config import Settings
from shared.exceptions import ConfigurationError
from shared.models import Role

from .exceptions import ExpiredTokenError, InvalidRefreshTokenError, InvalidTokenError
from .models import TokenClaims, TokenType


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """
    Issues and verifies signed session tokens.

    The clock is injectable so tests can issue tokens "in the past".
    """

    def __init__(
        self,
        secret: str,
        refresh_secret: str,
        algorithm: str = "HS256",
        access_lifetime: timedelta = timedelta(days=7),
        extended_lifetime: timedelta = timedelta(days=30),
        refresh_lifetime: timedelta = timedelta(days=30),
        clock: Callable[[], datetime] = _utcnow,
    ):
        if not secret:
            raise ConfigurationError("JWT_SECRET is not configured", setting="jwt_secret")
        if not refresh_secret:
            raise ConfigurationError(
                "JWT_REFRESH_SECRET is not configured", setting="jwt_refresh_secret"
            )
        self._secret = secret
        self._refresh_secret = refresh_secret
        self._algorithm = algorithm
        self._access_lifetime = access_lifetime
        self._extended_lifetime = extended_lifetime
        self._refresh_lifetime = refresh_lifetime
        self._clock = clock

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> "TokenService":
        """Build a token service from application settings."""
        return cls(
            secret=settings.jwt_secret,
            refresh_secret=settings.jwt_refresh_secret,
            algorithm=settings.jwt_algorithm,
            access_lifetime=timedelta(days=settings.access_token_expire_days),
            extended_lifetime=timedelta(days=settings.extended_token_expire_days),
            refresh_lifetime=timedelta(days=settings.refresh_token_expire_days),
            clock=clock or _utcnow,
        )

    def issue(self, identity_id: str, role: Role, extended: bool = False) -> str:
        """
        Issue an access token.

        Args:
            identity_id: ID of the identity the token is for
            role: Role to embed (snapshot, not re-checked on verification)
            extended: Use the "remember me" lifetime

        Returns:
            Encoded JWT
        """
        lifetime = self._extended_lifetime if extended else self._access_lifetime
        return self._encode(
            {"sub": identity_id, "role": Role(role).value, "type": TokenType.ACCESS.value},
            lifetime,
            self._secret,
        )

    def verify(self, token: str) -> TokenClaims:
        """
        Verify an access token.

        Raises:
            ExpiredTokenError: If the token has expired
            InvalidTokenError: If the token is malformed, tampered with,
                or is not an access token
        """
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError:
            raise ExpiredTokenError()
        except jwt.InvalidTokenError:
            raise InvalidTokenError()

        claims = self._to_claims(payload)
        if claims is None or claims.type is not TokenType.ACCESS or claims.role is None:
            raise InvalidTokenError()
        return claims

    def issue_refresh(self, identity_id: str) -> str:
        """Issue a refresh token signed with the refresh secret."""
        return self._encode(
            {"sub": identity_id, "type": TokenType.REFRESH.value},
            self._refresh_lifetime,
            self._refresh_secret,
        )

    def verify_refresh(self, token: str) -> TokenClaims:
        """
        Verify a refresh token.

        Raises:
            InvalidRefreshTokenError: For any failure, expiry included
        """
        try:
            payload = jwt.decode(token, self._refresh_secret, algorithms=[self._algorithm])
        except jwt.InvalidTokenError:
            raise InvalidRefreshTokenError()

        claims = self._to_claims(payload)
        if claims is None or claims.type is not TokenType.REFRESH:
            raise InvalidRefreshTokenError()
        return claims

    def _encode(self, claims: dict, lifetime: timedelta, secret: str) -> str:
        now = self._clock()
        payload = {
            **claims,
            "iat": int(now.timestamp()),
            "exp": int((now + lifetime).timestamp()),
        }
        return jwt.encode(payload, secret, algorithm=self._algorithm)

    @staticmethod
    def _to_claims(payload: dict) -> Optional[TokenClaims]:
        try:
            return TokenClaims.model_validate(payload)
        except ValueError:
            return None
