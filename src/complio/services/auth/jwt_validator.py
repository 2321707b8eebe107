"""Local verification of Supabase access tokens."""

import logging
from typing import Any

from jose import JWTError, jwt

logger = logging.getLogger(__name__)


class JWTValidator:
    """
    Verifies Supabase access tokens locally with the project's JWT secret.

    Validates signature (HS256), expiration, issuer and audience without a
    network call.

    Attributes:
        secret: Supabase project JWT secret
        issuer: Expected issuer (iss claim), "<supabase_url>/auth/v1"
        audience: Expected audience (aud claim), typically "authenticated"
        leeway: Clock skew tolerance in seconds

    Example:
        >>> validator = JWTValidator("secret", "https://project.supabase.co/auth/v1")
        >>> claims = validator.verify_token(access_token)
        >>> user_id = claims["sub"]
    """

    algorithms = ["HS256"]

    def __init__(
        self,
        secret: str,
        issuer: str,
        audience: str = "authenticated",
        leeway: int = 10,
    ):
        self.secret = secret
        self.issuer = issuer
        self.audience = audience
        self.leeway = leeway

    def verify_token(self, token: str) -> dict[str, Any]:
        """
        Verify an access token and return its claims.

        Args:
            token: JWT string (without "Bearer " prefix)

        Returns:
            Verified claims (sub, email, user_metadata, exp, iat, iss, aud)

        Raises:
            JWTError: If the token is malformed, expired, or fails verification
        """
        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=self.algorithms,
                audience=self.audience,
                issuer=self.issuer,
                options={
                    "verify_signature": True,
                    "verify_exp": True,
                    "verify_aud": True,
                    "verify_iss": True,
                    "require_exp": True,
                    "leeway": self.leeway,
                },
            )
        except JWTError as e:
            logger.warning(
                f"JWT verification failed: {e}",
                extra={"error_type": "jwt_verification_failed", "error": str(e)},
            )
            raise

        logger.debug(
            "JWT verified successfully",
            extra={"user_id": claims.get("sub"), "exp": claims.get("exp")},
        )
        return claims
