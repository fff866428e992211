# app/services/auth_service.py
from typing import Optional, Dict, Any
import logging
import jwt

from app.config import get_settings
from app.schemas.auth import Principal

logger = logging.getLogger(__name__)


class AuthService:
    """Turns bearer credentials into principals.

    Tokens are issued by the identity provider and signed with the shared
    ``JWT_SECRET``; this service only verifies them.
    """

    def __init__(self, settings=None):
        self.settings = settings or get_settings()

    def decode_token(self, token: str) -> Dict[str, Any]:
        """
        Verify a JWT signature and return its payload.

        Raises:
            jwt.PyJWTError: The token is malformed, expired or badly signed.
        """
        options = {}
        kwargs = {}
        if self.settings.JWT_AUDIENCE:
            kwargs["audience"] = self.settings.JWT_AUDIENCE
        else:
            options["verify_aud"] = False

        return jwt.decode(
            token,
            self.settings.JWT_SECRET,
            algorithms=[self.settings.JWT_ALGORITHM],
            options=options,
            **kwargs
        )

    def verify_token(self, token: Optional[str]) -> Optional[Principal]:
        """
        Verify a token and build the principal it carries.

        The application ``userId`` claim wins over the identity ``sub`` claim.
        Returns None for missing, invalid or subject-less tokens.
        """
        if not token:
            return None

        try:
            payload = self.decode_token(token)
        except jwt.PyJWTError as e:
            logger.debug(f"JWT verification failed: {str(e)}")
            return None

        user_id = payload.get("userId")
        if not isinstance(user_id, str) or not user_id:
            user_id = payload.get("sub")
        if not isinstance(user_id, str) or not user_id:
            logger.warning("JWT missing userId claim")
            return None

        roles = payload.get("roles")
        if not isinstance(roles, list):
            roles = []
        tenant = payload.get("tenant")
        if not isinstance(tenant, str):
            tenant = None

        return Principal(
            user_id=user_id,
            tenant=tenant,
            roles=[role for role in roles if isinstance(role, str)]
        )
