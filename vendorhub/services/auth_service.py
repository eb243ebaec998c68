"""
Authentication service.

Password hashing with bcrypt and JWT issuing / decoding with PyJWT for the two
kinds of principals: admins (claim ``id``) and app users (claim ``userId``).
"""
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import bcrypt
import jwt

from ..config import settings

logger = logging.getLogger(__name__)


class AuthService:
    """Cryptographic helpers shared by the admin and app auth flows."""

    def __init__(
        self,
        secret: Optional[str] = None,
        algorithm: Optional[str] = None,
        expire_days: Optional[int] = None,
        bcrypt_rounds: Optional[int] = None,
    ):
        self.jwt_secret = secret or settings.jwt_secret
        self.jwt_algorithm = algorithm or settings.jwt_algorithm
        self.token_expire = timedelta(days=expire_days or settings.jwt_expire_days)
        self.bcrypt_rounds = bcrypt_rounds or settings.bcrypt_rounds

    # ------------------------------------------------------------------
    # Passwords
    # ------------------------------------------------------------------

    def hash_password(self, password: str) -> str:
        """Hash a password with a fresh bcrypt salt."""
        salt = bcrypt.gensalt(rounds=self.bcrypt_rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify_password(self, plain_password: str, hashed_password: Optional[str]) -> bool:
        """Check a password against a stored hash. Malformed hashes never match."""
        if not hashed_password:
            return False
        try:
            return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
        except ValueError as e:
            logger.warning(f"Password verification failed: {e}")
            return False

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    def _encode(self, claims: Dict[str, Any]) -> str:
        now = datetime.utcnow()
        payload = {**claims, "iat": now, "exp": now + self.token_expire}
        return jwt.encode(payload, self.jwt_secret, algorithm=self.jwt_algorithm)

    def create_admin_token(self, admin_id: str, email: str, role: str) -> str:
        """Token carried by portal requests."""
        return self._encode({"id": admin_id, "email": email, "role": role})

    def create_user_token(self, user_id: str) -> str:
        """Token carried by customer app requests."""
        return self._encode({"userId": user_id})

    def decode_token(self, token: str) -> Dict[str, Any]:
        """
        Decode and validate a token.

        Raises:
            jwt.ExpiredSignatureError: Token has expired
            jwt.InvalidTokenError: Token is malformed or badly signed
        """
        return jwt.decode(token, self.jwt_secret, algorithms=[self.jwt_algorithm])


# Global auth service instance
auth_service = AuthService()
