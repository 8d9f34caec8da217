"""
Security Primitives
Password hashing (bcrypt) and JWT issuing/verification (python-jose)
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from expense_approvals.exceptions import TokenInvalid


class PasswordHasher:
    """One-way password hash with constant-time verification"""

    def __init__(self, rounds: int = 10):
        self.rounds = rounds

    def hash(self, raw_password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(raw_password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, raw_password: str, hashed_password: str) -> bool:
        """Return True if the password matches; malformed hashes never match"""
        try:
            return bcrypt.checkpw(
                raw_password.encode("utf-8"),
                hashed_password.encode("utf-8"),
            )
        except ValueError:
            return False


class TokenCodec:
    """Signs and verifies self-contained bearer tokens"""

    def __init__(self, secret_key: str, algorithm: str = "HS256"):
        self.secret_key = secret_key
        self.algorithm = algorithm

    def issue(self, claims: Dict[str, Any], ttl: timedelta) -> str:
        """
        Create a signed token

        Args:
            claims: Payload claims (e.g. sub, email)
            ttl: Lifetime added to the current time as the exp claim

        Returns:
            str: Encoded JWT
        """
        now = datetime.now(timezone.utc)
        payload = dict(claims)
        payload.update({"iat": now, "exp": now + ttl})
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> Dict[str, Any]:
        """
        Decode a token, checking signature and expiry

        Raises:
            TokenInvalid: If the token is expired, tampered or malformed
        """
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError as exc:
            raise TokenInvalid("Token expired") from exc
        except JWTError as exc:
            raise TokenInvalid() from exc
