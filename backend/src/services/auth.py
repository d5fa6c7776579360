"""Bearer-token authentication for the record API.

The identity provider is expected to hand clients an HS256 JWT whose ``sub``
claim is the user id that owns rows in the record tables. Local development can
additionally use a static token that maps to the ``local-dev`` user.
"""

from __future__ import annotations

import abc
import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import jwt
from fastapi import status
from pydantic import ValidationError

from ..models.auth import JWTPayload
from .config import AppConfig, get_config

LOCAL_DEV_USER_ID = "local-dev"
LOCAL_DEV_SECRET = "local-dev-secret-key-123"


class AuthError(Exception):
    """Domain-specific authentication error."""

    def __init__(
        self,
        error: str,
        message: str,
        *,
        status_code: int = status.HTTP_401_UNAUTHORIZED,
        detail: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.error = error
        self.message = message
        self.status_code = status_code
        self.detail = detail or {}


def _dev_secret_allowed(config: AppConfig) -> bool:
    env = os.getenv("ENVIRONMENT", "").lower()
    return env in ("development", "dev") and config.enable_local_mode


class TokenValidator(abc.ABC):
    """Strategy for turning a bearer token into a payload."""

    @abc.abstractmethod
    def validate(self, token: str) -> Optional[JWTPayload]:
        """
        Return the payload for a recognized token, or None to let the next
        validator try. Raise AuthError if the token is recognized but invalid.
        """


class StaticTokenValidator(TokenValidator):
    """Accepts one configured token and maps it to a fixed user."""

    def __init__(self, static_token: Optional[str], user_id: str):
        self.static_token = static_token
        self.user_id = user_id

    def validate(self, token: str) -> Optional[JWTPayload]:
        if self.static_token and token == self.static_token:
            now = datetime.now(timezone.utc)
            return JWTPayload(
                sub=self.user_id,
                iat=int(now.timestamp()),
                exp=int((now + timedelta(days=365)).timestamp()),
            )
        return None


class JWTValidator(TokenValidator):
    """Validates JWTs signed with the application secret."""

    def __init__(self, config: AppConfig, algorithm: str = "HS256"):
        self.config = config
        self.algorithm = algorithm

    def _require_secret(self) -> str:
        secret = self.config.jwt_secret_key
        if secret:
            return secret
        if _dev_secret_allowed(self.config) and self.config.local_dev_token:
            return LOCAL_DEV_SECRET
        raise AuthError(
            "missing_jwt_secret",
            "JWT secret is not configured.",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    def validate(self, token: str) -> Optional[JWTPayload]:
        secret = self._require_secret()
        try:
            decoded = jwt.decode(token, secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError as exc:
            raise AuthError("token_expired", "Token expired") from exc
        except jwt.DecodeError:
            # Not a JWT at all
            return None
        except jwt.InvalidTokenError as exc:
            raise AuthError("invalid_token", f"Invalid token: {exc}") from exc
        try:
            return JWTPayload(**decoded)
        except ValidationError as exc:
            raise AuthError("invalid_token", "Token is missing required claims") from exc


class AuthService:
    """Issue and validate tokens using the configured strategies."""

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        algorithm: str = "HS256",
        token_ttl_days: int = 90,
    ) -> None:
        self.config = config or get_config()
        self.algorithm = algorithm
        self.token_ttl_days = token_ttl_days

        self.validators: List[TokenValidator] = []
        if self.config.enable_local_mode:
            self.validators.append(
                StaticTokenValidator(self.config.local_dev_token, LOCAL_DEV_USER_ID)
            )
        self.validators.append(JWTValidator(self.config, algorithm))

    def validate_jwt(self, token: str) -> JWTPayload:
        """
        Validate a token against every strategy in order and return the first
        payload. Raises AuthError when nothing accepts the token.
        """
        for validator in self.validators:
            try:
                payload = validator.validate(token)
            except AuthError as exc:
                if exc.error == "missing_jwt_secret":
                    break
                raise
            if payload:
                return payload

        raise AuthError("invalid_token", "Invalid authentication credentials")

    def _require_secret(self) -> str:
        secret = self.config.jwt_secret_key
        if secret:
            return secret
        if _dev_secret_allowed(self.config):
            return LOCAL_DEV_SECRET
        raise AuthError("missing_jwt_secret", "JWT secret not configured", status_code=500)

    def _build_payload(
        self, user_id: str, expires_in: Optional[timedelta] = None
    ) -> JWTPayload:
        now = datetime.now(timezone.utc)
        lifetime = expires_in or timedelta(days=self.token_ttl_days)
        return JWTPayload(
            sub=user_id,
            iat=int(now.timestamp()),
            exp=int((now + lifetime).timestamp()),
        )

    def create_jwt(
        self, user_id: str, *, expires_in: Optional[timedelta] = None
    ) -> str:
        """Create a signed JWT for the given user."""
        token, _ = self.issue_token_response(user_id, expires_in=expires_in)
        return token

    def issue_token_response(
        self, user_id: str, *, expires_in: Optional[timedelta] = None
    ) -> tuple[str, datetime]:
        """Return token string and expiry timestamp."""
        payload = self._build_payload(user_id, expires_in)
        token = jwt.encode(
            payload.model_dump(),
            self._require_secret(),
            algorithm=self.algorithm,
        )
        expires_at = datetime.fromtimestamp(payload.exp, tz=timezone.utc)
        return token, expires_at


__all__ = [
    "AuthService",
    "AuthError",
    "TokenValidator",
    "StaticTokenValidator",
    "JWTValidator",
    "LOCAL_DEV_USER_ID",
]
