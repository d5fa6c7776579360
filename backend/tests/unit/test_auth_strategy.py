import jwt
import pytest
from unittest.mock import Mock

from backend.src.services.auth import (
    LOCAL_DEV_USER_ID,
    AuthError,
    AuthService,
    JWTValidator,
    StaticTokenValidator,
)
from backend.src.services.config import AppConfig


@pytest.fixture
def mock_config():
    config = Mock(spec=AppConfig)
    config.enable_local_mode = True
    config.local_dev_token = "local-test"
    config.jwt_secret_key = "secret-value-for-tests"
    return config


def test_static_token_validator():
    validator = StaticTokenValidator("my-secret", "test-user")

    payload = validator.validate("my-secret")
    assert payload is not None
    assert payload.sub == "test-user"

    assert validator.validate("wrong") is None
    assert validator.validate("") is None


def test_auth_service_strategies(mock_config):
    auth = AuthService(config=mock_config)

    payload = auth.validate_jwt("local-test")
    assert payload.sub == LOCAL_DEV_USER_ID

    with pytest.raises(AuthError, match="Invalid authentication credentials"):
        auth.validate_jwt("invalid-token")


def test_auth_service_order(mock_config):
    auth = AuthService(config=mock_config)

    assert isinstance(auth.validators[0], StaticTokenValidator)
    assert auth.validators[0].static_token == "local-test"
    assert isinstance(auth.validators[1], JWTValidator)


def test_local_mode_disabled_skips_static_token(mock_config):
    mock_config.enable_local_mode = False
    auth = AuthService(config=mock_config)

    assert len(auth.validators) == 1
    with pytest.raises(AuthError):
        auth.validate_jwt("local-test")


def test_missing_secret_still_accepts_static_token(mock_config, monkeypatch):
    monkeypatch.delenv("ENVIRONMENT", raising=False)
    mock_config.jwt_secret_key = None
    auth = AuthService(config=mock_config)

    assert auth.validate_jwt("local-test").sub == LOCAL_DEV_USER_ID
    with pytest.raises(AuthError, match="Invalid authentication credentials"):
        auth.validate_jwt("some.jwt.token")


@pytest.mark.parametrize(
    "claims",
    [{"iat": 1, "exp": 4102444800}, {"sub": "", "iat": 1, "exp": 4102444800}],
)
def test_signed_token_without_subject_is_rejected(mock_config, claims):
    token = jwt.encode(claims, mock_config.jwt_secret_key, algorithm="HS256")
    auth = AuthService(config=mock_config)

    with pytest.raises(AuthError) as exc_info:
        auth.validate_jwt(token)

    assert exc_info.value.error == "invalid_token"
