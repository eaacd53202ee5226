"""Service configuration.

Built once at startup by ``load_settings()`` and passed explicitly to the
components that need it. Nothing else reads the environment.
"""

import os
from dataclasses import dataclass, field


class ConfigError(ValueError):
    """Raised when required configuration is missing or malformed."""


@dataclass(frozen=True)
class JWTSettings:
    secret_key: str
    issuer: str
    audience: str
    expiry_minutes: float = 60.0


@dataclass(frozen=True)
class MongoSettings:
    url: str | None
    database_name: str = 'users_service'
    users_collection_name: str = 'users'


@dataclass(frozen=True)
class Settings:
    jwt: JWTSettings
    mongo: MongoSettings = field(default_factory=lambda: MongoSettings(url=None))
    bcrypt_rounds: int = 12
    log_level: str = 'INFO'


def _number(env: dict, key: str, default, cast):
    raw = env.get(key)
    if raw is None or raw == '':
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ConfigError(f"{key} must be a number, got {raw!r}") from None


def load_settings(env: dict | None = None) -> Settings:
    """Read settings from the environment (or a provided mapping)."""
    env = dict(os.environ) if env is None else env

    secret = env.get('JWT_SECRET_KEY')
    if not secret:
        raise ConfigError(
            "JWT_SECRET_KEY environment variable is required. "
            "Generate a secure key with: openssl rand -hex 32"
        )

    expiry = _number(env, 'JWT_EXPIRY_MINUTES', 60.0, float)
    if expiry <= 0:
        raise ConfigError("JWT_EXPIRY_MINUTES must be positive")

    rounds = _number(env, 'BCRYPT_ROUNDS', 12, int)
    if not 4 <= rounds <= 31:
        raise ConfigError("BCRYPT_ROUNDS must be between 4 and 31")

    return Settings(
        jwt=JWTSettings(
            secret_key=secret,
            issuer=env.get('JWT_ISSUER', 'users-service'),
            audience=env.get('JWT_AUDIENCE', 'users-service-clients'),
            expiry_minutes=expiry,
        ),
        mongo=MongoSettings(
            url=env.get('MONGO_URL'),
            database_name=env.get('MONGODB_DATABASE', 'users_service'),
            users_collection_name=env.get('MONGODB_USERS_COLLECTION', 'users'),
        ),
        bcrypt_rounds=rounds,
        log_level=env.get('LOG_LEVEL', 'INFO').upper(),
    )
