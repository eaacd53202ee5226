from functools import lru_cache

from fastapi import Depends, HTTPException

from adapter.mongodb.connection import get_mongodb_client
from adapter.mongodb.user_directory import MongoUserDirectory
from port.user_directory import UserDirectory
from services.password_hasher import PasswordHasher
from services.token_issuer import TokenIssuer
from services.user_service import UserService
from utils.config import Settings, load_settings


@lru_cache
def get_settings() -> Settings:
    """Settings are read from the environment once per process."""
    return load_settings()


def get_user_directory(settings: Settings = Depends(get_settings)) -> UserDirectory:
    """Get the MongoDB user directory, raising 503 if MongoDB is unavailable."""
    client = get_mongodb_client(settings.mongo)
    if client is None:
        raise HTTPException(status_code=503, detail="Database unavailable")
    db = client[settings.mongo.database_name]
    return MongoUserDirectory(db, settings.mongo.users_collection_name)


def get_password_hasher(settings: Settings = Depends(get_settings)) -> PasswordHasher:
    return PasswordHasher(rounds=settings.bcrypt_rounds)


def get_user_service(
    directory: UserDirectory = Depends(get_user_directory),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> UserService:
    return UserService(directory, hasher)


def get_token_issuer(
    directory: UserDirectory = Depends(get_user_directory),
    settings: Settings = Depends(get_settings),
) -> TokenIssuer:
    return TokenIssuer(directory, settings.jwt)
