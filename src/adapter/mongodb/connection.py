import logging
from datetime import timezone

from pymongo import MongoClient
from pymongo.errors import PyMongoError

from utils.config import MongoSettings

logger = logging.getLogger(__name__)

_client_cache: MongoClient | None = None
_connection_failed = False


def reset_client():
    global _client_cache, _connection_failed
    _client_cache = None
    _connection_failed = False


def get_mongodb_client(settings: MongoSettings) -> MongoClient | None:
    """Get a cached MongoDB client, reconnecting if the cached one stops answering.

    Returns None when MONGO_URL is missing or the connection attempt failed.
    A missing URL is a configuration problem and is not retried; a failed
    connection is attempted again on the next call.
    """
    global _client_cache, _connection_failed

    if _client_cache is not None:
        try:
            _client_cache.admin.command('ping')
            return _client_cache
        except PyMongoError:
            _client_cache = None
            logger.debug("[MONGODB] Cached client failed ping, attempting reconnection...")

    if _connection_failed:
        return None

    if not settings.url:
        logger.error("[MONGODB] MONGO_URL not configured.")
        _connection_failed = True
        return None

    try:
        client = MongoClient(
            settings.url,
            serverSelectionTimeoutMS=5000,
            connectTimeoutMS=5000,
            socketTimeoutMS=30000,
            maxPoolSize=10,
            retryWrites=True,
            retryReads=True,
            tz_aware=True,
            tzinfo=timezone.utc,
        )
        client.admin.command('ping')
    except PyMongoError as e:
        logger.error(f"[MONGODB] Connection failed: {str(e)[:200]}")
        return None

    _client_cache = client
    logger.info(f"[MONGODB] Connected successfully to {settings.database_name}")
    return client
