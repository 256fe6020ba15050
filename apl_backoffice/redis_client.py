"""
Shared Redis connection used by the cache and the notification queue
"""

import logging
from typing import Optional

import redis

from .config import REDIS_HOST, REDIS_PASSWORD, REDIS_PORT, REDIS_SSL, REDIS_URL

logger = logging.getLogger(__name__)

redis_client: Optional[redis.Redis] = None


def is_redis_configured() -> bool:
    return bool(REDIS_URL or REDIS_HOST)


def get_redis_client() -> redis.Redis:
    """
    Get or create the Redis client.
    Raises when Redis is not configured or the connection test fails.
    """
    global redis_client

    if redis_client is None:
        if not is_redis_configured():
            raise RuntimeError("Redis is not configured (REDIS_URL/REDIS_HOST)")

        logger.info("🔄 Initializing Redis connection...")

        if REDIS_URL:
            # Mask password in URL for logging
            if "@" in REDIS_URL:
                url_parts = REDIS_URL.split("@")
                protocol = url_parts[0].split(":")[0]
                masked_url = f"{protocol}:****@{url_parts[1]}"
            else:
                masked_url = "****"
            logger.info(f"📡 Using Redis URL connection: {masked_url}")

            client = redis.from_url(
                REDIS_URL,
                decode_responses=True,
                socket_connect_timeout=15,
                socket_timeout=30,
                retry_on_timeout=True,
                health_check_interval=30,
                max_connections=20,
            )
        else:
            logger.info(f"📡 Using Redis at {REDIS_HOST}:{REDIS_PORT} (SSL: {REDIS_SSL})")
            client = redis.Redis(
                host=REDIS_HOST,
                port=REDIS_PORT,
                password=REDIS_PASSWORD,
                ssl=REDIS_SSL,
                decode_responses=True,
                socket_connect_timeout=15,
                socket_timeout=30,
                retry_on_timeout=True,
                health_check_interval=30,
                max_connections=20,
            )

        try:
            client.ping()
        except Exception as e:
            logger.error(f"❌ Failed to connect to Redis: {str(e)}")
            raise

        redis_client = client
        logger.info("Redis connected successfully")

    return redis_client
