# SPDX-License-Identifier: Apache-2.0

"""
Redis service for caching office settings.

This module provides Redis operations using the Upstash HTTP client. Cache
failures are logged and reported as misses; MongoDB stays the source of
truth.
"""

import os
import json
import time
from typing import Optional, List, Dict, Any, Union, Callable, TypeVar
from upstash_redis import Redis
from opentelemetry import trace
import logging

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

SETTINGS_PREFIX = "prevflow:settings:"
DEFAULT_SETTINGS_TTL = 3600

T = TypeVar("T")


class RedisConnectionError(Exception):
    """Raised when Redis connection fails."""
    pass


class RedisService:
    """
    Read-through cache for the settings service, backed by Upstash Redis.

    Every operation degrades to a miss (``None``/``False``) when the client
    is unconfigured or the call fails.
    """

    def __init__(self, redis_url: Optional[str] = None, redis_token: Optional[str] = None,
                 client: Optional[Redis] = None):
        """
        Args:
            redis_url: Upstash Redis HTTP URL, defaults to ``REDIS_URL``
            redis_token: Upstash token, defaults to ``REDIS_TOKEN``
            client: Preconfigured client, bypassing URL configuration
        """
        self.client = client
        if client is not None:
            return

        redis_url = redis_url or os.getenv("REDIS_URL")
        redis_token = redis_token or os.getenv("REDIS_TOKEN")
        if not redis_url:
            logger.warning("No REDIS_URL configured, settings cache will be disabled")
            return

        try:
            client = Redis(url=redis_url, token=redis_token) if redis_token else Redis.from_env()
            if client.ping() != "PONG":
                raise RedisConnectionError("Redis ping failed")
        except Exception as e:
            logger.error(
                "Settings cache unavailable",
                extra={"extra_fields": {"redis_url": redis_url, "error": str(e)}}
            )
            return

        self.client = client
        logger.info("Redis service initialized successfully")

    def is_available(self) -> bool:
        return self.client is not None

    def _run(self, operation: str, key: str, call: Callable[[], T], fallback: T) -> T:
        """Run one traced client call, returning ``fallback`` on any failure."""
        if not self.is_available():
            return fallback

        with tracer.start_as_current_span(f"redis.{operation}") as span:
            span.set_attributes({"redis.operation": operation, "redis.key": key})
            try:
                result = call()
            except Exception as e:
                span.set_attribute("redis.result", "error")
                logger.error(
                    "Redis operation failed",
                    extra={"extra_fields": {"operation": operation, "key": key, "error": str(e)}}
                )
                return fallback
            span.set_attribute("redis.result", "ok" if result else "empty")
            return result

    def set_with_ttl(self, key: str, value: Union[str, Dict, List], ttl_seconds: int) -> bool:
        """Store ``value`` (JSON-encoded unless already a string) for ``ttl_seconds``."""
        if isinstance(value, (dict, list)):
            value = json.dumps(value)
        return self._run("setex", key, lambda: self.client.setex(key, ttl_seconds, value) == "OK", False)

    def get(self, key: str) -> Optional[str]:
        return self._run("get", key, lambda: self.client.get(key), None)

    def get_json(self, key: str) -> Optional[Union[Dict, List]]:
        value = self.get(key)
        if value is None:
            return None

        try:
            return json.loads(value)
        except json.JSONDecodeError as e:
            logger.warning(
                "Discarding unreadable cache entry",
                extra={"extra_fields": {"key": key, "error": str(e)}}
            )
            return None

    def delete(self, key: str) -> bool:
        return self._run("delete", key, lambda: self.client.delete(key) > 0, False)

    # Settings cache

    def cache_setting(self, name: str, value: Any, ttl_seconds: int = DEFAULT_SETTINGS_TTL) -> bool:
        """Cache one office setting (tags, agencies, workflow rules...)."""
        return self.set_with_ttl(f"{SETTINGS_PREFIX}{name}", {"value": value}, ttl_seconds)

    def get_cached_setting(self, name: str) -> Optional[Dict[str, Any]]:
        """
        Get a cached office setting.

        Returns:
            ``{"value": ...}`` wrapper, or None when not cached
        """
        cached = self.get_json(f"{SETTINGS_PREFIX}{name}")
        if isinstance(cached, dict) and "value" in cached:
            return cached
        return None

    def invalidate_setting(self, name: str) -> bool:
        return self.delete(f"{SETTINGS_PREFIX}{name}")

    # Health

    def ping(self) -> bool:
        return self._run("ping", "", lambda: self.client.ping() == "PONG", False)

    def health_check(self) -> Dict[str, Any]:
        if not self.is_available():
            return {
                "status": "unavailable",
                "message": "Redis client not initialized",
                "timestamp": time.time()
            }

        started = time.time()
        healthy = self.ping()
        return {
            "status": "healthy" if healthy else "unhealthy",
            "response_time_ms": round((time.time() - started) * 1000, 2),
            "timestamp": time.time()
        }
