import json
import logging
from typing import Callable, Dict, Optional

import redis
from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder

logger = logging.getLogger(__name__)


class ReportCache:
    """Redis-backed cache for computed reports"""

    def __init__(self, timeout: Optional[int] = None):
        self.timeout = int(settings.REPORT_CACHE_TIMEOUT if timeout is None else timeout)
        self.redis_client = redis.Redis(
            host=settings.REDIS_HOST,
            port=int(settings.REDIS_PORT),
            db=int(settings.REDIS_DB),
            decode_responses=True
        )

    @staticmethod
    def make_key(name: str, params: Dict) -> str:
        """
        Build the cache key for a report

        Args:
            name: Report name, e.g. "daily"
            params: Query parameters the report depends on

        Returns:
            Key of the form report:<name>:<k>=<v>&... with parameters sorted
        """
        encoded = '&'.join(f"{key}={params[key]}" for key in sorted(params) if params[key] is not None)
        return f"report:{name}:{encoded}"

    def get(self, key: str) -> Optional[Dict]:
        try:
            cached = self.redis_client.get(key)
        except redis.RedisError as exc:
            logger.warning("Report cache read failed for %s: %s", key, exc)
            return None
        return json.loads(cached) if cached else None

    def set(self, key: str, report: Dict) -> bool:
        try:
            return bool(self.redis_client.setex(key, self.timeout, json.dumps(report, cls=DjangoJSONEncoder)))
        except redis.RedisError as exc:
            logger.warning("Report cache write failed for %s: %s", key, exc)
            return False

    def get_or_compute(self, name: str, params: Dict, compute: Callable[[], Dict]) -> Dict:
        """
        Return the cached report, computing and storing it on a miss

        A timeout of 0 disables caching. Redis failures fall back to computing
        the report directly.
        """
        if self.timeout <= 0:
            return compute()

        key = self.make_key(name, params)
        report = self.get(key)
        if report is not None:
            logger.debug("Report cache hit for %s", key)
            return report

        report = compute()
        self.set(key, report)
        return report
