from app.cache import RedisCache
from app.config import settings
from app.rocketmoon.chart_cache import ChartCache
from app.rocketmoon.store import RawDataStore

# Shared connection instances
redis_cache = RedisCache(
    host=settings.REDIS_HOST,
    port=settings.REDIS_PORT,
    db=settings.REDIS_DB,
)
raw_store = RawDataStore(redis_cache.client)
chart_cache = ChartCache(redis_cache)
