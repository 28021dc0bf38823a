from datetime import date, datetime
from typing import Dict, Optional
import pytest
from app.cache import RedisCache
from app.rocketmoon.chart_cache import ChartCache
from app.rocketmoon.schema import LaunchRecord, LaunchStatus, MoonPhase, MoonPhaseEvent
from app.rocketmoon.store import RawDataStore


class InMemoryRedis:
    """Just enough of the redis.Redis API for the store and caches."""

    def __init__(self):
        self.data: Dict[str, bytes] = {}
        self.expiry: Dict[str, Optional[int]] = {}

    def ping(self):
        return True

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value, ex=None):
        self.data[key] = value.encode("utf-8") if isinstance(value, str) else value
        self.expiry[key] = ex
        return True

    def incrby(self, key, amount=1):
        value = int(self.data.get(key, b"0")) + amount
        self.data[key] = str(value).encode("utf-8")
        return value

    def close(self):
        pass

    def keys_with_prefix(self, prefix):
        return sorted(key for key in self.data if key.startswith(prefix))


@pytest.fixture
def redis_client():
    return InMemoryRedis()


@pytest.fixture
def redis_cache(redis_client):
    return RedisCache(client=redis_client)


@pytest.fixture
def store(redis_client):
    return RawDataStore(redis_client)


@pytest.fixture
def chart_cache(redis_cache):
    return ChartCache(redis_cache)


def make_launch(name: str, when: datetime, status: LaunchStatus = LaunchStatus.SUCCESS, external_id: str = None) -> LaunchRecord:
    return LaunchRecord(
        name=name,
        launch_date=when,
        status=status,
        agency="SpaceX",
        rocket_type="Falcon 9",
        external_id=external_id or name,
    )


@pytest.fixture
def moon_phases_2025():
    """One lunar cycle of phases in January 2025."""
    return [
        MoonPhaseEvent(phase=MoonPhase.NEW_MOON, date=date(2025, 1, 6), year=2025),
        MoonPhaseEvent(phase=MoonPhase.FIRST_QUARTER, date=date(2025, 1, 13), year=2025),
        MoonPhaseEvent(phase=MoonPhase.FULL_MOON, date=date(2025, 1, 21), year=2025),
        MoonPhaseEvent(phase=MoonPhase.LAST_QUARTER, date=date(2025, 1, 29), year=2025),
    ]
