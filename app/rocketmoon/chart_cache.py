import logging
from typing import Dict, Optional, Type
from pydantic import ValidationError
from app.cache import RedisCache
from app.rocketmoon.schema import (
    ChartCacheEntry, ChartData, ChartKind, LaunchStatusChart, LaunchTimelineChart, MoonPhaseSuccessChart,
)

logger = logging.getLogger(__name__)

CHART_MODELS: Dict[ChartKind, Type[ChartData]] = {
    ChartKind.MOON_PHASE_SUCCESS: MoonPhaseSuccessChart,
    ChartKind.LAUNCH_STATUS: LaunchStatusChart,
    ChartKind.LAUNCH_TIMELINE: LaunchTimelineChart,
}


class ChartCache:
    """
    Permanent (year, chart kind) -> chart result store. One Redis key per pair, so a
    second put overwrites the first. Entries never expire and are never invalidated.
    """

    def __init__(self, cache: RedisCache):
        self.cache = cache

    @staticmethod
    def key(year: int, kind: ChartKind) -> str:
        return f"chart-cache:{year}:{ChartKind(kind).value}"

    def get(self, year: int, kind: ChartKind) -> Optional[ChartData]:
        kind = ChartKind(kind)
        key = self.key(year, kind)
        value = self.cache.get(key)
        if value is None:
            return None
        try:
            entry = ChartCacheEntry.model_validate(value)
            if entry.year != year or entry.chart_kind != kind:
                logger.warning(f"Cache entry {key} belongs to {entry.year}/{entry.chart_kind.value}, ignoring it")
                return None
            return CHART_MODELS[kind].model_validate_json(entry.json_data)
        except ValidationError as e:
            logger.error(f"Corrupt chart cache entry {key}, recomputing: {str(e)}")
            return None

    def put(self, year: int, kind: ChartKind, result: ChartData) -> bool:
        kind = ChartKind(kind)
        entry = ChartCacheEntry(
            year=year,
            chart_kind=kind,
            json_data=result.model_dump_json(by_alias=True),
        )
        stored = self.cache.set(self.key(year, kind), entry.model_dump(mode="json", by_alias=True))
        if stored:
            logger.info(f"Cached {kind.value} chart for {year}")
        else:
            logger.warning(f"Could not cache {kind.value} chart for {year}")
        return stored
