import logging
from typing import Any, List
from pydantic import TypeAdapter, ValidationError
from redis import Redis, RedisError
from app.rocketmoon.schema import LaunchRecord, MoonPhaseEvent

logger = logging.getLogger(__name__)

_launches_adapter = TypeAdapter(List[LaunchRecord])
_moon_phases_adapter = TypeAdapter(List[MoonPhaseEvent])


class DataStoreError(Exception):
    """Raised when the raw launch / moon-phase store cannot be read or written."""


class RawDataStore:
    """
    Persists launches and moon phases as one JSON list per year in Redis.
    Unlike the chart cache, failures here are raised to the caller.
    """

    def __init__(self, client: Redis):
        self.client = client

    @staticmethod
    def launches_key(year: int) -> str:
        return f"launches:{year}"

    @staticmethod
    def moon_phases_key(year: int) -> str:
        return f"moon-phases:{year}"

    def _read(self, key: str) -> Any:
        try:
            value = self.client.get(key)
        except RedisError as e:
            logger.exception(f"Failed to read {key} from the data store: {str(e)}")
            raise DataStoreError(f"Failed to read {key}: {str(e)}") from e
        return value

    def _write(self, key: str, payload: bytes) -> None:
        try:
            self.client.set(key, payload)
        except RedisError as e:
            logger.exception(f"Failed to write {key} to the data store: {str(e)}")
            raise DataStoreError(f"Failed to write {key}: {str(e)}") from e

    def _allocate_ids(self, key: str, count: int) -> range:
        try:
            last = int(self.client.incrby(f"{key}:id", count))
        except RedisError as e:
            logger.exception(f"Failed to allocate ids for {key}: {str(e)}")
            raise DataStoreError(f"Failed to allocate ids for {key}: {str(e)}") from e
        return range(last - count + 1, last + 1)

    def launches_for_year(self, year: int) -> List[LaunchRecord]:
        value = self._read(self.launches_key(year))
        if not value:
            return []
        try:
            launches = _launches_adapter.validate_json(value)
        except ValidationError as e:
            raise DataStoreError(f"Stored launches for {year} are unreadable: {str(e)}") from e
        # the year is checked against the timestamp, not only the key
        launches = [i for i in launches if i.launch_date.year == year]
        return sorted(launches, key=lambda i: i.launch_date)

    def moon_phases_for_year(self, year: int) -> List[MoonPhaseEvent]:
        value = self._read(self.moon_phases_key(year))
        if not value:
            return []
        try:
            phases = _moon_phases_adapter.validate_json(value)
        except ValidationError as e:
            raise DataStoreError(f"Stored moon phases for {year} are unreadable: {str(e)}") from e
        phases = [i for i in phases if i.year == year]
        return sorted(phases, key=lambda i: i.date)

    def save_launches(self, year: int, launches: List[LaunchRecord]) -> List[LaunchRecord]:
        """Store the launches of ``year``, keeping one record per external id."""
        unique: List[LaunchRecord] = []
        seen = set()
        for i in launches:
            if i.external_id:
                if i.external_id in seen:
                    continue
                seen.add(i.external_id)
            unique.append(i)
        if not unique:
            return []

        ids = self._allocate_ids("launches", len(unique))
        saved = [i.model_copy(update={"id": new_id}) for i, new_id in zip(unique, ids)]
        self._write(self.launches_key(year), _launches_adapter.dump_json(saved))
        logger.info(f"Saved {len(saved)} launches for {year}")
        return saved

    def save_moon_phases(self, year: int, phases: List[MoonPhaseEvent]) -> List[MoonPhaseEvent]:
        if not phases:
            return []
        ids = self._allocate_ids("moon-phases", len(phases))
        saved = [i.model_copy(update={"id": new_id}) for i, new_id in zip(phases, ids)]
        self._write(self.moon_phases_key(year), _moon_phases_adapter.dump_json(saved))
        logger.info(f"Saved {len(saved)} moon phases for {year}")
        return saved
