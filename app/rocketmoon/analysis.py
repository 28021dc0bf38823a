from collections import Counter, defaultdict
from datetime import datetime, time, timezone
import logging
from typing import Dict, List, Optional, Sequence, Union
from app.config import settings
from app.rocketmoon.chart_cache import ChartCache
from app.rocketmoon.schema import (
    ChartKind, LaunchStatus, LaunchStatusChart, LaunchStatusDistribution, LaunchTimelineChart,
    LaunchTimelinePoint, MoonPhase, MoonPhaseEvent, MoonPhaseSuccessChart, MoonPhaseSuccessRate,
)
from app.rocketmoon.store import RawDataStore

logger = logging.getLogger(__name__)

MOON_PHASE_TITLE = "Erfolgsrate pro Mondphase"
LAUNCH_STATUS_TITLE = "Launch-Status Verteilung"
LAUNCH_TIMELINE_TITLE = "Raketen-Starts pro Monat"

DEFAULT_PHASE = MoonPhase.NEW_MOON

PHASE_LABELS: Dict[str, str] = {
    MoonPhase.NEW_MOON.value: "New Moon",
    MoonPhase.FIRST_QUARTER.value: "First Quarter",
    MoonPhase.FULL_MOON.value: "Full Moon",
    MoonPhase.LAST_QUARTER.value: "Last Quarter",
}

STATUS_LABELS: Dict[str, str] = {
    LaunchStatus.SUCCESS.value: "Success",
    LaunchStatus.FAILURE.value: "Failure",
    LaunchStatus.PARTIAL.value: "Partial Success",
    LaunchStatus.TBD.value: "TBD",
}

PHASE_ORDER: Dict[str, int] = {
    "New Moon": 1,
    "First Quarter": 2,
    "Full Moon": 3,
    "Last Quarter": 4,
}
UNKNOWN_PHASE_ORDER = 5


def _value(member: Union[str, MoonPhase, LaunchStatus]) -> str:
    return member.value if hasattr(member, "value") else str(member)


def format_moon_phase(phase: Union[str, MoonPhase]) -> str:
    return PHASE_LABELS.get(_value(phase), _value(phase))


def format_status(status: Union[str, LaunchStatus]) -> str:
    return STATUS_LABELS.get(_value(status), _value(status))


def phase_order(label: str) -> int:
    return PHASE_ORDER.get(label, UNKNOWN_PHASE_ORDER)


def success_rate(successful: int, total: int) -> float:
    if total == 0:
        return 0.0
    return round(successful / total * 100, 1)


def _as_utc_naive(timestamp: datetime) -> datetime:
    if timestamp.tzinfo is not None:
        return timestamp.astimezone(timezone.utc).replace(tzinfo=None)
    return timestamp


def find_closest_moon_phase(launch_date: datetime, moon_phases: Sequence[MoonPhaseEvent]) -> Optional[MoonPhaseEvent]:
    """
    Return the moon phase event nearest in time to ``launch_date``.

    Phase dates count as midnight UTC. ``moon_phases`` is expected in date order; on an
    exact tie the first (earlier) event wins. Returns None for an empty list.
    """
    launch = _as_utc_naive(launch_date)
    closest: Optional[MoonPhaseEvent] = None
    best: Optional[float] = None
    for event in moon_phases:
        distance = abs((datetime.combine(event.date, time()) - launch).total_seconds()) / 86400
        if best is None or distance < best:
            closest, best = event, distance
    return closest


def resolve_moon_phase(launch_date: datetime, moon_phases: Sequence[MoonPhaseEvent]) -> MoonPhase:
    """Phase of the nearest event, falling back to new moon when the year has no phases."""
    closest = find_closest_moon_phase(launch_date, moon_phases)
    return closest.phase if closest else DEFAULT_PHASE


def get_moon_phase_success(store: RawDataStore, cache: ChartCache, year: int) -> MoonPhaseSuccessChart:
    cached = cache.get(year, ChartKind.MOON_PHASE_SUCCESS)
    if cached is not None:
        logger.info(f"Returning cached moon phase success chart for {year}")
        return cached

    logger.info(f"Calculating success rate by moon phase for {year}")
    launches = store.launches_for_year(year)
    moon_phases = store.moon_phases_for_year(year)
    if not launches or not moon_phases:
        # not cached, a later ingestion must not be hidden behind an empty chart
        logger.warning(f"No data found for {year}. Launches: {len(launches)}, moon phases: {len(moon_phases)}")
        return MoonPhaseSuccessChart(chart_type="bar", title=MOON_PHASE_TITLE, year=year, data=[])

    stats: defaultdict[str, dict[str, int]] = defaultdict(lambda: {"total": 0, "success": 0})
    for launch in launches:
        phase = resolve_moon_phase(launch.launch_date, moon_phases)
        stats[_value(phase)]["total"] += 1
        if launch.status == LaunchStatus.SUCCESS:
            stats[_value(phase)]["success"] += 1

    data: List[MoonPhaseSuccessRate] = []
    for phase, values in stats.items():
        data.append(
            MoonPhaseSuccessRate(
                moon_phase=format_moon_phase(phase),
                success_rate=success_rate(values["success"], values["total"]),
                total_launches=values["total"],
                successful_launches=values["success"],
            )
        )
    data.sort(key=lambda i: phase_order(i.moon_phase))

    result = MoonPhaseSuccessChart(chart_type="bar", title=MOON_PHASE_TITLE, year=year, data=data)
    logger.info(f"Success rate calculation complete. Found {len(data)} moon phases with data")
    cache.put(year, ChartKind.MOON_PHASE_SUCCESS, result)
    return result


def get_launch_status_distribution(store: RawDataStore, cache: ChartCache, year: int) -> LaunchStatusChart:
    cached = cache.get(year, ChartKind.LAUNCH_STATUS)
    if cached is not None:
        logger.info(f"Returning cached launch status chart for {year}")
        return cached

    logger.info(f"Calculating launch status distribution for {year}")
    launches = store.launches_for_year(year)
    if not launches:
        logger.warning(f"No launches found for {year}")
        return LaunchStatusChart(chart_type="pie", title=LAUNCH_STATUS_TITLE, year=year, data=[])

    total = len(launches)
    counts: Counter = Counter(_value(i.status) for i in launches)
    data: List[LaunchStatusDistribution] = [
        LaunchStatusDistribution(
            status=format_status(status),
            count=count,
            percentage=round(count / total * 100, 1),
        )
        for status, count in counts.most_common()
    ]

    result = LaunchStatusChart(chart_type="pie", title=LAUNCH_STATUS_TITLE, year=year, data=data)
    logger.info(f"Status distribution complete. Total launches: {total}")
    cache.put(year, ChartKind.LAUNCH_STATUS, result)
    return result


def get_launch_timeline(
        store: RawDataStore,
        cache: ChartCache,
        year: int,
        month_labels: Optional[Sequence[str]] = None,
    ) -> LaunchTimelineChart:
    cached = cache.get(year, ChartKind.LAUNCH_TIMELINE)
    if cached is not None:
        logger.info(f"Returning cached launch timeline chart for {year}")
        return cached

    labels = list(month_labels) if month_labels is not None else settings.MONTH_LABELS
    if len(labels) != 12:
        raise ValueError(f"Expected 12 month labels, got {len(labels)}")

    logger.info(f"Calculating launch timeline for {year}")
    launches = store.launches_for_year(year)
    by_month: Counter = Counter(i.launch_date.month for i in launches)
    data: List[LaunchTimelinePoint] = [
        LaunchTimelinePoint(month=labels[month - 1], month_number=month, launch_count=by_month.get(month, 0))
        for month in range(1, 13)
    ]

    result = LaunchTimelineChart(chart_type="line", title=LAUNCH_TIMELINE_TITLE, year=year, data=data)
    logger.info(f"Timeline calculation complete. Total launches: {len(launches)}")
    # cached even when every month is zero
    cache.put(year, ChartKind.LAUNCH_TIMELINE, result)
    return result
