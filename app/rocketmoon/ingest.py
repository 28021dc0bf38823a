from datetime import date, datetime
import logging
from typing import Any, Dict, List, Optional
from app.config import settings
from app.rocketmoon.analysis import find_closest_moon_phase
from app.rocketmoon.client import LaunchLibraryClient, MoonPhaseClient
from app.rocketmoon.schema import LaunchRecord, LaunchStatus, MoonPhase, MoonPhaseEvent
from app.rocketmoon.store import RawDataStore

logger = logging.getLogger(__name__)

USNO_PHASES: Dict[str, MoonPhase] = {
    "new moon": MoonPhase.NEW_MOON,
    "first quarter": MoonPhase.FIRST_QUARTER,
    "full moon": MoonPhase.FULL_MOON,
    "last quarter": MoonPhase.LAST_QUARTER,
}


def map_moon_phase(name: str) -> Optional[MoonPhase]:
    return USNO_PHASES.get((name or "").strip().lower())


def map_launch_status(name: str) -> LaunchStatus:
    """
    Map a Launch Library 2 status name (Go, TBD, Success, Failure, Hold, In Flight,
    Partial Failure, ...) onto LaunchStatus. Anything unresolved counts as TBD.

    "partial" is checked before "fail", so "Partial Failure" maps to PARTIAL rather
    than FAILURE. With the opposite order PARTIAL would never be produced.
    """
    s = (name or "").lower()
    if "success" in s and "partial" not in s:
        return LaunchStatus.SUCCESS
    if "partial" in s:
        return LaunchStatus.PARTIAL
    if "fail" in s:
        return LaunchStatus.FAILURE
    return LaunchStatus.TBD


def _to_launch(i: Dict[str, Any]) -> LaunchRecord:
    rocket = (i.get("rocket") or {}).get("configuration") or {}
    agency = i.get("launch_service_provider") or {}
    return LaunchRecord(
        external_id=i.get("id"),
        name=i.get("name") or "",
        launch_date=i["net"],
        status=map_launch_status((i.get("status") or {}).get("name") or "TBD"),
        agency=agency.get("name") or "Unknown",
        rocket_type=rocket.get("name") or "Unknown",
    )


def link_moon_phase(launch: LaunchRecord, moon_phases: List[MoonPhaseEvent]) -> LaunchRecord:
    """Copy of ``launch`` pointing at the id of its nearest stored moon phase."""
    closest = find_closest_moon_phase(launch.launch_date, moon_phases)
    if closest is None:
        return launch
    return launch.model_copy(update={"moon_phase_id": closest.id})


async def fetch_and_save_moon_phases(client: MoonPhaseClient, store: RawDataStore, year: int) -> List[MoonPhaseEvent]:
    existing = store.moon_phases_for_year(year)
    if existing:
        logger.info(f"Moon phases for {year} already stored. Skipping fetch.")
        return existing

    response = await client.get_moon_phases(year)
    phase_data = (response or {}).get("phasedata")
    if not phase_data:
        logger.warning(f"No moon phase data returned from API for {year}")
        return []

    phases: List[MoonPhaseEvent] = []
    for i in phase_data:
        phase = map_moon_phase(i.get("phase"))
        if phase is None:
            logger.warning(f"Skipping unknown moon phase {i.get('phase')!r} for {year}")
            continue
        phases.append(MoonPhaseEvent(
            phase=phase,
            date=date(i["year"], i["month"], i["day"]),
            year=year,
        ))

    saved = store.save_moon_phases(year, phases)
    logger.info(f"Fetched and saved {len(saved)} moon phases for {year}")
    return saved


async def fetch_and_save_launches(client: LaunchLibraryClient, store: RawDataStore, year: int) -> List[LaunchRecord]:
    existing = store.launches_for_year(year)
    if existing:
        logger.info(f"Launches for {year} already stored ({len(existing)} launches).")
        return existing

    logger.info(f"Fetching launches for {year} with pagination")
    launches: List[LaunchRecord] = []
    page_count = 0
    response = await client.get_launches_page(year)
    while True:
        page_count += 1
        results = (response or {}).get("results") or []
        if not results:
            logger.warning(f"No more data on page {page_count}")
            break

        page = [_to_launch(i) for i in results]
        # the stored year follows the UTC launch timestamp
        launches.extend(i for i in page if i.launch_date.year == year)
        logger.info(f"Page {page_count}: +{len(page)} launches. Total: {len(launches)}")

        next_url = response.get("next")
        if not next_url:
            break
        response = await client.get_page(next_url)

    moon_phases = store.moon_phases_for_year(year)
    if moon_phases:
        launches = [link_moon_phase(i, moon_phases) for i in launches]

    saved = store.save_launches(year, launches)
    logger.info(f"Saved {len(saved)} launches from {page_count} pages for {year}")
    return saved


async def get_available_years(client: LaunchLibraryClient) -> List[int]:
    """Years from the oldest known launch up to the current year, newest first."""
    current_year = datetime.now().year
    try:
        response = await client.get_oldest_launch()
        results = (response or {}).get("results") or []
        oldest_year = datetime.fromisoformat(results[0]["net"].replace("Z", "+00:00")).year if results else settings.EARLIEST_YEAR
    except Exception as e:
        logger.exception(f"Error fetching available years, falling back to {settings.EARLIEST_YEAR}: {str(e)}")
        oldest_year = settings.EARLIEST_YEAR
    years = list(range(current_year, oldest_year - 1, -1))
    logger.info(f"Available years: {oldest_year} - {current_year} ({len(years)} years)")
    return years
