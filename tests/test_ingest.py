from datetime import date, datetime
import httpx
import pytest
from app.rocketmoon.client import LaunchLibraryClient, MoonPhaseClient
from app.rocketmoon.ingest import (
    fetch_and_save_launches, fetch_and_save_moon_phases, get_available_years, map_launch_status, map_moon_phase,
)
from app.rocketmoon.schema import LaunchStatus, MoonPhase

LL2 = "https://ll.example/2.2.0"
USNO = "https://usno.example/api"


def ll2_launch(id, net, status, provider="SpaceX", rocket="Falcon 9"):
    return {
        "id": id,
        "name": f"{rocket} | {id}",
        "net": net,
        "status": {"id": 3, "name": status},
        "launch_service_provider": {"name": provider} if provider else None,
        "rocket": {"configuration": {"name": rocket}} if rocket else None,
    }


class Recorder:
    """Serves canned JSON per path and remembers every request."""

    def __init__(self, routes):
        self.routes = routes
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = request.url.path
        if request.url.params.get("offset"):
            key = f"{key}?offset={request.url.params['offset']}"
        if key not in self.routes:
            return httpx.Response(404, json={"detail": "not found"})
        return httpx.Response(200, json=self.routes[key])


@pytest.fixture
def usno_routes():
    return {
        "/api/moon/phases/year": {
            "year": 2025,
            "numphases": 4,
            "phasedata": [
                {"day": 6, "month": 1, "year": 2025, "phase": "First Quarter", "time": "23:56"},
                {"day": 13, "month": 1, "year": 2025, "phase": "Full Moon", "time": "22:27"},
                {"day": 21, "month": 1, "year": 2025, "phase": "Last Quarter", "time": "20:31"},
                {"day": 29, "month": 1, "year": 2025, "phase": "New Moon", "time": "12:36"},
                {"day": 30, "month": 1, "year": 2025, "phase": "Blue Moon", "time": "00:00"},
            ],
        }
    }


@pytest.fixture
def ll2_routes():
    return {
        "/2.2.0/launch/": {
            "count": 3,
            "next": f"{LL2}/launch/?limit=2&offset=2",
            "results": [
                ll2_launch("a1", "2025-01-04T01:27:00Z", "Launch Successful"),
                ll2_launch("a2", "2025-02-10T12:00:00Z", "Launch Failure", provider=None),
            ],
        },
        "/2.2.0/launch/?offset=2": {
            "count": 3,
            "next": None,
            "results": [
                ll2_launch("a3", "2025-03-15T08:30:00Z", "Partial Failure", rocket=None),
                ll2_launch("a1", "2025-01-04T01:27:00Z", "Launch Successful"),
            ],
        },
    }


def test_map_launch_status():
    assert map_launch_status("Launch Successful") == LaunchStatus.SUCCESS
    assert map_launch_status("Launch Failure") == LaunchStatus.FAILURE
    assert map_launch_status("Partial Failure") == LaunchStatus.PARTIAL
    assert map_launch_status("Launch was a Partial Failure") == LaunchStatus.PARTIAL
    assert map_launch_status("Go for Launch") == LaunchStatus.TBD
    assert map_launch_status("To Be Determined") == LaunchStatus.TBD
    assert map_launch_status(None) == LaunchStatus.TBD


def test_map_moon_phase():
    assert map_moon_phase("Full Moon") == MoonPhase.FULL_MOON
    assert map_moon_phase("  new moon ") == MoonPhase.NEW_MOON
    assert map_moon_phase("Blue Moon") is None


@pytest.mark.asyncio
async def test_fetch_and_save_moon_phases(store, usno_routes):
    recorder = Recorder(usno_routes)
    client = MoonPhaseClient(USNO, transport=httpx.MockTransport(recorder))

    saved = await fetch_and_save_moon_phases(client, store, 2025)
    assert [(i.phase, i.date) for i in saved] == [
        (MoonPhase.FIRST_QUARTER, date(2025, 1, 6)),
        (MoonPhase.FULL_MOON, date(2025, 1, 13)),
        (MoonPhase.LAST_QUARTER, date(2025, 1, 21)),
        (MoonPhase.NEW_MOON, date(2025, 1, 29)),
    ]
    assert all(i.id is not None for i in saved)
    assert recorder.requests[0].url.params["year"] == "2025"
    assert store.moon_phases_for_year(2025) == saved

    # already stored, no second request
    again = await fetch_and_save_moon_phases(client, store, 2025)
    assert again == saved
    assert len(recorder.requests) == 1


@pytest.mark.asyncio
async def test_fetch_and_save_moon_phases_without_data(store):
    client = MoonPhaseClient(USNO, transport=httpx.MockTransport(Recorder({"/api/moon/phases/year": {"year": 1900}})))
    assert await fetch_and_save_moon_phases(client, store, 1900) == []
    assert store.moon_phases_for_year(1900) == []


@pytest.mark.asyncio
async def test_fetch_and_save_launches_follows_pages(store, ll2_routes):
    recorder = Recorder(ll2_routes)
    client = LaunchLibraryClient(LL2, transport=httpx.MockTransport(recorder))

    saved = await fetch_and_save_launches(client, store, 2025)
    assert len(recorder.requests) == 2
    first_params = recorder.requests[0].url.params
    assert first_params["net__gte"] == "2025-01-01"
    assert first_params["net__lt"] == "2026-01-01"
    assert first_params["include_suborbital"] == "false"

    assert [i.external_id for i in saved] == ["a1", "a2", "a3"]
    assert [i.status for i in saved] == [LaunchStatus.SUCCESS, LaunchStatus.FAILURE, LaunchStatus.PARTIAL]
    assert saved[1].agency == "Unknown"
    assert saved[2].rocket_type == "Unknown"
    assert saved[0].launch_date.month == 1

    stored = store.launches_for_year(2025)
    assert [i.external_id for i in stored] == ["a1", "a2", "a3"]

    await fetch_and_save_launches(client, store, 2025)
    assert len(recorder.requests) == 2


@pytest.mark.asyncio
async def test_fetch_launches_http_error_propagates(store):
    client = LaunchLibraryClient(LL2, transport=httpx.MockTransport(Recorder({})))
    with pytest.raises(httpx.HTTPStatusError):
        await fetch_and_save_launches(client, store, 2025)
    assert store.launches_for_year(2025) == []


@pytest.mark.asyncio
async def test_client_serves_repeated_requests_from_cache(redis_cache, redis_client, usno_routes):
    recorder = Recorder(usno_routes)
    client = MoonPhaseClient(USNO, cache=redis_cache, ttl=120, transport=httpx.MockTransport(recorder))

    first = await client.get_moon_phases(2025)
    second = await client.get_moon_phases(2025)
    assert first == second
    assert len(recorder.requests) == 1
    assert list(redis_client.expiry.values()) == [120]


@pytest.mark.asyncio
async def test_available_years():
    routes = {"/2.2.0/launch/": {"count": 1, "next": None, "results": [ll2_launch("sputnik", "1957-10-04T19:28:34Z", "Launch Successful")]}}
    client = LaunchLibraryClient(LL2, transport=httpx.MockTransport(Recorder(routes)))

    years = await get_available_years(client)
    assert years[0] == datetime.now().year
    assert years[-1] == 1957
    assert years == sorted(years, reverse=True)


@pytest.mark.asyncio
async def test_available_years_falls_back_on_error():
    def fail(request):
        raise httpx.ConnectError("unreachable", request=request)

    client = LaunchLibraryClient(LL2, transport=httpx.MockTransport(fail))
    years = await get_available_years(client)
    assert years[-1] == 1957
    assert len(years) == datetime.now().year - 1957 + 1


@pytest.mark.asyncio
async def test_fetch_launches_uses_utc_year(store):
    routes = {"/2.2.0/launch/": {"count": 2, "next": None, "results": [
        ll2_launch("utc-2024", "2025-01-01T01:00:00+05:00", "Launch Successful"),
        ll2_launch("utc-2025", "2025-01-01T06:00:00+05:00", "Launch Successful"),
    ]}}
    client = LaunchLibraryClient(LL2, transport=httpx.MockTransport(Recorder(routes)))

    saved = await fetch_and_save_launches(client, store, 2025)
    assert [i.external_id for i in saved] == ["utc-2025"]
    assert saved[0].launch_date == datetime(2025, 1, 1, 1, 0)


@pytest.mark.asyncio
async def test_fetch_launches_links_nearest_moon_phase(store, ll2_routes, moon_phases_2025):
    phases = store.save_moon_phases(2025, moon_phases_2025)
    client = LaunchLibraryClient(LL2, transport=httpx.MockTransport(Recorder(ll2_routes)))

    saved = await fetch_and_save_launches(client, store, 2025)
    by_id = {i.id: i for i in phases}
    # 2025-01-04 is closest to the 2025-01-06 new moon, February and March fall back to 2025-01-29
    assert [by_id[i.moon_phase_id].date for i in saved] == [date(2025, 1, 6), date(2025, 1, 29), date(2025, 1, 29)]
    assert [i.moon_phase_id for i in store.launches_for_year(2025)] == [i.moon_phase_id for i in saved]


@pytest.mark.asyncio
async def test_fetch_launches_without_moon_phases_leaves_link_empty(store, ll2_routes):
    client = LaunchLibraryClient(LL2, transport=httpx.MockTransport(Recorder(ll2_routes)))
    saved = await fetch_and_save_launches(client, store, 2025)
    assert all(i.moon_phase_id is None for i in saved)
