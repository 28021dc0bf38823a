from fastapi import APIRouter, Depends
from app.config import settings
from app.rocketmoon.analysis import get_launch_status_distribution, get_launch_timeline, get_moon_phase_success
from app.rocketmoon.chart_cache import ChartCache
from app.rocketmoon.dependency import get_chart_cache, get_raw_store
from app.rocketmoon.schema import LaunchStatusChart, LaunchTimelineChart, MoonPhaseSuccessChart
from app.rocketmoon.store import RawDataStore

router = APIRouter(
    tags=["Charts"]
)

@router.get("/moon-phase-success", response_model=MoonPhaseSuccessChart)
def moon_phase_success(
        year: int = settings.DEFAULT_YEAR,
        store: RawDataStore = Depends(get_raw_store),
        cache: ChartCache = Depends(get_chart_cache),
    ):
    return get_moon_phase_success(store, cache, year)

@router.get("/launch-status", response_model=LaunchStatusChart)
def launch_status(
        year: int = settings.DEFAULT_YEAR,
        store: RawDataStore = Depends(get_raw_store),
        cache: ChartCache = Depends(get_chart_cache),
    ):
    return get_launch_status_distribution(store, cache, year)

@router.get("/launch-timeline", response_model=LaunchTimelineChart)
def launch_timeline(
        year: int = settings.DEFAULT_YEAR,
        store: RawDataStore = Depends(get_raw_store),
        cache: ChartCache = Depends(get_chart_cache),
    ):
    return get_launch_timeline(store, cache, year)
