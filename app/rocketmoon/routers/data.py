import logging
from typing import List
from fastapi import APIRouter, Depends
from app.rocketmoon.client import LaunchLibraryClient, MoonPhaseClient
from app.rocketmoon.dependency import get_launch_library_client, get_moon_phase_client, get_raw_store
from app.rocketmoon.ingest import fetch_and_save_launches, fetch_and_save_moon_phases, get_available_years
from app.rocketmoon.schema import InitResponse
from app.rocketmoon.store import RawDataStore

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Launch Data"],
)

@router.get("/available-years", response_model=List[int])
async def available_years(client: LaunchLibraryClient = Depends(get_launch_library_client)):
    return await get_available_years(client)

@router.post("/init/{year}", response_model=InitResponse)
async def initialize_data(
        year: int,
        store: RawDataStore = Depends(get_raw_store),
        launch_client: LaunchLibraryClient = Depends(get_launch_library_client),
        moon_client: MoonPhaseClient = Depends(get_moon_phase_client),
    ):
    logger.info(f"Initializing data for {year}")
    moon_phases = await fetch_and_save_moon_phases(moon_client, store, year)
    launches = await fetch_and_save_launches(launch_client, store, year)
    return InitResponse(
        year=year,
        moon_phases_count=len(moon_phases),
        launches_count=len(launches),
        message=f"Data for {year} initialized successfully",
    )
