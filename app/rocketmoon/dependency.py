from app.connection import chart_cache, raw_store, redis_cache
from app.rocketmoon.client import LaunchLibraryClient, MoonPhaseClient

launch_library_client = LaunchLibraryClient(cache=redis_cache)
moon_phase_client = MoonPhaseClient(cache=redis_cache)

def get_raw_store():
    return raw_store

def get_chart_cache():
    return chart_cache

def get_launch_library_client():
    return launch_library_client

def get_moon_phase_client():
    return moon_phase_client
