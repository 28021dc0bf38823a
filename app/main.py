from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
import httpx
from app.config import settings
from app.connection import redis_cache
from app.rocketmoon.routers.charts import router as charts_router
from app.rocketmoon.routers.data import router as data_router
from app.rocketmoon.store import DataStoreError
import logging

version = "v1"

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(levelname)s:     %(name)s - %(message)s",
)

@asynccontextmanager
async def lifespan(app: FastAPI):
    redis_cache.ping()
    yield
    redis_cache.close()

app = FastAPI(
    title="RocketMoon",
    version=version,
    lifespan=lifespan
)

@app.exception_handler(DataStoreError)
async def data_store_error_handler(request: Request, exc: DataStoreError):
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"error": "Data store unavailable", "detail": str(exc)},
    )

@app.exception_handler(httpx.HTTPError)
async def upstream_error_handler(request: Request, exc: httpx.HTTPError):
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"error": "Upstream API request failed", "detail": str(exc)},
    )

app.include_router(data_router, prefix=f"/api/{version}/chart")
app.include_router(charts_router, prefix=f"/api/{version}/chart")
