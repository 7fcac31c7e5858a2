# quickschedule/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from quickschedule.config import get_settings
from quickschedule.db import create_db_and_tables
from quickschedule.routers import availability_routes, booking_routes

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    logger.info("Scheduling tables ready")
    yield


app = FastAPI(title="QuickSchedule", lifespan=lifespan)

app.include_router(availability_routes.router, prefix=settings.route_prefix)
app.include_router(booking_routes.router, prefix=settings.route_prefix)


@app.get("/health")
def health_check():
    return {"status": "ok"}
