# quickschedule/deps.py

from fastapi import Depends
from sqlmodel import Session

from quickschedule.config import SchedulingConfig, get_settings
from quickschedule.db import get_session
from quickschedule.store import SqlBookingStore


def get_store(session: Session = Depends(get_session)) -> SqlBookingStore:
    return SqlBookingStore(session)


def get_scheduling_config() -> SchedulingConfig:
    # resolved per request and passed down explicitly; override in tests
    return get_settings().scheduling_config()
