# quickschedule/config.py

from functools import lru_cache
from typing import Any, Callable, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ValidationOptions(BaseModel):
    require_email: bool = True
    require_phone: bool = False
    # called with the BookingInput; may be sync or async, returns
    # CustomValidationResult or a {"valid": ..., "message": ...} mapping
    custom_validation: Optional[Callable[..., Any]] = None


class SchedulingConfig(BaseModel):
    """Resolved options handed to every engine and admission call."""

    slot_interval: int = Field(default=30, gt=0)  # minutes
    min_notice: int = Field(default=24, ge=0)  # hours
    timezone: str = "UTC"
    enforce_min_notice: bool = False
    validation: ValidationOptions = Field(default_factory=ValidationOptions)


class Settings(BaseSettings):
    database_url: str = "sqlite:///./quickschedule.db"
    route_prefix: str = "/api/quickschedule"
    log_level: str = "INFO"

    slot_interval: int = 30
    min_notice: int = 24
    timezone: str = "UTC"
    enforce_min_notice: bool = False
    require_email: bool = True
    require_phone: bool = False

    model_config = SettingsConfigDict(env_prefix="QUICKSCHEDULE_", env_file=".env", extra="ignore")

    def scheduling_config(self) -> SchedulingConfig:
        return SchedulingConfig(
            slot_interval=self.slot_interval,
            min_notice=self.min_notice,
            timezone=self.timezone,
            enforce_min_notice=self.enforce_min_notice,
            validation=ValidationOptions(
                require_email=self.require_email,
                require_phone=self.require_phone,
            ),
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
