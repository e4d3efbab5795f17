"""Pydantic models describing Cadence configuration and schedule documents."""
from __future__ import annotations

from datetime import timedelta
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..core.descriptor import (
    DEFAULT_TIME_ZONE,
    Frequency,
    ScheduleDescriptor,
    descriptor_from_fields,
    zone_for,
)
from ..core.resolver import DEFAULT_SEARCH_HORIZON


class ValidationError(ValueError):
    """Raised when configuration data does not satisfy the schema."""


class DefaultsConfig(BaseModel):
    """Fallbacks applied to schedules that omit optional fields."""

    model_config = ConfigDict(extra="forbid")

    time_zone: str = DEFAULT_TIME_ZONE

    @field_validator("time_zone")
    @classmethod
    def _known_zone(cls, value: str) -> str:
        zone_for(value)
        return value


class ResolverConfig(BaseModel):
    """Limits applied by the recurrence resolver."""

    model_config = ConfigDict(extra="forbid")

    search_horizon_days: int = Field(default=DEFAULT_SEARCH_HORIZON.days, gt=0, le=100 * 366)

    @property
    def horizon(self) -> timedelta:
        return timedelta(days=self.search_horizon_days)


class LifecycleConfig(BaseModel):
    """Behaviour of the schedule lifecycle manager."""

    model_config = ConfigDict(extra="forbid")

    strict_invariants: bool = False


class LoggingConfig(BaseModel):
    """Structured logging settings."""

    model_config = ConfigDict(extra="forbid")

    component: str = Field(default="cadence", min_length=1)


class RuntimeConfig(BaseModel):
    """Root configuration loaded from ``cadence.yaml``."""

    model_config = ConfigDict(extra="forbid")

    version: Literal[1] = 1
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    lifecycle: LifecycleConfig = Field(default_factory=LifecycleConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


class ScheduleSpec(BaseModel):
    """One schedule in the flat layout used by the report and backup tables."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    frequency: Frequency
    time: Optional[str] = None
    day_of_week: Optional[int] = None
    day_of_month: Optional[int] = None
    cron_expression: Optional[str] = None
    time_zone: Optional[str] = None
    is_active: bool = True

    @field_validator("frequency", mode="before")
    @classmethod
    def _upper_frequency(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value

    @field_validator("time", mode="before")
    @classmethod
    def _time_text(cls, value: Any) -> Any:
        # PyYAML reads an unquoted 9:30 as the base-60 integer 570.
        if isinstance(value, int) and not isinstance(value, bool) and 0 <= value < 24 * 60:
            hour, minute = divmod(value, 60)
            return f"{hour:02d}:{minute:02d}"
        return value

    @model_validator(mode="after")
    def _check_descriptor(self) -> "ScheduleSpec":
        self.to_descriptor()
        return self

    def to_descriptor(self, default_time_zone: str = DEFAULT_TIME_ZONE) -> ScheduleDescriptor:
        """Build the descriptor variant, falling back to ``default_time_zone``."""

        return descriptor_from_fields(
            self.frequency,
            time=self.time,
            day_of_week=self.day_of_week,
            day_of_month=self.day_of_month,
            cron_expression=self.cron_expression,
            time_zone=self.time_zone or default_time_zone,
        )


class ScheduleBook(BaseModel):
    """A document listing named schedules."""

    model_config = ConfigDict(extra="forbid")

    version: Literal[1] = 1
    schedules: List[ScheduleSpec] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_names(self) -> "ScheduleBook":
        seen: set[str] = set()
        for spec in self.schedules:
            if spec.name in seen:
                raise ValidationError(f"duplicate schedule name '{spec.name}'")
            seen.add(spec.name)
        return self

    def get(self, name: str) -> Optional[ScheduleSpec]:
        for spec in self.schedules:
            if spec.name == name:
                return spec
        return None
