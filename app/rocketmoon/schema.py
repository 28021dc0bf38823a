from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional
from datetime import date, datetime, timezone

class LaunchStatus(str, Enum):
    SUCCESS = "Success"
    FAILURE = "Failure"
    PARTIAL = "Partial"
    TBD = "TBD"

class MoonPhase(str, Enum):
    NEW_MOON = "NewMoon"
    FIRST_QUARTER = "FirstQuarter"
    FULL_MOON = "FullMoon"
    LAST_QUARTER = "LastQuarter"

class ChartKind(str, Enum):
    """Cache tag for each chart aggregation."""
    MOON_PHASE_SUCCESS = "moon-phase-success"
    LAUNCH_STATUS = "launch-status"
    LAUNCH_TIMELINE = "launch-timeline"

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class LaunchRecord(CamelModel):
    id: Optional[int] = None
    name: str
    launch_date: datetime
    status: LaunchStatus = LaunchStatus.TBD
    agency: str = "Unknown"
    rocket_type: str = "Unknown"
    external_id: Optional[str] = None
    moon_phase_id: Optional[int] = None

    @field_validator("launch_date")
    @classmethod
    def launch_date_in_utc(cls, value: datetime) -> datetime:
        """Aware timestamps are stored as naive UTC so year and month follow one clock."""
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

class MoonPhaseEvent(CamelModel):
    id: Optional[int] = None
    phase: MoonPhase
    date: date
    year: int

class ChartCacheEntry(CamelModel):
    year: int
    chart_kind: ChartKind
    json_data: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

class ChartData(CamelModel):
    chart_type: str
    title: Optional[str] = None
    year: int

class MoonPhaseSuccessRate(CamelModel):
    moon_phase: str
    success_rate: float
    total_launches: int
    successful_launches: int

class MoonPhaseSuccessChart(ChartData):
    data: List[MoonPhaseSuccessRate] = []

class LaunchStatusDistribution(CamelModel):
    status: str
    count: int
    percentage: float

class LaunchStatusChart(ChartData):
    data: List[LaunchStatusDistribution] = []

class LaunchTimelinePoint(CamelModel):
    month: str
    month_number: int
    launch_count: int

class LaunchTimelineChart(ChartData):
    data: List[LaunchTimelinePoint] = []

class InitResponse(CamelModel):
    year: int
    moon_phases_count: int
    launches_count: int
    message: str
