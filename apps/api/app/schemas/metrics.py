from pydantic import BaseModel, Field


class TimingMetricStats(BaseModel):
    count: int
    avg_s: float
    max_s: float


class MetricsResponse(BaseModel):
    counters: dict[str, int]
    timings: dict[str, TimingMetricStats]
    realtime_connections: int = 0
    rooms: dict[str, int] = Field(default_factory=dict)
