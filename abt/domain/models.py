from enum import Enum
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

class JobStatus(str, Enum):
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.SUCCEEDED, JobStatus.FAILED)

class Classification(str, Enum):
    BELOW_THRESHOLD = "BELOW_THRESHOLD"  # rename only
    TARGET_EXISTS = "TARGET_EXISTS"      # converted twin already on disk
    TO_TRANSCODE = "TO_TRANSCODE"

class TranscodeJob(BaseModel):
    source_path: Path
    target_path: Path
    status: JobStatus = JobStatus.PENDING
    keep_original: bool = False
    error_message: Optional[str] = None
    cleanup_error: Optional[str] = None
    duration_seconds: Optional[float] = None

class SchedulerSnapshot(BaseModel):
    """Immutable view of the scheduler counters at one point in time."""

    model_config = ConfigDict(frozen=True)

    total: int = Field(ge=0)
    completed: int = Field(default=0, ge=0)
    in_flight: int = Field(default=0, ge=0)
    capacity: int = Field(default=1, ge=1)
    succeeded: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)

    @property
    def percent(self) -> float:
        if self.total == 0:
            return 100.0
        return self.completed / self.total * 100.0

    @property
    def pending(self) -> int:
        return self.total - self.completed - self.in_flight

    @property
    def finished(self) -> bool:
        return self.completed == self.total

class ScheduleSummary(BaseModel):
    succeeded_count: int = 0
    failed_count: int = 0

    @property
    def total(self) -> int:
        return self.succeeded_count + self.failed_count

    @property
    def ok(self) -> bool:
        return self.failed_count == 0
