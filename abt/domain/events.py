"""Domain events for the audio transcoding pipeline.

Events flow through the EventBus and decouple the orchestrator and the
scheduler from the UI layer.

See `infrastructure/event_bus.py` for the pub/sub mechanism.
"""

from pathlib import Path
from pydantic import BaseModel
from .models import TranscodeJob, SchedulerSnapshot


class Event(BaseModel):
    """Base class for all domain events."""

    pass


class JobEvent(Event):
    """Base class for events related to a specific transcode job."""

    job: TranscodeJob


class JobStarted(JobEvent):
    """Emitted when the scheduler admits a job (PENDING -> RUNNING)."""

    pass


class JobCompleted(JobEvent):
    """Emitted when a job ends SUCCEEDED."""

    pass


class JobFailed(JobEvent):
    """Emitted when a job ends FAILED; the source file is left in place."""

    error_message: str


class ProgressUpdated(Event):
    """Emitted for every scheduler snapshot."""

    snapshot: SchedulerSnapshot


class DiscoveryStarted(Event):
    directory: Path


class DiscoveryFinished(Event):
    """Emitted after classification with the per-outcome counters."""

    files_found: int
    renamed: int = 0
    skipped_existing: int = 0
    to_transcode: int = 0
    dropped_errors: int = 0


class ActionMessage(Event):
    """Short user-facing message (rename, delete, cleanup warnings)."""

    message: str


class ProcessingFinished(Event):
    """Emitted when every job has reached a terminal state."""

    succeeded: int = 0
    failed: int = 0
