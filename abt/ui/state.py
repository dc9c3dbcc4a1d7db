import threading
from datetime import datetime
from collections import deque
from typing import List, Optional
from abt.domain.models import SchedulerSnapshot, TranscodeJob

class UIState:
    """Thread-safe state manager for the live dashboard."""

    def __init__(self, activity_feed_max_items: int = 8):
        self._lock = threading.RLock()

        # Discovery counters
        self.files_found = 0
        self.renamed_count = 0
        self.skipped_existing_count = 0
        self.dropped_count = 0
        self.discovery_finished = False

        # Scheduler
        self.snapshot: Optional[SchedulerSnapshot] = None
        self.active_jobs: List[TranscodeJob] = []
        self.recent_jobs = deque(maxlen=activity_feed_max_items)
        self.processing_start_time: Optional[datetime] = None
        self.finished = False

        self.last_action: str = ""
        self.last_action_time: Optional[datetime] = None

    def set_snapshot(self, snapshot: SchedulerSnapshot):
        with self._lock:
            if self.processing_start_time is None:
                self.processing_start_time = datetime.now()
            self.snapshot = snapshot

    def add_active_job(self, job: TranscodeJob):
        with self._lock:
            # Identity, not equality: workers mutate the jobs while they are listed
            if not any(j is job for j in self.active_jobs):
                self.active_jobs.append(job)

    def finish_job(self, job: TranscodeJob):
        with self._lock:
            self.active_jobs = [j for j in self.active_jobs if j is not job]
            self.recent_jobs.appendleft(job)

    def set_last_action(self, message: str):
        with self._lock:
            self.last_action = message
            self.last_action_time = datetime.now()

    def elapsed_seconds(self) -> Optional[float]:
        with self._lock:
            if self.processing_start_time is None:
                return None
            return (datetime.now() - self.processing_start_time).total_seconds()
