"""Bounded-parallelism scheduler for transcode jobs.

Jobs are admitted in submission order while fewer than ``capacity`` are
running. Each admitted job runs on a worker thread; its completion updates
the shared counters under a ``threading.Condition`` and wakes the control
loop, which admits the next jobs and emits a progress snapshot. The loop
also wakes on a fixed interval so progress keeps ticking while long
transcodes run.

Counter invariants, held under the condition lock:
- 0 <= in_flight <= capacity
- completed + in_flight <= total
- completed reaches total exactly once, which ends ``run``
"""

import concurrent.futures
import logging
import threading
import time
from collections import deque
from typing import Callable, Deque, Iterable, List, Optional

from abt.config.models import default_capacity
from abt.domain.events import JobCompleted, JobFailed, JobStarted
from abt.domain.models import JobStatus, ScheduleSummary, SchedulerSnapshot, TranscodeJob
from abt.infrastructure.event_bus import EventBus
from abt.infrastructure.ffmpeg import FFmpegAdapter

ProgressCallback = Callable[[SchedulerSnapshot], None]

CANCELLED_MESSAGE = "cancelled"


def resolve_capacity(capacity: Optional[int] = None) -> int:
    if capacity is None:
        return default_capacity()
    return max(1, int(capacity))


class SchedulerState:
    """Shared counters for one scheduler run."""

    def __init__(self, total: int, capacity: int):
        self.total = total
        self.capacity = capacity
        self.completed = 0
        self.in_flight = 0
        self.succeeded = 0
        self.failed = 0
        self._cond = threading.Condition()

    def try_admit(self) -> bool:
        with self._cond:
            if self.in_flight >= self.capacity:
                return False
            if self.completed + self.in_flight >= self.total:
                return False
            self.in_flight += 1
            return True

    def release(self):
        """Undoes a try_admit whose job never reached a worker."""
        with self._cond:
            self.in_flight -= 1
            self._cond.notify_all()

    def complete(self, succeeded: bool):
        with self._cond:
            self.in_flight -= 1
            self.completed += 1
            if succeeded:
                self.succeeded += 1
            else:
                self.failed += 1
            self._cond.notify_all()

    def wait_for_completion(self, seen_completed: int, timeout: float) -> bool:
        """Blocks until ``completed`` moves past ``seen_completed`` or the timeout passes."""
        with self._cond:
            return self._cond.wait_for(lambda: self.completed != seen_completed, timeout=timeout)

    def snapshot(self) -> SchedulerSnapshot:
        with self._cond:
            return SchedulerSnapshot(
                total=self.total,
                completed=self.completed,
                in_flight=self.in_flight,
                capacity=self.capacity,
                succeeded=self.succeeded,
                failed=self.failed,
            )


class JobScheduler:
    """Runs transcode jobs to completion with at most ``capacity`` in flight.

    Args:
        ffmpeg_adapter: runs the transcode for one job.
        event_bus: optional; receives JobStarted/JobCompleted/JobFailed.
        progress_interval_s: upper bound between two progress snapshots.
    """

    def __init__(
        self,
        ffmpeg_adapter: FFmpegAdapter,
        event_bus: Optional[EventBus] = None,
        progress_interval_s: float = 0.5,
        debug: bool = False,
    ):
        self.ffmpeg_adapter = ffmpeg_adapter
        self.event_bus = event_bus
        self.progress_interval_s = progress_interval_s
        self.debug = debug
        self.logger = logging.getLogger(__name__)
        self._cancel_event = threading.Event()

    @property
    def cancel_requested(self) -> bool:
        return self._cancel_event.is_set()

    def request_cancel(self):
        """Stops starting new transcodes and terminates the running ones."""
        if not self._cancel_event.is_set():
            self.logger.info("Cancellation requested, terminating active transcodes")
        self._cancel_event.set()

    def run(
        self,
        jobs: Iterable[TranscodeJob],
        capacity: Optional[int] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ScheduleSummary:
        jobs = list(jobs)
        capacity = resolve_capacity(capacity)
        state = SchedulerState(total=len(jobs), capacity=capacity)
        pending: Deque[TranscodeJob] = deque(jobs)

        self.logger.info(f"Scheduler started: jobs={len(jobs)}, capacity={capacity}")

        with concurrent.futures.ThreadPoolExecutor(
            max_workers=capacity, thread_name_prefix="abt-job"
        ) as executor:
            futures: List[concurrent.futures.Future] = []
            try:
                self._control_loop(executor, futures, pending, state, on_progress)
            except KeyboardInterrupt:
                self.logger.info("Ctrl+C detected - cancelling remaining jobs...")
                self.request_cancel()
                # Remaining jobs are still admitted and fail fast as cancelled
                self._control_loop(executor, futures, pending, state, on_progress)
                raise

        summary = ScheduleSummary(succeeded_count=state.succeeded, failed_count=state.failed)
        self.logger.info(
            f"Scheduler finished: succeeded={summary.succeeded_count}, failed={summary.failed_count}"
        )
        return summary

    def _control_loop(self, executor, futures, pending, state: SchedulerState, on_progress):
        while True:
            self._admit(executor, futures, pending, state)
            snapshot = state.snapshot()
            self._emit_progress(on_progress, snapshot)
            if snapshot.finished:
                break
            state.wait_for_completion(snapshot.completed, timeout=self.progress_interval_s)

        for future in futures:
            # Work never raises; this only surfaces scheduler bugs
            exc = future.exception()
            if exc is not None:
                self.logger.error(f"Job worker crashed: {exc}")

    def _admit(self, executor, futures, pending: Deque[TranscodeJob], state: SchedulerState):
        while pending:
            if not state.try_admit():
                return
            job = None
            future = None
            try:
                job = pending.popleft()
                job.status = JobStatus.RUNNING
                if self.debug:
                    self.logger.debug(f"ADMIT: {job.source_path.name}")
                self._publish(JobStarted(job=job))
                future = executor.submit(self._execute, job, state)
                futures.append(future)
            except BaseException:
                if future is None:
                    # No worker owns the slot: give it and the job back
                    state.release()
                    if job is not None:
                        job.status = JobStatus.PENDING
                        pending.appendleft(job)
                raise

    def _execute(self, job: TranscodeJob, state: SchedulerState):
        start_time = time.monotonic()
        try:
            if self._cancel_event.is_set():
                self._fail(job, CANCELLED_MESSAGE)
            else:
                self._transcode(job)
        except Exception as e:
            self.logger.error(f"Exception processing {job.source_path.name}: {e}")
            self._fail(job, f"Exception: {e}")
        finally:
            job.duration_seconds = time.monotonic() - start_time
            if job.status == JobStatus.SUCCEEDED:
                self._publish(JobCompleted(job=job))
            else:
                self._publish(JobFailed(job=job, error_message=job.error_message or "failed"))
            state.complete(job.status == JobStatus.SUCCEEDED)

    def _transcode(self, job: TranscodeJob):
        self.logger.info(f"Converting {job.source_path} --> {job.target_path.name}")
        result = self.ffmpeg_adapter.transcode(job, cancel_event=self._cancel_event)
        if not result.ok:
            self._fail(job, result.error or "transcode failed")
            self._discard_partial_target(job)
            return

        job.status = JobStatus.SUCCEEDED
        if not job.keep_original:
            self._remove_original(job)

    def _fail(self, job: TranscodeJob, message: str):
        job.status = JobStatus.FAILED
        job.error_message = message
        self.logger.error(f"Transcode failed: {job.source_path}: {message}")

    def _remove_original(self, job: TranscodeJob):
        try:
            job.source_path.unlink()
            self.logger.warning(f"DEL original {job.source_path}")
        except OSError as e:
            job.cleanup_error = f"could not delete original: {e}"
            self.logger.error(f"Cleanup failed for {job.source_path}: {e}")

    def _discard_partial_target(self, job: TranscodeJob):
        # Jobs are only created when the target did not exist yet
        try:
            if job.target_path.exists():
                job.target_path.unlink()
                self.logger.info(f"Removed partial output {job.target_path}")
        except OSError as e:
            self.logger.warning(f"Failed to remove partial output {job.target_path}: {e}")

    def _emit_progress(self, on_progress: Optional[ProgressCallback], snapshot: SchedulerSnapshot):
        if on_progress is None:
            return
        try:
            on_progress(snapshot)
        except Exception as e:
            self.logger.error(f"Progress callback failed: {e}")

    def _publish(self, event):
        if self.event_bus is None:
            return
        try:
            self.event_bus.publish(event)
        except Exception as e:
            self.logger.error(f"Failed to publish {type(event).__name__}: {e}")
