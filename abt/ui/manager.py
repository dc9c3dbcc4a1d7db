import logging
from typing import Callable, Optional
from rich.text import Text
from abt.infrastructure.event_bus import EventBus
from abt.ui.progress import ProgressReporter
from abt.ui.state import UIState
from abt.domain.events import (
    ActionMessage, DiscoveryFinished, JobCompleted, JobFailed, JobStarted,
    ProcessingFinished, ProgressUpdated,
)

class UIManager:
    """Subscribes to EventBus and updates UIState.

    ``line_sink`` receives one rendered line per finished job (plain mode);
    the dashboard reads the same information from the state instead.
    """

    def __init__(
        self,
        bus: EventBus,
        state: UIState,
        reporter: Optional[ProgressReporter] = None,
        line_sink: Optional[Callable[[Text], None]] = None,
    ):
        self.bus = bus
        self.state = state
        self.reporter = reporter or ProgressReporter()
        self.line_sink = line_sink
        self.logger = logging.getLogger(__name__)
        self._setup_subscriptions()

    def _setup_subscriptions(self):
        self.bus.subscribe(DiscoveryFinished, self.on_discovery_finished)
        self.bus.subscribe(JobStarted, self.on_job_started)
        self.bus.subscribe(JobCompleted, self.on_job_finished)
        self.bus.subscribe(JobFailed, self.on_job_finished)
        self.bus.subscribe(ProgressUpdated, self.on_progress)
        self.bus.subscribe(ActionMessage, self.on_action_message)
        self.bus.subscribe(ProcessingFinished, self.on_processing_finished)

    def on_discovery_finished(self, event: DiscoveryFinished):
        self.logger.debug(
            f"UI: discovery counters: found={event.files_found}, to_transcode={event.to_transcode}, "
            f"renamed={event.renamed}, skipped_existing={event.skipped_existing}"
        )
        with self.state._lock:
            self.state.files_found = event.files_found
            self.state.renamed_count = event.renamed
            self.state.skipped_existing_count = event.skipped_existing
            self.state.dropped_count = event.dropped_errors
            self.state.discovery_finished = True

    def on_job_started(self, event: JobStarted):
        self.state.add_active_job(event.job)

    def on_job_finished(self, event):
        self.state.finish_job(event.job)
        if self.line_sink:
            self.line_sink(self.reporter.render_completion(event.job))

    def on_progress(self, event: ProgressUpdated):
        self.state.set_snapshot(event.snapshot)

    def on_action_message(self, event: ActionMessage):
        self.state.set_last_action(event.message)

    def on_processing_finished(self, event: ProcessingFinished):
        with self.state._lock:
            self.state.finished = True
        if self.line_sink:
            self.line_sink(self.reporter.render_summary(event.succeeded, event.failed))
