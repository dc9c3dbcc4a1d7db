"""Pipeline orchestrator for the audio transcoding run.

Coordinates file discovery, dotfile housekeeping, classification and the
job scheduler. Publishes events on the EventBus so the UI layer never
talks to the pipeline directly.

Key responsibilities:
- Discover candidate audio files (recognized extension, no dotfiles, no '.128.' names)
- Remove hidden dotfile twins next to the candidates
- Classify each candidate and apply the outcome: rename low bit rate files,
  drop files whose converted twin exists (deleting the source unless kept),
  turn the rest into TranscodeJobs
- Run the jobs through the JobScheduler and forward its progress snapshots
"""

import logging
from pathlib import Path
from typing import List, Optional, Set, Tuple

from abt.config.models import AppConfig
from abt.domain.events import (
    ActionMessage, DiscoveryFinished, DiscoveryStarted, ProcessingFinished, ProgressUpdated,
)
from abt.domain.models import Classification, ScheduleSummary, SchedulerSnapshot, TranscodeJob
from abt.infrastructure.event_bus import EventBus
from abt.infrastructure.file_scanner import FileScanner
from abt.infrastructure.housekeeping import HousekeepingService
from abt.pipeline.classifier import FileClassifier
from abt.pipeline.scheduler import JobScheduler


class Orchestrator:
    """Audio transcoding pipeline orchestrator.

    Args:
        config: AppConfig with general and UI settings.
        event_bus: EventBus for publishing lifecycle events.
        file_scanner: FileScanner for discovering candidates.
        classifier: FileClassifier deciding rename / skip / transcode.
        scheduler: JobScheduler running the transcodes.
        housekeeper: optional HousekeepingService for dotfile twins.
    """

    def __init__(
        self,
        config: AppConfig,
        event_bus: EventBus,
        file_scanner: FileScanner,
        classifier: FileClassifier,
        scheduler: JobScheduler,
        housekeeper: Optional[HousekeepingService] = None,
    ):
        self.config = config
        self.event_bus = event_bus
        self.file_scanner = file_scanner
        self.classifier = classifier
        self.scheduler = scheduler
        self.housekeeper = housekeeper or HousekeepingService()
        self.logger = logging.getLogger(__name__)

    def discover(self, root_dir: Path) -> List[Path]:
        self.event_bus.publish(DiscoveryStarted(directory=root_dir))
        files = list(self.file_scanner.scan(root_dir))
        self.logger.info(f"Discovery finished: found {len(files)} music file(s) in {root_dir}")
        return files

    def cleanup_dotfiles(self, files: List[Path]) -> int:
        removed = self.housekeeper.cleanup_dotfiles(files)
        if removed:
            self.event_bus.publish(ActionMessage(message=f"Deleted {removed} dotfile(s)"))
        return removed

    def prepare(self, files: List[Path]) -> List[TranscodeJob]:
        """Classifies files, applies rename/delete outcomes, returns the jobs to run."""
        keep = self.config.general.keep_originals
        jobs: List[TranscodeJob] = []
        claimed: Set[Path] = set()
        renamed = skipped = dropped = 0

        for source in files:
            target = self.classifier.target_for(source)
            if target in claimed:
                # Another source in this run already maps to this target
                self.logger.error(f"Not converting {source}: {target.name} is already claimed by another file")
                dropped += 1
                continue
            claimed.add(target)
            outcome = self.classifier.classify(source)

            if outcome == Classification.BELOW_THRESHOLD:
                if self._rename(source, target):
                    renamed += 1
                else:
                    dropped += 1
            elif outcome == Classification.TARGET_EXISTS:
                self.logger.info(f"Skipping {source}, target already exists")
                if not keep:
                    self._delete_source(source)
                skipped += 1
            else:
                jobs.append(TranscodeJob(source_path=source, target_path=target, keep_original=keep))

        self.logger.info(
            f"Classification finished: to_transcode={len(jobs)}, renamed={renamed}, "
            f"skipped_existing={skipped}, errors={dropped}"
        )
        self.event_bus.publish(DiscoveryFinished(
            files_found=len(files),
            renamed=renamed,
            skipped_existing=skipped,
            to_transcode=len(jobs),
            dropped_errors=dropped,
        ))
        return jobs

    def process(self, jobs: List[TranscodeJob]) -> ScheduleSummary:
        def on_progress(snapshot: SchedulerSnapshot):
            self.event_bus.publish(ProgressUpdated(snapshot=snapshot))

        summary = self.scheduler.run(jobs, capacity=self.config.general.capacity, on_progress=on_progress)
        self.event_bus.publish(ProcessingFinished(
            succeeded=summary.succeeded_count,
            failed=summary.failed_count,
        ))
        return summary

    def run(self, root_dir: Path) -> Tuple[ScheduleSummary, List[TranscodeJob]]:
        """Non-interactive run: discover, clean, classify, transcode."""
        files = self.discover(root_dir)
        self.cleanup_dotfiles(files)
        jobs = self.prepare(files)
        return self.process(jobs), jobs

    def _rename(self, source: Path, target: Path) -> bool:
        if source == target:
            return True
        if target.exists():
            self.logger.error(f"Not renaming {source}: {target.name} already exists")
            return False
        try:
            source.rename(target)
        except OSError as e:
            self.logger.error(f"Failed to rename {source} -> {target.name}: {e}")
            return False
        self.logger.info(f"Renamed low bit rate file {source} -> {target.name}")
        return True

    def _delete_source(self, source: Path):
        try:
            source.unlink()
            self.logger.warning(f"DEL original {source}")
        except OSError as e:
            self.logger.error(f"Failed to delete {source}: {e}")
