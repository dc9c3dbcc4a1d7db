import logging
import threading
import time
from typing import List, Optional
from abt.domain.models import TranscodeJob
from abt.infrastructure.process_runner import ProcessRunner, ProcessResult

class FFmpegAdapter:
    """Wrapper around ffmpeg for audio transcoding."""

    def __init__(
        self,
        runner: Optional[ProcessRunner] = None,
        bitrate_kbps: int = 128,
        binary: str = "ffmpeg",
        debug: bool = False,
    ):
        self.runner = runner or ProcessRunner()
        self.bitrate_kbps = bitrate_kbps
        self.binary = binary
        self.debug = debug
        self.logger = logging.getLogger(__name__)

    def _build_command(self, job: TranscodeJob) -> List[str]:
        """Constructs the ffmpeg command line arguments."""
        # LAME is single threaded, so there is no -threads here
        return [
            self.binary,
            "-hide_banner",
            "-loglevel", "warning",
            "-y",  # Overwrite output files
            "-i", str(job.source_path),
            "-map", "0:a:0",
            "-b:a", f"{self.bitrate_kbps}k",
            str(job.target_path),
        ]

    def transcode(self, job: TranscodeJob, cancel_event: Optional[threading.Event] = None) -> ProcessResult:
        """Runs the transcode; the caller owns the job status."""
        filename = job.source_path.name
        start_time = time.monotonic() if self.debug else None
        cmd = self._build_command(job)

        if self.debug:
            self.logger.debug(f"FFMPEG_CMD: {' '.join(cmd)}")

        result = self.runner.run(cmd, cancel_event=cancel_event)

        if self.debug and start_time is not None:
            elapsed = time.monotonic() - start_time
            status = "ok" if result.ok else f"failed code={result.returncode}"
            self.logger.info(f"FFMPEG_END: {filename} status={status} elapsed={elapsed:.2f}s")
        return result
