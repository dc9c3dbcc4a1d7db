import subprocess
import logging
import threading
from typing import List, Optional
from pydantic import BaseModel

STDERR_TAIL_LINES = 5

class ProcessResult(BaseModel):
    ok: bool
    output: str = ""
    error: Optional[str] = None
    returncode: Optional[int] = None

class ProcessRunner:
    """Runs one external command and captures its outcome.

    Spawn failures and non-zero exits both come back as ``ok=False`` with a
    populated ``error``; nothing is retried here.
    """

    def __init__(self, poll_interval_s: float = 0.1, kill_timeout_s: float = 3.0):
        self.poll_interval_s = poll_interval_s
        self.kill_timeout_s = kill_timeout_s
        self.logger = logging.getLogger(__name__)

    def run(self, cmd: List[str], cancel_event: Optional[threading.Event] = None) -> ProcessResult:
        self.logger.debug(f"RUN: {' '.join(cmd)}")
        try:
            process = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                stdin=subprocess.DEVNULL,
                universal_newlines=True,
            )
        except OSError as e:
            return ProcessResult(ok=False, error=f"failed to start {cmd[0]}: {e}")

        if cancel_event is None:
            stdout, stderr = process.communicate()
        else:
            stdout, stderr = self._communicate_cancellable(process, cancel_event)
            if stdout is None:
                return ProcessResult(ok=False, error="cancelled", returncode=process.returncode)

        if process.returncode != 0:
            return ProcessResult(
                ok=False,
                output=stdout or "",
                error=self._describe_exit(cmd, process.returncode, stderr),
                returncode=process.returncode,
            )
        return ProcessResult(ok=True, output=stdout or "", returncode=0)

    def _communicate_cancellable(self, process: subprocess.Popen, cancel_event: threading.Event):
        while True:
            if cancel_event.is_set():
                self._terminate(process)
                return None, None
            try:
                return process.communicate(timeout=self.poll_interval_s)
            except subprocess.TimeoutExpired:
                continue

    def _terminate(self, process: subprocess.Popen):
        process.terminate()
        try:
            process.communicate(timeout=self.kill_timeout_s)
        except subprocess.TimeoutExpired:
            process.kill()
            process.communicate()

    @staticmethod
    def _describe_exit(cmd: List[str], returncode: int, stderr: Optional[str]) -> str:
        message = f"{cmd[0]} exited with code {returncode}"
        tail = [line for line in (stderr or "").strip().splitlines() if line.strip()][-STDERR_TAIL_LINES:]
        if tail:
            message = f"{message}: {' | '.join(tail)}"
        return message
