from rich.text import Text
from abt.domain.models import JobStatus, SchedulerSnapshot, TranscodeJob

ICON_OK = "✓"
ICON_FAIL = "✗"


def format_duration(seconds) -> str:
    """Format time: 59.2s, 01m 01s, 1h 01m."""
    if seconds is None:
        return "--"
    if seconds < 60:
        return f"{seconds:.1f}s"
    if seconds < 3600:
        return f"{int(seconds // 60):02d}m {int(seconds % 60):02d}s"
    return f"{int(seconds // 3600)}h {int((seconds % 3600) // 60):02d}m"


class ProgressReporter:
    """Formats scheduler snapshots and finished jobs; holds no state."""

    def render(self, snapshot: SchedulerSnapshot) -> Text:
        line = Text()
        line.append(f"[{snapshot.completed}/{snapshot.total}] ", style="bold")
        line.append(f"{snapshot.percent:5.1f}%", style="cyan")
        line.append(" • ")
        line.append(f"running: {snapshot.in_flight}/{snapshot.capacity}")
        line.append(" • ")
        line.append(f"ok: {snapshot.succeeded}", style="green")
        line.append(" • ")
        line.append(f"failed: {snapshot.failed}", style="red" if snapshot.failed else "")
        return line

    def render_completion(self, job: TranscodeJob) -> Text:
        line = Text()
        name = job.source_path.name
        if job.status == JobStatus.SUCCEEDED:
            line.append(f"{ICON_OK} ", style="green")
            line.append(name)
            line.append(f" → {job.target_path.name}", style="dim")
            line.append(f" ({format_duration(job.duration_seconds)})", style="dim")
            if job.cleanup_error:
                line.append(f" ⚠ {job.cleanup_error}", style="yellow")
        else:
            line.append(f"{ICON_FAIL} ", style="red")
            line.append(name)
            line.append(f": {job.error_message or 'failed'}", style="red")
        return line

    def render_summary(self, succeeded: int, failed: int) -> Text:
        style = "green" if failed == 0 else "yellow"
        return Text(f"Done: {succeeded} converted, {failed} failed", style=style)
