import threading
from typing import Optional
from rich.live import Live
from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.progress_bar import ProgressBar
from rich.text import Text
from abt.ui.state import UIState
from abt.ui.progress import ProgressReporter, format_duration

MAX_NAME_LEN = 60


def shorten(name: str, max_len: int = MAX_NAME_LEN) -> str:
    if len(name) <= max_len:
        return name
    return name[: max_len - 1] + "…"


class Dashboard:
    """Live terminal view of the scheduler: progress, active jobs, recent results."""

    def __init__(self, state: UIState, reporter: Optional[ProgressReporter] = None,
                 console: Optional[Console] = None, refresh_per_second: int = 4):
        self.state = state
        self.reporter = reporter or ProgressReporter()
        self.console = console or Console()
        self.refresh_per_second = refresh_per_second
        self._live: Optional[Live] = None
        self._refresh_thread: Optional[threading.Thread] = None
        self._stop_refresh = threading.Event()
        self._ui_lock = threading.Lock()

    def _generate_progress(self) -> Panel:
        with self.state._lock:
            snapshot = self.state.snapshot
            elapsed = self.state.elapsed_seconds()
            if snapshot is None:
                return Panel(Text("Waiting for scheduler...", style="dim"), title="PROGRESS", border_style="cyan")

            header = self.reporter.render(snapshot)
            bar = ProgressBar(total=max(snapshot.total, 1), completed=snapshot.completed, width=None)
            bar_grid = Table.grid(padding=(0, 1))
            bar_grid.add_row(bar, "•", format_duration(elapsed))

            discovery = Text(
                f"Found: {self.state.files_found} • Renamed: {self.state.renamed_count} • "
                f"Skipped (exists): {self.state.skipped_existing_count}",
                style="dim",
            )
            rows = [header, bar_grid, discovery]
            if self.state.last_action:
                rows.append(Text(self.state.last_action, style="yellow"))
        return Panel(Group(*rows), title="PROGRESS", border_style="cyan")

    def _generate_active_jobs_panel(self) -> Panel:
        with self.state._lock:
            jobs = list(self.state.active_jobs)
        table = Table.grid(padding=(0, 1))
        if not jobs:
            table.add_row(Text("idle", style="dim"))
        for job in jobs:
            table.add_row(Text("⚡", style="yellow"), Text(shorten(str(job.source_path))))
        return Panel(table, title="ACTIVE JOBS", border_style="cyan")

    def _generate_activity_panel(self) -> Panel:
        with self.state._lock:
            jobs = list(self.state.recent_jobs)
        lines = [self.reporter.render_completion(job) for job in jobs] or [Text("nothing yet", style="dim")]
        return Panel(Group(*lines), title="RECENT", border_style="cyan")

    def create_display(self) -> RenderableType:
        return Group(
            self._generate_progress(),
            self._generate_active_jobs_panel(),
            self._generate_activity_panel(),
        )

    def _refresh_loop(self):
        interval = 1.0 / self.refresh_per_second
        while not self._stop_refresh.wait(interval):
            if self._live:
                display = self.create_display()
                with self._ui_lock:
                    self._live.update(display)

    def start(self):
        self._live = Live(self.create_display(), console=self.console,
                          refresh_per_second=self.refresh_per_second)
        self._live.start()
        self._stop_refresh.clear()
        self._refresh_thread = threading.Thread(target=self._refresh_loop, daemon=True)
        self._refresh_thread.start()
        return self

    def stop(self):
        self._stop_refresh.set()
        if self._refresh_thread:
            self._refresh_thread.join(timeout=1.0)
        if self._live:
            # Final update so the last snapshot stays on screen
            with self._ui_lock:
                self._live.update(self.create_display())
            self._live.stop()
            self._live = None

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
