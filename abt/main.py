import typer
from pathlib import Path
from typing import Optional
from rich.console import Console
from pydantic import ValidationError
import yaml

from abt.config.loader import DEFAULT_CONFIG_PATH, load_config
from abt.infrastructure.logging import setup_logging
from abt.infrastructure.event_bus import EventBus
from abt.infrastructure.process_runner import ProcessRunner
from abt.infrastructure.file_scanner import FileScanner
from abt.infrastructure.ffprobe import FFprobeAdapter
from abt.infrastructure.ffmpeg import FFmpegAdapter
from abt.infrastructure.housekeeping import HousekeepingService
from abt.pipeline.classifier import FileClassifier
from abt.pipeline.scheduler import JobScheduler
from abt.pipeline.orchestrator import Orchestrator
from abt.ui.state import UIState
from abt.ui.manager import UIManager
from abt.ui.dashboard import Dashboard

app = typer.Typer(help="ABT (Audio Bitrate Transcoder) - convert music to 128 kbps in place")

@app.command()
def convert(
    directory: Path = typer.Argument(Path("."), help="Directory to scan recursively"),
    keep: bool = typer.Option(False, "--keep", help="Keep original files after conversion"),
    threads: Optional[int] = typer.Option(None, "--threads", "-t", help="Override number of parallel transcodes"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help=f"Path to YAML config (default: {DEFAULT_CONFIG_PATH} if present)"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
    log_path: Optional[Path] = typer.Option(None, "--log-path", help="Path to log file (overrides config)"),
    no_ui: bool = typer.Option(False, "--no-ui", help="Print one line per finished file instead of the live dashboard"),
    debug: bool = typer.Option(False, "--debug/--no-debug", help="Enable verbose debug logging"),
):
    """Recursively transcode high bit rate music files to 128 kbps, replacing the originals."""
    console = Console()

    if not directory.is_dir():
        typer.secho(f"Error: {directory} does not exist or is not a directory.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    try:
        if config_path is not None:
            config = load_config(config_path)
        else:
            config = load_config(DEFAULT_CONFIG_PATH, required=False)
    except (FileNotFoundError, ValueError, ValidationError, yaml.YAMLError) as exc:
        typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    # Apply CLI overrides
    if keep: config.general.keep_originals = True
    if threads is not None: config.general.threads = max(1, threads)
    if log_path is not None: config.general.log_path = str(log_path)
    if debug: config.general.debug = True

    log_path_value = Path(config.general.log_path) if config.general.log_path else None
    logger = setup_logging(directory, debug=config.general.debug, log_path=log_path_value)
    logger.info(
        f"Config: capacity={config.general.capacity}, keep_originals={config.general.keep_originals}, "
        f"threshold={config.general.threshold_kbps}k, target={config.general.target_bitrate_kbps}k"
    )

    bus = EventBus()
    runner = ProcessRunner()
    ffprobe = FFprobeAdapter(runner=runner, binary=config.general.ffprobe_bin)
    ffmpeg = FFmpegAdapter(
        runner=runner,
        bitrate_kbps=config.general.target_bitrate_kbps,
        binary=config.general.ffmpeg_bin,
        debug=config.general.debug,
    )
    scheduler = JobScheduler(
        ffmpeg,
        event_bus=bus,
        progress_interval_s=config.general.progress_interval_s,
        debug=config.general.debug,
    )
    orchestrator = Orchestrator(
        config=config,
        event_bus=bus,
        file_scanner=FileScanner(extensions=config.general.extensions),
        classifier=FileClassifier(
            ffprobe,
            threshold_kbps=config.general.threshold_kbps,
            extensions=config.general.extensions,
        ),
        scheduler=scheduler,
        housekeeper=HousekeepingService(),
    )

    files = orchestrator.discover(directory)
    if not files:
        console.print("No files found.")
        raise typer.Exit(code=0)

    console.print(f"Found {len(files)} music file(s)")
    if not yes:
        confirmed = typer.confirm(
            "I'll delete mp3ish dotfiles and do a recursive conversion, are you sure?",
            default=False,
        )
        if not confirmed:
            logger.info("Aborted by user at confirmation prompt")
            raise typer.Exit(code=0)

    ui_state = UIState(activity_feed_max_items=config.ui.activity_feed_max_items)
    UIManager(bus, ui_state, line_sink=console.print if no_ui else None)

    try:
        orchestrator.cleanup_dotfiles(files)
        jobs = orchestrator.prepare(files)
        console.print(f"{len(jobs)} of those have high bit rates")
        if no_ui:
            summary = orchestrator.process(jobs)
        else:
            with Dashboard(ui_state, console=console, refresh_per_second=config.ui.refresh_per_second):
                summary = orchestrator.process(jobs)
            console.print(f"Done: {summary.succeeded_count} converted, {summary.failed_count} failed")

    except KeyboardInterrupt:
        typer.secho("\n✓ Conversion stopped by user (Ctrl+C)", fg=typer.colors.YELLOW)
        raise typer.Exit(code=130)

    if not summary.ok:
        typer.secho(f"{summary.failed_count} file(s) failed, see log for details", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

if __name__ == "__main__":
    app()
