import logging
from pathlib import Path
from typing import Optional

LOG_FILE_NAME = "transcode.log"

def setup_logging(log_dir: Path, debug: bool = False, log_path: Optional[Path] = None) -> logging.Logger:
    """
    Setup logging configuration for ABT.

    Logs go to a file only, so the live dashboard on the terminal is never
    interleaved with log lines. Returns configured logger instance.

    Args:
        log_dir: Directory for transcode.log (usually the scanned root)
        debug: If True, enable DEBUG level logging with per-job timings
        log_path: Optional path to log file (overrides log_dir)
    """
    log_file = Path(log_path) if log_path else (Path(log_dir) / LOG_FILE_NAME)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    level = logging.DEBUG if debug else logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=[logging.FileHandler(log_file)],
        force=True  # Override any existing configuration
    )

    logger = logging.getLogger("abt")
    logger.info(f"Logging initialized: {log_file} (debug={'ON' if debug else 'OFF'})")

    return logger
