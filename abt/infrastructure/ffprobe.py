import json
import math
import logging
from pathlib import Path
from typing import Any, Dict, Optional
from abt.infrastructure.process_runner import ProcessRunner

class FFprobeAdapter:
    """Wrapper around ffprobe to read the container bit rate."""

    def __init__(self, runner: Optional[ProcessRunner] = None, binary: str = "ffprobe"):
        self.runner = runner or ProcessRunner()
        self.binary = binary
        self.logger = logging.getLogger(__name__)

    def _build_command(self, file_path: Path):
        return [
            self.binary,
            "-v", "quiet",
            "-print_format", "json",
            "-show_format",
            str(file_path),
        ]

    def get_format_info(self, file_path: Path) -> Dict[str, Any]:
        """Executes ffprobe and returns the parsed ``format`` section."""
        result = self.runner.run(self._build_command(file_path))
        if not result.ok:
            raise RuntimeError(f"ffprobe failed for {file_path}: {result.error}")
        data = json.loads(result.output)
        fmt = data.get("format") if isinstance(data, dict) else None
        return fmt or {}

    def get_bitrate_kbps(self, file_path: Path) -> int:
        """Bit rate in kbps (floored); 0 when probing fails or the field is unusable."""
        try:
            fmt = self.get_format_info(file_path)
        except (RuntimeError, ValueError) as e:
            self.logger.warning(f"ffprobe failed at {file_path}: {e}")
            return 0
        return self._to_kbps(fmt.get("bit_rate"))

    @staticmethod
    def _to_kbps(value: Any) -> int:
        try:
            bps = float(value)
        except (TypeError, ValueError):
            return 0
        if not math.isfinite(bps) or bps <= 0:
            return 0
        return int(bps // 1000)
