from pathlib import Path
from typing import Iterable
from abt.domain.models import Classification
from abt.infrastructure.ffprobe import FFprobeAdapter
from abt.pipeline.naming import DEFAULT_EXTENSIONS, derive_target_path

class FileClassifier:
    """Decides what happens to a candidate file; never touches the filesystem.

    Order matters: a low bit rate wins over an existing target, so an
    unprobeable file (bit rate 0) is always renamed.
    """

    def __init__(
        self,
        ffprobe_adapter: FFprobeAdapter,
        threshold_kbps: int = 128,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    ):
        self.ffprobe_adapter = ffprobe_adapter
        self.threshold_kbps = threshold_kbps
        self.extensions = tuple(extensions)

    def target_for(self, path: Path) -> Path:
        return derive_target_path(path, self.extensions)

    def classify(self, path: Path) -> Classification:
        bitrate = self.ffprobe_adapter.get_bitrate_kbps(path)
        if bitrate <= self.threshold_kbps:
            return Classification.BELOW_THRESHOLD
        if self.target_for(path).exists():
            return Classification.TARGET_EXISTS
        return Classification.TO_TRANSCODE
