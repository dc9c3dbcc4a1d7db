import logging
from pathlib import Path
from typing import Iterable, List

DOTFILE_PREFIXES = (".", "._")

class HousekeepingService:
    """Removes hidden twins ('.name', '._name') that sit next to audio files."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def dotfile_twins(self, file_path: Path) -> List[Path]:
        return [file_path.with_name(f"{prefix}{file_path.name}") for prefix in DOTFILE_PREFIXES]

    def cleanup_dotfiles(self, files: Iterable[Path]) -> int:
        """Deletes existing dotfile twins of the given files; returns how many were removed."""
        removed = 0
        for file_path in files:
            for twin in self.dotfile_twins(Path(file_path)):
                if not twin.is_file():
                    continue
                try:
                    twin.unlink()
                    removed += 1
                    self.logger.warning(f"DEL {twin}")
                except OSError as e:
                    self.logger.error(f"Failed to delete {twin}: {e}")
        return removed
