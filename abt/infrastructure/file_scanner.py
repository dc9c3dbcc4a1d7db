import os
from pathlib import Path
from typing import Iterable, Generator
from abt.pipeline.naming import DEFAULT_EXTENSIONS, is_converted_name

class FileScanner:
    """Recursively scans for audio transcode candidates in a directory."""

    def __init__(self, extensions: Iterable[str] = DEFAULT_EXTENSIONS):
        self.extensions = {(ext if ext.startswith(".") else f".{ext}").lower() for ext in extensions}

    def is_candidate(self, file_path: Path) -> bool:
        if file_path.name.startswith("."):
            return False
        if file_path.suffix.lower() not in self.extensions:
            return False
        return not is_converted_name(file_path)

    def scan(self, root_dir: Path) -> Generator[Path, None, None]:
        """Scans the directory and yields candidate paths in sorted order."""
        for root, dirs, files in os.walk(str(root_dir)):
            root_path = Path(root)

            # Ensure deterministic traversal: sort directories and files
            dirs.sort()
            files.sort()

            for file_name in files:
                file_path = root_path / file_name
                if file_path.is_symlink() or not self.is_candidate(file_path):
                    continue
                yield file_path
