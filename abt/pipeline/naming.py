import re
from pathlib import Path
from typing import Iterable

CONVERTED_MARKER = "128"
DEFAULT_EXTENSIONS = ("mp3", "flac", "mpc", "ogg")

_TRACK_PREFIX = re.compile(r"^(\d+)\.")

def _extension_pattern(extensions: Iterable[str]) -> re.Pattern:
    alternatives = "|".join(re.escape(ext.lower().lstrip(".")) for ext in extensions)
    return re.compile(rf"\.({alternatives})$")

def derive_target_name(name: str, extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> str:
    """'03.Track.FLAC' -> '03track.128.flac'."""
    new_name = name.lower()
    new_name = _TRACK_PREFIX.sub(r"\1", new_name)
    return _extension_pattern(extensions).sub(rf".{CONVERTED_MARKER}.\1", new_name)

def derive_target_path(source: Path, extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> Path:
    source = Path(source)
    return source.with_name(derive_target_name(source.name, extensions))

def is_converted_name(path: Path) -> bool:
    """True for names like 'foo.128.mp3'."""
    parts = Path(path).name.split(".")
    return len(parts) >= 3 and parts[-2] == CONVERTED_MARKER
