import pytest
import threading
import time
import yaml
from pathlib import Path
from typing import Dict, List, Optional, Set
from abt.config.models import AppConfig
from abt.domain.models import TranscodeJob
from abt.infrastructure.event_bus import EventBus
from abt.infrastructure.process_runner import ProcessResult
from abt.pipeline.naming import derive_target_path

# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def sample_config():
    """Returns a sample AppConfig object for testing."""
    return AppConfig(
        general={
            "threads": 2,
            "keep_originals": False,
            "threshold_kbps": 128,
            "target_bitrate_kbps": 128,
            "extensions": ["mp3", "flac", "mpc", "ogg"],
            "progress_interval_s": 0.05,
            "debug": False,
        },
    )

@pytest.fixture
def config_yaml_path(tmp_path):
    """Creates a temporary YAML config file."""
    conf_dir = tmp_path / "conf"
    conf_dir.mkdir()
    conf_file = conf_dir / "abt.yaml"

    content = {
        'general': {
            'threads': 3,
            'keep_originals': True,
            'threshold_kbps': 160,
            'extensions': ['mp3', '.FLAC'],
            'progress_interval_s': 0.25,
        },
        'ui': {
            'activity_feed_max_items': 4,
        }
    }

    with open(conf_file, 'w') as f:
        yaml.dump(content, f)

    return conf_file

# ============================================================================
# EventBus Fixtures
# ============================================================================

@pytest.fixture
def event_bus():
    """Returns a fresh EventBus instance."""
    return EventBus()

# ============================================================================
# File System Fixtures
# ============================================================================

@pytest.fixture
def music_dir(tmp_path):
    """Creates a small music library with nested albums."""
    root = tmp_path / "music"
    album = root / "artist" / "album"
    album.mkdir(parents=True)
    (album / "01.Intro.mp3").write_bytes(b"mp3 data")
    (album / "02.Song.flac").write_bytes(b"flac data")
    (root / "single.ogg").write_bytes(b"ogg data")
    return root

def make_jobs(directory: Path, count: int, keep_original: bool = False) -> List[TranscodeJob]:
    jobs = []
    for i in range(count):
        source = directory / f"{i:02d}.track.mp3"
        source.write_bytes(b"audio")
        jobs.append(TranscodeJob(
            source_path=source,
            target_path=derive_target_path(source),
            keep_original=keep_original,
        ))
    return jobs

# ============================================================================
# Fake encoder
# ============================================================================

class FakeFFmpeg:
    """Stands in for FFmpegAdapter: sleeps, tracks concurrency, writes the target."""

    def __init__(self, delay: float = 0.02, fail_names: Optional[Set[str]] = None,
                 delays: Optional[Dict[str, float]] = None, write_partial_on_fail: bool = False):
        self.delay = delay
        self.delays = delays or {}
        self.fail_names = fail_names or set()
        self.write_partial_on_fail = write_partial_on_fail
        self.calls: List[str] = []
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def transcode(self, job, cancel_event=None):
        name = job.source_path.name
        with self._lock:
            self.calls.append(name)
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            deadline = time.monotonic() + self.delays.get(name, self.delay)
            while time.monotonic() < deadline:
                if cancel_event is not None and cancel_event.is_set():
                    return ProcessResult(ok=False, error="cancelled")
                time.sleep(0.005)
            if name in self.fail_names:
                if self.write_partial_on_fail:
                    job.target_path.write_bytes(b"partial")
                return ProcessResult(ok=False, error="ffmpeg exited with code 1", returncode=1)
            job.target_path.write_bytes(b"converted")
            return ProcessResult(ok=True, returncode=0)
        finally:
            with self._lock:
                self.active -= 1

@pytest.fixture
def fake_ffmpeg():
    return FakeFFmpeg()

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )

@pytest.fixture
def job_factory():
    """Returns make_jobs(directory, count, keep_original=False)."""
    return make_jobs

@pytest.fixture
def ffmpeg_factory():
    """Returns the FakeFFmpeg class for tests that need custom delays or failures."""
    return FakeFFmpeg
