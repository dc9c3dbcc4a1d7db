from pathlib import Path
from abt.domain.models import JobStatus, SchedulerSnapshot, TranscodeJob
from abt.ui.progress import ProgressReporter, format_duration

def _job(**kwargs):
    return TranscodeJob(
        source_path=Path("music/03.Track.flac"),
        target_path=Path("music/03track.128.flac"),
        **kwargs,
    )

def test_render_snapshot():
    snapshot = SchedulerSnapshot(total=5, completed=2, in_flight=2, capacity=2, succeeded=1, failed=1)
    line = ProgressReporter().render(snapshot).plain

    assert line.startswith("[2/5]")
    assert "40.0%" in line
    assert "running: 2/2" in line
    assert "ok: 1" in line
    assert "failed: 1" in line

def test_render_empty_snapshot_is_complete():
    line = ProgressReporter().render(SchedulerSnapshot(total=0)).plain
    assert "[0/0]" in line
    assert "100.0%" in line

def test_render_completion_success():
    job = _job(status=JobStatus.SUCCEEDED, duration_seconds=12.34)
    line = ProgressReporter().render_completion(job).plain

    assert line.startswith("✓ 03.Track.flac")
    assert "03track.128.flac" in line
    assert "12.3s" in line

def test_render_completion_success_with_cleanup_error():
    job = _job(status=JobStatus.SUCCEEDED, cleanup_error="could not delete original: denied")
    line = ProgressReporter().render_completion(job).plain

    assert "could not delete original" in line

def test_render_completion_failure():
    job = _job(status=JobStatus.FAILED, error_message="ffmpeg exited with code 1")
    line = ProgressReporter().render_completion(job).plain

    assert line.startswith("✗ 03.Track.flac")
    assert "code 1" in line

def test_render_summary():
    assert ProgressReporter().render_summary(3, 1).plain == "Done: 3 converted, 1 failed"

def test_format_duration():
    assert format_duration(None) == "--"
    assert format_duration(5.25) == "5.2s"
    assert format_duration(61) == "01m 01s"
    assert format_duration(3660) == "1h 01m"

def test_snapshot_properties():
    snapshot = SchedulerSnapshot(total=4, completed=1, in_flight=2, capacity=3)
    assert snapshot.percent == 25.0
    assert snapshot.pending == 1
    assert not snapshot.finished
