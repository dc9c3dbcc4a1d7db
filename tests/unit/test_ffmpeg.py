import threading
from pathlib import Path
from unittest.mock import MagicMock
from abt.domain.models import TranscodeJob
from abt.infrastructure.ffmpeg import FFmpegAdapter
from abt.infrastructure.process_runner import ProcessResult

def _job():
    return TranscodeJob(source_path=Path("in/03.Track.flac"), target_path=Path("in/03track.128.flac"))

def test_build_command_default():
    adapter = FFmpegAdapter(runner=MagicMock())
    cmd = adapter._build_command(_job())

    assert cmd == [
        "ffmpeg", "-hide_banner", "-loglevel", "warning", "-y",
        "-i", "in/03.Track.flac",
        "-map", "0:a:0",
        "-b:a", "128k",
        "in/03track.128.flac",
    ]

def test_build_command_custom_bitrate_and_binary():
    adapter = FFmpegAdapter(runner=MagicMock(), bitrate_kbps=96, binary="/opt/ffmpeg")
    cmd = adapter._build_command(_job())

    assert cmd[0] == "/opt/ffmpeg"
    assert cmd[cmd.index("-b:a") + 1] == "96k"

def test_transcode_delegates_to_runner():
    runner = MagicMock()
    runner.run.return_value = ProcessResult(ok=True, returncode=0)
    cancel = threading.Event()
    adapter = FFmpegAdapter(runner=runner, debug=True)

    result = adapter.transcode(_job(), cancel_event=cancel)

    assert result.ok
    assert runner.run.call_args.kwargs["cancel_event"] is cancel

def test_transcode_returns_failure_unchanged():
    runner = MagicMock()
    runner.run.return_value = ProcessResult(ok=False, error="ffmpeg exited with code 1", returncode=1)
    job = _job()

    result = FFmpegAdapter(runner=runner).transcode(job)

    assert not result.ok
    assert result.returncode == 1
    # the scheduler owns the job status
    assert job.status.value == "PENDING"
