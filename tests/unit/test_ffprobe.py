import json
import pytest
from pathlib import Path
from unittest.mock import MagicMock
from abt.infrastructure.ffprobe import FFprobeAdapter
from abt.infrastructure.process_runner import ProcessResult

def _adapter(result: ProcessResult) -> FFprobeAdapter:
    runner = MagicMock()
    runner.run.return_value = result
    return FFprobeAdapter(runner=runner)

def test_ffprobe_command():
    adapter = _adapter(ProcessResult(ok=True, output="{}"))
    adapter.get_bitrate_kbps(Path("music/a b.mp3"))

    cmd = adapter.runner.run.call_args[0][0]
    assert cmd == ["ffprobe", "-v", "quiet", "-print_format", "json", "-show_format", "music/a b.mp3"]

def test_ffprobe_parse_bitrate():
    output = json.dumps({"format": {"bit_rate": "320999", "duration": "10.0"}})
    assert _adapter(ProcessResult(ok=True, output=output)).get_bitrate_kbps(Path("a.mp3")) == 320

def test_ffprobe_numeric_bitrate():
    output = json.dumps({"format": {"bit_rate": 128000}})
    assert _adapter(ProcessResult(ok=True, output=output)).get_bitrate_kbps(Path("a.mp3")) == 128

@pytest.mark.parametrize("payload", [
    {"format": {}},
    {"format": {"bit_rate": "N/A"}},
    {"format": {"bit_rate": None}},
    {"streams": []},
    [],
])
def test_ffprobe_unusable_bitrate_is_zero(payload):
    output = json.dumps(payload)
    assert _adapter(ProcessResult(ok=True, output=output)).get_bitrate_kbps(Path("a.mp3")) == 0

def test_ffprobe_invalid_json_is_zero():
    assert _adapter(ProcessResult(ok=True, output="not json")).get_bitrate_kbps(Path("a.mp3")) == 0

def test_ffprobe_failure_is_zero():
    result = ProcessResult(ok=False, error="ffprobe exited with code 1", returncode=1)
    assert _adapter(result).get_bitrate_kbps(Path("a.mp3")) == 0

def test_ffprobe_get_format_info_raises():
    result = ProcessResult(ok=False, error="boom", returncode=1)
    with pytest.raises(RuntimeError):
        _adapter(result).get_format_info(Path("a.mp3"))
