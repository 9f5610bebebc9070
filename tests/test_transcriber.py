import json
import sys
import types
from types import SimpleNamespace

import pytest

from conftest import FakeRunner
from vodscribe.core import transcriber
from vodscribe.core.config import Config, Device
from vodscribe.core.errors import CommandError, ConfigError, TranscriptionError
from vodscribe.core.transcriber import (
    FasterWhisperBackend,
    WhisperCliBackend,
    get_transcriber,
    output_stem,
)


def test_output_stem():
    assert output_stem("/tmp/x/My_Title-abc123.vod.m4a") == "My_Title-abc123.vod"
    assert output_stem("chunk.vod-resampled.001.wav") == "chunk.vod-resampled.001"


@pytest.mark.parametrize("device, expected", [
    (Device.AUTO, []),
    (Device.CPU, ["--device", "cpu"]),
    (Device.GPU, ["--device", "cuda"]),
])
def test_cli_command_passes_configuration(device, expected):
    backend = WhisperCliBackend(FakeRunner(), model="medium", language="en", device=device, output_format="txt")
    args = backend.build_command("a.vod.m4a", "/out")

    assert args == (
        ["whisper", "a.vod.m4a", "--model", "medium", "--language", "en"]
        + expected
        + ["--output_dir", "/out", "--output_format", "txt"]
    )


def test_cli_command_without_language():
    args = WhisperCliBackend(FakeRunner(), language="").build_command("a.m4a", "/out")
    assert "--language" not in args


def test_cli_transcribe_runs_command():
    runner = FakeRunner()
    backend = WhisperCliBackend(runner, command="whisper-ctranslate2")

    assert backend.transcribe("/w/Title-1.vod.m4a", "/w/transcriptions") == "Title-1.vod"
    assert runner.calls[0][:2] == ("whisper-ctranslate2", "/w/Title-1.vod.m4a")
    # whisper progress is shown while it runs
    assert runner.streamed == [True]


def test_cli_transcribe_failure_raises():
    backend = WhisperCliBackend(FakeRunner(fail_on=["whisper"]))
    with pytest.raises(CommandError):
        backend.transcribe("a.m4a", "/out")


def test_get_transcriber_cli_uses_config():
    runner = FakeRunner()
    config = Config(model="small", language="de", device=Device.CPU, whisper_command="wsp")
    backend = get_transcriber(config, runner)

    assert isinstance(backend, WhisperCliBackend)
    assert backend.runner is runner
    assert backend.command == "wsp"
    assert backend.model == "small"
    assert backend.language == "de"
    assert backend.device == Device.CPU


class FakeWhisperModel:
    instances = []

    def __init__(self, model_size, device, compute_type):
        self.model_size = model_size
        self.device = device
        self.compute_type = compute_type
        self.transcribe_kwargs = None
        FakeWhisperModel.instances.append(self)

    def transcribe(self, audio_path, **kwargs):
        self.transcribe_kwargs = kwargs
        segments = [
            SimpleNamespace(start=0.0, end=1.5, text=" Hello "),
            SimpleNamespace(start=1.5, end=3.0, text=" world"),
        ]
        return iter(segments), SimpleNamespace(language="en", language_probability=0.98)


@pytest.fixture
def fake_faster_whisper(monkeypatch):
    FakeWhisperModel.instances = []
    module = types.ModuleType("faster_whisper")
    module.WhisperModel = FakeWhisperModel
    monkeypatch.setitem(sys.modules, "faster_whisper", module)
    return module


def test_faster_whisper_backend_writes_outputs(fake_faster_whisper, tmp_path):
    config = Config(backend="faster_whisper", model="medium", language="en", device=Device.GPU)
    backend = get_transcriber(config)

    assert isinstance(backend, FasterWhisperBackend)
    model = FakeWhisperModel.instances[0]
    assert (model.model_size, model.device) == ("medium", "cuda")

    stem = backend.transcribe(str(tmp_path / "Title-1.vod.m4a"), str(tmp_path))

    assert stem == "Title-1.vod"
    assert model.transcribe_kwargs["language"] == "en"
    assert (tmp_path / "Title-1.vod.txt").read_text(encoding="utf-8") == "Hello\nworld\n"
    data = json.loads((tmp_path / "Title-1.vod.json").read_text(encoding="utf-8"))
    assert data["segments"][0] == {"start": 0.0, "end": 1.5, "text": "Hello"}


def test_faster_whisper_cpu_uses_int8(fake_faster_whisper):
    FasterWhisperBackend(model_size="base.en", device=Device.CPU)
    model = FakeWhisperModel.instances[0]
    assert (model.device, model.compute_type) == ("cpu", "int8")


def test_faster_whisper_failure_raises(fake_faster_whisper, tmp_path, monkeypatch):
    backend = FasterWhisperBackend()

    def explode(audio_path, **kwargs):
        raise RuntimeError("out of memory")

    monkeypatch.setattr(backend.model, "transcribe", explode)
    with pytest.raises(TranscriptionError, match="out of memory"):
        backend.transcribe(str(tmp_path / "a.m4a"), str(tmp_path))


def test_mlx_backend_requires_macos(monkeypatch):
    monkeypatch.setattr(transcriber.sys, "platform", "linux")
    with pytest.raises(ConfigError, match="macOS"):
        get_transcriber(Config(backend="mlx"))


def test_mlx_backend_writes_outputs(monkeypatch, tmp_path):
    calls = []
    module = types.ModuleType("mlx_whisper")

    def fake_transcribe(audio_path, path_or_hf_repo, language):
        calls.append((audio_path, path_or_hf_repo, language))
        return {"segments": [{"start": 0.0, "end": 2.0, "text": " Привет "}], "text": "Привет"}

    module.transcribe = fake_transcribe
    monkeypatch.setitem(sys.modules, "mlx_whisper", module)
    monkeypatch.setattr(transcriber.sys, "platform", "darwin")

    backend = get_transcriber(Config(backend="mlx", model="small", language="ru"))
    stem = backend.transcribe(str(tmp_path / "Title.vod.m4a"), str(tmp_path))

    assert stem == "Title.vod"
    assert calls[0][1:] == ("mlx-community/whisper-small-mlx", "ru")
    assert (tmp_path / "Title.vod.txt").read_text(encoding="utf-8") == "Привет\n"
