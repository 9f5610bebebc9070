import pytest

from vodscribe.core.config import Config
from vodscribe.core.errors import MissingRequirementError
from vodscribe.core.requirements import check_requirements, required_tools


def which_without(*missing):
    return lambda tool: None if tool in missing else f"/usr/bin/{tool}"


def test_all_tools_present():
    assert check_requirements(Config(), which=which_without()) is None


def test_missing_ffmpeg():
    with pytest.raises(MissingRequirementError) as excinfo:
        check_requirements(Config(), which=which_without("ffmpeg"))

    assert excinfo.value.tool == "ffmpeg"
    assert str(excinfo.value) == "ffmpeg is required: https://ffmpeg.org"


def test_missing_whisper_cli():
    with pytest.raises(MissingRequirementError, match="whisper is required"):
        check_requirements(Config(), which=which_without("whisper"))


def test_custom_whisper_command_is_checked():
    config = Config(whisper_command="whisper-ctranslate2")
    assert ("whisper-ctranslate2", "https://github.com/openai/whisper") in required_tools(config)


def test_in_process_backend_does_not_need_whisper_cli():
    config = Config(backend="faster_whisper")
    check_requirements(config, which=which_without("whisper"))
    assert [tool for tool, _ in required_tools(config)] == ["ffmpeg"]


def test_defaults_to_path_lookup(monkeypatch):
    monkeypatch.setattr("vodscribe.core.requirements.shutil.which", lambda tool: None)
    with pytest.raises(MissingRequirementError):
        check_requirements(Config())
