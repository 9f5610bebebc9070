import os

import pytest

from vodscribe.core.commands import CommandResult, CommandRunner
from vodscribe.core.config import Config
from vodscribe.core.transcriber import BaseTranscriber, output_stem


class FakeRunner(CommandRunner):
    """Records commands instead of running them. Commands whose program is in fail_on exit with 1."""

    def __init__(self, fail_on=(), on_run=None):
        self.calls = []
        self.streamed = []
        self.fail_on = set(fail_on)
        self.on_run = on_run

    def run(self, args, cwd=None, stream=False):
        args = tuple(str(arg) for arg in args)
        self.calls.append(args)
        self.streamed.append(stream)
        if args[0] in self.fail_on:
            return CommandResult(args=args, returncode=1, stderr="boom")
        if self.on_run:
            self.on_run(args)
        return CommandResult(args=args, returncode=0)


class FakeTranscriber(BaseTranscriber):
    """Writes '<stem>.txt' containing 'text of <stem>' for every transcribed file."""

    def __init__(self, fail=False):
        self.calls = []
        self.fail = fail

    def transcribe(self, audio_path, output_dir):
        self.calls.append((audio_path, output_dir))
        if self.fail:
            raise RuntimeError("transcription exploded")
        stem = output_stem(audio_path)
        with open(os.path.join(output_dir, f"{stem}.txt"), 'w', encoding='utf-8') as f:
            f.write(f"text of {stem}\n")
        return stem


def make_downloader(*titles):
    """Fake downloader returning the given title names in turn and creating the audio files."""
    remaining = list(titles)
    calls = []

    def download(source_url, output_dir):
        calls.append((source_url, output_dir))
        title_name = remaining.pop(0)
        audio_path = os.path.join(output_dir, f"{title_name}.vod.m4a")
        with open(audio_path, 'wb') as f:
            f.write(b"audio")
        return audio_path, title_name

    download.calls = calls
    return download


@pytest.fixture
def config(tmp_path):
    return Config(output_dir=str(tmp_path / "out"))


def temp_dirs(parent):
    if not os.path.isdir(parent):
        return []
    return sorted(name for name in os.listdir(parent) if name.startswith("tmp."))
