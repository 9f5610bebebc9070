"""
transcriber.py

Transcriber with pluggable backends:
- Whisper CLI (default): runs the whisper executable as an external command
- Faster-Whisper: in-process, CPU or CUDA
- MLX-Whisper: in-process, Apple Silicon GPU
"""

import json
import os
import sys
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from .commands import CommandRunner
from .config import Config, Device
from .errors import ConfigError, TranscriptionError


def output_stem(audio_path: str) -> str:
    """Name Whisper gives its output files: the audio basename without the last extension."""
    return os.path.splitext(os.path.basename(audio_path))[0]


def write_segments(output_dir: str, stem: str, segments: List[Dict[str, Any]]) -> None:
    """
    Save segments as <stem>.txt (one line per segment) and <stem>.json.
    """
    txt_path = os.path.join(output_dir, f"{stem}.txt")
    with open(txt_path, 'w', encoding='utf-8') as f:
        for segment in segments:
            f.write(segment["text"] + "\n")

    json_path = os.path.join(output_dir, f"{stem}.json")
    with open(json_path, 'w', encoding='utf-8') as f:
        json.dump({"segments": segments}, f, ensure_ascii=False, indent=4)


class BaseTranscriber(ABC):
    """
    Abstract base class for transcription backends.
    All backends write their output files into output_dir, named after the audio file.
    """

    @abstractmethod
    def transcribe(self, audio_path: str, output_dir: str) -> str:
        """
        Transcribe an audio file.

        Args:
            audio_path: Path to the audio file
            output_dir: Directory to write transcription files to

        Returns:
            str: Stem of the written output files (e.g. "My_Title-abc123.vod")
        """
        pass


class WhisperCliBackend(BaseTranscriber):
    """
    Runs the whisper command line tool (openai-whisper or a compatible CLI
    such as whisper-ctranslate2) on the audio file.
    """

    def __init__(self, runner: CommandRunner, command: str = "whisper", model: str = "base.en",
                 language: str = "", device: Device = Device.AUTO, output_format: str = "all"):
        self.runner = runner
        self.command = command
        self.model = model
        self.language = language
        self.device = device
        self.output_format = output_format

    def build_command(self, audio_path: str, output_dir: str) -> List[str]:
        args = [self.command, audio_path, "--model", self.model]
        if self.language:
            args += ["--language", self.language]
        # "auto" leaves device selection to the engine
        if self.device == Device.CPU:
            args += ["--device", "cpu"]
        elif self.device == Device.GPU:
            args += ["--device", "cuda"]
        args += ["--output_dir", output_dir, "--output_format", self.output_format]
        return args

    def transcribe(self, audio_path: str, output_dir: str) -> str:
        print(f"[Whisper CLI] Starting transcription: {audio_path}")
        self.runner.check(self.build_command(audio_path, output_dir), stream=True)
        print("[Whisper CLI] Transcription completed.")
        return output_stem(audio_path)


class FasterWhisperBackend(BaseTranscriber):
    """
    In-process transcription backend using faster-whisper.
    Works on any platform (macOS, Linux, Windows).
    """

    def __init__(self, model_size: str = "base.en", device: Device = Device.AUTO, language: str = ""):
        """
        Initialize the Faster-Whisper backend.

        Args:
            model_size: Whisper model name (e.g., "base.en", "medium", "large-v3")
            device: Device to use for inference
            language: Language code, empty to autodetect
        """
        from faster_whisper import WhisperModel

        device_name = {Device.AUTO: "auto", Device.CPU: "cpu", Device.GPU: "cuda"}[device]
        # int8 keeps CPU inference fast, let CTranslate2 pick otherwise
        compute_type = "int8" if device == Device.CPU else "default"

        print(f"[Faster-Whisper Backend] Loading model: {model_size} (device={device_name}, compute_type={compute_type})")
        self.model = WhisperModel(model_size, device=device_name, compute_type=compute_type)
        self.language = language or None
        print("[Faster-Whisper Backend] Model loaded successfully.")

    def transcribe(self, audio_path: str, output_dir: str) -> str:
        print(f"[Faster-Whisper Backend] Starting transcription: {audio_path}")

        try:
            segments, info = self.model.transcribe(
                audio_path,
                language=self.language,
                beam_size=5,
                vad_filter=True,
                vad_parameters=dict(min_silence_duration_ms=500),
            )
            print(f"Detected language: {info.language} (probability: {info.language_probability:.2f})")

            results = []
            for segment in segments:
                print(f"[{segment.start:.1f}s -> {segment.end:.1f}s] {segment.text.strip()}")
                results.append({
                    "start": segment.start,
                    "end": segment.end,
                    "text": segment.text.strip()
                })
        except Exception as e:
            raise TranscriptionError(f"Faster-Whisper failed on {audio_path}: {e}") from e

        stem = output_stem(audio_path)
        write_segments(output_dir, stem, results)

        print(f"[Faster-Whisper Backend] Transcription completed. Total segments: {len(results)}")
        return stem


class MlxWhisperBackend(BaseTranscriber):
    """
    GPU-optimized transcription backend using MLX-Whisper.
    Only works on Apple Silicon (Mac M1/M2/M3/M4).
    """

    def __init__(self, model_size: str = "base.en", language: str = ""):
        # Check if running on macOS
        if sys.platform != "darwin":
            raise ConfigError(
                "MLX backend is only supported on macOS with Apple Silicon. "
                f"Current platform: {sys.platform}. "
                "Set TRANSCRIPTION_BACKEND=cli or faster_whisper instead."
            )

        # Lazy import to avoid import errors on non-macOS systems
        try:
            import mlx_whisper
            self.mlx_whisper = mlx_whisper
        except ImportError as e:
            raise ConfigError(
                "mlx-whisper is not installed. Install it with: pip install mlx-whisper"
            ) from e

        # MLX community model naming: mlx-community/whisper-{size}-mlx
        self.model_path = f"mlx-community/whisper-{model_size}-mlx"
        self.language = language or None

        print(f"[MLX Backend] Initialized with model: {self.model_path} (GPU Mode)")

    def transcribe(self, audio_path: str, output_dir: str) -> str:
        print(f"[MLX Backend] Starting transcription: {audio_path}")

        try:
            result = self.mlx_whisper.transcribe(
                audio_path,
                path_or_hf_repo=self.model_path,
                language=self.language,
            )
        except Exception as e:
            raise TranscriptionError(f"MLX-Whisper failed on {audio_path}: {e}") from e

        # MLX output format: {"segments": [...], "text": "..."}
        results = []
        for segment in result.get("segments", []):
            start = segment.get("start", 0.0)
            end = segment.get("end", 0.0)
            text = segment.get("text", "").strip()

            print(f"[{start:.1f}s -> {end:.1f}s] {text}")
            results.append({"start": start, "end": end, "text": text})

        stem = output_stem(audio_path)
        write_segments(output_dir, stem, results)

        print(f"[MLX Backend] Transcription completed. Total segments: {len(results)}")
        return stem


def get_transcriber(config: Config, runner: Optional[CommandRunner] = None) -> BaseTranscriber:
    """
    Factory function to create the configured transcriber backend.

    Args:
        config: Run configuration (backend, model, language, device)
        runner: Command runner for the CLI backend (default: a new CommandRunner)

    Returns:
        BaseTranscriber: Configured transcriber instance

    Raises:
        ConfigError: If the backend is unknown or unavailable on this platform
    """
    if config.backend == "cli":
        print(f"Using Whisper CLI backend: {config.whisper_command} (model={config.model})")
        return WhisperCliBackend(
            runner or CommandRunner(),
            command=config.whisper_command,
            model=config.model,
            language=config.language,
            device=config.device,
            output_format=config.output_format,
        )

    elif config.backend == "faster_whisper":
        print("Initializing Faster-Whisper Backend")
        return FasterWhisperBackend(model_size=config.model, device=config.device, language=config.language)

    elif config.backend == "mlx":
        print("Initializing MLX Backend (GPU Mode)")
        return MlxWhisperBackend(model_size=config.model, language=config.language)

    raise ConfigError(f"Unknown transcription backend: '{config.backend}'")
