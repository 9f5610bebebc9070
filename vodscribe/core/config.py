"""
config.py

Run configuration.
Built once at startup from environment variables (a .env file is loaded by the CLI)
and optional command-line overrides, then passed to every component.
"""

import os
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from .errors import ConfigError


class Device(str, Enum):
    """Compute device for transcription."""

    AUTO = "auto"
    CPU = "cpu"
    GPU = "gpu"


BACKENDS = ("cli", "faster_whisper", "mlx")

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")


@dataclass(frozen=True)
class Config:
    # Length of each audio chunk in seconds (used when chunk_audio is enabled)
    chunk_length: int = 3600
    chunk_audio: bool = False
    # Transcription language, empty string lets Whisper detect it
    language: str = "ru"
    model: str = "base.en"
    device: Device = Device.AUTO
    backend: str = "cli"
    whisper_command: str = "whisper"
    output_format: str = "all"
    # Working directories, the collection directory and the archive are created here
    output_dir: str = "."
    archive_name: str = "transcriptions.zip"
    keep_work_dirs: bool = False
    keep_collection_dir: bool = False

    @property
    def archive_path(self) -> str:
        return os.path.join(self.output_dir, self.archive_name)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Config":
        """
        Build a configuration from environment variables.

        Args:
            environ: Mapping to read from (default: os.environ)

        Returns:
            Config: validated configuration

        Raises:
            ConfigError: If a value cannot be parsed
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        return cls(
            chunk_length=parse_chunk_length(env.get("AUDIO_CHUNK_LENGTH", defaults.chunk_length)),
            chunk_audio=parse_bool("CHUNK_AUDIO", env.get("CHUNK_AUDIO"), defaults.chunk_audio),
            language=env.get("WHISPER_LANG", defaults.language).strip(),
            model=env.get("WHISPER_MODEL", defaults.model).strip(),
            device=parse_device(env.get("WHISPER_DEVICE", defaults.device.value)),
            backend=parse_backend(env.get("TRANSCRIPTION_BACKEND", defaults.backend)),
            whisper_command=env.get("WHISPER_COMMAND", defaults.whisper_command).strip(),
            output_format=env.get("WHISPER_OUTPUT_FORMAT", defaults.output_format).strip(),
            output_dir=env.get("OUTPUT_DIR", defaults.output_dir).strip() or defaults.output_dir,
            archive_name=env.get("ARCHIVE_NAME", defaults.archive_name).strip() or defaults.archive_name,
            keep_work_dirs=parse_bool("KEEP_WORK_DIRS", env.get("KEEP_WORK_DIRS"), defaults.keep_work_dirs),
            keep_collection_dir=parse_bool(
                "KEEP_COLLECTION_DIR", env.get("KEEP_COLLECTION_DIR"), defaults.keep_collection_dir
            ),
        )

    def with_overrides(self, **overrides: Any) -> "Config":
        """
        Return a copy with the given fields replaced. None values are ignored,
        so unset command-line flags keep the environment value.
        """
        changes: Dict[str, Any] = {key: value for key, value in overrides.items() if value is not None}

        if "chunk_length" in changes:
            changes["chunk_length"] = parse_chunk_length(changes["chunk_length"])
        if "device" in changes:
            changes["device"] = parse_device(changes["device"])
        if "backend" in changes:
            changes["backend"] = parse_backend(changes["backend"])

        return replace(self, **changes)


def parse_chunk_length(value: Any) -> int:
    try:
        seconds = int(str(value).strip())
    except ValueError:
        raise ConfigError(f"AUDIO_CHUNK_LENGTH must be a positive integer, got: '{value}'") from None

    if seconds <= 0:
        raise ConfigError(f"AUDIO_CHUNK_LENGTH must be a positive integer, got: {seconds}")
    return seconds


def parse_device(value: Any) -> Device:
    if isinstance(value, Device):
        return value
    try:
        return Device(str(value).lower().strip())
    except ValueError:
        supported = ", ".join(device.value for device in Device)
        raise ConfigError(f"Unknown WHISPER_DEVICE: '{value}'. Supported devices: {supported}") from None


def parse_backend(value: str) -> str:
    backend = value.lower().strip()
    if backend not in BACKENDS:
        raise ConfigError(
            f"Unknown transcription backend: '{value}'. "
            f"Supported backends: {', '.join(BACKENDS)}"
        )
    return backend


def parse_bool(name: str, value: Optional[str], default: bool) -> bool:
    if value is None:
        return default

    normalized = value.lower().strip()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean (true/false), got: '{value}'")
