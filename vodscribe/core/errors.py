"""
errors.py

Exception hierarchy for the batch pipeline.
Every error is fatal to the whole run; the CLI reports it and exits with status 1.
"""


class VodscribeError(Exception):
    """Base class for all pipeline errors."""


class ConfigError(VodscribeError):
    """Invalid configuration value (environment variable or CLI flag)."""


class MissingRequirementError(VodscribeError):
    """A required external executable is not installed."""

    def __init__(self, tool: str, url: str):
        self.tool = tool
        self.url = url
        super().__init__(f"{tool} is required: {url}")


class CommandError(VodscribeError):
    """An external command exited with a non-zero status."""

    def __init__(self, result):
        self.result = result
        message = f"Command failed with exit code {result.returncode}: {' '.join(result.args)}"
        # Streamed commands merge stderr into stdout, report the tail of it
        details = result.stderr.strip() or "\n".join(result.stdout.strip().splitlines()[-20:])
        if details:
            message += f"\n{details}"
        super().__init__(message)


class DownloadError(VodscribeError):
    """The downloader could not fetch the audio for a source."""


class TranscriptionError(VodscribeError):
    """An in-process transcription backend failed."""


class DirectoryError(VodscribeError):
    """A directory operation was attempted on something that is not a directory."""


class UsageError(VodscribeError):
    """Invalid command line arguments."""
