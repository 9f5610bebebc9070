"""
requirements.py

Checks that the external executables needed for a run are installed
before any video is processed.
"""

import shutil
from typing import Callable, List, Optional, Tuple

from .config import Config
from .errors import MissingRequirementError

FFMPEG = ("ffmpeg", "https://ffmpeg.org")
WHISPER_URL = "https://github.com/openai/whisper"


def required_tools(config: Config) -> List[Tuple[str, str]]:
    """
    List the executables the configured run depends on.

    Args:
        config: Run configuration

    Returns:
        List[Tuple[str, str]]: (executable name, reference link) pairs
    """
    # yt-dlp needs ffmpeg for thumbnail/chapter embedding, the chunker calls it directly
    tools = [FFMPEG]

    if config.backend == "cli":
        tools.append((config.whisper_command, WHISPER_URL))

    return tools


def check_requirements(config: Config, which: Optional[Callable[[str], Optional[str]]] = None) -> None:
    """
    Verify every required executable is available on PATH.

    Args:
        config: Run configuration
        which: Executable lookup (default: shutil.which)

    Raises:
        MissingRequirementError: For the first tool that cannot be found
    """
    which = which or shutil.which
    for tool, url in required_tools(config):
        if which(tool) is None:
            raise MissingRequirementError(tool, url)
