"""
downloader.py

Wrapper for yt-dlp to download the audio track of a video.
"""

import os
from typing import Any, Dict, Tuple

import yt_dlp

from .errors import DownloadError

AUDIO_SUFFIX = ".vod.m4a"
# yt-dlp writes the final file path here so the sanitized name is known exactly
FILENAME_RECORD = "yt-dlp-filename"


def title_name_from_filename(filename: str) -> str:
    """
    Derive the title name of a download by stripping the audio suffix.

    Args:
        filename: Path or basename of the downloaded file

    Returns:
        str: Basename without ".vod.m4a" (e.g. "My_Title-abc123")
    """
    name = os.path.basename(filename.strip())
    if name.endswith(AUDIO_SUFFIX):
        name = name[: -len(AUDIO_SUFFIX)]
    return name


def build_options(output_dir: str, record_path: str) -> Dict[str, Any]:
    """
    yt-dlp options for an audio-only download named "<title>-<id>.vod.m4a".
    """
    # player_client: try android/mweb to reduce HTTP 403 (YouTube often blocks default client)
    return {
        'format': 'm4a',
        'outtmpl': os.path.join(output_dir, f'%(title)s-%(id)s{AUDIO_SUFFIX}'),
        'print_to_file': {'after_move': [('%(filepath)s', record_path)]},
        'simulate': False,
        'noplaylist': True,
        'writeautomaticsub': False,
        'restrictfilenames': True,
        'writethumbnail': True,
        'postprocessors': [
            {'key': 'FFmpegMetadata', 'add_chapters': True, 'add_metadata': False},
            {'key': 'EmbedThumbnail', 'already_have_thumbnail': False},
            {'key': 'XAttrMetadata'},
        ],
        'quiet': True,
        'no_warnings': True,
        'extractor_args': {
            'youtube': {'player_client': ['android', 'mweb']},
        },
    }


def download_audio(source_url: str, output_dir: str) -> Tuple[str, str]:
    """
    Download the audio of a video into output_dir.

    Args:
        source_url: Video URL or identifier understood by yt-dlp
        output_dir: Directory to save the audio file in (must exist)

    Returns:
        Tuple[str, str]: (audio file path, title name)

    Raises:
        DownloadError: If yt-dlp fails or the downloaded file cannot be located
    """
    record_path = os.path.join(output_dir, FILENAME_RECORD)

    print(f"Downloading {source_url} VOD ...")
    try:
        with yt_dlp.YoutubeDL(build_options(output_dir, record_path)) as ydl:
            ydl.download([source_url])
    except yt_dlp.utils.YoutubeDLError as e:
        raise DownloadError(f"Download failed for {source_url}: {e}") from e

    if not os.path.exists(record_path):
        raise DownloadError(f"yt-dlp did not report a filename for {source_url}")

    with open(record_path, 'r', encoding='utf-8') as f:
        lines = [line.strip() for line in f if line.strip()]

    if not lines:
        raise DownloadError(f"yt-dlp did not report a filename for {source_url}")

    # Resolve relative to the working directory, yt-dlp may print a bare filename
    audio_path = os.path.join(output_dir, os.path.basename(lines[-1]))
    if not os.path.exists(audio_path):
        raise DownloadError(f"Downloaded file not found: {audio_path}")

    title_name = title_name_from_filename(audio_path)
    print(f"✓ Audio downloaded successfully: {audio_path}")

    return audio_path, title_name
