"""
chunker.py

Splits long audio into fixed-length WAV segments with ffmpeg to bound memory
use during transcription, and merges the per-chunk text transcripts back together.
"""

import glob
import os
from typing import List

from .commands import CommandRunner


def chunk_pattern(work_dir: str, title_name: str) -> str:
    return os.path.join(work_dir, f"{title_name}.vod-resampled.%03d.wav")


def split_audio(
    runner: CommandRunner,
    audio_path: str,
    work_dir: str,
    title_name: str,
    chunk_length: int,
) -> List[str]:
    """
    Resample audio to 16 kHz mono PCM and split it into chunks.

    Args:
        runner: Command runner used to invoke ffmpeg
        audio_path: Source audio file
        work_dir: Directory to write the chunks to
        title_name: Title name used to name the chunks
        chunk_length: Chunk length in seconds

    Returns:
        List[str]: Chunk paths in playback order

    Raises:
        CommandError: If ffmpeg fails
    """
    print("Extracting audio and resampling...")
    runner.check([
        "ffmpeg",
        "-i", audio_path,
        "-hide_banner",
        "-vn",
        "-loglevel", "error",
        "-ar", "16000",
        "-ac", "1",
        "-c:a", "pcm_s16le",
        "-y",
        "-f", "segment",
        "-segment_time", str(chunk_length),
        chunk_pattern(work_dir, title_name),
    ])

    pattern = os.path.join(glob.escape(work_dir), f"{glob.escape(title_name)}.vod-resampled.*.wav")
    chunks = sorted(glob.glob(pattern))
    print(f"✓ Audio split into {len(chunks)} chunk(s)")
    return chunks


def merge_transcripts(output_dir: str, chunk_stems: List[str], title_name: str) -> str:
    """
    Concatenate the text transcripts of all chunks into merged.<title>.txt.

    Chunks without a .txt transcript (e.g. a non-txt output format) are skipped.

    Returns:
        str: Path of the merged transcript
    """
    merged_path = os.path.join(output_dir, f"merged.{title_name}.txt")

    with open(merged_path, 'a', encoding='utf-8') as merged:
        for stem in chunk_stems:
            chunk_txt = os.path.join(output_dir, f"{stem}.txt")
            if not os.path.exists(chunk_txt):
                print(f"⚠ No text transcript for chunk: {stem}")
                continue
            with open(chunk_txt, 'r', encoding='utf-8') as f:
                merged.write(f.read())

    return merged_path
