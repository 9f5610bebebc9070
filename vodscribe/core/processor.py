"""
processor.py

Processes a single video: download audio, transcribe it, and move the
transcriptions into the run's collection directory.
"""

import os
import shutil
import time
from typing import Callable, Optional, Tuple

from .chunker import merge_transcripts, split_audio
from .commands import CommandRunner
from .config import Config
from .downloader import download_audio
from .transcriber import BaseTranscriber
from .utils import banner, format_duration
from .workdir import unique_child, working_directory

TRANSCRIPTIONS_DIR = "transcriptions"

Downloader = Callable[[str, str], Tuple[str, str]]


class VideoProcessor:
    """
    Drives download -> transcription -> relocation for one source at a time.
    """

    def __init__(self, config: Config, transcriber: BaseTranscriber,
                 runner: Optional[CommandRunner] = None, downloader: Optional[Downloader] = None):
        """
        Args:
            config: Run configuration
            transcriber: Transcription backend, reused for every video
            runner: Command runner for ffmpeg (default: a new CommandRunner)
            downloader: Callable (source_url, output_dir) -> (audio_path, title_name)
        """
        self.config = config
        self.transcriber = transcriber
        self.runner = runner or CommandRunner()
        self.downloader = downloader or download_audio

    def process(self, source_url: str, collection_dir: str, index: int = 1, total: int = 1) -> str:
        """
        Process a single video.

        Args:
            source_url: Video URL
            collection_dir: Final collection directory of the run
            index: Position of this video in the batch (1-based)
            total: Number of videos in the batch

        Returns:
            str: Directory under collection_dir holding this video's transcriptions

        Raises:
            VodscribeError: If any step fails; the working directory is still removed
        """
        banner(f"=== Processing video [{index} / {total}]: {source_url} ===")

        with working_directory(self.config.output_dir, keep=self.config.keep_work_dirs) as temp_dir:
            # Step 1: Download audio
            print()
            print(f"[{index}/{total}] STEP 1: Downloading audio...")
            audio_path, title_name = self.downloader(source_url, temp_dir)
            print(f"✓ Download complete: {title_name}")

            # Step 2: Transcribe
            print()
            print(f"[{index}/{total}] STEP 2: Transcribing audio...")
            output_dir = os.path.join(temp_dir, TRANSCRIPTIONS_DIR)
            os.makedirs(output_dir, exist_ok=True)

            transcription_start = time.time()
            if self.config.chunk_audio:
                self._transcribe_chunks(audio_path, temp_dir, output_dir, title_name)
            else:
                self.transcriber.transcribe(audio_path, output_dir)
            duration_str = format_duration(time.time() - transcription_start)
            print(f"✓ Transcription complete in {duration_str}")

            # Step 3: Move results into the collection directory
            print()
            print(f"[{index}/{total}] STEP 3: Collecting transcriptions...")
            destination = unique_child(collection_dir, title_name)
            shutil.move(output_dir, destination)
            print(f"✓ Transcriptions saved to: {destination}")

        banner(f"✓ Finished processing video [{index} / {total}]: {source_url}")
        return destination

    def _transcribe_chunks(self, audio_path: str, temp_dir: str, output_dir: str, title_name: str) -> None:
        chunks = split_audio(self.runner, audio_path, temp_dir, title_name, self.config.chunk_length)

        stems = []
        for chunk_number, chunk_path in enumerate(chunks, start=1):
            print(f"Transcribing chunk {chunk_number}/{len(chunks)}: {chunk_path}...")
            stems.append(self.transcriber.transcribe(chunk_path, output_dir))

        merged_path = merge_transcripts(output_dir, stems, title_name)
        print(f"✓ Merged transcript: {merged_path}")
