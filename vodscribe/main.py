"""
main.py

Entry point for vodscribe.
Batch processor: downloads the audio of every video given on the command line,
transcribes it, and packs all transcriptions into a single zip archive.
Videos are processed one after another; the first failure stops the whole run.
"""

import argparse
import sys
from typing import Callable, List, Optional, Sequence

from dotenv import find_dotenv, load_dotenv

from vodscribe.core.archiver import create_archive
from vodscribe.core.commands import CommandRunner
from vodscribe.core.config import BACKENDS, Config, Device
from vodscribe.core.errors import UsageError, VodscribeError
from vodscribe.core.processor import VideoProcessor
from vodscribe.core.requirements import check_requirements
from vodscribe.core.transcriber import get_transcriber
from vodscribe.core.utils import banner
from vodscribe.core.workdir import cleanup, make_temp_dir

HELP_WORDS = ("help", "-h", "-help", "--help")

DESCRIPTION = """\
Download the audio of one or more videos with yt-dlp, transcribe each one
with Whisper, and pack the transcriptions into a single zip archive.
Each video gets a folder in the archive named after its title and id, e.g.
https://youtu.be/VYJtb2YXae8 -> Why_we_all_need_subtitles_now-VYJtb2YXae8/
"""

EPILOG = """\
environment variables (a .env file is loaded too):
  AUDIO_CHUNK_LENGTH     chunk length in seconds (default: 3600)
  CHUNK_AUDIO            split audio into chunks before transcribing (default: false)
  WHISPER_LANG           transcription language (default: ru)
  WHISPER_MODEL          Whisper model (default: base.en)
  WHISPER_DEVICE         auto, cpu or gpu (default: auto)
  TRANSCRIPTION_BACKEND  cli, faster_whisper or mlx (default: cli)
  WHISPER_COMMAND        whisper executable for the cli backend (default: whisper)
  WHISPER_OUTPUT_FORMAT  output format for the cli backend (default: all)
  OUTPUT_DIR             where temp folders and the archive go (default: .)
  ARCHIVE_NAME           archive file name (default: transcriptions.zip)
  KEEP_WORK_DIRS         keep per-video temp folders (default: false)
  KEEP_COLLECTION_DIR    keep the collected transcriptions folder (default: false)

requirements: ffmpeg, whisper (for the cli backend)
"""

ProcessVideo = Callable[[str, str, int, int], str]
Archive = Callable[[str, str], str]


class ArgumentParser(argparse.ArgumentParser):
    """Raises UsageError on bad arguments instead of exiting with status 2."""

    def error(self, message):
        raise UsageError(message)


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="vodscribe",
        usage="%(prog)s [options] <video_url> [<video_url> ...]",
        description=DESCRIPTION,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )
    parser.add_argument("sources", nargs="*", metavar="video_url", help="Video URL to transcribe")
    parser.add_argument("--model", help="Whisper model name")
    parser.add_argument("--language", help="Transcription language code")
    parser.add_argument("--device", choices=[device.value for device in Device], help="Compute device")
    parser.add_argument("--backend", choices=BACKENDS, help="Transcription backend")
    parser.add_argument("--chunk", dest="chunk_audio", action="store_true", default=None,
                        help="Split audio into chunks before transcribing")
    parser.add_argument("--chunk-length", type=int, help="Chunk length in seconds")
    parser.add_argument("--output-dir", help="Directory for temp folders and the archive")
    parser.add_argument("--archive-name", help="Archive file name")
    parser.add_argument("--keep-work-dirs", action="store_true", default=None,
                        help="Keep per-video temp folders")
    parser.add_argument("--keep-collection-dir", action="store_true", default=None,
                        help="Keep the collected transcriptions folder after archiving")
    parser.add_argument("-h", "--help", action="store_true", help="Show this help message and exit")
    return parser


def is_help_flag(arg: str) -> bool:
    return arg in HELP_WORDS


def run_batch(sources: Sequence[str], config: Config, process_video: ProcessVideo,
              archive: Archive = create_archive) -> str:
    """
    Process every source in order, then archive the collected transcriptions.

    Args:
        sources: Video URLs, processed strictly in the given order
        config: Run configuration
        process_video: Callable (source_url, collection_dir, index, total) -> output dir
        archive: Callable (collection_dir, archive_path) -> archive path

    Returns:
        str: Path of the written archive

    Raises:
        VodscribeError, OSError: On the first failing video; later videos are not
            processed and no archive is written
    """
    collection_dir = make_temp_dir(config.output_dir)
    total = len(sources)

    try:
        for index, source_url in enumerate(sources, start=1):
            process_video(source_url, collection_dir, index, total)
        archive_path = archive(collection_dir, config.archive_path)
    except (VodscribeError, OSError):
        print(f"⚠ Partial results left in: {collection_dir}", file=sys.stderr)
        raise

    if config.keep_collection_dir:
        print(f"Keeping collection directory: {collection_dir}")
    else:
        cleanup(collection_dir)

    return archive_path


def main(argv: Optional[List[str]] = None, runner: Optional[CommandRunner] = None) -> int:
    """
    Command line entry point.

    Returns:
        int: Exit status (0 on success, 1 on any failure or missing arguments)
    """
    argv = sys.argv[1:] if argv is None else list(argv)
    parser = build_parser()

    if not argv:
        parser.print_help(file=sys.stderr)
        return 1

    if is_help_flag(argv[0]):
        parser.print_help()
        return 0

    try:
        args = parser.parse_args(argv)
    except UsageError as e:
        parser.print_usage(file=sys.stderr)
        print(f"✗ {e}", file=sys.stderr)
        return 1

    if args.help:
        parser.print_help()
        return 0

    if not args.sources:
        parser.print_help(file=sys.stderr)
        return 1

    # Load environment variables from the .env file in the current directory (or a parent)
    load_dotenv(find_dotenv(usecwd=True))

    try:
        config = Config.from_env().with_overrides(
            model=args.model,
            language=args.language,
            device=args.device,
            backend=args.backend,
            chunk_audio=args.chunk_audio,
            chunk_length=args.chunk_length,
            output_dir=args.output_dir,
            archive_name=args.archive_name,
            keep_work_dirs=args.keep_work_dirs,
            keep_collection_dir=args.keep_collection_dir,
        )
        check_requirements(config)
    except VodscribeError as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1

    banner("VODSCRIBE - Batch VOD Transcriber\nYouTube -> Audio -> Whisper -> ZIP")
    print(f"Backend: {config.backend} | Model: {config.model} | "
          f"Language: {config.language or 'auto'} | Device: {config.device.value}")
    if config.chunk_audio:
        print(f"Chunking: {config.chunk_length}s per chunk")
    print(f"Videos: {len(args.sources)}")
    print("=" * 80)

    runner = runner or CommandRunner()

    # Initialize transcriber once (reuse for all videos)
    try:
        transcriber = get_transcriber(config, runner)
    except Exception as e:
        print(f"✗ Failed to initialize transcriber: {e}", file=sys.stderr)
        return 1

    try:
        processor = VideoProcessor(config, transcriber, runner)
        archive_path = run_batch(args.sources, config, processor.process)
    except (VodscribeError, OSError) as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1

    banner("✓ All videos processed!")
    print(f"The merged transcriptions can be found in {archive_path}")
    print("=" * 80)
    return 0


if __name__ == "__main__":
    sys.exit(main())
