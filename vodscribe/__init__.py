"""
vodscribe

Batch downloader and transcriber for live stream VODs.
Downloads audio with yt-dlp, transcribes it with Whisper and packs
the transcripts of every video into a single zip archive.
"""

__version__ = "1.0.0"
