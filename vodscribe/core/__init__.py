"""
vodscribe.core

Core modules for the batch pipeline:
- config: run configuration from environment variables and CLI flags
- errors: exception hierarchy, every error aborts the run
- commands: external command runner with structured results
- requirements: check that required executables are installed
- workdir: scoped temporary working directories
- downloader: audio download using yt-dlp
- chunker: optional ffmpeg splitting and transcript merging
- transcriber: speech-to-text backends (Whisper CLI, Faster-Whisper, MLX-Whisper)
- processor: per-video download -> transcription -> relocation
- archiver: zip the collected transcriptions
"""
