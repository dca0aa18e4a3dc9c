"""
Core package for the transcription pipeline.

This package contains the components used by the HTTP entrypoint to
download audio from YouTube and Twitter/X, choose the right audio track,
split long recordings, transcribe them with Gemini and clean up afterwards.
"""
