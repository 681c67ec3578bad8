"""
Recording Module

Supervises the FFmpeg audio-capture subprocess for a meeting job.
"""

from .audio_capture import AudioCaptureSupervisor

__all__ = ["AudioCaptureSupervisor"]
