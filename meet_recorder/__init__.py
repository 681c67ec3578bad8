"""
Meet Recorder Package.
Joins a meeting as a silent bot, records its audio for a fixed window and
delivers the recording to a collector webhook.
"""

__version__ = "1.0.0"
__author__ = "Meeting Bot Team"
