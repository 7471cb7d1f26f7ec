"""
Subtitle Translation and Burn-in Service - Core Library

This package contains the core business logic: the subtitle codecs
(VTT, SRT, ASS), the ffmpeg render engine, the ASR/translation providers
and the two-stage job processor.
"""

__version__ = "1.0.0"
