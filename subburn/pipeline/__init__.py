"""
Two-stage subtitle pipeline.
"""

from subburn.pipeline.processor import PROCESS_VIDEO, RENDER_VIDEO, JobProcessor

__all__ = ["JobProcessor", "PROCESS_VIDEO", "RENDER_VIDEO"]
