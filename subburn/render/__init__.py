"""
Subtitle burn-in: ffmpeg capability probing, burn strategies and the render engine.
"""

from subburn.render.capabilities import FilterCapabilities
from subburn.render.engine import RenderEngine
from subburn.render.strategies import AssStrategy, BurnRequest, BurnStrategy, DrawtextStrategy

__all__ = [
    "FilterCapabilities",
    "RenderEngine",
    "BurnRequest",
    "BurnStrategy",
    "DrawtextStrategy",
    "AssStrategy",
]
