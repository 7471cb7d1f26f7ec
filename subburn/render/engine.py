"""
Render Engine

Burns subtitles into a new video file with ffmpeg, choosing the first
burn strategy whose filter the local ffmpeg build supports.
"""

import logging
import time
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from subburn.errors import RenderConfigurationError
from subburn.render.capabilities import FilterCapabilities
from subburn.render.strategies import AssStrategy, BurnRequest, BurnStrategy, DrawtextStrategy
from subburn.utils.process import CommandResult, run_command

logger = logging.getLogger(__name__)

MISSING_FILTERS_MESSAGE = (
    "Current FFmpeg lacks both 'ass' and 'drawtext' filters, so subtitles cannot be "
    "burned into video. Please use Docker backend or install FFmpeg with libass/libfreetype."
)


class RenderEngine:
    """
    Selects a burn strategy and runs ffmpeg.

    Strategies are tried in order: drawtext first, then the ASS script.
    Audio is always stream-copied.
    """

    def __init__(
        self,
        capabilities: FilterCapabilities,
        strategies: Optional[List[BurnStrategy]] = None,
        ffmpeg_path: str = "ffmpeg",
        runner: Callable[[Sequence[str]], CommandResult] = run_command,
    ):
        self.ffmpeg_path = ffmpeg_path
        self.capabilities = capabilities
        self.strategies = strategies if strategies is not None else [DrawtextStrategy(), AssStrategy()]
        self._runner = runner

    def select_strategy(self) -> BurnStrategy:
        """
        First strategy whose ffmpeg filter is available.

        Raises:
            RenderConfigurationError: If no strategy can run on this ffmpeg build
        """
        for strategy in self.strategies:
            if self.capabilities.supports(strategy.filter_name):
                return strategy
        raise RenderConfigurationError(MISSING_FILTERS_MESSAGE)

    def burn_subtitles(self, request: BurnRequest) -> Path:
        """
        Burn subtitles into ``request.output_video_path``.

        Args:
            request: Input video, generated ASS path, cues, style and metadata

        Returns:
            Path to the rendered video

        Raises:
            RenderConfigurationError: If neither filter is available
            CommandError: If ffmpeg fails
        """
        strategy = self.select_strategy()
        filter_graph = strategy.build_filter(request)

        output_path = Path(request.output_video_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        logger.info(
            f"Burning {len(request.cues)} cue(s) with {strategy.filter_name}",
            extra={
                "metadata": {
                    "strategy": strategy.filter_name,
                    "cues": len(request.cues),
                    "output": str(output_path),
                }
            },
        )

        start = time.time()
        self._runner([
            self.ffmpeg_path,
            "-y",
            "-i", str(request.input_video_path),
            "-vf", filter_graph,
            "-c:a", "copy",
            str(output_path),
        ])
        logger.info(f"Render finished in {time.time() - start:.1f}s: {output_path.name}")

        return output_path
