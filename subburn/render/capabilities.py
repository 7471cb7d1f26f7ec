"""
FFmpeg Filter Capability Probe

Answers "does this ffmpeg build have filter X?" once per filter name and
remembers the answer for the life of the process, including negative
answers caused by the probe itself failing.
"""

import logging
import threading
from typing import Callable, Dict, Sequence

from subburn.errors import CommandError
from subburn.utils.process import CommandResult, run_command

logger = logging.getLogger(__name__)


def filter_listed(filters_output: str, filter_name: str) -> bool:
    """
    Check ``ffmpeg -filters`` output for a filter name.

    Each filter row is ``<flags> <name> <in->out> <description>``.
    """
    for line in filters_output.splitlines():
        columns = line.split()
        if len(columns) >= 2 and columns[1] == filter_name:
            return True
    return False


class FilterCapabilities:
    """
    Lazy, thread-safe, first-query-wins cache of ffmpeg filter support.

    Worker threads share one instance; the lock serialises probing so a
    filter is probed at most once.
    """

    def __init__(
        self,
        ffmpeg_path: str = "ffmpeg",
        runner: Callable[[Sequence[str]], CommandResult] = run_command,
    ):
        self.ffmpeg_path = ffmpeg_path
        self._runner = runner
        self._cache: Dict[str, bool] = {}
        self._lock = threading.Lock()

    def supports(self, filter_name: str) -> bool:
        """
        Whether the ffmpeg build provides ``filter_name``.

        Args:
            filter_name: e.g. "drawtext", "ass"

        Returns:
            True if listed by ``ffmpeg -filters``; False if not listed or
            if the probe failed
        """
        with self._lock:
            cached = self._cache.get(filter_name)
            if cached is not None:
                return cached

            try:
                result = self._runner([self.ffmpeg_path, "-hide_banner", "-filters"])
                supported = filter_listed(f"{result.stdout}\n{result.stderr}", filter_name)
            except CommandError as e:
                logger.warning(f"ffmpeg filter probe failed for '{filter_name}': {e.message}")
                supported = False

            self._cache[filter_name] = supported
            logger.info(
                f"ffmpeg filter '{filter_name}' supported: {supported}",
                extra={"metadata": {"filter": filter_name, "supported": supported}},
            )
            return supported

    def cached(self) -> Dict[str, bool]:
        """Snapshot of the probe results so far"""
        with self._lock:
            return dict(self._cache)
