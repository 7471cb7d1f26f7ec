"""
External Program Runner

Thin wrapper over ``subprocess.run`` used for ffmpeg and ffprobe.
"""

import logging
import subprocess
from dataclasses import dataclass
from typing import Sequence

from subburn.errors import CommandError

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Captured output of a finished command"""
    stdout: str
    stderr: str


def run_command(args: Sequence[str]) -> CommandResult:
    """
    Run a command to completion, capturing its output.

    Args:
        args: Program followed by its arguments

    Returns:
        CommandResult with decoded stdout/stderr

    Raises:
        CommandError: If the program cannot be started or exits non-zero.
            The message carries the program's stderr.
    """
    command = args[0]
    logger.debug(f"Running: {' '.join(args)}")

    try:
        completed = subprocess.run(
            list(args),
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
    except OSError as e:
        raise CommandError(f"Failed to start {command}: {e}") from e

    if completed.returncode != 0:
        raise CommandError(
            f"{command} exited with {completed.returncode}: {completed.stderr}",
            returncode=completed.returncode,
            stderr=completed.stderr,
        )

    return CommandResult(stdout=completed.stdout, stderr=completed.stderr)
