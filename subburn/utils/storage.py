"""
Storage Layout

All artifacts live under one storage root:

    uploads/    original videos ({id}.mp4)
    subtitles/  {id}.en.vtt, {id}.en.srt, {id}.zh.vtt, {id}.zh.srt
    output/     {id}.rendered.mp4
    temp/       transient files (uploads in flight, generated ASS scripts)
    data/       JSON records (videos, jobs)
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union

PathLike = Union[str, Path]


@dataclass(frozen=True)
class StoragePaths:
    root: Path

    @property
    def uploads(self) -> Path:
        return self.root / "uploads"

    @property
    def subtitles(self) -> Path:
        return self.root / "subtitles"

    @property
    def output(self) -> Path:
        return self.root / "output"

    @property
    def temp(self) -> Path:
        return self.root / "temp"

    @property
    def data(self) -> Path:
        return self.root / "data"

    def ensure(self) -> "StoragePaths":
        """Create every storage directory"""
        for directory in (self.root, self.uploads, self.subtitles, self.output, self.temp, self.data):
            directory.mkdir(parents=True, exist_ok=True)
        return self


def safe_join(base_dir: PathLike, filename: str) -> Path:
    """
    Join a filename onto a directory, refusing anything that escapes it.

    Only the final path component of ``filename`` is used.

    Raises:
        ValueError: If the result would be outside ``base_dir``
    """
    base = Path(base_dir)
    cleaned = os.path.basename(filename)
    if cleaned in ("", ".", ".."):
        raise ValueError("Invalid filename")

    output_path = base / cleaned
    relative = os.path.relpath(output_path, base)
    if relative.startswith("..") or os.path.isabs(relative):
        raise ValueError("Invalid filename")
    return output_path


def to_public_file_url(root: PathLike, absolute_path: PathLike) -> str:
    """Map a stored file to its ``/files/...`` URL path"""
    relative = Path(os.path.relpath(absolute_path, root))
    return "/files/" + relative.as_posix()
