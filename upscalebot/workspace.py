"""
Staging directories shared by every job.
"""
from pathlib import Path
from typing import List
import logging
import shutil

from natsort import natsorted

logger = logging.getLogger(__name__)


class Workspace:
    """
    Owns the input (LR) and output (results) staging directories.

    Only one job uses them at a time; the queue clears them between jobs
    so no file from one job is ever seen by the next.
    """

    def __init__(self, input_dir: Path, output_dir: Path):
        self.input_dir = Path(input_dir)
        self.output_dir = Path(output_dir)

    @classmethod
    def from_config(cls, config) -> "Workspace":
        return cls(config.input_dir, config.output_dir)

    def clear(self) -> None:
        """Empty both directories, creating them if missing."""
        for folder in (self.output_dir, self.input_dir):
            self._empty_dir(folder)
        logger.debug(f"Workspace cleared: {self.input_dir}, {self.output_dir}")

    def input_path(self, name: str) -> Path:
        return self._contained(self.input_dir, name)

    def output_path(self, name: str) -> Path:
        return self._contained(self.output_dir, name)

    @staticmethod
    def _contained(folder: Path, name: str) -> Path:
        """folder / name, refusing names that resolve outside folder."""
        path = folder / name
        if path.resolve().parent != folder.resolve():
            raise ValueError(f"File name escapes workspace folder {folder}: {name}")
        return path

    def input_files(self) -> List[Path]:
        return self._list_files(self.input_dir)

    def output_files(self) -> List[Path]:
        return self._list_files(self.output_dir)

    @staticmethod
    def _list_files(folder: Path) -> List[Path]:
        if not folder.exists():
            return []
        return natsorted(f for f in folder.iterdir() if f.is_file())

    @staticmethod
    def _empty_dir(folder: Path) -> None:
        folder.mkdir(parents=True, exist_ok=True)
        for entry in folder.iterdir():
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink(missing_ok=True)
