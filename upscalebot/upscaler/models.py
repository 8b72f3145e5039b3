"""
Registry of ESRGAN model files.
"""
import difflib
from pathlib import Path
from typing import List, Optional
from urllib.parse import urlparse
import logging

from natsort import natsorted

from ..core.extensions import with_model_extension
from ..core.interfaces import ISourceFetcher

logger = logging.getLogger(__name__)

DRIVE_HOST = "drive.google.com"
DRIVE_DOWNLOAD_URL = "https://docs.google.com/uc?export=download&id={file_id}"


def direct_download_url(url: str) -> str:
    """Turn a Google Drive share link into a direct download link."""
    parsed = urlparse(url)
    if parsed.netloc != DRIVE_HOST:
        return url

    path = parsed.path.rstrip("/")
    if path.endswith("/view"):
        path = path[: -len("/view")]
    file_id = path.split("/")[-1]
    return DRIVE_DOWNLOAD_URL.format(file_id=file_id)


class ModelRegistry:
    """
    Fuzzy lookup over the model directory.

    Names are cached at construction and only change through ``add``; the
    directory itself stays the ground truth for whether a model exists.
    """

    def __init__(
        self,
        models_dir: Path,
        fetcher: Optional[ISourceFetcher] = None,
        cutoff: float = 0.6
    ):
        self.models_dir = Path(models_dir)
        self.fetcher = fetcher
        self.cutoff = cutoff
        self._names = self._scan()

    def _scan(self) -> List[str]:
        if not self.models_dir.exists():
            logger.warning(f"Model directory not found: {self.models_dir}")
            return []
        return natsorted(f.name for f in self.models_dir.iterdir() if f.is_file())

    def names(self) -> List[str]:
        """All known model file names."""
        return list(self._names)

    def refresh(self) -> None:
        self._names = self._scan()

    def resolve(self, name: str) -> Optional[str]:
        """
        Best matching model file for a user-typed name.

        Returns None when nothing is close enough or the matched file is
        no longer on disk.
        """
        if not name:
            return None

        candidate = with_model_extension(name)
        match = self._match(candidate)
        if match is None:
            return None

        if not (self.models_dir / match).is_file():
            logger.warning(f"Model {match} is registered but missing on disk")
            return None
        return match

    def _match(self, candidate: str) -> Optional[str]:
        if candidate in self._names:
            return candidate

        by_lower = {n.lower(): n for n in self._names}
        if candidate.lower() in by_lower:
            return by_lower[candidate.lower()]

        matches = difflib.get_close_matches(
            candidate.lower(), list(by_lower), n=1, cutoff=self.cutoff
        )
        return by_lower[matches[0]] if matches else None

    async def add(self, url: str, nickname: str) -> str:
        """
        Download a model from url and register it under nickname.

        Returns:
            The stored model file name
        """
        if self.fetcher is None:
            raise RuntimeError("ModelRegistry has no fetcher to download models")

        name = with_model_extension(nickname)
        if Path(name).name != name or name.startswith("."):
            raise ValueError(f"Invalid model name: {nickname}")

        self.models_dir.mkdir(parents=True, exist_ok=True)
        await self.fetcher.fetch(direct_download_url(url), self.models_dir / name)

        if name not in self._names:
            self._names = natsorted(self._names + [name])
        logger.info(f"Added model {name}")
        return name
