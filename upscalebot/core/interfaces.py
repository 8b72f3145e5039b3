"""
Abstract interfaces following Interface Segregation Principle (SOLID).
Defines contracts and data types for all upscalebot components.
"""
import math
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, List, Optional
from dataclasses import dataclass, field
from enum import Enum


class ToolKind(Enum):
    """External image tools the pipeline can invoke."""
    CONVERT = "convert"
    RESIZE = "resize"
    SPLIT = "split"
    MERGE = "merge"
    MONTAGE = "montage"
    OPTIMIZE = "optimize"
    WEBP_LOSSLESS = "webp_lossless"
    WEBP_LOSSY = "webp_lossy"


@dataclass
class ImageDimensions:
    """Represents image dimensions with utility properties."""
    width: float
    height: float

    @property
    def max_dimension(self) -> float:
        return max(self.width, self.height)

    def scaled(self, factor: float) -> "ImageDimensions":
        """Dimensions after dividing both sides by factor."""
        return ImageDimensions(self.width / factor, self.height / factor)

    def reaches(self, limit: int) -> bool:
        """True if either side meets or exceeds limit."""
        return self.width >= limit or self.height >= limit


@dataclass
class TileLayout:
    """Grid an oversized image is cut into."""
    columns: int
    rows: int

    @property
    def count(self) -> int:
        return self.columns * self.rows

    @property
    def geometry(self) -> str:
        return f"{self.columns}x{self.rows}"

    @classmethod
    def for_dimensions(cls, dimensions: ImageDimensions, tile_size: int) -> "TileLayout":
        """Smallest grid whose cells are no larger than tile_size."""
        columns = max(1, math.ceil(dimensions.width / tile_size))
        rows = max(1, math.ceil(dimensions.height / tile_size))
        return cls(columns, rows)


@dataclass
class ArtifactPaths:
    """Files produced by a tool or the upscaler."""
    paths: List[Path] = field(default_factory=list)
    layout: Optional[TileLayout] = None

    @property
    def primary(self) -> Optional[Path]:
        return self.paths[0] if self.paths else None


@dataclass
class UpscaleJob:
    """
    One user-requested upscale.

    ``image`` always names the current artifact in the input directory;
    normalization renames it to the canonical extension.
    """
    source_url: str
    model: str
    image: str
    reply_target: Any = None
    downscale: Optional[float] = None
    filter: str = "box"
    montage: bool = False
    split: bool = False
    layout: Optional[TileLayout] = None

    @property
    def stem(self) -> str:
        return Path(self.image).stem

    @property
    def model_name(self) -> str:
        """Model identifier without the weights extension."""
        return Path(self.model).stem


@dataclass
class PipelineResult:
    """Outcome of running the pipeline on one job."""
    job: UpscaleJob
    success: bool
    result_path: Optional[Path] = None
    montage_path: Optional[Path] = None
    error: Optional[Exception] = None
    stages: List[str] = field(default_factory=list)


@dataclass
class ConvertParams:
    source: Path
    target_suffix: str = ".png"


@dataclass
class ResizeParams:
    image: Path
    factor: float
    filter: str = "box"


@dataclass
class SplitParams:
    image: Path
    layout: TileLayout


@dataclass
class MergeParams:
    output_dir: Path
    stem: str
    layout: TileLayout
    suffix: str = "_rlt"


@dataclass
class MontageParams:
    original: Path
    result: Path
    output_dir: Path
    left_label: str = "LR"
    right_label: str = ""


@dataclass
class EncodeParams:
    image: Path


class IReplyTarget(ABC):
    """Where a job's results and errors are sent."""

    @abstractmethod
    async def send_message(self, text: str) -> None:
        """Send a plain text message."""
        pass

    @abstractmethod
    async def send_result(
        self,
        job: UpscaleJob,
        result_path: Optional[Path],
        montage_path: Optional[Path] = None
    ) -> None:
        """Send the upscaled image and the optional montage."""
        pass


class ISourceFetcher(ABC):
    """Interface for downloading source images and models."""

    @abstractmethod
    async def fetch(self, url: str, destination: Path) -> Path:
        """Download url to destination."""
        pass


class IToolAdapter(ABC):
    """Interface for a wrapper around one external image tool."""

    kind: ToolKind

    @abstractmethod
    async def apply(self, params: Any) -> ArtifactPaths:
        """Run the tool and return the files it produced."""
        pass


class IUpscaleExecutor(ABC):
    """Interface for the neural upscaling process."""

    @abstractmethod
    async def run(self, input_dir: Path, output_dir: Path, model: str) -> ArtifactPaths:
        """Upscale every image in input_dir into output_dir."""
        pass
