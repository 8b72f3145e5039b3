"""
In-place downscaling using ImageMagick mogrify.
"""
from pathlib import Path
import logging

from ..core.interfaces import ArtifactPaths, ResizeParams, ToolKind
from ..core.errors import ResizeError
from .base import ExternalTool

logger = logging.getLogger(__name__)


class Downscaler(ExternalTool):
    """Shrinks an image by a factor with a named ImageMagick filter."""

    kind = ToolKind.RESIZE
    error_class = ResizeError

    async def apply(self, params: ResizeParams) -> ArtifactPaths:
        if params.factor <= 0:
            raise ResizeError(f"{ResizeError.default_message} (invalid factor {params.factor})")

        image = Path(params.image)
        cmd = self.build_command(image, params.factor, params.filter)
        await self._execute(cmd)

        logger.info(f"Downscaled {image.name} by {params.factor:g}x using {params.filter} filter")
        return ArtifactPaths([image])

    def build_command(self, image: Path, factor: float, filter_name: str) -> list:
        """Build mogrify command; the filter must precede the resize."""
        percent = 100.0 / factor
        return [
            self.binary, "mogrify",
            "-filter", filter_name,
            "-resize", f"{percent:g}%",
            "-format", "png",
            str(image)
        ]
