"""
Side-by-side comparison of the original and the upscaled image.
"""
from pathlib import Path
from typing import Optional
from dataclasses import dataclass
from PIL import Image
import logging

from ..core.interfaces import ArtifactPaths, MontageParams, ToolKind
from ..core.errors import MontageError
from .base import ExternalTool
from .runner import ToolRunner

logger = logging.getLogger(__name__)

MONTAGE_SUFFIX = "_montage"


@dataclass
class MontageConfig:
    """Configuration for comparison montages."""
    font: Optional[str] = None
    pointsize: int = 32
    filter: str = "point"
    background: str = "#1e1e1e"
    fill: str = "white"


class MontageGenerator(ExternalTool):
    """
    Builds a labelled 2x1 montage.

    The original is scaled up to the result's size with a nearest
    neighbour filter so both halves are compared pixel for pixel.
    """

    kind = ToolKind.MONTAGE
    error_class = MontageError

    def __init__(
        self,
        runner: Optional[ToolRunner] = None,
        binary: str = "magick",
        config: Optional[MontageConfig] = None
    ):
        super().__init__(runner, binary)
        self.config = config or MontageConfig()

    async def apply(self, params: MontageParams) -> ArtifactPaths:
        original = Path(params.original)
        result = Path(params.result)

        for path in (original, result):
            if not path.exists():
                raise MontageError(f"{MontageError.default_message} ({path.name} is missing)")

        try:
            with Image.open(result) as img:
                width, height = img.size
        except OSError as e:
            raise MontageError(f"{MontageError.default_message} ({e})") from e

        output = Path(params.output_dir) / f"{original.stem}{MONTAGE_SUFFIX}.png"
        cmd = self.build_command(params, width, height, output)
        await self._execute(cmd, partial_outputs=[output])

        logger.info(f"Montage generated: {output.name}")
        return ArtifactPaths([output])

    def build_command(self, params: MontageParams, width: int, height: int, output: Path) -> list:
        cmd = [
            self.binary, "montage",
            "-filter", self.config.filter,
            "-geometry", f"{width}x{height}+0+0",
            "-tile", "2x1",
            "-background", self.config.background,
            "-fill", self.config.fill,
            "-pointsize", str(self.config.pointsize),
        ]
        if self.config.font:
            cmd.extend(["-font", self.config.font])
        cmd.extend([
            "-label", params.left_label, str(params.original),
            "-label", params.right_label, str(params.result),
            str(output)
        ])
        return cmd
