"""
Re-encoders used to keep results under the chat upload limit.
"""
from pathlib import Path
from typing import Optional
from dataclasses import dataclass
import logging

from ..core.interfaces import ArtifactPaths, EncodeParams, ToolKind
from ..core.errors import EncodeError
from .base import ExternalTool
from .runner import ToolRunner

logger = logging.getLogger(__name__)


@dataclass
class EncoderConfig:
    """Configuration for size-bound re-encoding."""
    target_size: int = 8_000_000
    lossless_quality: int = 50
    lossy_quality: int = 75
    passes: int = 4
    optimization_level: int = 2


class PngOptimizer(ExternalTool):
    """Lossless PNG recompression with optipng, in place."""

    kind = ToolKind.OPTIMIZE
    error_class = EncodeError

    def __init__(
        self,
        runner: Optional[ToolRunner] = None,
        binary: str = "optipng",
        config: Optional[EncoderConfig] = None
    ):
        super().__init__(runner, binary)
        self.config = config or EncoderConfig()

    async def apply(self, params: EncodeParams) -> ArtifactPaths:
        image = Path(params.image)
        if image.suffix.lower() != ".png":
            return ArtifactPaths([image])

        before = image.stat().st_size
        await self._execute([
            self.binary, "-quiet",
            f"-o{self.config.optimization_level}",
            str(image)
        ])
        after = image.stat().st_size
        logger.debug(f"Optimized {image.name}: {before} -> {after} bytes")
        return ArtifactPaths([image])


class WebpEncoder(ExternalTool):
    """
    Re-encodes an image to WebP with ImageMagick.

    The encoded file replaces the source: ``x.png`` becomes ``x.webp`` and
    an existing ``x.webp`` is overwritten only after encoding succeeded.
    """

    def __init__(
        self,
        lossless: bool,
        runner: Optional[ToolRunner] = None,
        binary: str = "magick",
        config: Optional[EncoderConfig] = None
    ):
        super().__init__(runner, binary)
        self.lossless = lossless
        self.config = config or EncoderConfig()
        self.kind = ToolKind.WEBP_LOSSLESS if lossless else ToolKind.WEBP_LOSSY
        self.error_class = EncodeError

    async def apply(self, params: EncodeParams) -> ArtifactPaths:
        image = Path(params.image)
        if not image.exists():
            raise EncodeError(f"{EncodeError.default_message} ({image.name} is missing)")

        target = image.with_suffix(".webp")
        scratch = image.with_name(f"{image.stem}.encoding.webp")

        await self._execute(self.build_command(image, scratch), partial_outputs=[scratch])

        scratch.replace(target)
        if image != target:
            image.unlink(missing_ok=True)

        mode = "lossless" if self.lossless else "lossy"
        logger.info(f"Encoded {image.name} to {mode} webp: {target.stat().st_size} bytes")
        return ArtifactPaths([target])

    def build_command(self, image: Path, output: Path) -> list:
        if self.lossless:
            quality = self.config.lossless_quality
            defines = ["-define", "webp:lossless=true"]
        else:
            quality = self.config.lossy_quality
            defines = [
                "-define", "webp:lossless=false",
                "-define", f"webp:pass={self.config.passes}",
            ]
        return [
            self.binary, str(image),
            "-quality", str(quality),
            *defines,
            "-define", f"webp:target-size={self.config.target_size}",
            str(output)
        ]
