"""
ImageTools - single entry point to every external image tool.
Follows Facade Pattern: the pipeline only ever calls ``invoke``.
"""
from typing import Any, Dict, Iterable, Optional
import logging

from ..core.interfaces import ArtifactPaths, IToolAdapter, ToolKind
from .runner import ToolRunner
from .converter import FormatConverter
from .resizer import Downscaler
from .tiles import TileSplitter, TileMerger
from .montage import MontageGenerator, MontageConfig
from .encoder import PngOptimizer, WebpEncoder, EncoderConfig

logger = logging.getLogger(__name__)


class ImageTools:
    """
    Registry of tool adapters keyed by ToolKind.

    Example:
        tools = ImageTools.from_config(config)
        await tools.invoke(ToolKind.CONVERT, ConvertParams(source=path))
    """

    def __init__(self, adapters: Iterable[IToolAdapter]):
        self.adapters: Dict[ToolKind, IToolAdapter] = {}
        for adapter in adapters:
            self.adapters[adapter.kind] = adapter

    @classmethod
    def from_config(cls, config, runner: Optional[ToolRunner] = None) -> "ImageTools":
        """Build the standard ImageMagick/optipng toolset from a BotConfig."""
        runner = runner or ToolRunner()
        magick = config.magick_binary
        encoder_config = EncoderConfig(
            target_size=config.size_limit,
            lossless_quality=config.lossless_quality,
            lossy_quality=config.lossy_quality,
            passes=config.webp_passes,
        )
        return cls([
            FormatConverter(runner, magick),
            Downscaler(runner, magick),
            TileSplitter(runner, magick),
            TileMerger(runner, magick),
            MontageGenerator(runner, magick, MontageConfig(font=config.montage_font)),
            PngOptimizer(runner, config.optipng_binary, encoder_config),
            WebpEncoder(True, runner, magick, encoder_config),
            WebpEncoder(False, runner, magick, encoder_config),
        ])

    async def invoke(self, kind: ToolKind, params: Any) -> ArtifactPaths:
        """Run the adapter registered for kind; raises its ToolError on failure."""
        adapter = self.adapters.get(kind)
        if adapter is None:
            raise KeyError(f"No adapter registered for {kind.value}")
        return await adapter.apply(params)
