"""
upscalebot - Chat bot front-end for ESRGAN image upscaling.

Accepts upscale requests, downloads the source image, runs it through a
single serial job queue and sends the result back:
- Format normalization, optional downscale
- Tiling and merging for oversized images
- ESRGAN upscaling of the staged directory
- Optional side-by-side montage
- Size-bound re-encoding for upload limits

Example usage:
    from upscalebot import BotConfig, UpscaleJob
    from upscalebot.bot import create_bot

    config = BotConfig.from_file(Path("config.json"))
    bot = create_bot(config)
    bot.run(config.token)

    # Or drive the queue directly
    queue = UpscaleQueue(pipeline, workspace)
    queue.enqueue(UpscaleJob(source_url=url, model="4x_box.pth", image="cat.jpg", reply_target=target))
    await queue.join()
"""

from .config import BotConfig
from .core.interfaces import (
    ToolKind,
    ImageDimensions,
    TileLayout,
    ArtifactPaths,
    UpscaleJob,
    PipelineResult,
    IReplyTarget,
    ISourceFetcher,
)
from .core.errors import (
    UpscaleBotError,
    TransferError,
    ToolError,
    ConversionError,
    ResizeError,
    SplitError,
    MergeError,
    MontageError,
    EncodeError,
    ExecutionError,
    NoOutputError,
    DeliveryError,
)
from .workspace import Workspace
from .fetcher import HttpFetcher
from .tools import ImageTools, ToolRunner
from .upscaler import UpscaleExecutor, ModelRegistry
from .pipeline import UpscalePipeline
from .upscale_queue import UpscaleQueue, QueueState

__version__ = "1.0.0"

__all__ = [
    # Configuration
    "BotConfig",

    # Core types
    "ToolKind",
    "ImageDimensions",
    "TileLayout",
    "ArtifactPaths",
    "UpscaleJob",
    "PipelineResult",
    "IReplyTarget",
    "ISourceFetcher",

    # Errors
    "UpscaleBotError",
    "TransferError",
    "ToolError",
    "ConversionError",
    "ResizeError",
    "SplitError",
    "MergeError",
    "MontageError",
    "EncodeError",
    "ExecutionError",
    "NoOutputError",
    "DeliveryError",

    # Components
    "Workspace",
    "HttpFetcher",
    "ImageTools",
    "ToolRunner",
    "UpscaleExecutor",
    "ModelRegistry",
    "UpscalePipeline",
    "UpscaleQueue",
    "QueueState",
]
