"""
Core module - Interfaces, data types and errors for upscalebot.
"""
from .interfaces import (
    # Enums
    ToolKind,

    # Data classes
    ImageDimensions,
    TileLayout,
    ArtifactPaths,
    UpscaleJob,
    PipelineResult,

    # Tool parameters
    ConvertParams,
    ResizeParams,
    SplitParams,
    MergeParams,
    MontageParams,
    EncodeParams,

    # Abstract interfaces
    IReplyTarget,
    ISourceFetcher,
    IToolAdapter,
    IUpscaleExecutor,
)
from .errors import (
    UpscaleBotError,
    ConfigError,
    CommandError,
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

__all__ = [
    # Enums
    "ToolKind",

    # Data classes
    "ImageDimensions",
    "TileLayout",
    "ArtifactPaths",
    "UpscaleJob",
    "PipelineResult",

    # Tool parameters
    "ConvertParams",
    "ResizeParams",
    "SplitParams",
    "MergeParams",
    "MontageParams",
    "EncodeParams",

    # Abstract interfaces
    "IReplyTarget",
    "ISourceFetcher",
    "IToolAdapter",
    "IUpscaleExecutor",

    # Errors
    "UpscaleBotError",
    "ConfigError",
    "CommandError",
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
]
