"""
External image tool adapters for upscalebot.
"""
from .runner import ToolRunner
from .base import ExternalTool
from .converter import FormatConverter
from .resizer import Downscaler
from .tiles import TileSplitter, TileMerger, find_tiles
from .montage import MontageGenerator, MontageConfig, MONTAGE_SUFFIX
from .encoder import PngOptimizer, WebpEncoder, EncoderConfig
from .toolbox import ImageTools

__all__ = [
    'ToolRunner',
    'ExternalTool',
    'FormatConverter',
    'Downscaler',
    'TileSplitter',
    'TileMerger',
    'find_tiles',
    'MontageGenerator',
    'MontageConfig',
    'MONTAGE_SUFFIX',
    'PngOptimizer',
    'WebpEncoder',
    'EncoderConfig',
    'ImageTools',
]
