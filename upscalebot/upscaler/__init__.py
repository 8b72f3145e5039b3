"""
Neural upscaling: the ESRGAN executor and the model registry.
"""
from .executor import UpscaleExecutor
from .models import ModelRegistry, direct_download_url

__all__ = ['UpscaleExecutor', 'ModelRegistry', 'direct_download_url']
