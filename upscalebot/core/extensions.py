"""
Centralized image file extensions.

Used by: bot commands, pipeline normalization, model registry
"""
from pathlib import Path
from urllib.parse import urlparse

IMAGE_EXTENSIONS = {
    '.jpg', '.jpeg', '.png', '.webp', '.gif', '.bmp', '.tiff', '.tif',
}

# Formats the bot accepts from users
UPSCALABLE_EXTENSIONS = {'.png', '.jpg', '.jpeg'}

CANONICAL_EXTENSION = '.png'

MODEL_EXTENSION = '.pth'


def is_image(path) -> bool:
    """Check if path is an image file."""
    return Path(path).suffix.lower() in IMAGE_EXTENSIONS


def is_upscalable(name) -> bool:
    """Check if an image name is a png or jpeg the bot can process."""
    return Path(str(name)).suffix.lower() in UPSCALABLE_EXTENSIONS


def is_canonical(name) -> bool:
    """Check if an image is already in the canonical raster format."""
    return Path(str(name)).suffix.lower() == CANONICAL_EXTENSION


def is_image_url(url: str) -> bool:
    """Check if url is an http(s) link whose path ends in an image extension."""
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return False
    return is_image(parsed.path)


def with_model_extension(name: str) -> str:
    """Append .pth to a model name unless it already carries it."""
    return name if MODEL_EXTENSION in name else name + MODEL_EXTENSION
