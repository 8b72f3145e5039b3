"""
Pytest configuration and fixtures for upscalebot tests.
"""
import pytest
import tempfile
import shutil
from pathlib import Path
from PIL import Image

from upscalebot.workspace import Workspace


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_path = Path(tempfile.mkdtemp(prefix="upscalebot_test_"))
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def workspace(temp_dir) -> Workspace:
    """Workspace with both staging directories created."""
    ws = Workspace(temp_dir / "LR", temp_dir / "results")
    ws.clear()
    return ws


@pytest.fixture
def sample_png(temp_dir) -> Path:
    """Create a small PNG image."""
    image_path = temp_dir / "sample.png"
    Image.new("RGB", (64, 48), color="blue").save(image_path, "PNG")
    return image_path


@pytest.fixture
def sample_jpg(temp_dir) -> Path:
    """Create a small JPEG image."""
    image_path = temp_dir / "sample.jpg"
    Image.new("RGB", (64, 48), color="red").save(image_path, "JPEG", quality=90)
    return image_path


@pytest.fixture
def models_dir(temp_dir) -> Path:
    """Model directory with a few fake weight files."""
    folder = temp_dir / "models"
    folder.mkdir()
    for name in ("4xBox.pth", "4x_Manga.pth", "1x_JPEG_cleanup.pth", "RRDB_ESRGAN_x4.pth"):
        (folder / name).write_bytes(b"weights")
    return folder
