"""
Bot configuration.
Reads the same config.json layout the bot has always used.
"""
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass, fields
import json
import logging
import os

from .core.errors import ConfigError

logger = logging.getLogger(__name__)

TOKEN_ENV_VAR = "UPSCALEBOT_TOKEN"

# camelCase keys from older config.json files mapped to field names
_LEGACY_KEYS = {
    "pixelLimit": "pixel_limit",
    "esrganPath": "esrgan_path",
    "tileSize": "tile_size",
    "sizeLimit": "size_limit",
}


@dataclass
class BotConfig:
    """Configuration for the bot, the pipeline and the external tools."""
    token: str = ""
    prefix: str = "!"
    esrgan_path: Path = Path("./ESRGAN")
    pixel_limit: int = 1500
    tile_size: Optional[int] = None
    size_limit: int = 8_000_000
    python_executable: str = "python"
    magick_binary: str = "magick"
    optipng_binary: str = "optipng"
    montage_font: Optional[str] = None
    result_suffix: str = "_rlt"
    lossless_quality: int = 50
    lossy_quality: int = 75
    webp_passes: int = 4

    def __post_init__(self):
        self.esrgan_path = Path(self.esrgan_path)
        if self.tile_size is None:
            self.tile_size = max(1, self.pixel_limit // 2)
        if self.pixel_limit <= 0:
            raise ConfigError(f"pixel_limit must be positive, got {self.pixel_limit}")
        if self.size_limit <= 0:
            raise ConfigError(f"size_limit must be positive, got {self.size_limit}")

    @property
    def input_dir(self) -> Path:
        return self.esrgan_path / "LR"

    @property
    def output_dir(self) -> Path:
        return self.esrgan_path / "results"

    @property
    def models_dir(self) -> Path:
        return self.esrgan_path / "models"

    @property
    def upscale_script(self) -> Path:
        return self.esrgan_path / "test.py"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BotConfig":
        """Build config from a mapping, accepting legacy camelCase keys."""
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            name = _LEGACY_KEYS.get(key, key)
            if name not in known:
                logger.warning(f"Ignoring unknown config key: {key}")
                continue
            values[name] = value
        return cls(**values)

    @classmethod
    def from_file(cls, path: Path) -> "BotConfig":
        """
        Load config.json.

        The UPSCALEBOT_TOKEN environment variable overrides the token.
        """
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid config file {path}: {e}")

        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a JSON object")

        config = cls.from_dict(data)

        env_token = os.getenv(TOKEN_ENV_VAR)
        if env_token:
            config.token = env_token

        logger.debug(f"Loaded config from {path}")
        return config
