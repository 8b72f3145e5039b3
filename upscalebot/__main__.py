"""
Run the bot: ``python -m upscalebot config.json``
"""
import argparse
import logging
import sys
from pathlib import Path

from .config import BotConfig
from .core.errors import ConfigError

logger = logging.getLogger("upscalebot")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Discord bot that upscales images with ESRGAN")
    parser.add_argument("config", nargs="?", default="config.json", help="Path to config.json")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, ...)")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    try:
        config = BotConfig.from_file(Path(args.config))
    except ConfigError as e:
        logger.error(str(e))
        return 1

    if not config.token:
        logger.error("No bot token configured (set token in config or UPSCALEBOT_TOKEN)")
        return 1

    from .bot.client import create_bot

    bot = create_bot(config)
    bot.run(config.token, log_handler=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
