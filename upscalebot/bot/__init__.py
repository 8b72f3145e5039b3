"""
Discord front-end for upscalebot.
"""
from .commands import (
    ParsedCommand,
    parse_command,
    build_upscale_job,
    sanitize_url,
    image_name_from_url,
    format_models_table,
    help_text,
    queued_message,
)
from .reply import DiscordReplyTarget
from .client import UpscaleBot, create_bot

__all__ = [
    'ParsedCommand',
    'parse_command',
    'build_upscale_job',
    'sanitize_url',
    'image_name_from_url',
    'format_models_table',
    'help_text',
    'queued_message',
    'DiscordReplyTarget',
    'UpscaleBot',
    'create_bot',
]
