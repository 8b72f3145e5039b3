"""
Exception taxonomy for upscalebot.

Every pipeline stage raises one of these; the queue treats all of them as
fatal for the whole line of jobs.
"""
from typing import Optional


class UpscaleBotError(Exception):
    """Base exception for upscalebot."""

    default_message = "Sorry, there was an error processing your image."

    def __init__(self, message: Optional[str] = None, stage: Optional[str] = None):
        self.message = message or self.default_message
        self.stage = stage
        super().__init__(self.message)

    @property
    def user_message(self) -> str:
        """Text safe to send back to the chat channel."""
        return self.message


class ConfigError(UpscaleBotError):
    """Raised when the bot configuration is missing or invalid."""


class CommandError(UpscaleBotError):
    """Raised when a chat command cannot be turned into a job."""


class TransferError(UpscaleBotError):
    """Raised when the source image (or a model file) cannot be downloaded."""

    default_message = "Sorry, the image could not be downloaded."


class ToolError(UpscaleBotError):
    """Base class for failures of external image tools."""


class ConversionError(ToolError):
    default_message = "Sorry, the image could not be converted."


class ResizeError(ToolError):
    default_message = "Sorry, the image could not be downscaled."


class SplitError(ToolError):
    default_message = "Sorry, the image could not be split into tiles."


class MergeError(ToolError):
    default_message = "Sorry, the upscaled tiles could not be merged."


class MontageError(ToolError):
    default_message = "There was an error making your montage."


class EncodeError(ToolError):
    default_message = "Sorry, the result could not be compressed."


class ExecutionError(UpscaleBotError):
    """Raised when the upscaling process fails."""


class NoOutputError(ExecutionError):
    """Raised when the upscaling process exits cleanly but writes nothing."""


class DeliveryError(UpscaleBotError):
    """Raised when a reply cannot be sent to the chat channel."""

    default_message = "Sorry, the result could not be sent."
