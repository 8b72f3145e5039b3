"""
Discord reply target: sends results back to the requesting message.
"""
from pathlib import Path
from typing import Optional
import logging

import discord

from ..core.interfaces import IReplyTarget, UpscaleJob
from ..core.errors import DeliveryError

logger = logging.getLogger(__name__)


class DiscordReplyTarget(IReplyTarget):
    """Replies to the message that requested the job."""

    def __init__(self, message: discord.Message):
        self.message = message

    async def send_message(self, text: str) -> None:
        try:
            await self.message.channel.send(text)
        except (discord.HTTPException, OSError) as e:
            raise DeliveryError(f"Could not send message: {e}") from e

    async def send_result(
        self,
        job: UpscaleJob,
        result_path: Optional[Path],
        montage_path: Optional[Path] = None
    ) -> None:
        try:
            files = [discord.File(str(result_path))] if result_path else []
            await self.message.reply(f"Upscaled using {job.model}", files=files)

            if montage_path:
                await self.message.channel.send(
                    f"{self.message.author.mention}, here is the montage you requested",
                    file=discord.File(str(montage_path))
                )
        except (discord.HTTPException, OSError) as e:
            raise DeliveryError(f"Could not send result for {job.image}: {e}") from e

        logger.info(f"Delivered {job.image} to {self.message.author}")
