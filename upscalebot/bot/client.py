"""
Discord client that turns chat commands into queued upscale jobs.
"""
from typing import Awaitable, Callable, Dict
import logging

import discord

from ..config import BotConfig
from ..core.errors import CommandError, TransferError
from ..fetcher import HttpFetcher
from ..pipeline import UpscalePipeline
from ..tools.toolbox import ImageTools
from ..upscale_queue import UpscaleQueue
from ..upscaler.executor import UpscaleExecutor
from ..upscaler.models import ModelRegistry
from ..workspace import Workspace
from .commands import (
    ParsedCommand,
    parse_command,
    build_upscale_job,
    format_models_table,
    help_text,
    queued_message,
)
from .reply import DiscordReplyTarget

logger = logging.getLogger(__name__)


class UpscaleBot(discord.Client):
    """
    Listens for prefixed commands: upscale, models, add, help.

    Messages from bots and messages without the prefix are ignored.
    """

    def __init__(
        self,
        config: BotConfig,
        queue: UpscaleQueue,
        registry: ModelRegistry,
        workspace: Workspace,
        **kwargs
    ):
        intents = kwargs.pop("intents", None) or discord.Intents.default()
        intents.message_content = True
        super().__init__(intents=intents, **kwargs)

        self.config = config
        self.queue = queue
        self.registry = registry
        self.workspace = workspace
        self.handlers: Dict[str, Callable[[discord.Message, ParsedCommand], Awaitable[None]]] = {
            "upscale": self.handle_upscale,
            "models": self.handle_models,
            "add": self.handle_add,
            "help": self.handle_help,
        }

    async def on_ready(self):
        logger.info(f"Logged in as {self.user}!")
        # on_ready also fires on reconnect; never wipe a running job
        if self.queue.is_idle:
            self.workspace.clear()

    async def on_message(self, message: discord.Message):
        if message.author.bot:
            return

        command = parse_command(message.content, self.config.prefix)
        if command is None:
            return

        handler = self.handlers.get(command.name)
        if handler is None:
            return

        try:
            await handler(message, command)
        except CommandError as e:
            await message.channel.send(e.user_message)

    async def handle_upscale(self, message: discord.Message, command: ParsedCommand) -> None:
        attachment_url = message.attachments[0].url if message.attachments else None
        job = build_upscale_job(
            command.args,
            self.registry,
            attachment_url=attachment_url,
            reply_target=DiscordReplyTarget(message),
            requester=message.author.mention
        )

        position = self.queue.enqueue(job, channel=message.channel)
        await message.channel.send(queued_message(job, position))

    async def handle_models(self, message: discord.Message, command: ParsedCommand) -> None:
        await message.channel.send(format_models_table(self.registry.names()))

    async def handle_add(self, message: discord.Message, command: ParsedCommand) -> None:
        if len(command.args) < 2:
            raise CommandError(f"Usage: {self.config.prefix}add [model url] [nickname]")

        url, nickname = command.args[0], command.args[1]
        try:
            name = await self.registry.add(url, nickname)
        except ValueError as e:
            raise CommandError(str(e))
        except TransferError as e:
            raise CommandError(f"Sorry, that model could not be downloaded. ({e})")

        await message.channel.send(f"Added model {name}.")

    async def handle_help(self, message: discord.Message, command: ParsedCommand) -> None:
        await message.channel.send(help_text(self.config.prefix))


def create_bot(config: BotConfig) -> UpscaleBot:
    """Wire the workspace, tools, pipeline and queue into a bot."""
    fetcher = HttpFetcher()
    workspace = Workspace.from_config(config)
    tools = ImageTools.from_config(config)
    executor = UpscaleExecutor.from_config(config)
    pipeline = UpscalePipeline.from_config(config, workspace, tools, executor, fetcher)
    queue = UpscaleQueue(pipeline, workspace)
    registry = ModelRegistry(config.models_dir, fetcher)
    return UpscaleBot(config, queue, registry, workspace)
