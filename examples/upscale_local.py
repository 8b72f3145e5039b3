"""
Example: Running one upscale job without Discord

This example demonstrates how to:
- Wire the workspace, tools, executor and pipeline from a config file
- Queue a job whose results are printed instead of sent to a channel
"""
import asyncio
import logging
import shutil
from pathlib import Path
from typing import Optional

from upscalebot import (
    BotConfig,
    HttpFetcher,
    ImageTools,
    IReplyTarget,
    ModelRegistry,
    UpscaleExecutor,
    UpscaleJob,
    UpscalePipeline,
    UpscaleQueue,
    Workspace,
)
from upscalebot.bot import sanitize_url, image_name_from_url


class ConsoleReplyTarget(IReplyTarget):
    """Prints replies instead of sending them to a chat channel.

    Result files are copied into ``destination`` first, since the queue
    clears the workspace once a job is delivered.
    """

    def __init__(self, destination: Optional[Path] = None):
        self.destination = Path(destination) if destination else Path.cwd()

    async def send_message(self, text: str) -> None:
        print(text)

    async def send_result(self, job: UpscaleJob, result_path: Optional[Path], montage_path: Optional[Path] = None) -> None:
        if result_path:
            print(f"Upscaled using {job.model}: {self._keep(result_path)}")
        if montage_path:
            print(f"Montage: {self._keep(montage_path)}")

    def _keep(self, path: Path) -> Path:
        self.destination.mkdir(parents=True, exist_ok=True)
        return Path(shutil.copy(path, self.destination / path.name))


async def upscale(config: BotConfig, url: str, model: str, montage: bool = False):
    """Queue a single job and wait for it."""
    fetcher = HttpFetcher()
    workspace = Workspace.from_config(config)
    pipeline = UpscalePipeline.from_config(
        config,
        workspace,
        ImageTools.from_config(config),
        UpscaleExecutor.from_config(config),
        fetcher,
    )
    queue = UpscaleQueue(pipeline, workspace)

    registry = ModelRegistry(config.models_dir)
    resolved = registry.resolve(model)
    if resolved is None:
        print(f"Unknown model: {model}")
        return

    url = sanitize_url(url)
    job = UpscaleJob(
        source_url=url,
        model=resolved,
        image=image_name_from_url(url),
        reply_target=ConsoleReplyTarget(),
        montage=montage,
    )

    queue.enqueue(job)
    await queue.join()


if __name__ == "__main__":
    import sys

    if len(sys.argv) < 4:
        print("Usage: python upscale_local.py <config.json> <image url> <model> [-montage]")
        sys.exit(1)

    logging.basicConfig(level=logging.INFO)
    config = BotConfig.from_file(Path(sys.argv[1]))
    asyncio.run(upscale(config, sys.argv[2], sys.argv[3], montage="-montage" in sys.argv))
