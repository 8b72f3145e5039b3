"""
UpscalePipeline - the ordered stages applied to one job.

acquire -> normalize -> measure -> downscale? -> split? -> upscale ->
merge? -> montage? -> re-encode -> locate results

Each stage is awaited before the next one starts. The first failure stops
the run and is returned in the PipelineResult; nothing is retried.
"""
from pathlib import Path
from typing import Optional, Tuple
from PIL import Image
import logging

from .core.interfaces import (
    ImageDimensions,
    TileLayout,
    UpscaleJob,
    PipelineResult,
    ToolKind,
    ConvertParams,
    ResizeParams,
    SplitParams,
    MergeParams,
    MontageParams,
    EncodeParams,
    ISourceFetcher,
    IUpscaleExecutor,
)
from .core.errors import UpscaleBotError, ConversionError, NoOutputError, DeliveryError
from .core.extensions import CANONICAL_EXTENSION, is_canonical
from .tools.toolbox import ImageTools
from .tools.montage import MONTAGE_SUFFIX
from .workspace import Workspace

logger = logging.getLogger(__name__)


class UpscalePipeline:
    """
    Runs every stage for a single job against the shared workspace.

    Example:
        pipeline = UpscalePipeline(workspace, tools, executor, fetcher)
        result = await pipeline.run(job)
        if result.success:
            await pipeline.deliver(result)
    """

    def __init__(
        self,
        workspace: Workspace,
        tools: ImageTools,
        executor: IUpscaleExecutor,
        fetcher: ISourceFetcher,
        pixel_limit: int = 1500,
        tile_size: Optional[int] = None,
        size_limit: int = 8_000_000,
        result_suffix: str = "_rlt"
    ):
        self.workspace = workspace
        self.tools = tools
        self.executor = executor
        self.fetcher = fetcher
        self.pixel_limit = pixel_limit
        self.tile_size = tile_size or max(1, pixel_limit // 2)
        self.size_limit = size_limit
        self.result_suffix = result_suffix

    @classmethod
    def from_config(cls, config, workspace, tools, executor, fetcher) -> "UpscalePipeline":
        return cls(
            workspace=workspace,
            tools=tools,
            executor=executor,
            fetcher=fetcher,
            pixel_limit=config.pixel_limit,
            tile_size=config.tile_size,
            size_limit=config.size_limit,
            result_suffix=config.result_suffix,
        )

    async def run(self, job: UpscaleJob) -> PipelineResult:
        """Run all stages on job; failures are returned, not raised."""
        result = PipelineResult(job=job, success=False)

        try:
            await self._acquire(job)
            self._record(result, "acquire")

            if await self._normalize(job):
                self._record(result, "normalize")

            self._measure(job)
            self._record(result, "measure")

            if job.downscale:
                await self._downscale(job)
                self._record(result, "downscale")

            if job.split:
                await self._split(job)
                self._record(result, "split")

            await self.executor.run(self.workspace.input_dir, self.workspace.output_dir, job.model)
            self._record(result, "upscale")

            if job.split:
                await self._merge(job)
                self._record(result, "merge")

            if job.montage and not job.split:
                await self._montage(job)
                self._record(result, "montage")

            await self._reencode()
            self._record(result, "reencode")

            result.result_path, result.montage_path = self._locate(job)
            self._record(result, "locate")
            result.success = True

        except UpscaleBotError as e:
            last_stage = result.stages[-1] if result.stages else "start"
            logger.error(f"[{job.image}] failed after {last_stage}: {e}")
            result.error = e

        return result

    async def deliver(self, result: PipelineResult) -> bool:
        """
        Send the result (and montage) to the job's reply target.

        Delivery errors are logged and swallowed; returns False when the
        reply could not be sent.
        """
        job = result.job
        montage = result.montage_path if job.montage else None
        try:
            await job.reply_target.send_result(job, result.result_path, montage)
        except DeliveryError as e:
            logger.error(f"[{job.image}] delivery failed: {e}")
            return False

        self._record(result, "deliver")
        return True

    def _record(self, result: PipelineResult, stage: str) -> None:
        result.stages.append(stage)
        logger.info(f"[{result.job.image}] {stage} done")

    async def _acquire(self, job: UpscaleJob) -> None:
        await self.fetcher.fetch(job.source_url, self.workspace.input_path(job.image))

    async def _normalize(self, job: UpscaleJob) -> bool:
        """Convert to the canonical format; returns False if already canonical."""
        if is_canonical(job.image):
            return False

        artifacts = await self.tools.invoke(
            ToolKind.CONVERT,
            ConvertParams(source=self.workspace.input_path(job.image), target_suffix=CANONICAL_EXTENSION)
        )
        job.image = artifacts.primary.name
        return True

    def _measure(self, job: UpscaleJob) -> ImageDimensions:
        path = self.workspace.input_path(job.image)
        try:
            with Image.open(path) as img:
                dimensions = ImageDimensions(*img.size)
        except OSError as e:
            raise ConversionError(f"Sorry, that image cannot be processed. ({e})") from e

        if job.downscale:
            dimensions = dimensions.scaled(job.downscale)

        if dimensions.reaches(self.pixel_limit):
            job.split = True
            job.layout = TileLayout.for_dimensions(dimensions, self.tile_size)
            logger.info(f"[{job.image}] {dimensions.width:g}x{dimensions.height:g} "
                        f"reaches {self.pixel_limit}px, splitting into {job.layout.geometry}")

        return dimensions

    async def _downscale(self, job: UpscaleJob) -> None:
        await self.tools.invoke(
            ToolKind.RESIZE,
            ResizeParams(image=self.workspace.input_path(job.image), factor=job.downscale, filter=job.filter)
        )

    async def _split(self, job: UpscaleJob) -> None:
        await self.tools.invoke(
            ToolKind.SPLIT,
            SplitParams(image=self.workspace.input_path(job.image), layout=job.layout)
        )

    async def _merge(self, job: UpscaleJob) -> None:
        await self.tools.invoke(
            ToolKind.MERGE,
            MergeParams(
                output_dir=self.workspace.output_dir,
                stem=job.stem,
                layout=job.layout,
                suffix=self.result_suffix
            )
        )

    async def _montage(self, job: UpscaleJob) -> None:
        upscaled = self._find_result(job)
        if upscaled is None:
            raise NoOutputError(f"Sorry, there was an error processing your image. (no result for {job.stem})")

        await self.tools.invoke(
            ToolKind.MONTAGE,
            MontageParams(
                original=self.workspace.input_path(job.image),
                result=upscaled,
                output_dir=self.workspace.output_dir,
                left_label="LR",
                right_label=job.model_name
            )
        )

    async def _reencode(self) -> None:
        """
        Shrink every output below the size limit.

        Lossless png optimization first, then lossless webp for whatever
        is still too large, then lossy webp as a last resort.
        """
        for path in self.workspace.output_files():
            await self.tools.invoke(ToolKind.OPTIMIZE, EncodeParams(image=path))

        for kind in (ToolKind.WEBP_LOSSLESS, ToolKind.WEBP_LOSSY):
            for path in self.workspace.output_files():
                if self._too_large(path):
                    logger.info(f"{path.name} is {path.stat().st_size} bytes, re-encoding ({kind.value})")
                    await self.tools.invoke(kind, EncodeParams(image=path))

        for path in self.workspace.output_files():
            if self._too_large(path):
                logger.warning(f"{path.name} is still over {self.size_limit} bytes")

    def _too_large(self, path: Path) -> bool:
        return path.stat().st_size >= self.size_limit

    def _find_result(self, job: UpscaleJob) -> Optional[Path]:
        candidates = [
            f for f in self.workspace.output_files()
            if job.stem in f.stem and MONTAGE_SUFFIX not in f.stem
        ]
        if not candidates:
            return None

        preferred = f"{job.stem}{self.result_suffix}"
        for f in candidates:
            if f.stem == preferred:
                return f
        return candidates[0]

    def _locate(self, job: UpscaleJob) -> Tuple[Path, Optional[Path]]:
        result = self._find_result(job)
        if result is None:
            raise NoOutputError(f"Sorry, there was an error processing your image. (no result for {job.stem})")

        montage = None
        for f in self.workspace.output_files():
            if f.stem == f"{job.stem}{MONTAGE_SUFFIX}":
                montage = f
                break
        return result, montage
