"""
Test doubles for the external collaborators of the pipeline.
"""
import asyncio
import subprocess
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple
from PIL import Image

from upscalebot.core.interfaces import (
    ArtifactPaths,
    IReplyTarget,
    ISourceFetcher,
    IUpscaleExecutor,
    ToolKind,
    UpscaleJob,
)
from upscalebot.core.errors import (
    ConversionError,
    DeliveryError,
    EncodeError,
    ExecutionError,
    MergeError,
    MontageError,
    NoOutputError,
    ResizeError,
    SplitError,
    TransferError,
)
from upscalebot.pipeline import UpscalePipeline
from upscalebot.tools.tiles import find_tiles

TOOL_ERRORS = {
    ToolKind.CONVERT: ConversionError,
    ToolKind.RESIZE: ResizeError,
    ToolKind.SPLIT: SplitError,
    ToolKind.MERGE: MergeError,
    ToolKind.MONTAGE: MontageError,
    ToolKind.OPTIMIZE: EncodeError,
    ToolKind.WEBP_LOSSLESS: EncodeError,
    ToolKind.WEBP_LOSSY: EncodeError,
}


def save_image(path: Path, size: Tuple[int, int] = (64, 48)) -> Path:
    fmt = "JPEG" if path.suffix.lower() in (".jpg", ".jpeg") else "PNG"
    Image.new("RGB", size, color="green").save(path, fmt)
    return path


class RecordingRunner:
    """ToolRunner stand-in that records commands instead of running them."""

    def __init__(
        self,
        fail: bool = False,
        returncode: int = 1,
        on_run: Optional[Callable[[List[str]], None]] = None
    ):
        self.fail = fail
        self.returncode = returncode
        self.on_run = on_run
        self.commands: List[List[str]] = []
        self.cwds: List[Optional[Path]] = []

    async def run(self, cmd, cwd=None) -> str:
        cmd = [str(part) for part in cmd]
        self.commands.append(cmd)
        self.cwds.append(cwd)
        if self.on_run:
            self.on_run(cmd)
        if self.fail:
            raise subprocess.CalledProcessError(self.returncode, cmd, output="", stderr="simulated failure")
        return ""


class FakeFetcher(ISourceFetcher):
    """Writes a generated image instead of downloading."""

    def __init__(self, size: Tuple[int, int] = (64, 48), fail: bool = False):
        self.size = size
        self.fail = fail
        self.urls: List[str] = []

    async def fetch(self, url: str, destination: Path) -> Path:
        self.urls.append(url)
        if self.fail:
            raise TransferError("Sorry, the image could not be downloaded. (simulated)")
        Path(destination).parent.mkdir(parents=True, exist_ok=True)
        return save_image(Path(destination), self.size)


class FakeTools:
    """
    ImageTools stand-in that records invocations and mimics each tool's
    effect on the workspace.
    """

    def __init__(
        self,
        fail_on: Optional[ToolKind] = None,
        encoded_sizes: Optional[Dict[ToolKind, int]] = None
    ):
        self.fail_on = fail_on
        self.encoded_sizes = encoded_sizes or {}
        self.calls: List[Tuple[ToolKind, object]] = []

    @property
    def kinds(self) -> List[ToolKind]:
        return [kind for kind, _ in self.calls]

    async def invoke(self, kind: ToolKind, params) -> ArtifactPaths:
        self.calls.append((kind, params))
        if kind == self.fail_on:
            error_class = TOOL_ERRORS[kind]
            raise error_class(f"{error_class.default_message} (simulated)")
        return getattr(self, f"_{kind.value}")(params)

    def _convert(self, params) -> ArtifactPaths:
        target = params.source.with_suffix(params.target_suffix)
        with Image.open(params.source) as img:
            img.save(target, "PNG")
        params.source.unlink()
        return ArtifactPaths([target])

    def _resize(self, params) -> ArtifactPaths:
        return ArtifactPaths([params.image])

    def _split(self, params) -> ArtifactPaths:
        tiles = []
        for i in range(params.layout.count):
            tile = params.image.with_name(f"{params.image.stem}_tile_{i:03d}.png")
            tiles.append(save_image(tile, (16, 16)))
        params.image.unlink()
        return ArtifactPaths(tiles, layout=params.layout)

    def _merge(self, params) -> ArtifactPaths:
        tiles = find_tiles(params.output_dir, params.stem, params.suffix)
        merged = save_image(params.output_dir / f"{params.stem}{params.suffix}.png")
        for tile in tiles:
            tile.unlink()
        return ArtifactPaths([merged], layout=params.layout)

    def _montage(self, params) -> ArtifactPaths:
        output = save_image(params.output_dir / f"{params.original.stem}_montage.png")
        return ArtifactPaths([output])

    def _optimize(self, params) -> ArtifactPaths:
        size = self.encoded_sizes.get(ToolKind.OPTIMIZE)
        if size is not None:
            params.image.write_bytes(b"\0" * size)
        return ArtifactPaths([params.image])

    def _encode_webp(self, kind: ToolKind, image: Path) -> ArtifactPaths:
        target = image.with_suffix(".webp")
        target.write_bytes(b"\0" * self.encoded_sizes.get(kind, 100))
        if image != target:
            image.unlink()
        return ArtifactPaths([target])

    def _webp_lossless(self, params) -> ArtifactPaths:
        return self._encode_webp(ToolKind.WEBP_LOSSLESS, params.image)

    def _webp_lossy(self, params) -> ArtifactPaths:
        return self._encode_webp(ToolKind.WEBP_LOSSY, params.image)


class FakeExecutor(IUpscaleExecutor):
    """
    Upscaler stand-in: writes ``<stem>_rlt.png`` for every staged input.

    ``gate`` holds each run until it is set, ``started`` is set as soon as
    a run begins, and ``max_active`` tracks overlapping runs.
    """

    def __init__(
        self,
        produce: bool = True,
        fail: bool = False,
        result_size: Optional[int] = None,
        gate: Optional[asyncio.Event] = None,
        started: Optional[asyncio.Event] = None
    ):
        self.produce = produce
        self.fail = fail
        self.result_size = result_size
        self.gate = gate
        self.started = started
        self.runs: List[Tuple[Path, Path, str]] = []
        self.inputs: List[List[str]] = []
        self.active = 0
        self.max_active = 0

    async def run(self, input_dir: Path, output_dir: Path, model: str) -> ArtifactPaths:
        self.runs.append((input_dir, output_dir, model))
        self.inputs.append(sorted(f.name for f in input_dir.iterdir()))
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.started is not None:
                self.started.set()
            if self.gate is not None:
                await self.gate.wait()
            if self.fail:
                raise ExecutionError("Sorry, there was an error processing your image. (simulated)")
            if not self.produce:
                raise NoOutputError("Sorry, there was an error processing your image. (no output produced)")

            produced = []
            for source in sorted(input_dir.iterdir()):
                target = output_dir / f"{source.stem}_rlt.png"
                if self.result_size is not None:
                    target.write_bytes(b"\0" * self.result_size)
                else:
                    save_image(target, (128, 96))
                produced.append(target)
            return ArtifactPaths(produced)
        finally:
            self.active -= 1


class RecordingReplyTarget(IReplyTarget):
    """Collects replies; can be told to fail delivery."""

    def __init__(self, fail_delivery: bool = False):
        self.fail_delivery = fail_delivery
        self.messages: List[str] = []
        self.results: List[Tuple[str, Optional[Path], Optional[Path]]] = []
        self.delivered_files: List[str] = []

    async def send_message(self, text: str) -> None:
        self.messages.append(text)

    async def send_result(self, job: UpscaleJob, result_path, montage_path=None) -> None:
        if self.fail_delivery:
            raise DeliveryError("simulated delivery failure")
        self.results.append((job.image, result_path, montage_path))
        self.delivered_files.extend(p.name for p in (result_path, montage_path) if p is not None)


def make_job(image: str = "cat.png", reply_target=None, **kwargs) -> UpscaleJob:
    return UpscaleJob(
        source_url=f"https://cdn.example.com/attachments/{image}",
        model=kwargs.pop("model", "4xBox.pth"),
        image=image,
        reply_target=reply_target if reply_target is not None else RecordingReplyTarget(),
        **kwargs
    )


def make_pipeline(workspace, tools=None, executor=None, fetcher=None, **kwargs) -> UpscalePipeline:
    return UpscalePipeline(
        workspace=workspace,
        tools=tools or FakeTools(),
        executor=executor or FakeExecutor(),
        fetcher=fetcher or FakeFetcher(),
        **kwargs
    )
