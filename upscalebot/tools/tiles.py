"""
Tiling for images too large to upscale in one piece.

The splitter cuts an image into an even grid of tiles named
``<stem>_tile_NNN.png``; after upscaling, the merger reassembles the
``<stem>_tile_NNN<suffix>.png`` results in the same row-major order.
"""
from pathlib import Path
from typing import List
import logging

from natsort import natsorted

from ..core.interfaces import ArtifactPaths, SplitParams, MergeParams, ToolKind
from ..core.errors import SplitError, MergeError
from .base import ExternalTool

logger = logging.getLogger(__name__)

TILE_MARKER = "_tile_"


def tile_prefix(stem: str) -> str:
    return f"{stem}{TILE_MARKER}"


def find_tiles(folder: Path, stem: str, suffix: str = "") -> List[Path]:
    """Tiles of stem in folder, in row-major order."""
    prefix = tile_prefix(stem)
    tiles = [
        f for f in Path(folder).iterdir()
        if f.is_file() and f.name.startswith(prefix) and f.stem.endswith(suffix)
    ]
    return natsorted(tiles)


class TileSplitter(ExternalTool):
    """Cuts an image into an even grid and removes the whole image."""

    kind = ToolKind.SPLIT
    error_class = SplitError

    async def apply(self, params: SplitParams) -> ArtifactPaths:
        image = Path(params.image)
        layout = params.layout

        if not image.exists():
            raise SplitError(f"{SplitError.default_message} ({image.name} is missing)")

        pattern = image.parent / f"{tile_prefix(image.stem)}%03d.png"
        cmd = [
            self.binary, str(image),
            "-crop", f"{layout.geometry}@",
            "+repage", "+adjoin",
            str(pattern)
        ]

        try:
            await self._execute(cmd)
        except SplitError:
            self._remove(find_tiles(image.parent, image.stem))
            raise

        tiles = find_tiles(image.parent, image.stem)
        if len(tiles) != layout.count:
            self._remove(tiles)
            raise SplitError(
                f"{SplitError.default_message} (expected {layout.count} tiles, got {len(tiles)})"
            )

        image.unlink(missing_ok=True)
        logger.info(f"Split {image.name} into {layout.geometry} tiles")
        return ArtifactPaths(tiles, layout=layout)


class TileMerger(ExternalTool):
    """Reassembles upscaled tiles into one image and removes the tiles."""

    kind = ToolKind.MERGE
    error_class = MergeError

    async def apply(self, params: MergeParams) -> ArtifactPaths:
        output_dir = Path(params.output_dir)
        layout = params.layout
        tiles = find_tiles(output_dir, params.stem, params.suffix)

        if len(tiles) != layout.count:
            raise MergeError(
                f"{MergeError.default_message} (expected {layout.count} tiles, found {len(tiles)})"
            )

        merged = output_dir / f"{params.stem}{params.suffix}.png"
        cmd = [
            self.binary, "montage",
            *[str(t) for t in tiles],
            "-tile", layout.geometry,
            "-geometry", "+0+0",
            "-background", "none",
            str(merged)
        ]
        await self._execute(cmd, partial_outputs=[merged])

        self._remove(tiles)
        logger.info(f"Merged {len(tiles)} tiles into {merged.name}")
        return ArtifactPaths([merged], layout=layout)
