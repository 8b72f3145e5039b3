"""
Format conversion using ImageMagick.
"""
from pathlib import Path
import logging
import shutil

from ..core.interfaces import ArtifactPaths, ConvertParams, ToolKind
from ..core.errors import ConversionError
from .base import ExternalTool

logger = logging.getLogger(__name__)

TEMP_DIR_NAME = "_TMP"


class FormatConverter(ExternalTool):
    """
    Converts an image to another raster format.

    The conversion is written to a scratch folder next to the source and
    only moved into place once ImageMagick succeeds; the source file is
    then removed.
    """

    kind = ToolKind.CONVERT
    error_class = ConversionError

    async def apply(self, params: ConvertParams) -> ArtifactPaths:
        source = Path(params.source)
        target = source.with_suffix(params.target_suffix)

        if source.suffix.lower() == params.target_suffix.lower():
            logger.debug(f"No conversion needed for {source.name}")
            return ArtifactPaths([source])

        if not source.exists():
            raise ConversionError(f"{ConversionError.default_message} ({source.name} is missing)")

        temp_dir = source.parent / TEMP_DIR_NAME
        temp_dir.mkdir(parents=True, exist_ok=True)
        temp_target = temp_dir / target.name

        try:
            await self._execute(
                [self.binary, str(source), str(temp_target)],
                partial_outputs=[temp_target]
            )
            source.unlink(missing_ok=True)
            temp_target.replace(target)
        finally:
            shutil.rmtree(temp_dir, ignore_errors=True)

        logger.info(f"Converted: {source.name} -> {target.name}")
        return ArtifactPaths([target])
